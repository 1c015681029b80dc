import logging
from typing import Any, List, Optional

from crm.core.exceptions import AccessDeniedError
from crm.db.datastore import JsonDocumentStore
from crm.db.repositories.client_repository import ClientRepository
from crm.db.repositories.import_log_repository import ImportLogRepository
from crm.db.repositories.product_repository import ProductRepository
from crm.db.repositories.user_repository import UserRepository
from crm.domains.clients.entities import Client
from crm.domains.identity.entities import User
from crm.domains.imports.entities import ImportLog, ImportType
from crm.domains.products.entities import Product

logger = logging.getLogger(__name__)


class ImportService:
    """Пакетный импорт товаров и клиентов с журналом импорта"""

    def __init__(self, db: JsonDocumentStore):
        self.db = db
        self.user_repository = UserRepository(db)
        self.log_repository = ImportLogRepository(db)
        self._targets = {
            ImportType.PRODUCTS: (ProductRepository(db), Product.build, lambda p: p.display_name),
            ImportType.CLIENTS: (ClientRepository(db), Client.build, lambda c: c.name),
        }

    async def _resolve_owner(self, importer: User, assign_to_user_id: Optional[str]) -> Optional[User]:
        """Пользователь, которому назначаются строки; None - сам импортирующий"""
        if not assign_to_user_id or assign_to_user_id == importer.id:
            return None
        if not importer.is_admin:
            raise AccessDeniedError("Only admins can import records for other users")
        assigned = await self.user_repository.get_by_id(assign_to_user_id)
        if not assigned:
            raise ValueError("User not found")
        return assigned

    async def bulk_import(
        self,
        import_type: ImportType,
        rows: List[Any],
        importer: User,
        assign_to_user_id: Optional[str] = None,
        file_name: Optional[str] = None,
        file_size: Optional[int] = None,
        file_type: Optional[str] = None
    ) -> ImportLog:
        """Импорт строк: корректные записи и журнал пишутся одной транзакцией"""
        if not rows:
            raise ValueError(f"No {import_type.value} to import")

        assigned = await self._resolve_owner(importer, assign_to_user_id)
        owner_id = assigned.id if assigned else importer.id
        repository, build, name_of = self._targets[import_type]

        log = ImportLog.start(
            import_type,
            importer,
            total_rows=len(rows),
            assigned_user=assigned,
            file_name=file_name,
            file_size=file_size,
            file_type=file_type
        )

        records = []
        for row_number, row in enumerate(rows, start=1):
            try:
                entity = build(row, owner_id)
            except ValueError as e:
                log.add_error(row_number, str(e), row)
                continue
            records.append(repository.to_record(entity))
            log.add_success(row_number, entity.id, name_of(entity))

        async with self.db.transaction() as data:
            data[repository.collection].extend(records)
            data[self.log_repository.collection].append(self.log_repository.to_record(log))

        logger.info(
            f"Import {log.id}: {log.successful_count}/{log.total_rows} {import_type.value} "
            f"imported by user {importer.id} for user {owner_id} ({log.status})"
        )
        return log

    async def list_logs(self) -> List[ImportLog]:
        """История импорта, новые сначала"""
        return await self.log_repository.list_recent_first()

    async def get_log(self, log_id: str) -> Optional[ImportLog]:
        return await self.log_repository.get_by_id(log_id)

    async def delete_log(self, log_id: str) -> bool:
        return await self.log_repository.delete(log_id)

    async def clear_logs(self) -> int:
        count = await self.log_repository.clear()
        logger.info(f"Import history cleared ({count} logs)")
        return count
