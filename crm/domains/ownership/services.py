import logging
from typing import Any, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from crm.core.exceptions import AccessDeniedError
from crm.db.datastore import JsonDocumentStore
from crm.db.repositories.base_repository import BaseRepository
from crm.db.repositories.user_repository import UserRepository
from crm.domains.ownership.entities import OwnershipScope

logger = logging.getLogger(__name__)

E = TypeVar("E")


class OwnedResourceService(Generic[E]):
    """Общий сервис для коллекций с владельцем (userId).

    Список фильтруется по владельцу, отсутствующая запись дает None (404),
    чужая - AccessDeniedError (403). Проверка владельца выполняется внутри
    той же транзакции, что и изменение.
    """

    repository_class: Type[BaseRepository] = BaseRepository
    resource_name: str = "Record"

    def __init__(self, db: JsonDocumentStore):
        self.db = db
        self.repository = self.repository_class(db)
        self.user_repository = UserRepository(db)

    async def list(self, scope: OwnershipScope) -> List[E]:
        """Записи, видимые пользователю"""
        return scope.filter(await self.repository.list())

    async def get(self, record_id: str, scope: OwnershipScope) -> Optional[E]:
        """Получение записи с проверкой владельца"""
        return scope.check(await self.repository.get_by_id(record_id))

    async def update(
        self,
        record_id: str,
        changes: Dict[str, Any],
        scope: OwnershipScope
    ) -> Optional[E]:
        """Обновление записи с проверкой владельца"""
        return await self.repository.update(
            record_id,
            lambda entity: self._apply_changes(entity, changes, scope),
            check=scope.check
        )

    async def delete(self, record_id: str, scope: OwnershipScope) -> bool:
        """Удаление записи с проверкой владельца"""
        deleted = await self.repository.delete(record_id, check=scope.check)
        if deleted:
            logger.info(f"{self.resource_name} {record_id} deleted by user {scope.user_id}")
        return deleted

    async def bulk_delete(self, record_ids: Iterable[str], scope: OwnershipScope) -> Dict[str, Any]:
        """Удаление нескольких записей одной транзакцией.

        Если хотя бы одна существующая запись недоступна, ничего не удаляется.
        """
        def _check(entity):
            if not scope.can_access(entity.user_id):
                raise AccessDeniedError(
                    f"Access denied to {self.resource_name.lower()} {entity.id}"
                )

        deleted, not_found = await self.repository.delete_many(record_ids, check=_check)
        logger.info(
            f"Bulk delete of {len(deleted)} {self.resource_name.lower()} records by user {scope.user_id}"
        )
        return {"success": True, "deleted": len(deleted), "deletedIds": deleted, "notFound": not_found}

    async def assign_owner(self, record_id: str, user_id: str) -> Optional[E]:
        """Назначение записи пользователю (только администратор)"""
        if not await self.user_repository.get_by_id(user_id):
            raise ValueError("User not found")
        return await self.repository.assign_owner(record_id, user_id)

    def _apply_changes(self, entity: E, changes: Dict[str, Any], scope: OwnershipScope) -> None:
        entity.apply_changes(changes)
