from datetime import datetime
from typing import List

from crm.core.utils import parse_iso
from crm.db.repositories.base_repository import BaseRepository
from crm.domains.imports.entities import ImportLog


class ImportLogRepository(BaseRepository[ImportLog]):
    """Репозиторий истории импорта"""

    collection = "importLogs"

    async def list_recent_first(self) -> List[ImportLog]:
        logs = await self.list()
        return sorted(
            logs,
            key=lambda log: parse_iso(log.created_at) or datetime.min,
            reverse=True
        )

    async def clear(self) -> int:
        """Удаление всей истории"""
        async with self.db.transaction() as data:
            count = len(data[self.collection])
            data[self.collection] = []
        return count

    def _to_domain(self, record: dict) -> ImportLog:
        return ImportLog(
            id=record.get("id"),
            type=record.get("type"),
            imported_by=record.get("importedBy") or "",
            imported_by_id=record.get("importedById"),
            assigned_user_id=record.get("assignedUserId"),
            assigned_user_name=record.get("assignedUserName"),
            file_name=record.get("fileName"),
            file_size=record.get("fileSize"),
            file_type=record.get("fileType"),
            total_rows=record.get("totalRows") or 0,
            errors=list(record.get("errors") or []),
            successful=list(record.get("successful") or []),
            created_at=record.get("createdAt")
        )

    def to_record(self, log: ImportLog) -> dict:
        return {
            "id": log.id,
            "type": log.type,
            "importedBy": log.imported_by,
            "importedById": log.imported_by_id,
            "assignedUserId": log.assigned_user_id,
            "assignedUserName": log.assigned_user_name,
            "fileName": log.file_name,
            "fileSize": log.file_size,
            "fileType": log.file_type,
            "totalRows": log.total_rows,
            "successfulCount": log.successful_count,
            "failedCount": log.failed_count,
            "status": log.status,
            "errors": log.errors,
            "successful": log.successful,
            "createdAt": log.created_at
        }
