from typing import Any, List, Optional

from crm.core.schemas import CamelModel
from crm.domains.imports.entities import ImportLog


class ImportRowError(CamelModel):
    row: int
    error: str
    data: Any = None


class ImportRowSuccess(CamelModel):
    row: int
    id: str
    name: str


class ImportLogResponse(CamelModel):
    """Схема для ответа с журналом импорта"""
    id: str
    type: str
    imported_by: str
    imported_by_id: Optional[str] = None
    assigned_user_id: Optional[str] = None
    assigned_user_name: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    total_rows: int
    successful_count: int
    failed_count: int
    status: str
    errors: List[ImportRowError] = []
    successful: List[ImportRowSuccess] = []
    created_at: Optional[str] = None

    @classmethod
    def from_entity(cls, log: ImportLog) -> "ImportLogResponse":
        return cls(
            id=log.id,
            type=log.type,
            imported_by=log.imported_by,
            imported_by_id=log.imported_by_id,
            assigned_user_id=log.assigned_user_id,
            assigned_user_name=log.assigned_user_name,
            file_name=log.file_name,
            file_size=log.file_size,
            file_type=log.file_type,
            total_rows=log.total_rows,
            successful_count=log.successful_count,
            failed_count=log.failed_count,
            status=log.status,
            errors=[ImportRowError(**e) for e in log.errors],
            successful=[ImportRowSuccess(**s) for s in log.successful],
            created_at=log.created_at
        )


class ImportHistoryClearResponse(CamelModel):
    success: bool
    deleted: int
