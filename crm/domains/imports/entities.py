import enum
from typing import Any, Dict, List, Optional

from crm.core.utils import new_id, now_iso


class ImportType(str, enum.Enum):
    PRODUCTS = "products"
    CLIENTS = "clients"


class ImportStatus(str, enum.Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    ERROR = "error"


class ImportLog:
    """Журнал одного пакетного импорта"""

    def __init__(
        self,
        id: str,
        type: str,
        imported_by: str,
        imported_by_id: str,
        assigned_user_id: Optional[str] = None,
        assigned_user_name: Optional[str] = None,
        file_name: Optional[str] = None,
        file_size: Optional[int] = None,
        file_type: Optional[str] = None,
        total_rows: int = 0,
        errors: Optional[List[Dict[str, Any]]] = None,
        successful: Optional[List[Dict[str, Any]]] = None,
        created_at: Optional[str] = None
    ):
        self.id = id
        self.type = type
        self.imported_by = imported_by
        self.imported_by_id = imported_by_id
        self.assigned_user_id = assigned_user_id
        self.assigned_user_name = assigned_user_name
        self.file_name = file_name
        self.file_size = file_size
        self.file_type = file_type
        self.total_rows = total_rows
        self.errors = errors or []
        self.successful = successful or []
        self.created_at = created_at or now_iso()

    @property
    def successful_count(self) -> int:
        return len(self.successful)

    @property
    def failed_count(self) -> int:
        return len(self.errors)

    @property
    def status(self) -> str:
        """success - без ошибок, error - ни одной успешной строки, иначе partial"""
        if not self.errors:
            return ImportStatus.SUCCESS.value
        if not self.successful:
            return ImportStatus.ERROR.value
        return ImportStatus.PARTIAL.value

    def add_success(self, row: int, record_id: str, name: str) -> None:
        self.successful.append({"row": row, "id": record_id, "name": name})

    def add_error(self, row: int, error: str, data: Any) -> None:
        self.errors.append({"row": row, "error": error, "data": data})

    @classmethod
    def start(
        cls,
        import_type: ImportType,
        importer,
        total_rows: int,
        assigned_user=None,
        file_name: Optional[str] = None,
        file_size: Optional[int] = None,
        file_type: Optional[str] = None
    ) -> "ImportLog":
        return cls(
            id=new_id(),
            type=import_type.value,
            imported_by=importer.full_name or importer.email,
            imported_by_id=importer.id,
            assigned_user_id=assigned_user.id if assigned_user else None,
            assigned_user_name=(assigned_user.full_name or assigned_user.email) if assigned_user else None,
            file_name=file_name,
            file_size=file_size,
            file_type=file_type,
            total_rows=total_rows
        )

    def __repr__(self) -> str:
        return f"ImportLog(id={self.id}, type={self.type}, status={self.status})"
