from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Базовая схема: поля snake_case, в JSON - camelCase"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(BaseModel):
    message: str


class BulkImportRequest(CamelModel):
    """Пакетный импорт уже сопоставленных строк"""
    assign_to_user_id: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    file_type: Optional[str] = None


class BulkImportResponse(CamelModel):
    success: bool
    count: int
    failed_count: int
    status: str
    import_log_id: str
    errors: List[Any] = []


class BulkDeleteRequest(CamelModel):
    ids: List[str] = Field(..., min_length=1)


class BulkDeleteResponse(CamelModel):
    success: bool
    deleted: int
    deleted_ids: List[str]
    not_found: List[str]


class AssignRequest(CamelModel):
    user_id: Optional[str] = None
