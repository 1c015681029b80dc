from typing import Optional

from crm.core.schemas import CamelModel
from crm.domains.documents.entities import Document


class DocumentResponse(CamelModel):
    """Схема для ответа с данными документа"""
    id: str
    user_id: Optional[str] = None
    client_id: Optional[str] = None
    original_name: str
    file_name: str
    mime_type: str
    size: int
    uploaded_at: str

    @classmethod
    def from_entity(cls, document: Document) -> "DocumentResponse":
        return cls(
            id=document.id,
            user_id=document.user_id,
            client_id=document.client_id,
            original_name=document.original_name,
            file_name=document.file_name,
            mime_type=document.mime_type,
            size=document.size,
            uploaded_at=document.uploaded_at
        )
