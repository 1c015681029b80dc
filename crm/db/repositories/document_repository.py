from typing import List

from crm.db.repositories.base_repository import BaseRepository
from crm.domains.documents.entities import Document


class DocumentRepository(BaseRepository[Document]):
    """Репозиторий для работы с записями документов"""

    collection = "documents"

    async def get_by_client(self, client_id: str) -> List[Document]:
        """Документы, привязанные к клиенту"""
        return [doc for doc in await self.list() if doc.client_id == client_id]

    async def get_personal(self) -> List[Document]:
        """Документы без клиента"""
        return [doc for doc in await self.list() if doc.is_personal]

    def _to_domain(self, record: dict) -> Document:
        """Преобразование записи хранилища в доменную сущность"""
        return Document(
            id=record.get("id"),
            user_id=record.get("userId"),
            client_id=record.get("clientId"),
            original_name=record.get("originalName") or "",
            file_name=record.get("fileName") or "",
            mime_type=record.get("mimeType") or "application/octet-stream",
            size=record.get("size") or 0,
            uploaded_at=record.get("uploadedAt")
        )

    def to_record(self, document: Document) -> dict:
        """Преобразование доменной сущности в запись хранилища"""
        return {
            "id": document.id,
            "userId": document.user_id,
            "clientId": document.client_id,
            "originalName": document.original_name,
            "fileName": document.file_name,
            "mimeType": document.mime_type,
            "size": document.size,
            "uploadedAt": document.uploaded_at
        }
