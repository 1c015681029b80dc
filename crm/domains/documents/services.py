import logging
from pathlib import Path
from typing import List, Optional, Tuple

from crm.core.config import settings
from crm.db.datastore import JsonDocumentStore
from crm.db.files import FileStorage, make_stored_name
from crm.db.repositories.client_repository import ClientRepository
from crm.db.repositories.document_repository import DocumentRepository
from crm.domains.documents.entities import Document
from crm.domains.ownership.entities import OwnershipScope
from crm.domains.ownership.services import OwnedResourceService

logger = logging.getLogger(__name__)


class DocumentService(OwnedResourceService[Document]):
    """Сервис для работы с документами клиентов и личными документами"""

    repository_class = DocumentRepository
    resource_name = "Document"

    def __init__(self, db: JsonDocumentStore, files: FileStorage):
        super().__init__(db)
        self.files = files
        self.client_repository = ClientRepository(db)

    async def get_client_documents(self, client_id: str, scope: OwnershipScope) -> Optional[List[Document]]:
        """Документы клиента; None если клиента нет"""
        client = scope.check(await self.client_repository.get_by_id(client_id))
        if not client:
            return None
        return scope.filter(await self.repository.get_by_client(client_id))

    async def get_personal_documents(self, scope: OwnershipScope) -> List[Document]:
        """Документы без клиента"""
        return scope.filter(await self.repository.get_personal())

    async def upload_document(
        self,
        content: bytes,
        original_name: str,
        mime_type: Optional[str],
        scope: OwnershipScope,
        client_id: Optional[str] = None
    ) -> Optional[Document]:
        """Сохранение файла и записи о нем; None если клиента нет"""
        if len(content) > settings.max_document_size:
            raise ValueError("File is too large")

        owner_id = scope.user_id
        if client_id:
            client = scope.check(await self.client_repository.get_by_id(client_id))
            if not client:
                return None
            # Документ клиента принадлежит владельцу клиента
            owner_id = client.user_id or scope.user_id

        file_name = make_stored_name(original_name)
        size = await self.files.save(content, file_name)

        document = Document.create_document(
            user_id=owner_id,
            original_name=original_name,
            file_name=file_name,
            mime_type=mime_type,
            size=size,
            client_id=client_id
        )
        try:
            await self.repository.create(document)
        except Exception:
            await self.files.remove(file_name)
            raise

        logger.info(f"Document {document.id} ({original_name}, {size} bytes) uploaded by user {scope.user_id}")
        return document

    async def get_download(self, document_id: str, scope: OwnershipScope) -> Optional[Tuple[Document, Path]]:
        """Документ и путь к файлу для скачивания"""
        document = await self.get(document_id, scope)
        if not document:
            return None
        return document, self.files.path_for(document.file_name)

    async def delete(self, document_id: str, scope: OwnershipScope) -> bool:
        """Удаление записи, затем файла (файл - без гарантий)"""
        removed: List[Document] = []

        def _check(document):
            scope.check(document)
            removed.append(document)

        deleted = await self.repository.delete(document_id, check=_check)
        if deleted:
            await self.files.remove(removed[0].file_name)
            logger.info(f"Document {document_id} deleted by user {scope.user_id}")
        return deleted
