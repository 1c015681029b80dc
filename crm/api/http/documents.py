from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import FileResponse

from crm.core.auth import get_scope
from crm.core.config import settings
from crm.core.db import get_db, get_document_files
from crm.core.schemas import MessageResponse
from crm.db.datastore import JsonDocumentStore
from crm.db.files import FileStorage, read_limited
from crm.domains.documents.schemas import DocumentResponse
from crm.domains.documents.services import DocumentService
from crm.domains.ownership.entities import OwnershipScope

router = APIRouter(prefix="/documents", tags=["documents"])


async def _upload(
    file: UploadFile,
    scope: OwnershipScope,
    db: JsonDocumentStore,
    files: FileStorage,
    client_id: Optional[str] = None
) -> DocumentResponse:
    try:
        content = await read_limited(file, settings.max_document_size)
        document = await DocumentService(db, files).upload_document(
            content, file.filename, file.content_type, scope, client_id=client_id
        )
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not document:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    return DocumentResponse.from_entity(document)


@router.get("/", response_model=List[DocumentResponse])
async def get_documents(
    scope: OwnershipScope = Depends(get_scope),
    db: JsonDocumentStore = Depends(get_db),
    files: FileStorage = Depends(get_document_files)
):
    """Все документы, видимые пользователю"""
    documents = await DocumentService(db, files).list(scope)
    return [DocumentResponse.from_entity(document) for document in documents]


@router.get("/personal", response_model=List[DocumentResponse])
async def get_personal_documents(
    scope: OwnershipScope = Depends(get_scope),
    db: JsonDocumentStore = Depends(get_db),
    files: FileStorage = Depends(get_document_files)
):
    """Личные документы (без клиента)"""
    documents = await DocumentService(db, files).get_personal_documents(scope)
    return [DocumentResponse.from_entity(document) for document in documents]


@router.get("/client/{client_id}", response_model=List[DocumentResponse])
async def get_client_documents(
    client_id: str,
    scope: OwnershipScope = Depends(get_scope),
    db: JsonDocumentStore = Depends(get_db),
    files: FileStorage = Depends(get_document_files)
):
    """Документы клиента"""
    try:
        documents = await DocumentService(db, files).get_client_documents(client_id, scope)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    if documents is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    return [DocumentResponse.from_entity(document) for document in documents]


@router.post("/client/{client_id}", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def upload_client_document(
    client_id: str,
    file: UploadFile = File(...),
    scope: OwnershipScope = Depends(get_scope),
    db: JsonDocumentStore = Depends(get_db),
    files: FileStorage = Depends(get_document_files)
):
    """Загрузка документа клиента"""
    return await _upload(file, scope, db, files, client_id=client_id)


@router.post("/personal", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def upload_personal_document(
    file: UploadFile = File(...),
    scope: OwnershipScope = Depends(get_scope),
    db: JsonDocumentStore = Depends(get_db),
    files: FileStorage = Depends(get_document_files)
):
    """Загрузка личного документа"""
    return await _upload(file, scope, db, files)


@router.get("/download/{document_id}")
async def download_document(
    document_id: str,
    scope: OwnershipScope = Depends(get_scope),
    db: JsonDocumentStore = Depends(get_db),
    files: FileStorage = Depends(get_document_files)
):
    """Скачивание документа"""
    try:
        found = await DocumentService(db, files).get_download(document_id, scope)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    if not found:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")

    document, path = found
    if not path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return FileResponse(path, media_type=document.mime_type, filename=document.original_name)


@router.delete("/{document_id}", response_model=MessageResponse)
async def delete_document(
    document_id: str,
    scope: OwnershipScope = Depends(get_scope),
    db: JsonDocumentStore = Depends(get_db),
    files: FileStorage = Depends(get_document_files)
):
    """Удаление документа"""
    try:
        deleted = await DocumentService(db, files).delete(document_id, scope)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return {"message": "Document deleted successfully"}
