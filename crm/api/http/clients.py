from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from crm.core.auth import get_current_user, get_scope
from crm.core.db import get_db
from crm.core.schemas import (
    BulkDeleteRequest, BulkDeleteResponse, BulkImportResponse, MessageResponse
)
from crm.db.datastore import JsonDocumentStore
from crm.domains.clients.schemas import (
    ClientBulkImportRequest, ClientCreate, ClientResponse, ClientUpdate,
    CommentCreate, ReminderCreate
)
from crm.domains.clients.services import ClientService
from crm.domains.identity.entities import User
from crm.domains.imports.entities import ImportType
from crm.domains.imports.services import ImportService
from crm.domains.ownership.entities import OwnershipScope

router = APIRouter(prefix="/clients", tags=["clients"])


@router.get("/", response_model=List[ClientResponse])
async def get_clients(
    scope: OwnershipScope = Depends(get_scope),
    db: JsonDocumentStore = Depends(get_db)
):
    """Получение списка клиентов пользователя"""
    clients = await ClientService(db).list(scope)
    return [ClientResponse.from_entity(client) for client in clients]


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: str,
    scope: OwnershipScope = Depends(get_scope),
    db: JsonDocumentStore = Depends(get_db)
):
    """Получение клиента по id"""
    try:
        client = await ClientService(db).get(client_id, scope)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    if not client:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    return ClientResponse.from_entity(client)


@router.post("/", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(
    client_data: ClientCreate,
    current_user: User = Depends(get_current_user),
    db: JsonDocumentStore = Depends(get_db)
):
    """Создание нового клиента"""
    try:
        client = await ClientService(db).create_client(
            client_data.model_dump(by_alias=True, exclude_none=True), current_user.id
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ClientResponse.from_entity(client)


@router.put("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: str,
    update_data: ClientUpdate,
    scope: OwnershipScope = Depends(get_scope),
    db: JsonDocumentStore = Depends(get_db)
):
    """Обновление клиента"""
    try:
        client = await ClientService(db).update(
            client_id, update_data.model_dump(by_alias=True, exclude_unset=True), scope
        )
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not client:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    return ClientResponse.from_entity(client)


@router.delete("/{client_id}", response_model=MessageResponse)
async def delete_client(
    client_id: str,
    scope: OwnershipScope = Depends(get_scope),
    db: JsonDocumentStore = Depends(get_db)
):
    """Удаление клиента (документы клиента остаются)"""
    try:
        deleted = await ClientService(db).delete(client_id, scope)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    return {"message": "Client deleted successfully"}


@router.post("/{client_id}/comments", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    client_id: str,
    comment_data: CommentCreate,
    scope: OwnershipScope = Depends(get_scope),
    db: JsonDocumentStore = Depends(get_db)
):
    """Комментарий к клиенту"""
    try:
        client = await ClientService(db).add_comment(client_id, comment_data.text, scope)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not client:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    return ClientResponse.from_entity(client)


@router.post("/{client_id}/reminders", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def add_reminder(
    client_id: str,
    reminder_data: ReminderCreate,
    scope: OwnershipScope = Depends(get_scope),
    db: JsonDocumentStore = Depends(get_db)
):
    """Напоминание по клиенту"""
    try:
        client = await ClientService(db).add_reminder(
            client_id, reminder_data.date, reminder_data.note, scope
        )
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not client:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    return ClientResponse.from_entity(client)


@router.post("/bulk", response_model=BulkImportResponse, status_code=status.HTTP_201_CREATED)
async def bulk_import_clients(
    import_data: ClientBulkImportRequest,
    current_user: User = Depends(get_current_user),
    db: JsonDocumentStore = Depends(get_db)
):
    """Пакетный импорт клиентов"""
    try:
        log = await ImportService(db).bulk_import(
            ImportType.CLIENTS,
            import_data.clients,
            current_user,
            assign_to_user_id=import_data.assign_to_user_id,
            file_name=import_data.file_name,
            file_size=import_data.file_size,
            file_type=import_data.file_type
        )
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return BulkImportResponse(
        success=True,
        count=log.successful_count,
        failed_count=log.failed_count,
        status=log.status,
        import_log_id=log.id,
        errors=log.errors
    )


@router.post("/bulk-delete", response_model=BulkDeleteResponse)
async def bulk_delete_clients(
    delete_data: BulkDeleteRequest,
    scope: OwnershipScope = Depends(get_scope),
    db: JsonDocumentStore = Depends(get_db)
):
    """Удаление нескольких клиентов"""
    try:
        return await ClientService(db).bulk_delete(delete_data.ids, scope)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
