from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from crm.core.auth import require_admin
from crm.core.db import get_db, get_document_files
from crm.core.schemas import AssignRequest, MessageResponse
from crm.db.datastore import JsonDocumentStore
from crm.db.files import FileStorage
from crm.domains.admin.schemas import (
    AdminEmailChange, AdminPasswordReset, AdminUserResponse, DashboardResponse, UserStatusUpdate
)
from crm.domains.admin.services import AdminService
from crm.domains.clients.schemas import ClientResponse
from crm.domains.clients.services import ClientService
from crm.domains.documents.schemas import DocumentResponse
from crm.domains.documents.services import DocumentService
from crm.domains.identity.entities import User
from crm.domains.identity.schemas import AuthResponse, PasswordChange, UserLogin, UserResponse
from crm.domains.identity.services import IdentityService
from crm.domains.products.schemas import ProductResponse
from crm.domains.products.services import ProductService

router = APIRouter(prefix="/admin", tags=["admin"])


def _require_user_id(assign_data: AssignRequest) -> str:
    if not assign_data.user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User ID is required")
    return assign_data.user_id


@router.post("/login", response_model=AuthResponse)
async def admin_login(
    login_data: UserLogin,
    db: JsonDocumentStore = Depends(get_db)
):
    """Вход администратора"""
    try:
        result = await IdentityService(db).login_admin(login_data.email, login_data.password)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    if not result:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid admin credentials")

    token, user = result
    return AuthResponse(token=token, user=UserResponse.from_entity(user))


@router.post("/change-password", response_model=MessageResponse)
async def change_admin_password(
    password_data: PasswordChange,
    admin: User = Depends(require_admin),
    db: JsonDocumentStore = Depends(get_db)
):
    """Смена пароля администратора"""
    try:
        changed = await IdentityService(db).change_password(
            admin.id, password_data.current_password, password_data.new_password
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not changed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return {"message": "Password changed successfully"}


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    admin: User = Depends(require_admin),
    db: JsonDocumentStore = Depends(get_db)
):
    """Статистика для панели администратора"""
    return await AdminService(db).get_dashboard()


@router.get("/users", response_model=List[AdminUserResponse])
async def get_users(
    admin: User = Depends(require_admin),
    db: JsonDocumentStore = Depends(get_db)
):
    """Пользователи с количеством их записей"""
    users = await AdminService(db).list_users()
    return [AdminUserResponse.from_user(user, counts) for user, counts in users]


@router.post("/users/{user_id}/reset-password", response_model=MessageResponse)
async def reset_user_password(
    user_id: str,
    reset_data: AdminPasswordReset,
    admin: User = Depends(require_admin),
    db: JsonDocumentStore = Depends(get_db)
):
    """Новый пароль для пользователя"""
    try:
        user = await AdminService(db).reset_user_password(user_id, reset_data.new_password)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return {"message": "Password reset successfully"}


@router.put("/users/{user_id}/email", response_model=UserResponse)
async def change_user_email(
    user_id: str,
    email_data: AdminEmailChange,
    admin: User = Depends(require_admin),
    db: JsonDocumentStore = Depends(get_db)
):
    """Смена email пользователя"""
    try:
        user = await AdminService(db).change_user_email(user_id, email_data.email)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserResponse.from_entity(user)


@router.put("/users/{user_id}/status", response_model=UserResponse)
async def set_user_status(
    user_id: str,
    status_data: UserStatusUpdate,
    admin: User = Depends(require_admin),
    db: JsonDocumentStore = Depends(get_db)
):
    """Включение или отключение учетной записи"""
    user = await AdminService(db).set_user_status(user_id, status_data.is_active)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserResponse.from_entity(user)


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    admin: User = Depends(require_admin),
    db: JsonDocumentStore = Depends(get_db)
):
    """Удаление пользователя"""
    if not await AdminService(db).delete_user(user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return {"message": "User deleted successfully"}


@router.post("/clients/{client_id}/assign", response_model=ClientResponse)
async def assign_client(
    client_id: str,
    assign_data: AssignRequest,
    admin: User = Depends(require_admin),
    db: JsonDocumentStore = Depends(get_db)
):
    """Назначение клиента пользователю"""
    try:
        client = await ClientService(db).assign_owner(client_id, _require_user_id(assign_data))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not client:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    return ClientResponse.from_entity(client)


@router.post("/products/{product_id}/assign", response_model=ProductResponse)
async def assign_product(
    product_id: str,
    assign_data: AssignRequest,
    admin: User = Depends(require_admin),
    db: JsonDocumentStore = Depends(get_db)
):
    """Назначение товара пользователю"""
    try:
        product = await ProductService(db).assign_owner(product_id, _require_user_id(assign_data))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return ProductResponse.from_entity(product)


@router.post("/documents/{document_id}/assign", response_model=DocumentResponse)
async def assign_document(
    document_id: str,
    assign_data: AssignRequest,
    admin: User = Depends(require_admin),
    db: JsonDocumentStore = Depends(get_db),
    files: FileStorage = Depends(get_document_files)
):
    """Назначение документа пользователю"""
    try:
        document = await DocumentService(db, files).assign_owner(
            document_id, _require_user_id(assign_data)
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not document:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return DocumentResponse.from_entity(document)
