from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials

from crm.core.auth import get_current_user, security
from crm.core.db import get_db
from crm.core.schemas import MessageResponse
from crm.db.datastore import JsonDocumentStore
from crm.domains.identity.entities import User
from crm.domains.identity.schemas import (
    AuthResponse, ForgotPasswordRequest, ForgotPasswordResponse, ResetPasswordRequest,
    UserLogin, UserRegister, UserResponse
)
from crm.domains.identity.services import IdentityService

router = APIRouter(prefix="/auth", tags=["authentication"])

RESET_MESSAGE = "If a user exists with this email/phone, a reset link will be sent"


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    db: JsonDocumentStore = Depends(get_db)
):
    """Регистрация нового пользователя"""
    identity_service = IdentityService(db)

    try:
        user = await identity_service.register_user(
            user_data.email, user_data.password, user_data.full_name
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return AuthResponse(token=identity_service.create_token(user), user=UserResponse.from_entity(user))


@router.post("/login", response_model=AuthResponse)
async def login(
    login_data: UserLogin,
    db: JsonDocumentStore = Depends(get_db)
):
    """Вход пользователя"""
    try:
        result = await IdentityService(db).login_user(login_data.email, login_data.password)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    if not result:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token, user = result
    return AuthResponse(token=token, user=UserResponse.from_entity(user))


@router.post("/forgot-password", response_model=ForgotPasswordResponse)
async def forgot_password(
    request_data: ForgotPasswordRequest,
    request: Request,
    db: JsonDocumentStore = Depends(get_db)
):
    """Запрос на сброс пароля (ответ не раскрывает, есть ли пользователь)"""
    try:
        reset_token = await IdentityService(db).request_password_reset(
            email=request_data.email, phone=request_data.phone
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not reset_token:
        return ForgotPasswordResponse(message=RESET_MESSAGE)

    # Письмо не отправляется, токен возвращается в ответе
    return ForgotPasswordResponse(
        message=RESET_MESSAGE,
        reset_token=reset_token.token,
        reset_link=f"{str(request.base_url).rstrip('/')}/reset-password?token={reset_token.token}"
    )


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    reset_data: ResetPasswordRequest,
    db: JsonDocumentStore = Depends(get_db)
):
    """Сброс пароля по токену"""
    try:
        reset = await IdentityService(db).reset_password(reset_data.token, reset_data.new_password)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not reset:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return {"message": "Password reset successfully"}


@router.post("/logout", response_model=MessageResponse)
async def logout(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: JsonDocumentStore = Depends(get_db)
):
    """Выход пользователя (токен может быть просрочен)"""
    await IdentityService(db).logout(credentials.credentials if credentials else None)
    return {"message": "Logged out successfully"}


@router.get("/verify", response_model=UserResponse)
async def verify(current_user: User = Depends(get_current_user)):
    """Проверка токена и данные текущего пользователя"""
    return UserResponse.from_entity(current_user)
