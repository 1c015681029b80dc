from typing import Optional

from pydantic import BaseModel, EmailStr

from crm.core.schemas import CamelModel
from crm.domains.identity.entities import User


class UserRegister(CamelModel):
    """Схема для регистрации пользователя"""
    email: EmailStr
    password: str
    full_name: Optional[str] = None


class UserLogin(BaseModel):
    """Схема для входа пользователя (email администратора - просто 'admin')"""
    email: str
    password: str


class ForgotPasswordRequest(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None


class ResetPasswordRequest(CamelModel):
    token: str
    new_password: str


class ProfileUpdate(CamelModel):
    """Схема для обновления профиля"""
    full_name: Optional[str] = None
    phone: Optional[str] = None
    dark_mode: Optional[bool] = None


class EmailChange(BaseModel):
    """Смена email текущего пользователя (нужен пароль)"""
    email: EmailStr
    password: str


class PasswordChange(CamelModel):
    """Схема для смены пароля"""
    current_password: str
    new_password: str


class UserResponse(CamelModel):
    """Схема для ответа с данными пользователя"""
    id: str
    email: str
    full_name: str = ""
    role: Optional[str] = None
    phone: Optional[str] = None
    profile_picture: Optional[str] = None
    dark_mode: bool = False
    created_at: Optional[str] = None
    last_login: Optional[str] = None
    last_active: Optional[str] = None
    is_online: bool = False
    is_active: bool = True
    must_change_password: bool = False

    @classmethod
    def from_entity(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            full_name=user.full_name,
            role=user.role,
            phone=user.phone,
            profile_picture=user.profile_picture,
            dark_mode=user.dark_mode,
            created_at=user.created_at,
            last_login=user.last_login,
            last_active=user.last_active,
            is_online=user.is_online,
            is_active=user.is_active,
            must_change_password=user.must_change_password
        )


class AuthResponse(BaseModel):
    """Токен и пользователь после входа или регистрации"""
    token: str
    user: UserResponse


class ProfileStats(CamelModel):
    client_count: int = 0
    product_count: int = 0
    document_count: int = 0


class ProfileResponse(BaseModel):
    user: UserResponse
    stats: ProfileStats


class ForgotPasswordResponse(CamelModel):
    message: str
    reset_token: Optional[str] = None
    reset_link: Optional[str] = None


class EmailChangeResponse(BaseModel):
    message: str
    email: str


class ProfilePictureResponse(CamelModel):
    message: str
    profile_picture: str
