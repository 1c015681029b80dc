from typing import List, Optional

from pydantic import BaseModel, EmailStr

from crm.core.schemas import CamelModel
from crm.domains.identity.entities import User
from crm.domains.identity.schemas import UserResponse


class DashboardStats(CamelModel):
    total_users: int
    total_clients: int
    total_products: int
    total_documents: int
    active_users: int
    users_with_clients: int
    users_with_products: int


class RecentActivity(CamelModel):
    user_id: str
    full_name: str
    email: str
    last_login: Optional[str] = None
    last_active: Optional[str] = None


class DashboardResponse(CamelModel):
    """Статистика для панели администратора"""
    stats: DashboardStats
    recent_logins: List[RecentActivity]


class AdminUserResponse(UserResponse):
    """Пользователь с количеством его записей"""
    client_count: int = 0
    product_count: int = 0
    document_count: int = 0

    @classmethod
    def from_user(cls, user: User, counts: dict) -> "AdminUserResponse":
        base = UserResponse.from_entity(user).model_dump()
        return cls(**base, **counts)


class AdminPasswordReset(CamelModel):
    new_password: str


class AdminEmailChange(BaseModel):
    email: EmailStr


class UserStatusUpdate(CamelModel):
    is_active: bool = True
