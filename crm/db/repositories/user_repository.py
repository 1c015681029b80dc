from typing import List, Optional

from crm.db.repositories.base_repository import BaseRepository
from crm.domains.identity.entities import ADMIN_ROLE, PasswordResetToken, User


class UserRepository(BaseRepository[User]):
    """Репозиторий для работы с пользователями"""

    collection = "users"

    async def get_by_email(self, email: str) -> Optional[User]:
        """Получение пользователя по email (без учета регистра)"""
        wanted = email.strip().lower()
        for record in await self.get_all():
            if (record.get("email") or "").lower() == wanted:
                return self._to_domain(record)
        return None

    async def get_by_phone(self, phone: str) -> Optional[User]:
        for record in await self.get_all():
            if record.get("phone") and record.get("phone") == phone:
                return self._to_domain(record)
        return None

    async def email_exists(self, email: str, exclude_id: Optional[str] = None) -> bool:
        """Проверка существования email"""
        user = await self.get_by_email(email)
        return user is not None and user.id != exclude_id

    async def admin_exists(self) -> bool:
        for record in await self.get_all():
            if record.get("role") == ADMIN_ROLE:
                return True
        return False

    async def list_regular(self) -> List[User]:
        """Пользователи без роли администратора"""
        return [user for user in await self.list() if not user.is_admin]

    def _to_domain(self, record: dict) -> User:
        """Преобразование записи хранилища в доменную сущность"""
        return User(
            id=record.get("id"),
            email=record.get("email") or "",
            password_hash=record.get("password") or "",
            full_name=record.get("fullName") or "",
            role=record.get("role"),
            phone=record.get("phone"),
            profile_picture=record.get("profilePicture"),
            dark_mode=bool(record.get("darkMode", False)),
            created_at=record.get("createdAt"),
            last_login=record.get("lastLogin"),
            last_active=record.get("lastActive"),
            is_online=record.get("isOnline") is True,
            is_active=record.get("isActive", True) is not False,
            must_change_password=bool(record.get("mustChangePassword", False))
        )

    def to_record(self, user: User) -> dict:
        """Преобразование доменной сущности в запись хранилища"""
        return {
            "id": user.id,
            "email": user.email,
            "password": user.password_hash,
            "fullName": user.full_name,
            "role": user.role,
            "phone": user.phone,
            "profilePicture": user.profile_picture,
            "darkMode": user.dark_mode,
            "createdAt": user.created_at,
            "lastLogin": user.last_login,
            "lastActive": user.last_active,
            "isOnline": user.is_online,
            "isActive": user.is_active,
            "mustChangePassword": user.must_change_password
        }


class PasswordResetTokenRepository(BaseRepository[PasswordResetToken]):
    """Токены сброса пароля (ключ - сам токен)"""

    collection = "passwordResetTokens"

    async def add(self, reset_token: PasswordResetToken) -> PasswordResetToken:
        return await self.create(reset_token)

    async def get_by_token(self, token: str) -> Optional[PasswordResetToken]:
        for record in await self.get_all():
            if record.get("token") == token:
                return self._to_domain(record)
        return None

    async def remove(self, token: str) -> bool:
        """Удаление использованного или просроченного токена"""
        async with self.db.transaction() as data:
            tokens = data[self.collection]
            remaining = [record for record in tokens if record.get("token") != token]
            data[self.collection] = remaining
        return len(remaining) != len(tokens)

    def _to_domain(self, record: dict) -> PasswordResetToken:
        return PasswordResetToken(
            user_id=record.get("userId"),
            token=record.get("token"),
            expires_at=record.get("expiresAt"),
            created_at=record.get("createdAt")
        )

    def to_record(self, reset_token: PasswordResetToken) -> dict:
        return {
            "userId": reset_token.user_id,
            "token": reset_token.token,
            "expiresAt": reset_token.expires_at,
            "createdAt": reset_token.created_at
        }
