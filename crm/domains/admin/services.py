import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from crm.db.datastore import JsonDocumentStore
from crm.db.repositories.user_repository import UserRepository
from crm.domains.identity.entities import User
from crm.domains.identity.services import check_password_length

logger = logging.getLogger(__name__)

ACTIVE_WINDOW = timedelta(days=7)
RECENT_ACTIVITY_LIMIT = 10


class AdminService:
    """Сервис консоли администратора: статистика и управление пользователями.

    Учетные записи администраторов через эти операции не изменяются:
    для них возвращается None, как для отсутствующего пользователя.
    """

    def __init__(self, db: JsonDocumentStore):
        self.db = db
        self.user_repository = UserRepository(db)

    async def _owner_counts(self) -> Dict[str, Counter]:
        data = await self.db.read_data()
        return {
            name: Counter(record.get("userId") for record in data[name])
            for name in ("clients", "products", "documents")
        }

    async def get_dashboard(self) -> Dict[str, Any]:
        """Статистика по пользователям и записям"""
        data = await self.db.read_data()
        users = await self.user_repository.list_regular()
        client_owners = {record.get("userId") for record in data["clients"]}
        product_owners = {record.get("userId") for record in data["products"]}
        active_since = datetime.utcnow() - ACTIVE_WINDOW

        stats = {
            "total_users": len(users),
            "total_clients": len(data["clients"]),
            "total_products": len(data["products"]),
            "total_documents": len(data["documents"]),
            "active_users": sum(1 for u in users if (u.last_seen() or datetime.min) > active_since),
            "users_with_clients": sum(1 for u in users if u.id in client_owners),
            "users_with_products": sum(1 for u in users if u.id in product_owners)
        }

        seen = sorted(
            (u for u in users if u.last_seen()),
            key=lambda u: u.last_seen(),
            reverse=True
        )
        recent = [
            {
                "user_id": u.id,
                "full_name": u.full_name,
                "email": u.email,
                "last_login": u.last_login,
                "last_active": u.last_active or u.last_login
            }
            for u in seen[:RECENT_ACTIVITY_LIMIT]
        ]
        return {"stats": stats, "recent_logins": recent}

    async def list_users(self) -> List[Tuple[User, Dict[str, int]]]:
        """Пользователи (без администраторов) с количеством их записей"""
        counts = await self._owner_counts()
        return [
            (user, {
                "client_count": counts["clients"][user.id],
                "product_count": counts["products"][user.id],
                "document_count": counts["documents"][user.id]
            })
            for user in await self.user_repository.list_regular()
        ]

    async def _get_regular_user(self, user_id: str) -> Optional[User]:
        user = await self.user_repository.get_by_id(user_id)
        if not user or user.is_admin:
            return None
        return user

    async def reset_user_password(self, user_id: str, new_password: str) -> Optional[User]:
        """Новый пароль пользователю; при следующем входе потребуется смена"""
        check_password_length(new_password, "New password")
        if not await self._get_regular_user(user_id):
            return None
        user = await self.user_repository.update(
            user_id, lambda u: u.set_password(new_password, must_change=True)
        )
        logger.info(f"Password of user {user_id} reset by admin")
        return user

    async def change_user_email(self, user_id: str, email: str) -> Optional[User]:
        new_email = email.strip().lower()
        if not await self._get_regular_user(user_id):
            return None
        if await self.user_repository.email_exists(new_email, exclude_id=user_id):
            raise ValueError("Email already in use")

        def _change(user: User):
            user.email = new_email

        return await self.user_repository.update(user_id, _change)

    async def set_user_status(self, user_id: str, is_active: bool) -> Optional[User]:
        """Включение или отключение учетной записи"""
        if not await self._get_regular_user(user_id):
            return None

        def _set(user: User):
            user.is_active = is_active
            if not is_active:
                user.go_offline()

        user = await self.user_repository.update(user_id, _set)
        logger.info(f"User {user_id} {'activated' if is_active else 'deactivated'} by admin")
        return user

    async def delete_user(self, user_id: str) -> bool:
        """Удаление пользователя; его записи остаются без изменений"""
        if not await self._get_regular_user(user_id):
            return False
        deleted = await self.user_repository.delete(user_id)
        if deleted:
            logger.info(f"User {user_id} deleted by admin")
        return deleted
