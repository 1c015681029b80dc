from typing import Iterable, List, Optional, TypeVar

from crm.core.exceptions import AccessDeniedError

T = TypeVar("T")


class OwnershipScope:
    """Область видимости записей для пользователя запроса.

    Администратор видит и изменяет все записи. Остальные - только записи
    со своим userId; записи без владельца им недоступны.
    """

    def __init__(self, user_id: str, is_admin: bool = False):
        self.user_id = user_id
        self.is_admin = is_admin

    @classmethod
    def for_user(cls, user) -> "OwnershipScope":
        return cls(user.id, user.is_admin)

    def can_access(self, owner_id: Optional[str]) -> bool:
        """Проверка доступа к записи с данным владельцем"""
        if self.is_admin:
            return True
        return owner_id is not None and owner_id == self.user_id

    def filter(self, items: Iterable[T]) -> List[T]:
        """Фильтрация коллекции по владельцу"""
        if self.is_admin:
            return list(items)
        return [item for item in items if self.can_access(item.user_id)]

    def check(self, item: Optional[T]) -> Optional[T]:
        """None для отсутствующей записи, AccessDeniedError для чужой"""
        if item is None:
            return None
        if not self.can_access(item.user_id):
            raise AccessDeniedError()
        return item

    def __repr__(self) -> str:
        return f"OwnershipScope(user_id={self.user_id}, is_admin={self.is_admin})"
