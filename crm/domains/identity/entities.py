from datetime import datetime, timedelta
from typing import Optional

from crm.core.security import get_password_hash, verify_password
from crm.core.utils import new_id, now_iso, parse_iso

ADMIN_ROLE = "admin"


class User:
    """Сущность пользователя домена Identity"""

    def __init__(
        self,
        id: str,
        email: str,
        password_hash: str,
        full_name: str = "",
        role: Optional[str] = None,
        phone: Optional[str] = None,
        profile_picture: Optional[str] = None,
        dark_mode: bool = False,
        created_at: Optional[str] = None,
        last_login: Optional[str] = None,
        last_active: Optional[str] = None,
        is_online: bool = False,
        is_active: bool = True,
        must_change_password: bool = False
    ):
        self.id = id
        self.email = email
        self.password_hash = password_hash
        self.full_name = full_name
        self.role = role
        self.phone = phone
        self.profile_picture = profile_picture
        self.dark_mode = dark_mode
        self.created_at = created_at or now_iso()
        self.last_login = last_login
        self.last_active = last_active
        self.is_online = is_online
        self.is_active = is_active
        self.must_change_password = must_change_password

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

    def authenticate(self, password: str) -> bool:
        """Проверка пароля пользователя"""
        return verify_password(password, self.password_hash)

    def set_password(self, password: str, must_change: bool = False) -> None:
        self.password_hash = get_password_hash(password)
        self.must_change_password = must_change

    def record_login(self) -> None:
        """Отметка входа: lastLogin, lastActive, онлайн"""
        now = now_iso()
        self.last_login = now
        self.last_active = now
        self.is_online = True

    def touch(self) -> None:
        """Отметка активности при запросе с токеном"""
        self.last_active = now_iso()
        self.is_online = True

    def go_offline(self, touch: bool = False) -> None:
        if touch:
            self.last_active = now_iso()
        self.is_online = False

    def update_profile(
        self,
        full_name: Optional[str] = None,
        phone: Optional[str] = None,
        dark_mode: Optional[bool] = None
    ) -> None:
        """Обновление профиля пользователя"""
        if full_name is not None:
            self.full_name = full_name
        if phone is not None:
            self.phone = phone
        if dark_mode is not None:
            self.dark_mode = dark_mode

    def last_seen(self) -> Optional[datetime]:
        """Последняя активность (lastActive, иначе lastLogin)"""
        return parse_iso(self.last_active) or parse_iso(self.last_login)

    @classmethod
    def create_user(
        cls,
        email: str,
        password: str,
        full_name: Optional[str] = None,
        role: Optional[str] = None,
        must_change_password: bool = False,
        user_id: Optional[str] = None
    ) -> "User":
        """Создание нового пользователя с хешированием пароля"""
        email = email.strip().lower()
        return cls(
            id=user_id or new_id(),
            email=email,
            password_hash=get_password_hash(password),
            full_name=full_name or email.split("@")[0],
            role=role,
            must_change_password=must_change_password
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, User):
            return False
        return self.id == other.id

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email}, role={self.role})"


class PasswordResetToken:
    """Одноразовый токен сброса пароля"""

    def __init__(self, user_id: str, token: str, expires_at: str, created_at: Optional[str] = None):
        self.user_id = user_id
        self.token = token
        self.expires_at = expires_at
        self.created_at = created_at or now_iso()

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        expires = parse_iso(self.expires_at)
        if expires is None:
            return True
        return expires < (now or datetime.utcnow())

    @classmethod
    def issue(cls, user_id: str, token: str, ttl: timedelta) -> "PasswordResetToken":
        expires = datetime.utcnow() + ttl
        return cls(
            user_id=user_id,
            token=token,
            expires_at=expires.isoformat(timespec="milliseconds") + "Z"
        )
