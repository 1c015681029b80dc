import logging
from datetime import timedelta
from pathlib import Path
from typing import Dict, Optional, Tuple

from crm.core.config import settings
from crm.core.exceptions import StorageError
from crm.core.security import (
    create_access_token, decode_token_unverified, generate_reset_token, verify_token
)
from crm.core.utils import new_id
from crm.db.datastore import JsonDocumentStore
from crm.db.files import FileStorage, make_stored_name
from crm.db.repositories.client_repository import ClientRepository
from crm.db.repositories.document_repository import DocumentRepository
from crm.db.repositories.product_repository import ProductRepository
from crm.db.repositories.user_repository import PasswordResetTokenRepository, UserRepository
from crm.domains.identity.entities import ADMIN_ROLE, PasswordResetToken, User

logger = logging.getLogger(__name__)

PROFILE_PICTURE_URL = "/api/users/profile-pictures"
IMAGE_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}


def check_password_length(password: Optional[str], field: str = "Password") -> None:
    if not password or len(password) < settings.min_password_length:
        raise ValueError(f"{field} must be at least {settings.min_password_length} characters")


class IdentityService:
    """Сервис для работы с идентификацией и аутентификацией пользователей"""

    def __init__(self, db: JsonDocumentStore):
        self.db = db
        self.user_repository = UserRepository(db)
        self.token_repository = PasswordResetTokenRepository(db)

    def create_token(self, user: User) -> str:
        token_data = {"sub": user.id, "email": user.email}
        if user.is_admin:
            token_data["role"] = ADMIN_ROLE
        return create_access_token(data=token_data)

    async def register_user(self, email: str, password: str, full_name: Optional[str] = None) -> User:
        """Регистрация нового пользователя"""
        check_password_length(password)
        if await self.user_repository.email_exists(email):
            raise ValueError("User with this email already exists")

        user = User.create_user(email=email, password=password, full_name=full_name)
        await self.user_repository.create(user)
        logger.info(f"User {user.id} registered")
        return user

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """Аутентификация пользователя; PermissionError для отключенной учетной записи"""
        if not email or not password:
            return None
        user = await self.user_repository.get_by_email(email)

        if not user or not user.authenticate(password):
            return None

        if not user.is_active:
            raise PermissionError("Account is deactivated")

        return user

    async def login_user(self, email: str, password: str) -> Optional[Tuple[str, User]]:
        """Вход пользователя и создание JWT токена"""
        user = await self.authenticate_user(email, password)
        if not user:
            return None

        user = await self.user_repository.update(user.id, lambda u: u.record_login())
        if not user:
            return None
        return self.create_token(user), user

    async def login_admin(self, email: str, password: str) -> Optional[Tuple[str, User]]:
        """Вход в консоль администратора (только роль admin)"""
        user = await self.user_repository.get_by_email(email)
        if not user or not user.is_admin:
            return None
        return await self.login_user(email, password)

    async def get_user(self, user_id: str) -> Optional[User]:
        return await self.user_repository.get_by_id(user_id)

    async def get_current_user_from_token(self, token: str) -> Optional[User]:
        """Пользователь по JWT токену с отметкой активности"""
        payload = verify_token(token)
        if not payload:
            await self._mark_offline(token)
            return None

        user_id = payload.get("sub")
        if not user_id:
            return None

        user = await self.user_repository.get_by_id(user_id)
        if not user or not user.is_active:
            return None

        # Отметка активности не должна мешать запросу
        try:
            touched = await self.user_repository.update(user_id, lambda u: u.touch())
        except StorageError as e:
            logger.warning(f"Failed to update activity of user {user_id}: {e}")
            return user
        return touched or user

    async def logout(self, token: Optional[str]) -> None:
        """Выход; токен может быть уже просрочен"""
        if token:
            await self._mark_offline(token, touch=True)

    async def _mark_offline(self, token: str, touch: bool = False) -> None:
        claims = decode_token_unverified(token)
        user_id = claims.get("sub") if claims else None
        if not user_id:
            return
        try:
            await self.user_repository.update(user_id, lambda u: u.go_offline(touch=touch))
        except StorageError as e:
            logger.warning(f"Failed to mark user {user_id} offline: {e}")

    async def request_password_reset(
        self,
        email: Optional[str] = None,
        phone: Optional[str] = None
    ) -> Optional[PasswordResetToken]:
        """Выдача токена сброса пароля; None если пользователь не найден"""
        if not email and not phone:
            raise ValueError("Email or phone number is required")

        if email:
            user = await self.user_repository.get_by_email(email)
        else:
            user = await self.user_repository.get_by_phone(phone)
        if not user:
            return None

        reset_token = PasswordResetToken.issue(
            user.id,
            generate_reset_token(),
            timedelta(minutes=settings.password_reset_token_ttl_minutes)
        )
        await self.token_repository.add(reset_token)
        logger.info(f"Password reset requested for user {user.id}")
        return reset_token

    async def reset_password(self, token: str, new_password: str) -> bool:
        """Сброс пароля по одноразовому токену; False если пользователь удален"""
        check_password_length(new_password)

        reset_token = await self.token_repository.get_by_token(token)
        if not reset_token:
            raise ValueError("Invalid or expired reset token")

        if reset_token.is_expired():
            await self.token_repository.remove(token)
            raise ValueError("Reset token has expired")

        user = await self.user_repository.update(
            reset_token.user_id, lambda u: u.set_password(new_password)
        )
        await self.token_repository.remove(token)
        if user:
            logger.info(f"Password reset for user {user.id}")
        return user is not None

    async def get_profile(self, user_id: str) -> Optional[Tuple[User, Dict[str, int]]]:
        """Профиль и количество записей пользователя"""
        user = await self.user_repository.get_by_id(user_id)
        if not user:
            return None
        stats = {
            "client_count": await self._count_owned(ClientRepository(self.db), user_id),
            "product_count": await self._count_owned(ProductRepository(self.db), user_id),
            "document_count": await self._count_owned(DocumentRepository(self.db), user_id)
        }
        return user, stats

    @staticmethod
    async def _count_owned(repository, user_id: str) -> int:
        return sum(1 for record in await repository.get_all() if record.get("userId") == user_id)

    async def update_profile(
        self,
        user_id: str,
        full_name: Optional[str] = None,
        phone: Optional[str] = None,
        dark_mode: Optional[bool] = None
    ) -> Optional[User]:
        """Обновление профиля пользователя"""
        return await self.user_repository.update(
            user_id,
            lambda u: u.update_profile(full_name=full_name, phone=phone, dark_mode=dark_mode)
        )

    async def change_email(self, user_id: str, email: str, password: str) -> Optional[User]:
        """Смена email с подтверждением паролем"""
        new_email = email.strip().lower()

        def _change(user: User):
            if not user.authenticate(password):
                raise ValueError("Invalid password")
            user.email = new_email

        if await self.user_repository.email_exists(new_email, exclude_id=user_id):
            raise ValueError("Email already in use")
        return await self.user_repository.update(user_id, _change)

    async def change_password(self, user_id: str, current_password: str, new_password: str) -> bool:
        """Смена пароля пользователя (снимает требование смены пароля)"""
        check_password_length(new_password, "New password")

        def _change(user: User):
            if not user.authenticate(current_password):
                raise ValueError("Current password is incorrect")
            user.set_password(new_password)

        return await self.user_repository.update(user_id, _change) is not None

    async def set_profile_picture(
        self,
        user_id: str,
        content: bytes,
        original_name: str,
        content_type: Optional[str],
        files: FileStorage
    ) -> Optional[str]:
        """Сохранение фото профиля; старое фото удаляется"""
        extension = Path(original_name or "").suffix.lower()
        if extension not in IMAGE_EXTENSIONS or not (content_type or "").startswith("image/"):
            raise ValueError("Only image files are allowed")
        if len(content) > settings.max_profile_picture_size:
            raise ValueError("File is too large")

        user = await self.user_repository.get_by_id(user_id)
        if not user:
            return None

        file_name = make_stored_name(f"picture{extension}", prefix=f"profile-{user_id}")
        await files.save(content, file_name)
        picture_url = f"{PROFILE_PICTURE_URL}/{file_name}"

        previous = []

        def _set(u: User):
            previous.append(u.profile_picture)
            u.profile_picture = picture_url

        try:
            updated = await self.user_repository.update(user_id, _set)
        except StorageError:
            await files.remove(file_name)
            raise
        if not updated:
            await files.remove(file_name)
            return None

        if previous and previous[0]:
            await files.remove(Path(previous[0]).name)
        return picture_url

    async def delete_account(self, user_id: str, files: FileStorage) -> bool:
        """Удаление собственного профиля"""
        removed = []
        deleted = await self.user_repository.delete(user_id, check=removed.append)
        if deleted:
            if removed[0].profile_picture:
                await files.remove(Path(removed[0].profile_picture).name)
            logger.info(f"User {user_id} deleted own profile")
        return deleted

    @staticmethod
    def _has_admin(users) -> bool:
        return any(
            u.get("role") == ADMIN_ROLE or u.get("email") == settings.default_admin_email for u in users
        )

    async def ensure_admin(self) -> Optional[User]:
        """Создание администратора по умолчанию, если его нет; повторный вызов ничего не делает"""
        if self._has_admin(await self.user_repository.get_all()):
            return None

        admin = None
        async with self.db.transaction() as data:
            users = data["users"]
            # Повторная проверка под блокировкой: запись уже могла появиться
            if self._has_admin(users):
                return None
            admin = User.create_user(
                email=settings.default_admin_email,
                password=settings.default_admin_password,
                full_name="Administrator",
                role=ADMIN_ROLE,
                must_change_password=True,
                user_id=f"admin-{new_id()}"
            )
            users.append(self.user_repository.to_record(admin))

        logger.info(f"Admin user created with email '{admin.email}'; password change required")
        return admin
