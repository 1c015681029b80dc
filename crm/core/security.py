import secrets
from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from passlib.context import CryptContext

from crm.core.config import settings

# Контекст для хеширования паролей
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Проверка пароля"""
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password[:72], hashed_password)
    except ValueError:
        # Хеш не распознан passlib
        return False


def get_password_hash(password: str) -> str:
    """Хеширование пароля"""
    # bcrypt имеет ограничение 72 байта
    return pwd_context.hash(password[:72])


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Создание JWT токена доступа"""
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(days=settings.access_token_expire_days)

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return encoded_jwt


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """Проверка JWT токена и извлечение данных"""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return payload
    except JWTError:
        return None


def decode_token_unverified(token: str) -> Optional[Dict[str, Any]]:
    """Чтение данных токена без проверки подписи и срока (для выхода по истекшему токену)"""
    try:
        return jwt.get_unverified_claims(token)
    except JWTError:
        return None


def generate_reset_token() -> str:
    """Одноразовый токен сброса пароля"""
    return secrets.token_hex(32)
