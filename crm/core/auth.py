from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from crm.core.db import get_db
from crm.db.datastore import JsonDocumentStore
from crm.domains.identity.entities import User
from crm.domains.identity.services import IdentityService
from crm.domains.ownership.entities import OwnershipScope

security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: JsonDocumentStore = Depends(get_db)
) -> User:
    """Зависимость для получения текущего пользователя"""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await IdentityService(db).get_current_user_from_token(credentials.credentials)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Зависимость для операций администратора"""
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user


async def get_scope(current_user: User = Depends(get_current_user)) -> OwnershipScope:
    """Область видимости записей для текущего пользователя"""
    return OwnershipScope.for_user(current_user)
