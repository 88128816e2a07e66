"""
Authentication dependencies
Resolves the bearer token to an active user record
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import uuid

from storefront.core.config import Settings
from storefront.core.database import get_db, get_app_settings
from storefront.core.exceptions import UnauthorizedException, ForbiddenException
from storefront.core.security import SecurityUtils
from storefront.models import User

# Missing credentials are reported by get_current_user with the envelope's wording
security = HTTPBearer(auto_error=False)

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings)
) -> User:
    """
    Get current authenticated user (required)
    Raises 401 if the token is missing, invalid, expired or the user is gone
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedException("Not authorized, token not provided")
    
    payload = SecurityUtils.decode_token(credentials.credentials, settings)
    
    if payload.get("type") != "access":
        raise UnauthorizedException("Invalid token type")
    
    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise UnauthorizedException("Invalid token")
    
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    
    if user is None:
        raise UnauthorizedException("User not found")
    if not user.is_active:
        raise UnauthorizedException("User inactive")
    
    return user

async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Get current user and ensure they have the admin role"""
    if not current_user.is_admin:
        raise ForbiddenException(
            f"Role '{current_user.role.value}' is not allowed to access this resource"
        )
    return current_user
