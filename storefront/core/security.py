"""
Security utilities for authentication and authorization
Handles JWT tokens, password hashing, and permission checks
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Iterable
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
import uuid

from .config import Settings
from .exceptions import UnauthorizedException, ForbiddenException

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

class SecurityUtils:
    """Security utility functions"""
    
    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify password against hash"""
        return pwd_context.verify(plain_password, hashed_password)
    
    @staticmethod
    def hash_password(password: str) -> str:
        """Hash password using bcrypt"""
        return pwd_context.hash(password)
    
    @staticmethod
    def create_access_token(data: Dict[str, Any], settings: Settings) -> str:
        """Create JWT access token"""
        to_encode = data.copy()
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        to_encode.update({"exp": expire, "type": "access"})
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    
    @staticmethod
    def decode_token(token: str, settings: Settings) -> Dict[str, Any]:
        """Decode and validate JWT token"""
        try:
            return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        except ExpiredSignatureError:
            raise UnauthorizedException("Token expired, please log in again", error_code="TOKEN_EXPIRED")
        except JWTError:
            raise UnauthorizedException("Invalid token", error_code="INVALID_TOKEN")

# Ownership / role checks
def is_owner_or_role(user, owner_id: uuid.UUID, roles: Iterable[str] = ("admin",)) -> bool:
    """True when ``user`` owns the resource or holds one of ``roles``"""
    if owner_id is not None and user.id == owner_id:
        return True
    return user.role.value in roles

def ensure_owner_or_admin(user, owner_id: uuid.UUID, action: str) -> None:
    """Raise 403 unless ``user`` owns the resource or is an admin"""
    if not is_owner_or_role(user, owner_id):
        raise ForbiddenException(f"Not authorized to {action}")
