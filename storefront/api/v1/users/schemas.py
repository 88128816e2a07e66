"""
User schemas for request/response validation
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
import uuid

from storefront.models import UserRole
from storefront.schemas.common import AddressInfo

class UserRegister(BaseModel):
    """Self-registration payload, always creates a customer"""
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[AddressInfo] = None
    
    @field_validator("name", "phone")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v
    
    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v):
        return v.strip().lower()

class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    
    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v):
        return v.strip().lower()

class UserUpdate(BaseModel):
    """Profile update, email and password are not changed here"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[AddressInfo] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None

class UserResponse(BaseModel):
    """User profile, never carries the password hash"""
    id: uuid.UUID
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[AddressInfo] = None
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True
        use_enum_values = True

class AuthResponse(BaseModel):
    """Returned by register and login"""
    id: uuid.UUID
    name: str
    email: str
    role: UserRole
    token: str
    
    class Config:
        use_enum_values = True
