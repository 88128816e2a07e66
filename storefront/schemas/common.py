"""Schemas shared across resources"""

from pydantic import BaseModel, Field
from typing import Optional
import uuid

class AddressInfo(BaseModel):
    """Postal address stored on users and orders"""
    street: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    province: Optional[str] = Field(None, max_length=100)
    postal_code: Optional[str] = Field(None, max_length=20)
    country: str = Field("Argentina", max_length=100)

class UserSummary(BaseModel):
    """Owner display fields embedded in other responses"""
    id: uuid.UUID
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    
    class Config:
        from_attributes = True

class CategorySummary(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    
    class Config:
        from_attributes = True
