"""
Product schemas for request/response validation
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal
import enum
import uuid

from storefront.schemas.common import CategorySummary

class ProductCreate(BaseModel):
    """Schema for creating product"""
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    stock: int = Field(0, ge=0)
    category_id: uuid.UUID
    brand: Optional[str] = Field(None, max_length=100)
    image: Optional[str] = Field(None, max_length=500)
    is_active: bool = True
    
    @field_validator("name", "description", "brand")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

class ProductUpdate(BaseModel):
    """Partial update, rating fields are derived and not accepted here"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    stock: Optional[int] = Field(None, ge=0)
    category_id: Optional[uuid.UUID] = None
    brand: Optional[str] = Field(None, max_length=100)
    image: Optional[str] = Field(None, max_length=500)
    is_active: Optional[bool] = None

class StockOperation(str, enum.Enum):
    INCREMENT = "increment"
    DECREMENT = "decrement"
    SET = "set"

class StockUpdate(BaseModel):
    quantity: int = Field(..., ge=0)
    operation: StockOperation

class ProductResponse(BaseModel):
    """Schema for product response"""
    id: uuid.UUID
    name: str
    description: str
    price: float
    stock: int
    category_id: Optional[uuid.UUID] = None
    category: Optional[CategorySummary] = None
    brand: Optional[str] = None
    image: Optional[str] = None
    is_active: bool
    avg_rating: float
    review_count: int
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True
