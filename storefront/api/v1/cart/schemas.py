"""
Cart schemas for request/response validation
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
import uuid

from storefront.schemas.common import CategorySummary

class CartItemCreate(BaseModel):
    """Schema for adding item to cart"""
    product_id: uuid.UUID
    quantity: int = Field(1, gt=0)

class CartItemUpdate(BaseModel):
    """Schema for updating cart item"""
    quantity: int = Field(..., gt=0)

class CartProduct(BaseModel):
    """Live product fields shown next to a cart line"""
    id: uuid.UUID
    name: str
    price: float
    stock: int
    image: Optional[str] = None
    is_active: bool
    category: Optional[CategorySummary] = None
    
    class Config:
        from_attributes = True

class CartItemResponse(BaseModel):
    """Schema for cart item response"""
    id: uuid.UUID
    product_id: uuid.UUID
    product: Optional[CartProduct] = None
    quantity: int
    price: float
    subtotal: float
    
    class Config:
        from_attributes = True

class CartResponse(BaseModel):
    """Schema for complete cart response"""
    id: uuid.UUID
    user_id: uuid.UUID
    items: List[CartItemResponse]
    total: float
    updated_at: datetime
    
    class Config:
        from_attributes = True

class CartTotalLine(BaseModel):
    product_id: uuid.UUID
    quantity: int
    price: float
    subtotal: float

class CartTotalResponse(BaseModel):
    """Totals computed from the price snapshots"""
    total: float = 0
    line_count: int = 0
    total_quantity: int = 0
    items: List[CartTotalLine] = []
