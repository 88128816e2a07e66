"""
Order schemas for request/response validation
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
import uuid

from storefront.models import OrderStatus, PaymentMethod
from storefront.schemas.common import AddressInfo, UserSummary

class OrderCreate(BaseModel):
    """Schema for placing an order from the caller's cart"""
    payment_method: PaymentMethod
    shipping_address: Optional[AddressInfo] = None
    notes: Optional[str] = Field(None, max_length=1000)

class OrderStatusUpdate(BaseModel):
    status: OrderStatus

class OrderProduct(BaseModel):
    id: uuid.UUID
    name: str
    image: Optional[str] = None
    
    class Config:
        from_attributes = True

class OrderItemResponse(BaseModel):
    """Frozen line, product_name is the snapshot taken at placement"""
    product_id: uuid.UUID
    product_name: str
    product: Optional[OrderProduct] = None
    quantity: int
    price: float
    subtotal: float
    
    class Config:
        from_attributes = True

class OrderResponse(BaseModel):
    """Schema for order response"""
    id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    user: Optional[UserSummary] = None
    items: List[OrderItemResponse]
    total: float
    status: OrderStatus
    payment_method: PaymentMethod
    shipping_address: Optional[AddressInfo] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True
        use_enum_values = True

class StatusStats(BaseModel):
    status: OrderStatus
    count: int
    revenue: float
    
    class Config:
        use_enum_values = True

class OrderTotals(BaseModel):
    total_orders: int = 0
    total_revenue: float = 0
    average_order: float = 0

class OrderStatsResponse(BaseModel):
    by_status: List[StatusStats]
    totals: OrderTotals
