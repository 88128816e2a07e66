"""
Product filtering logic
"""

from dataclasses import dataclass
from typing import Optional
from decimal import Decimal
from sqlalchemy import and_
from sqlalchemy.sql import Select
import uuid

from storefront.core.exceptions import ValidationException
from storefront.models import Product

@dataclass
class ProductFilter:
    """Product filter parameters, active products only"""
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    brand: Optional[str] = None
    category_id: Optional[uuid.UUID] = None
    
    def validate(self) -> None:
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValidationException("price_min cannot be greater than price_max")
    
    def apply_filters(self, query: Select) -> Select:
        """Apply filters to query"""
        conditions = [Product.is_active.is_(True)]
        
        if self.min_price is not None:
            conditions.append(Product.price >= self.min_price)
        
        if self.max_price is not None:
            conditions.append(Product.price <= self.max_price)
        
        if self.brand:
            conditions.append(Product.brand == self.brand)
        
        if self.category_id:
            conditions.append(Product.category_id == self.category_id)
        
        return query.where(and_(*conditions))
