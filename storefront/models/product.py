"""Product model"""

from sqlalchemy import Column, String, Text, Numeric, Integer, Boolean, ForeignKey, Index, CheckConstraint, Uuid
from sqlalchemy.orm import relationship
from decimal import Decimal

from .base import Base, TimestampedModel, UUIDModel

DEFAULT_PRODUCT_IMAGE = "https://via.placeholder.com/300"

class Product(Base, TimestampedModel, UUIDModel):
    """Catalog product with stock and derived rating fields"""
    
    __tablename__ = "products"
    
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False)
    price = Column(Numeric(10, 2), nullable=False, index=True)
    stock = Column(Integer, default=0, nullable=False)
    
    # Categorization
    category_id = Column(Uuid(as_uuid=True), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    brand = Column(String(100), nullable=True, index=True)
    image = Column(String(500), default=DEFAULT_PRODUCT_IMAGE)
    
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    
    # Derived from reviews, never written directly by clients
    avg_rating = Column(Numeric(2, 1), default=Decimal("0"), nullable=False)
    review_count = Column(Integer, default=0, nullable=False)
    
    # Relationships
    category = relationship("Category", back_populates="products")
    reviews = relationship("Review", back_populates="product")
    
    # Constraints
    __table_args__ = (
        CheckConstraint("price >= 0", name="check_non_negative_price"),
        CheckConstraint("stock >= 0", name="check_non_negative_stock"),
        Index("idx_products_category_active", "category_id", "is_active"),
    )
