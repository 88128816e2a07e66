"""
Category model for product categorization
"""

from sqlalchemy import Column, String, Boolean, Text
from sqlalchemy.orm import relationship

from .base import Base, TimestampedModel, UUIDModel

class Category(Base, TimestampedModel, UUIDModel):
    """Product category"""
    
    __tablename__ = "categories"
    
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    
    # Relationships
    products = relationship("Product", back_populates="category")
