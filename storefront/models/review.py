"""
Product review and rating model
"""

from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, Index, UniqueConstraint, CheckConstraint, Uuid
from sqlalchemy.orm import relationship

from .base import Base, TimestampedModel, UUIDModel

class Review(Base, TimestampedModel, UUIDModel):
    """Product reviews and ratings"""
    
    __tablename__ = "reviews"
    
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Uuid(as_uuid=True), ForeignKey("products.id"), nullable=False)
    
    rating = Column(Integer, nullable=False)
    comment = Column(String(500), nullable=False)
    
    # Author had a shipped or delivered order with this product when reviewing
    is_verified = Column(Boolean, default=False, nullable=False)
    
    # Relationships
    user = relationship("User", back_populates="reviews")
    product = relationship("Product", back_populates="reviews")
    
    # Constraints
    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_user_product_review"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="check_rating_range"),
        Index("idx_reviews_product", "product_id"),
    )
