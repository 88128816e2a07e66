"""
Shopping cart model
One cart per user, lines keep the price seen when they were added
"""

from sqlalchemy import Column, Integer, Numeric, ForeignKey, UniqueConstraint, CheckConstraint, Uuid
from sqlalchemy.orm import relationship
from decimal import Decimal

from .base import Base, TimestampedModel, UUIDModel

class Cart(Base, TimestampedModel, UUIDModel):
    """User shopping cart"""
    
    __tablename__ = "carts"
    
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    
    # Relationships
    user = relationship("User", back_populates="cart")
    items = relationship(
        "CartItem",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItem.created_at"
    )
    
    @property
    def total(self) -> Decimal:
        return sum((item.subtotal for item in self.items), Decimal("0"))

class CartItem(Base, TimestampedModel, UUIDModel):
    """Shopping cart line"""
    
    __tablename__ = "cart_items"
    
    cart_id = Column(Uuid(as_uuid=True), ForeignKey("carts.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Uuid(as_uuid=True), ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    price = Column(Numeric(10, 2), nullable=False)  # Price at time of adding
    
    # Relationships
    cart = relationship("Cart", back_populates="items")
    product = relationship("Product")
    
    # Constraints
    __table_args__ = (
        UniqueConstraint("cart_id", "product_id", name="uq_cart_product"),
        CheckConstraint("quantity > 0", name="check_positive_cart_quantity"),
    )
    
    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity
