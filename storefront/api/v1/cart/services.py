"""
Cart service layer
Handles shopping cart business logic
"""

from typing import Optional
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
import logging
import uuid

from storefront.core.exceptions import NotFoundException, InsufficientStockException
from storefront.core.security import ensure_owner_or_admin
from storefront.models import Cart, CartItem, Product, User
from .schemas import CartItemCreate, CartItemUpdate, CartTotalResponse, CartTotalLine

logger = logging.getLogger(__name__)

class CartService:
    """Shopping cart service"""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def load_cart(self, user_id: uuid.UUID) -> Optional[Cart]:
        """Load a user's cart with line products and their categories"""
        result = await self.db.execute(
            select(Cart)
            .options(
                selectinload(Cart.items)
                .selectinload(CartItem.product)
                .selectinload(Product.category)
            )
            .where(Cart.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()
    
    async def _require_cart(self, user_id: uuid.UUID) -> Cart:
        cart = await self.load_cart(user_id)
        if cart is None:
            raise NotFoundException("Cart not found")
        return cart
    
    async def get_cart(self, user_id: uuid.UUID, current_user: User) -> Cart:
        ensure_owner_or_admin(current_user, user_id, "view this cart")
        return await self._require_cart(user_id)
    
    async def cart_total(self, user_id: uuid.UUID, current_user: User) -> CartTotalResponse:
        """Total, line count and unit count from the stored price snapshots"""
        ensure_owner_or_admin(current_user, user_id, "view this cart")
        cart = await self.load_cart(user_id)
        if cart is None or not cart.items:
            return CartTotalResponse()
        
        lines = [
            CartTotalLine(
                product_id=item.product_id,
                quantity=item.quantity,
                price=item.price,
                subtotal=item.subtotal
            )
            for item in cart.items
        ]
        return CartTotalResponse(
            total=cart.total,
            line_count=len(lines),
            total_quantity=sum(item.quantity for item in cart.items),
            items=lines
        )
    
    async def add_item(self, user_id: uuid.UUID, data: CartItemCreate, current_user: User) -> Cart:
        """
        Add a product to the cart
        
        An existing line for the same product is merged: the stock check runs
        against the merged quantity and the price snapshot is refreshed.
        
        Raises:
            NotFoundException: If product not found or inactive
            InsufficientStockException: If not enough stock
        """
        ensure_owner_or_admin(current_user, user_id, "modify this cart")
        
        product = await self.db.get(Product, data.product_id)
        if not product or not product.is_active:
            raise NotFoundException("Product not found or unavailable")
        
        if product.stock < data.quantity:
            raise InsufficientStockException(product.name, product.stock)
        
        cart = await self.load_cart(user_id)
        if cart is None:
            if await self.db.get(User, user_id) is None:
                raise NotFoundException("User not found")
            cart = Cart(user_id=user_id, items=[])
            self.db.add(cart)
        
        existing_item = next((item for item in cart.items if item.product_id == product.id), None)
        
        if existing_item:
            new_quantity = existing_item.quantity + data.quantity
            if product.stock < new_quantity:
                raise InsufficientStockException(product.name, product.stock)
            existing_item.quantity = new_quantity
            existing_item.price = product.price
        else:
            cart.items.append(
                CartItem(product_id=product.id, quantity=data.quantity, price=product.price)
            )
        
        await self.db.commit()
        return await self._require_cart(user_id)
    
    async def update_item(
        self,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
        data: CartItemUpdate,
        current_user: User
    ) -> Cart:
        """Set an explicit quantity on an existing line and refresh its price"""
        ensure_owner_or_admin(current_user, user_id, "modify this cart")
        
        product = await self.db.get(Product, product_id)
        if not product:
            raise NotFoundException("Product not found")
        
        if product.stock < data.quantity:
            raise InsufficientStockException(product.name, product.stock)
        
        cart = await self.load_cart(user_id)
        item = next((i for i in cart.items if i.product_id == product_id), None) if cart else None
        if item is None:
            raise NotFoundException("Cart or product not found")
        
        item.quantity = data.quantity
        item.price = product.price
        
        await self.db.commit()
        return await self._require_cart(user_id)
    
    async def remove_item(self, user_id: uuid.UUID, product_id: uuid.UUID, current_user: User) -> Cart:
        ensure_owner_or_admin(current_user, user_id, "modify this cart")
        cart = await self._require_cart(user_id)
        
        cart.items = [item for item in cart.items if item.product_id != product_id]
        
        await self.db.commit()
        return await self._require_cart(user_id)
    
    async def clear(self, user_id: uuid.UUID, current_user: User) -> Cart:
        ensure_owner_or_admin(current_user, user_id, "modify this cart")
        cart = await self._require_cart(user_id)
        
        cart.items.clear()
        
        await self.db.commit()
        logger.info(f"Cart of user {user_id} cleared")
        return await self._require_cart(user_id)
