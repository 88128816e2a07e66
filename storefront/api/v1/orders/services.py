"""
Order service layer
Handles order placement, cancellation, status changes and reporting
"""

from typing import List
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func
from sqlalchemy.orm import selectinload
import logging
import uuid

from storefront.core.exceptions import (
    NotFoundException, EmptyCartException, ProductUnavailableException,
    InsufficientStockException, InvalidStateTransitionException
)
from storefront.core.security import ensure_owner_or_admin
from storefront.models import Order, OrderItem, OrderStatus, User
from storefront.services.inventory import InventoryService
from storefront.api.v1.cart.services import CartService
from .schemas import OrderCreate, OrderStatsResponse, StatusStats, OrderTotals
from .state_machine import OrderStateMachine

logger = logging.getLogger(__name__)

class OrderService:
    """Order service for business logic"""
    
    def __init__(self, db: AsyncSession):
        self.db = db
        self.cart_service = CartService(db)
        self.inventory = InventoryService(db)
        self.state_machine = OrderStateMachine()
    
    def _order_query(self):
        return select(Order).options(
            selectinload(Order.user),
            selectinload(Order.items).selectinload(OrderItem.product)
        )
    
    async def _load_order(self, order_id: uuid.UUID) -> Order:
        result = await self.db.execute(
            self._order_query()
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        order = result.scalar_one_or_none()
        if not order:
            raise NotFoundException("Order not found")
        return order
    
    async def create_order(self, user: User, data: OrderCreate) -> Order:
        """
        Place an order from the user's cart
        
        Every line is validated before anything is written. The order insert,
        the stock decrements and the cart clearing then commit together; a
        stock guard that no longer matches rolls all of them back.
        
        Raises:
            EmptyCartException: If the cart has no lines
            ProductUnavailableException: If a product is missing or inactive
            InsufficientStockException: If a line asks for more than the stock
        """
        cart = await self.cart_service.load_cart(user.id)
        if cart is None or not cart.items:
            raise EmptyCartException()
        
        for item in cart.items:
            product = item.product
            if product is None or not product.is_active:
                raise ProductUnavailableException(product.name if product else None)
            if product.stock < item.quantity:
                raise InsufficientStockException(product.name, product.stock)
        
        order_items = [
            OrderItem(
                product_id=item.product_id,
                product_name=item.product.name,
                quantity=item.quantity,
                price=item.price,
                subtotal=item.price * item.quantity
            )
            for item in cart.items
        ]
        
        shipping_address = (
            data.shipping_address.model_dump() if data.shipping_address else user.address
        )
        
        order = Order(
            user_id=user.id,
            items=order_items,
            total=sum((line.subtotal for line in order_items), Decimal("0")),
            status=OrderStatus.PENDING,
            payment_method=data.payment_method,
            shipping_address=shipping_address,
            notes=data.notes
        )
        
        try:
            self.db.add(order)
            await self.db.flush()
            
            for item in cart.items:
                if not await self.inventory.reserve(item.product_id, item.quantity):
                    raise InsufficientStockException(item.product.name, item.product.stock)
            
            cart.items.clear()
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        
        logger.info(f"Order {order.id} placed by user {user.id}: {len(order_items)} lines, total {order.total}")
        return await self._load_order(order.id)
    
    async def get_order(self, order_id: uuid.UUID, current_user: User) -> Order:
        order = await self._load_order(order_id)
        ensure_owner_or_admin(current_user, order.user_id, "view this order")
        return order
    
    async def list_orders(self) -> List[Order]:
        result = await self.db.execute(
            self._order_query().order_by(Order.created_at.desc())
        )
        return list(result.scalars().all())
    
    async def list_user_orders(self, user_id: uuid.UUID, current_user: User) -> List[Order]:
        ensure_owner_or_admin(current_user, user_id, "view these orders")
        result = await self.db.execute(
            self._order_query()
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc())
        )
        return list(result.scalars().all())
    
    async def _cancel(self, order: Order) -> None:
        """
        Move the order to cancelled and restore its stock
        
        The status update is guarded on the cancellable statuses so two
        concurrent cancellations cannot both restore stock.
        """
        result = await self.db.execute(
            update(Order)
            .where(
                Order.id == order.id,
                Order.status.in_(self.state_machine.cancellable_statuses())
            )
            .values(status=OrderStatus.CANCELLED)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InvalidStateTransitionException(order.status.value, OrderStatus.CANCELLED.value)
        
        for item in order.items:
            await self.inventory.release(item.product_id, item.quantity)
    
    async def cancel_order(self, order_id: uuid.UUID, current_user: User) -> Order:
        """
        Cancel a pending or processing order
        
        Raises:
            InvalidStateTransitionException: If the order is shipped, delivered or cancelled
        """
        order = await self._load_order(order_id)
        ensure_owner_or_admin(current_user, order.user_id, "cancel this order")
        
        if not self.state_machine.is_cancellable(order.status):
            raise InvalidStateTransitionException(order.status.value, OrderStatus.CANCELLED.value)
        
        try:
            await self._cancel(order)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        
        logger.info(f"Order {order_id} cancelled by user {current_user.id}")
        return await self._load_order(order_id)
    
    async def update_status(self, order_id: uuid.UUID, new_status: OrderStatus, current_user: User) -> Order:
        """
        Admin status change along the state machine
        
        Moving to cancelled goes through the same stock restoration as cancel_order.
        """
        order = await self._load_order(order_id)
        
        if not self.state_machine.can_transition(order.status, new_status):
            raise InvalidStateTransitionException(order.status.value, new_status.value)
        
        previous = order.status
        try:
            if new_status == OrderStatus.CANCELLED:
                await self._cancel(order)
            else:
                result = await self.db.execute(
                    update(Order)
                    .where(Order.id == order.id, Order.status == previous)
                    .values(status=new_status)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    raise InvalidStateTransitionException(previous.value, new_status.value)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        
        logger.info(f"Order {order_id} moved from {previous.value} to {new_status.value} by {current_user.id}")
        return await self._load_order(order_id)
    
    async def get_stats(self) -> OrderStatsResponse:
        """Order count and revenue per status plus overall totals"""
        order_count = func.count(Order.id).label("count")
        result = await self.db.execute(
            select(Order.status, order_count, func.coalesce(func.sum(Order.total), 0).label("revenue"))
            .group_by(Order.status)
            .order_by(order_count.desc())
        )
        by_status = [
            StatusStats(status=row.status, count=row.count, revenue=row.revenue)
            for row in result.all()
        ]
        
        total_orders = sum(s.count for s in by_status)
        total_revenue = sum(s.revenue for s in by_status)
        totals = OrderTotals(
            total_orders=total_orders,
            total_revenue=total_revenue,
            average_order=round(total_revenue / total_orders, 2) if total_orders else 0
        )
        return OrderStatsResponse(by_status=by_status, totals=totals)
