"""
Order API routes
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from storefront.core.database import get_db
from storefront.api.v1.auth.dependencies import get_current_user, require_admin
from storefront.models import User
from storefront.schemas.response import ApiResponse
from .schemas import OrderCreate, OrderStatusUpdate, OrderResponse
from .services import OrderService

router = APIRouter()

@router.post(
    "/",
    status_code=status.HTTP_201_CREATED,
    summary="Create order",
    description="Place an order from the caller's cart"
)
async def create_order(
    data: OrderCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    order = await OrderService(db).create_order(current_user, data)
    return ApiResponse.ok(OrderResponse.model_validate(order))

@router.get("/", summary="List all orders (admin)")
async def list_orders(
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    orders = await OrderService(db).list_orders()
    return ApiResponse.listing([OrderResponse.model_validate(o) for o in orders])

@router.get("/stats", summary="Order statistics (admin)")
async def order_stats(
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    stats = await OrderService(db).get_stats()
    return ApiResponse.ok(stats)

@router.get("/user/{user_id}", summary="Orders of one user")
async def list_user_orders(
    user_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    orders = await OrderService(db).list_user_orders(user_id, current_user)
    return ApiResponse.listing([OrderResponse.model_validate(o) for o in orders])

@router.get("/{order_id}", summary="Get order details")
async def get_order(
    order_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    order = await OrderService(db).get_order(order_id, current_user)
    return ApiResponse.ok(OrderResponse.model_validate(order))

@router.patch("/{order_id}/status", summary="Update order status (admin)")
async def update_order_status(
    order_id: uuid.UUID,
    status_update: OrderStatusUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    order = await OrderService(db).update_status(order_id, status_update.status, current_user)
    return ApiResponse.ok(
        OrderResponse.model_validate(order),
        message=f"Status updated to: {status_update.status.value}"
    )

@router.delete("/{order_id}", summary="Cancel order")
async def cancel_order(
    order_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    order = await OrderService(db).cancel_order(order_id, current_user)
    return ApiResponse.ok(OrderResponse.model_validate(order), message="Order cancelled")
