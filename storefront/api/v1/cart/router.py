"""
Cart API routes
Every route is scoped to one user's cart, open to that user or an admin
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from storefront.core.database import get_db
from storefront.api.v1.auth.dependencies import get_current_user
from storefront.models import User
from storefront.schemas.response import ApiResponse
from .schemas import CartItemCreate, CartItemUpdate, CartResponse
from .services import CartService

router = APIRouter()

@router.get("/{user_id}", summary="Get cart")
async def get_cart(
    user_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    cart = await CartService(db).get_cart(user_id, current_user)
    return ApiResponse.ok(CartResponse.model_validate(cart))

@router.get("/{user_id}/total", summary="Cart totals")
async def get_cart_total(
    user_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    totals = await CartService(db).cart_total(user_id, current_user)
    return ApiResponse.ok(totals)

@router.post("/{user_id}", summary="Add item to cart")
async def add_to_cart(
    user_id: uuid.UUID,
    data: CartItemCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    cart = await CartService(db).add_item(user_id, data, current_user)
    return ApiResponse.ok(CartResponse.model_validate(cart))

@router.put("/{user_id}/item/{product_id}", summary="Update cart item quantity")
async def update_cart_item(
    user_id: uuid.UUID,
    product_id: uuid.UUID,
    data: CartItemUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    cart = await CartService(db).update_item(user_id, product_id, data, current_user)
    return ApiResponse.ok(CartResponse.model_validate(cart))

@router.delete("/{user_id}/item/{product_id}", summary="Remove item from cart")
async def remove_cart_item(
    user_id: uuid.UUID,
    product_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    cart = await CartService(db).remove_item(user_id, product_id, current_user)
    return ApiResponse.ok(CartResponse.model_validate(cart), message="Product removed from cart")

@router.delete("/{user_id}", summary="Clear cart")
async def clear_cart(
    user_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    cart = await CartService(db).clear(user_id, current_user)
    return ApiResponse.ok(CartResponse.model_validate(cart), message="Cart cleared")
