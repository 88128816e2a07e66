"""
User API routes
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import uuid

from storefront.core.config import Settings
from storefront.core.database import get_db, get_app_settings
from storefront.api.v1.auth.dependencies import get_current_user, require_admin
from storefront.models import User
from storefront.schemas.response import ApiResponse
from .schemas import UserRegister, UserLogin, UserUpdate, UserResponse
from .services import UserService

router = APIRouter()

def get_user_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings)
) -> UserService:
    return UserService(db, settings)

@router.post("/", status_code=status.HTTP_201_CREATED, summary="Register user")
async def register(
    data: UserRegister,
    service: UserService = Depends(get_user_service)
):
    """Register a customer account and its cart"""
    auth = await service.register(data)
    return ApiResponse.ok(auth)

@router.post("/login", summary="Login")
async def login(
    data: UserLogin,
    service: UserService = Depends(get_user_service)
):
    auth = await service.login(data)
    return ApiResponse.ok(auth)

@router.get("/me", summary="Current user profile")
async def get_profile(current_user: User = Depends(get_current_user)):
    return ApiResponse.ok(UserResponse.model_validate(current_user))

@router.get("/", summary="List users (admin)")
async def list_users(
    _: User = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    users = await service.list_users()
    return ApiResponse.listing([UserResponse.model_validate(u) for u in users])

@router.get("/buscar", summary="Search users (admin)")
async def search_users(
    term: Optional[str] = Query(None, description="Matched against name and email"),
    _: User = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    users = await service.search_users(term)
    return ApiResponse.listing([UserResponse.model_validate(u) for u in users])

@router.get("/{user_id}", summary="Get user")
async def get_user(
    user_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    user = await service.get_visible_user(user_id, current_user)
    return ApiResponse.ok(UserResponse.model_validate(user))

@router.put("/{user_id}", summary="Update user")
async def update_user(
    user_id: uuid.UUID,
    data: UserUpdate,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    user = await service.update_user(user_id, data, current_user)
    return ApiResponse.ok(UserResponse.model_validate(user))

@router.delete("/{user_id}", summary="Delete user (admin)")
async def delete_user(
    user_id: uuid.UUID,
    _: User = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    await service.delete_user(user_id)
    return ApiResponse.deleted("User and cart deleted")
