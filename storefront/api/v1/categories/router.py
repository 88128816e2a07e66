"""
Category API router
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from storefront.core.database import get_db
from storefront.api.v1.auth.dependencies import require_admin
from storefront.models import User
from storefront.schemas.response import ApiResponse
from .schemas import CategoryCreate, CategoryUpdate, CategoryResponse
from .services import CategoryService

router = APIRouter()

@router.get("/", summary="List active categories")
async def list_categories(db: AsyncSession = Depends(get_db)):
    categories = await CategoryService(db).list_categories()
    return ApiResponse.listing([CategoryResponse.model_validate(c) for c in categories])

@router.get("/stats", summary="Active products per category (admin)")
async def category_stats(
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    stats, total_products = await CategoryService(db).category_stats()
    return ApiResponse.ok(
        {"categories": stats, "total_products": total_products},
        count=len(stats)
    )

@router.get("/{category_id}", summary="Get category with its products")
async def get_category(category_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    detail = await CategoryService(db).get_category_detail(category_id)
    return ApiResponse.ok(detail)

@router.post("/", status_code=status.HTTP_201_CREATED, summary="Create category (admin)")
async def create_category(
    data: CategoryCreate,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    category = await CategoryService(db).create_category(data)
    return ApiResponse.ok(CategoryResponse.model_validate(category))

@router.put("/{category_id}", summary="Update category (admin)")
async def update_category(
    category_id: uuid.UUID,
    data: CategoryUpdate,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    category = await CategoryService(db).update_category(category_id, data)
    return ApiResponse.ok(CategoryResponse.model_validate(category))

@router.delete("/{category_id}", summary="Delete category (admin)")
async def delete_category(
    category_id: uuid.UUID,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await CategoryService(db).delete_category(category_id)
    return ApiResponse.deleted("Category deleted")
