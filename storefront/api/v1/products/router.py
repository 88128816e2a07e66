"""
Product API routes
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from decimal import Decimal
import uuid

from storefront.core.config import Settings
from storefront.core.database import get_db, get_app_settings
from storefront.api.v1.auth.dependencies import require_admin
from storefront.models import User
from storefront.schemas.response import ApiResponse
from .filters import ProductFilter
from .schemas import ProductCreate, ProductUpdate, StockUpdate, ProductResponse
from .services import ProductService

router = APIRouter()

def _listing(products):
    return ApiResponse.listing([ProductResponse.model_validate(p) for p in products])

@router.get("/", summary="List active products")
async def list_products(db: AsyncSession = Depends(get_db)):
    return _listing(await ProductService(db).list_products())

@router.get("/filtro", summary="Filter products by price range, brand and category")
async def filter_products(
    price_min: Optional[Decimal] = Query(None, ge=0),
    price_max: Optional[Decimal] = Query(None, ge=0),
    brand: Optional[str] = Query(None),
    category_id: Optional[uuid.UUID] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    filters = ProductFilter(
        min_price=price_min,
        max_price=price_max,
        brand=brand,
        category_id=category_id
    )
    return _listing(await ProductService(db).filter_products(filters))

@router.get("/top", summary="Most reviewed products")
async def top_reviewed_products(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings)
):
    return _listing(await ProductService(db).top_reviewed(settings.TOP_REVIEWED_LIMIT))

@router.get("/{product_id}", summary="Get product")
async def get_product(product_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    product = await ProductService(db).get_product(product_id)
    return ApiResponse.ok(ProductResponse.model_validate(product))

@router.post("/", status_code=status.HTTP_201_CREATED, summary="Create product (admin)")
async def create_product(
    data: ProductCreate,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    product = await ProductService(db).create_product(data)
    return ApiResponse.ok(ProductResponse.model_validate(product))

@router.put("/{product_id}", summary="Update product (admin)")
async def update_product(
    product_id: uuid.UUID,
    data: ProductUpdate,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    product = await ProductService(db).update_product(product_id, data)
    return ApiResponse.ok(ProductResponse.model_validate(product))

@router.patch("/{product_id}/stock", summary="Adjust stock (admin)")
async def update_stock(
    product_id: uuid.UUID,
    data: StockUpdate,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    product = await ProductService(db).update_stock(product_id, data)
    return ApiResponse.ok(ProductResponse.model_validate(product))

@router.delete("/{product_id}", summary="Deactivate product (admin)")
async def delete_product(
    product_id: uuid.UUID,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await ProductService(db).deactivate_product(product_id)
    return ApiResponse.deleted("Product deactivated")
