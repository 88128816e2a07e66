"""
Review API routes
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import uuid

from storefront.core.config import Settings
from storefront.core.database import get_db, get_app_settings
from storefront.api.v1.auth.dependencies import get_current_user
from storefront.models import User
from storefront.schemas.response import ApiResponse
from .schemas import ReviewCreate, ReviewUpdate, ReviewResponse
from .services import ReviewService

router = APIRouter()

def _listing(reviews):
    return ApiResponse.listing([ReviewResponse.model_validate(r) for r in reviews])

@router.get("/", summary="List all reviews")
async def list_reviews(db: AsyncSession = Depends(get_db)):
    return _listing(await ReviewService(db).list_reviews())

@router.get("/top", summary="Top rated products")
async def top_rated(
    min_reviews: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings)
):
    products = await ReviewService(db).top_rated(min_reviews, limit or settings.TOP_RATED_LIMIT)
    return ApiResponse.listing(products)

@router.get("/product/{product_id}", summary="Reviews of a product with rating stats")
async def product_reviews(product_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    result = await ReviewService(db).product_reviews(product_id)
    return ApiResponse.ok(result, count=len(result.reviews))

@router.get("/me/all", summary="Reviews written by the current user")
async def my_reviews(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return _listing(await ReviewService(db).list_user_reviews(current_user.id))

@router.get("/{review_id}", summary="Get review")
async def get_review(review_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    review = await ReviewService(db).get_review(review_id)
    return ApiResponse.ok(ReviewResponse.model_validate(review))

@router.post("/", status_code=status.HTTP_201_CREATED, summary="Create review")
async def create_review(
    data: ReviewCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Verified when the author has a shipped or delivered order with the product"""
    review = await ReviewService(db).create_review(current_user, data)
    return ApiResponse.ok(ReviewResponse.model_validate(review))

@router.put("/{review_id}", summary="Update own review")
async def update_review(
    review_id: uuid.UUID,
    data: ReviewUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    review = await ReviewService(db).update_review(review_id, data, current_user)
    return ApiResponse.ok(ReviewResponse.model_validate(review))

@router.delete("/{review_id}", summary="Delete review (author or admin)")
async def delete_review(
    review_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await ReviewService(db).delete_review(review_id, current_user)
    return ApiResponse.deleted("Review deleted")
