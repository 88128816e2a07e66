"""
Review service layer
Every write recomputes the reviewed product's rating aggregate in the same transaction
"""

from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
import logging
import uuid

from storefront.core.exceptions import NotFoundException, ForbiddenException, DuplicateReviewException
from storefront.core.security import ensure_owner_or_admin
from storefront.models import Review, Product, Category, User
from .aggregation import recompute_product_rating, has_verified_purchase, rating_breakdown, round_rating
from .schemas import ReviewCreate, ReviewUpdate, ProductReviews, RatingStats, ReviewResponse, TopRatedProduct

logger = logging.getLogger(__name__)

class ReviewService:
    """Review service for business logic"""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    def _review_query(self):
        return select(Review).options(
            selectinload(Review.user),
            selectinload(Review.product).selectinload(Product.category)
        )
    
    async def get_review(self, review_id: uuid.UUID) -> Review:
        result = await self.db.execute(
            self._review_query()
            .where(Review.id == review_id)
            .execution_options(populate_existing=True)
        )
        review = result.scalar_one_or_none()
        if not review:
            raise NotFoundException("Review not found")
        return review
    
    async def list_reviews(self) -> List[Review]:
        result = await self.db.execute(self._review_query().order_by(Review.created_at.desc()))
        return list(result.scalars().all())
    
    async def list_user_reviews(self, user_id: uuid.UUID) -> List[Review]:
        result = await self.db.execute(
            self._review_query()
            .where(Review.user_id == user_id)
            .order_by(Review.created_at.desc())
        )
        return list(result.scalars().all())
    
    async def product_reviews(self, product_id: uuid.UUID) -> ProductReviews:
        """Reviews of one product with average and per-star counts"""
        if await self.db.get(Product, product_id) is None:
            raise NotFoundException("Product not found")
        
        result = await self.db.execute(
            self._review_query()
            .where(Review.product_id == product_id)
            .order_by(Review.created_at.desc())
        )
        reviews = [ReviewResponse.model_validate(r) for r in result.scalars().all()]
        stats = RatingStats(**await rating_breakdown(self.db, product_id))
        return ProductReviews(stats=stats, reviews=reviews)
    
    async def top_rated(self, min_reviews: int, limit: int) -> List[TopRatedProduct]:
        """Active products by average rating, ignoring those under ``min_reviews``"""
        average = func.avg(Review.rating).label("average_rating")
        total = func.count(Review.id).label("total_reviews")
        result = await self.db.execute(
            select(
                Product.id,
                Product.name,
                Product.price,
                Product.image,
                Category.name.label("category_name"),
                average,
                total,
            )
            .select_from(Product)
            .join(Review, Review.product_id == Product.id)
            .outerjoin(Category, Category.id == Product.category_id)
            .where(Product.is_active.is_(True))
            .group_by(Product.id, Product.name, Product.price, Product.image, Category.name)
            .having(func.count(Review.id) >= min_reviews)
            .order_by(average.desc(), total.desc())
            .limit(limit)
        )
        return [
            TopRatedProduct(
                product_id=row.id,
                name=row.name,
                price=row.price,
                image=row.image,
                category_name=row.category_name,
                average_rating=float(round_rating(row.average_rating)),
                total_reviews=row.total_reviews,
            )
            for row in result.all()
        ]
    
    async def create_review(self, user: User, data: ReviewCreate) -> Review:
        """
        Create a review and refresh the product rating
        
        Raises:
            NotFoundException: If the product does not exist
            DuplicateReviewException: If the user already reviewed the product
        """
        product = await self.db.get(Product, data.product_id)
        if not product:
            raise NotFoundException("Product not found")
        
        existing = await self.db.execute(
            select(Review.id).where(Review.user_id == user.id, Review.product_id == product.id)
        )
        if existing.first():
            raise DuplicateReviewException()
        
        review = Review(
            user_id=user.id,
            product_id=product.id,
            rating=data.rating,
            comment=data.comment,
            is_verified=await has_verified_purchase(self.db, user.id, product.id),
        )
        self.db.add(review)
        
        try:
            await recompute_product_rating(self.db, product.id)
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateReviewException()
        
        logger.info(f"Review {review.id} created by user {user.id} for product {product.id}")
        return await self.get_review(review.id)
    
    async def update_review(self, review_id: uuid.UUID, data: ReviewUpdate, current_user: User) -> Review:
        """Author-only partial update"""
        review = await self.get_review(review_id)
        if review.user_id != current_user.id:
            raise ForbiddenException("Not authorized to update this review")
        
        if data.rating is not None:
            review.rating = data.rating
        if data.comment is not None:
            review.comment = data.comment
        
        avg_rating, review_count = await recompute_product_rating(self.db, review.product_id)
        await self.db.commit()
        logger.info(
            f"Review {review_id} updated by user {current_user.id}, "
            f"product {review.product_id} now {avg_rating} from {review_count} reviews"
        )
        return await self.get_review(review_id)
    
    async def delete_review(self, review_id: uuid.UUID, current_user: User) -> None:
        """Author or admin, the product aggregate drops back to zero with the last review"""
        review = await self.get_review(review_id)
        ensure_owner_or_admin(current_user, review.user_id, "delete this review")
        
        product_id = review.product_id
        await self.db.delete(review)
        await recompute_product_rating(self.db, product_id)
        await self.db.commit()
        logger.info(f"Review {review_id} deleted by user {current_user.id}")
