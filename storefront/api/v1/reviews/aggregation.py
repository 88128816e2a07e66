"""
Rating aggregation and purchase verification
Keeps Product.avg_rating and Product.review_count in step with reviews
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, update
import logging
import uuid

from storefront.models import Order, OrderItem, OrderStatus, Product, Review

logger = logging.getLogger(__name__)

PURCHASED_STATUSES = (OrderStatus.SHIPPED, OrderStatus.DELIVERED)

def round_rating(value) -> Decimal:
    """Round half up to one decimal place"""
    if value is None:
        return Decimal("0.0")
    return Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)

async def recompute_product_rating(db: AsyncSession, product_id: uuid.UUID) -> Tuple[Decimal, int]:
    """
    Recompute the product's rating aggregate from all of its reviews
    
    Pending changes are flushed first so the aggregate sees them.
    With no reviews left both fields go back to zero.
    
    Returns:
        (average rating, review count) written to the product
    """
    await db.flush()
    
    result = await db.execute(
        select(func.avg(Review.rating), func.count(Review.id))
        .where(Review.product_id == product_id)
    )
    average, count = result.one()
    
    avg_rating = round_rating(average) if count else Decimal("0.0")
    review_count = int(count or 0)
    
    await db.execute(
        update(Product)
        .where(Product.id == product_id)
        .values(avg_rating=avg_rating, review_count=review_count)
    )
    
    logger.info(f"Product {product_id} rating recomputed: {avg_rating} from {review_count} reviews")
    return avg_rating, review_count

async def has_verified_purchase(db: AsyncSession, user_id: uuid.UUID, product_id: uuid.UUID) -> bool:
    """True when the user has a shipped or delivered order containing the product"""
    result = await db.execute(
        select(Order.id)
        .join(OrderItem, OrderItem.order_id == Order.id)
        .where(
            Order.user_id == user_id,
            Order.status.in_(PURCHASED_STATUSES),
            OrderItem.product_id == product_id,
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None

async def rating_breakdown(db: AsyncSession, product_id: uuid.UUID) -> dict:
    """Average, total and per-star counts for one product"""
    result = await db.execute(
        select(Review.rating, func.count(Review.id))
        .where(Review.product_id == product_id)
        .group_by(Review.rating)
    )
    per_star = {rating: count for rating, count in result.all()}
    total = sum(per_star.values())
    weighted = sum(rating * count for rating, count in per_star.items())
    average = round_rating(Decimal(weighted) / total) if total else Decimal("0.0")
    
    return {
        "average_rating": float(average),
        "total_reviews": total,
        "five": per_star.get(5, 0),
        "four": per_star.get(4, 0),
        "three": per_star.get(3, 0),
        "two": per_star.get(2, 0),
        "one": per_star.get(1, 0),
    }
