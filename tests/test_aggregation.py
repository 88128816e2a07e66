"""Rating rounding and aggregation against the database"""

from decimal import Decimal

import pytest

from storefront.api.v1.reviews.aggregation import (
    has_verified_purchase, rating_breakdown, recompute_product_rating, round_rating
)
from storefront.models import (
    Category, Order, OrderItem, OrderStatus, PaymentMethod, Product, Review, User
)

@pytest.mark.parametrize("value,expected", [
    (None, "0.0"),
    (4.25, "4.3"),
    (4.35, "4.4"),
    (4.24, "4.2"),
    (Decimal("3.05"), "3.1"),
    (5, "5.0"),
])
def test_round_rating_half_up(value, expected):
    assert round_rating(value) == Decimal(expected)

@pytest.fixture
async def catalog(db_session):
    category = Category(name="Yerbas")
    product = Product(name="Yerba", description="Con palo", price=Decimal("12.00"), stock=5, category=category)
    users = [
        User(name=f"User {i}", email=f"user{i}@example.com", password_hash="x")
        for i in range(4)
    ]
    db_session.add_all([category, product, *users])
    await db_session.flush()
    return product, users

async def test_recompute_four_reviews_rounds_half_up(db_session, catalog):
    product, users = catalog
    for user, rating in zip(users, (5, 4, 4, 4)):
        db_session.add(Review(user_id=user.id, product_id=product.id, rating=rating, comment="ok"))
    
    avg_rating, count = await recompute_product_rating(db_session, product.id)
    
    assert avg_rating == Decimal("4.3")
    assert count == 4
    
    breakdown = await rating_breakdown(db_session, product.id)
    assert breakdown["average_rating"] == 4.3
    assert breakdown["four"] == 3
    assert breakdown["five"] == 1

async def test_recompute_without_reviews(db_session, catalog):
    product, _ = catalog
    assert await recompute_product_rating(db_session, product.id) == (Decimal("0.0"), 0)

async def test_verified_purchase_needs_shipped_or_delivered(db_session, catalog):
    product, users = catalog
    buyer = users[0]
    order = Order(
        user_id=buyer.id,
        status=OrderStatus.PROCESSING,
        total=Decimal("12.00"),
        payment_method=PaymentMethod.CASH,
        items=[OrderItem(product_id=product.id, product_name="Yerba", quantity=1, price=Decimal("12.00"), subtotal=Decimal("12.00"))],
    )
    db_session.add(order)
    await db_session.flush()
    
    assert not await has_verified_purchase(db_session, buyer.id, product.id)
    
    order.status = OrderStatus.DELIVERED
    await db_session.flush()
    
    assert await has_verified_purchase(db_session, buyer.id, product.id)
    assert not await has_verified_purchase(db_session, users[1].id, product.id)
