"""Shared fixtures: one application and SQLite database per test"""

import pytest
from httpx import ASGITransport, AsyncClient

from storefront.core.config import Settings
from storefront.core.security import SecurityUtils
from storefront.main import create_app
from storefront.models import Cart, User, UserRole

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-password"

def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}

async def register(client: AsyncClient, name: str, email: str, password: str = "secret123", **extra) -> dict:
    """Register a customer and return its id, token and auth headers"""
    response = await client.post(
        "/api/users/",
        json={"name": name, "email": email, "password": password, **extra}
    )
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    return {"id": data["id"], "token": data["token"], "headers": bearer(data["token"])}

async def create_product(client: AsyncClient, headers: dict, category_id: str, **overrides) -> dict:
    payload = {
        "name": "Mate Imperial",
        "description": "Calabaza forrada en cuero",
        "price": "100.00",
        "stock": 10,
        "category_id": category_id,
        "brand": "Pampa",
    }
    payload.update(overrides)
    response = await client.post("/api/productos/", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]

async def add_to_cart(client: AsyncClient, user: dict, product_id: str, quantity: int = 1):
    return await client.post(
        f"/api/carrito/{user['id']}",
        json={"product_id": product_id, "quantity": quantity},
        headers=user["headers"]
    )

async def place_order(client: AsyncClient, user: dict, payment_method: str = "card"):
    return await client.post(
        "/api/ordenes/",
        json={"payment_method": payment_method},
        headers=user["headers"]
    )

@pytest.fixture
def settings(tmp_path):
    return Settings(
        SECRET_KEY="test-secret-key",
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        ENVIRONMENT="test",
        LOG_LEVEL="WARNING",
    )

@pytest.fixture
async def app(settings):
    application = create_app(settings)
    await application.state.database.create_all()
    yield application
    await application.state.database.drop_all()
    await application.state.database.dispose()

@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

@pytest.fixture
async def db_session(app):
    async with app.state.database.session() as session:
        yield session

@pytest.fixture
async def admin(app, client):
    """Admins cannot self-register, so the record is written directly"""
    async with app.state.database.session() as session:
        user = User(
            name="Admin",
            email=ADMIN_EMAIL,
            password_hash=SecurityUtils.hash_password(ADMIN_PASSWORD),
            role=UserRole.ADMIN,
        )
        user.cart = Cart()
        session.add(user)
    
    response = await client.post(
        "/api/users/login",
        json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
    )
    assert response.status_code == 200, response.text
    data = response.json()["data"]
    return {"id": data["id"], "token": data["token"], "headers": bearer(data["token"])}

@pytest.fixture
async def customer(client):
    return await register(client, "Ana Gomez", "ana@example.com")

@pytest.fixture
async def other_customer(client):
    return await register(client, "Bruno Diaz", "bruno@example.com")

@pytest.fixture
async def category(client, admin):
    response = await client.post(
        "/api/categorias/",
        json={"name": "Mates", "description": "Mates y bombillas"},
        headers=admin["headers"]
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]

@pytest.fixture
async def product(client, admin, category):
    return await create_product(client, admin["headers"], category["id"])
