"""User registration, login and profile endpoints"""

import uuid

from sqlalchemy import select

from storefront.models import Cart, User
from tests.conftest import bearer, register

async def test_register_creates_customer_with_cart(client, db_session):
    response = await client.post(
        "/api/users/",
        json={"name": "  Ana Gomez ", "email": "Ana@Example.com", "password": "secret123"}
    )
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["data"]["email"] == "ana@example.com"
    assert body["data"]["name"] == "Ana Gomez"
    assert body["data"]["role"] == "customer"
    assert body["data"]["token"]
    assert "password" not in body["data"]
    assert "password_hash" not in body["data"]
    
    user_id = uuid.UUID(body["data"]["id"])
    cart = (await db_session.execute(select(Cart).where(Cart.user_id == user_id))).scalar_one_or_none()
    assert cart is not None

async def test_register_ignores_requested_role(client):
    response = await client.post(
        "/api/users/",
        json={"name": "Eve", "email": "eve@example.com", "password": "secret123", "role": "admin"}
    )
    assert response.status_code == 201
    assert response.json()["data"]["role"] == "customer"

async def test_register_duplicate_email_is_rejected(client, customer):
    response = await client.post(
        "/api/users/",
        json={"name": "Other Ana", "email": "ANA@example.com", "password": "secret123"}
    )
    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "error": "User with email 'ana@example.com' already exists"
    }

async def test_register_short_password(client):
    response = await client.post(
        "/api/users/",
        json={"name": "Short", "email": "short@example.com", "password": "123"}
    )
    assert response.status_code == 400
    assert "at least 6 characters" in response.json()["error"]

async def test_register_missing_fields_uses_error_envelope(client):
    response = await client.post("/api/users/", json={"email": "x@example.com"})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "name" in body["error"]

async def test_usuarios_alias(client):
    response = await client.post(
        "/api/usuarios/",
        json={"name": "Carla", "email": "carla@example.com", "password": "secret123"}
    )
    assert response.status_code == 201

async def test_login(client, customer):
    response = await client.post(
        "/api/users/login",
        json={"email": "ana@example.com", "password": "secret123"}
    )
    assert response.status_code == 200
    assert response.json()["data"]["id"] == customer["id"]

async def test_login_wrong_password(client, customer):
    response = await client.post(
        "/api/users/login",
        json={"email": "ana@example.com", "password": "wrong-password"}
    )
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid credentials"

async def test_login_inactive_user(client, customer, db_session):
    user = await db_session.get(User, uuid.UUID(customer["id"]))
    user.is_active = False
    await db_session.commit()
    
    response = await client.post(
        "/api/users/login",
        json={"email": "ana@example.com", "password": "secret123"}
    )
    assert response.status_code == 401
    assert response.json()["error"] == "User inactive"

async def test_profile(client, customer):
    response = await client.get("/api/users/me", headers=customer["headers"])
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["email"] == "ana@example.com"
    assert "password_hash" not in data

async def test_missing_token(client):
    response = await client.get("/api/users/me")
    assert response.status_code == 401
    assert response.json()["error"] == "Not authorized, token not provided"

async def test_invalid_token(client):
    response = await client.get("/api/users/me", headers=bearer("not-a-jwt"))
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid token"

async def test_token_for_deleted_user(client, admin, customer):
    response = await client.delete(f"/api/users/{customer['id']}", headers=admin["headers"])
    assert response.status_code == 200
    
    response = await client.get("/api/users/me", headers=customer["headers"])
    assert response.status_code == 401
    assert response.json()["error"] == "User not found"

async def test_list_users_requires_admin(client, admin, customer):
    response = await client.get("/api/users/", headers=customer["headers"])
    assert response.status_code == 403
    
    response = await client.get("/api/users/", headers=admin["headers"])
    assert response.status_code == 200
    assert response.json()["count"] == 2

async def test_search_users(client, admin, customer, other_customer):
    response = await client.get("/api/users/buscar", params={"term": "BRUNO"}, headers=admin["headers"])
    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 1
    assert body["data"][0]["email"] == "bruno@example.com"

async def test_search_users_requires_term(client, admin):
    response = await client.get("/api/users/buscar", headers=admin["headers"])
    assert response.status_code == 400

async def test_get_user_owner_or_admin(client, admin, customer, other_customer):
    response = await client.get(f"/api/users/{customer['id']}", headers=customer["headers"])
    assert response.status_code == 200
    
    response = await client.get(f"/api/users/{customer['id']}", headers=other_customer["headers"])
    assert response.status_code == 403
    
    response = await client.get(f"/api/users/{customer['id']}", headers=admin["headers"])
    assert response.status_code == 200

async def test_update_own_profile(client, customer):
    response = await client.put(
        f"/api/users/{customer['id']}",
        json={"name": "Ana Maria", "phone": "+54 11 5555 5555", "address": {"city": "Rosario"}},
        headers=customer["headers"]
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Ana Maria"
    assert data["address"]["city"] == "Rosario"
    assert data["address"]["country"] == "Argentina"

async def test_customer_cannot_change_role(client, customer):
    response = await client.put(
        f"/api/users/{customer['id']}",
        json={"role": "admin"},
        headers=customer["headers"]
    )
    assert response.status_code == 403

async def test_customer_cannot_update_someone_else(client, customer, other_customer):
    response = await client.put(
        f"/api/users/{other_customer['id']}",
        json={"name": "Hacked"},
        headers=customer["headers"]
    )
    assert response.status_code == 403

async def test_admin_can_promote(client, admin, customer):
    response = await client.put(
        f"/api/users/{customer['id']}",
        json={"role": "admin"},
        headers=admin["headers"]
    )
    assert response.status_code == 200
    assert response.json()["data"]["role"] == "admin"

async def test_delete_user_removes_cart(client, admin, customer, db_session):
    response = await client.delete(f"/api/users/{customer['id']}", headers=admin["headers"])
    assert response.status_code == 200
    assert response.json()["message"] == "User and cart deleted"
    
    user_id = uuid.UUID(customer["id"])
    assert await db_session.get(User, user_id) is None
    cart = (await db_session.execute(select(Cart).where(Cart.user_id == user_id))).scalar_one_or_none()
    assert cart is None

async def test_delete_unknown_user(client, admin):
    response = await client.delete(f"/api/users/{uuid.uuid4()}", headers=admin["headers"])
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "User not found"}

async def test_search_treats_wildcards_literally(client, admin, customer, other_customer):
    response = await client.get("/api/users/buscar", params={"term": "%"}, headers=admin["headers"])
    assert response.status_code == 200
    assert response.json()["count"] == 0
    
    response = await client.get("/api/users/buscar", params={"term": "a_a"}, headers=admin["headers"])
    assert response.json()["count"] == 0
    
    await register(client, "snake_case", "snake@example.com")
    response = await client.get("/api/users/buscar", params={"term": "e_c"}, headers=admin["headers"])
    body = response.json()
    assert body["count"] == 1
    assert body["data"][0]["email"] == "snake@example.com"
