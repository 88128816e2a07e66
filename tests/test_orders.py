"""Order placement, cancellation and status changes"""

import uuid

from sqlalchemy import update

from storefront.api.v1.orders.services import OrderService
from storefront.models import Order, OrderStatus
from storefront.services.inventory import InventoryService
from tests.conftest import add_to_cart, create_product, place_order, register

async def _stock(client, product_id):
    response = await client.get(f"/api/productos/{product_id}")
    return response.json()["data"]["stock"]

async def _advance(client, admin, order_id, *statuses):
    for status in statuses:
        response = await client.patch(
            f"/api/ordenes/{order_id}/status",
            json={"status": status},
            headers=admin["headers"]
        )
        assert response.status_code == 200, response.text
    return response

async def test_place_order_from_cart(client, admin, customer, category):
    product_a = await create_product(client, admin["headers"], category["id"], name="A", price="10.00", stock=5)
    product_b = await create_product(client, admin["headers"], category["id"], name="B", price="5.00", stock=5)
    await add_to_cart(client, customer, product_a["id"], 2)
    await add_to_cart(client, customer, product_b["id"], 1)
    
    response = await place_order(client, customer, "mercadopago")
    assert response.status_code == 201
    order = response.json()["data"]
    assert order["total"] == 25.0
    assert order["status"] == "pending"
    assert order["payment_method"] == "mercadopago"
    assert order["user"]["email"] == "ana@example.com"
    subtotals = {line["product_name"]: line["subtotal"] for line in order["items"]}
    assert subtotals == {"A": 20.0, "B": 5.0}
    
    assert await _stock(client, product_a["id"]) == 3
    assert await _stock(client, product_b["id"]) == 4
    
    response = await client.get(f"/api/carrito/{customer['id']}", headers=customer["headers"])
    assert response.json()["data"]["items"] == []

async def test_order_lines_are_snapshots(client, admin, customer, product):
    await add_to_cart(client, customer, product["id"], 1)
    order = (await place_order(client, customer)).json()["data"]
    
    await client.put(
        f"/api/productos/{product['id']}",
        json={"name": "Renamed", "price": "999.00"},
        headers=admin["headers"]
    )
    
    response = await client.get(f"/api/ordenes/{order['id']}", headers=customer["headers"])
    line = response.json()["data"]["items"][0]
    assert line["product_name"] == "Mate Imperial"
    assert line["price"] == 100.0
    assert response.json()["data"]["total"] == 100.0

async def test_shipping_address_defaults_to_profile(client, product):
    user = await register(client, "Dora", "dora@example.com", address={"street": "Calle 1", "city": "Cordoba"})
    await add_to_cart(client, user, product["id"], 1)
    order = (await place_order(client, user)).json()["data"]
    assert order["shipping_address"]["city"] == "Cordoba"

async def test_empty_cart_cannot_be_ordered(client, customer):
    response = await place_order(client, customer)
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "The cart is empty"}

async def test_invalid_payment_method(client, customer, product):
    await add_to_cart(client, customer, product["id"], 1)
    response = await place_order(client, customer, "bitcoin")
    assert response.status_code == 400

async def test_inactive_product_blocks_order(client, admin, customer, product):
    await add_to_cart(client, customer, product["id"], 1)
    await client.delete(f"/api/productos/{product['id']}", headers=admin["headers"])
    
    response = await place_order(client, customer)
    assert response.status_code == 400
    assert response.json()["error"] == "Product Mate Imperial is not available"
    
    response = await client.get(f"/api/carrito/{customer['id']}", headers=customer["headers"])
    assert len(response.json()["data"]["items"]) == 1

async def test_insufficient_stock_writes_nothing(client, admin, customer, category):
    plenty = await create_product(client, admin["headers"], category["id"], name="Plenty", stock=10)
    scarce = await create_product(client, admin["headers"], category["id"], name="Scarce", stock=3)
    await add_to_cart(client, customer, plenty["id"], 2)
    await add_to_cart(client, customer, scarce["id"], 3)
    await client.patch(
        f"/api/productos/{scarce['id']}/stock",
        json={"quantity": 1, "operation": "set"},
        headers=admin["headers"]
    )
    
    response = await place_order(client, customer)
    assert response.status_code == 400
    assert response.json()["error"] == "Insufficient stock for Scarce. Available: 1"
    
    assert await _stock(client, plenty["id"]) == 10
    assert await _stock(client, scarce["id"]) == 1
    response = await client.get(f"/api/ordenes/user/{customer['id']}", headers=customer["headers"])
    assert response.json()["count"] == 0

async def test_cancel_pending_order_restores_stock(client, admin, customer, other_customer, category):
    product_a = await create_product(client, admin["headers"], category["id"], name="A", stock=5)
    product_b = await create_product(client, admin["headers"], category["id"], name="B", stock=5)
    await add_to_cart(client, customer, product_a["id"], 2)
    await add_to_cart(client, customer, product_b["id"], 3)
    order = (await place_order(client, customer)).json()["data"]
    
    await add_to_cart(client, other_customer, product_a["id"], 1)
    other_order = (await place_order(client, other_customer)).json()["data"]
    
    response = await client.delete(f"/api/ordenes/{order['id']}", headers=customer["headers"])
    assert response.status_code == 200
    assert response.json()["message"] == "Order cancelled"
    assert response.json()["data"]["status"] == "cancelled"
    
    assert await _stock(client, product_a["id"]) == 4
    assert await _stock(client, product_b["id"]) == 5
    
    response = await client.get(f"/api/ordenes/{other_order['id']}", headers=other_customer["headers"])
    assert response.json()["data"]["status"] == "pending"

async def test_cancel_twice_fails(client, customer, product):
    await add_to_cart(client, customer, product["id"], 2)
    order = (await place_order(client, customer)).json()["data"]
    await client.delete(f"/api/ordenes/{order['id']}", headers=customer["headers"])
    
    response = await client.delete(f"/api/ordenes/{order['id']}", headers=customer["headers"])
    assert response.status_code == 400
    assert await _stock(client, product["id"]) == 10

async def test_cancel_shipped_order_fails(client, admin, customer, product):
    await add_to_cart(client, customer, product["id"], 2)
    order = (await place_order(client, customer)).json()["data"]
    await _advance(client, admin, order["id"], "processing", "shipped")
    
    response = await client.delete(f"/api/ordenes/{order['id']}", headers=customer["headers"])
    assert response.status_code == 400
    assert response.json()["error"] == "Cannot move an order from shipped to cancelled"
    
    assert await _stock(client, product["id"]) == 8
    response = await client.get(f"/api/ordenes/{order['id']}", headers=customer["headers"])
    assert response.json()["data"]["status"] == "shipped"

async def test_cancel_someone_elses_order(client, customer, other_customer, product):
    await add_to_cart(client, customer, product["id"], 1)
    order = (await place_order(client, customer)).json()["data"]
    
    response = await client.delete(f"/api/ordenes/{order['id']}", headers=other_customer["headers"])
    assert response.status_code == 403

async def test_admin_status_follows_state_machine(client, admin, customer, product):
    await add_to_cart(client, customer, product["id"], 1)
    order = (await place_order(client, customer)).json()["data"]
    
    response = await client.patch(
        f"/api/ordenes/{order['id']}/status",
        json={"status": "delivered"},
        headers=admin["headers"]
    )
    assert response.status_code == 400
    
    response = await _advance(client, admin, order["id"], "processing", "shipped", "delivered")
    assert response.json()["message"] == "Status updated to: delivered"
    assert response.json()["data"]["status"] == "delivered"

async def test_admin_cancel_through_status_restores_stock(client, admin, customer, product):
    await add_to_cart(client, customer, product["id"], 4)
    order = (await place_order(client, customer)).json()["data"]
    await _advance(client, admin, order["id"], "processing", "cancelled")
    assert await _stock(client, product["id"]) == 10

async def test_status_update_requires_admin(client, customer, product):
    await add_to_cart(client, customer, product["id"], 1)
    order = (await place_order(client, customer)).json()["data"]
    response = await client.patch(
        f"/api/ordenes/{order['id']}/status",
        json={"status": "processing"},
        headers=customer["headers"]
    )
    assert response.status_code == 403

async def test_order_visibility(client, admin, customer, other_customer, product):
    await add_to_cart(client, customer, product["id"], 1)
    order = (await place_order(client, customer)).json()["data"]
    
    response = await client.get(f"/api/ordenes/{order['id']}", headers=other_customer["headers"])
    assert response.status_code == 403
    response = await client.get(f"/api/ordenes/user/{customer['id']}", headers=other_customer["headers"])
    assert response.status_code == 403
    
    response = await client.get(f"/api/ordenes/user/{customer['id']}", headers=customer["headers"])
    assert response.json()["count"] == 1
    response = await client.get("/api/ordenes/", headers=admin["headers"])
    assert response.json()["count"] == 1
    response = await client.get("/api/ordenes/", headers=customer["headers"])
    assert response.status_code == 403

async def test_unknown_order(client, customer):
    response = await client.get(f"/api/ordenes/{uuid.uuid4()}", headers=customer["headers"])
    assert response.status_code == 404

async def test_order_stats(client, admin, customer, category):
    cheap = await create_product(client, admin["headers"], category["id"], name="Cheap", price="10.00")
    dear = await create_product(client, admin["headers"], category["id"], name="Dear", price="30.00")
    
    await add_to_cart(client, customer, cheap["id"], 1)
    first = (await place_order(client, customer)).json()["data"]
    await add_to_cart(client, customer, dear["id"], 1)
    await place_order(client, customer)
    await _advance(client, admin, first["id"], "processing")
    
    response = await client.get("/api/ordenes/stats", headers=admin["headers"])
    assert response.status_code == 200
    data = response.json()["data"]
    by_status = {s["status"]: (s["count"], s["revenue"]) for s in data["by_status"]}
    assert by_status == {"pending": (1, 30.0), "processing": (1, 10.0)}
    assert data["totals"] == {"total_orders": 2, "total_revenue": 40.0, "average_order": 20.0}

async def test_stock_never_negative_across_orders(client, admin, customer, other_customer, category):
    item = await create_product(client, admin["headers"], category["id"], name="Last units", stock=3)
    await add_to_cart(client, customer, item["id"], 2)
    await add_to_cart(client, other_customer, item["id"], 2)
    
    assert (await place_order(client, customer)).status_code == 201
    response = await place_order(client, other_customer)
    assert response.status_code == 400
    assert await _stock(client, item["id"]) == 1

async def test_failed_stock_guard_rolls_back_placement(client, admin, customer, category, monkeypatch):
    first = await create_product(client, admin["headers"], category["id"], name="First", stock=5)
    second = await create_product(client, admin["headers"], category["id"], name="Second", stock=5)
    await add_to_cart(client, customer, first["id"], 2)
    await add_to_cart(client, customer, second["id"], 3)
    
    original_reserve = InventoryService.reserve
    calls = []
    
    async def reserve_then_fail(self, product_id, quantity, require_active=True):
        calls.append(product_id)
        if len(calls) == 2:
            return False
        return await original_reserve(self, product_id, quantity, require_active)
    
    monkeypatch.setattr(InventoryService, "reserve", reserve_then_fail)
    
    response = await place_order(client, customer)
    assert response.status_code == 400
    assert response.json()["error"].startswith("Insufficient stock for")
    assert len(calls) == 2
    
    # the first line was decremented before the guard missed
    assert await _stock(client, first["id"]) == 5
    assert await _stock(client, second["id"]) == 5
    response = await client.get("/api/ordenes/", headers=admin["headers"])
    assert response.json()["count"] == 0
    response = await client.get(f"/api/carrito/{customer['id']}", headers=customer["headers"])
    assert len(response.json()["data"]["items"]) == 2

async def test_cancel_status_guard_miss_restores_nothing(client, admin, customer, product, monkeypatch):
    await add_to_cart(client, customer, product["id"], 2)
    order = (await place_order(client, customer)).json()["data"]
    
    original_load = OrderService._load_order
    
    async def load_then_ship(self, order_id):
        # the order moves to shipped between the read and the guarded update
        loaded = await original_load(self, order_id)
        await self.db.execute(
            update(Order)
            .where(Order.id == order_id)
            .values(status=OrderStatus.SHIPPED)
            .execution_options(synchronize_session=False)
        )
        return loaded
    
    monkeypatch.setattr(OrderService, "_load_order", load_then_ship)
    response = await client.delete(f"/api/ordenes/{order['id']}", headers=customer["headers"])
    monkeypatch.undo()
    
    assert response.status_code == 400
    assert response.json()["error"] == "Cannot move an order from pending to cancelled"
    assert await _stock(client, product["id"]) == 8
    response = await client.get(f"/api/ordenes/{order['id']}", headers=customer["headers"])
    assert response.json()["data"]["status"] == "pending"
