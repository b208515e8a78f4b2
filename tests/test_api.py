"""JSON API: status codes, error bodies, session scoping, admin gating."""

from fastapi.testclient import TestClient

from common.security import SHOP_SESSION_COOKIE
from config.database import SessionLocal
from main import app
from modules.catalog.models import Product

CUSTOMER = {
    "name": "Jane Doe",
    "email": "jane@example.com",
    "address": "1 Main Street, Springfield",
}


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


# ==========================================
# Products
# ==========================================

def test_list_and_get_products(client, seeded):
    r = client.get("/api/products")
    assert r.status_code == 200
    names = [p["name"] for p in r.json()]
    assert names == ["Laptop Pro 15", "Wireless Mouse"]

    r = client.get(f"/api/products/{seeded['a']}")
    assert r.status_code == 200
    assert r.json()["price"] == 100.0

    r = client.get("/api/products/9999")
    assert r.status_code == 404
    assert r.json() == {"error": "Product not found"}


def test_product_writes_require_admin(client, seeded):
    assert client.post("/api/products", json={"name": "X", "price": 1}).status_code == 401
    assert client.put(f"/api/products/{seeded['a']}", json={"name": "X", "price": 1}).status_code == 401
    r = client.delete(f"/api/products/{seeded['a']}")
    assert r.status_code == 401
    assert r.json() == {"error": "login_required"}
    assert client.post(f"/api/products/{seeded['a']}/restore").status_code == 401


def test_admin_product_lifecycle(admin_client):
    r = admin_client.post("/api/products", json={"name": "USB-C Hub", "price": "49.99", "stock": 25})
    assert r.status_code == 201
    pid = r.json()["id"]

    r = admin_client.patch(f"/api/products/{pid}", json={"name": "USB-C Hub 7-in-1", "price": 55})
    assert r.status_code == 200
    assert r.json()["stock"] == 25
    assert r.json()["status"] == "active"

    assert admin_client.delete(f"/api/products/{pid}").status_code == 204
    assert admin_client.get(f"/api/products/{pid}").status_code == 404
    assert pid not in [p["id"] for p in admin_client.get("/api/products").json()]

    r = admin_client.post(f"/api/products/{pid}/restore")
    assert r.status_code == 200
    assert r.json()["status"] == "active"
    assert admin_client.get(f"/api/products/{pid}").json()["name"] == "USB-C Hub 7-in-1"


def test_admin_product_errors(admin_client):
    r = admin_client.post("/api/products", json={"name": "Bad", "price": "abc"})
    assert r.status_code == 400
    assert r.json() == {"error": "Price must be numeric."}

    r = admin_client.put("/api/products/9999", json={"name": "X", "price": 1})
    assert r.status_code == 404
    assert r.json() == {"error": "Product not found."}

    assert admin_client.delete("/api/products/9999").status_code == 404


# ==========================================
# Cart
# ==========================================

def test_session_cookie_issued_once(client):
    r = client.get("/api/cart")
    assert r.status_code == 200
    assert SHOP_SESSION_COOKIE in r.cookies
    assert r.json() == {"items": [], "total": 0.0, "count": 0}

    r = client.get("/api/cart")
    assert SHOP_SESSION_COOKIE not in r.cookies


def test_cart_flow(client, seeded):
    r = client.post("/api/cart", json={"product_id": seeded["a"], "quantity": 2})
    assert r.status_code == 201
    item_id = r.json()["id"]
    assert r.json()["quantity"] == 2

    # Same product again merges into the existing line
    client.post("/api/cart", json={"product_id": seeded["a"]})
    cart = client.get("/api/cart").json()
    assert len(cart["items"]) == 1
    assert cart["count"] == 3
    assert cart["total"] == 300.0

    r = client.patch(f"/api/cart/{item_id}", json={"quantity": 5})
    assert r.status_code == 200
    assert r.json()["count"] == 5

    r = client.put(f"/api/cart/{item_id}", json={"quantity": 11})
    assert r.status_code == 409
    assert r.json() == {"error": "Insufficient stock. Available: 10."}

    assert client.delete(f"/api/cart/{item_id}").status_code == 204
    assert client.get("/api/cart").json()["count"] == 0
    assert client.delete(f"/api/cart/{item_id}").status_code == 404


def test_cart_input_errors(client, seeded):
    r = client.post("/api/cart", json={})
    assert r.status_code == 400
    assert r.json() == {"error": "product_id is required"}

    r = client.post("/api/cart", json={"product_id": "abc"})
    assert r.status_code == 400
    assert r.json() == {"error": "product_id must be an integer"}

    r = client.post("/api/cart", json={"product_id": seeded["a"], "quantity": 0})
    assert r.status_code == 400

    r = client.post("/api/cart", json={"product_id": 9999})
    assert r.status_code == 404

    r = client.post("/api/cart", json=[1, 2])
    assert r.status_code == 400


def test_carts_are_scoped_to_session(client, seeded):
    item_id = client.post("/api/cart", json={"product_id": seeded["b"]}).json()["id"]

    with TestClient(app) as other:
        assert other.get("/api/cart").json()["count"] == 0
        assert other.patch(f"/api/cart/{item_id}", json={"quantity": 2}).status_code == 404
        assert other.delete(f"/api/cart/{item_id}").status_code == 404
        # Clearing their own cart does not touch ours
        assert other.delete("/api/cart").status_code == 204

    assert client.get("/api/cart").json()["count"] == 1


# ==========================================
# Checkout
# ==========================================

def test_checkout_flow(client, seeded):
    client.post("/api/cart", json={"product_id": seeded["a"], "quantity": 2})
    client.post("/api/cart", json={"product_id": seeded["b"], "quantity": 1})

    r = client.post("/api/checkout", json=CUSTOMER)
    assert r.status_code == 201
    order = r.json()
    assert order["total_amount"] == 250.0
    assert len(order["items"]) == 2
    assert order["status"] == "pending"

    assert client.get("/api/cart").json()["count"] == 0
    assert client.get(f"/api/checkout/{order['id']}").json()["id"] == order["id"]
    assert [o["id"] for o in client.get("/api/checkout").json()] == [order["id"]]

    with SessionLocal() as s:
        assert s.get(Product, seeded["a"]).stock == 8
        assert s.get(Product, seeded["b"]).stock == 9

    with TestClient(app) as other:
        assert other.get(f"/api/checkout/{order['id']}").status_code == 404
        assert other.get("/api/checkout").json() == []


def test_checkout_errors(client, seeded):
    r = client.post("/api/checkout", json=CUSTOMER)
    assert r.status_code == 409
    assert r.json() == {"error": "Cart is empty."}

    client.post("/api/cart", json={"product_id": seeded["a"]})
    r = client.post("/api/checkout", json={**CUSTOMER, "email": "not-an-email"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid email address."}

    assert client.get("/api/checkout/9999").status_code == 404


def test_checkout_conflict_when_stock_dropped(client, seeded):
    client.post("/api/cart", json={"product_id": seeded["a"], "quantity": 4})
    with SessionLocal() as s:
        s.get(Product, seeded["a"]).stock = 3
        s.commit()

    r = client.post("/api/checkout", json=CUSTOMER)
    assert r.status_code == 409
    assert r.json() == {"error": "Insufficient stock for Laptop Pro 15. Available: 3."}
    assert client.get("/api/cart").json()["count"] == 4
