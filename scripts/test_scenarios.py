"""
QuickShop - Live Smoke Scenarios
==================================
Runs the main shopper and admin flows against a running server.
Requires a seeded database (python scripts/seed.py) and CSRF enabled or disabled.

Usage:
    python scripts/test_scenarios.py [base_url]
"""
import os
import sys
import httpx

BASE = sys.argv[1] if len(sys.argv) > 1 else "http://127.0.0.1:8000"
ADMIN_USERNAME = os.getenv("SEED_ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin12345")
results = []


def report(test_id, desc, passed, note=""):
    status = "PASS" if passed else "FAIL"
    results.append((test_id, desc, status, note))
    icon = "✅" if passed else "❌"
    print(f"  {icon} {test_id}: {desc} {'- ' + note if note else ''}")


def get_csrf(client, url=None):
    """Get CSRF token by visiting a GET page."""
    if url:
        client.get(url, follow_redirects=True)
    return client.cookies.get("csrf_token", "")


def section(title):
    print("\n" + "=" * 60)
    print(f"  {title}")
    print("=" * 60)


shopper = httpx.Client(base_url=BASE, follow_redirects=False, timeout=15)

# ============================================================
section("TS-01: Catalog")

r = shopper.get("/api/products")
products = r.json() if r.status_code == 200 else []
report("TS-01-01", "Product list loads", r.status_code == 200 and len(products) > 0, f"count={len(products)}")
report("TS-01-02", "Unknown product is 404", shopper.get("/api/products/999999").status_code == 404)
report("TS-01-03", "Anonymous create is 401", shopper.post("/api/products", json={"name": "X", "price": 1}).status_code == 401)

# ============================================================
section("TS-02: Cart")

target = next((p for p in products if p["stock"] >= 2), None)
if target is None:
    print("  No product with stock >= 2, aborting.")
    sys.exit(1)

r = shopper.post("/api/cart", json={"product_id": target["id"], "quantity": 1})
report("TS-02-01", "Add to cart", r.status_code == 201, f"status={r.status_code}")
report("TS-02-02", "Session cookie issued", "shop_session" in shopper.cookies)

shopper.post("/api/cart", json={"product_id": target["id"], "quantity": 1})
cart = shopper.get("/api/cart").json()
report("TS-02-03", "Same product merges into one line", len(cart["items"]) == 1 and cart["count"] == 2)

r = shopper.post("/api/cart", json={"product_id": target["id"], "quantity": target["stock"]})
report("TS-02-04", "Over-stock add is 409", r.status_code == 409, r.json().get("error", ""))

# ============================================================
section("TS-03: Checkout")

r = shopper.post("/api/checkout", json={"name": "Smoke Test", "email": "bad", "address": "Somewhere"})
report("TS-03-01", "Invalid email is 400", r.status_code == 400, r.json().get("error", ""))

r = shopper.post("/api/checkout", json={
    "name": "Smoke Test", "email": "smoke@example.com", "address": "1 Test Street",
})
order = r.json() if r.status_code == 201 else {}
report("TS-03-02", "Order placed", r.status_code == 201, f"order={order.get('id')} total={order.get('total_amount')}")
report("TS-03-03", "Cart cleared after checkout", shopper.get("/api/cart").json()["count"] == 0)

stranger = httpx.Client(base_url=BASE, timeout=15)
r = stranger.get(f"/api/checkout/{order.get('id', 0)}")
report("TS-03-04", "Order hidden from other sessions", r.status_code == 404)
stranger.close()

# ============================================================
section("TS-04: Admin")

admin = httpx.Client(base_url=BASE, follow_redirects=False, timeout=15)
csrf = get_csrf(admin, "/admin/login")
r = admin.post("/admin/login", data={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD, "csrf_token": csrf})
report("TS-04-01", "Admin login", r.status_code == 303, f"redirect={r.headers.get('location', '')}")

r = admin.delete(f"/api/products/{target['id']}")
report("TS-04-02", "Soft delete", r.status_code == 204)
report("TS-04-03", "Deleted product hidden", shopper.get(f"/api/products/{target['id']}").status_code == 404)

r = admin.post(f"/api/products/{target['id']}/restore")
report("TS-04-04", "Restore", r.status_code == 200 and r.json().get("status") == "active")
admin.close()
shopper.close()

# ============================================================
print("\n" + "=" * 60)
passed = sum(1 for r in results if r[2] == "PASS")
print(f"  {passed}/{len(results)} passed")
print("=" * 60)
sys.exit(0 if passed == len(results) else 1)
