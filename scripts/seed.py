"""
QuickShop - Database Seeder
=============================
Seeds sample products and a default admin account.

Usage:
    python scripts/seed.py          # Seed (skips rows that already exist)
    python scripts/seed.py --reset  # Drop all data and reseed

Admin credentials come from SEED_ADMIN_USERNAME / SEED_ADMIN_PASSWORD
(defaults: admin / admin12345).
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.database import SessionLocal, Base, engine
from common.exceptions import ShopError
from modules.admin.models import Admin  # noqa: F401
from modules.catalog.models import Product
from modules.cart.models import CartItem  # noqa: F401
from modules.order.models import Order, OrderItem  # noqa: F401
from modules.auth.service import auth_service
from modules.catalog.service import product_service


SAMPLE_PRODUCTS = [
    ("Laptop Pro 15", "High-performance laptop with 16GB RAM and 512GB SSD", "1299.99", 15),
    ("Wireless Mouse", "Ergonomic wireless mouse with long battery life", "29.99", 50),
    ("Mechanical Keyboard", "RGB backlit mechanical keyboard with blue switches", "89.99", 30),
    ("4K Monitor", "27-inch 4K UHD monitor with HDR support", "399.99", 12),
    ("USB-C Hub", "7-in-1 USB-C hub with HDMI, USB 3.0, and card reader", "49.99", 25),
    ("Webcam HD", "1080p HD webcam with auto-focus and noise cancellation", "79.99", 18),
    ("Noise-Cancelling Headphones", "Premium over-ear headphones with active noise cancellation", "199.99", 20),
    ("SSD 1TB", "NVMe SSD 1TB with read speeds up to 3500MB/s", "129.99", 40),
]


def ensure_tables():
    """Create all tables if they don't exist (safe to call multiple times)."""
    print("[0/2] Ensuring all tables exist...")
    Base.metadata.create_all(bind=engine)
    print("  + All tables OK\n")


def seed():
    ensure_tables()
    db = SessionLocal()
    try:
        # ------------------------------------------
        # 1. Admin
        # ------------------------------------------
        print("[1/2] Admin account...")
        username = os.getenv("SEED_ADMIN_USERNAME", "admin")
        password = os.getenv("SEED_ADMIN_PASSWORD", "admin12345")
        if auth_service.find_by_username(db, username):
            print(f"  = Admin '{username}' already exists")
        else:
            auth_service.create_admin(db, username, password)
            print(f"  + Admin '{username}' created")

        # ------------------------------------------
        # 2. Products
        # ------------------------------------------
        print("[2/2] Sample products...")
        inserted = 0
        for name, description, price, stock in SAMPLE_PRODUCTS:
            if db.query(Product).filter(Product.name == name).first():
                continue
            product_service.create(db, {
                "name": name, "description": description, "price": price, "stock": stock,
            })
            inserted += 1
        print(f"  + Inserted {inserted} new sample products")

        db.commit()
        total = db.query(Product).count()
        print(f"\nSeed completed successfully! Total products in database: {total}")
    except ShopError as e:
        db.rollback()
        print(f"\nSeed failed: {e.message}")
        sys.exit(1)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def reset_and_seed():
    print("Dropping all tables...")
    Base.metadata.drop_all(bind=engine)
    seed()


if __name__ == "__main__":
    if "--reset" in sys.argv:
        confirm = input("This will DROP all data. Type 'yes': ")
        if confirm.strip().lower() != "yes":
            print("Aborted.")
            sys.exit(0)
        reset_and_seed()
    else:
        seed()
