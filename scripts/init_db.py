"""
QuickShop - Database Initialization
=====================================
Builds the schema straight from the models and stamps Alembic at head,
so later `alembic upgrade head` runs start from the right revision.

Usage:
    python scripts/init_db.py            # create missing tables + stamp head
    python scripts/init_db.py --drop     # drop everything first (asks to confirm)
    python scripts/init_db.py --no-stamp # skip the Alembic stamp
"""

import os
import sys

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, ROOT)

from sqlalchemy import inspect

from config.database import Base, engine
from modules.admin.models import Admin  # noqa
from modules.catalog.models import Product  # noqa
from modules.cart.models import CartItem  # noqa
from modules.order.models import Order, OrderItem  # noqa


def stamp_head():
    from alembic import command
    from alembic.config import Config

    cfg = Config(os.path.join(ROOT, "alembic.ini"))
    cfg.set_main_option("script_location", os.path.join(ROOT, "alembic"))
    command.stamp(cfg, "head")
    print("Alembic stamped at head.")


def init_db(drop_first: bool = False, stamp: bool = True):
    if drop_first:
        Base.metadata.drop_all(bind=engine)
        print("Dropped all QuickShop tables.")

    existing = set(inspect(engine).get_table_names())
    Base.metadata.create_all(bind=engine)
    tables = sorted(Base.metadata.tables)

    for name in tables:
        state = "exists" if name in existing else "created"
        print(f"  {name:<12} {state}")

    if stamp:
        stamp_head()
    print(f"\nSchema ready ({len(tables)} tables).")


if __name__ == "__main__":
    args = set(sys.argv[1:])
    drop = "--drop" in args
    if drop and input("Drop ALL QuickShop tables? Type 'yes': ").strip().lower() != "yes":
        print("Aborted.")
        sys.exit(0)
    init_db(drop_first=drop, stamp="--no-stamp" not in args)
