"""
Catalog Module - Service Layer
================================
Product CRUD plus soft-delete / restore.

Two query variants are kept apart on purpose:
  - *_active: customer-facing, never returns soft-deleted rows
  - *_all / get_any: admin-facing, includes soft-deleted rows
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from common.exceptions import ValidationError, NotFoundError, DomainError
from common.helpers import now_utc, safe_decimal, safe_int, money
from modules.catalog.models import Product

logger = logging.getLogger("quickshop.catalog")


def _active_query(db: Session):
    return db.query(Product).filter(Product.deleted_at.is_(None))


class ProductService:

    # ==========================================
    # Query
    # ==========================================

    def list_active(self, db: Session) -> List[Product]:
        return _active_query(db).order_by(Product.id.asc()).all()

    def list_all(self, db: Session) -> List[Product]:
        return db.query(Product).order_by(Product.id.asc()).all()

    def get_active(self, db: Session, product_id: int) -> Optional[Product]:
        return _active_query(db).filter(Product.id == product_id).first()

    def get_any(self, db: Session, product_id: int) -> Optional[Product]:
        return db.query(Product).filter(Product.id == product_id).first()

    def is_deleted(self, db: Session, product_id: int) -> bool:
        p = self.get_any(db, product_id)
        return bool(p and p.is_deleted)

    # ==========================================
    # Create / Update
    # ==========================================

    def create(self, db: Session, data: dict) -> Product:
        name, description, price, stock = self._validate(data)
        product = Product(
            name=name,
            description=description or "",
            price=price,
            stock=stock if stock is not None else 0,
        )
        db.add(product)
        db.flush()
        db.refresh(product)
        logger.info(f"Product #{product.id} created: {product.name}")
        return product

    def update(self, db: Session, product_id: int, data: dict) -> Product:
        """
        Update a product (active or soft-deleted).
        name and price are required on every call; description and stock
        keep their previous values when not supplied.
        """
        p = self.get_any(db, product_id)
        if not p:
            raise NotFoundError("Product not found.")

        name, description, price, stock = self._validate(data)
        p.name = name
        if description is not None:
            p.description = description
        p.price = price
        if stock is not None:
            p.stock = stock
        db.flush()
        return p

    # ==========================================
    # Soft Delete / Restore
    # ==========================================

    def soft_delete(self, db: Session, product_id: int) -> Product:
        """Mark a product deleted. Already-deleted products keep their original timestamp."""
        p = self.get_any(db, product_id)
        if not p:
            raise NotFoundError("Product not found.")
        if p.deleted_at is None:
            p.deleted_at = now_utc()
            db.flush()
            logger.info(f"Product #{p.id} soft-deleted")
        return p

    def restore(self, db: Session, product_id: int) -> Product:
        p = self.get_any(db, product_id)
        if not p:
            raise NotFoundError("Product not found.")
        if p.deleted_at is not None:
            p.deleted_at = None
            db.flush()
            logger.info(f"Product #{p.id} restored")
        return p

    # ==========================================
    # Stock (used by checkout)
    # ==========================================

    def lock_for_update(self, db: Session, product_id: int) -> Optional[Product]:
        """Re-read a product row with a write lock (no-op lock on SQLite)."""
        return (
            db.query(Product)
            .filter(Product.id == product_id)
            .populate_existing()
            .with_for_update()
            .first()
        )

    def decrement_stock(self, db: Session, product: Product, quantity: int):
        if quantity > product.stock:
            raise DomainError(f"Stock of {product.name} would go negative.")
        product.stock = product.stock - quantity
        db.flush()

    # ==========================================
    # Private helpers
    # ==========================================

    def _validate(self, data: dict):
        name = str(data.get("name") or "").strip()
        if not name:
            raise ValidationError("Name is required.")

        raw_price = data.get("price")
        price = safe_decimal(raw_price) if raw_price not in (None, "") else None
        if price is None:
            raise ValidationError("Price must be numeric.")
        if price < 0:
            raise ValidationError("Price cannot be negative.")

        description = data.get("description")
        if description is not None:
            description = str(description).strip()

        stock = None
        raw_stock = data.get("stock")
        if raw_stock not in (None, ""):
            stock = safe_int(raw_stock)
            if stock is None:
                raise ValidationError("Stock must be an integer.")
            if stock < 0:
                raise ValidationError("Stock cannot be negative.")

        return name, description, money(price), stock


# Singleton
product_service = ProductService()
