"""
Cart Module - Service Layer
==============================
Session cart management: add/update/remove items, totals, stale-cart cleanup.
Every call takes the shopper's session id explicitly.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func

from common.exceptions import ValidationError, NotFoundError, StockError
from common.helpers import money
from modules.cart.models import CartItem
from modules.catalog.service import product_service

logger = logging.getLogger("quickshop.cart")


class CartService:

    def get_cart(self, db: Session, session_id: str) -> List[CartItem]:
        """All lines of a session with their product resolved, newest first."""
        return (
            db.query(CartItem)
            .options(joinedload(CartItem.product))
            .filter(CartItem.session_id == session_id)
            .order_by(CartItem.created_at.desc(), CartItem.id.desc())
            .all()
        )

    def add_item(self, db: Session, session_id: str, product_id: int, quantity: int = 1) -> CartItem:
        """
        Add `quantity` of a product to the cart.
        An existing line for the same product is incremented, never duplicated.
        Raises ValidationError / NotFoundError / StockError.
        """
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1.")

        product = product_service.get_active(db, product_id)
        if not product:
            raise NotFoundError("Product not found.")

        item = self._find_by_product(db, session_id, product_id)
        new_qty = quantity + (item.quantity if item else 0)
        if new_qty > product.available_stock:
            raise StockError(product.available_stock)

        if item:
            item.quantity = new_qty
        else:
            item = CartItem(session_id=session_id, product_id=product_id, quantity=quantity)
            db.add(item)
        db.flush()
        db.refresh(item)
        return item

    def update_quantity(self, db: Session, session_id: str, item_id: int, quantity: int) -> bool:
        """Set a line to an absolute quantity, re-checked against current stock."""
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1.")

        item = self._get_owned(db, session_id, item_id)
        product = item.product
        if product is None:
            raise NotFoundError("Product not found.")

        if quantity > product.available_stock:
            raise StockError(product.available_stock)

        item.quantity = quantity
        db.flush()
        return True

    def remove_item(self, db: Session, session_id: str, item_id: int) -> bool:
        item = self._get_owned(db, session_id, item_id)
        db.delete(item)
        db.flush()
        return True

    def clear(self, db: Session, session_id: str):
        """Remove all items from the session's cart. No-op when empty."""
        db.query(CartItem).filter(CartItem.session_id == session_id).delete(synchronize_session=False)
        db.flush()

    def get_total(self, db: Session, session_id: str) -> Decimal:
        total = Decimal("0")
        for item in self.get_cart(db, session_id):
            if item.product is None:
                continue
            total += item.product.price * item.quantity
        return money(total)

    def get_count(self, db: Session, session_id: str) -> int:
        return db.query(
            func.coalesce(func.sum(CartItem.quantity), 0)
        ).filter(CartItem.session_id == session_id).scalar() or 0

    def purge_stale(self, db: Session, older_than: datetime) -> int:
        """Delete cart lines (abandoned sessions) not touched since `older_than`."""
        count = (
            db.query(CartItem)
            .filter(CartItem.updated_at < older_than)
            .delete(synchronize_session=False)
        )
        db.flush()
        return count

    # ==========================================
    # Private helpers
    # ==========================================

    def _find_by_product(self, db: Session, session_id: str, product_id: int) -> Optional[CartItem]:
        return db.query(CartItem).filter(
            CartItem.session_id == session_id,
            CartItem.product_id == product_id,
        ).first()

    def _get_owned(self, db: Session, session_id: str, item_id: int) -> CartItem:
        item = db.query(CartItem).filter(
            CartItem.id == item_id,
            CartItem.session_id == session_id,
        ).first()
        if not item:
            raise NotFoundError("Cart item not found.")
        return item


# Singleton
cart_service = CartService()
