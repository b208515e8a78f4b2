"""
Checkout Module - Service Layer
=================================
Turns a session cart into an immutable order:
  1. Validate customer data (name, email, address - first failure wins)
  2. Load cart lines (fail if empty)
  3. Re-read and lock every product, authoritative stock check
  4. Snapshot name/price into order lines, compute subtotals and total
  5. Persist order header + lines
  6. Decrement stock
  7. Clear the cart
Steps 2-7 share one transaction: this service only flushes and rolls back
on failure; the caller commits once the order is returned.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from email_validator import validate_email, EmailNotValidError
from sqlalchemy.orm import Session

from common.exceptions import ValidationError, DomainError, StockError
from common.helpers import money
from modules.cart.service import cart_service
from modules.catalog.service import product_service
from modules.order.models import Order
from modules.order.service import order_service

logger = logging.getLogger("quickshop.checkout")


def _clean(value) -> str:
    return str(value).strip() if value is not None else ""


class CheckoutService:

    def validate_customer_data(self, data: dict) -> dict:
        """Return normalised customer fields or raise ValidationError."""
        name = _clean(data.get("name"))
        email = _clean(data.get("email"))
        phone = _clean(data.get("phone"))
        address = _clean(data.get("address"))

        if not name:
            raise ValidationError("Customer name is required.")
        if not email:
            raise ValidationError("Customer email is required.")
        try:
            email = validate_email(email, check_deliverability=False).normalized
        except EmailNotValidError:
            raise ValidationError("Invalid email address.")
        if not address:
            raise ValidationError("Shipping address is required.")

        return {"name": name, "email": email, "phone": phone or None, "address": address}

    def create_order(self, db: Session, session_id: str, customer_data: dict) -> Order:
        """
        Place an order from the session's cart.
        Raises ValidationError, DomainError ("Cart is empty.") or StockError.
        """
        customer = self.validate_customer_data(customer_data or {})

        try:
            order = self._place_order(db, session_id, customer)
        except Exception:
            db.rollback()
            raise

        logger.info(f"Order #{order.id} placed: {len(order.items)} line(s), total {order.total_amount}")
        return order

    def get_order(self, db: Session, order_id: int) -> Optional[Order]:
        return order_service.get_by_id(db, order_id)

    def get_orders_by_session(self, db: Session, session_id: str) -> List[Order]:
        return order_service.get_by_session(db, session_id)

    # ==========================================
    # Private helpers
    # ==========================================

    def _place_order(self, db: Session, session_id: str, customer: dict) -> Order:
        cart_items = cart_service.get_cart(db, session_id)
        if not cart_items:
            raise DomainError("Cart is empty.")

        lines = []
        reserved = []
        total = Decimal("0")

        # Product rows are always locked in id order
        for item in sorted(cart_items, key=lambda i: i.product_id):
            product = product_service.lock_for_update(db, item.product_id) if item.product_id else None
            if product is None:
                raise DomainError("Product not found for cart item.")

            if item.quantity > product.available_stock:
                raise StockError(product.available_stock, product.name)

            subtotal = money(product.price * item.quantity)
            total += subtotal
            lines.append({
                "product_id": product.id,
                "product_name": product.name,
                "product_price": money(product.price),
                "quantity": item.quantity,
                "subtotal": subtotal,
            })
            reserved.append((product, item.quantity))

        order = order_service.create(db, {
            "session_id": session_id,
            "customer_name": customer["name"],
            "customer_email": customer["email"],
            "customer_phone": customer["phone"],
            "shipping_address": customer["address"],
            "total_amount": money(total),
        }, lines)

        for product, qty in reserved:
            product_service.decrement_stock(db, product, qty)

        cart_service.clear(db, session_id)
        return order


# Singleton
checkout_service = CheckoutService()
