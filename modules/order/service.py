"""
Order Module - Service Layer
===============================
Order persistence: header + lines written together, read back with lines.
"""

from typing import List, Optional

from sqlalchemy.orm import Session, selectinload
from sqlalchemy import desc

from modules.order.models import Order, OrderItem, OrderStatus


class OrderService:

    def create(self, db: Session, header: dict, lines: List[dict]) -> Order:
        """
        Insert an order and its lines in one flush.
        Runs inside the caller's transaction; nothing is committed here.
        """
        order = Order(
            session_id=header["session_id"],
            customer_name=header["customer_name"],
            customer_email=header["customer_email"],
            customer_phone=header.get("customer_phone") or None,
            shipping_address=header["shipping_address"],
            total_amount=header["total_amount"],
            status=OrderStatus.PENDING.value,
        )
        for line in lines:
            order.items.append(OrderItem(
                product_id=line["product_id"],
                product_name=line["product_name"],
                product_price=line["product_price"],
                quantity=line["quantity"],
                subtotal=line["subtotal"],
            ))
        db.add(order)
        db.flush()
        db.refresh(order)
        return order

    def get_by_id(self, db: Session, order_id: int) -> Optional[Order]:
        return (
            db.query(Order)
            .options(selectinload(Order.items))
            .filter(Order.id == order_id)
            .first()
        )

    def get_by_session(self, db: Session, session_id: str) -> List[Order]:
        return (
            db.query(Order)
            .options(selectinload(Order.items))
            .filter(Order.session_id == session_id)
            .order_by(desc(Order.created_at), desc(Order.id))
            .all()
        )


# Singleton
order_service = OrderService()
