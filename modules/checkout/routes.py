"""
Checkout Module - JSON API
============================
Place an order from the session cart, read back the session's orders.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from config.database import get_db
from modules.auth.deps import get_session_id
from modules.checkout.service import checkout_service

router = APIRouter(prefix="/api/checkout", tags=["checkout"])


@router.post("")
async def create_order(
    data: Optional[Dict[str, Any]] = None,
    db: Session = Depends(get_db),
    session_id: str = Depends(get_session_id),
):
    order = checkout_service.create_order(db, session_id, data or {})
    db.commit()
    order = checkout_service.get_order(db, order.id)
    return JSONResponse(order.to_dict(), status_code=201)


@router.get("")
async def list_orders(db: Session = Depends(get_db), session_id: str = Depends(get_session_id)):
    return [o.to_dict() for o in checkout_service.get_orders_by_session(db, session_id)]


@router.get("/{order_id}")
async def get_order(order_id: int, db: Session = Depends(get_db), session_id: str = Depends(get_session_id)):
    order = checkout_service.get_order(db, order_id)
    # Other sessions' orders are reported as missing
    if not order or order.session_id != session_id:
        raise HTTPException(404, "Order not found")
    return order.to_dict()
