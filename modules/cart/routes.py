"""
Cart Module - JSON API
========================
Session cart for AJAX clients. The session id always comes from the
signed session cookie, never from the request body.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from config.database import get_db
from common.exceptions import ValidationError
from common.helpers import safe_int
from modules.auth.deps import get_session_id
from modules.cart.service import cart_service

router = APIRouter(prefix="/api/cart", tags=["cart"])


def cart_snapshot(db: Session, session_id: str) -> dict:
    items = cart_service.get_cart(db, session_id)
    return {
        "items": [it.to_dict() for it in items],
        "total": float(cart_service.get_total(db, session_id)),
        "count": cart_service.get_count(db, session_id),
    }


def _int_field(data: dict, key: str, default: int = None) -> int:
    if key not in data or data[key] in (None, ""):
        if default is not None:
            return default
        raise ValidationError(f"{key} is required")
    value = safe_int(data[key])
    if value is None:
        raise ValidationError(f"{key} must be an integer")
    return value


@router.get("")
async def get_cart(db: Session = Depends(get_db), session_id: str = Depends(get_session_id)):
    return cart_snapshot(db, session_id)


@router.post("")
async def add_item(
    data: Optional[Dict[str, Any]] = None,
    db: Session = Depends(get_db),
    session_id: str = Depends(get_session_id),
):
    data = data or {}
    product_id = _int_field(data, "product_id")
    quantity = _int_field(data, "quantity", default=1)

    item = cart_service.add_item(db, session_id, product_id, quantity)
    db.commit()
    return JSONResponse(item.to_dict(), status_code=201)


@router.api_route("/{item_id}", methods=["PUT", "PATCH"])
async def update_item(
    item_id: int,
    data: Optional[Dict[str, Any]] = None,
    db: Session = Depends(get_db),
    session_id: str = Depends(get_session_id),
):
    quantity = _int_field(data or {}, "quantity")
    cart_service.update_quantity(db, session_id, item_id, quantity)
    db.commit()
    return cart_snapshot(db, session_id)


@router.delete("/{item_id}", status_code=204)
async def remove_item(item_id: int, db: Session = Depends(get_db), session_id: str = Depends(get_session_id)):
    cart_service.remove_item(db, session_id, item_id)
    db.commit()
    return Response(status_code=204)


@router.delete("", status_code=204)
async def clear_cart(db: Session = Depends(get_db), session_id: str = Depends(get_session_id)):
    cart_service.clear(db, session_id)
    db.commit()
    return Response(status_code=204)
