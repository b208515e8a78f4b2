"""
Shop Module - Routes
======================
Public storefront pages: product list, product detail, cart, checkout, order confirmation.
Form posts redirect on success; checkout re-renders with the entered values on error.
"""

import urllib.parse
from typing import Optional

from fastapi import APIRouter, Request, Depends, Form, HTTPException
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from config.database import get_db
from common.exceptions import ShopError
from common.flash import flash
from common.helpers import safe_int
from common.security import csrf_check, new_csrf_token
from common.templating import templates
from modules.auth.deps import get_session_id
from modules.cart.service import cart_service
from modules.catalog.service import product_service
from modules.checkout.service import checkout_service

router = APIRouter(tags=["shop"])


def render(request: Request, template: str, context: dict, status_code: int = 200):
    """Render a page with a fresh CSRF token (cookie + form field)."""
    csrf = new_csrf_token()
    response = templates.TemplateResponse(request, template, {
        "csrf_token": csrf,
        **context,
    }, status_code=status_code)
    response.set_cookie("csrf_token", csrf, httponly=True, samesite="lax")
    return response


def _back(request: Request, fallback: str = "/cart") -> str:
    referer = request.headers.get("referer", "")
    path = urllib.parse.urlparse(referer).path if referer else ""
    return path if path.startswith("/") else fallback


# ==========================================
# 🏠 Product List / Detail
# ==========================================

@router.get("/", response_class=HTMLResponse)
async def home_page(
    request: Request,
    db: Session = Depends(get_db),
    session_id: str = Depends(get_session_id),
):
    return render(request, "shop/home.html", {
        "products": product_service.list_active(db),
        "cart_count": cart_service.get_count(db, session_id),
    })


@router.get("/product/{product_id}", response_class=HTMLResponse)
async def product_detail(
    request: Request,
    product_id: int,
    db: Session = Depends(get_db),
    session_id: str = Depends(get_session_id),
):
    product = product_service.get_active(db, product_id)
    if not product:
        raise HTTPException(404, "Product not found")
    return render(request, "shop/product_detail.html", {
        "p": product,
        "cart_count": cart_service.get_count(db, session_id),
    })


# ==========================================
# 🛒 Cart
# ==========================================

@router.get("/cart", response_class=HTMLResponse)
async def view_cart(
    request: Request,
    db: Session = Depends(get_db),
    session_id: str = Depends(get_session_id),
):
    return render(request, "shop/cart.html", {
        "items": cart_service.get_cart(db, session_id),
        "total_price": cart_service.get_total(db, session_id),
        "cart_count": cart_service.get_count(db, session_id),
    })


@router.post("/cart/add")
async def add_to_cart_form(
    request: Request,
    product_id: int = Form(...),
    quantity: str = Form("1"),
    csrf_token: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    session_id: str = Depends(get_session_id),
):
    csrf_check(request, csrf_token)
    try:
        qty = safe_int(quantity)
        cart_service.add_item(db, session_id, product_id, qty if qty is not None else 0)
        db.commit()
        flash(request, "Added to cart.", "success")
    except ShopError as e:
        db.rollback()
        flash(request, e.message, "danger")
    return RedirectResponse(_back(request, "/"), status_code=303)


@router.post("/cart/update/{item_id}")
async def update_cart_form(
    request: Request,
    item_id: int,
    quantity: str = Form(...),
    csrf_token: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    session_id: str = Depends(get_session_id),
):
    csrf_check(request, csrf_token)
    try:
        qty = safe_int(quantity)
        cart_service.update_quantity(db, session_id, item_id, qty if qty is not None else 0)
        db.commit()
    except ShopError as e:
        db.rollback()
        flash(request, e.message, "danger")
    return RedirectResponse("/cart", status_code=303)


@router.post("/cart/remove/{item_id}")
async def remove_from_cart_form(
    request: Request,
    item_id: int,
    csrf_token: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    session_id: str = Depends(get_session_id),
):
    csrf_check(request, csrf_token)
    try:
        cart_service.remove_item(db, session_id, item_id)
        db.commit()
    except ShopError as e:
        db.rollback()
        flash(request, e.message, "danger")
    return RedirectResponse("/cart", status_code=303)


@router.post("/cart/clear")
async def clear_cart_form(
    request: Request,
    csrf_token: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    session_id: str = Depends(get_session_id),
):
    csrf_check(request, csrf_token)
    cart_service.clear(db, session_id)
    db.commit()
    return RedirectResponse("/cart", status_code=303)


# ==========================================
# ✅ Checkout
# ==========================================

def _checkout_page(request: Request, db: Session, session_id: str, form: dict, error: str = None):
    items = cart_service.get_cart(db, session_id)
    return render(request, "shop/checkout.html", {
        "items": items,
        "total_price": cart_service.get_total(db, session_id),
        "cart_count": cart_service.get_count(db, session_id),
        "form": form,
        "error": error,
    }, status_code=400 if error else 200)


@router.get("/checkout", response_class=HTMLResponse)
async def checkout_page(
    request: Request,
    db: Session = Depends(get_db),
    session_id: str = Depends(get_session_id),
):
    if not cart_service.get_count(db, session_id):
        return RedirectResponse("/cart", status_code=302)
    return _checkout_page(request, db, session_id, form={})


@router.post("/checkout")
async def checkout_submit(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    phone: str = Form(""),
    address: str = Form(""),
    csrf_token: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    session_id: str = Depends(get_session_id),
):
    csrf_check(request, csrf_token)
    form = {"name": name, "email": email, "phone": phone, "address": address}
    try:
        order = checkout_service.create_order(db, session_id, form)
        db.commit()
    except ShopError as e:
        db.rollback()
        return _checkout_page(request, db, session_id, form=form, error=e.message)

    return RedirectResponse(f"/orders/{order.id}", status_code=303)


# ==========================================
# 🧾 Order Confirmation
# ==========================================

@router.get("/orders/{order_id}", response_class=HTMLResponse)
async def order_confirmation(
    request: Request,
    order_id: int,
    db: Session = Depends(get_db),
    session_id: str = Depends(get_session_id),
):
    order = checkout_service.get_order(db, order_id)
    if not order or order.session_id != session_id:
        raise HTTPException(404, "Order not found")
    return render(request, "shop/order_confirmation.html", {
        "order": order,
        "cart_count": cart_service.get_count(db, session_id),
    })
