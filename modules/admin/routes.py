"""
Admin Module - Panel Routes
=============================
Login / logout, product dashboard (including soft-deleted rows),
product create / edit form, soft-delete and restore actions.
All product routes require an authenticated admin.
"""

from typing import Optional

from fastapi import APIRouter, Request, Depends, Form, HTTPException
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from config.database import get_db
from common.exceptions import ShopError
from common.flash import flash
from common.security import (
    csrf_check, new_csrf_token, admin_cookie_kwargs, ADMIN_COOKIE,
)
from common.templating import templates
from modules.auth.deps import is_authenticated, require_admin
from modules.auth.service import auth_service
from modules.catalog.service import product_service

router = APIRouter(prefix="/admin", tags=["admin"])


# ==========================================
# Helper: template context
# ==========================================

def ctx(request, user, **extra):
    csrf = new_csrf_token()
    data = {"user": user, "csrf_token": csrf, **extra}
    return data, csrf


def render(request: Request, template: str, data: dict, csrf: str, status_code: int = 200):
    response = templates.TemplateResponse(request, template, data, status_code=status_code)
    response.set_cookie("csrf_token", csrf, httponly=True, samesite="lax")
    return response


# ==========================================
# 🔐 Login / Logout
# ==========================================

@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request, logged_in: bool = Depends(is_authenticated)):
    if logged_in:
        return RedirectResponse("/admin/dashboard", status_code=302)
    data, csrf = ctx(request, None, username="", error=None)
    return render(request, "admin/login.html", data, csrf)


@router.post("/login")
async def login_submit(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    csrf_token: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    csrf_check(request, csrf_token)

    if not username.strip() or not password:
        error = "Please enter both username and password."
    else:
        admin = auth_service.login(db, username, password)
        if admin:
            response = RedirectResponse("/admin/dashboard", status_code=303)
            response.set_cookie(ADMIN_COOKIE, auth_service.issue_token(admin), **admin_cookie_kwargs())
            return response
        error = "Invalid username or password."

    data, csrf = ctx(request, None, username=username, error=error)
    return render(request, "admin/login.html", data, csrf, status_code=401)


@router.get("/logout")
async def logout():
    response = RedirectResponse("/admin/login", status_code=302)
    response.delete_cookie(ADMIN_COOKIE)
    return response


# ==========================================
# 📦 Products
# ==========================================

@router.get("", response_class=HTMLResponse)
async def admin_root(user=Depends(require_admin)):
    return RedirectResponse("/admin/dashboard", status_code=302)


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard(request: Request, db: Session = Depends(get_db), user=Depends(require_admin)):
    products = product_service.list_all(db)
    data, csrf = ctx(request, user, products=products, active_page="products")
    return render(request, "admin/dashboard.html", data, csrf)


@router.get("/products/new", response_class=HTMLResponse)
async def new_product_form(request: Request, user=Depends(require_admin)):
    data, csrf = ctx(request, user, p=None, form={"stock": 0}, error=None)
    return render(request, "admin/product_form.html", data, csrf)


@router.post("/products/add")
async def add_product(
    request: Request,
    name: str = Form(""),
    description: str = Form(""),
    price: str = Form(""),
    stock: str = Form("0"),
    csrf_token: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    user=Depends(require_admin),
):
    csrf_check(request, csrf_token)
    form = {"name": name, "description": description, "price": price, "stock": stock}
    try:
        product_service.create(db, form)
        db.commit()
    except ShopError as e:
        db.rollback()
        data, csrf = ctx(request, user, p=None, form=form, error=e.message)
        return render(request, "admin/product_form.html", data, csrf, status_code=400)

    flash(request, "Product created successfully.", "success")
    return RedirectResponse("/admin/dashboard", status_code=303)


@router.get("/products/edit/{p_id}", response_class=HTMLResponse)
async def edit_product_form(request: Request, p_id: int, db: Session = Depends(get_db), user=Depends(require_admin)):
    p = product_service.get_any(db, p_id)
    if not p:
        raise HTTPException(404, "Product not found")
    form = {"name": p.name, "description": p.description, "price": p.price, "stock": p.stock}
    data, csrf = ctx(request, user, p=p, form=form, error=None)
    return render(request, "admin/product_form.html", data, csrf)


@router.post("/products/update/{p_id}")
async def update_product(
    request: Request,
    p_id: int,
    name: str = Form(""),
    description: str = Form(""),
    price: str = Form(""),
    stock: str = Form(""),
    csrf_token: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    user=Depends(require_admin),
):
    csrf_check(request, csrf_token)
    form = {"name": name, "description": description, "price": price, "stock": stock}
    try:
        product_service.update(db, p_id, form)
        db.commit()
    except ShopError as e:
        db.rollback()
        p = product_service.get_any(db, p_id)
        if not p:
            raise HTTPException(404, "Product not found")
        data, csrf = ctx(request, user, p=p, form=form, error=e.message)
        return render(request, "admin/product_form.html", data, csrf, status_code=400)

    flash(request, "Product updated successfully.", "success")
    return RedirectResponse("/admin/dashboard", status_code=303)


@router.post("/products/delete/{p_id}")
async def delete_product(
    request: Request,
    p_id: int,
    csrf_token: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    user=Depends(require_admin),
):
    csrf_check(request, csrf_token)
    try:
        product_service.soft_delete(db, p_id)
        db.commit()
        flash(request, "Product deleted successfully.", "success")
    except ShopError as e:
        db.rollback()
        flash(request, e.message, "danger")
    return RedirectResponse("/admin/dashboard", status_code=303)


@router.post("/products/restore/{p_id}")
async def restore_product(
    request: Request,
    p_id: int,
    csrf_token: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    user=Depends(require_admin),
):
    csrf_check(request, csrf_token)
    try:
        product_service.restore(db, p_id)
        db.commit()
        flash(request, "Product restored successfully.", "success")
    except ShopError as e:
        db.rollback()
        flash(request, e.message, "danger")
    return RedirectResponse("/admin/dashboard", status_code=303)
