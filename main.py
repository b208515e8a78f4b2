"""
QuickShop - Application Entry Point
====================================
FastAPI app initialization, middleware, exception handlers and router registration.
"""

import logging
import os
import urllib.parse
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from apscheduler.schedulers.background import BackgroundScheduler

from config import settings
from config.database import SessionLocal, Base, engine
from common.exceptions import ShopError, AuthenticationError
from common.helpers import now_utc
from common.security import (
    SHOP_SESSION_COOKIE, new_session_id, create_session_token,
    read_session_token, session_cookie_kwargs,
)
from common.templating import templates

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
scheduler_logger = logging.getLogger("quickshop.scheduler")

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# ==========================================
# Import ALL models so Base.metadata can see them
# ==========================================
from modules.admin.models import Admin  # noqa: F401
from modules.catalog.models import Product  # noqa: F401
from modules.cart.models import CartItem  # noqa: F401
from modules.order.models import Order, OrderItem  # noqa: F401

# ==========================================
# Import routers
# ==========================================
from modules.catalog.routes import router as product_api_router
from modules.cart.routes import router as cart_api_router
from modules.checkout.routes import router as checkout_api_router
from modules.shop.routes import router as shop_router
from modules.admin.routes import router as admin_router


# ==========================================
# Background Scheduler: Abandoned Cart Cleanup
# ==========================================
def _cleanup_stale_carts():
    """Background job: drop cart lines untouched for CART_EXPIRE_DAYS."""
    db = SessionLocal()
    try:
        from modules.cart.service import cart_service
        cutoff = now_utc() - timedelta(days=settings.CART_EXPIRE_DAYS)
        count = cart_service.purge_stale(db, cutoff)
        db.commit()
        if count:
            scheduler_logger.info(f"Removed {count} stale cart lines (>{settings.CART_EXPIRE_DAYS} days)")
    except Exception as e:
        db.rollback()
        scheduler_logger.error(f"Cart cleanup error: {e}")
    finally:
        db.close()


scheduler = BackgroundScheduler()


@asynccontextmanager
async def lifespan(app):
    # Auto-create any missing tables (safe for existing tables)
    Base.metadata.create_all(bind=engine)

    if settings.SCHEDULER_ENABLED:
        scheduler.add_job(
            _cleanup_stale_carts, "interval",
            minutes=settings.CART_CLEANUP_INTERVAL_MINUTES, id="stale_carts",
        )
        scheduler.start()
        scheduler_logger.info(f"Background scheduler started (carts: {settings.CART_CLEANUP_INTERVAL_MINUTES}m)")
    yield
    if scheduler.running:
        scheduler.shutdown()
        scheduler_logger.info("Background scheduler stopped")


# ==========================================
# Create App
# ==========================================
app = FastAPI(
    title=settings.SHOP_NAME,
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None,
    lifespan=lifespan,
)

app.mount("/static", StaticFiles(directory=os.path.join(BASE_DIR, "static")), name="static")


# ==========================================
# Exception handlers
# ==========================================

def _wants_html(request: Request) -> bool:
    return (
        "text/html" in request.headers.get("accept", "")
        and not request.url.path.startswith("/api/")
    )


def _login_redirect(request: Request) -> RedirectResponse:
    next_url = str(request.url.path)
    return RedirectResponse(
        f"/admin/login?next={urllib.parse.quote(next_url, safe='')}", status_code=302,
    )


async def shop_error_handler(request: Request, exc: ShopError):
    """Business errors → {"error": message} with the error's status code."""
    if isinstance(exc, AuthenticationError) and _wants_html(request):
        return _login_redirect(request)
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Redirect 401 to the admin login, render 404 page for browsers, JSON for everyone else."""
    if exc.status_code == 401 and _wants_html(request):
        return _login_redirect(request)
    if exc.status_code == 404 and _wants_html(request):
        return templates.TemplateResponse(request, "shop/404.html", {
            "detail": exc.detail, "cart_count": 0,
        }, status_code=404)
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse({"error": detail}, status_code=400)


app.add_exception_handler(ShopError, shop_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)


# ==========================================
# Middleware: Flash Messages
# ==========================================
@app.middleware("http")
async def flash_message_middleware(request: Request, call_next):
    """Transfer flash messages from request.state to response cookie."""
    from common.flash import set_flash_cookie, clear_flash_cookie, FLASH_COOKIE
    response = await call_next(request)
    pending = getattr(request.state, "flash_messages", None)
    if pending:
        set_flash_cookie(response, pending)
    elif request.method == "GET" and request.cookies.get(FLASH_COOKIE):
        # Flash messages were displayed on this GET, clear the cookie
        clear_flash_cookie(response)
    return response


# ==========================================
# Middleware: No-Cache for Admin pages
# ==========================================
@app.middleware("http")
async def no_cache_admin(request: Request, call_next):
    response = await call_next(request)
    if request.url.path.startswith("/admin"):
        response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
        response.headers["Pragma"] = "no-cache"
        response.headers["Expires"] = "0"
    return response


# ==========================================
# Middleware: Shopper Session
# ==========================================
# Registered last so it runs first: every route sees request.state.session_id
@app.middleware("http")
async def shop_session_middleware(request: Request, call_next):
    """Issue a signed session cookie on first contact; expose the id on request.state."""
    if request.url.path.startswith("/static"):
        return await call_next(request)

    session_id = read_session_token(request.cookies.get(SHOP_SESSION_COOKIE))
    issued = session_id is None
    if issued:
        session_id = new_session_id()
    request.state.session_id = session_id

    response = await call_next(request)
    if issued:
        response.set_cookie(SHOP_SESSION_COOKIE, create_session_token(session_id), **session_cookie_kwargs())
    return response


# ==========================================
# Register Routers
# ==========================================
app.include_router(product_api_router)
app.include_router(cart_api_router)
app.include_router(checkout_api_router)
app.include_router(shop_router)
app.include_router(admin_router)


# ==========================================
# Health check
# ==========================================
@app.get("/health")
async def health():
    return {"status": "ok", "version": "1.0.0"}
