"""
Auth Module - Dependencies
===========================
FastAPI dependencies for the admin gate and the shopper session.
These are injected into route handlers via Depends().
"""

from fastapi import Request, Depends, HTTPException, status
from sqlalchemy.orm import Session

from config.database import get_db
from common.exceptions import AuthenticationError
from common.security import decode_token, ADMIN_COOKIE
from modules.admin.models import Admin


def get_current_admin(request: Request, db: Session = Depends(get_db)):
    """
    Identify the logged-in admin from the admin_token cookie.
    Returns Admin object or None.
    """
    token = request.cookies.get(ADMIN_COOKIE)
    if not token:
        return None

    payload = decode_token(token)
    if not payload or payload.get("type") != "admin":
        return None

    username = payload.get("sub")
    if not username:
        return None

    return db.query(Admin).filter(Admin.username == username).first()


def is_authenticated(admin=Depends(get_current_admin)) -> bool:
    return admin is not None


def require_admin(admin=Depends(get_current_admin)):
    """Only allow logged-in admins. Raises 401 (HTML callers get redirected to the login page)."""
    if not admin:
        raise AuthenticationError("login_required")
    return admin


def get_session_id(request: Request) -> str:
    """
    The shopper's opaque session id, issued by the session middleware.
    Cart and order lookups are always scoped by this value.
    """
    session_id = getattr(request.state, "session_id", None)
    if not session_id:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Session unavailable")
    return session_id
