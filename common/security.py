"""
QuickShop - Security Utilities
===============================
JWT tokens (admin + shop session cookies), CSRF protection, password hashing.
"""

import base64
import hmac
import logging
import secrets
from datetime import timedelta
from typing import Optional

from fastapi import Request, HTTPException
from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from jose import jwt, JWTError

from config.settings import (
    SECRET_KEY, ALGORITHM, CSRF_ENABLED,
    ADMIN_TOKEN_EXPIRE_MINUTES, SHOP_SESSION_EXPIRE_DAYS,
    PASSWORD_HASH_ITERATIONS,
)
from common.helpers import now_utc

logger = logging.getLogger("quickshop.security")

ADMIN_COOKIE = "admin_token"
SHOP_SESSION_COOKIE = "shop_session"


# ==========================================
# Passwords (salted PBKDF2-SHA256)
# ==========================================
# Stored format: pbkdf2_sha256$<iterations>$<salt_b64>$<hash_b64>

def _kdf(salt: bytes, iterations: int) -> PBKDF2HMAC:
    return PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=iterations,
    )


def hash_password(password: str, iterations: int = PASSWORD_HASH_ITERATIONS) -> str:
    salt = secrets.token_bytes(16)
    digest = _kdf(salt, iterations).derive(password.encode("utf-8"))
    return "pbkdf2_sha256${}${}${}".format(
        iterations,
        base64.b64encode(salt).decode("ascii"),
        base64.b64encode(digest).decode("ascii"),
    )


def verify_password(password: str, stored_hash: str) -> bool:
    """Constant-time check of a password against a stored hash. Malformed hashes never match."""
    try:
        algo, iterations, salt_b64, hash_b64 = stored_hash.split("$")
        if algo != "pbkdf2_sha256":
            return False
        kdf = _kdf(base64.b64decode(salt_b64), int(iterations))
        expected = base64.b64decode(hash_b64)
    except (ValueError, TypeError, AttributeError):
        return False
    try:
        kdf.verify(password.encode("utf-8"), expected)
    except InvalidKey:
        return False
    return True


# ==========================================
# JWT Tokens
# ==========================================

def create_token(data: dict, expires: timedelta) -> str:
    to_encode = data.copy()
    to_encode["exp"] = now_utc() + expires
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """Decode a JWT token. Returns payload or None."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None


def create_admin_token(username: str) -> str:
    return create_token(
        {"sub": username, "type": "admin"},
        timedelta(minutes=ADMIN_TOKEN_EXPIRE_MINUTES),
    )


# ==========================================
# Shop Session (opaque id inside a signed cookie)
# ==========================================

def new_session_id() -> str:
    return secrets.token_urlsafe(24)


def create_session_token(session_id: str) -> str:
    return create_token(
        {"sid": session_id, "type": "shop"},
        timedelta(days=SHOP_SESSION_EXPIRE_DAYS),
    )


def read_session_token(token: Optional[str]) -> Optional[str]:
    """Extract the session id from a shop session cookie. None if missing or tampered."""
    if not token:
        return None
    payload = decode_token(token)
    if not payload or payload.get("type") != "shop":
        return None
    return payload.get("sid") or None


# ==========================================
# Cookie Helpers
# ==========================================

def get_cookie_kwargs(max_age: int) -> dict:
    """Standard cookie settings for auth/session tokens."""
    from config.settings import COOKIE_SECURE, COOKIE_SAMESITE
    return dict(
        httponly=True,
        secure=COOKIE_SECURE,
        samesite=COOKIE_SAMESITE,
        max_age=max_age,
    )


def admin_cookie_kwargs() -> dict:
    return get_cookie_kwargs(ADMIN_TOKEN_EXPIRE_MINUTES * 60)


def session_cookie_kwargs() -> dict:
    return get_cookie_kwargs(SHOP_SESSION_EXPIRE_DAYS * 24 * 3600)


# ==========================================
# CSRF
# ==========================================

def new_csrf_token() -> str:
    """Generate a new random CSRF token."""
    return secrets.token_urlsafe(32)


def csrf_check(request: Request, form_token: Optional[str] = None):
    """
    Verify CSRF token from cookie matches the one in header or form.
    Raises HTTPException(403) on mismatch.
    """
    if not CSRF_ENABLED:
        return

    cookie_token = request.cookies.get("csrf_token")
    header_token = request.headers.get("X-CSRF-Token")
    token = header_token or form_token

    if not cookie_token or not token or not hmac.compare_digest(cookie_token, token):
        logger.warning(f"CSRF check failed on {request.method} {request.url.path}")
        raise HTTPException(403, "CSRF token missing or invalid")
