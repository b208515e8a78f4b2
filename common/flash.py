"""
Flash Messages
================
One-shot notices ("Product restored successfully.") carried across a
POST → redirect → GET round trip in a short-lived cookie.

Routes queue messages with flash(); the flash middleware in main.py writes
them out; templates read them back with get_flashed_messages(request).
"""

import base64
import binascii
import json
from typing import List

from fastapi import Request, Response


FLASH_COOKIE = "_flash"
FLASH_MAX_AGE = 60
MAX_MESSAGES = 5

CATEGORIES = ("success", "info", "warning", "danger")


def flash(request: Request, message: str, category: str = "info"):
    """Queue a message on the current request."""
    if category not in CATEGORIES:
        category = "info"
    queue = getattr(request.state, "flash_messages", None) or []
    queue.append({"text": message, "category": category})
    request.state.flash_messages = queue[-MAX_MESSAGES:]


def _encode(messages: List[dict]) -> str:
    raw = json.dumps(messages, ensure_ascii=False).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii")


def _decode(value: str) -> List[dict]:
    try:
        data = json.loads(base64.urlsafe_b64decode(value.encode("ascii")).decode("utf-8"))
    except (binascii.Error, ValueError, UnicodeError):
        return []
    if not isinstance(data, list):
        return []
    return [
        m for m in data
        if isinstance(m, dict) and isinstance(m.get("text"), str) and m.get("category") in CATEGORIES
    ]


def get_flashed_messages(request: Request) -> List[dict]:
    """Messages that arrived with this request's cookie (empty when none or tampered)."""
    value = request.cookies.get(FLASH_COOKIE)
    return _decode(value) if value else []


def set_flash_cookie(response: Response, messages: List[dict]):
    response.set_cookie(
        FLASH_COOKIE, _encode(messages),
        max_age=FLASH_MAX_AGE, httponly=True, samesite="lax",
    )


def clear_flash_cookie(response: Response):
    response.delete_cookie(FLASH_COOKIE)
