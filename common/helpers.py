"""
QuickShop - Shared Helpers
===========================
Pure utility functions with NO database or module dependencies.
"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional


def now_utc() -> datetime:
    """Returns current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def safe_int(value) -> Optional[int]:
    """Safely convert a value to int. Returns None on failure."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except (ValueError, TypeError):
        return None


def safe_decimal(value) -> Optional[Decimal]:
    """Safely convert a value to Decimal. Returns None on failure (including NaN/inf)."""
    if value is None or isinstance(value, bool):
        return None
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not d.is_finite():
        return None
    return d


def money(value) -> Decimal:
    """Round a Decimal amount to cents."""
    return Decimal(value).quantize(Decimal("0.01"))


def format_price(value) -> str:
    """Format an amount with thousands separators and two decimals."""
    if value is None:
        return "0.00"
    try:
        return "{:,.2f}".format(Decimal(value))
    except (InvalidOperation, ValueError, TypeError):
        return str(value)


def format_datetime(value, fmt: str = "%Y-%m-%d %H:%M") -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime(fmt)
    return str(value)

