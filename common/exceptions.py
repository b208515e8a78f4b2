"""
QuickShop - Custom Exceptions
==============================
Business-level exceptions that can be caught and converted to HTTP responses.
Each class carries the HTTP status it maps to.
"""

from fastapi import status


class ShopError(Exception):
    """Base exception for all business logic errors."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "An unexpected error occurred."):
        self.message = message
        super().__init__(self.message)


class ValidationError(ShopError):
    """Raised for malformed caller input (empty field, bad price, quantity < 1, bad email)."""
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ShopError):
    """Raised when a requested resource doesn't exist or isn't visible to the caller."""
    status_code = status.HTTP_404_NOT_FOUND


class StockError(ShopError):
    """Raised when a requested quantity exceeds available stock."""
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, available: int, product_name: str = ""):
        self.available = available
        if product_name:
            msg = f"Insufficient stock for {product_name}. Available: {available}."
        else:
            msg = f"Insufficient stock. Available: {available}."
        super().__init__(msg)


class DomainError(ShopError):
    """Raised for workflow conflicts: empty cart at checkout, dangling cart references."""
    status_code = status.HTTP_409_CONFLICT


class AuthenticationError(ShopError):
    """Raised when admin authentication fails."""
    status_code = status.HTTP_401_UNAUTHORIZED
