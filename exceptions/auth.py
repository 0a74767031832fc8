"""
Authentication/authorization exceptions for admin endpoints.
"""

from .base import ShopException


class UnauthenticatedException(ShopException):
    """Raised when no credentials were supplied."""

    def __init__(self):
        super().__init__("Authentication required")


class ForbiddenException(ShopException):
    """Raised when supplied credentials do not grant access."""

    def __init__(self):
        super().__init__("Insufficient permissions")
