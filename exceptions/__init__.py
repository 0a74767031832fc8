"""
Custom exceptions for the shop backend.

This module provides a hierarchy of custom exceptions for consistent error handling
throughout the application.

Exception Hierarchy:
--------------------
ShopException (base)
├── ShopValidationException                      -> 400
│   ├── PricingValidationException
│   ├── OrderValidationException
│   ├── PriceMismatchException
│   ├── PaymentValidationException
│   └── InvalidFileException
├── NotFoundException                            -> 404
│   ├── VariantNotFoundException
│   ├── DecorationMethodNotFoundException
│   ├── ProductNotFoundException
│   ├── OrderNotFoundException
│   ├── OrderItemNotFoundException
│   └── AssetNotFoundException
├── OrderException
│   ├── InvalidOrderStateException               -> 409
│   └── OrderNumberExhaustedException            -> 500
├── PaymentException
│   ├── PaymentNotCompletedException             -> 400
│   ├── PaymentGatewayException                  -> 500
│   └── WebhookSignatureException                -> 400
├── InvalidPricingRulesException                 -> 500
├── UnauthenticatedException                     -> 401
└── ForbiddenException                           -> 403

Usage:
------
Services raise specific exceptions:
    raise OrderNotFoundException(order_id="...")

The HTTP layer maps them to status codes (utils/error_handler.py):
    {"success": false, "message": "Order ... not found"}
"""

from .base import ShopException, ShopValidationException, NotFoundException
from .catalog import (
    VariantNotFoundException,
    DecorationMethodNotFoundException,
    ProductNotFoundException,
    PricingValidationException,
    InvalidPricingRulesException,
)
from .order import (
    OrderException,
    OrderNotFoundException,
    OrderItemNotFoundException,
    OrderValidationException,
    PriceMismatchException,
    InvalidOrderStateException,
    OrderNumberExhaustedException,
)
from .payment import (
    PaymentException,
    PaymentValidationException,
    PaymentNotCompletedException,
    PaymentGatewayException,
    WebhookSignatureException,
)
from .asset import AssetNotFoundException, InvalidFileException
from .auth import UnauthenticatedException, ForbiddenException

__all__ = [
    # Base
    'ShopException',
    'ShopValidationException',
    'NotFoundException',

    # Catalog
    'VariantNotFoundException',
    'DecorationMethodNotFoundException',
    'ProductNotFoundException',
    'PricingValidationException',
    'InvalidPricingRulesException',

    # Order
    'OrderException',
    'OrderNotFoundException',
    'OrderItemNotFoundException',
    'OrderValidationException',
    'PriceMismatchException',
    'InvalidOrderStateException',
    'OrderNumberExhaustedException',

    # Payment
    'PaymentException',
    'PaymentValidationException',
    'PaymentNotCompletedException',
    'PaymentGatewayException',
    'WebhookSignatureException',

    # Asset
    'AssetNotFoundException',
    'InvalidFileException',

    # Auth
    'UnauthenticatedException',
    'ForbiddenException',
]
