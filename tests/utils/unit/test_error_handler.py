"""
Tests for Error Handler Utility

Domain exceptions map to HTTP status codes; the body never carries
internal detail for server errors.
"""

import json
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from exceptions import (
    OrderNotFoundException,
    OrderValidationException,
    InvalidOrderStateException,
    PriceMismatchException,
    PaymentNotCompletedException,
    PaymentGatewayException,
    WebhookSignatureException,
    InvalidPricingRulesException,
    OrderNumberExhaustedException,
    UnauthenticatedException,
    ForbiddenException,
    VariantNotFoundException,
    InvalidFileException,
)
from utils.error_handler import get_status_code, shop_exception_handler


class TestStatusMapping:

    @pytest.mark.parametrize("exception, status_code", [
        (OrderValidationException("bad"), 400),
        (PriceMismatchException("v1", Decimal("1.00"), Decimal("2.00")), 400),
        (InvalidFileException("Invalid file type"), 400),
        (PaymentNotCompletedException("pi_1", "requires_action"), 400),
        (WebhookSignatureException("signature mismatch"), 400),
        (UnauthenticatedException(), 401),
        (ForbiddenException(), 403),
        (OrderNotFoundException("o1"), 404),
        (VariantNotFoundException("v1"), 404),
        (InvalidOrderStateException("o1", "pending", "delivered"), 409),
        (PaymentGatewayException("retrieve_intent", "timeout"), 500),
        (InvalidPricingRulesException("dtg", "bad"), 500),
        (OrderNumberExhaustedException(10), 500),
    ])
    def test_status_codes(self, exception, status_code):
        assert get_status_code(exception) == status_code


class TestShopExceptionHandler:

    @staticmethod
    def request():
        request = MagicMock()
        request.method = "POST"
        request.url.path = "/api/orders/create"
        return request

    @pytest.mark.asyncio
    async def test_validation_errors_are_listed(self):
        exc = OrderValidationException("Missing required fields: customer", errors=["customer"])

        response = await shop_exception_handler(self.request(), exc)

        assert response.status_code == 400
        assert json.loads(response.body) == {
            "success": False,
            "message": "Missing required fields: customer: customer",
        }

    @pytest.mark.asyncio
    async def test_server_errors_hide_details(self):
        exc = PaymentGatewayException("create_intent", "Invalid API Key provided: sk_live_****abcd")

        response = await shop_exception_handler(self.request(), exc)

        assert response.status_code == 500
        assert json.loads(response.body) == {"success": False, "message": "Internal server error"}
