"""
Payment-related exceptions.
"""

from .base import ShopException, ShopValidationException


class PaymentException(ShopException):
    """Base exception for payment-related errors."""
    pass


class PaymentValidationException(ShopValidationException, PaymentException):
    """Raised when a payment request lacks required data (e.g. payment_intent_id)."""
    pass


class PaymentNotCompletedException(PaymentException):
    """Raised when the payment provider reports the intent as not succeeded."""

    def __init__(self, payment_intent_id: str, provider_status: str | None):
        super().__init__(
            "Payment not completed",
            details={'payment_intent_id': payment_intent_id, 'provider_status': provider_status}
        )
        self.payment_intent_id = payment_intent_id
        self.provider_status = provider_status


class PaymentGatewayException(PaymentException):
    """Raised when the payment provider could not be asked (network, auth, malformed reply)."""

    def __init__(self, operation: str, reason: str):
        super().__init__(
            f"Payment provider request '{operation}' failed: {reason}",
            details={'operation': operation, 'reason': reason}
        )
        self.operation = operation
        self.reason = reason


class WebhookSignatureException(PaymentException):
    """Raised when a payment webhook fails signature verification."""

    def __init__(self, reason: str):
        super().__init__(
            "Invalid webhook signature",
            details={'reason': reason}
        )
        self.reason = reason
