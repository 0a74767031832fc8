"""
Order-related exceptions.
"""

from decimal import Decimal

from .base import ShopException, ShopValidationException, NotFoundException


class OrderException(ShopException):
    """Base exception for order-related errors."""
    pass


class OrderNotFoundException(NotFoundException, OrderException):
    """Raised when order is not found in database."""

    def __init__(self, order_id: str):
        super().__init__(
            f"Order {order_id} not found",
            details={'order_id': order_id}
        )
        self.order_id = order_id


class OrderItemNotFoundException(NotFoundException, OrderException):
    """Raised when order item is not found in database."""

    def __init__(self, order_item_id: str):
        super().__init__(
            f"Order item {order_item_id} not found",
            details={'order_item_id': order_item_id}
        )
        self.order_item_id = order_item_id


class OrderValidationException(ShopValidationException, OrderException):
    """Raised when order creation data is incomplete or inconsistent."""
    pass


class PriceMismatchException(ShopValidationException, OrderException):
    """Raised when a line item's unit price does not match the server-side quote."""

    def __init__(self, variant_id: str, expected: Decimal, received: Decimal):
        super().__init__(
            f"Unit price for variant {variant_id} does not match quote: expected {expected}, received {received}"
        )
        self.details.update({'variant_id': variant_id, 'expected': str(expected), 'received': str(received)})
        self.variant_id = variant_id
        self.expected = expected
        self.received = received


class InvalidOrderStateException(OrderException):
    """Raised when order is in invalid state for requested operation."""

    def __init__(self, order_id: str, current_state: str, required_state: str):
        super().__init__(
            f"Order {order_id} is in state '{current_state}', cannot move to '{required_state}'",
            details={'order_id': order_id, 'current_state': current_state, 'required_state': required_state}
        )
        self.order_id = order_id
        self.current_state = current_state
        self.required_state = required_state


class OrderNumberExhaustedException(OrderException):
    """Raised when no free order number could be generated."""

    def __init__(self, attempts: int):
        super().__init__(
            f"Could not generate unique order number after {attempts} attempts",
            details={'attempts': attempts}
        )
        self.attempts = attempts
