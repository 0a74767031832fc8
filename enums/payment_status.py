from enum import Enum


class PaymentStatus(str, Enum):
    PENDING = "pending"  # Order created, charge intent not yet confirmed
    PAID = "paid"        # Confirmed against the payment provider
    FAILED = "failed"    # Provider reported a failed attempt (customer may retry)
