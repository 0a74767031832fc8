from enum import Enum


class StatusType(str, Enum):
    """Which status column a history row describes."""
    PAYMENT = "payment"
    PRODUCTION = "production"
