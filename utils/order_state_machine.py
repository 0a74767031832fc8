"""
Order State Machine for validating order status transitions.

Orders carry two independent status dimensions, payment and production.
Each has its own transition table; a transition to the current status is
always allowed (idempotent updates, e.g. a repeated "shipped" with a new
tracking number).
"""

import logging
from typing import Dict, List, Set, Tuple

from enums.payment_status import PaymentStatus
from enums.production_status import ProductionStatus
from enums.status_type import StatusType
from exceptions.order import InvalidOrderStateException

logger = logging.getLogger(__name__)


class StatusTransition:
    """Represents a valid status transition with metadata"""

    def __init__(self, status_type: StatusType, from_status: str, to_status: str, description: str = ""):
        self.status_type = status_type
        self.from_status = from_status
        self.to_status = to_status
        self.description = description

    def __repr__(self):
        return f"{self.status_type.value}: {self.from_status} -> {self.to_status}"


class OrderStateMachine:
    """
    Finite state machine for order status transitions.

    Payment:
    - PENDING -> PAID (payment captured)
    - PENDING -> FAILED (provider reported failure)
    - FAILED -> PAID (customer retried with another payment method)

    Production moves forward only, stages may be skipped:
    - PENDING -> IN_PRODUCTION -> SHIPPED -> DELIVERED
    - PENDING -> SHIPPED, PENDING -> DELIVERED, IN_PRODUCTION -> DELIVERED

    PAID and DELIVERED are final. Refund states are not modelled.
    """

    VALID_TRANSITIONS: List[StatusTransition] = [
        StatusTransition(
            StatusType.PAYMENT,
            PaymentStatus.PENDING.value,
            PaymentStatus.PAID.value,
            description="Payment captured"
        ),
        StatusTransition(
            StatusType.PAYMENT,
            PaymentStatus.PENDING.value,
            PaymentStatus.FAILED.value,
            description="Payment failed"
        ),
        StatusTransition(
            StatusType.PAYMENT,
            PaymentStatus.FAILED.value,
            PaymentStatus.PAID.value,
            description="Payment captured after earlier failure"
        ),

        StatusTransition(
            StatusType.PRODUCTION,
            ProductionStatus.PENDING.value,
            ProductionStatus.IN_PRODUCTION.value,
            description="Order entered production"
        ),
        StatusTransition(
            StatusType.PRODUCTION,
            ProductionStatus.PENDING.value,
            ProductionStatus.SHIPPED.value,
            description="Order shipped without a production stage"
        ),
        StatusTransition(
            StatusType.PRODUCTION,
            ProductionStatus.PENDING.value,
            ProductionStatus.DELIVERED.value,
            description="Order delivered without tracking stages"
        ),
        StatusTransition(
            StatusType.PRODUCTION,
            ProductionStatus.IN_PRODUCTION.value,
            ProductionStatus.SHIPPED.value,
            description="Order shipped"
        ),
        StatusTransition(
            StatusType.PRODUCTION,
            ProductionStatus.IN_PRODUCTION.value,
            ProductionStatus.DELIVERED.value,
            description="Order delivered without a shipping stage"
        ),
        StatusTransition(
            StatusType.PRODUCTION,
            ProductionStatus.SHIPPED.value,
            ProductionStatus.DELIVERED.value,
            description="Order delivered"
        ),
    ]

    # (status_type, from_status) -> {to_status}
    _transition_map: Dict[Tuple[StatusType, str], Set[str]] = {}
    _transition_descriptions: Dict[Tuple[StatusType, str, str], str] = {}

    @classmethod
    def _build_transition_map(cls):
        """Build internal transition maps for performance"""
        if cls._transition_map:
            return  # Already built

        for transition in cls.VALID_TRANSITIONS:
            key = (transition.status_type, transition.from_status)
            cls._transition_map.setdefault(key, set()).add(transition.to_status)
            cls._transition_descriptions[
                (transition.status_type, transition.from_status, transition.to_status)
            ] = transition.description

    @classmethod
    def is_valid_transition(cls, status_type: StatusType, from_status: str, to_status: str) -> bool:
        """
        Check if a status transition is valid according to the state machine.

        Args:
            status_type: Which status dimension is changing
            from_status: Current status
            to_status: Desired new status

        Returns:
            True if transition is valid, False otherwise
        """
        cls._build_transition_map()

        # Allow staying in same status (no-op)
        if from_status == to_status:
            return True

        return to_status in cls._transition_map.get((status_type, from_status), set())

    @classmethod
    def get_valid_transitions(cls, status_type: StatusType, from_status: str) -> List[str]:
        cls._build_transition_map()
        return sorted(cls._transition_map.get((status_type, from_status), set()))

    @classmethod
    def get_transition_description(cls, status_type: StatusType, from_status: str, to_status: str) -> str:
        cls._build_transition_map()
        return cls._transition_descriptions.get(
            (status_type, from_status, to_status),
            f"Transition from {from_status} to {to_status}"
        )

    @classmethod
    def is_final_status(cls, status_type: StatusType, status: str) -> bool:
        """A status is final when no other status can be reached from it."""
        cls._build_transition_map()
        return not cls._transition_map.get((status_type, status))

    @classmethod
    def validate_transition(cls, order_id: str, status_type: StatusType, from_status: str, to_status: str) -> None:
        """
        Validate a status transition and log it.

        Raises:
            InvalidOrderStateException: If the transition is not allowed
        """
        if not cls.is_valid_transition(status_type, from_status, to_status):
            logger.error(f"Invalid {status_type.value} transition for order {order_id}: {from_status} -> {to_status}")
            raise InvalidOrderStateException(order_id, from_status, to_status)

        transition_desc = cls.get_transition_description(status_type, from_status, to_status)
        logger.info(f"ORDER_STATUS_TRANSITION: Order {order_id} {status_type.value} {from_status} -> {to_status}: {transition_desc}")
