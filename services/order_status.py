import logging
from datetime import datetime, timezone

from db import Database
from enums.payment_status import PaymentStatus
from enums.production_status import ProductionStatus
from enums.status_type import StatusType
from exceptions.order import OrderNotFoundException, OrderItemNotFoundException, OrderValidationException
from models.order import OrderDTO, OrderStatusPatch
from models.orderItem import OrderItemDTO
from repositories.order import OrderRepository
from repositories.orderItem import OrderItemRepository
from repositories.order_status_history import OrderStatusHistoryRepository
from utils.order_state_machine import OrderStateMachine
from utils.transaction_manager import TransactionManager

logger = logging.getLogger(__name__)


def _coerce_status(enum_cls, status):
    try:
        return enum_cls(status)
    except ValueError:
        allowed = ', '.join(s.value for s in enum_cls)
        raise OrderValidationException(f"Invalid status '{status}'. Allowed: {allowed}")


class OrderStatusService:
    """
    Status transitions for orders and order items.

    Every transition updates the status column(s) and appends exactly one
    order_status_history row in the same transaction, so a status is never
    recorded without its audit row and vice versa.
    """

    @staticmethod
    async def update_order_payment_status(order_id: str,
                                          status: PaymentStatus | str,
                                          db: Database,
                                          payment_intent_id: str | None = None,
                                          notes: str | None = None) -> OrderDTO:
        """
        Set payment_status (and payment_intent_id when given).

        Only call this with a status verified against the payment provider;
        see PaymentService.capture_payment.

        Raises:
            OrderNotFoundException: If order doesn't exist
            InvalidOrderStateException: If the transition is not allowed
        """
        status = _coerce_status(PaymentStatus, status)

        async with TransactionManager.atomic_transaction(db) as session:
            order = await OrderRepository.get_by_id(order_id, session, for_update=True)
            if order is None:
                raise OrderNotFoundException(order_id)

            OrderStateMachine.validate_transition(
                order_id, StatusType.PAYMENT, order.payment_status.value, status.value
            )

            patch = OrderStatusPatch(payment_status=status, payment_intent_id=payment_intent_id)
            updated_order = await OrderRepository.apply_patch(order_id, patch, session)
            await OrderStatusHistoryRepository.append(
                order_id, StatusType.PAYMENT, status.value, session,
                notes=notes or f"Payment {status.value}"
            )

        logger.info(f"💳 Order {updated_order.order_number} payment status: {order.payment_status.value} -> {status.value}")
        return updated_order

    @staticmethod
    async def update_order_production_status(order_id: str,
                                             status: ProductionStatus | str,
                                             db: Database,
                                             tracking_number: str | None = None,
                                             notes: str | None = None) -> OrderDTO:
        """
        Set production_status.

        "shipped" stamps shipped_at with the current UTC time (again on every
        repeated "shipped"); other statuses leave it alone. A supplied
        tracking number is stored, an absent one never clears the stored value.

        Raises:
            OrderNotFoundException: If order doesn't exist
            InvalidOrderStateException: If the transition is not allowed
        """
        status = _coerce_status(ProductionStatus, status)

        async with TransactionManager.atomic_transaction(db) as session:
            order = await OrderRepository.get_by_id(order_id, session, for_update=True)
            if order is None:
                raise OrderNotFoundException(order_id)

            OrderStateMachine.validate_transition(
                order_id, StatusType.PRODUCTION, order.production_status.value, status.value
            )

            patch = OrderStatusPatch(
                production_status=status,
                tracking_number=tracking_number,
                shipped_at=datetime.now(timezone.utc) if status == ProductionStatus.SHIPPED else None
            )
            updated_order = await OrderRepository.apply_patch(order_id, patch, session)
            await OrderStatusHistoryRepository.append(
                order_id, StatusType.PRODUCTION, status.value, session,
                notes=notes or OrderStatusService._production_note(status, tracking_number)
            )

        logger.info(f"📦 Order {updated_order.order_number} production status: {order.production_status.value} -> {status.value}")
        return updated_order

    @staticmethod
    async def update_item_production_status(item_id: str,
                                            status: ProductionStatus | str,
                                            db: Database,
                                            notes: str | None = None) -> OrderItemDTO:
        """
        Set production_status of a single order item and record it in the order's history.

        Raises:
            OrderItemNotFoundException: If item doesn't exist
            InvalidOrderStateException: If the transition is not allowed
        """
        status = _coerce_status(ProductionStatus, status)

        async with TransactionManager.atomic_transaction(db) as session:
            item = await OrderItemRepository.get_by_id(item_id, session, for_update=True)
            if item is None:
                raise OrderItemNotFoundException(item_id)

            OrderStateMachine.validate_transition(
                item.order_id, StatusType.PRODUCTION, item.production_status.value, status.value
            )

            updated_item = await OrderItemRepository.update_production_status(item_id, status, session)
            await OrderStatusHistoryRepository.append(
                item.order_id, StatusType.PRODUCTION, status.value, session,
                notes=notes or f"Item {item_id}: {status.value}",
                order_item_id=item_id
            )

        logger.info(f"Order item {item_id} production status: {item.production_status.value} -> {status.value}")
        return updated_item

    @staticmethod
    def _production_note(status: ProductionStatus, tracking_number: str | None) -> str:
        note = f"Production {status.value}"
        if tracking_number:
            note += f" (tracking: {tracking_number})"
        return note
