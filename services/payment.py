import logging

import config
from db import Database
from enums.payment_status import PaymentStatus
from exceptions.order import OrderNotFoundException
from exceptions.payment import PaymentValidationException, PaymentNotCompletedException
from models.order import OrderDTO
from repositories.order import OrderRepository
from services.order_status import OrderStatusService
from services.payment_gateway import PaymentGateway, PaymentIntentDTO
from services.pricing import PricingService

logger = logging.getLogger(__name__)

# Intent states after which the provider will not charge without a new payment method
FAILED_INTENT_STATUSES = ("requires_payment_method", "canceled")


class PaymentService:

    @staticmethod
    async def create_payment_intent(order: OrderDTO, gateway: PaymentGateway) -> PaymentIntentDTO:
        """Ask the provider for a charge intent over the order total, tagged with the order id and number."""
        amount = PricingService.to_minor_units(order.total)
        return await gateway.create_intent(
            amount,
            config.PAYMENT_CURRENCY,
            {"order_id": order.id, "order_number": order.order_number}
        )

    @staticmethod
    async def capture_payment(order_id: str,
                              payment_intent_id: str | None,
                              db: Database,
                              gateway: PaymentGateway) -> OrderDTO:
        """
        Mark an order paid after verifying the intent with the payment provider.

        The paid status is only ever derived from the provider's answer,
        never from anything the client asserts.

        Flow:
        1. Require payment_intent_id
        2. Load order (must exist)
        3. Retrieve intent from the provider
        4. "succeeded" and intent belongs to this order -> payment_status=paid
        5. Anything else -> PaymentNotCompletedException, order untouched

        Raises:
            PaymentValidationException: If payment_intent_id is missing
            OrderNotFoundException: If order doesn't exist
            PaymentNotCompletedException: If the provider does not report success
            PaymentGatewayException: If the provider could not be asked
        """
        if not payment_intent_id:
            raise PaymentValidationException("payment_intent_id is required")

        async with db.session() as session:
            order = await OrderRepository.get_by_id(order_id, session)
        if order is None:
            raise OrderNotFoundException(order_id)

        intent = await gateway.retrieve_intent(payment_intent_id)

        if not intent.succeeded:
            logger.warning(f"Payment {payment_intent_id} for order {order.order_number} not completed: {intent.status}")
            raise PaymentNotCompletedException(payment_intent_id, intent.status)

        if not PaymentService._intent_matches_order(intent, order):
            logger.warning(f"⚠️ Payment {payment_intent_id} does not belong to order {order.order_number}")
            raise PaymentNotCompletedException(payment_intent_id, intent.status)

        if order.payment_status == PaymentStatus.PAID and order.payment_intent_id == payment_intent_id:
            logger.info(f"Order {order.order_number} already captured with {payment_intent_id}")
            return order

        order = await OrderStatusService.update_order_payment_status(
            order.id, PaymentStatus.PAID, db, payment_intent_id=payment_intent_id
        )
        logger.info(f"✅ Payment captured for order {order.order_number}")
        return order

    @staticmethod
    async def mark_payment_failed(payment_intent_id: str,
                                  db: Database,
                                  gateway: PaymentGateway) -> OrderDTO | None:
        """
        Mark the order of a failed intent as failed, after re-reading the intent from the provider.

        Returns:
            Updated OrderDTO, or None when nothing was changed
        """
        intent = await gateway.retrieve_intent(payment_intent_id)
        if intent.status not in FAILED_INTENT_STATUSES:
            logger.info(f"Intent {payment_intent_id} is '{intent.status}', not marking order failed")
            return None

        async with db.session() as session:
            order_id = intent.metadata.get("order_id")
            order = await OrderRepository.get_by_id(order_id, session) if order_id else None
            if order is None:
                order = await OrderRepository.get_by_payment_intent_id(payment_intent_id, session)
        if order is None:
            logger.warning(f"No order found for failed payment {payment_intent_id}")
            return None

        if order.payment_status != PaymentStatus.PENDING:
            logger.info(f"Order {order.order_number} is '{order.payment_status.value}', ignoring failed payment")
            return None

        return await OrderStatusService.update_order_payment_status(
            order.id, PaymentStatus.FAILED, db, payment_intent_id=payment_intent_id,
            notes=f"Payment failed ({intent.status})"
        )

    @staticmethod
    def _intent_matches_order(intent: PaymentIntentDTO, order: OrderDTO) -> bool:
        intent_order_id = intent.metadata.get("order_id")
        if intent_order_id is not None and intent_order_id != order.id:
            return False
        if intent.amount is not None and intent.amount != PricingService.to_minor_units(order.total):
            return False
        return True
