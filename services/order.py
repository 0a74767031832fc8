import logging

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import Database
from enums.payment_status import PaymentStatus
from enums.production_status import ProductionStatus
from enums.status_type import StatusType
from exceptions.catalog import VariantNotFoundException
from exceptions.order import OrderNotFoundException, OrderValidationException
from models.customer import CustomerDTO
from models.order import Order, OrderDTO, OrderCreateDTO, OrderStatusPatch
from models.orderItem import OrderItemDTO
from models.order_status_history import OrderStatusHistoryDTO
from repositories.customer import CustomerRepository
from repositories.order import OrderRepository
from repositories.orderItem import OrderItemRepository
from repositories.order_status_history import OrderStatusHistoryRepository
from repositories.variant import VariantRepository
from services.pricing import PricingService
from utils.transaction_manager import TransactionManager

logger = logging.getLogger(__name__)

REQUIRED_ORDER_FIELDS = ("customer", "items", "shipping_address")


class OrderService:

    @staticmethod
    def validate_order_data(order_data: dict | OrderCreateDTO) -> OrderCreateDTO:
        """
        Turn a raw order payload into a typed OrderCreateDTO.

        Runs before any session is opened, so invalid input never costs a
        connection or a transaction.

        Raises:
            OrderValidationException: If required fields are missing or malformed
        """
        if isinstance(order_data, OrderCreateDTO):
            return order_data
        if not isinstance(order_data, dict):
            raise OrderValidationException("Order data must be an object")

        missing = [field for field in REQUIRED_ORDER_FIELDS if not order_data.get(field)]
        if missing:
            raise OrderValidationException(f"Missing required fields: {', '.join(missing)}", errors=missing)

        try:
            return OrderCreateDTO.model_validate(order_data)
        except ValidationError as e:
            errors = [f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()]
            raise OrderValidationException("Invalid order data", errors=errors)

    @staticmethod
    async def create_order(order_data: dict | OrderCreateDTO,
                           db: Database,
                           timeout: float | None = None,
                           verify_prices: bool | None = None) -> OrderDTO:
        """
        Create an order with its items and first history row, all-or-nothing.

        Flow (one transaction):
        1. Find customer by exact email, create it if absent
        2. Generate a unique order number
        3. Insert order (payment/production pending, address snapshots, caller totals)
        4. Insert each item (variant must exist, price re-checked when enabled)
        5. Append history row "Order created"

        A unique-constraint violation (two first orders from the same email,
        or an order number taken between check and insert) rolls the attempt
        back and re-runs it; the retry then finds the winner's customer row.

        Args:
            order_data: Raw payload or validated OrderCreateDTO
            db: Storage handle
            timeout: Transaction time budget in seconds (ORDER_TRANSACTION_TIMEOUT_SECONDS)
            verify_prices: Recompute quotable items (ORDER_PRICE_VERIFICATION)

        Returns:
            Created OrderDTO

        Raises:
            OrderValidationException: Invalid payload (raised before the transaction opens)
            VariantNotFoundException: An item references an unknown variant
            PriceMismatchException: A quotable item's total differs from the server quote
            TransactionTimeoutException: The transaction exceeded its time budget
        """
        order_create = OrderService.validate_order_data(order_data)
        timeout = timeout or config.ORDER_TRANSACTION_TIMEOUT_SECONDS
        verify = config.ORDER_PRICE_VERIFICATION if verify_prices is None else verify_prices

        order = await OrderService._create_order_atomic(order_create, db, timeout, verify)
        logger.info(f"✅ Order {order.order_number} created for {len(order_create.items)} item(s), total {order.total}")
        return order

    @staticmethod
    @TransactionManager.with_retry()
    async def _create_order_atomic(order_create: OrderCreateDTO,
                                   db: Database,
                                   timeout: float,
                                   verify_prices: bool) -> OrderDTO:
        async def write(session: AsyncSession) -> OrderDTO:
            return await OrderService._write_order(order_create, session, verify_prices)

        return await TransactionManager.run_atomic(db, write, timeout)

    @staticmethod
    async def _write_order(order_create: OrderCreateDTO, session: AsyncSession, verify_prices: bool) -> OrderDTO:
        customer = await CustomerRepository.get_by_email(order_create.customer.email, session)
        if customer is None:
            customer = await CustomerRepository.create(CustomerDTO(
                email=order_create.customer.email,
                name=order_create.customer.name,
                phone=order_create.customer.phone,
                addresses=[dict(order_create.shipping_address)]
            ), session)
            logger.info(f"New customer {customer.id} created")

        order_number = await OrderRepository.get_next_order_number(session)

        shipping_address = dict(order_create.shipping_address)
        billing_address = dict(order_create.billing_address or order_create.shipping_address)
        order = await OrderRepository.create(Order(
            order_number=order_number,
            customer_id=customer.id,
            subtotal=order_create.subtotal,
            tax=order_create.tax,
            shipping=order_create.shipping,
            discount=order_create.discount,
            total=order_create.total,
            payment_status=PaymentStatus.PENDING.value,
            production_status=ProductionStatus.PENDING.value,
            shipping_address=shipping_address,
            billing_address=billing_address,
            customer_notes=order_create.customer_notes,
        ), session)

        for position, item in enumerate(order_create.items):
            variant = await VariantRepository.get_by_id(item.variant_id, session)
            if variant is None:
                raise VariantNotFoundException(item.variant_id)
            if verify_prices:
                await PricingService.verify_item_price(
                    item.variant_id, item.quantity, item.unit_price, item.customization, session
                )
            await OrderItemRepository.create(order.id, item, session, position=position)

        await OrderStatusHistoryRepository.append(
            order.id, StatusType.PRODUCTION, ProductionStatus.PENDING.value, session, notes="Order created"
        )
        return order

    @staticmethod
    async def get_order(identifier: str, session: AsyncSession) -> tuple[OrderDTO, list[OrderItemDTO]]:
        """
        Look up an order by internal id first, then by order number.

        Raises:
            OrderNotFoundException: If neither matches
        """
        order = await OrderRepository.get_by_id(identifier, session)
        if order is None:
            order = await OrderRepository.get_by_order_number(identifier, session)
        if order is None:
            raise OrderNotFoundException(identifier)
        items = await OrderItemRepository.get_by_order_id(order.id, session)
        return order, items

    @staticmethod
    async def list_orders(session: AsyncSession,
                          payment_status: PaymentStatus | None = None,
                          production_status: ProductionStatus | None = None,
                          limit: int | None = None,
                          offset: int = 0) -> list[OrderDTO]:
        return await OrderRepository.get_all(
            session,
            payment_status=payment_status,
            production_status=production_status,
            limit=limit,
            offset=offset
        )

    @staticmethod
    async def get_status_history(identifier: str, session: AsyncSession) -> list[OrderStatusHistoryDTO]:
        order, _ = await OrderService.get_order(identifier, session)
        return await OrderStatusHistoryRepository.get_by_order_id(order.id, session)

    @staticmethod
    async def attach_payment_intent(order_id: str, payment_intent_id: str, db: Database) -> OrderDTO:
        """Record the provider's intent id on the order. Not a status transition, so no history row."""
        async with TransactionManager.atomic_transaction(db) as session:
            order = await OrderRepository.apply_patch(
                order_id, OrderStatusPatch(payment_intent_id=payment_intent_id), session
            )
            if order is None:
                raise OrderNotFoundException(order_id)
        return order
