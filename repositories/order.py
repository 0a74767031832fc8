import logging
import random
import string
import time

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

import config
from enums.payment_status import PaymentStatus
from enums.production_status import ProductionStatus
from exceptions.order import OrderNumberExhaustedException
from models.order import Order, OrderDTO, OrderStatusPatch

logger = logging.getLogger(__name__)

ORDER_NUMBER_ALPHABET = string.digits + string.ascii_uppercase
ORDER_NUMBER_MAX_ATTEMPTS = 10


def generate_order_number(prefix: str | None = None) -> str:
    """
    Build an order number candidate: <PREFIX>-<epoch millis>-<5 base36 chars>.
    Example: RB-1718000000000-K3X9Q
    """
    prefix = prefix or config.ORDER_NUMBER_PREFIX
    millis = int(time.time() * 1000)
    code = ''.join(random.choices(ORDER_NUMBER_ALPHABET, k=5))
    return f"{prefix}-{millis}-{code}"


class OrderRepository:
    @staticmethod
    async def create(order: Order, session: AsyncSession) -> OrderDTO:
        session.add(order)
        await session.flush()
        await session.refresh(order)
        return OrderDTO.model_validate(order, from_attributes=True)

    @staticmethod
    async def get_by_id(order_id: str, session: AsyncSession, for_update: bool = False) -> OrderDTO | None:
        stmt = select(Order).where(Order.id == order_id).execution_options(populate_existing=True)
        if for_update:
            # Serializes concurrent status changes; SQLite ignores FOR UPDATE and locks the whole database on write
            stmt = stmt.with_for_update()
        order = await session.execute(stmt)
        order = order.scalar()
        if order is not None:
            return OrderDTO.model_validate(order, from_attributes=True)
        else:
            return None

    @staticmethod
    async def get_by_order_number(order_number: str, session: AsyncSession) -> OrderDTO | None:
        stmt = select(Order).where(Order.order_number == order_number)
        order = await session.execute(stmt)
        order = order.scalar()
        if order is not None:
            return OrderDTO.model_validate(order, from_attributes=True)
        else:
            return None

    @staticmethod
    async def get_by_payment_intent_id(payment_intent_id: str, session: AsyncSession) -> OrderDTO | None:
        stmt = select(Order).where(Order.payment_intent_id == payment_intent_id)
        order = await session.execute(stmt)
        order = order.scalar()
        if order is not None:
            return OrderDTO.model_validate(order, from_attributes=True)
        else:
            return None

    @staticmethod
    async def get_next_order_number(session: AsyncSession) -> str:
        """
        Generate an order number that is not taken yet.

        The unique constraint on orders.order_number remains the final guard;
        a collision between this check and the insert surfaces as
        IntegrityError and the whole transaction is retried.

        Raises:
            OrderNumberExhaustedException: If every candidate already exists
        """
        for _ in range(ORDER_NUMBER_MAX_ATTEMPTS):
            order_number = generate_order_number()

            stmt = select(Order.order_number).where(Order.order_number == order_number)
            result = await session.execute(stmt)
            existing = result.scalar_one_or_none()

            if not existing:
                return order_number
            logger.warning(f"⚠️ Order number collision on {order_number}, regenerating")

        raise OrderNumberExhaustedException(ORDER_NUMBER_MAX_ATTEMPTS)

    @staticmethod
    async def apply_patch(order_id: str, patch: OrderStatusPatch, session: AsyncSession) -> OrderDTO | None:
        """
        Apply a status patch as a single parameterized UPDATE.

        Returns:
            Updated OrderDTO, or None if no order has this id
        """
        values = patch.to_values()
        if values:
            stmt = update(Order).where(Order.id == order_id).values(**values)
            await session.execute(stmt)
        return await OrderRepository.get_by_id(order_id, session)

    @staticmethod
    async def get_all(session: AsyncSession,
                      payment_status: PaymentStatus | None = None,
                      production_status: ProductionStatus | None = None,
                      limit: int | None = None,
                      offset: int = 0) -> list[OrderDTO]:
        stmt = select(Order)
        if payment_status is not None:
            stmt = stmt.where(Order.payment_status == payment_status.value)
        if production_status is not None:
            stmt = stmt.where(Order.production_status == production_status.value)
        stmt = stmt.order_by(Order.created_at.desc(), Order.order_number.desc()).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        orders = await session.execute(stmt)
        return [OrderDTO.model_validate(order, from_attributes=True) for order in orders.scalars().all()]
