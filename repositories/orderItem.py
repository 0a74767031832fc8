from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from enums.production_status import ProductionStatus
from exceptions.order import OrderValidationException
from models.orderItem import OrderItem, OrderItemDTO, OrderItemCreateDTO


class OrderItemRepository:
    @staticmethod
    async def create(order_id: str, item: OrderItemCreateDTO, session: AsyncSession,
                     position: int = 0) -> OrderItemDTO:
        """
        Insert one order line.

        Raises:
            OrderValidationException: If total_price != unit_price * quantity
        """
        if item.unit_price * item.quantity != item.total_price:
            raise OrderValidationException(
                f"Item total {item.total_price} does not match {item.unit_price} x {item.quantity}"
            )
        order_item = OrderItem(
            order_id=order_id,
            variant_id=item.variant_id,
            position=position,
            quantity=item.quantity,
            unit_price=item.unit_price,
            total_price=item.total_price,
            custom_spec=item.customization,
            production_status=ProductionStatus.PENDING.value,
        )
        session.add(order_item)
        await session.flush()
        await session.refresh(order_item)
        return OrderItemDTO.model_validate(order_item, from_attributes=True)

    @staticmethod
    async def get_by_id(item_id: str, session: AsyncSession, for_update: bool = False) -> OrderItemDTO | None:
        stmt = select(OrderItem).where(OrderItem.id == item_id).execution_options(populate_existing=True)
        if for_update:
            stmt = stmt.with_for_update()
        order_item = await session.execute(stmt)
        order_item = order_item.scalar()
        if order_item is not None:
            return OrderItemDTO.model_validate(order_item, from_attributes=True)
        else:
            return None

    @staticmethod
    async def get_by_order_id(order_id: str, session: AsyncSession) -> list[OrderItemDTO]:
        stmt = (
            select(OrderItem)
            .where(OrderItem.order_id == order_id)
            .order_by(OrderItem.position)
            .execution_options(populate_existing=True)
        )
        order_items = await session.execute(stmt)
        return [OrderItemDTO.model_validate(item, from_attributes=True) for item in order_items.scalars().all()]

    @staticmethod
    async def update_production_status(item_id: str, status: ProductionStatus,
                                       session: AsyncSession) -> OrderItemDTO | None:
        stmt = update(OrderItem).where(OrderItem.id == item_id).values(production_status=status.value)
        await session.execute(stmt)
        return await OrderItemRepository.get_by_id(item_id, session)
