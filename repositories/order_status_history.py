from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from enums.status_type import StatusType
from models.order_status_history import OrderStatusHistory, OrderStatusHistoryDTO


class OrderStatusHistoryRepository:
    """
    Append-only access to order_status_history.

    There is intentionally no update or delete here.
    """

    @staticmethod
    async def append(order_id: str,
                     status_type: StatusType,
                     new_status: str,
                     session: AsyncSession,
                     notes: str | None = None,
                     order_item_id: str | None = None) -> OrderStatusHistoryDTO:
        entry = OrderStatusHistory(
            order_id=order_id,
            order_item_id=order_item_id,
            status_type=status_type.value,
            new_status=new_status,
            notes=notes,
        )
        session.add(entry)
        await session.flush()
        await session.refresh(entry)
        return OrderStatusHistoryDTO.model_validate(entry, from_attributes=True)

    @staticmethod
    async def get_by_order_id(order_id: str, session: AsyncSession) -> list[OrderStatusHistoryDTO]:
        stmt = (
            select(OrderStatusHistory)
            .where(OrderStatusHistory.order_id == order_id)
            .order_by(OrderStatusHistory.id)
        )
        entries = await session.execute(stmt)
        return [OrderStatusHistoryDTO.model_validate(entry, from_attributes=True)
                for entry in entries.scalars().all()]
