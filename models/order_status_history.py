from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, func, Index

from enums.status_type import StatusType
from models.base import Base


class OrderStatusHistory(Base):
    """
    Append-only audit trail of status transitions.

    Every change of Order.payment_status, Order.production_status or
    OrderItem.production_status appends exactly one row. Rows are never
    updated or deleted; the autoincrement id defines append order.
    """
    __tablename__ = 'order_status_history'

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(36), ForeignKey('orders.id', ondelete='CASCADE'), nullable=False)
    order_item_id = Column(String(36), ForeignKey('order_items.id', ondelete='CASCADE'), nullable=True)
    status_type = Column(String(20), nullable=False)
    new_status = Column(String(30), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=func.now(), nullable=False)

    __table_args__ = (
        Index('ix_order_status_history_order_id', 'order_id'),
    )


class OrderStatusHistoryDTO(BaseModel):
    id: int | None = None
    order_id: str | None = None
    order_item_id: str | None = None
    status_type: StatusType | None = None
    new_status: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
