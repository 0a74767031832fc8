from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator
from sqlalchemy import Column, Integer, DateTime, String, JSON, func, ForeignKey, CheckConstraint, Index

from enums.production_status import ProductionStatus
from models.base import Base, Money, new_uuid


class OrderItem(Base):
    __tablename__ = 'order_items'

    __table_args__ = (
        CheckConstraint('quantity > 0', name='ck_order_item_positive_quantity'),
        Index('ix_order_items_order_id', 'order_id'),
        Index('ix_order_items_variant_id', 'variant_id'),
    )

    id = Column(String(36), primary_key=True, default=new_uuid)
    order_id = Column(String(36), ForeignKey('orders.id', ondelete='CASCADE'), nullable=False)
    variant_id = Column(String(36), ForeignKey('variants.id'), nullable=False)
    # 0-based line index within the order, keeps items in submission order
    position = Column(Integer, nullable=False, default=0)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Money, nullable=False)
    total_price = Column(Money, nullable=False)

    # Customization snapshot (JSON)
    # Format: {"method": "screen_print", "placements": [{"location": "front_chest", "x": 0, "y": 0,
    #          "width": 10, "height": 12, "colors": ["#000"]}], "artwork_assets": [...], "notes": "..."}
    custom_spec = Column(JSON, nullable=True)
    production_status = Column(String(20), nullable=False, default=ProductionStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), default=func.now(), nullable=False)


class OrderItemDTO(BaseModel):
    id: str | None = None
    order_id: str | None = None
    variant_id: str | None = None
    position: int | None = None
    quantity: int | None = None
    unit_price: Decimal | None = None
    total_price: Decimal | None = None
    custom_spec: dict | None = None
    production_status: ProductionStatus | None = None
    created_at: datetime | None = None


class OrderItemCreateDTO(BaseModel):
    variant_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0)
    total_price: Decimal = Field(..., ge=0)
    customization: dict = Field(default_factory=dict)

    @model_validator(mode='after')
    def check_total_price(self):
        # Money columns hold whole cents, a sub-cent unit price would be rounded on write
        if self.unit_price != self.unit_price.quantize(Decimal("0.01")):
            raise ValueError(f"unit_price {self.unit_price} has more than 2 decimal places")
        if self.unit_price * self.quantity != self.total_price:
            raise ValueError(
                f"total_price {self.total_price} does not equal unit_price {self.unit_price} x quantity {self.quantity}"
            )
        return self
