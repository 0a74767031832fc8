from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, model_validator
from sqlalchemy import Column, DateTime, ForeignKey, String, Text, JSON, func, Index

from enums.payment_status import PaymentStatus
from enums.production_status import ProductionStatus
from models.base import Base, Money, new_uuid
from models.orderItem import OrderItemCreateDTO


class Order(Base):
    __tablename__ = 'orders'

    id = Column(String(36), primary_key=True, default=new_uuid)
    # Human-readable identifier, e.g. RB-1700000000000-K3X9Q
    order_number = Column(String(40), nullable=False, unique=True)
    customer_id = Column(String(36), ForeignKey('customers.id'), nullable=False)

    # Totals are stored exactly as quoted to the customer
    subtotal = Column(Money, nullable=False)
    tax = Column(Money, nullable=False, default=Decimal("0"))
    shipping = Column(Money, nullable=False, default=Decimal("0"))
    discount = Column(Money, nullable=False, default=Decimal("0"))
    total = Column(Money, nullable=False)

    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    production_status = Column(String(20), nullable=False, default=ProductionStatus.PENDING.value)

    # Address snapshots (copies, never references to customer.addresses)
    shipping_address = Column(JSON, nullable=False)
    billing_address = Column(JSON, nullable=False)
    customer_notes = Column(Text, nullable=True)

    payment_intent_id = Column(String(255), nullable=True)
    tracking_number = Column(String(100), nullable=True)
    shipped_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=func.now())
    updated_at = Column(DateTime(timezone=True), default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('ix_orders_customer_id', 'customer_id'),
        Index('ix_orders_payment_intent_id', 'payment_intent_id'),
    )


class OrderDTO(BaseModel):
    id: str | None = None
    order_number: str | None = None
    customer_id: str | None = None
    subtotal: Decimal | None = None
    tax: Decimal | None = None
    shipping: Decimal | None = None
    discount: Decimal | None = None
    total: Decimal | None = None
    payment_status: PaymentStatus | None = None
    production_status: ProductionStatus | None = None
    shipping_address: dict | None = None
    billing_address: dict | None = None
    customer_notes: str | None = None
    payment_intent_id: str | None = None
    tracking_number: str | None = None
    shipped_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CustomerInputDTO(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    name: str | None = None
    phone: str | None = None


class OrderCreateDTO(BaseModel):
    """
    Validated order creation payload.

    Totals are the ones previously quoted to the customer. Line items whose
    customization can be quoted are re-checked server-side when
    ORDER_PRICE_VERIFICATION is enabled (see OrderService.create_order).
    """
    customer: CustomerInputDTO
    items: list[OrderItemCreateDTO] = Field(..., min_length=1)
    shipping_address: dict
    billing_address: dict | None = None
    subtotal: Decimal = Field(..., ge=0)
    tax: Decimal = Field(default=Decimal("0"), ge=0)
    shipping: Decimal = Field(default=Decimal("0"), ge=0)
    discount: Decimal = Field(default=Decimal("0"), ge=0)
    total: Decimal = Field(..., ge=0)
    customer_notes: str | None = None

    @model_validator(mode='before')
    @classmethod
    def drop_null_amounts(cls, data):
        """Optional amounts sent as null fall back to zero."""
        if isinstance(data, dict):
            data = dict(data)
            for key in ('tax', 'shipping', 'discount'):
                if key in data and data[key] is None:
                    data.pop(key)
        return data


class OrderStatusPatch(BaseModel):
    """
    Enumerates every order column a status operation may touch.

    Only fields that are set end up in the UPDATE, so a payment update never
    touches production columns and an absent tracking number never clears
    an existing one.
    """
    payment_status: PaymentStatus | None = None
    production_status: ProductionStatus | None = None
    payment_intent_id: str | None = None
    tracking_number: str | None = None
    shipped_at: datetime | None = None

    def to_values(self) -> dict:
        values = {}
        for field_name, value in self.model_dump(exclude_none=True).items():
            values[field_name] = value.value if isinstance(value, Enum) else value
        return values
