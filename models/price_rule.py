from decimal import Decimal

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, Boolean, CheckConstraint, Index

from enums.discount_type import DiscountType
from models.base import Base, Money


class PriceRule(Base):
    """
    Global quantity discount.

    At most one rule applies to a quote: the active global rule with the
    highest priority whose [min_qty, max_qty] range contains the quantity.
    Equal priorities resolve to the lowest id.
    """
    __tablename__ = 'price_rules'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=True)
    scope = Column(String(20), nullable=False, default="global")
    active = Column(Boolean, nullable=False, default=True)
    min_qty = Column(Integer, nullable=False, default=1)
    max_qty = Column(Integer, nullable=True)
    discount_type = Column(String(20), nullable=False)
    discount_value = Column(Money, nullable=False)
    priority = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint('min_qty > 0', name='check_price_rule_min_qty_positive'),
        Index('ix_price_rules_scope_active', 'scope', 'active'),
    )


class PriceRuleDTO(BaseModel):
    id: int | None = None
    name: str | None = None
    scope: str | None = None
    active: bool | None = None
    min_qty: int | None = None
    max_qty: int | None = None
    discount_type: DiscountType | None = None
    discount_value: Decimal | None = None
    priority: int | None = None
