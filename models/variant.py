from decimal import Decimal

from pydantic import BaseModel
from sqlalchemy import Column, String, Integer, ForeignKey, CheckConstraint, Index

from models.base import Base, Money, new_uuid


class Variant(Base):
    """A purchasable color/size combination of a product. Reference data for pricing."""
    __tablename__ = 'variants'

    id = Column(String(36), primary_key=True, default=new_uuid)
    product_id = Column(String(36), ForeignKey('products.id', ondelete='CASCADE'), nullable=False)
    sku = Column(String(64), nullable=True, unique=True)
    color = Column(String(50), nullable=False)
    size = Column(String(20), nullable=False)
    base_price = Column(Money, nullable=False)
    stock_level = Column(Integer, nullable=False, default=0)
    image_url = Column(String(500), nullable=True)

    __table_args__ = (
        CheckConstraint('stock_level >= 0', name='check_variant_stock_non_negative'),
        Index('ix_variants_product_id', 'product_id'),
    )


class VariantDTO(BaseModel):
    id: str | None = None
    product_id: str | None = None
    sku: str | None = None
    color: str | None = None
    size: str | None = None
    base_price: Decimal | None = None
    stock_level: int | None = None
    image_url: str | None = None
