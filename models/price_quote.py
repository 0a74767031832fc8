from decimal import Decimal

from pydantic import BaseModel, Field


class PlacementDTO(BaseModel):
    """One artwork/text location on a garment. Geometry is in inches."""
    location: str
    x: Decimal = Decimal("0")
    y: Decimal = Decimal("0")
    width: Decimal = Field(..., ge=0)
    height: Decimal = Field(..., ge=0)
    colors: list[str] = Field(default_factory=list)
    artwork_id: str | None = None
    text_element_id: str | None = None
    rotation: Decimal | None = None


class MethodChargeDTO(BaseModel):
    """Single named decoration charge (e.g. "Placements (2)": 12.00)."""
    description: str
    amount: Decimal


class PriceBreakdownDTO(BaseModel):
    base_price: Decimal
    method_charges: list[MethodChargeDTO]
    quantity_multiplier: Decimal
    total: Decimal


class PriceQuoteDTO(BaseModel):
    """
    Computed, unpersisted price for one order line.

    Invariant: subtotal == (variant_price + decoration_price) * quantity - quantity_discount
    """
    variant_price: Decimal
    decoration_price: Decimal
    quantity_discount: Decimal
    subtotal: Decimal
    breakdown: PriceBreakdownDTO
