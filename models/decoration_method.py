from decimal import Decimal

from pydantic import BaseModel, Field, model_validator
from sqlalchemy import Column, String, Text, JSON

from enums.catalog_status import DecorationMethodStatus
from models.base import Base, new_uuid


class DecorationMethod(Base):
    """
    Printing/embroidery technique with its own pricing formula.

    pricing_rules is stored as JSON because its shape varies per method.
    Format: {"base_price": 10, "per_location": 6, "per_color": 1.5,
             "per_square_inch": 0.05,
             "quantity_breaks": [{"min": 1, "max": 5, "multiplier": 1.0}, ...]}
    """
    __tablename__ = 'decoration_methods'

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String(50), nullable=False, unique=True)
    display_name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=DecorationMethodStatus.ACTIVE.value)
    pricing_rules = Column(JSON, nullable=False)
    file_requirements = Column(JSON, nullable=True)


class QuantityBreakDTO(BaseModel):
    """Quantity range mapped to a decoration price multiplier. max=None means open-ended."""
    min: int = Field(..., ge=1)
    max: int | None = None
    multiplier: Decimal = Field(..., gt=0)

    @model_validator(mode='after')
    def check_range(self):
        if self.max is not None and self.max < self.min:
            raise ValueError(f"quantity break max ({self.max}) is lower than min ({self.min})")
        return self

    def contains(self, quantity: int) -> bool:
        return quantity >= self.min and (self.max is None or quantity <= self.max)

    def overlaps(self, other: "QuantityBreakDTO") -> bool:
        self_upper = self.max if self.max is not None else float("inf")
        other_upper = other.max if other.max is not None else float("inf")
        return self.min <= other_upper and other.min <= self_upper


class PricingRulesDTO(BaseModel):
    base_price: Decimal = Decimal("0")
    per_location: Decimal | None = None
    per_color: Decimal | None = None
    per_square_inch: Decimal | None = None
    quantity_breaks: list[QuantityBreakDTO] = Field(default_factory=list)

    @model_validator(mode='after')
    def check_breaks_do_not_overlap(self):
        for i, current in enumerate(self.quantity_breaks):
            for other in self.quantity_breaks[i + 1:]:
                if current.overlaps(other):
                    raise ValueError(
                        f"quantity breaks overlap: [{current.min}, {current.max}] and [{other.min}, {other.max}]"
                    )
        return self


class DecorationMethodDTO(BaseModel):
    id: str | None = None
    name: str | None = None
    display_name: str | None = None
    description: str | None = None
    status: DecorationMethodStatus | None = None
    pricing_rules: dict | None = None
    file_requirements: dict | None = None
