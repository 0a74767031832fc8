from datetime import datetime

from pydantic import BaseModel, Field
from sqlalchemy import Column, String, Text, DateTime, JSON, func

from enums.catalog_status import ProductStatus
from models.base import Base, new_uuid
from models.variant import VariantDTO


class Product(Base):
    __tablename__ = 'products'

    id = Column(String(36), primary_key=True, default=new_uuid)
    title = Column(String(200), nullable=False)
    slug = Column(String(200), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    images = Column(JSON, nullable=False, default=list)
    materials = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default=ProductStatus.ACTIVE.value)
    created_at = Column(DateTime(timezone=True), default=func.now())


class ProductDTO(BaseModel):
    id: str | None = None
    title: str | None = None
    slug: str | None = None
    description: str | None = None
    images: list[str] | None = None
    materials: str | None = None
    status: ProductStatus | None = None
    created_at: datetime | None = None


class ProductWithVariantsDTO(ProductDTO):
    variants: list[VariantDTO] = Field(default_factory=list)
