from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, String, DateTime, JSON, func

from models.base import Base, new_uuid


class Customer(Base):
    """Created on the first order from an email; later orders reuse it (exact email match only)."""
    __tablename__ = 'customers'

    id = Column(String(36), primary_key=True, default=new_uuid)
    email = Column(String(255), nullable=False, unique=True)
    name = Column(String(200), nullable=True)
    phone = Column(String(50), nullable=True)
    addresses = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), default=func.now())


class CustomerDTO(BaseModel):
    id: str | None = None
    email: str | None = None
    name: str | None = None
    phone: str | None = None
    addresses: list[dict] | None = None
    created_at: datetime | None = None
