from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, String, Integer, DateTime, func, Index

from models.base import Base, new_uuid


class Asset(Base):
    """Uploaded file. Stored content-addressed: the filename is the md5 of the bytes."""
    __tablename__ = 'assets'

    id = Column(String(36), primary_key=True, default=new_uuid)
    owner_type = Column(String(50), nullable=False)
    owner_id = Column(String(36), nullable=True)
    file_url = Column(String(500), nullable=False)
    file_type = Column(String(100), nullable=False)
    file_size = Column(Integer, nullable=False)
    original_name = Column(String(255), nullable=True)
    hash = Column(String(32), nullable=False)
    created_at = Column(DateTime(timezone=True), default=func.now())

    __table_args__ = (
        Index('ix_assets_owner', 'owner_type', 'owner_id'),
        Index('ix_assets_hash', 'hash'),
    )


class AssetDTO(BaseModel):
    id: str | None = None
    owner_type: str | None = None
    owner_id: str | None = None
    file_url: str | None = None
    file_type: str | None = None
    file_size: int | None = None
    original_name: str | None = None
    hash: str | None = None
    created_at: datetime | None = None
