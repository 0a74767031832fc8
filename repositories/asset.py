from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from models.asset import Asset, AssetDTO


class AssetRepository:
    @staticmethod
    async def create(asset_dto: AssetDTO, session: AsyncSession) -> AssetDTO:
        asset = Asset(**asset_dto.model_dump(exclude_none=True))
        session.add(asset)
        await session.flush()
        await session.refresh(asset)
        return AssetDTO.model_validate(asset, from_attributes=True)

    @staticmethod
    async def get_by_id(asset_id: str, session: AsyncSession) -> AssetDTO | None:
        stmt = select(Asset).where(Asset.id == asset_id)
        asset = await session.execute(stmt)
        asset = asset.scalar()
        if asset is not None:
            return AssetDTO.model_validate(asset, from_attributes=True)
        else:
            return None

    @staticmethod
    async def count_by_hash(file_hash: str, session: AsyncSession) -> int:
        """Number of asset records pointing at the same stored file."""
        stmt = select(Asset.id).where(Asset.hash == file_hash)
        assets = await session.execute(stmt)
        return len(assets.scalars().all())

    @staticmethod
    async def delete(asset_id: str, session: AsyncSession) -> None:
        stmt = delete(Asset).where(Asset.id == asset_id)
        await session.execute(stmt)
