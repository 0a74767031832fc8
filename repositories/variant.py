from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.variant import Variant, VariantDTO


class VariantRepository:
    @staticmethod
    async def get_by_id(variant_id: str, session: AsyncSession) -> VariantDTO | None:
        stmt = select(Variant).where(Variant.id == variant_id)
        variant = await session.execute(stmt)
        variant = variant.scalar()
        if variant is not None:
            return VariantDTO.model_validate(variant, from_attributes=True)
        else:
            return None

    @staticmethod
    async def get_by_product_id(product_id: str, session: AsyncSession) -> list[VariantDTO]:
        stmt = (
            select(Variant)
            .where(Variant.product_id == product_id)
            .order_by(Variant.color, Variant.size)
        )
        variants = await session.execute(stmt)
        return [VariantDTO.model_validate(variant, from_attributes=True) for variant in variants.scalars().all()]

    @staticmethod
    async def create(variant_dto: VariantDTO, session: AsyncSession) -> VariantDTO:
        variant = Variant(**variant_dto.model_dump(exclude_none=True))
        session.add(variant)
        await session.flush()
        return VariantDTO.model_validate(variant, from_attributes=True)
