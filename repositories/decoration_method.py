from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from enums.catalog_status import DecorationMethodStatus
from exceptions.catalog import InvalidPricingRulesException
from models.decoration_method import DecorationMethod, DecorationMethodDTO, PricingRulesDTO


class DecorationMethodRepository:
    """Repository for decoration methods (reference data consumed by pricing)."""

    @staticmethod
    async def get_by_name(name: str, session: AsyncSession) -> DecorationMethodDTO | None:
        stmt = select(DecorationMethod).where(DecorationMethod.name == name)
        method = await session.execute(stmt)
        method = method.scalar()
        if method is not None:
            return DecorationMethodDTO.model_validate(method, from_attributes=True)
        else:
            return None

    @staticmethod
    async def get_active(session: AsyncSession) -> list[DecorationMethodDTO]:
        stmt = (
            select(DecorationMethod)
            .where(DecorationMethod.status == DecorationMethodStatus.ACTIVE.value)
            .order_by(DecorationMethod.name)
        )
        methods = await session.execute(stmt)
        return [DecorationMethodDTO.model_validate(method, from_attributes=True) for method in methods.scalars().all()]

    @staticmethod
    async def create(method_dto: DecorationMethodDTO, session: AsyncSession) -> DecorationMethodDTO:
        """
        Insert a decoration method after validating its pricing rules.

        Raises:
            InvalidPricingRulesException: If quantity breaks overlap or a rate is malformed
        """
        try:
            rules = PricingRulesDTO.model_validate(method_dto.pricing_rules or {})
        except ValidationError as e:
            raise InvalidPricingRulesException(method_dto.name or "?", str(e.errors()[0]['msg']))

        data = method_dto.model_dump(exclude_none=True)
        # JSON column: keep decimals exact by storing them as strings
        data['pricing_rules'] = rules.model_dump(mode='json', exclude_none=True)
        if 'status' in data:
            data['status'] = data['status'].value
        method = DecorationMethod(**data)
        session.add(method)
        await session.flush()
        return DecorationMethodDTO.model_validate(method, from_attributes=True)
