from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from models.price_rule import PriceRule, PriceRuleDTO


class PriceRuleRepository:
    """Repository for global quantity discount rules."""

    @staticmethod
    async def get_applicable_global_rule(quantity: int, session: AsyncSession) -> PriceRuleDTO | None:
        """
        Get the single global rule that applies to a quantity.

        Highest priority wins; rules sharing a priority resolve to the lowest id
        so the result never depends on storage order.

        Args:
            quantity: Quoted quantity
            session: Database session

        Returns:
            PriceRuleDTO or None if no active global rule covers the quantity
        """
        stmt = (
            select(PriceRule)
            .where(
                PriceRule.scope == "global",
                PriceRule.active == True,
                PriceRule.min_qty <= quantity,
                or_(PriceRule.max_qty.is_(None), PriceRule.max_qty >= quantity),
            )
            .order_by(PriceRule.priority.desc(), PriceRule.id.asc())
            .limit(1)
        )
        rule = await session.execute(stmt)
        rule = rule.scalar()
        if rule is not None:
            return PriceRuleDTO.model_validate(rule, from_attributes=True)
        else:
            return None

    @staticmethod
    async def create(rule_dto: PriceRuleDTO, session: AsyncSession) -> PriceRuleDTO:
        data = rule_dto.model_dump(exclude_none=True)
        if 'discount_type' in data:
            data['discount_type'] = data['discount_type'].value
        rule = PriceRule(**data)
        session.add(rule)
        await session.flush()
        return PriceRuleDTO.model_validate(rule, from_attributes=True)
