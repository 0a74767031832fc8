import logging
from decimal import Decimal, ROUND_HALF_UP

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from enums.discount_type import DiscountType
from exceptions.catalog import (
    VariantNotFoundException,
    DecorationMethodNotFoundException,
    PricingValidationException,
    InvalidPricingRulesException,
)
from exceptions.order import PriceMismatchException
from models.decoration_method import DecorationMethodDTO, PricingRulesDTO
from models.price_quote import PlacementDTO, MethodChargeDTO, PriceBreakdownDTO, PriceQuoteDTO
from models.price_rule import PriceRuleDTO
from repositories.decoration_method import DecorationMethodRepository
from repositories.price_rule import PriceRuleRepository
from repositories.variant import VariantRepository

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class PricingService:
    """Service for decorated-garment price quotes."""

    @staticmethod
    async def calculate_price(
        variant_id: str,
        method_name: str,
        placements: list[PlacementDTO],
        quantity: int,
        session: AsyncSession
    ) -> PriceQuoteDTO:
        """
        Quote one order line: a variant decorated with one method at N placements.

        Algorithm:
        1. Decoration price = method base price
           + per_location x placements
           + per_color x total colors over all placements
           + per_square_inch x total print area
        2. Multiply the decoration price by the first matching quantity break
        3. Item total = variant base price + adjusted decoration price
        4. Apply at most one global price rule to item total x quantity

        Example: variant 12.98, base 10, per_location 6, 2 placements, qty 6
        (break 6-11 -> 0.95):
            decoration = (10 + 12) x 0.95 = 20.90
            item total = 33.88, subtotal = 203.28

        All arithmetic is Decimal and nothing is rounded here; callers that
        charge money round once at the end (see to_minor_units).

        Args:
            variant_id: Variant being decorated
            method_name: Decoration method name (e.g. "screen_print")
            placements: Artwork/text placements
            quantity: Number of units
            session: Database session

        Returns:
            PriceQuoteDTO with subtotal == (variant_price + decoration_price) * quantity - quantity_discount

        Raises:
            PricingValidationException: If quantity is not a positive integer
            VariantNotFoundException: If variant doesn't exist
            DecorationMethodNotFoundException: If method doesn't exist
            InvalidPricingRulesException: If stored pricing rules are malformed
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise PricingValidationException(f"Quantity must be a positive integer, got {quantity!r}")

        variant = await VariantRepository.get_by_id(variant_id, session)
        if variant is None:
            raise VariantNotFoundException(variant_id)

        method = await DecorationMethodRepository.get_by_name(method_name, session)
        if method is None:
            raise DecorationMethodNotFoundException(method_name)

        rules = PricingService.parse_pricing_rules(method)
        variant_price = variant.base_price

        # Decoration charges
        decoration_price = rules.base_price
        method_charges = [MethodChargeDTO(description=f"{method.display_name} - Base", amount=rules.base_price)]

        if rules.per_location:
            location_charge = rules.per_location * len(placements)
            decoration_price += location_charge
            method_charges.append(MethodChargeDTO(
                description=f"Placements ({len(placements)})",
                amount=location_charge
            ))

        if rules.per_color:
            total_colors = sum(len(p.colors) for p in placements)
            color_charge = rules.per_color * total_colors
            decoration_price += color_charge
            method_charges.append(MethodChargeDTO(
                description=f"Colors ({total_colors})",
                amount=color_charge
            ))

        if rules.per_square_inch:
            total_area = sum((p.width * p.height for p in placements), Decimal("0"))
            area_charge = rules.per_square_inch * total_area
            decoration_price += area_charge
            # Area is rounded for display only, the charge keeps full precision
            method_charges.append(MethodChargeDTO(
                description=f"Print area ({total_area.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)} sq in)",
                amount=area_charge
            ))

        quantity_multiplier = PricingService.get_quantity_multiplier(rules, quantity)
        adjusted_decoration_price = decoration_price * quantity_multiplier
        item_total = variant_price + adjusted_decoration_price

        rule = await PriceRuleRepository.get_applicable_global_rule(quantity, session)
        quantity_discount = PricingService.calculate_discount(rule, item_total, quantity)

        subtotal = item_total * quantity - quantity_discount
        if subtotal < 0:
            logger.warning(f"⚠️ Discount rule {rule.id} exceeds line total for variant {variant_id} x {quantity}")

        return PriceQuoteDTO(
            variant_price=variant_price,
            decoration_price=adjusted_decoration_price,
            quantity_discount=quantity_discount,
            subtotal=subtotal,
            breakdown=PriceBreakdownDTO(
                base_price=variant_price,
                method_charges=method_charges,
                quantity_multiplier=quantity_multiplier,
                total=item_total
            )
        )

    @staticmethod
    def parse_pricing_rules(method: DecorationMethodDTO) -> PricingRulesDTO:
        try:
            return PricingRulesDTO.model_validate(method.pricing_rules or {})
        except ValidationError as e:
            logger.error(f"Decoration method {method.name} has invalid pricing rules: {e}")
            raise InvalidPricingRulesException(method.name, str(e.errors()[0]['msg']))

    @staticmethod
    def get_quantity_multiplier(rules: PricingRulesDTO, quantity: int) -> Decimal:
        """First quantity break (in list order) containing the quantity wins; 1.0 if none does."""
        for quantity_break in rules.quantity_breaks:
            if quantity_break.contains(quantity):
                return quantity_break.multiplier
        return Decimal("1.0")

    @staticmethod
    def calculate_discount(rule: PriceRuleDTO | None, item_total: Decimal, quantity: int) -> Decimal:
        if rule is None:
            return Decimal("0")
        if rule.discount_type == DiscountType.PERCENTAGE:
            return item_total * quantity * rule.discount_value / 100
        elif rule.discount_type == DiscountType.FIXED_AMOUNT:
            return rule.discount_value * quantity
        return Decimal("0")

    @staticmethod
    def round_to_cents(amount: Decimal) -> Decimal:
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)

    @staticmethod
    def to_minor_units(amount: Decimal) -> int:
        """
        Convert a currency amount to integer minor units (cents) for the payment provider.

        Example: Decimal("203.28") -> 20328, Decimal("10.005") -> 1001
        """
        return int(PricingService.round_to_cents(amount) * 100)

    @staticmethod
    def expected_unit_price(quote: PriceQuoteDTO, quantity: int) -> Decimal:
        """
        Per-unit charge for a quoted line, rounded once to cents.

        Example: subtotal 182.952 for 6 units -> 30.49 (line total 182.94)
        """
        return PricingService.round_to_cents(quote.subtotal / quantity)

    @staticmethod
    async def verify_item_price(
        variant_id: str,
        quantity: int,
        unit_price: Decimal,
        customization: dict,
        session: AsyncSession
    ) -> PriceQuoteDTO | None:
        """
        Recompute the quote for an order line and compare it with the submitted unit price.

        Only the unit price is checked; the line total is unit_price x quantity,
        which OrderItemCreateDTO already enforces. Lines whose customization
        does not name a method and placements cannot be quoted and are
        accepted as submitted (returns None).

        Raises:
            PriceMismatchException: If the unit price differs from the quoted subtotal / quantity rounded to cents
            PricingValidationException: If the placements are malformed
        """
        method_name = customization.get("method") if customization else None
        raw_placements = customization.get("placements") if customization else None
        if not method_name or raw_placements is None:
            return None

        try:
            placements = [PlacementDTO.model_validate(p) for p in raw_placements]
        except (ValidationError, TypeError) as e:
            raise PricingValidationException(f"Invalid placements for variant {variant_id}: {e}")

        quote = await PricingService.calculate_price(variant_id, method_name, placements, quantity, session)
        expected = PricingService.expected_unit_price(quote, quantity)
        if expected != unit_price:
            logger.warning(f"⚠️ Price mismatch for variant {variant_id}: quoted {expected} per unit, submitted {unit_price}")
            raise PriceMismatchException(variant_id, expected, unit_price)
        return quote
