"""
Catalog and pricing exceptions.
"""

from .base import ShopException, ShopValidationException, NotFoundException


class VariantNotFoundException(NotFoundException):
    """Raised when a variant id does not resolve."""

    def __init__(self, variant_id: str):
        super().__init__(
            f"Variant {variant_id} not found",
            details={'variant_id': variant_id}
        )
        self.variant_id = variant_id


class DecorationMethodNotFoundException(NotFoundException):
    """Raised when a decoration method name does not resolve."""

    def __init__(self, method_name: str):
        super().__init__(
            f"Decoration method '{method_name}' not found",
            details={'method_name': method_name}
        )
        self.method_name = method_name


class ProductNotFoundException(NotFoundException):
    """Raised when a product slug does not resolve to an active product."""

    def __init__(self, slug: str):
        super().__init__(
            f"Product '{slug}' not found",
            details={'slug': slug}
        )
        self.slug = slug


class PricingValidationException(ShopValidationException):
    """Raised when quote input is invalid (e.g. non-positive quantity)."""
    pass


class InvalidPricingRulesException(ShopException):
    """Raised when a decoration method's stored pricing rules cannot be used."""

    def __init__(self, method_name: str, reason: str):
        super().__init__(
            f"Pricing rules of decoration method '{method_name}' are invalid: {reason}",
            details={'method_name': method_name, 'reason': reason}
        )
        self.method_name = method_name
        self.reason = reason
