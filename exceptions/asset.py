"""
Asset/upload exceptions.
"""

from .base import ShopValidationException, NotFoundException


class AssetNotFoundException(NotFoundException):
    """Raised when asset is not found in database."""

    def __init__(self, asset_id: str):
        super().__init__(
            f"Asset {asset_id} not found",
            details={'asset_id': asset_id}
        )
        self.asset_id = asset_id


class InvalidFileException(ShopValidationException):
    """Raised when an upload has a disallowed type or exceeds the size limit."""
    pass
