from enum import Enum


class ProductStatus(str, Enum):
    ACTIVE = "active"
    DRAFT = "draft"
    ARCHIVED = "archived"


class DecorationMethodStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
