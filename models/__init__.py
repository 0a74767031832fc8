"""
Models Package

This file ensures all SQLAlchemy models are imported and registered,
which is required for foreign keys to resolve when creating tables.
"""

from models.base import Base
from models.product import Product
from models.variant import Variant
from models.decoration_method import DecorationMethod
from models.price_rule import PriceRule
from models.customer import Customer
from models.order import Order
from models.orderItem import OrderItem
from models.order_status_history import OrderStatusHistory
from models.asset import Asset

__all__ = [
    'Base',
    'Product',
    'Variant',
    'DecorationMethod',
    'PriceRule',
    'Customer',
    'Order',
    'OrderItem',
    'OrderStatusHistory',
    'Asset',
]
