"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.
"""

import os
import sys
import tempfile
from decimal import Decimal
from itertools import count

import pytest
import pytest_asyncio

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# config reads the environment at import time, so this has to run first
os.environ.setdefault("RUNTIME_ENVIRONMENT", "TEST")
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DB_AUTO_CREATE", "false")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="shop-test-uploads-"))
os.environ.setdefault("ADMIN_API_TOKEN", "test-admin-token-0123456789abcdef0123456789")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_testsecret0123456789")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_0123456789abcdef")
os.environ.setdefault("LOG_MASK_SECRETS", "true")

import config
from db import Database
from enums.catalog_status import DecorationMethodStatus, ProductStatus
from exceptions.payment import PaymentGatewayException
from models.decoration_method import DecorationMethodDTO
from models.product import ProductDTO
from models.variant import VariantDTO
from repositories.decoration_method import DecorationMethodRepository
from repositories.product import ProductRepository
from repositories.variant import VariantRepository
from services.payment_gateway import PaymentGateway, PaymentIntentDTO
from utils.transaction_manager import TransactionManager

QUANTITY_BREAKS = [
    {"min": 1, "max": 5, "multiplier": "1.0"},
    {"min": 6, "max": 11, "multiplier": "0.95"},
    {"min": 12, "max": None, "multiplier": "0.85"},
]


# ============================================================================
# Payment Gateway Fake
# ============================================================================

class FakePaymentGateway(PaymentGateway):
    """In-memory payment provider. Intents start as requires_payment_method."""

    def __init__(self):
        self.intents: dict[str, PaymentIntentDTO] = {}
        self.unreachable = False
        self._ids = count(1)

    async def create_intent(self, amount: int, currency: str, metadata: dict[str, str]) -> PaymentIntentDTO:
        if self.unreachable:
            raise PaymentGatewayException("create_intent", "connection refused")
        intent_id = f"pi_test{next(self._ids)}"
        intent = PaymentIntentDTO(
            id=intent_id,
            status="requires_payment_method",
            amount=amount,
            currency=currency,
            client_secret=f"{intent_id}_secret_abc123",
            metadata=dict(metadata)
        )
        self.intents[intent_id] = intent
        return intent

    async def retrieve_intent(self, payment_intent_id: str) -> PaymentIntentDTO:
        if self.unreachable:
            raise PaymentGatewayException("retrieve_intent", "connection refused")
        if payment_intent_id not in self.intents:
            raise PaymentGatewayException("retrieve_intent", "No such payment_intent")
        return self.intents[payment_intent_id]

    def set_status(self, payment_intent_id: str, status: str) -> None:
        self.intents[payment_intent_id] = self.intents[payment_intent_id].model_copy(update={"status": status})

    def add_intent(self, intent: PaymentIntentDTO) -> None:
        self.intents[intent.id] = intent


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def db():
    """Fresh in-memory database per test."""
    database = Database("sqlite+aiosqlite:///:memory:")
    await database.create_all()
    yield database
    await database.dispose()


@pytest_asyncio.fixture
async def session(db):
    async with db.session() as session:
        yield session


@pytest_asyncio.fixture
async def catalog(db):
    """
    Minimal catalog:
    - one active T-shirt with a 12.98 variant
    - screen_print: base 10, per_location 6, per_color 1.50
    - dtg: base 5, per_square_inch 0.05
    Both methods use the 1-5 / 6-11 / 12+ quantity breaks.
    """
    async with TransactionManager.atomic_transaction(db) as session:
        product = await ProductRepository.create(ProductDTO(
            title="Classic T-Shirt",
            slug="classic-t-shirt",
            images=[],
            status=ProductStatus.ACTIVE
        ), session)
        variant = await VariantRepository.create(VariantDTO(
            product_id=product.id,
            sku="TEE-W-M",
            color="White",
            size="M",
            base_price=Decimal("12.98"),
            stock_level=50
        ), session)
        screen_print = await DecorationMethodRepository.create(DecorationMethodDTO(
            name="screen_print",
            display_name="Screen Print",
            status=DecorationMethodStatus.ACTIVE,
            pricing_rules={
                "base_price": "10",
                "per_location": "6",
                "per_color": "1.50",
                "quantity_breaks": QUANTITY_BREAKS,
            }
        ), session)
        dtg = await DecorationMethodRepository.create(DecorationMethodDTO(
            name="dtg",
            display_name="Direct to Garment",
            status=DecorationMethodStatus.ACTIVE,
            pricing_rules={
                "base_price": "5",
                "per_square_inch": "0.05",
                "quantity_breaks": QUANTITY_BREAKS,
            }
        ), session)

    return {"product": product, "variant": variant, "screen_print": screen_print, "dtg": dtg}


@pytest.fixture
def payment_gateway():
    return FakePaymentGateway()


# ============================================================================
# HTTP Fixtures
# ============================================================================

@pytest.fixture
def app(db, payment_gateway):
    from app import create_app
    return create_app(database=db, payment_gateway=payment_gateway)


@pytest_asyncio.fixture
async def client(app):
    from httpx import ASGITransport, AsyncClient
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {config.ADMIN_API_TOKEN}"}


# ============================================================================
# Payload Helpers
# ============================================================================

def two_placements(colors_per_placement: int = 0) -> list[dict]:
    colors = ["#000000", "#FFFFFF", "#FF0000"][:colors_per_placement]
    return [
        {"location": "front_chest", "x": 0, "y": 0, "width": 10, "height": 12, "colors": list(colors)},
        {"location": "back", "x": 0, "y": 0, "width": 4, "height": 4, "colors": list(colors)},
    ]


def order_payload(variant_id: str,
                  email: str = "jane@example.com",
                  quantity: int = 6,
                  unit_price: str = "33.88",
                  customization: dict | None = None,
                  items: list[dict] | None = None,
                  total: str | None = None) -> dict:
    """
    Order body for the quoted line "variant 12.98 + screen print at 2 placements, x6" = 203.28.

    The default customization has no placements, so it is accepted as submitted;
    pass a full customization to exercise server-side price verification.
    """
    line_total = str(Decimal(unit_price) * quantity)
    if items is None:
        items = [{
            "variant_id": variant_id,
            "quantity": quantity,
            "unit_price": unit_price,
            "total_price": line_total,
            "customization": customization if customization is not None else {"notes": "logo on chest"},
        }]
    subtotal = sum((Decimal(item["total_price"]) for item in items), Decimal("0"))
    return {
        "customer": {"email": email, "name": "Jane Doe", "phone": "555-123-4567"},
        "items": items,
        "shipping_address": {
            "line1": "1 Main St",
            "city": "Springfield",
            "postal_code": "12345",
            "country": "US",
        },
        "subtotal": str(subtotal),
        "tax": "0",
        "shipping": "0",
        "total": total if total is not None else str(subtotal),
    }


@pytest.fixture
def make_order_payload():
    return order_payload


@pytest.fixture
def make_placements():
    return two_placements
