#!/usr/bin/env python3
"""
Seed the catalog with starter products, variants and decoration methods.

Safe to run repeatedly: products are matched by slug and decoration
methods by name, existing rows are left as they are.

Usage:
    python scripts/seed_catalog.py
    python scripts/seed_catalog.py --with-bulk-discount
"""

import argparse
import asyncio
import sys
from decimal import Decimal
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import config
from db import Database
from enums.catalog_status import ProductStatus, DecorationMethodStatus
from enums.discount_type import DiscountType
from models.decoration_method import DecorationMethodDTO
from models.price_rule import PriceRuleDTO
from models.product import ProductDTO
from models.variant import VariantDTO
from repositories.decoration_method import DecorationMethodRepository
from repositories.price_rule import PriceRuleRepository
from repositories.product import ProductRepository
from repositories.variant import VariantRepository
from utils.transaction_manager import TransactionManager

SIZES = ["S", "M", "L", "XL", "2XL", "3XL"]

QUANTITY_BREAKS = [
    {"min": 1, "max": 5, "multiplier": "1.0"},
    {"min": 6, "max": 11, "multiplier": "0.95"},
    {"min": 12, "max": None, "multiplier": "0.85"},
]

PRODUCTS = [
    {
        "title": "Classic T-Shirt",
        "slug": "classic-t-shirt",
        "description": "Midweight ringspun cotton tee with a relaxed fit.",
        "materials": "100% ringspun cotton",
        "base_price": Decimal("12.98"),
        "colors": ["White", "Black", "Navy"],
        "sku_prefix": "TEE",
    },
    {
        "title": "Pullover Hoodie",
        "slug": "pullover-hoodie",
        "description": "Heavyweight fleece hoodie with a kangaroo pocket.",
        "materials": "80% cotton, 20% polyester",
        "base_price": Decimal("35.99"),
        "colors": ["Black", "Heather Grey"],
        "sku_prefix": "HOOD",
    },
]

DECORATION_METHODS = [
    {
        "name": "screen_print",
        "display_name": "Screen Print",
        "description": "Ink pushed through a mesh screen, one screen per color.",
        "pricing_rules": {
            "base_price": "8.00",
            "per_location": "4.00",
            "per_color": "1.50",
            "quantity_breaks": QUANTITY_BREAKS,
        },
        "file_requirements": {"formats": ["svg", "pdf", "png"], "min_dpi": 300},
    },
    {
        "name": "dtg",
        "display_name": "Direct to Garment",
        "description": "Full color inkjet printing straight onto the fabric.",
        "pricing_rules": {
            "base_price": "10.00",
            "per_location": "6.00",
            "per_square_inch": "0.05",
            "quantity_breaks": QUANTITY_BREAKS,
        },
        "file_requirements": {"formats": ["png"], "min_dpi": 300},
    },
    {
        "name": "embroidery",
        "display_name": "Embroidery",
        "description": "Stitched thread design, priced by placement.",
        "pricing_rules": {
            "base_price": "12.00",
            "per_location": "7.50",
            "quantity_breaks": QUANTITY_BREAKS,
        },
        "file_requirements": {"formats": ["svg", "pdf"]},
    },
]

BULK_DISCOUNT = PriceRuleDTO(
    name="Bulk order 10%",
    scope="global",
    active=True,
    min_qty=24,
    discount_type=DiscountType.PERCENTAGE,
    discount_value=Decimal("10"),
    priority=10,
)


def _color_code(color: str) -> str:
    return "".join(word[0] for word in color.upper().split())


async def seed_catalog(db: Database, with_bulk_discount: bool = False) -> dict[str, int]:
    """
    Insert starter catalog rows that are not there yet.

    Returns:
        Counts of newly created rows per kind
    """
    created = {"products": 0, "variants": 0, "decoration_methods": 0, "price_rules": 0}

    async with TransactionManager.atomic_transaction(db) as session:
        existing_slugs = {p.slug for p in await ProductRepository.get_all(session, ProductStatus.ACTIVE)}
        for product_data in PRODUCTS:
            if product_data["slug"] in existing_slugs:
                print(f"⏭️  Product '{product_data['slug']}' already exists")
                continue
            product = await ProductRepository.create(ProductDTO(
                title=product_data["title"],
                slug=product_data["slug"],
                description=product_data["description"],
                materials=product_data["materials"],
                images=[],
                status=ProductStatus.ACTIVE
            ), session)
            created["products"] += 1
            for color in product_data["colors"]:
                for size in SIZES:
                    await VariantRepository.create(VariantDTO(
                        product_id=product.id,
                        sku=f"{product_data['sku_prefix']}-{_color_code(color)}-{size}",
                        color=color,
                        size=size,
                        base_price=product_data["base_price"],
                        stock_level=100
                    ), session)
                    created["variants"] += 1
            print(f"👕 Created product '{product.title}' with {len(product_data['colors']) * len(SIZES)} variants")

        for method_data in DECORATION_METHODS:
            if await DecorationMethodRepository.get_by_name(method_data["name"], session) is not None:
                print(f"⏭️  Decoration method '{method_data['name']}' already exists")
                continue
            await DecorationMethodRepository.create(DecorationMethodDTO(
                status=DecorationMethodStatus.ACTIVE, **method_data
            ), session)
            created["decoration_methods"] += 1
            print(f"🎨 Created decoration method '{method_data['name']}'")

        if with_bulk_discount:
            rule = await PriceRuleRepository.get_applicable_global_rule(BULK_DISCOUNT.min_qty, session)
            if rule is None:
                await PriceRuleRepository.create(BULK_DISCOUNT, session)
                created["price_rules"] += 1
                print(f"🏷️  Created price rule '{BULK_DISCOUNT.name}'")
            else:
                print(f"⏭️  A global price rule already covers {BULK_DISCOUNT.min_qty}+ items")

    return created


async def main():
    parser = argparse.ArgumentParser(description="Seed the catalog with starter data")
    parser.add_argument("--with-bulk-discount", action="store_true",
                        help="also create a 10%% global discount for 24+ items")
    args = parser.parse_args()

    db = Database(config.DB_URL, echo=config.DB_ECHO)
    try:
        await db.create_all()
        created = await seed_catalog(db, with_bulk_discount=args.with_bulk_discount)
        print(f"✅ Seeding complete: {created}")
    except Exception as e:
        print(f"❌ Error: {e}")
        sys.exit(1)
    finally:
        await db.dispose()


if __name__ == "__main__":
    asyncio.run(main())
