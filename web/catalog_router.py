from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from services.catalog import CatalogService
from web.dependencies import get_session
from web.responses import success_response

catalog_router = APIRouter(prefix="/api/products", tags=["catalog"])


@catalog_router.get("")
async def get_products(session: AsyncSession = Depends(get_session)):
    products = await CatalogService.get_products(session)
    return success_response({"products": products})


@catalog_router.get("/{slug}")
async def get_product(slug: str, session: AsyncSession = Depends(get_session)):
    product, decoration_methods = await CatalogService.get_product(slug, session)
    return success_response({"product": product, "decoration_methods": decoration_methods})
