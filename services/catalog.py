from sqlalchemy.ext.asyncio import AsyncSession

from exceptions.catalog import ProductNotFoundException
from models.decoration_method import DecorationMethodDTO
from models.product import ProductWithVariantsDTO
from repositories.decoration_method import DecorationMethodRepository
from repositories.product import ProductRepository
from repositories.variant import VariantRepository


class CatalogService:
    """Read side of the catalog: active products with their variants, and decoration methods."""

    @staticmethod
    async def get_products(session: AsyncSession) -> list[ProductWithVariantsDTO]:
        products = await ProductRepository.get_all(session)
        result = []
        for product in products:
            variants = await VariantRepository.get_by_product_id(product.id, session)
            result.append(ProductWithVariantsDTO(**product.model_dump(), variants=variants))
        return result

    @staticmethod
    async def get_product(slug: str, session: AsyncSession) -> tuple[ProductWithVariantsDTO, list[DecorationMethodDTO]]:
        """
        Raises:
            ProductNotFoundException: If no active product has this slug
        """
        product = await ProductRepository.get_by_slug(slug, session)
        if product is None:
            raise ProductNotFoundException(slug)
        variants = await VariantRepository.get_by_product_id(product.id, session)
        methods = await DecorationMethodRepository.get_active(session)
        return ProductWithVariantsDTO(**product.model_dump(), variants=variants), methods
