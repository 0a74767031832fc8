from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from enums.catalog_status import ProductStatus
from models.product import Product, ProductDTO


class ProductRepository:
    @staticmethod
    async def get_all(session: AsyncSession, status: ProductStatus = ProductStatus.ACTIVE) -> list[ProductDTO]:
        stmt = (
            select(Product)
            .where(Product.status == status.value)
            .order_by(Product.created_at.desc(), Product.title)
        )
        products = await session.execute(stmt)
        return [ProductDTO.model_validate(product, from_attributes=True) for product in products.scalars().all()]

    @staticmethod
    async def get_by_slug(slug: str, session: AsyncSession) -> ProductDTO | None:
        """Only active products are reachable by slug."""
        stmt = select(Product).where(Product.slug == slug, Product.status == ProductStatus.ACTIVE.value)
        product = await session.execute(stmt)
        product = product.scalar()
        if product is not None:
            return ProductDTO.model_validate(product, from_attributes=True)
        else:
            return None

    @staticmethod
    async def create(product_dto: ProductDTO, session: AsyncSession) -> ProductDTO:
        data = product_dto.model_dump(exclude_none=True)
        if 'status' in data:
            data['status'] = data['status'].value
        product = Product(**data)
        session.add(product)
        await session.flush()
        await session.refresh(product)
        return ProductDTO.model_validate(product, from_attributes=True)
