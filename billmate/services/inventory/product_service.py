import logging
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_, func

from billmate.models.product import Product
from billmate.schemas.product_schema import ProductCreate, ProductUpdate
from billmate.core.exceptions import NotFoundError

logger = logging.getLogger(__name__)

class ProductService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_all_products(self) -> List[Product]:
        result = await self.db.execute(select(Product).order_by(Product.id))
        return result.scalars().all()

    async def get_product_by_id(self, product_id: int) -> Optional[Product]:
        result = await self.db.execute(select(Product).where(Product.id == product_id))
        return result.scalar_one_or_none()

    async def add_product(self, product_data: ProductCreate) -> Product:
        product = Product(**product_data.model_dump())
        if not product.category:
            product.category = "General"

        self.db.add(product)
        await self.db.commit()
        await self.db.refresh(product)
        logger.info(f"Product created: {product.name} (id={product.id})")
        return product

    async def update_product(self, product_id: int, product_data: ProductUpdate) -> Product:
        product = await self.get_product_by_id(product_id)
        if not product:
            raise NotFoundError("Product not found")

        for field, value in product_data.model_dump(exclude_unset=True).items():
            setattr(product, field, value)

        await self.db.commit()
        await self.db.refresh(product)
        return product

    async def delete_product(self, product_id: int) -> bool:
        product = await self.get_product_by_id(product_id)
        if not product:
            raise NotFoundError("Product not found")

        await self.db.delete(product)
        await self.db.commit()
        logger.info(f"Product deleted: id={product_id}")
        return True

    async def search_products(self, query: str) -> List[Product]:
        """Case-insensitive name match, or barcode substring"""
        pattern = f"%{query}%"
        result = await self.db.execute(
            select(Product)
            .where(
                or_(
                    func.lower(Product.name).like(pattern.lower()),
                    Product.barcode.like(pattern)
                )
            )
            .order_by(Product.name)
        )
        return result.scalars().all()

    async def get_frequent_products(self) -> List[Product]:
        result = await self.db.execute(
            select(Product).where(Product.frequently_used == True).order_by(Product.name)
        )
        return result.scalars().all()

    async def get_low_stock_products(self, threshold: int) -> List[Product]:
        result = await self.db.execute(
            select(Product)
            .where(Product.stock_quantity <= threshold)
            .order_by(Product.stock_quantity, Product.name)
        )
        return result.scalars().all()

    async def adjust_stock(self, product_id: int, adjustment: int) -> int:
        """Add (or remove, when negative) stock; quantity never drops below zero"""
        product = await self.get_product_by_id(product_id)
        if not product:
            raise NotFoundError("Product not found")

        product.stock_quantity = max(0, (product.stock_quantity or 0) + adjustment)
        await self.db.commit()
        logger.info(f"Stock adjusted for product {product_id} by {adjustment}: now {product.stock_quantity}")
        return product.stock_quantity

    async def get_categories(self) -> List[str]:
        result = await self.db.execute(
            select(Product.category).distinct().order_by(Product.category)
        )
        return [category for category in result.scalars().all() if category]
