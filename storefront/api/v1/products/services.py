"""
Product service layer
Handles catalog management, filtering and stock adjustments
"""

from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
import logging
import uuid

from storefront.core.exceptions import (
    NotFoundException, ValidationException, InsufficientStockException
)
from storefront.models import Product, Category, DEFAULT_PRODUCT_IMAGE
from storefront.services.inventory import InventoryService
from .filters import ProductFilter
from .schemas import ProductCreate, ProductUpdate, StockUpdate, StockOperation

logger = logging.getLogger(__name__)

class ProductService:
    """Product service for business logic"""
    
    def __init__(self, db: AsyncSession):
        self.db = db
        self.inventory = InventoryService(db)
    
    def _base_query(self):
        return select(Product).options(selectinload(Product.category))
    
    async def _ensure_category(self, category_id: uuid.UUID) -> None:
        if not await self.db.get(Category, category_id):
            raise NotFoundException("Category not found")
    
    async def get_product(self, product_id: uuid.UUID) -> Product:
        """Get a product with its category, active or not"""
        result = await self.db.execute(
            self._base_query()
            .where(Product.id == product_id)
            .execution_options(populate_existing=True)
        )
        product = result.scalar_one_or_none()
        if not product:
            raise NotFoundException("Product not found")
        return product
    
    async def list_products(self) -> List[Product]:
        result = await self.db.execute(
            self._base_query()
            .where(Product.is_active.is_(True))
            .order_by(Product.created_at.desc())
        )
        return list(result.scalars().all())
    
    async def filter_products(self, filters: ProductFilter) -> List[Product]:
        filters.validate()
        result = await self.db.execute(
            filters.apply_filters(self._base_query()).order_by(Product.price, Product.name)
        )
        return list(result.scalars().all())
    
    async def top_reviewed(self, limit: int) -> List[Product]:
        """Active products with reviews, most reviewed first"""
        result = await self.db.execute(
            self._base_query()
            .where(Product.is_active.is_(True), Product.review_count > 0)
            .order_by(Product.review_count.desc(), Product.avg_rating.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
    
    async def create_product(self, data: ProductCreate) -> Product:
        await self._ensure_category(data.category_id)
        values = data.model_dump()
        if not values.get("image"):
            values["image"] = DEFAULT_PRODUCT_IMAGE
        product = Product(**values)
        self.db.add(product)
        await self.db.commit()
        logger.info(f"Product created: {product.id} ({product.name})")
        return await self.get_product(product.id)
    
    async def update_product(self, product_id: uuid.UUID, data: ProductUpdate) -> Product:
        product = await self.get_product(product_id)
        updates = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None or k in ("brand", "image")}
        
        if "category_id" in updates:
            await self._ensure_category(updates["category_id"])
        for key, value in updates.items():
            setattr(product, key, value)
        
        await self.db.commit()
        return await self.get_product(product_id)
    
    async def update_stock(self, product_id: uuid.UUID, data: StockUpdate) -> Product:
        """
        Increment, decrement or set stock
        
        Raises:
            ValidationException: If increment/decrement quantity is zero
            InsufficientStockException: If decrement would go below zero
        """
        product = await self.get_product(product_id)
        
        if data.operation == StockOperation.SET:
            await self.inventory.set_stock(product.id, data.quantity)
        else:
            if data.quantity < 1:
                raise ValidationException("Quantity must be greater than 0")
            if data.operation == StockOperation.INCREMENT:
                await self.inventory.release(product.id, data.quantity)
            elif not await self.inventory.reserve(product.id, data.quantity, require_active=False):
                raise InsufficientStockException(product.name, product.stock)
        
        await self.db.commit()
        return await self.get_product(product_id)
    
    async def deactivate_product(self, product_id: uuid.UUID) -> None:
        """Soft delete"""
        product = await self.get_product(product_id)
        product.is_active = False
        await self.db.commit()
        logger.info(f"Product {product_id} deactivated")
