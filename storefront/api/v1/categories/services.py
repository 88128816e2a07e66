"""
Category service layer
"""

from typing import List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_
from sqlalchemy.exc import IntegrityError
import logging
import uuid

from storefront.core.exceptions import NotFoundException, DuplicateResourceException, CategoryInUseException
from storefront.models import Category, Product
from .schemas import CategoryCreate, CategoryUpdate, CategoryStats, CategoryDetail, CategoryProduct

logger = logging.getLogger(__name__)

class CategoryService:
    """Category service for business logic"""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def get_category(self, category_id: uuid.UUID) -> Category:
        category = await self.db.get(Category, category_id)
        if not category:
            raise NotFoundException("Category not found")
        return category
    
    async def _ensure_name_available(self, name: str, exclude_id: uuid.UUID = None) -> None:
        stmt = select(Category.id).where(Category.name == name)
        if exclude_id is not None:
            stmt = stmt.where(Category.id != exclude_id)
        if (await self.db.execute(stmt)).first():
            raise DuplicateResourceException("Category", "name", name)
    
    async def create_category(self, data: CategoryCreate) -> Category:
        await self._ensure_name_available(data.name)
        category = Category(name=data.name, description=data.description)
        self.db.add(category)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateResourceException("Category", "name", data.name)
        return category
    
    async def list_categories(self) -> List[Category]:
        result = await self.db.execute(
            select(Category).where(Category.is_active.is_(True)).order_by(Category.name)
        )
        return list(result.scalars().all())
    
    async def get_category_detail(self, category_id: uuid.UUID) -> CategoryDetail:
        category = await self.get_category(category_id)
        result = await self.db.execute(
            select(Product)
            .where(Product.category_id == category.id, Product.is_active.is_(True))
            .order_by(Product.name)
        )
        products = [CategoryProduct.model_validate(p) for p in result.scalars().all()]
        return CategoryDetail(
            id=category.id,
            name=category.name,
            description=category.description,
            is_active=category.is_active,
            created_at=category.created_at,
            updated_at=category.updated_at,
            products=products,
        )
    
    async def update_category(self, category_id: uuid.UUID, data: CategoryUpdate) -> Category:
        category = await self.get_category(category_id)
        updates = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None or k == "description"}
        
        if "name" in updates:
            await self._ensure_name_available(updates["name"], exclude_id=category.id)
        for key, value in updates.items():
            setattr(category, key, value)
        
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateResourceException("Category", "name", updates.get("name", category.name))
        await self.db.refresh(category)
        return category
    
    async def delete_category(self, category_id: uuid.UUID) -> None:
        """
        Delete a category
        
        Raises:
            CategoryInUseException: If any active product still references it
        """
        category = await self.get_category(category_id)
        in_use = await self.db.scalar(
            select(func.count(Product.id))
            .where(Product.category_id == category.id, Product.is_active.is_(True))
        )
        if in_use:
            raise CategoryInUseException(in_use)
        
        await self.db.delete(category)
        await self.db.commit()
        logger.info(f"Category {category_id} deleted")
    
    async def category_stats(self) -> Tuple[List[CategoryStats], int]:
        """
        Active product count per active category
        
        Returns:
            (stats sorted by product count desc, total active products counted)
        """
        product_count = func.count(Product.id).label("product_count")
        result = await self.db.execute(
            select(Category.id, Category.name, Category.description, product_count)
            .select_from(Category)
            .outerjoin(
                Product,
                and_(Product.category_id == Category.id, Product.is_active.is_(True))
            )
            .where(Category.is_active.is_(True))
            .group_by(Category.id, Category.name, Category.description)
            .order_by(product_count.desc(), Category.name)
        )
        stats = [
            CategoryStats(id=row.id, name=row.name, description=row.description, product_count=row.product_count)
            for row in result.all()
        ]
        return stats, sum(s.product_count for s in stats)
