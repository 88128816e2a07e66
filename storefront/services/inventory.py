"""
Inventory service
Stock changes are single conditional UPDATE statements so concurrent
requests cannot drive stock below zero. Loaded Product objects are not
synchronized, callers reload them with populate_existing when needed
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import update
import logging
import uuid

from storefront.models import Product

logger = logging.getLogger(__name__)

class InventoryService:
    """Atomic stock adjustments"""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def reserve(self, product_id: uuid.UUID, quantity: int, require_active: bool = True) -> bool:
        """
        Decrement stock only if at least ``quantity`` units are left
        
        Returns:
            False when the guard did not match and nothing was changed
        """
        conditions = [Product.id == product_id, Product.stock >= quantity]
        if require_active:
            conditions.append(Product.is_active.is_(True))
        
        result = await self.db.execute(
            update(Product)
            .where(*conditions)
            .values(stock=Product.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        reserved = result.rowcount == 1
        if reserved:
            logger.info(f"Stock of product {product_id} decremented by {quantity}")
        return reserved
    
    async def release(self, product_id: uuid.UUID, quantity: int) -> None:
        """Put ``quantity`` units back into stock"""
        await self.db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(stock=Product.stock + quantity)
            .execution_options(synchronize_session=False)
        )
        logger.info(f"Stock of product {product_id} incremented by {quantity}")
    
    async def set_stock(self, product_id: uuid.UUID, quantity: int) -> None:
        await self.db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(stock=quantity)
            .execution_options(synchronize_session=False)
        )
        logger.info(f"Stock of product {product_id} set to {quantity}")
