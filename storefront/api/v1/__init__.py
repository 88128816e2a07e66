"""API v1 routes aggregation"""

from fastapi import APIRouter

from .users.router import router as users_router
from .products.router import router as products_router
from .categories.router import router as categories_router
from .cart.router import router as cart_router
from .orders.router import router as orders_router
from .reviews.router import router as reviews_router

api_router = APIRouter()

api_router.include_router(users_router, prefix="/users", tags=["Users"])
# Spanish alias kept for existing clients
api_router.include_router(users_router, prefix="/usuarios", tags=["Users"], include_in_schema=False)
api_router.include_router(products_router, prefix="/productos", tags=["Products"])
api_router.include_router(categories_router, prefix="/categorias", tags=["Categories"])
api_router.include_router(cart_router, prefix="/carrito", tags=["Cart"])
api_router.include_router(orders_router, prefix="/ordenes", tags=["Orders"])
api_router.include_router(reviews_router, prefix="/resenas", tags=["Reviews"])
