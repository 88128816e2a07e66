"""Main FastAPI application"""

from fastapi import FastAPI
from typing import Optional
import logging

from storefront.core.config import Settings, get_settings
from storefront.core.database import Database
from storefront.core.events import lifespan
from storefront.core.exceptions import register_exception_handlers
from storefront.core.logging import setup_logging
from storefront.core.middleware import setup_middleware
from storefront.api.v1 import api_router

logger = logging.getLogger(__name__)

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application
    
    Settings and the database handle live on ``app.state`` so several
    apps (one per test, for instance) can coexist in a process.
    """
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)
    
    app = FastAPI(
        title=settings.APP_NAME,
        description="E-commerce backend: users, catalog, carts, orders and reviews",
        version=settings.APP_VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.database = Database(settings)
    
    setup_middleware(app, settings)
    register_exception_handlers(app)
    
    app.include_router(api_router, prefix="/api")
    
    @app.get("/health", tags=["Health"])
    async def health_check():
        return {"status": "healthy", "version": settings.APP_VERSION}
    
    @app.get("/", tags=["Health"])
    async def root():
        return {
            "message": f"Welcome to {settings.APP_NAME}",
            "docs": "/api/docs",
            "health": "/health",
            "endpoints": {
                "users": "/api/users",
                "products": "/api/productos",
                "categories": "/api/categorias",
                "cart": "/api/carrito",
                "orders": "/api/ordenes",
                "reviews": "/api/resenas"
            }
        }
    
    logger.info(f"{settings.APP_NAME} configured for {settings.ENVIRONMENT}")
    return app

if __name__ == "__main__":
    import uvicorn
    
    _settings = get_settings()
    uvicorn.run(
        "storefront.main:create_app",
        factory=True,
        host=_settings.HOST,
        port=_settings.PORT,
        reload=_settings.DEBUG
    )
