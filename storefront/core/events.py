"""
Application lifecycle events
Handles startup and shutdown tasks
"""

from fastapi import FastAPI
import logging
from contextlib import asynccontextmanager

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager
    Creates tables on startup and releases connections on shutdown
    """
    settings = app.state.settings
    database = app.state.database
    try:
        logger.info(f"Starting {settings.APP_NAME}...")
        
        if settings.ENVIRONMENT != "test":
            await database.create_all()
            logger.info("Database initialized")
        
        logger.info(f"{settings.APP_NAME} started successfully")
        
        yield
        
    finally:
        logger.info(f"Shutting down {settings.APP_NAME}...")
        await database.dispose()
        logger.info(f"{settings.APP_NAME} shutdown complete")
