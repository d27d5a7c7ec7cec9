import logging

import uvicorn
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config.config import get_settings
from app.db.database import create_client, connect_db, close_db
from app.db.user.requests import ensure_user_indexes
from app.exceptions import register_exception_handlers
from app.middleware.logging import LoggingMiddleware, setup_logging
from app.routers.router import router

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI):
    client = create_client()
    try:
        db = await connect_db(client)
        await ensure_user_indexes(db)
    except Exception as e:
        # без базы сервис не стартует
        logger.critical(f"Failed to connect to MongoDB: {e}")
        close_db(client)
        raise

    application.state.db = db
    yield
    logger.info("Gracefully shutting down...")
    close_db(client)


def get_application():
    setup_logging(logging.DEBUG if settings.DEBUG else logging.INFO)

    application = FastAPI(
        title="Users API",
        description="REST API for user registration and JWT authentication with MongoDB",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    application.include_router(router)
    register_exception_handlers(application)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(LoggingMiddleware)

    return application


app = get_application()

if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
