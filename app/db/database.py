import logging

from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from app.config.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


def create_client(uri: str = settings.MONGO_URI) -> AsyncIOMotorClient:
    # timeoutMS bounds every operation issued through this client
    timeout_ms = int(settings.DATABASE_TIMEOUT_SECONDS * 1000)
    return AsyncIOMotorClient(
        uri,
        timeoutMS=timeout_ms,
        serverSelectionTimeoutMS=timeout_ms,
        tz_aware=True,
    )


async def connect_db(client: AsyncIOMotorClient) -> AsyncIOMotorDatabase:
    """Ping the server and return the configured database"""
    await client.admin.command("ping")
    logger.info("Connected to MongoDB")
    return client[settings.DATABASE_NAME]


def close_db(client: AsyncIOMotorClient):
    client.close()
    logger.info("MongoDB connection closed")


async def ping_db(db: AsyncIOMotorDatabase) -> bool:
    try:
        await db.command("ping")
        return True
    except Exception as e:
        logger.error(f"MongoDB ping failed: {e}")
        return False


async def get_db(request: Request) -> AsyncIOMotorDatabase:
    return request.app.state.db
