import logging

from bson.errors import BSONError
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError as PydanticValidationError
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.db.user.models import User, USERS_COLLECTION
from app.exceptions import StorageError, ValidationError

logger = logging.getLogger(__name__)


async def ensure_user_indexes(db: AsyncIOMotorDatabase):
    """Уникальный индекс по email_id"""
    await db[USERS_COLLECTION].create_index([("email_id", ASCENDING)], unique=True, name="email_id_unique")


async def get_users(db: AsyncIOMotorDatabase) -> list[User]:
    try:
        documents = await db[USERS_COLLECTION].find({}).to_list(length=None)
    except PyMongoError as e:
        logger.error(f"Failed to fetch users: {e}")
        raise StorageError("Failed to fetch users")
    except BSONError as e:
        logger.error(f"Failed to decode users: {e}")
        raise StorageError("Failed to decode users")

    try:
        return [User.model_validate(document) for document in documents]
    except PydanticValidationError as e:
        logger.error(f"Failed to decode users: {e}")
        raise StorageError("Failed to decode users")


async def get_user_by_email(db: AsyncIOMotorDatabase, email_id: str) -> User | None:
    try:
        document = await db[USERS_COLLECTION].find_one({"email_id": email_id})
    except PyMongoError as e:
        logger.error(f"Failed to fetch user {email_id}: {e}")
        raise StorageError("Failed to fetch user")
    except (BSONError, ValueError) as e:
        # строка, которую нельзя закодировать в BSON
        logger.warning(f"Unencodable login query: {e}")
        raise ValidationError("Invalid request body")

    if document is None:
        return None
    try:
        return User.model_validate(document)
    except PydanticValidationError as e:
        logger.error(f"Failed to decode user {email_id}: {e}")
        raise StorageError("Failed to decode user")


async def create_user(db: AsyncIOMotorDatabase, user: User) -> User:
    try:
        result = await db[USERS_COLLECTION].insert_one(user.to_document())
    except DuplicateKeyError:
        raise ValidationError("Email already registered")
    except PyMongoError as e:
        logger.error(f"Failed to create user {user.email_id}: {e}")
        raise StorageError("Failed to create user")
    except (BSONError, ValueError) as e:
        logger.warning(f"Unencodable user document: {e}")
        raise ValidationError("Invalid request body")

    user.id = result.inserted_id
    return user
