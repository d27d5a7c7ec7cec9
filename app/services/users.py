import logging

from motor.motor_asyncio import AsyncIOMotorDatabase
from starlette.concurrency import run_in_threadpool

from app.db.user.models import User
from app.db.user.requests import create_user, get_user_by_email, get_users
from app.exceptions import AuthenticationError, InternalError, ValidationError
from app.middleware.jwt import create_access_token, decode_token
from app.services.passwords import hash_password, verify_password

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("first_name", "last_name", "email_id", "password")


async def register_user(
        db: AsyncIOMotorDatabase,
        first_name: str,
        last_name: str,
        email_id: str,
        password: str,
) -> User:
    """Зарегистрировать пользователя"""
    if not all((first_name, last_name, email_id, password)):
        raise ValidationError(f"All fields are required: {', '.join(REQUIRED_FIELDS)}")

    try:
        password_hash = await run_in_threadpool(hash_password, password)
    except ValueError as e:
        logger.error(f"Password hashing error for {email_id}: {e}")
        raise InternalError("Failed to hash password")

    user = User(
        first_name=first_name,
        last_name=last_name,
        email_id=email_id,
        password=password_hash,
    )
    user = await create_user(db, user)

    logger.info(f"User {email_id} registered")
    return user


async def list_users(db: AsyncIOMotorDatabase) -> dict:
    """Все пользователи в порядке хранилища"""
    users = await get_users(db)
    return {
        "users": [user.to_public() for user in users],
        "count": len(users),
    }


async def login_user(db: AsyncIOMotorDatabase, email_id: str, password: str) -> str:
    """Проверить email и пароль, выдать токен"""
    user = await get_user_by_email(db, email_id)
    if user is None:
        logger.warning(f"Login failed for {email_id}: user not found")
        raise AuthenticationError("Invalid credentials")

    if not await run_in_threadpool(verify_password, password, user.password):
        logger.warning(f"Login failed for {email_id}: invalid password")
        raise AuthenticationError("Invalid credentials")

    token = create_access_token(str(user.id), user.email_id)

    logger.info(f"User {email_id} logged in")
    return token


def refresh_token(token: str) -> str:
    """Новый токен с теми же user_id и email и новым сроком"""
    claims = decode_token(token)
    new_token = create_access_token(claims["user_id"], claims["email"], not_after_exp=claims["exp"])

    logger.info(f"Token refreshed for {claims['email']}")
    return new_token
