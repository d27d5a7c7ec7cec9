from typing import Optional
from uuid import uuid4

from fastapi import Header
from jose import JWTError, jwt
from jose.exceptions import JOSEError
from datetime import datetime, timedelta, timezone

import logging

from app.config.config import get_settings
from app.exceptions import AuthenticationError, InternalError

settings = get_settings()
logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def create_access_token(user_id: str, email: str, not_after_exp: Optional[int] = None) -> str:
    """Создать JWT токен

    exp хранится в целых секундах; с not_after_exp новый срок строго позже переданного.
    """
    now = datetime.now(timezone.utc)
    expire = int((now + timedelta(
        minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )).timestamp())
    if not_after_exp is not None:
        expire = max(expire, not_after_exp + 1)
    to_encode = {
        "user_id": user_id,
        "email": email,
        "exp": expire,
        "iat": now,
        "jti": uuid4().hex,
    }
    try:
        return jwt.encode(
            to_encode,
            settings.SECRET_KEY,
            algorithm=settings.ALGORITHM
        )
    except JOSEError as e:
        logger.error(f"JWT encode error: {e}")
        raise InternalError("Could not generate token")


def decode_token(token: str) -> dict:
    """Проверить подпись и срок действия, вернуть claims"""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except JWTError as e:
        logger.warning(f"JWT decode error: {e}")
        raise AuthenticationError("Invalid token")

    if not payload.get("user_id") or not payload.get("email"):
        raise AuthenticationError("Invalid token")
    return payload


def extract_bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise AuthenticationError("Missing token")
    if not authorization.startswith(BEARER_PREFIX):
        raise AuthenticationError("Invalid authorization header")

    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthenticationError("Invalid authorization header")
    return token


async def get_bearer_token(authorization: Optional[str] = Header(None)) -> str:
    """Токен из заголовка Authorization: Bearer <token>"""
    return extract_bearer_token(authorization)
