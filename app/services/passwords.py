import bcrypt

from app.config.config import get_settings

settings = get_settings()


def hash_password(password: str, rounds: int | None = None) -> str:
    """bcrypt с солью и настраиваемой стоимостью"""
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode(), salt).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Сравнение с хешем за постоянное время"""
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except (ValueError, TypeError):
        return False
