import os
import pytest
from unittest.mock import AsyncMock, MagicMock
from datetime import datetime, timezone

from bson import ObjectId

# === Настройка переменных окружения ===
os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017")
os.environ.setdefault("DATABASE_NAME", "test_db")
os.environ.setdefault("SECRET_KEY", "test_secret_key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from fastapi.testclient import TestClient

from app.db.database import get_db
from app.db.user.models import User
from app.main import app
from app.services.passwords import hash_password


# === Database & Models ===

@pytest.fixture
def mock_db():
    return AsyncMock()


@pytest.fixture
def mock_collection():
    """Коллекция users с асинхронными методами motor"""
    collection = MagicMock()
    collection.find_one = AsyncMock()
    collection.insert_one = AsyncMock()
    collection.create_index = AsyncMock()
    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=[])
    collection.find = MagicMock(return_value=cursor)
    return collection


@pytest.fixture
def mongo_db(mock_collection):
    db = MagicMock()
    db.__getitem__.return_value = mock_collection
    return db


@pytest.fixture
def user_document():
    return {
        "_id": ObjectId(),
        "first_name": "A",
        "last_name": "B",
        "email_id": "a@x.com",
        "password": hash_password("secret"),
        "created_at": datetime.now(timezone.utc),
    }


@pytest.fixture
def mock_user(user_document):
    return User.model_validate(user_document)


# === HTTP ===

@pytest.fixture
def client(mock_db):
    """TestClient без lifespan, база подменена"""
    app.dependency_overrides[get_db] = lambda: mock_db
    yield TestClient(app)
    app.dependency_overrides.clear()
