import logging
from unittest.mock import AsyncMock, patch

from bson import ObjectId
from fastapi.testclient import TestClient

from app.db.database import get_db
from app.exceptions import StorageError
from app.main import app


async def _assign_id(db, user):
    user.id = ObjectId()
    return user


def test_register_login_refresh(client, mock_user):
    """Регистрация, вход и обновление токена"""
    with patch('app.services.users.create_user', new_callable=AsyncMock) as mock_create_user:
        mock_create_user.side_effect = _assign_id

        response = client.post("/api/users", json={
            "first_name": "A",
            "last_name": "B",
            "email_id": "a@x.com",
            "password": "secret",
        })

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "User created successfully"
    assert body["user"]["id"]
    assert body["user"]["created_at"]
    assert "password" not in body["user"]

    with patch('app.services.users.get_user_by_email', new_callable=AsyncMock) as mock_get_user:
        mock_get_user.return_value = mock_user

        response = client.post("/api/users/login", json={"email_id": "a@x.com", "password": "secret"})

    assert response.status_code == 200
    assert response.json()["message"] == "Login successful"
    token = response.json()["token"]
    assert token

    response = client.post("/api/users/refresh", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json()["token"]
    assert response.json()["token"] != token


def test_register_missing_field(client):
    with patch('app.services.users.create_user', new_callable=AsyncMock) as mock_create_user:
        response = client.post("/api/users", json={"first_name": "A", "email_id": "a@x.com", "password": "x"})

        assert response.status_code == 400
        assert "All fields are required" in response.json()["error"]
        mock_create_user.assert_not_called()


def test_register_invalid_body(client):
    response = client.post("/api/users", content="not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}


def test_register_storage_error(client):
    with patch('app.services.users.create_user', new_callable=AsyncMock) as mock_create_user:
        mock_create_user.side_effect = StorageError("Failed to create user")

        response = client.post("/api/users", json={
            "first_name": "A",
            "last_name": "B",
            "email_id": "a@x.com",
            "password": "secret",
        })

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to create user"}


def test_list_users(client, mock_user):
    with patch('app.services.users.get_users', new_callable=AsyncMock) as mock_get_users:
        mock_get_users.return_value = [mock_user]

        response = client.get("/api/users")

    assert response.status_code == 200
    assert response.json()["count"] == 1
    assert response.json()["users"][0]["first_name"] == "A"


def test_list_users_storage_error(client):
    with patch('app.services.users.get_users', new_callable=AsyncMock) as mock_get_users:
        mock_get_users.side_effect = StorageError("Failed to fetch users")

        response = client.get("/api/users")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch users"}


def test_login_wrong_password(client, mock_user):
    with patch('app.services.users.get_user_by_email', new_callable=AsyncMock) as mock_get_user:
        mock_get_user.return_value = mock_user

        response = client.post("/api/users/login", json={"email_id": "a@x.com", "password": "wrong"})

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials"}
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_login_unknown_email(client):
    with patch('app.services.users.get_user_by_email', new_callable=AsyncMock) as mock_get_user:
        mock_get_user.return_value = None

        response = client.post("/api/users/login", json={"email_id": "nobody@x.com", "password": "secret"})

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials"}


def test_refresh_missing_header(client):
    response = client.post("/api/users/refresh")

    assert response.status_code == 401
    assert response.json() == {"error": "Missing token"}


def test_refresh_without_bearer_prefix(client):
    response = client.post("/api/users/refresh", headers={"Authorization": "abc"})

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid authorization header"}


def test_refresh_invalid_token(client):
    response = client.post("/api/users/refresh", headers={"Authorization": "Bearer abc.def.ghi"})

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid token"}


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "running"


def test_health(client):
    with patch('app.routers.utils.ping_db', new_callable=AsyncMock) as mock_ping:
        mock_ping.return_value = True
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "connected"}


def test_health_database_down(client):
    with patch('app.routers.utils.ping_db', new_callable=AsyncMock) as mock_ping:
        mock_ping.return_value = False
        response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["database"] == "disconnected"


def test_login_unencodable_email(client, mongo_db, mock_collection):
    """Одиночный суррогат в email: JSON-ошибка, а не text/plain"""
    app.dependency_overrides[get_db] = lambda: mongo_db
    mock_collection.find_one.side_effect = UnicodeEncodeError("utf-8", "\ud800", 0, 1, "surrogates not allowed")

    response = client.post(
        "/api/users/login",
        content='{"email_id": "\\ud800", "password": "secret"}',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}


def test_unexpected_error_returns_json(client):
    server = TestClient(app, raise_server_exceptions=False)

    with patch('app.services.users.get_users', new_callable=AsyncMock) as mock_get_users:
        mock_get_users.side_effect = RuntimeError("boom")

        response = server.get("/api/users")

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/json")
    assert response.json() == {"error": "Internal server error"}


def test_access_log_contains_login_email(client, mock_user, caplog):
    with patch('app.services.users.get_user_by_email', new_callable=AsyncMock) as mock_get_user, \
            caplog.at_level(logging.INFO, logger="users_api.middleware"):
        mock_get_user.return_value = mock_user

        client.post("/api/users/login", json={"email_id": "a@x.com", "password": "secret"})

    access_logs = [r.msg for r in caplog.records if r.name == "users_api.middleware" and isinstance(r.msg, dict)]
    assert access_logs[-1]["username"] == "a@x.com"
    assert access_logs[-1]["request_path"] == "/api/users/login"
    assert access_logs[-1]["http_code"] == 200
