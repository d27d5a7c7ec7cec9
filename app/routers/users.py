from fastapi import APIRouter, Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.db.database import get_db
from app.middleware.jwt import get_bearer_token
from app.models.request_model import RegisterRequest, LoginRequest
from app.models.response_model import CreateUserResponse, UsersResponse, LoginResponse, TokenResponse, \
    ErrorResponse
from app.services.users import register_user, list_users, login_user, refresh_token

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


class UsersRouter:
    def __init__(self, router: APIRouter):
        self.router = router
        self._register_routes()

    def _register_routes(self):
        self.router.post(
            "/api/users",
            status_code=201,
            response_model=CreateUserResponse,
            responses=ERROR_RESPONSES,
            summary="Create a new user",
            tags=["Users"],
        )(self.create_user)
        self.router.get(
            "/api/users",
            response_model=UsersResponse,
            responses=ERROR_RESPONSES,
            summary="Get all users",
            tags=["Users"],
        )(self.get_users)
        self.router.post(
            "/api/users/login",
            response_model=LoginResponse,
            responses=ERROR_RESPONSES,
            summary="Login user",
            tags=["Users"],
        )(self.login)
        self.router.post(
            "/api/users/refresh",
            response_model=TokenResponse,
            responses=ERROR_RESPONSES,
            summary="Refresh JWT token",
            tags=["Users"],
        )(self.refresh)

    @staticmethod
    async def create_user(
            payload: RegisterRequest,
            db: AsyncIOMotorDatabase = Depends(get_db),
    ):
        """Создать пользователя с именем, фамилией, email и паролем"""
        user = await register_user(
            db,
            first_name=payload.first_name,
            last_name=payload.last_name,
            email_id=payload.email_id,
            password=payload.password,
        )
        return {
            "message": "User created successfully",
            "user": user.to_public(),
        }

    @staticmethod
    async def get_users(db: AsyncIOMotorDatabase = Depends(get_db)):
        """Получить всех пользователей"""
        return await list_users(db)

    @staticmethod
    async def login(
            request: Request,
            payload: LoginRequest,
            db: AsyncIOMotorDatabase = Depends(get_db),
    ):
        """Вход по email и паролю"""
        token = await login_user(db, payload.email_id, payload.password)
        request.state.user_email = payload.email_id
        return {
            "message": "Login successful",
            "token": token,
        }

    @staticmethod
    async def refresh(token: str = Depends(get_bearer_token)):
        """Новый токен по действующему"""
        return {"token": refresh_token(token)}
