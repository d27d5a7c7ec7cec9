from typing import Optional

from pydantic import BaseModel


class UserResponse(BaseModel):
    id: Optional[str]
    first_name: str
    last_name: str
    email_id: str
    created_at: str


class CreateUserResponse(BaseModel):
    message: str
    user: UserResponse


class UsersResponse(BaseModel):
    users: list[UserResponse]
    count: int


class LoginResponse(BaseModel):
    message: str
    token: str


class TokenResponse(BaseModel):
    token: str


class ErrorResponse(BaseModel):
    error: str
