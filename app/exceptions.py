import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    status = HTTPStatus.INTERNAL_SERVER_ERROR
    headers: dict[str, str] | None = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(AppError):
    """Missing or empty required field"""
    status = HTTPStatus.BAD_REQUEST


class AuthenticationError(AppError):
    """Unknown email, wrong password or a missing/invalid/expired token"""
    status = HTTPStatus.UNAUTHORIZED
    headers = {"WWW-Authenticate": "Bearer"}


class StorageError(AppError):
    status = HTTPStatus.INTERNAL_SERVER_ERROR


class InternalError(AppError):
    status = HTTPStatus.INTERNAL_SERVER_ERROR


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    if exc.status >= HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(content=exc.to_dict(), status_code=exc.status, headers=exc.headers)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Invalid request body on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(content={"error": "Invalid request body"}, status_code=HTTPStatus.BAD_REQUEST)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}: {exc}")
    return JSONResponse(content={"error": "Internal server error"}, status_code=HTTPStatus.INTERNAL_SERVER_ERROR)


def register_exception_handlers(application: FastAPI):
    application.add_exception_handler(AppError, handle_app_error)
    application.add_exception_handler(RequestValidationError, handle_request_validation_error)
    application.add_exception_handler(Exception, handle_unexpected_error)
