import traceback
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from jose.exceptions import JWTError
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.database.validation import duplicate_error, field_errors
from app.utils.exceptions import AppError
from app.utils.logger_utils import logger
from config import IS_PRODUCTION


def error_response(
    status_code: int,
    message: str,
    errors: Optional[List[Dict[str, str]]] = None,
    **extra: Any,
) -> JSONResponse:
    content: Dict[str, Any] = {"success": False, "message": message}
    if errors:
        content["errors"] = errors
    content.update(extra)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.debug(f"{request.method} {request.url.path} -> {exc.status_code} {exc.message}")
    return error_response(exc.status_code, exc.message, exc.errors)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return error_response(status.HTTP_400_BAD_REQUEST, "Validation failed", field_errors(exc.errors()))


async def model_validation_handler(request: Request, exc: ValidationError):
    return error_response(status.HTTP_400_BAD_REQUEST, "Validation failed", field_errors(exc.errors()))


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return error_response(exc.status_code, "Route not found")
    return error_response(exc.status_code, str(exc.detail))


async def duplicate_key_handler(request: Request, exc: DuplicateKeyError):
    key_value = (exc.details or {}).get("keyValue") or {}
    conflict = duplicate_error(next(iter(key_value), "value"))
    return error_response(conflict.status_code, conflict.message, conflict.errors)


async def jwt_error_handler(request: Request, exc: JWTError):
    return error_response(status.HTTP_401_UNAUTHORIZED, "Invalid token")


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    if IS_PRODUCTION:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server Error")
    stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server Error", stack=stack)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ValidationError, model_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(DuplicateKeyError, duplicate_key_handler)
    app.add_exception_handler(JWTError, jwt_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
