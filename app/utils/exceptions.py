"""
Error taxonomy shared by services, repositories and the top-level handlers.

Every error carries the HTTP status it maps to, a human readable message and,
for validation failures, a list of ``{"field": ..., "message": ...}`` entries.
"""
from typing import Dict, List, Optional


class AppError(Exception):
    status_code = 500
    default_message = "Server Error"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, str]]] = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationFailed(AppError):
    status_code = 400
    default_message = "Validation failed"


class Conflict(ValidationFailed):
    default_message = "Resource already exists"


class BadRequest(AppError):
    status_code = 400
    default_message = "Bad request"


class InvalidArgument(BadRequest):
    default_message = "Invalid argument"


class Unauthorized(AppError):
    status_code = 401
    default_message = "Not authorized to access this route"


class TokenError(Unauthorized):
    default_message = "Invalid token"


class TokenInvalid(TokenError):
    default_message = "Invalid token"


class TokenExpired(TokenError):
    default_message = "Token expired"


class Forbidden(AppError):
    status_code = 403
    default_message = "Not authorized to access this resource"


class NotFound(AppError):
    status_code = 404
    default_message = "Resource not found"


class ServerError(AppError):
    status_code = 500
