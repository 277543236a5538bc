"""
Application errors carrying an HTTP status code
"""
from typing import Any, Optional


class AppError(Exception):
    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, errors: Any = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class BadRequestError(AppError):
    status_code = 400
    default_message = "Bad Request"


class UnauthorizedError(AppError):
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(AppError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Conflict"


class ValidationError(AppError):
    status_code = 422
    default_message = "Validation failed"


class InternalServerError(AppError):
    status_code = 500
    default_message = "Internal Server Error"
