"""
Typed failures raised by the account service.

Every error carries a stable HTTP status code and a user-facing message.
The exception handlers registered in ``main.py`` render them as
``{"statusCode", "message", "success", "errors"}``.
"""
from typing import Optional


class ApiError(Exception):
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None, errors: Optional[list] = None):
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "statusCode": self.status_code,
            "message": self.message,
            "success": False,
            "errors": self.errors,
        }


class InvalidInput(ApiError):
    status_code = 400
    default_message = "Invalid input"


class Unauthorized(ApiError):
    status_code = 401
    default_message = "Unauthorized request"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"


class Forbidden(ApiError):
    status_code = 403
    default_message = "Forbidden"


class Conflict(ApiError):
    status_code = 409
    default_message = "User already exists"


class Internal(ApiError):
    status_code = 500
    default_message = "Internal server error"
