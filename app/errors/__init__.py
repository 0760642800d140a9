"""Error handling module"""
from app.errors.exceptions import (
    BadRequestException,
    UnauthorizedException,
    ForbiddenException,
    ConflictException,
)
from app.errors.response_codes import (
    ErrorCode,
    error_response,
)

__all__ = [
    "BadRequestException",
    "UnauthorizedException",
    "ForbiddenException",
    "ConflictException",
    "ErrorCode",
    "error_response",
]
