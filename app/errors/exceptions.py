"""Custom exceptions for error handling"""
from typing import Optional

from fastapi import HTTPException, status

from app.errors.response_codes import ErrorCode


class BaseHTTPException(HTTPException):
    """Base exception class for all custom HTTP exceptions"""
    error_code: ErrorCode = ErrorCode.BAD_REQUEST

    def __init__(
        self,
        detail: str = None,
        headers: dict = None,
        error_code: Optional[ErrorCode] = None,
        field: Optional[str] = None,
    ):
        if error_code is not None:
            self.error_code = error_code
        self.field = field
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.error_code.message,
            headers=headers
        )


class BadRequestException(BaseHTTPException):
    """400 Bad Request"""
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = ErrorCode.BAD_REQUEST


class UnauthorizedException(BaseHTTPException):
    """401 Unauthorized"""
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = ErrorCode.UNAUTHORIZED

    def __init__(self, detail: str = None, error_code: Optional[ErrorCode] = None):
        super().__init__(
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
            error_code=error_code,
        )


class ForbiddenException(BaseHTTPException):
    """403 Forbidden"""
    status_code = status.HTTP_403_FORBIDDEN
    error_code = ErrorCode.FORBIDDEN


class ConflictException(BaseHTTPException):
    """409 Conflict"""
    status_code = status.HTTP_409_CONFLICT
    error_code = ErrorCode.CONFLICT

