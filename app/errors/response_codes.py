"""
Machine-readable API error codes
Centralized response handling for consistent API responses

The member name is the stable ``code`` clients switch on; ``message`` is a
default English text the client is free to replace.
"""
from enum import Enum
from typing import Any, Dict, List, Optional
from fastapi import status


class ErrorCode(Enum):
    """Error Response Codes (4xx, 5xx)"""

    def __init__(self, message: str, status_code: int):
        self.message = message
        self.status_code = status_code

    @property
    def code(self) -> str:
        return self.name

    # 400 - Bad Request
    BAD_REQUEST = ("Bad request", status.HTTP_400_BAD_REQUEST)
    VALIDATION_ERROR = ("Validation error", status.HTTP_400_BAD_REQUEST)
    EMAIL_ALREADY_VERIFIED = ("Email already verified", status.HTTP_400_BAD_REQUEST)
    OTP_NOT_FOUND = ("No OTP found. Please request a new one.", status.HTTP_400_BAD_REQUEST)
    OTP_EXPIRED = ("OTP has expired. Please request a new one.", status.HTTP_400_BAD_REQUEST)
    OTP_INVALID = ("Invalid OTP code", status.HTTP_400_BAD_REQUEST)
    RESET_TOKEN_INVALID = ("Invalid or expired reset token", status.HTTP_400_BAD_REQUEST)

    # 401 - Unauthorized
    UNAUTHORIZED = ("Not authorized, no token", status.HTTP_401_UNAUTHORIZED)
    INVALID_TOKEN = ("Not authorized, token failed", status.HTTP_401_UNAUTHORIZED)
    INVALID_CREDENTIALS = ("Invalid credentials", status.HTTP_401_UNAUTHORIZED)
    ACCOUNT_DEACTIVATED = ("Account has been deactivated", status.HTTP_401_UNAUTHORIZED)
    CURRENT_PASSWORD_INCORRECT = ("Current password is incorrect", status.HTTP_401_UNAUTHORIZED)

    # 403 - Forbidden
    FORBIDDEN = ("Access forbidden", status.HTTP_403_FORBIDDEN)
    EMAIL_NOT_VERIFIED = ("Please verify your email address to continue", status.HTTP_403_FORBIDDEN)
    CROSS_ACCOUNT_RESET = (
        "You are signed in as a different user. Log out before using this reset link.",
        status.HTTP_403_FORBIDDEN,
    )

    # 404 - Not Found
    NOT_FOUND = ("Resource not found", status.HTTP_404_NOT_FOUND)

    # 409 - Conflict
    CONFLICT = ("Resource conflict", status.HTTP_409_CONFLICT)
    EMAIL_EXISTS = ("Email already registered", status.HTTP_409_CONFLICT)

    # 500 - Internal Server Error
    INTERNAL_ERROR = ("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)
    DATABASE_ERROR = ("Database operation failed", status.HTTP_500_INTERNAL_SERVER_ERROR)

    # 503 - Service Unavailable
    SERVICE_UNAVAILABLE = ("Service temporarily unavailable", status.HTTP_503_SERVICE_UNAVAILABLE)


_DEFAULT_BY_STATUS = {
    status.HTTP_400_BAD_REQUEST: ErrorCode.BAD_REQUEST,
    status.HTTP_401_UNAUTHORIZED: ErrorCode.UNAUTHORIZED,
    status.HTTP_403_FORBIDDEN: ErrorCode.FORBIDDEN,
    status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
    status.HTTP_409_CONFLICT: ErrorCode.CONFLICT,
    status.HTTP_503_SERVICE_UNAVAILABLE: ErrorCode.SERVICE_UNAVAILABLE,
}


def code_for_status(status_code: int) -> ErrorCode:
    """Fallback code for HTTP errors raised without an explicit ErrorCode"""
    return _DEFAULT_BY_STATUS.get(status_code, ErrorCode.BAD_REQUEST if status_code < 500 else ErrorCode.INTERNAL_ERROR)


def error_response(
    code: ErrorCode = ErrorCode.INTERNAL_ERROR,
    message: Optional[str] = None,
    field: Optional[str] = None,
    errors: Optional[List[Dict[str, Any]]] = None
) -> Dict[str, Any]:
    """
    Create a standardized error response

    Args:
        code: ErrorCode member
        message: Optional custom message
        field: Name of the offending request field, for validation errors
        errors: Optional detailed error information

    Returns:
        Standardized error response dictionary
    """
    response = {
        "success": False,
        "code": code.code,
        "error": message or code.message
    }

    if field:
        response["field"] = field

    if errors:
        response["errors"] = errors

    return response
