"""Error handlers for the application"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from app.errors.exceptions import BaseHTTPException
from app.errors.response_codes import ErrorCode, code_for_status, error_response

logger = logging.getLogger(__name__)

_VALUE_ERROR_PREFIX = "Value error, "


def _field_name(loc) -> str:
    names = [str(part) for part in loc if isinstance(part, str) and part not in ("body", "query", "path")]
    return names[-1] if names else "body"


def _clean_message(msg: str) -> str:
    if msg.startswith(_VALUE_ERROR_PREFIX):
        return msg[len(_VALUE_ERROR_PREFIX):]
    return msg


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle validation errors

    Responds 400 with the first failing field promoted to ``field``/``error``
    and the full list under ``errors``.
    """
    errors = []
    for error in exc.errors():
        errors.append({
            "field": _field_name(error["loc"]),
            "message": _clean_message(error["msg"]),
            "type": error["type"]
        })

    logger.warning(f"Validation error on {request.url.path}: {errors}")

    first = errors[0] if errors else {"field": None, "message": ErrorCode.VALIDATION_ERROR.message}
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_response(
            code=ErrorCode.VALIDATION_ERROR,
            message=first["message"],
            field=first["field"],
            errors=[{"field": e["field"], "message": e["message"]} for e in errors],
        )
    )


async def app_exception_handler(request: Request, exc: BaseHTTPException):
    """
    Handle exceptions raised deliberately by services and dependencies
    """
    if exc.status_code >= 500:
        logger.error(f"{exc.error_code.code} on {request.url.path}: {exc.detail}")

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(code=exc.error_code, message=exc.detail, field=exc.field),
        headers=getattr(exc, "headers", None)
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Handle framework HTTP errors (unknown route, wrong method, ...)
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(code=code_for_status(exc.status_code), message=str(exc.detail)),
        headers=getattr(exc, "headers", None)
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    """
    Handle SQLAlchemy database errors
    """
    logger.error(f"Database error on {request.url.path}: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response(
            code=ErrorCode.DATABASE_ERROR,
            message="An internal database error occurred. Please try again later."
        )
    )


async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle general exceptions
    """
    logger.error(f"Unhandled exception on {request.url.path}: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response(
            code=ErrorCode.INTERNAL_ERROR,
            message="An unexpected error occurred. Please try again later."
        )
    )
