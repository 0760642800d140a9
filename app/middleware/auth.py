"""Authentication middleware and dependencies"""
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from typing import Optional

from app.core.dependencies import get_db
from app.services.auth_service import decode_access_token, get_user_by_id
from app.models.user import User
from app.schemas.auth_schemas import TokenData
from app.errors.exceptions import UnauthorizedException, ForbiddenException
from app.errors.response_codes import ErrorCode

bearer_scheme = HTTPBearer(auto_error=False)


def _resolve(credentials: Optional[HTTPAuthorizationCredentials], db: Session) -> tuple[Optional[User], Optional[TokenData]]:
    if credentials is None or not credentials.credentials:
        return None, None
    token_data = decode_access_token(credentials.credentials)
    if token_data is None or token_data.user_id is None:
        return None, None
    return get_user_by_id(db, user_id=token_data.user_id), token_data


def get_current_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> tuple[User, TokenData]:
    """Resolve the bearer token to an active user plus its claims"""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedException(error_code=ErrorCode.UNAUTHORIZED)

    user, token_data = _resolve(credentials, db)

    if token_data is None or user is None:
        raise UnauthorizedException(error_code=ErrorCode.INVALID_TOKEN)

    if not user.is_active:
        raise UnauthorizedException(error_code=ErrorCode.ACCOUNT_DEACTIVATED)

    return user, token_data


def get_current_user(current: tuple[User, TokenData] = Depends(get_current_token)) -> User:
    """Get current authenticated user; unverified email is allowed"""
    return current[0]


def get_current_verified_user(current: tuple[User, TokenData] = Depends(get_current_token)) -> User:
    """Get current user whose token was issued after email verification"""
    user, token_data = current
    if not token_data.email_verified:
        raise ForbiddenException(error_code=ErrorCode.EMAIL_NOT_VERIFIED)
    return user


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """Get current user if authenticated, otherwise return None"""
    user, _ = _resolve(credentials, db)
    if user is None or not user.is_active:
        return None
    return user
