"""
Credential lifecycle flows: registration, login, email verification,
password reset and password change.

Each flow raises an ``app.errors`` exception for client errors and lets
anything unexpected propagate to the global handlers, which answer with a
generic 500. Email delivery never decides the outcome of a flow.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors.exceptions import (
    BadRequestException,
    ConflictException,
    ForbiddenException,
    UnauthorizedException,
)
from app.errors.response_codes import ErrorCode
from app.models.user import User, UserRole, Verified
from app.schemas.auth_schemas import RegisterRequest
from app.services.auth_service import (
    create_user_token,
    dummy_verify_password,
    find_user_by_reset_token,
    get_password_hash,
    get_user_by_email,
    issue_email_otp,
    issue_reset_token,
    secrets_match,
    verify_password,
)
from app.utils.email import (
    DeliveryStatus,
    send_otp_email,
    send_password_reset_email,
    send_welcome_email,
)
from app.utils.logger import log_auth_event

logger = logging.getLogger(__name__)


@dataclass
class Registration:
    user: User
    token: str
    otp: str
    delivery: DeliveryStatus


@dataclass
class OTPDispatch:
    otp: str
    delivery: DeliveryStatus


@dataclass
class ResetDispatch:
    """``token`` is None when the email matched no account"""
    token: Optional[str] = None
    delivery: Optional[DeliveryStatus] = None


def _deliver(event: str, user: User, sender: Callable[..., DeliveryStatus], *args) -> DeliveryStatus:
    """Run an email sender, absorbing any failure into a DeliveryStatus."""
    try:
        status = sender(*args)
    except Exception as exc:
        logger.error(f"[{event}] email sender raised for {user.email}: {exc}", exc_info=True)
        status = DeliveryStatus.FAILED

    if status is not DeliveryStatus.SENT:
        log_auth_event(event, "EMAIL " + status.name, user_id=user.id, user_email=user.email)
    return status


# ── registration / login ──────────────────────────────────────────────────────

def register_user(db: Session, data: RegisterRequest) -> Registration:
    """
    Create an unverified account, issue its first OTP and a session token.

    Raises ConflictException when the (normalized) email is taken, whether
    caught by the pre-check or by the unique index on commit.
    """
    if get_user_by_email(db, data.email):
        raise ConflictException(error_code=ErrorCode.EMAIL_EXISTS, field="email")

    user = User(
        email=data.email,
        full_name=data.full_name,
        hashed_password=get_password_hash(data.password),
        role=UserRole(data.role) if data.role else UserRole.STUDENT,
        is_active=True,
        is_email_verified=False,
    )
    otp = issue_email_otp(user)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictException(error_code=ErrorCode.EMAIL_EXISTS, field="email")
    db.refresh(user)

    log_auth_event("REGISTER", user_id=user.id, user_email=user.email)
    delivery = _deliver("REGISTER", user, send_otp_email, user.email, otp, user.full_name)

    return Registration(user=user, token=create_user_token(user), otp=otp, delivery=delivery)


def login_user(db: Session, email: str, password: str) -> Tuple[User, str]:
    """
    Authenticate by email and password and return ``(user, token)``.

    Unknown email and wrong password produce the same error. A deactivated
    account is reported as such before the password is looked at.
    """
    user = get_user_by_email(db, email)
    if user is None:
        dummy_verify_password()
        log_auth_event("LOGIN", "FAILED", "unknown email", user_email=email)
        raise UnauthorizedException(error_code=ErrorCode.INVALID_CREDENTIALS)

    if not user.is_active:
        log_auth_event("LOGIN", "REJECTED", "account deactivated", user_id=user.id, user_email=user.email)
        raise UnauthorizedException(error_code=ErrorCode.ACCOUNT_DEACTIVATED)

    if not verify_password(password, user.hashed_password):
        log_auth_event("LOGIN", "FAILED", "wrong password", user_id=user.id, user_email=user.email)
        raise UnauthorizedException(error_code=ErrorCode.INVALID_CREDENTIALS)

    user.last_login = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)

    log_auth_event("LOGIN", user_id=user.id, user_email=user.email, level=logging.INFO)
    return user, create_user_token(user)


# ── email verification ────────────────────────────────────────────────────────

def verify_email_otp(db: Session, user: User, otp_code: str) -> Tuple[User, str]:
    """
    Consume *otp_code* for *user* and return ``(user, token)`` where the new
    token carries ``email_verified=True``.
    """
    state = user.verification

    if isinstance(state, Verified):
        raise BadRequestException(error_code=ErrorCode.EMAIL_ALREADY_VERIFIED)

    if state.otp is None:
        raise BadRequestException(error_code=ErrorCode.OTP_NOT_FOUND)

    if state.otp.is_expired():
        raise BadRequestException(error_code=ErrorCode.OTP_EXPIRED)

    if not secrets_match(otp_code, state.otp.otp_hash):
        log_auth_event("VERIFY_OTP", "FAILED", "code mismatch", user_id=user.id, user_email=user.email)
        raise BadRequestException(error_code=ErrorCode.OTP_INVALID, field="otp")

    user.mark_email_verified()
    db.commit()
    db.refresh(user)

    log_auth_event("VERIFY_OTP", user_id=user.id, user_email=user.email)
    _deliver("WELCOME", user, send_welcome_email, user.email, user.full_name)

    return user, create_user_token(user)


def resend_email_otp(db: Session, user: User) -> OTPDispatch:
    """Replace the pending OTP of an unverified *user* and email the new one."""
    if user.is_email_verified:
        raise BadRequestException(error_code=ErrorCode.EMAIL_ALREADY_VERIFIED)

    otp = issue_email_otp(user)
    db.commit()

    log_auth_event("RESEND_OTP", user_id=user.id, user_email=user.email, level=logging.INFO)
    delivery = _deliver("RESEND_OTP", user, send_otp_email, user.email, otp, user.full_name)
    return OTPDispatch(otp=otp, delivery=delivery)


# ── password reset / change ───────────────────────────────────────────────────

def request_password_reset(db: Session, email: str) -> ResetDispatch:
    """
    Issue and email a reset token when *email* belongs to an account.

    The caller must answer identically whether or not a token was issued.
    """
    user = get_user_by_email(db, email)
    if user is None:
        log_auth_event("FORGOT_PASSWORD", "NO_ACCOUNT", user_email=email, level=logging.INFO)
        return ResetDispatch()

    token = issue_reset_token(user)
    db.commit()

    log_auth_event("FORGOT_PASSWORD", user_id=user.id, user_email=user.email)
    delivery = _deliver("FORGOT_PASSWORD", user, send_password_reset_email, user.email, token, user.full_name)
    return ResetDispatch(token=token, delivery=delivery)


def reset_password(
    db: Session,
    reset_token: str,
    new_password: str,
    current_user: Optional[User] = None,
) -> Tuple[User, str]:
    """
    Consume *reset_token* and set *new_password*; return ``(user, token)``.

    Unknown and expired tokens share one error. A caller signed in as another
    account may not use the token.
    """
    user = find_user_by_reset_token(db, reset_token)
    if user is None:
        raise BadRequestException(error_code=ErrorCode.RESET_TOKEN_INVALID)

    if current_user is not None and current_user.id != user.id:
        log_auth_event(
            "RESET_PASSWORD", "REJECTED", f"token owned by user {user.id}",
            user_id=current_user.id, user_email=current_user.email,
        )
        raise ForbiddenException(error_code=ErrorCode.CROSS_ACCOUNT_RESET)

    user.hashed_password = get_password_hash(new_password)
    user.clear_reset_token()
    db.commit()
    db.refresh(user)

    log_auth_event("RESET_PASSWORD", user_id=user.id, user_email=user.email)
    return user, create_user_token(user)


def update_password(db: Session, user: User, current_password: str, new_password: str) -> str:
    """Change the password of a signed-in *user* and return a fresh token."""
    if not verify_password(current_password, user.hashed_password):
        log_auth_event("UPDATE_PASSWORD", "FAILED", "wrong current password", user_id=user.id, user_email=user.email)
        raise UnauthorizedException(error_code=ErrorCode.CURRENT_PASSWORD_INCORRECT)

    user.hashed_password = get_password_hash(new_password)
    db.commit()
    db.refresh(user)

    log_auth_event("UPDATE_PASSWORD", user_id=user.id, user_email=user.email)
    return create_user_token(user)
