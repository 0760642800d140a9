"""Authentication endpoints"""
from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.core.dependencies import get_db
from app.core.config import settings
from app.services import account_service
from app.schemas.auth_schemas import (
    RegisterRequest,
    LoginRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    UpdatePasswordRequest,
    OTPVerifyRequest,
    UserResponse,
    AuthResponse,
    TokenResponse,
    CurrentUserResponse,
    MessageResponse,
    OTPSentResponse,
    ForgotPasswordResponse,
)
from app.middleware.auth import (
    get_current_user,
    get_current_verified_user,
    get_optional_user,
)
from app.models.user import User

router = APIRouter()
logger = logging.getLogger(__name__)

FORGOT_PASSWORD_MESSAGE = "If an account with that email exists, a password reset link has been sent."


def _debug_value(value: Optional[str]) -> Optional[str]:
    """Echo OTPs / reset tokens only outside production."""
    return value if settings.expose_debug_tokens else None


@router.post(
    "/register",
    response_model=AuthResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """
    ## Register a new account

    **Role:** Public — no authentication required.

    Creates an **unverified** account and emails a 6-digit OTP. The returned
    token only works for `/auth/me`, `/auth/logout`, `/auth/verify-otp` and
    `/auth/resend-otp` until the email is verified.

    ### Required fields (JSON body)
    | Field    | Type   | Description                                   |
    |----------|--------|-----------------------------------------------|
    | email    | string | Valid email — OTP is sent here                |
    | password | string | Min 6 characters, at least a letter and digit |
    | fullName | string | 2–100 characters                              |
    | role     | string | Optional: `student` (default) or `instructor` |

    ### Errors
    - HTTP 400 → validation error, `field` names the offending input.
    - HTTP 409 → email already registered.
    """
    registration = account_service.register_user(db, body)
    return AuthResponse(
        message="Registration successful. Please check your email for the verification code.",
        token=registration.token,
        user=UserResponse.model_validate(registration.user),
        requires_verification=True,
        otp=_debug_value(registration.otp),
    )


@router.post("/login", response_model=AuthResponse, response_model_exclude_none=True)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    """
    ## Login with email and password

    **Role:** Public — no authentication required.

    ### Errors
    - HTTP 401 `INVALID_CREDENTIALS` → unknown email or wrong password
      (deliberately indistinguishable).
    - HTTP 401 `ACCOUNT_DEACTIVATED` → account switched off by an admin.

    When the email is still unverified the response carries
    `requiresVerification: true`; send the user to the OTP screen.
    """
    user, token = account_service.login_user(db, body.email, body.password)
    return AuthResponse(
        token=token,
        user=UserResponse.model_validate(user),
        requires_verification=True if not user.is_email_verified else None,
    )


@router.get("/me", response_model=CurrentUserResponse)
def get_current_user_info(current_user: User = Depends(get_current_user)):
    """
    ## Get the currently authenticated user's profile

    **Auth:** `Authorization: Bearer <token>` header required (verified or not).
    """
    return CurrentUserResponse(user=UserResponse.model_validate(current_user))


@router.post("/logout", response_model=MessageResponse)
def logout(current_user: User = Depends(get_current_user)):
    """
    ## Logout

    Tokens are stateless, so there is nothing to revoke; the client discards
    its token.
    """
    logger.info(f"[Logout] user {current_user.id}")
    return MessageResponse(message="Logged out successfully")


@router.post("/forgot-password", response_model=ForgotPasswordResponse, response_model_exclude_none=True)
def forgot_password(body: ForgotPasswordRequest, db: Session = Depends(get_db)):
    """
    ## Request a password reset link

    **Role:** Public — no authentication required.

    Always answers with the same message so the endpoint cannot be used to
    probe which emails have accounts. The link points at
    `FRONTEND_URL/reset-password/<token>` and is valid for 10 minutes.
    """
    dispatch = account_service.request_password_reset(db, body.email)
    return ForgotPasswordResponse(
        message=FORGOT_PASSWORD_MESSAGE,
        reset_token=_debug_value(dispatch.token),
    )


@router.post("/reset-password/{reset_token}", response_model=TokenResponse)
def reset_password(
    body: ResetPasswordRequest,
    reset_token: str = Path(..., min_length=1, max_length=128),
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """
    ## Reset password with an emailed token

    **Auth:** optional. When a bearer token is sent and belongs to a different
    account than the reset token, the request is refused with HTTP 403.

    ### Errors
    - HTTP 400 `RESET_TOKEN_INVALID` → unknown or expired token (one message
      for both).
    - HTTP 403 `CROSS_ACCOUNT_RESET` → signed in as someone else.
    """
    _, token = account_service.reset_password(db, reset_token, body.password, current_user)
    return TokenResponse(message="Password reset successful", token=token)


@router.put("/update-password", response_model=TokenResponse)
def update_password(
    body: UpdatePasswordRequest,
    current_user: User = Depends(get_current_verified_user),
    db: Session = Depends(get_db),
):
    """
    ## Change the current user's password

    **Auth:** `Authorization: Bearer <token>` of a verified account.

    ### Errors
    - HTTP 401 `CURRENT_PASSWORD_INCORRECT` → password left unchanged.
    - HTTP 403 `EMAIL_NOT_VERIFIED` → token issued before verification.
    """
    token = account_service.update_password(db, current_user, body.current_password, body.new_password)
    return TokenResponse(message="Password updated successfully", token=token)


@router.post("/verify-otp", response_model=AuthResponse, response_model_exclude_none=True)
def verify_otp(
    body: OTPVerifyRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    ## Verify email with the 6-digit OTP

    **Auth:** bearer token from `/auth/register` or `/auth/login`.

    On success the response carries a **new token** scoped to a verified
    account; replace the stored one.

    ### Errors (all HTTP 400)
    `EMAIL_ALREADY_VERIFIED`, `OTP_NOT_FOUND`, `OTP_EXPIRED`, `OTP_INVALID`.
    """
    user, token = account_service.verify_email_otp(db, current_user, body.otp)
    return AuthResponse(
        message="Email verified successfully",
        token=token,
        user=UserResponse.model_validate(user),
    )


@router.post("/resend-otp", response_model=OTPSentResponse, response_model_exclude_none=True)
def resend_otp(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    ## Resend the verification OTP

    Invalidates the previous code. There is no server-side cooldown; the
    frontend disables its button for 60 seconds.
    """
    dispatch = account_service.resend_email_otp(db, current_user)
    return OTPSentResponse(
        message="OTP has been resent to your email",
        otp=_debug_value(dispatch.otp),
    )
