"""Authentication and user schemas"""
import re
from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Annotated, Optional
from datetime import datetime

from app.models.user import UserRole

_LETTER_AND_DIGIT = re.compile(r"^(?=.*[A-Za-z])(?=.*\d)")
_FULL_NAME_CHARS = re.compile(r"^(?:[^\W\d_]|[\s'-])+$")
SELF_REGISTER_ROLES = (UserRole.STUDENT, UserRole.INSTRUCTOR)


def validate_password_strength(v: str) -> str:
    """At least 6 characters with at least one letter and one digit"""
    if len(v) < 6:
        raise ValueError("Password must be at least 6 characters")
    if not _LETTER_AND_DIGIT.match(v):
        raise ValueError("Password must contain at least one letter and one number")
    return v


def normalize_email(v):
    if isinstance(v, str):
        return v.strip().lower()
    return v


NormalizedEmail = Annotated[EmailStr, BeforeValidator(normalize_email)]


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys; snake_case input is accepted too"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── requests ──────────────────────────────────────────────────────────────────

class RegisterRequest(CamelModel):
    """Schema for self-service registration"""
    email: NormalizedEmail
    password: str
    full_name: str
    role: Optional[str] = None

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_password_strength(v)

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v: str) -> str:
        v = v.strip()
        if not 2 <= len(v) <= 100:
            raise ValueError("Full name must be between 2 and 100 characters")
        if not _FULL_NAME_CHARS.match(v):
            raise ValueError("Full name can only contain letters, spaces, hyphens, and apostrophes")
        return v

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if v not in [role.value for role in SELF_REGISTER_ROLES]:
            raise ValueError("Role must be either student or instructor")
        return v


class LoginRequest(CamelModel):
    """Schema for login request"""
    email: Annotated[str, BeforeValidator(normalize_email)] = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ForgotPasswordRequest(CamelModel):
    email: NormalizedEmail


class ResetPasswordRequest(CamelModel):
    password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_password_strength(v)


class UpdatePasswordRequest(CamelModel):
    """Schema for changing password while signed in"""
    current_password: str = Field(..., min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return validate_password_strength(v)


class OTPVerifyRequest(CamelModel):
    otp: str

    @field_validator("otp", mode="before")
    @classmethod
    def validate_otp(cls, v):
        if isinstance(v, str):
            v = v.strip()
        if not isinstance(v, str) or not v:
            raise ValueError("OTP is required")
        if len(v) != 6:
            raise ValueError("OTP must be 6 digits")
        if not v.isdigit():
            raise ValueError("OTP must contain only numbers")
        return v


# ── responses ─────────────────────────────────────────────────────────────────

class UserResponse(CamelModel):
    """Safe projection of a user: no password, OTP or reset columns"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    full_name: str
    role: UserRole
    avatar: Optional[str] = None
    bio: Optional[str] = None
    headline: Optional[str] = None
    website: Optional[str] = None
    is_email_verified: bool
    is_active: bool
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class AuthResponse(CamelModel):
    """Token-bearing response for register / login / verify-otp"""
    success: bool = True
    message: Optional[str] = None
    token: str
    user: UserResponse
    requires_verification: Optional[bool] = None
    otp: Optional[str] = None


class TokenResponse(CamelModel):
    """Token-bearing response for password reset / update"""
    success: bool = True
    message: str
    token: str


class CurrentUserResponse(CamelModel):
    success: bool = True
    user: UserResponse


class OTPSentResponse(CamelModel):
    success: bool = True
    message: str
    otp: Optional[str] = None


class ForgotPasswordResponse(CamelModel):
    success: bool = True
    message: str
    reset_token: Optional[str] = None


class TokenData(BaseModel):
    """Token data schema for JWT payload"""
    user_id: Optional[int] = None
    email: Optional[str] = None
    role: Optional[UserRole] = None
    email_verified: bool = False
