"""Pydantic schemas for request/response validation"""
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
    TokenData,
)

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "UpdatePasswordRequest",
    "OTPVerifyRequest",
    "UserResponse",
    "AuthResponse",
    "TokenResponse",
    "TokenData",
]
