"""User model with role-based access control and credential lifecycle state"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, Enum as SQLEnum
from sqlalchemy.sql import func
from enum import Enum
from app.db.base import Base


class UserRole(str, Enum):
    """User role enumeration"""
    STUDENT = "student"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes read back from the database."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


# ── verification state ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PendingOTP:
    otp_hash: str
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return as_utc(self.expires_at) <= now


@dataclass(frozen=True)
class Unverified:
    """Email not yet confirmed; ``otp`` is None when no code was ever issued."""
    otp: Optional[PendingOTP] = None


@dataclass(frozen=True)
class Verified:
    pass


VerificationState = Union[Unverified, Verified]


class User(Base):
    """
    Platform account (student, instructor or admin).

    The OTP and reset columns hold sha256 digests only; the plaintext values
    leave the server once, by email. Read verification state through
    ``verification`` and change it through ``issue_email_otp`` /
    ``mark_email_verified`` so the columns never disagree.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(100), nullable=False)

    avatar = Column(String(500), nullable=False, default="default-avatar.png")
    bio = Column(Text, nullable=True)
    headline = Column(String(100), nullable=True)
    website = Column(String(255), nullable=True)

    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.STUDENT, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    is_email_verified = Column(Boolean, default=False, nullable=False)
    email_otp_hash = Column(String(64), nullable=True)
    email_otp_expires_at = Column(DateTime(timezone=True), nullable=True)

    reset_password_token_hash = Column(String(64), nullable=True, index=True)
    reset_password_expires_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)
    last_login = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"

    # ── email verification ─────────────────────────────────────

    @property
    def verification(self) -> VerificationState:
        if self.is_email_verified:
            return Verified()
        if self.email_otp_hash and self.email_otp_expires_at:
            return Unverified(otp=PendingOTP(self.email_otp_hash, as_utc(self.email_otp_expires_at)))
        return Unverified()

    def issue_email_otp(self, otp_hash: str, expires_at: datetime) -> None:
        """Store a new OTP digest, replacing any previous one."""
        if self.is_email_verified:
            raise ValueError("Email already verified")
        self.email_otp_hash = otp_hash
        self.email_otp_expires_at = expires_at

    def mark_email_verified(self) -> None:
        self.is_email_verified = True
        self.email_otp_hash = None
        self.email_otp_expires_at = None

    # ── password reset ─────────────────────────────────────────

    def issue_reset_token(self, token_hash: str, expires_at: datetime) -> None:
        self.reset_password_token_hash = token_hash
        self.reset_password_expires_at = expires_at

    def clear_reset_token(self) -> None:
        self.reset_password_token_hash = None
        self.reset_password_expires_at = None

    def reset_token_expired(self, now: Optional[datetime] = None) -> bool:
        if self.reset_password_expires_at is None:
            return True
        now = now or datetime.now(timezone.utc)
        return as_utc(self.reset_password_expires_at) <= now

