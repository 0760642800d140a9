"""Authentication primitives: password hashing, JWT, OTP and reset tokens"""
from datetime import datetime, timedelta, timezone
from typing import Optional
import hashlib
import hmac
import logging
import secrets
import string
from passlib.context import CryptContext
from jose import JWTError, jwt
from sqlalchemy.orm import Session
from app.models.user import User, UserRole
from app.schemas.auth_schemas import TokenData
from app.core.config import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS
)

OTP_LENGTH = 6
RESET_TOKEN_BYTES = 32


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a plain password against a hashed password"""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def dummy_verify_password() -> None:
    """Spend the same time as a real verification when there is no user to check"""
    pwd_context.dummy_verify()


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt"""
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt


def create_user_token(user: User) -> str:
    """
    Issue a session token for *user*.

    The ``email_verified`` claim scopes the token: unverified tokens are only
    honoured by the verification endpoints and the self-projection.
    """
    return create_access_token(
        data={
            "sub": str(user.id),
            "email": user.email,
            "role": user.role.value,
            "email_verified": bool(user.is_email_verified),
        }
    )


def decode_access_token(token: str) -> Optional[TokenData]:
    """
    Decode and validate a JWT access token
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.info(f"JWT decode error: {str(e)}")
        return None

    user_id_str = payload.get("sub")
    if user_id_str is None:
        return None

    try:
        user_id = int(user_id_str)
        role = UserRole(payload["role"]) if payload.get("role") else None
    except (ValueError, TypeError):
        return None

    return TokenData(
        user_id=user_id,
        email=payload.get("email"),
        role=role,
        email_verified=bool(payload.get("email_verified", False)),
    )


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """
    Get user by email (case-insensitive, surrounding whitespace ignored)
    """
    return db.query(User).filter(User.email == email.strip().lower()).first()


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    """
    Get user by ID
    """
    return db.query(User).filter(User.id == user_id).first()


# ── OTP / reset token helpers ─────────────────────────────────────────────────

def hash_secret(value: str) -> str:
    """One-way sha256 digest used for OTP codes and reset tokens."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def secrets_match(plain: str, stored_hash: Optional[str]) -> bool:
    """Constant-time comparison of *plain*'s digest with *stored_hash*."""
    if not stored_hash:
        return False
    return hmac.compare_digest(hash_secret(plain), stored_hash)


def generate_otp() -> str:
    """Return a cryptographically random 6-digit numeric OTP."""
    return "".join(secrets.choice(string.digits) for _ in range(OTP_LENGTH))


def generate_reset_token() -> str:
    """Return a 64-character hex reset token."""
    return secrets.token_hex(RESET_TOKEN_BYTES)


def issue_email_otp(user: User) -> str:
    """
    Give *user* a fresh OTP, replacing any earlier one, and return the
    plain-text code. The caller commits.
    """
    otp_code = generate_otp()
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.OTP_EXPIRE_MINUTES)
    user.issue_email_otp(hash_secret(otp_code), expires_at)
    return otp_code


def issue_reset_token(user: User) -> str:
    """
    Give *user* a fresh password reset token and return the plain-text value.
    The caller commits.
    """
    token = generate_reset_token()
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
    user.issue_reset_token(hash_secret(token), expires_at)
    return token


def find_user_by_reset_token(db: Session, token: str) -> Optional[User]:
    """
    Return the owner of a plain-text reset *token*, or None when no user holds
    it or the stored token has expired.
    """
    user = db.query(User).filter(User.reset_password_token_hash == hash_secret(token)).first()
    if user is None or user.reset_token_expired():
        return None
    return user
