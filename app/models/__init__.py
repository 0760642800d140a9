"""Database models"""
from app.models.user import User, UserRole, Verified, Unverified, PendingOTP

__all__ = ["User", "UserRole", "Verified", "Unverified", "PendingOTP"]
