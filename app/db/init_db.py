"""Create tables on startup and seed the admin account"""
import logging
from app.db.base import Base
from app.db.session import engine, SessionLocal
from app.models.user import User, UserRole
from app.services.auth_service import get_password_hash, get_user_by_email
from app.core.config import settings

logger = logging.getLogger(__name__)


def init_db() -> None:
    """Create missing tables. Deployments managed by Alembic turn this off."""
    if not settings.AUTO_CREATE_TABLES:
        logger.info("AUTO_CREATE_TABLES disabled, leaving schema to Alembic")
        return
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Error creating database tables: {str(e)}")
        raise


def create_initial_data() -> None:
    """Seed a verified admin account when ADMIN_EMAIL has none yet"""
    if not settings.ADMIN_PASSWORD:
        logger.info("ADMIN_PASSWORD not set, skipping admin seed")
        return

    db = SessionLocal()
    try:
        if get_user_by_email(db, settings.ADMIN_EMAIL) is not None:
            return

        admin = User(
            email=settings.ADMIN_EMAIL.strip().lower(),
            full_name=settings.ADMIN_FULL_NAME,
            hashed_password=get_password_hash(settings.ADMIN_PASSWORD),
            role=UserRole.ADMIN,
            is_active=True,
            is_email_verified=True,
        )
        db.add(admin)
        db.commit()
        logger.warning(f"Admin account created: {admin.email}. Change its password after first login!")
    except Exception as e:
        logger.error(f"Error creating initial data: {str(e)}")
        db.rollback()
        raise
    finally:
        db.close()
