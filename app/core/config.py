"""Application configuration"""
import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # Database Configuration
    DATABASE_USER = os.getenv("DATABASE_USER", "postgres")
    DATABASE_PASSWORD = os.getenv("DATABASE_PASSWORD", "123456")
    DATABASE_HOST = os.getenv("DATABASE_HOST", "localhost")
    DATABASE_PORT = os.getenv("DATABASE_PORT", "5432")
    DATABASE_NAME = os.getenv("DATABASE_NAME", "edulearn")

    @property
    def DATABASE_URL(self) -> str:
        """Explicit DATABASE_URL wins, otherwise build a PostgreSQL URL"""
        explicit = os.getenv("DATABASE_URL")
        if explicit:
            return explicit
        return f"postgresql://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}"

    # Logging Configuration
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("LOG_FILE", "app/logs/logs.txt")

    # Schema management: create_all on startup unless migrations own the schema
    AUTO_CREATE_TABLES = os.getenv("AUTO_CREATE_TABLES", "true").lower() == "true"

    # Development/Production Settings
    ENVIRONMENT = os.getenv("ENVIRONMENT", "production")
    DEBUG = os.getenv("DEBUG", "false").lower() == "true"

    @property
    def expose_debug_tokens(self) -> bool:
        """OTP codes and reset tokens are echoed in responses outside production only"""
        return self.ENVIRONMENT.lower() != "production"

    # Project Metadata
    PROJECT_NAME = "EduLearn Auth API"
    PROJECT_VERSION = "1.0.0"
    API_V1_STR = "/api/v1"

    # CORS
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()]

    # Frontend base URL (used to build reset-password links)
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000").rstrip("/")

    # JWT Authentication
    SECRET_KEY = os.getenv("SECRET_KEY", "your-secret-key-change-this-in-production-min-32-chars")
    ALGORITHM = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24 * 7))  # 7 days

    # Password hashing cost
    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", 12))

    # Admin Configuration (Initial Setup)
    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@edulearn.io")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")
    ADMIN_FULL_NAME = os.getenv("ADMIN_FULL_NAME", "EduLearn Administrator")

    # SMTP / Email configuration
    SMTP_HOST = os.getenv("SMTP_HOST", "")
    SMTP_PORT = int(os.getenv("SMTP_PORT", 587))
    SMTP_USER = os.getenv("SMTP_USER", "")
    SMTP_PASS = os.getenv("SMTP_PASS", "")
    EMAIL_FROM = os.getenv("EMAIL_FROM", "noreply@edulearn.io")
    EMAIL_FROM_NAME = os.getenv("EMAIL_FROM_NAME", "EduLearn")

    @property
    def email_configured(self) -> bool:
        return bool(self.SMTP_HOST and self.SMTP_USER and self.SMTP_PASS)

    # OTP / reset token expiry (minutes)
    OTP_EXPIRE_MINUTES = int(os.getenv("OTP_EXPIRE_MINUTES", 10))
    RESET_TOKEN_EXPIRE_MINUTES = int(os.getenv("RESET_TOKEN_EXPIRE_MINUTES", 10))


settings = Settings()
