"""Main FastAPI application"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from app.core.config import settings
from app.utils.logger import setup_file_logging
from app.api.v1.api import api_router
from app.db.init_db import init_db, create_initial_data
from app.errors.exceptions import BaseHTTPException
from app.errors.handlers import (
    validation_exception_handler,
    app_exception_handler,
    http_exception_handler,
    sqlalchemy_exception_handler,
    general_exception_handler
)

setup_file_logging(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="EduLearn account API: registration, login, email verification and password recovery",
    version=settings.PROJECT_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(BaseHTTPException, app_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

app.include_router(api_router, prefix=settings.API_V1_STR)


@app.on_event("startup")
async def startup_event():
    """Initialize database and log application startup"""
    try:
        init_db()
        create_initial_data()
        logger.warning(f"{settings.PROJECT_NAME} STARTED - Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {str(e)}")
        logger.warning(f"{settings.PROJECT_NAME} STARTED - Database initialization failed, but API is running")


@app.on_event("shutdown")
async def shutdown_event():
    """Log application shutdown"""
    logger.warning(f"{settings.PROJECT_NAME} SHUTDOWN")
