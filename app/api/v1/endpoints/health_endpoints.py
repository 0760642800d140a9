"""Service health endpoint"""
from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.dependencies import get_db

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    ## Liveness and database check

    **Role:** Public. Answers 200 while the database responds to `SELECT 1`,
    503 otherwise.
    """
    body = {
        "success": True,
        "message": f"{settings.PROJECT_NAME} is running",
        "environment": settings.ENVIRONMENT,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "connected",
    }
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check: database unreachable: {str(e)}")
        body.update(success=False, database="unreachable")
        return JSONResponse(status_code=503, content=body)
    return body
