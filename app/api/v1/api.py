"""API v1 router aggregation"""
from fastapi import APIRouter
from app.api.v1.endpoints import auth_endpoints, health_endpoints

api_router = APIRouter()

api_router.include_router(health_endpoints.router, tags=["Health"])
api_router.include_router(auth_endpoints.router, prefix="/auth", tags=["Authentication"])
