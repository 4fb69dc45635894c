"""
API v1 router.

Aggregates all v1 endpoints.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import sleep

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(
    sleep.router, prefix="/sleep", tags=["Sleep quality"]
)
