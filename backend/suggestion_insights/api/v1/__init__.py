"""API v1 module."""

from fastapi import APIRouter

from suggestion_insights.api.v1 import health, suggestions

router = APIRouter()

router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(suggestions.router, prefix="/suggestions", tags=["suggestions"])
