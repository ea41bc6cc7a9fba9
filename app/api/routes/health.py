from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from app.config import settings
from app.services.search.engine import SearchService
from app.services.search.provider import get_search_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
    }


@router.get("/ready")
async def readiness_check(service: SearchService = Depends(get_search_service)):
    """Readiness check that reports the loaded index and lexicon."""
    return {
        "status": "ready",
        "version": settings.app_version,
        "environment": settings.environment,
        "people": len(service.index.people),
        "organizations": len(service.index.organizations),
        "lexicon_version": service.lexicon.version,
        "lexicon_sha256": service.lexicon.sha256,
    }
