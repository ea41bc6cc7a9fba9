"""API endpoint for ranked people/organization search."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.models.search import SearchQuery, SearchResult
from app.services.search.engine import SearchService
from app.services.search.errors import SearchValidationError
from app.services.search.provider import get_search_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/search", response_model=list[SearchResult])
async def run_search(
    payload: SearchQuery,
    *,
    limit: int | None = Query(None, ge=1, description="Return at most this many results."),
    service: SearchService = Depends(get_search_service),
) -> list[SearchResult]:
    """Rank people and/or organizations for a free-text query."""
    try:
        results = service.search(payload)
    except SearchValidationError as exc:
        logger.warning("search.invalid_query", extra={"code": exc.code, "reason": str(exc)})
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return results[:limit] if limit else results
