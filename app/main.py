import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import health, search
from app.config import settings
from app.services.search.errors import SearchError
from app.services.search.provider import get_search_service, reset_search_service

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the search index before serving and drop it on shutdown."""
    logger.info("Starting %s v%s", settings.app_name, settings.app_version)
    service = get_search_service()
    logger.info(
        "Search index ready people=%d organizations=%d lexicon=%s",
        len(service.index.people),
        len(service.index.organizations),
        service.lexicon.version,
    )
    yield
    reset_search_service()
    logger.info("Shutting down application")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Typo- and synonym-tolerant ranking of people and organizations",
    lifespan=lifespan,
    debug=settings.debug,
)

if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path and response status for every request."""
    logger.info("%s %s", request.method, request.url.path)
    response = await call_next(request)
    logger.info("Response status: %s", response.status_code)
    return response


@app.exception_handler(SearchError)
async def search_error_handler(request: Request, exc: SearchError) -> JSONResponse:
    """Surface unexpected search/lexicon failures with their error code."""
    logger.error("search.error path=%s code=%s reason=%s", request.url.path, exc.code, exc)
    return JSONResponse(status_code=500, content={"detail": str(exc), "code": exc.code})


app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(search.router, prefix="/api", tags=["search"])


@app.get("/")
async def root():
    """Service banner."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.environment,
        "search_endpoint": "/api/search",
    }
