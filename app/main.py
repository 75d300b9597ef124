from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.routers import scholarships
from app.services.catalog import CatalogProvider, build_catalog_provider
from app.services.rate_limiter import RateLimiter
from app.utils.config import Settings, get_settings
from app.utils.logging_config import configure_for_environment, get_logger
from app.middleware.error_handlers import (
    ExceptionHandlerMiddleware,
    RequestLoggingMiddleware,
    PerformanceMiddleware,
    http_exception_handler,
)

API_VERSION = "1.0.0"

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager"""
    settings = app.state.settings
    logger.info(f"Scholarship Matcher API starting up ({settings.environment})...")
    logger.info(
        f"Rate limit: {settings.rate_limit_max_requests} requests per {settings.rate_limit_window_seconds:g}s"
    )
    yield
    logger.info("Scholarship Matcher API shutting down...")


def create_app(
    settings: Optional[Settings] = None,
    rate_limiter: Optional[RateLimiter] = None,
    catalog_provider: Optional[CatalogProvider] = None,
) -> FastAPI:
    """Build the application; collaborators default to ones derived from settings"""
    settings = settings or get_settings()
    configure_for_environment(settings.environment, settings.log_level)

    app = FastAPI(title="Scholarship Matcher API", version=API_VERSION, lifespan=lifespan)

    # Built once per process; limits are fixed for its lifetime
    app.state.settings = settings
    app.state.rate_limiter = rate_limiter or RateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.state.catalog_provider = catalog_provider or build_catalog_provider(settings.catalog_path)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # Last added runs first: CORS, then the exception handler which assigns request ids
    app.add_middleware(PerformanceMiddleware, slow_request_threshold=settings.slow_request_threshold)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(ExceptionHandlerMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.get("/")
    @app.head("/")
    async def root():
        """Service banner"""
        return {"message": "Welcome to the Scholarship Matcher API", "version": API_VERSION, "status": "ok"}

    @app.get("/health")
    @app.head("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

    app.include_router(scholarships.router)

    logger.info("Scholarship Matcher API initialized successfully")
    return app


app = create_app()
