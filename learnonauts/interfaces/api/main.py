"""
FastAPI Main Application - Learnonauts API entry point.

Run with: uvicorn learnonauts.interfaces.api.main:create_app --factory --reload
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from learnonauts import __version__
from learnonauts.config import get_settings

from .deps import cleanup_services, init_services
from .middleware import (
    ErrorHandlerMiddleware,
    LatencyMiddleware,
    RequestIDMiddleware,
    validation_exception_handler,
)
from .routes import accessibility, account, auth, gemini, health

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    logger.info("Starting Learnonauts API...")
    logger.info("  Database: %s (auto_migrate=%s)", settings.db_path, settings.auto_migrate)
    logger.info("  SMTP: %s", "configured" if settings.smtp_configured else "not configured")
    logger.info("  Storage: %s", "configured" if settings.storage_configured else "not configured")
    logger.info("  Gemini: %s", "configured" if settings.gemini_api_key else "mock replies")

    # Apply or verify migrations, build adapters
    await init_services()
    logger.info("  Services initialized")

    yield

    # Cleanup
    logger.info("Shutting down Learnonauts API...")
    await cleanup_services()


def create_app() -> FastAPI:
    """Create FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Learnonauts API",
        description="Accounts, accessibility settings and AI chat for Learnonauts",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters - last added = outermost)
    # 1. Error handling (catch exceptions from inner layers)
    app.add_middleware(ErrorHandlerMiddleware)

    # 2. Latency tracking
    app.add_middleware(LatencyMiddleware)

    # 3. Request ID (sets state before the inner layers run)
    app.add_middleware(RequestIDMiddleware)

    # 4. CORS (framework middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Include routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(auth.router, prefix="/api", tags=["Auth"])
    app.include_router(account.router, prefix="/api", tags=["Account"])
    app.include_router(
        accessibility.router, prefix="/api/accessibility-settings", tags=["Accessibility"]
    )
    app.include_router(gemini.router, prefix="/api/gemini", tags=["Gemini"])

    return app
