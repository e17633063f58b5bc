"""
FastAPI application for the Wrapped Leaderboard service.

This module initializes and configures the FastAPI application that accepts
stats screenshots and serves the ranked leaderboard.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from wrapped_leaderboard.api.endpoints import leaderboard, preview, submissions
from wrapped_leaderboard.config.settings import settings
from wrapped_leaderboard.core.errors import InvalidInput, LeaderboardError
from wrapped_leaderboard.core.submission_pipeline import SubmissionPipeline
from wrapped_leaderboard.integrations.openai_vision import VisionExtractor
from wrapped_leaderboard.integrations.supabase import SupabaseAuthClient, SupabaseStorage
from wrapped_leaderboard.utils.db_health import check_db_connection
from wrapped_leaderboard.utils.db_session import dispose_engine
from wrapped_leaderboard.utils.logging_utils import setup_logging

logger = logging.getLogger(__name__)

_HTTP_ERROR_CODES = {
    400: "invalid_input",
    401: "unauthenticated",
    404: "not_found",
    405: "method_not_allowed",
    413: "upload_too_large",
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager for startup and shutdown events.

    Creates the shared HTTP client and the identity, storage and vision
    collaborators on startup, and closes them and the database pool on
    shutdown.
    """
    # Startup
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    http_client = httpx.AsyncClient(timeout=settings.SUPABASE_TIMEOUT_SECONDS)
    app.state.http_client = http_client
    app.state.identity_verifier = SupabaseAuthClient(
        base_url=settings.SUPABASE_URL,
        anon_key=settings.SUPABASE_ANON_KEY,
        http_client=http_client,
    )
    storage = SupabaseStorage(
        base_url=settings.SUPABASE_URL,
        service_key=settings.SUPABASE_SERVICE_ROLE_KEY,
        bucket=settings.STORAGE_BUCKET,
        http_client=http_client,
    )

    vision = None
    app.state.submission_pipeline = None
    if settings.OPENAI_API_KEY:
        vision = VisionExtractor(
            api_key=settings.OPENAI_API_KEY,
            model=settings.VISION_MODEL,
            max_tokens=settings.VISION_MAX_TOKENS,
            timeout=settings.VISION_TIMEOUT_SECONDS,
        )
        app.state.submission_pipeline = SubmissionPipeline(vision=vision, storage=storage)
        logger.info(f"Submission pipeline ready (vision model: {settings.VISION_MODEL})")
    else:
        logger.warning("OPENAI_API_KEY not configured - submissions are disabled")

    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        logger.warning("SUPABASE_SERVICE_ROLE_KEY not configured - screenshot uploads will be rejected")

    yield

    # Shutdown
    logger.info("Shutting down application")
    if vision:
        await vision.close()
    await http_client.aclose()
    await dispose_engine()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    setup_logging()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="""Leaderboard API for yearly coding-assistant usage stats.

        This API provides endpoints for:
        - Submitting a stats screenshot (one per account)
        - Listing the ranked leaderboard
        - Looking up a single entry's rank and percentile
        - Rendering a share preview image
        - Health monitoring""",
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,  # Disable docs in production
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_tags=[
            {"name": "submissions", "description": "Screenshot submission"},
            {"name": "leaderboard", "description": "Ranked leaderboard reads"},
            {"name": "preview", "description": "Share preview images"},
            {"name": "health", "description": "Health check and monitoring"},
        ],
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS if not settings.DEBUG else ["*"],
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )

    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.ALLOWED_HOSTS if not settings.DEBUG else ["*"]
    )

    @app.exception_handler(LeaderboardError)
    async def leaderboard_error_handler(request: Request, exc: LeaderboardError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc.__cause__)
        else:
            logger.info(f"{request.method} {request.url.path} rejected ({exc.code}): {exc}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    # Framework-raised errors (malformed multipart bodies, unknown routes,
    # wrongly typed fields) answer with the same body shape.
    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        logger.info(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail), "code": _HTTP_ERROR_CODES.get(exc.status_code, "http_error")},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        message = "Invalid input"
        if errors:
            field = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
            message = f"Invalid input ({field}): {errors[0].get('msg')}"
        logger.info(f"{request.method} {request.url.path} rejected (invalid_input): {errors}")
        error = InvalidInput(message)
        return JSONResponse(status_code=error.status_code, content=error.to_payload())

    app.include_router(submissions.router, prefix="/api/submit", tags=["submissions"])
    app.include_router(leaderboard.router, prefix="/api/leaderboard", tags=["leaderboard"])
    app.include_router(preview.router, prefix="/api/og", tags=["preview"])

    @app.get("/health", tags=["health"], summary="Health Check")
    async def health_check():
        """
        Health check endpoint.

        Returns:
            dict: Service status, version, timestamp and whether the database
            and submission pipeline are available.
        """
        database_ok = await check_db_connection()
        return {
            "status": "healthy" if database_ok else "degraded",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "database": "connected" if database_ok else "unavailable",
            "submissions_enabled": getattr(app.state, "submission_pipeline", None) is not None,
            "debug_mode": settings.DEBUG,
        }

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "wrapped_leaderboard.api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )
