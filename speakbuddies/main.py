"""FastAPI application for the SpeakBuddies pairing service."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import Settings, get_settings
from .routers import pairing
from .schemas.pairing import ErrorResponse, HealthResponse
from .services.matchmaking import MatchmakingEngine, build_engine
from .services.rtc import CredentialProvider, LiveKitCredentialProvider
from .services.sweeper import ExpirationSweeper

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    sweeper: ExpirationSweeper = app.state.sweeper
    sweeper.start()
    logger.info("Pairing service ready (app id %r)", app.state.settings.rtc_app_id)
    try:
        yield
    finally:
        await sweeper.stop()


def create_app(
    settings: Settings | None = None,
    engine: MatchmakingEngine | None = None,
    provider: CredentialProvider | None = None,
) -> FastAPI:
    """Build the application around a single matchmaking engine."""

    settings = settings or get_settings()
    if engine is None:
        provider = provider or LiveKitCredentialProvider(
            settings.rtc_app_id,
            settings.rtc_app_certificate,
            ttl_seconds=settings.credential_ttl_seconds,
        )
        engine = build_engine(settings, provider)

    app = FastAPI(title="SpeakBuddies Pairing API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.sweeper = ExpirationSweeper(engine, interval=settings.sweep_interval_seconds)

    if settings.cors_allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_allow_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
            return _error(exc.status_code, "Endpoint not found")
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
        else:
            message = "Invalid request"
        return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, message)

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    @app.get("/api/health", response_model=HealthResponse, tags=["meta"])
    async def health() -> HealthResponse:
        """Simple liveness probe."""

        return HealthResponse(status="OK", timestamp=datetime.now(timezone.utc).isoformat())

    @app.head("/api/health", tags=["meta"])
    async def health_head() -> Response:
        """Allow HEAD for uptime monitors that only need the status code."""

        return Response(status_code=200)

    app.include_router(pairing.router, prefix="/api", tags=["pairing"])
    return app


app = create_app()
