"""FastAPI application entry point for the knowledge base.

Organization-scoped routers under /api, health and version endpoints, and
an optional pre-built front end served at /.
"""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.articles import router as articles_router
from src.api.auth import router as auth_router
from src.api.categories import router as categories_router
from src.api.frontend import mount_frontend
from src.api.users import router as users_router
from src.config.settings import Environment, get_settings
from src.db.errors import describe_db_error
from src.db.session import get_async_session
from src.models.common import utc_now

APP_NAME = "KB Enterprise"
APP_VERSION = "0.1.0"

settings = get_settings()

_LOG_NAME_TO_LEVEL: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# --- Structured logging ---
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer() if settings.ENVIRONMENT == Environment.DEV
        else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        _LOG_NAME_TO_LEVEL[settings.LOG_LEVEL.value],
    ),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)
logging.basicConfig(level=_LOG_NAME_TO_LEVEL[settings.LOG_LEVEL.value])

logger: structlog.stdlib.BoundLogger = structlog.get_logger()


# --- Startup ---


async def _seed_defaults() -> None:
    """Ensure default categories. Failures are logged and startup continues."""
    from src.db.defaults import ensure_default_categories
    from src.db.session import async_session_factory

    try:
        async with async_session_factory() as session:
            created = await ensure_default_categories(session)
            await session.commit()
        logger.info("startup.categories_checked", created=created)
    except SQLAlchemyError as exc:
        logger.error("startup.seed_failed", error=describe_db_error(exc), detail=str(exc))


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    if settings.uses_default_jwt_secret and settings.ENVIRONMENT != Environment.DEV:
        logger.warning("startup.default_jwt_secret", environment=settings.ENVIRONMENT.value)
    if settings.SEED_ON_STARTUP:
        await _seed_defaults()
    yield


# --- FastAPI app ---
app = FastAPI(
    title="KB Enterprise API",
    description="Multi-tenant internal knowledge base.",
    version=APP_VERSION,
    lifespan=lifespan,
)

# --- CORS middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.ENVIRONMENT == Environment.DEV else settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


@app.middleware("http")
async def access_log(request: Request, call_next):  # noqa: ANN001, ANN201
    """One structured log line per request, plus baseline security headers."""
    started = time.perf_counter()
    response = await call_next(request)
    for name, value in _SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    logger.info(
        "http.request",
        method=request.method,
        path=request.url.path,
        status=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 1),
    )
    return response


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("db.error", error=str(exc))
    return JSONResponse(status_code=500, content={"detail": describe_db_error(exc)})


# --- Routers ---
app.include_router(auth_router)
app.include_router(articles_router)
app.include_router(categories_router)
app.include_router(users_router)


# --- Infrastructure Endpoints ---


async def _health(session: AsyncSession) -> JSONResponse:
    body = {
        "status": "ok",
        "database": "connected",
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT.value,
        "timestamp": utc_now().isoformat(),
    }
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        await session.rollback()
        body.update(status="error", database="disconnected", error=describe_db_error(exc))
        return JSONResponse(status_code=503, content=body)
    return JSONResponse(status_code=200, content=body)


@app.get("/health")
async def health_check(session: AsyncSession = Depends(get_async_session)) -> JSONResponse:
    """Liveness probe with database connectivity check. 503 when the DB is down."""
    return await _health(session)


@app.get("/api/health")
async def api_health_check(session: AsyncSession = Depends(get_async_session)) -> JSONResponse:
    return await _health(session)


@app.get("/api/version")
async def get_version() -> dict[str, str]:
    """Return application name, version, and environment."""
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT.value,
    }


# --- Front end (mounted last so /api routes win) ---
mount_frontend(app, settings.FRONTEND_DIST_PATH)
