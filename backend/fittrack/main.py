"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from fittrack.api.v1.router import api_router
from fittrack.core.config import get_settings
from fittrack.core.errors import FitTrackError, ValidationError
from fittrack.models.schemas import field_errors
from fittrack.observability import RequestLoggingMiddleware, get_metrics_backend, get_request_id

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan events."""
    logger.info(f"Starting {settings.app_name} {settings.app_version}")
    yield


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    openapi_url=f"{settings.api_prefix}/openapi.json",
    docs_url=f"{settings.api_prefix}/docs",
    redoc_url=f"{settings.api_prefix}/redoc",
    lifespan=lifespan,
)

metrics_backend = get_metrics_backend()

# allow_credentials=True needs explicit origins, never ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware, metrics=metrics_backend)


# -------------------------------------------------------------------------
# Error handlers
# -------------------------------------------------------------------------


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None) or get_request_id()


@app.exception_handler(FitTrackError)
async def fittrack_error_handler(request: Request, exc: FitTrackError) -> JSONResponse:
    """Render application errors in one consistent shape."""
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(_request_id(request)),
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Body and query validation failures are 400 invalid_payload."""
    error = ValidationError(details=field_errors(exc.errors()))
    return JSONResponse(status_code=error.status_code, content=error.to_dict(_request_id(request)))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the traceback; the client only sees a generic failure."""
    request_id = _request_id(request)
    logger.exception(f"Unhandled error on {request.method} {request.url.path} (request_id={request_id})")
    error = FitTrackError()
    return JSONResponse(status_code=error.status_code, content=error.to_dict(request_id))


# Include API router
app.include_router(api_router, prefix=settings.api_prefix)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "version": settings.app_version}


@app.get("/metrics", include_in_schema=False)
async def metrics() -> PlainTextResponse:
    """Prometheus-style metrics endpoint."""
    return PlainTextResponse(metrics_backend.render_prometheus())
