"""FastAPI application with lifespan management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from myrover_carrier.api.middleware import RequestLoggingMiddleware
from myrover_carrier.api.routes.auth import router as auth_router
from myrover_carrier.api.routes.shipping import router as shipping_router
from myrover_carrier.config import settings
from myrover_carrier.logging_config import configure_logging
from myrover_carrier.storage.credentials import InMemoryCredentialStore

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown.

    Startup:
        - Configure logging.
        - Create the shared outbound httpx client.
        - Create the credential store.
    Shutdown:
        - Close the httpx client (connection pool).
    """
    configure_logging(
        environment=str(settings.environment),
        log_level=settings.log_level,
    )
    app.state.credential_store = InMemoryCredentialStore()

    async with httpx.AsyncClient(
        timeout=httpx.Timeout(settings.upstream_timeout_seconds),
        headers={"Accept": "application/json"},
    ) as http_client:
        app.state.http_client = http_client
        logger.info("app_started", environment=str(settings.environment))
        yield

    logger.info("app_stopped")


app = FastAPI(
    title="MyRover Carrier",
    description="BigCommerce carrier integration for MyRover delivery quotes",
    version="0.1.0",
    lifespan=lifespan,
    debug=settings.is_dev,
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allowed_methods,
    allow_headers=settings.cors_allowed_headers,
)


@app.get("/", response_class=PlainTextResponse)
async def root() -> str:
    return "MyRover Carrier App is running"


@app.get("/health")
async def health() -> JSONResponse:
    """Liveness check; the service holds no backing stores to probe."""
    return JSONResponse(
        content={
            "status": "ok",
            "timestamp": datetime.now(UTC).isoformat(timespec="seconds"),
        },
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Catch-all handler for unhandled exceptions."""
    logger.error("unhandled_exception", exc_info=exc, path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


app.include_router(auth_router, prefix="/api")
app.include_router(shipping_router, prefix="/v1/shipping")
