# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""LifeSure backend - main application module."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from beartype import beartype
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from . import __version__
from .api.dependencies import Services, build_services
from .api.response_patterns import ErrorResponse
from .api.v1 import router as api_router
from .api.v1.health import router as health_router
from .core.config import Settings, get_settings
from .core.errors import ErrorKind
from .core.logging_utils import get_logger

logger = get_logger(__name__)


class APIInfo(BaseModel):
    """Root endpoint payload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    version: str
    status: str
    environment: str


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle - startup and shutdown."""
    settings: Settings = app.state.settings
    if getattr(app.state, "services", None) is None:
        app.state.services = build_services(settings)
    services: Services = app.state.services

    logger.info("Starting %s in %s mode", settings.app_name, settings.api_env)
    await services.start()
    logger.info("Document store and cache connected")

    yield

    logger.info("Shutting down %s", settings.app_name)
    await services.stop()
    logger.info("Connections closed")


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies as 400 naming the offending field."""
    first = exc.errors()[0]
    parts = [
        str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")
    ]
    field = ".".join(parts) or None
    message = first.get("msg", "Invalid request")
    if field:
        message = f"{field}: {message}"
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, message)
    body = ErrorResponse(error=message, error_code=ErrorKind.VALIDATION.value, field=field)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump())


@beartype
def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    ``services`` replaces the collaborators built from ``settings``; tests use
    it to inject in-memory backends and a fake payment gateway.
    """
    settings = settings or get_settings()
    get_logger(level=logging.getLevelName(settings.log_level))

    app = FastAPI(
        title=settings.app_name,
        description="Insurance application, payment and claim lifecycle backend",
        version=__version__,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]

    app.include_router(health_router, tags=["health"])
    app.include_router(api_router)

    @app.get("/")
    async def root() -> APIInfo:
        """Root endpoint returning API information."""
        return APIInfo(
            name=settings.app_name,
            version=__version__,
            status="operational",
            environment=settings.api_env,
        )

    return app


@beartype
def main() -> None:
    """Run the main application entry point."""
    settings = get_settings()
    uvicorn.run(
        "lifesure.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_level="info" if not settings.is_production else "error",
    )


if __name__ == "__main__":
    main()
