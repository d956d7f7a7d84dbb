"""FastAPI application for MediaInspector."""

import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mediainspector import __version__
from mediainspector.api import routes
from mediainspector.api.middleware import RequestLoggingMiddleware
from mediainspector.api.models import ErrorResponse
from mediainspector.config import Config
from mediainspector.core.launcher import ReencodeLauncher
from mediainspector.core.service import RemediationService
from mediainspector.errors import (
    EmptyPlanError,
    ExecutionFailure,
    InvalidMediaFileError,
    InvalidTargetError,
    MediaInspectorError,
    PlanInFlightError,
    UnknownFileError,
)
from mediainspector.utils.logger import get_logger

logger = get_logger(__name__)

# Domain error -> HTTP status
ERROR_STATUS = {
    InvalidTargetError: status.HTTP_400_BAD_REQUEST,
    EmptyPlanError: status.HTTP_400_BAD_REQUEST,
    UnknownFileError: status.HTTP_404_NOT_FOUND,
    PlanInFlightError: status.HTTP_409_CONFLICT,
    InvalidMediaFileError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ExecutionFailure: status.HTTP_502_BAD_GATEWAY,
}


class AppState:
    """Application state container."""

    def __init__(self, config: Config, service: RemediationService):
        self.config = config
        self.service = service
        self.start_time = time.time()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting MediaInspector API", version=__version__)
    yield
    logger.info("Shutting down MediaInspector API")


def create_app(config: Config, service: Optional[RemediationService] = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        config: Application configuration
        service: Remediation service (built from config when omitted)

    Returns:
        Configured FastAPI application
    """
    if service is None:
        # The server never opens a browser; clients follow the returned URL
        service = RemediationService(
            config,
            launcher=ReencodeLauncher(config.reencode.handbrake_url, open_browser=False),
        )

    app = FastAPI(
        title="MediaInspector",
        description="Find and fix media files needing remux or re-encode",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.mediainspector = AppState(config, service)

    @app.exception_handler(MediaInspectorError)
    async def domain_exception_handler(request: Request, exc: MediaInspectorError):
        """Map domain errors to JSON error responses."""
        status_code = next(
            (code for error_type, code in ERROR_STATUS.items() if isinstance(exc, error_type)),
            status.HTTP_400_BAD_REQUEST,
        )

        logger.warning(
            "Request rejected",
            path=request.url.path,
            error_type=type(exc).__name__,
            error=str(exc),
            status_code=status_code,
        )

        error = ErrorResponse(
            error=type(exc).__name__,
            message=str(exc),
            key=getattr(exc, "key", None),
        )
        return JSONResponse(status_code=status_code, content=error.model_dump())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors with detailed logging."""
        logger.error(
            "Request payload validation failed",
            path=request.url.path,
            method=request.method,
            errors=exc.errors(),
        )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "status": "error",
                "message": "Invalid request payload",
                "errors": exc.errors(),
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch all unhandled exceptions."""
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=True,
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "status": "error",
                "message": "Internal server error",
            },
        )

    app.include_router(routes.router)

    logger.info(
        "FastAPI application created",
        version=__version__,
        api_port=config.api.port,
        dry_run=config.execution.dry_run,
    )

    return app
