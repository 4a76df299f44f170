"""
Main FastAPI application for the Vault Secrets Wizard.

Backend for a step-by-step wizard that configures a Vault connection,
authenticates, parses a CSV file of secrets and uploads them one secret
path at a time.
"""

from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.v1 import router as api_v1_router
from .config.settings import settings
from .errors import WizardError
from .middleware.logging_middleware import LoggingMiddleware
from .utils.logging import log_error, setup_logging
from .wizard.session import session_store

# Setup structured logging
setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager for startup and shutdown events."""
    logger.info("Starting Vault Secrets Wizard", version=settings.version)

    yield  # Application is running

    removed = session_store.cleanup()
    logger.info("Shutdown completed", expired_sessions_removed=removed, open_sessions=len(session_store))


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description="Upload CSV secrets to HashiCorp Vault through a guided wizard",
        lifespan=lifespan,
        debug=settings.debug,
    )

    setup_middleware(app)
    setup_routes(app)
    setup_exception_handlers(app)

    return app


def setup_middleware(app: FastAPI) -> None:
    """Configure application middleware."""

    # Trusted host middleware (security)
    if settings.is_production:
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=settings.allowed_hosts
        )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        **settings.get_cors_config()
    )

    # Custom logging middleware
    app.add_middleware(LoggingMiddleware)


def setup_routes(app: FastAPI) -> None:
    """Configure application routes."""

    @app.get("/health", tags=["Health"])
    async def health_check() -> dict[str, Any]:
        """Application health check."""
        return {
            "status": "healthy",
            "version": settings.version,
            "environment": settings.environment,
            "sessions": len(session_store)
        }

    @app.get("/", tags=["Root"])
    async def root() -> dict[str, str]:
        """Root endpoint with basic information."""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.version,
            "environment": settings.environment,
            "docs_url": "/docs",
            "health_url": "/health"
        }

    app.include_router(
        api_v1_router,
        prefix="/api/v1",
        tags=["API v1"]
    )


def error_body(error: str, message: str, code: str, request: Request) -> dict[str, Any]:
    """JSON body shared by every error response."""
    return {
        "error": error,
        "message": message,
        "code": code,
        "request_id": getattr(request.state, "request_id", None)
    }


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure global exception handlers."""

    @app.exception_handler(WizardError)
    async def wizard_error_handler(request: Request, exc: WizardError) -> JSONResponse:
        """Render wizard errors with their status code."""
        logger.warning("Wizard request rejected", code=exc.code, error=exc.message)

        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(type(exc).__name__, exc.message, exc.code, request)
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Render routing and size-limit errors in the same shape."""
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body("HTTPError", str(exc.detail), f"HTTP_{exc.status_code}", request),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Log unexpected errors and hide their details from the client."""
        log_error(exc, path=request.url.path, method=request.method)

        return JSONResponse(
            status_code=500,
            content=error_body("InternalServerError", "An unexpected error occurred", "INTERNAL_ERROR", request)
        )


# Create the FastAPI app
app = create_app()


# Development server entry point
if __name__ == "__main__":
    import uvicorn

    logger.info(
        "Starting development server",
        host=settings.host,
        port=settings.port,
        reload=settings.reload
    )

    uvicorn.run(
        "vault_wizard.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
        access_log=True
    )
