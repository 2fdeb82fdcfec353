"""
FastAPI application entry point.

Initializes the FastAPI app with:
- CORS configuration
- Global exception handlers rendering the result envelope
- Structured logging
- Supabase clients created at startup
- Health check endpoint
"""

import logging
import sys
from datetime import datetime
from typing import Any

from api.responses import error_envelope
from api.routes import competitions, participants, registrations
from config import settings
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from integrations.postgrest.dependencies import build_postgrest_client
from integrations.supabase_auth.client import SupabaseAuthClient
from models.results import field_errors_from_pydantic
from starlette.exceptions import HTTPException as StarletteHTTPException


# Configure structured logging
def setup_logging() -> None:
    """
    Configure structured logging.

    Logs include:
    - Timestamp
    - Log level
    - Message
    - Module name
    """
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL),
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Set third-party loggers to WARNING to reduce noise
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


setup_logging()
logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title="Club Events API",
    description="Event registration, competition management and participant review",
    version=settings.API_VERSION,
    docs_url=f"/{settings.API_VERSION}/docs",
    redoc_url=f"/{settings.API_VERSION}/redoc",
    openapi_url="/openapi.json",
)

# Filled in by the startup hook
app.state.postgrest = None
app.state.auth_client = None


# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger.info(f"CORS configured with allowed origins: {settings.cors_origins}")


# Register API Routes
app.include_router(registrations.router)
app.include_router(competitions.router)
logger.info("Registered public registration and competition routes")
app.include_router(competitions.admin_router)
app.include_router(participants.router)
logger.info("Registered admin competition and participant routes")


ERROR_CODE_BY_STATUS = {
    status.HTTP_401_UNAUTHORIZED: "authorization_error",
    status.HTTP_403_FORBIDDEN: "authorization_error",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_422_UNPROCESSABLE_ENTITY: "validation_error",
}


# Global Exception Handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Handle HTTP exceptions with the result envelope.

    Auth failures carry a dict detail (message plus machine-readable code);
    its code is returned as ``reason``.

    Args:
        request: The incoming request
        exc: The HTTP exception

    Returns:
        JSONResponse with error details
    """
    logger.error(f"HTTP exception: {exc.status_code} - {exc.detail} - Path: {request.url.path}")

    extra: dict[str, Any] = {"path": str(request.url.path)}
    message = exc.detail
    if isinstance(exc.detail, dict):
        message = exc.detail.get("detail", "Request failed")
        extra["reason"] = exc.detail.get("error_code")

    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(
            str(message),
            exc.status_code,
            error_code=ERROR_CODE_BY_STATUS.get(
                exc.status_code, "storage_error" if exc.status_code >= 500 else None
            ),
            **extra,
        ),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle request validation errors with field-scoped messages.

    Args:
        request: The incoming request
        exc: The validation error

    Returns:
        JSONResponse with validation error details
    """
    logger.error(f"Validation error on {request.url.path}: {exc.errors()}")

    errors = field_errors_from_pydantic(exc, skip_prefix=("body", "query", "path"))

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_envelope(
            "Please correct the highlighted fields",
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="validation_error",
            errors=[error.model_dump() for error in errors],
            path=str(request.url.path),
        ),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions with generic error response.

    Args:
        request: The incoming request
        exc: The exception

    Returns:
        JSONResponse with generic error message
    """
    logger.exception(f"Unhandled exception on {request.url.path}: {str(exc)}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope(
            "Internal server error",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            path=str(request.url.path),
        ),
    )


# Health Check Endpoint
@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, Any]:
    """
    Health check endpoint.

    Response Schema:
        {
            "status": "healthy",
            "database": "configured",
            "timestamp": "2024-01-01T00:00:00.000000"
        }
    """
    return {
        "status": "healthy",
        "database": "configured" if app.state.postgrest is not None else "unconfigured",
        "timestamp": datetime.utcnow().isoformat(),
    }


# Startup event
@app.on_event("startup")
async def startup_event() -> None:
    """
    Execute tasks on application startup.

    Creates the shared Supabase clients. A missing database configuration is
    logged and leaves the API running; routes needing the database answer 503.
    """
    logger.info("=" * 60)
    logger.info("Club Events API Starting")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"API Version: {settings.API_VERSION}")
    logger.info(f"Log Level: {settings.LOG_LEVEL}")
    logger.info("=" * 60)

    try:
        app.state.postgrest = build_postgrest_client(settings)
    except ValueError as e:
        logger.error(f"Database client not configured: {e}")
        app.state.postgrest = None

    if settings.SUPABASE_URL and settings.SUPABASE_ANON_KEY:
        app.state.auth_client = SupabaseAuthClient(
            url=settings.SUPABASE_URL, anon_key=settings.SUPABASE_ANON_KEY
        )
    else:
        logger.error("Auth client not configured: SUPABASE_URL and SUPABASE_ANON_KEY are required")


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event() -> None:
    """
    Execute cleanup tasks on application shutdown.
    """
    logger.info("Club Events API Shutting Down")

    if app.state.postgrest is not None:
        await app.state.postgrest.close()
    if app.state.auth_client is not None:
        await app.state.auth_client.close()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )
