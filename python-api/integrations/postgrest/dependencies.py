"""
FastAPI Dependencies for the PostgREST Client

The client is created once by the application's startup hook and stored on
``app.state``; this dependency hands that instance to route handlers.
"""

import logging

from config import Settings
from fastapi import HTTPException, Request, status

from .client import PostgrestClient

logger = logging.getLogger(__name__)


def build_postgrest_client(settings: Settings) -> PostgrestClient:
    """
    Construct the process-wide PostgREST client from application settings.

    Raises:
        ValueError: If SUPABASE_URL or SUPABASE_SERVICE_KEY is not configured
    """
    return PostgrestClient(
        url=settings.SUPABASE_URL,
        api_key=settings.SUPABASE_SERVICE_KEY,
        timeout=settings.SUPABASE_TIMEOUT,
    )


def get_postgrest_client(request: Request) -> PostgrestClient:
    """
    Get the PostgREST client owned by the running application.

    Raises:
        HTTPException: 503 if the client was not configured at startup

    Example:
        >>> @router.get("/data")
        >>> async def get_data(db: PostgrestClient = Depends(get_postgrest_client)):
        ...     return await db.tables.select("events")
    """
    client = getattr(request.app.state, "postgrest", None)
    if client is None:
        logger.error("PostgREST client requested but not configured")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database service unavailable. Please contact support.",
        )
    return client
