"""
FastAPI Authentication Dependencies

Provides reusable dependencies for authenticating requests against Supabase Auth
and for gating admin routes on the caller's club role.
"""

import logging
from typing import Any, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from integrations.postgrest.client import PostgrestClient
from integrations.postgrest.dependencies import get_postgrest_client
from integrations.supabase_auth.client import SupabaseAuthClient
from integrations.supabase_auth.exceptions import (
    AuthConnectionError,
    AuthTimeoutError,
    InvalidTokenError,
    SupabaseAuthError,
    TokenExpiredError,
    format_error_response,
)
from services.authorization import check_admin_or_executive

# Configure structured logging
logger = logging.getLogger(__name__)

# Missing credentials are reported by get_current_user itself
security = HTTPBearer(auto_error=False)


def get_auth_client(request: Request) -> SupabaseAuthClient:
    """
    Get the Supabase Auth client owned by the running application.

    Raises:
        HTTPException: 503 if the client was not configured at startup
    """
    client = getattr(request.app.state, "auth_client", None)
    if client is None:
        logger.error("Auth client requested but not configured")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service unavailable",
        )
    return client


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_client: SupabaseAuthClient = Depends(get_auth_client),
) -> dict[str, Any]:
    """
    Get current authenticated user from Supabase Auth

    Args:
        request: FastAPI request object
        credentials: HTTP authorization credentials (Bearer token)
        auth_client: Supabase Auth client

    Returns:
        User dictionary (id, email, user_metadata, ...)

    Raises:
        HTTPException: 401/503/504 with consistent error format

    Example:
        >>> @app.get("/protected")
        >>> async def protected_route(user: dict = Depends(get_current_user)):
        ...     return {"user_id": user["id"]}
    """
    if credentials is None or not credentials.credentials:
        logger.warning(
            "Missing bearer token",
            extra={"event": "auth_failed", "reason": "missing_token", "path": request.url.path},
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        logger.info(
            "Attempting authentication with session token",
            extra={"event": "auth_attempt", "path": request.url.path},
        )
        return await auth_client.get_user(credentials.credentials)

    except (InvalidTokenError, TokenExpiredError) as e:
        logger.warning(
            f"Token authentication failed: {e.error_code}",
            extra={"event": "auth_failed", "error_code": e.error_code},
        )
        raise HTTPException(
            status_code=e.status_code,
            detail=format_error_response(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    except (AuthConnectionError, AuthTimeoutError) as e:
        logger.error(
            f"Supabase Auth error: {e.error_code}",
            extra={"event": "auth_error", "error_code": e.error_code, "status_code": e.status_code},
        )
        raise HTTPException(status_code=e.status_code, detail=format_error_response(e))

    except SupabaseAuthError as e:
        logger.error(
            f"Authentication error: {e.error_code}",
            extra={"event": "auth_error", "error_code": e.error_code, "status_code": e.status_code},
        )
        raise HTTPException(status_code=e.status_code, detail=format_error_response(e))


async def get_current_user_optional(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_client: SupabaseAuthClient = Depends(get_auth_client),
) -> Optional[dict[str, Any]]:
    """
    Optional authentication dependency

    Returns user information if authenticated, None otherwise.
    """
    if credentials is None:
        return None
    try:
        return await get_current_user(request, credentials, auth_client)
    except HTTPException:
        logger.debug(
            "Optional authentication failed, returning None",
            extra={"event": "optional_auth_failed"},
        )
        return None


async def require_admin_or_executive(
    current_user: dict[str, Any] = Depends(get_current_user),
    postgrest: PostgrestClient = Depends(get_postgrest_client),
) -> dict[str, Any]:
    """
    Allow only club admins and executives.

    Returns:
        {"user": <auth user>, "profile": <user_profiles row>}

    Raises:
        HTTPException: 401 if unauthenticated, 403 for any other role
    """
    profile = await check_admin_or_executive(postgrest, current_user["id"])
    return {"user": current_user, "profile": profile}
