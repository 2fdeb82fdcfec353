"""
Authorization Service

Provides role-based access control for club administration.
Queries the user_profiles table to read the caller's club role.
"""

import logging
from typing import Any, Optional

from fastapi import HTTPException, status
from integrations.postgrest.client import PostgrestClient
from integrations.postgrest.exceptions import PostgrestError, PostgrestTimeoutError
from integrations.postgrest.filters import eq
from services.errors import AuthorizationError

# Configure logger
logger = logging.getLogger(__name__)

# Roles allowed to manage events, competitions and registrations
ADMIN_ROLES = ("admin", "executive")


async def get_user_profile(
    postgrest_client: PostgrestClient, user_id: str
) -> Optional[dict[str, Any]]:
    """
    Load the club profile of an authenticated user.

    Returns:
        The user_profiles row, or None if the user has no profile
    """
    rows = await postgrest_client.tables.select(
        "user_profiles", filters={"id": eq(user_id)}, limit=1
    )
    return rows[0] if rows else None


def is_admin_or_executive(profile: Optional[dict[str, Any]]) -> bool:
    return bool(profile) and profile.get("role") in ADMIN_ROLES


def require_admin_role(profile: Optional[dict[str, Any]]) -> dict[str, Any]:
    """
    Return ``profile`` if it grants admin access.

    Raises:
        AuthorizationError: For a missing profile or any other role
    """
    if not is_admin_or_executive(profile):
        raise AuthorizationError("Insufficient permissions")
    return profile


async def check_admin_or_executive(
    postgrest_client: PostgrestClient,
    user_id: str,
) -> dict[str, Any]:
    """
    Check that a user is a club admin or executive.

    Args:
        postgrest_client: PostgREST client instance
        user_id: Authenticated user ID

    Returns:
        The user's profile row

    Raises:
        HTTPException: 403 if the user has no profile or a different role
        HTTPException: 500 if database error occurs
        HTTPException: 504 if request times out

    Example:
        >>> profile = await check_admin_or_executive(client, "user-123")
        >>> profile["role"]
        'admin'
    """
    try:
        profile = await get_user_profile(postgrest_client, user_id)

    except PostgrestTimeoutError as e:
        logger.error(f"Timeout checking authorization for user {user_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail="Authorization check timed out. Please try again.",
        )

    except PostgrestError as e:
        logger.error(f"Database error checking authorization for user {user_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to verify permissions. Please contact support.",
        )

    try:
        require_admin_role(profile)
    except AuthorizationError as e:
        logger.warning(
            f"Authorization failed: User {user_id} has role "
            f"'{profile.get('role') if profile else None}', requires one of {ADMIN_ROLES}"
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)

    logger.info(f"Authorization successful: User {user_id} has role '{profile['role']}'")
    return profile
