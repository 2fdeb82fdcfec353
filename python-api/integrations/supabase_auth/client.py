"""
Supabase Authentication Client

Verifies user session tokens against Supabase Auth (GoTrue) with retry logic
and structured logging.
"""

import logging
import os
from typing import Any, Optional

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .exceptions import (
    AuthConnectionError,
    AuthTimeoutError,
    InvalidTokenError,
    TokenExpiredError,
)

logger = logging.getLogger(__name__)


class SupabaseAuthClient:
    """
    Client for Supabase Auth

    Resolves a session token to the user it belongs to by calling
    ``GET /auth/v1/user``.

    Features:
    - Automatic retry with exponential backoff (3 attempts)
    - Structured logging for all auth events
    - Custom exceptions for different failure scenarios
    """

    def __init__(
        self,
        url: Optional[str] = None,
        anon_key: Optional[str] = None,
        timeout: float = 10.0,
    ):
        """
        Initialize Supabase authentication client

        Args:
            url: Supabase project URL (or set SUPABASE_URL env var)
            anon_key: Project anon key (or set SUPABASE_ANON_KEY env var)
            timeout: Request timeout in seconds
        """
        self.url = (url or os.getenv("SUPABASE_URL") or "").rstrip("/")
        self.anon_key = anon_key or os.getenv("SUPABASE_ANON_KEY") or ""
        self.client = httpx.AsyncClient(
            base_url=f"{self.url}/auth/v1",
            timeout=timeout,
            headers={"apikey": self.anon_key},
        )

    async def get_user(self, token: str) -> dict[str, Any]:
        """
        Verify a session token and get the user it belongs to

        Args:
            token: Supabase access token (JWT)

        Returns:
            User object with keys such as id, email, user_metadata

        Raises:
            InvalidTokenError: If token is invalid or malformed
            TokenExpiredError: If token has expired
            AuthConnectionError: If connection fails after retries
            AuthTimeoutError: If request times out after retries
        """
        try:
            return await self._get_user_with_retry(token)
        except httpx.ConnectError as e:
            logger.error(
                "Connection error during token verification",
                extra={
                    "event": "token_verification_error",
                    "error_type": "connection_error",
                    "error": str(e),
                },
            )
            raise AuthConnectionError() from e
        except httpx.TimeoutException as e:
            logger.error(
                "Timeout during token verification",
                extra={
                    "event": "token_verification_error",
                    "error_type": "timeout",
                    "error": str(e),
                },
            )
            raise AuthTimeoutError() from e

    @retry(
        retry=retry_if_exception_type((httpx.ConnectError, httpx.TimeoutException)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=4),  # 1s, 2s, 4s
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _get_user_with_retry(self, token: str) -> dict[str, Any]:
        """Internal method with retry logic for token verification"""
        response = await self.client.get("/user", headers={"Authorization": f"Bearer {token}"})

        if response.status_code == 200:
            user = response.json()
            logger.info(
                "Token verification successful",
                extra={"event": "token_verification_success", "user_id": user.get("id")},
            )
            return user

        if response.status_code in (401, 403):
            try:
                body = response.json()
            except ValueError:
                body = {}
            error_detail = str(body.get("msg") or body.get("message") or "Unauthorized")

            if "expired" in error_detail.lower():
                logger.warning(
                    "Token expired",
                    extra={"event": "token_verification_failed", "reason": "expired"},
                )
                raise TokenExpiredError()

            logger.warning(
                "Invalid token",
                extra={"event": "token_verification_failed", "reason": "invalid"},
            )
            raise InvalidTokenError()

        logger.warning(
            "Token verification failed with unexpected status",
            extra={
                "event": "token_verification_failed",
                "status_code": response.status_code,
                "detail": response.text,
            },
        )
        raise InvalidTokenError(f"Authentication failed with status {response.status_code}")

    async def close(self):
        """Close the HTTP client connection"""
        await self.client.aclose()
