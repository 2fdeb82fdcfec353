"""
PostgREST Client Wrapper

Provides HTTP client for the Supabase REST endpoint with authentication, retry logic,
and error handling.
"""

import os
from typing import Any, Optional

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .exceptions import (
    PostgrestAuthError,
    PostgrestConflictError,
    PostgrestError,
    PostgrestNotFound,
    PostgrestRateLimitError,
    PostgrestTimeoutError,
)

# PostgREST error code for "single row requested, zero rows returned"
NO_ROWS_CODE = "PGRST116"

READ_METHODS = frozenset({"GET", "HEAD"})


class PostgrestClient:
    """
    PostgREST API Client with retry logic and comprehensive error handling.

    Features:
    - apikey + Bearer authentication with the service role key
    - Exponential backoff retry on network errors (3 attempts); writes are
      retried only on connect-phase failures
    - Custom exceptions for different error types
    - Async context manager support
    - Configurable timeout (default 30s)

    Example:
        async with PostgrestClient(url="https://xyz.supabase.co", api_key="...") as client:
            rows = await client.tables.select("events", filters={"id": eq(event_id)})
    """

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
    ):
        """
        Initialize PostgREST client.

        Args:
            url: Supabase project URL (or set SUPABASE_URL env var)
            api_key: Service role key (or set SUPABASE_SERVICE_KEY env var)
            timeout: Request timeout in seconds (default: 30.0)

        Raises:
            ValueError: If url or api_key is not provided
        """
        self.url = (url or os.getenv("SUPABASE_URL") or "").rstrip("/")
        self.api_key = api_key or os.getenv("SUPABASE_SERVICE_KEY")
        self.timeout = timeout

        if not self.url:
            raise ValueError("url is required (set via parameter or SUPABASE_URL env var)")
        if not self.api_key:
            raise ValueError(
                "api_key is required (set via parameter or SUPABASE_SERVICE_KEY env var)"
            )

        self.base_url = f"{self.url}/rest/v1"

        self._http_client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            headers={
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )

        self._tables = None

    @property
    def tables(self):
        """Access table operations"""
        if self._tables is None:
            from .tables import TablesAPI

            self._tables = TablesAPI(self)
        return self._tables

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((httpx.NetworkError, httpx.TimeoutException)),
        reraise=True,
    )
    async def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        return await self._http_client.request(method, path, **kwargs)

    # writes retry only when the request never reached the server
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((httpx.ConnectError, httpx.ConnectTimeout)),
        reraise=True,
    )
    async def _send_write(self, method: str, path: str, **kwargs) -> httpx.Response:
        return await self._http_client.request(method, path, **kwargs)

    async def _request(
        self,
        method: str,
        path: str,
        **kwargs,
    ) -> Any:
        """
        Make HTTP request with retry logic and error handling.

        Args:
            method: HTTP method (GET, POST, PATCH, DELETE)
            path: Table path relative to /rest/v1 (e.g., "/participants")
            **kwargs: Additional arguments passed to httpx.request

        Returns:
            Decoded JSON body (usually a list of rows), or None for empty responses

        Raises:
            PostgrestAuthError: Authentication failed (401, 403)
            PostgrestNotFound: Table or single row not found (404, PGRST116)
            PostgrestConflictError: Constraint violation (409)
            PostgrestRateLimitError: Rate limit exceeded (429)
            PostgrestTimeoutError: Request timed out
            PostgrestError: Other API errors
        """
        try:
            send = self._send if method.upper() in READ_METHODS else self._send_write
            response = await send(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise PostgrestTimeoutError(f"Request timed out after {self.timeout}s") from e
        except httpx.NetworkError as e:
            raise PostgrestError(f"Network error: {str(e)}") from e

        body = _decode(response)

        if response.status_code < 400:
            return body

        error_data = body if isinstance(body, dict) else {}
        message = error_data.get("message") or f"API error: {response.status_code}"

        if response.status_code in (401, 403):
            raise PostgrestAuthError(message, status_code=response.status_code, response=error_data)
        if response.status_code == 404 or error_data.get("code") == NO_ROWS_CODE:
            raise PostgrestNotFound(message, status_code=response.status_code, response=error_data)
        if response.status_code == 409:
            raise PostgrestConflictError(message, status_code=409, response=error_data)
        if response.status_code == 429:
            raise PostgrestRateLimitError(
                "Rate limit exceeded - please retry later", status_code=429, response=error_data
            )
        raise PostgrestError(message, status_code=response.status_code, response=error_data)

    async def __aenter__(self):
        """Async context manager entry"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit - close HTTP client"""
        await self._http_client.aclose()

    async def close(self):
        """Close the HTTP client connection"""
        await self._http_client.aclose()


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return {"message": response.text}
