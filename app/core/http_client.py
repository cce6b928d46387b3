"""
HTTP Client Module

Provides a globally shared httpx.AsyncClient with:
- Connection pooling for efficient reuse
- Retries with exponential backoff for connection failures
- Configurable timeouts

Used for outbound calls to the Telegram Bot API.
"""

import asyncio
import logging
from typing import Optional, Any

import httpx


logger = logging.getLogger(__name__)


# ============== Configuration ==============

# Connection pool limits
MAX_CONNECTIONS = 50
MAX_KEEPALIVE_CONNECTIONS = 10
KEEPALIVE_EXPIRY = 30  # seconds

# Timeout configuration
DEFAULT_TIMEOUT = 15.0  # seconds

# Retry configuration
MAX_RETRIES = 2
RETRY_BACKOFF_BASE = 0.5  # seconds


# ============== Global Client Instance ==============

_http_client: Optional[httpx.AsyncClient] = None


def get_http_client() -> httpx.AsyncClient:
    """
    Get or create the global async HTTP client.

    The client should be reused across all requests.

    Returns:
        httpx.AsyncClient: Shared client instance.
    """
    global _http_client
    if _http_client is None:
        limits = httpx.Limits(
            max_connections=MAX_CONNECTIONS,
            max_keepalive_connections=MAX_KEEPALIVE_CONNECTIONS,
            keepalive_expiry=KEEPALIVE_EXPIRY,
        )
        timeout = httpx.Timeout(DEFAULT_TIMEOUT)

        _http_client = httpx.AsyncClient(
            limits=limits,
            timeout=timeout,
            http2=True,
        )
    return _http_client


async def close_http_client() -> None:
    """
    Close the global HTTP client.

    Should be called during application shutdown.
    """
    global _http_client
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None


# ============== Request Helpers with Retry ==============

async def request_with_retry(
    method: str,
    url: str,
    max_retries: int = MAX_RETRIES,
    **kwargs: Any,
) -> httpx.Response:
    """
    Make an HTTP request, retrying only when the connection could not be
    established.

    Once a request may have reached the server it is never repeated, so
    non-idempotent calls (sending a photo) are not duplicated. HTTP error
    statuses are returned to the caller as-is.

    Args:
        method: HTTP method (GET, POST, etc.)
        url: Request URL
        max_retries: Maximum number of retry attempts
        **kwargs: Additional arguments passed to httpx request

    Returns:
        httpx.Response: The response object

    Raises:
        httpx.HTTPError: If the request fails or all retries fail
    """
    client = get_http_client()

    for attempt in range(max_retries + 1):
        try:
            return await client.request(method, url, **kwargs)
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            if attempt >= max_retries:
                raise
            wait_time = RETRY_BACKOFF_BASE * (2 ** attempt)
            logger.warning(f"Connection to {httpx.URL(url).host} failed, retrying in {wait_time}s: {e}")
            await asyncio.sleep(wait_time)

    raise httpx.HTTPError(f"Request to {url} failed after {max_retries} retries")


async def post_with_retry(url: str, **kwargs: Any) -> httpx.Response:
    """Convenience wrapper for POST requests with retry."""
    return await request_with_retry("POST", url, **kwargs)
