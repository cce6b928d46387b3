"""
HTTP Client Unit Tests

Tests for the connection pooling and retry logic.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import httpx


class TestHttpClient:
    """Tests for the HTTP client module."""

    def test_get_http_client_returns_singleton(self):
        """Verify that get_http_client returns the same instance."""
        with patch("app.core.http_client._http_client", None):
            from app.core.http_client import get_http_client

            client1 = get_http_client()
            client2 = get_http_client()

            assert client1 is client2

    def test_http_client_has_connection_limits(self):
        """Verify connection pool limits are configured."""
        with patch("app.core.http_client._http_client", None):
            from app.core.http_client import get_http_client

            client = get_http_client()

            assert client._transport._pool._max_connections == 50
            assert client._transport._pool._max_keepalive_connections == 10


class TestRequestWithRetry:
    """Tests for retry logic."""

    @pytest.mark.asyncio
    async def test_retry_on_connect_error(self):
        """Verify a refused connection is retried."""
        mock_response = MagicMock()
        mock_response.status_code = 200

        mock_client = AsyncMock()
        mock_client.request = AsyncMock(
            side_effect=[httpx.ConnectError("refused"), mock_response]
        )

        with patch("app.core.http_client.get_http_client", return_value=mock_client):
            with patch("app.core.http_client.RETRY_BACKOFF_BASE", 0.01):  # Fast retry
                from app.core.http_client import request_with_retry

                response = await request_with_retry("POST", "http://test.com")

                assert response.status_code == 200
                assert mock_client.request.call_count == 2

    @pytest.mark.asyncio
    async def test_server_error_is_not_retried(self):
        """Verify a 5xx response is returned without repeating the request."""
        mock_response = MagicMock()
        mock_response.status_code = 502

        mock_client = AsyncMock()
        mock_client.request = AsyncMock(return_value=mock_response)

        with patch("app.core.http_client.get_http_client", return_value=mock_client):
            from app.core.http_client import request_with_retry

            response = await request_with_retry("POST", "http://test.com")

            assert response.status_code == 502
            assert mock_client.request.call_count == 1

    @pytest.mark.asyncio
    async def test_read_timeout_is_not_retried(self):
        """Verify a request that may have reached the server is not repeated."""
        mock_client = AsyncMock()
        mock_client.request = AsyncMock(side_effect=httpx.ReadTimeout("slow"))

        with patch("app.core.http_client.get_http_client", return_value=mock_client):
            from app.core.http_client import request_with_retry

            with pytest.raises(httpx.ReadTimeout):
                await request_with_retry("POST", "http://test.com")

            assert mock_client.request.call_count == 1

    @pytest.mark.asyncio
    async def test_raises_after_max_retries(self):
        """Verify exception after all retries exhausted."""
        mock_client = AsyncMock()
        mock_client.request = AsyncMock(side_effect=httpx.ConnectError("Connection failed"))

        with patch("app.core.http_client.get_http_client", return_value=mock_client):
            with patch("app.core.http_client.RETRY_BACKOFF_BASE", 0.01):
                from app.core.http_client import request_with_retry

                with pytest.raises(httpx.ConnectError):
                    await request_with_retry("POST", "http://test.com", max_retries=2)

                assert mock_client.request.call_count == 3  # Initial + 2 retries

    @pytest.mark.asyncio
    async def test_post_with_retry_uses_post(self):
        with patch("app.core.http_client.request_with_retry", AsyncMock()) as request:
            from app.core.http_client import post_with_retry

            await post_with_retry("http://test.com", data={"a": "b"})

            request.assert_awaited_once_with("POST", "http://test.com", data={"a": "b"})
