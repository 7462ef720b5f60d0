"""Unit tests for the feed fetcher."""

import logging
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from feed_ingest.errors import FetchError
from feed_ingest.services.fetcher import DEFAULT_TIMEOUT, USER_AGENT, fetch_url


# Mark all tests as async
pytestmark = pytest.mark.anyio


def make_client(get_result=None, get_error=None):
    """Build a mocked httpx.AsyncClient instance."""
    mock_instance = AsyncMock()
    if get_error is not None:
        mock_instance.get = AsyncMock(side_effect=get_error)
    else:
        mock_instance.get = AsyncMock(return_value=get_result)
    mock_instance.aclose = AsyncMock(return_value=None)
    return mock_instance


def make_response(content=b"<rss/>", status_error=None):
    mock_response = MagicMock()
    mock_response.status_code = 200
    mock_response.content = content
    mock_response.raise_for_status = MagicMock(side_effect=status_error)
    return mock_response


class TestFetchURL:
    """Tests for fetch_url."""

    async def test_returns_body_bytes(self):
        """Test that the response body is returned as bytes."""
        mock_instance = make_client(make_response(b"<rss>feed</rss>"))

        with patch("feed_ingest.services.fetcher.httpx.AsyncClient") as mock_client:
            mock_client.return_value = mock_instance

            data = await fetch_url("https://example.com/feed.xml")

        assert data == b"<rss>feed</rss>"
        mock_instance.get.assert_awaited_once_with("https://example.com/feed.xml")
        mock_instance.aclose.assert_awaited_once()

    async def test_uses_fixed_timeout_and_user_agent(self):
        """Test client construction options."""
        mock_instance = make_client(make_response())

        with patch("feed_ingest.services.fetcher.httpx.AsyncClient") as mock_client:
            mock_client.return_value = mock_instance

            await fetch_url("https://example.com/feed.xml")

        kwargs = mock_client.call_args.kwargs
        assert kwargs["timeout"] == DEFAULT_TIMEOUT == 10.0
        assert kwargs["follow_redirects"] is True
        assert kwargs["headers"]["User-Agent"] == USER_AGENT

    async def test_connection_error_wrapped(self):
        """Test that transport errors become FetchError naming the URL."""
        mock_instance = make_client(get_error=httpx.ConnectError("Connection refused"))

        with patch("feed_ingest.services.fetcher.httpx.AsyncClient") as mock_client:
            mock_client.return_value = mock_instance

            with pytest.raises(FetchError) as exc_info:
                await fetch_url("https://example.com/feed.xml")

        assert exc_info.value.url == "https://example.com/feed.xml"
        assert "https://example.com/feed.xml" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        mock_instance.aclose.assert_awaited_once()

    async def test_timeout_wrapped(self):
        """Test that timeouts become FetchError."""
        mock_instance = make_client(get_error=httpx.ReadTimeout("timed out"))

        with patch("feed_ingest.services.fetcher.httpx.AsyncClient") as mock_client:
            mock_client.return_value = mock_instance

            with pytest.raises(FetchError, match="timed out"):
                await fetch_url("https://example.com/feed.xml", timeout=2.0)

        mock_instance.aclose.assert_awaited_once()

    async def test_http_status_error_wrapped(self):
        """Test that non-2xx responses become FetchError."""
        error = httpx.HTTPStatusError(
            "Not Found",
            request=MagicMock(),
            response=MagicMock(status_code=404),
        )
        mock_instance = make_client(make_response(status_error=error))

        with patch("feed_ingest.services.fetcher.httpx.AsyncClient") as mock_client:
            mock_client.return_value = mock_instance

            with pytest.raises(FetchError, match="HTTP 404"):
                await fetch_url("https://example.com/missing.xml")

        mock_instance.aclose.assert_awaited_once()

    async def test_body_read_error_wrapped(self):
        """Test that errors while reading the body become FetchError."""
        mock_instance = make_client(get_error=httpx.ReadError("connection reset"))

        with patch("feed_ingest.services.fetcher.httpx.AsyncClient") as mock_client:
            mock_client.return_value = mock_instance

            with pytest.raises(FetchError, match="connection reset"):
                await fetch_url("https://example.com/feed.xml")

        mock_instance.aclose.assert_awaited_once()

    async def test_close_failure_is_logged_not_raised(self, caplog):
        """Test that an error while closing the client does not fail the fetch."""
        mock_instance = make_client(make_response(b"<rss/>"))
        mock_instance.aclose = AsyncMock(side_effect=RuntimeError("close failed"))

        with patch("feed_ingest.services.fetcher.httpx.AsyncClient") as mock_client:
            mock_client.return_value = mock_instance

            with caplog.at_level(logging.WARNING, logger="feed_ingest"):
                data = await fetch_url("https://example.com/feed.xml")

        assert data == b"<rss/>"
        assert "close failed" in caplog.text

    async def test_real_client_with_mock_transport(self):
        """Test the fetch path end to end against an httpx mock transport."""
        def handler(request):
            assert request.headers["User-Agent"] == USER_AGENT
            return httpx.Response(200, content=b"<rss>ok</rss>")

        real_client = httpx.AsyncClient

        def client_factory(**kwargs):
            return real_client(transport=httpx.MockTransport(handler), **kwargs)

        with patch("feed_ingest.services.fetcher.httpx.AsyncClient", side_effect=client_factory):
            data = await fetch_url("https://example.com/feed.xml")

        assert data == b"<rss>ok</rss>"

    async def test_real_client_status_error(self):
        """Test that a real 500 response is reported as FetchError."""
        real_client = httpx.AsyncClient

        def client_factory(**kwargs):
            transport = httpx.MockTransport(lambda request: httpx.Response(500))
            return real_client(transport=transport, **kwargs)

        with patch("feed_ingest.services.fetcher.httpx.AsyncClient", side_effect=client_factory):
            with pytest.raises(FetchError, match="HTTP 500"):
                await fetch_url("https://example.com/feed.xml")
