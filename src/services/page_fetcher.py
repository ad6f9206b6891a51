"""Best-effort fetch of a public profile page.

Instagram frequently blocks or login-walls server-side requests, so the
fetcher never raises: non-2xx responses are returned as-is and transport
failures come back as a FetchResult with ``ok=False`` and status 0.
"""

import asyncio
import time
from typing import Protocol

import httpx
import logfire

from src.config import get_settings
from src.constants import DEFAULT_USER_AGENT, MAX_PAGE_BYTES
from src.models.meta_models import FetchResult

# Content types that can carry HTML meta tags
_TEXT_CONTENT_TYPES = ("text/", "application/xhtml+xml", "application/xml")


class PageFetcher(Protocol):
    """Protocol for fetching page content."""

    async def fetch(self, url: str) -> FetchResult:
        """Fetch HTML content from URL.

        Args:
            url: The URL to fetch

        Returns:
            FetchResult; failures are reported in the result, not raised
        """
        ...


class HttpxPageFetcher:
    """Fetch pages using httpx with browser-like headers and a hard timeout.

    The timeout bounds the whole fetch (connect, redirects and body), not each
    socket operation, and the body is read up to ``max_bytes``.
    """

    def __init__(
        self,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
        max_bytes: int = MAX_PAGE_BYTES,
    ):
        """Initialize the page fetcher.

        Args:
            timeout: Total fetch deadline in seconds (defaults to settings.scraper_timeout_seconds)
            headers: Optional custom headers (defaults to browser-like headers)
            max_bytes: Body bytes kept; the rest of the page is not downloaded
        """
        settings = get_settings()
        self._timeout = timeout if timeout is not None else settings.scraper_timeout_seconds
        self._headers = headers or default_headers(settings.scraper_accept_language)
        self._max_bytes = max_bytes

    async def _read_capped(self, response: httpx.Response) -> tuple[bytes, bool]:
        chunks: list[bytes] = []
        size = 0
        async for chunk in response.aiter_bytes():
            chunks.append(chunk)
            size += len(chunk)
            if size >= self._max_bytes:
                break
        body = b"".join(chunks)
        return body[: self._max_bytes], size > self._max_bytes

    async def fetch(self, url: str) -> FetchResult:
        """Fetch a page once, without retries.

        Args:
            url: The URL to fetch

        Returns:
            FetchResult with body and status, or a failure result
        """
        start_time = time.time()
        try:
            async with asyncio.timeout(self._timeout):
                async with httpx.AsyncClient(
                    timeout=self._timeout,
                    follow_redirects=True,
                    headers=self._headers,
                ) as client:
                    async with client.stream("GET", url) as response:
                        content_type = response.headers.get("content-type", "").lower()
                        if content_type and not content_type.startswith(_TEXT_CONTENT_TYPES):
                            logfire.warn(
                                "Profile page returned non-text content",
                                url=url,
                                status_code=response.status_code,
                                content_type=content_type,
                            )
                            return FetchResult.failure(url, f"non-text response: {content_type}")
                        body, truncated = await self._read_capped(response)
        except (TimeoutError, httpx.TimeoutException) as e:
            logfire.warn(
                "Profile page fetch timed out",
                url=url,
                timeout_seconds=self._timeout,
                error=str(e),
            )
            return FetchResult.failure(url, f"timeout after {self._timeout}s")
        except httpx.HTTPError as e:
            logfire.warn(
                "Profile page fetch failed",
                url=url,
                error=str(e),
                error_type=type(e).__name__,
            )
            return FetchResult.failure(url, f"{type(e).__name__}: {e}")

        elapsed = time.time() - start_time
        # httpx falls back to utf-8 when the charset is missing or unknown
        html = body.decode(response.encoding or "utf-8", errors="replace")

        logfire.info(
            "Profile page fetched (httpx)",
            url=url,
            final_url=str(response.url),
            status_code=response.status_code,
            content_length=len(html),
            truncated=truncated,
            response_time_ms=elapsed * 1000,
        )
        return FetchResult(url=url, ok=True, status=response.status_code, html=html)


def default_headers(accept_language: str) -> dict[str, str]:
    """Headers that mimic a desktop browser."""
    return {
        "User-Agent": DEFAULT_USER_AGENT,
        "Accept": (
            "text/html,application/xhtml+xml,application/xml;q=0.9,"
            "image/avif,image/webp,*/*;q=0.8"
        ),
        "Accept-Language": accept_language,
    }


def get_page_fetcher() -> PageFetcher:
    """Factory function for dependency injection."""
    return HttpxPageFetcher()
