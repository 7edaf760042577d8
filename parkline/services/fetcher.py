from __future__ import annotations

import logging

import httpx

"""Fetch the published sheet CSV and the floor-plan SVG overlays.

Single attempt, fixed timeout, no retries: the repository falls back to the
sample set on any FetchError.
"""

__all__ = [
    "FetchError",
    "DEFAULT_TIMEOUT_SECONDS",
    "CSV_HEADERS",
    "fetch_sheet_csv",
    "fetch_overlay_svg",
]

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0

CSV_HEADERS = {
    "Accept": "text/csv,text/plain,*/*",
    "Cache-Control": "no-cache",
}
SVG_HEADERS = {
    "Accept": "image/svg+xml,text/xml,*/*",
}

# Google serves an HTML login / error page when a sheet is not published
_HTML_MARKERS = ("<!doctype html>", "<html>")


class FetchError(Exception):
    """Network failure, timeout, non-2xx status or unusable payload."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{reason} ({url})")
        self.url = url
        self.reason = reason


async def _get_text(
    url: str, headers: dict[str, str], timeout: float, client: httpx.AsyncClient | None
) -> str:
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout, headers=headers) as c:
                r = await c.get(url)
        else:
            r = await client.get(url, headers=headers, timeout=timeout)
        r.raise_for_status()
    except httpx.TimeoutException as e:
        raise FetchError(url, f"timeout after {timeout:g}s") from e
    except httpx.HTTPStatusError as e:
        raise FetchError(url, f"HTTP {e.response.status_code}") from e
    except httpx.RequestError as e:
        raise FetchError(url, f"network error: {e}") from e
    return r.text


async def fetch_sheet_csv(
    url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS, client: httpx.AsyncClient | None = None
) -> str:
    """GET the published CSV export and return its text.

    Raises FetchError for transport errors, timeouts, non-2xx responses, an
    empty body or an HTML page instead of CSV. ``client`` lets callers share
    a connection pool (or a mock transport in tests).
    """
    text = await _get_text(url, CSV_HEADERS, timeout, client)
    if not text.strip():
        raise FetchError(url, "empty response body")
    head = text[:1024].lower()
    if any(marker in head for marker in _HTML_MARKERS):
        raise FetchError(url, "received HTML instead of CSV (is the sheet published?)")
    logger.info("fetched sheet CSV: %d bytes", len(text))
    return text


async def fetch_overlay_svg(
    url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS, client: httpx.AsyncClient | None = None
) -> str:
    text = await _get_text(url, SVG_HEADERS, timeout, client)
    if "<svg" not in text:
        raise FetchError(url, "response is not an SVG document")
    logger.debug("fetched overlay SVG: %d bytes", len(text))
    return text
