"""Archive of Our Own fetcher.

Issues GET requests with a shared ``httpx.AsyncClient`` and parses the
returned pages with :mod:`.parsing`.  Transient transport errors are retried
with exponential jitter; anything still failing becomes a
:class:`FetchFailure` for that locator.
"""

import logging

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from ... import config
from ...models import Link, WorkListing
from .base import DocumentFetcher, FetchFailure
from .parsing import parse_bookmarkers, parse_work_listing

logger = logging.getLogger(__name__)

TransientHttpError = (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError)

MAX_ATTEMPTS = 3


def default_timeout() -> httpx.Timeout:
    return httpx.Timeout(config.get_fetch_timeout())


def default_limits() -> httpx.Limits:
    max_connections = config.get_fetch_max_connections()
    return httpx.Limits(
        max_connections=max_connections,
        max_keepalive_connections=max_connections,
    )


def create_client() -> httpx.AsyncClient:
    """Create the shared client.  Keep one per process, not one per request."""
    return httpx.AsyncClient(
        timeout=default_timeout(),
        limits=default_limits(),
        follow_redirects=True,
        headers={"User-Agent": "ficrecs/0.1"},
    )


def transient_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(MAX_ATTEMPTS),
        wait=wait_exponential_jitter(initial=0.5, max=5.0),
        retry=retry_if_exception_type(TransientHttpError),
    )


class ArchiveFetcher(DocumentFetcher):
    """Fetches bookmark listings and bookmarker lists from the archive."""

    def __init__(self, client: httpx.AsyncClient | None = None, base_url: str | None = None):
        self._client = client or create_client()
        self._owns_client = client is None
        self.base_url = (base_url or config.get_archive_base_url()).rstrip("/")

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @transient_retry()
    async def _get(self, url: str) -> httpx.Response:
        logger.debug("GET %s", url)
        response = await self._client.get(url)
        response.raise_for_status()
        return response

    async def _get_text(self, url: str) -> str:
        try:
            response = await self._get(url)
        except httpx.HTTPStatusError as exc:
            raise FetchFailure(url, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise FetchFailure(url, f"{type(exc).__name__}: {exc}") from exc
        return response.text

    async def fetch_work_listing(self, locator: str) -> WorkListing:
        html = await self._get_text(locator)
        try:
            return parse_work_listing(html, self.base_url)
        except Exception as exc:
            raise FetchFailure(locator, f"unparseable listing: {exc}") from exc

    async def fetch_bookmarkers(self, work_locator: str) -> list[Link]:
        url = work_locator.rstrip("/") + "/bookmarks"
        html = await self._get_text(url)
        try:
            return parse_bookmarkers(html, self.base_url)
        except Exception as exc:
            raise FetchFailure(url, f"unparseable bookmarks page: {exc}") from exc
