"""Base abstraction for document fetchers.

A fetcher turns archive locators into parsed records.  The recommender only
depends on this interface, so tests substitute in-memory fakes and the API
layer plugs in :class:`~.archive.ArchiveFetcher`.
"""

from abc import ABC, abstractmethod

from ...models import Link, WorkListing


class FetchFailure(Exception):
    """Raised when a single locator could not be fetched or parsed."""

    def __init__(self, locator: str, reason: str):
        super().__init__(f"{locator}: {reason}")
        self.locator = locator
        self.reason = reason


class DocumentFetcher(ABC):
    """Abstract base class for archive fetchers.

    Both methods raise :class:`FetchFailure` when the locator cannot be
    retrieved; callers decide whether that is fatal.
    """

    @abstractmethod
    async def fetch_work_listing(self, locator: str) -> WorkListing:
        """Return the works and series shown on the listing page at *locator*."""
        ...

    @abstractmethod
    async def fetch_bookmarkers(self, work_locator: str) -> list[Link]:
        """Return the users who bookmarked the work at *work_locator*."""
        ...
