"""Bookmark loading.

Fetches a user's bookmark listing, expands bookmarked series into their
works, and marks every work with the user it came from.
"""

import asyncio
import logging

from ...models import Link, Work
from ..fetcher import DocumentFetcher, FetchFailure
from ..sets import flatten

logger = logging.getLogger(__name__)


def bookmarks_locator(user: Link) -> str:
    return user.url.rstrip("/") + "/bookmarks"


async def _expand_listing(
    fetcher: DocumentFetcher,
    locator: str,
    visited: set[str],
) -> list[Work]:
    """Fetch *locator* and recursively flatten the series it links to.

    *visited* is shared by the whole expansion so a series that links back
    to itself, or to an ancestor, is fetched at most once.
    """
    visited.add(locator)
    listing = await fetcher.fetch_work_listing(locator)

    pending = [s for s in dict.fromkeys(listing.series_locators) if s not in visited]
    visited.update(pending)
    nested = await asyncio.gather(
        *(_expand_series(fetcher, series, visited) for series in pending)
    )
    return listing.works + flatten(nested)


async def _expand_series(
    fetcher: DocumentFetcher,
    locator: str,
    visited: set[str],
) -> list[Work]:
    try:
        return await _expand_listing(fetcher, locator, visited)
    except FetchFailure as exc:
        logger.warning("Skipping series %s: %s", locator, exc.reason)
        return []


async def load_bookmarks(fetcher: DocumentFetcher, user: Link) -> list[Work]:
    """Return the works *user* has bookmarked, each with ``bookmarkers == {user}``.

    A failure to fetch the user's listing is logged and yields an empty list.
    """
    try:
        works = await _expand_listing(fetcher, bookmarks_locator(user), set())
    except FetchFailure as exc:
        logger.warning("Could not load bookmarks of %s: %s", user.text, exc.reason)
        return []

    bookmarks = [work.model_copy(update={"bookmarkers": {user}}) for work in works]
    logger.debug("Loaded %d bookmarks for %s", len(bookmarks), user.text)
    return bookmarks
