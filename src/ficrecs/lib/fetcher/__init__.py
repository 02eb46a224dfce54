"""Document fetchers for archive pages.

Provides the fetcher interface the recommender depends on and the concrete
archive implementation used by the API.
"""

from .archive import ArchiveFetcher, create_client
from .base import DocumentFetcher, FetchFailure
from .parsing import parse_bookmarkers, parse_work, parse_work_listing, slugify

__all__ = [
    "ArchiveFetcher",
    "DocumentFetcher",
    "FetchFailure",
    "create_client",
    "parse_bookmarkers",
    "parse_work",
    "parse_work_listing",
    "slugify",
]
