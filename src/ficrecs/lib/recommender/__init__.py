"""Bookmark-based recommendation engine.

Loads a user's bookmarks, follows one of them to the other people who
bookmarked it, and ranks what those people bookmarked by tag overlap and
co-bookmarker count.
"""

from .aggregate import aggregate, rank_score
from .bookmarks import load_bookmarks
from .orchestrator import choose_pivot, find_co_bookmarkers, harvest, recommend

__all__ = [
    "aggregate",
    "choose_pivot",
    "find_co_bookmarkers",
    "harvest",
    "load_bookmarks",
    "rank_score",
    "recommend",
]
