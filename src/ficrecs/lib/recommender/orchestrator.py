"""Two-hop bookmark traversal.

Pipeline:
    user -> bookmarks -> random pivot -> pivot's bookmarkers
         -> their bookmarks (concurrently) -> aggregate
"""

import asyncio
import logging
import random
from collections.abc import Sequence

from ...models import Link, RecommendationResult, Work
from ..fetcher import DocumentFetcher, FetchFailure
from ..sets import flatten
from .aggregate import aggregate
from .bookmarks import load_bookmarks

logger = logging.getLogger(__name__)


def choose_pivot(
    seeds: Sequence[Work],
    rng: random.Random | None = None,
    pivot_index: int | None = None,
) -> Work:
    """Pick the seed bookmark that drives the co-bookmarker lookup.

    *pivot_index* selects an explicit seed (wrapped to the seed count);
    otherwise *rng* chooses one uniformly.
    """
    if not seeds:
        raise ValueError("No seed bookmarks to choose from")
    if pivot_index is not None:
        return seeds[pivot_index % len(seeds)]
    return (rng or random.Random()).choice(seeds)


async def find_co_bookmarkers(
    fetcher: DocumentFetcher,
    pivot: Work,
    user: Link,
) -> list[Link]:
    """Return the users other than *user* who bookmarked *pivot*."""
    try:
        users = await fetcher.fetch_bookmarkers(pivot.title.url)
    except FetchFailure as exc:
        logger.warning("Could not fetch bookmarkers of work %s: %s", pivot.id, exc.reason)
        return []
    return [u for u in dict.fromkeys(users) if u.text != user.text]


async def harvest(fetcher: DocumentFetcher, users: Sequence[Link]) -> list[Work]:
    """Load every user's bookmarks concurrently and concatenate them."""
    results = await asyncio.gather(
        *(load_bookmarks(fetcher, u) for u in users),
        return_exceptions=True,
    )
    collected: list[list[Work]] = []
    for u, result in zip(users, results):
        if isinstance(result, BaseException):
            logger.error(
                "Bookmark harvest for %s failed", u.text, exc_info=result
            )
            continue
        collected.append(result)
    return flatten(collected)


async def recommend(
    fetcher: DocumentFetcher,
    user: Link,
    *,
    rng: random.Random | None = None,
    pivot_index: int | None = None,
) -> RecommendationResult:
    """Recommend works for *user* from the bookmarks of people who share one of theirs."""
    # 1. Seed: only works someone else has bookmarked can lead anywhere
    bookmarks = await load_bookmarks(fetcher, user)
    seeds = [b for b in bookmarks if b.stat("bookmarks") > 0]

    if not seeds:
        logger.info("No qualifying bookmarks for user %s", user.text)
        return RecommendationResult(pivot=None, works=[])

    # 2. Sample
    pivot = choose_pivot(seeds, rng=rng, pivot_index=pivot_index)

    # 3. Expand
    others = await find_co_bookmarkers(fetcher, pivot, user)
    if not others:
        logger.info("No other bookmarkers of work %s for user %s", pivot.id, user.text)
        return RecommendationResult(pivot=pivot, works=[])

    # 4. Harvest
    candidates = await harvest(fetcher, others)
    works = aggregate(candidates, seeds)

    logger.info(
        "Recommended %d works for %s from %d seeds via work %s and %d users",
        len(works),
        user.text,
        len(seeds),
        pivot.id,
        len(others),
    )
    return RecommendationResult(pivot=pivot, works=works)
