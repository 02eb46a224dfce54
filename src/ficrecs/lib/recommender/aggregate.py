"""Merge, score and rank harvested candidates."""

from collections.abc import Iterable, Sequence

from ...models import Work
from ..similarity import mean_similarity


def rank_score(work: Work) -> float:
    """Mean tag similarity weighted by the number of co-bookmarkers."""
    return (work.similarity_score or 0.0) * len(work.bookmarkers)


def aggregate(candidates: Iterable[Work], seed_bookmarks: Sequence[Work]) -> list[Work]:
    """Deduplicate *candidates* by id and rank them against *seed_bookmarks*.

    Works the user already bookmarked are dropped.  Repeated ids are merged
    into the first occurrence by unioning their bookmarkers.  The result is
    sorted by :func:`rank_score`, highest first; ties keep discovery order.
    Input works are not modified.
    """
    known = {seed.id for seed in seed_bookmarks}
    merged: dict[str, Work] = {}

    for candidate in candidates:
        if candidate.id in known:
            continue
        kept = merged.get(candidate.id)
        if kept is not None:
            kept.bookmarkers |= candidate.bookmarkers
            continue
        merged[candidate.id] = candidate.model_copy(
            update={
                "bookmarkers": set(candidate.bookmarkers),
                "similarity_score": mean_similarity(candidate, seed_bookmarks),
            }
        )

    return sorted(merged.values(), key=rank_score, reverse=True)
