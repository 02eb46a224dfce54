"""Tag-overlap similarity between works.

Tags are compared by display text only; the category a tag is filed under
does not matter, so "Angst" under relationships and under additional tags is
the same tag.
"""

from collections.abc import Sequence

from ..models import Work
from .sets import flatten, intersection


def tag_texts(work: Work) -> set[str]:
    """Return the distinct tag texts across every category of *work*."""
    return {tag.text for tag in flatten(work.tags.values())}


def similarity(a: Work, b: Work) -> int:
    """Return the number of tags *a* and *b* have in common."""
    return len(intersection(tag_texts(a), tag_texts(b)))


def mean_similarity(candidate: Work, seeds: Sequence[Work]) -> float:
    """Average :func:`similarity` of *candidate* against every work in *seeds*.

    Returns 0.0 for an empty seed set.
    """
    if not seeds:
        return 0.0
    texts = tag_texts(candidate)
    total = sum(len(intersection(texts, tag_texts(seed))) for seed in seeds)
    return total / len(seeds)
