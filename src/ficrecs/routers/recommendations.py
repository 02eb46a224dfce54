"""Recommendations router.

GET /recommendations/{username}
    Run one recommendation request for an archive user and return the top
    ranked works with an explanation for each.
"""

import logging
import random

from fastapi import APIRouter, HTTPException, Path, Query, Request
from pydantic import BaseModel, Field

from .. import config
from ..lib.recommender import recommend
from ..models import Link, Work

router = APIRouter(tags=["recommendations"])

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class Recommendation(BaseModel):
    """A ranked work and why it was recommended."""

    work: Work
    byline: str = Field(..., description="Author links as HTML, or \"Anonymous\"")
    words: int = Field(0, description="Word count of the work")
    reason: str


class RecommendationResponse(BaseModel):
    """Response body for a recommendation request."""

    pivot: Work | None = Field(
        None, description="The bookmark whose other bookmarkers were consulted"
    )
    total: int = Field(..., description="Number of ranked works before truncation")
    results: list[Recommendation]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def user_link(username: str) -> Link:
    return Link(text=username, url=f"{config.get_archive_base_url()}/users/{username}")


def byline(work: Work) -> str:
    """Render the authors of *work* as links, falling back to "Anonymous"."""
    return ", ".join(author.html() for author in work.authors) or "Anonymous"


def explain(work: Work) -> str:
    """Describe the two signals behind a recommendation."""
    count = len(work.bookmarkers)
    noun = "user" if count == 1 else "users"
    return (
        f"Recommended because {count} {noun} who bookmarked one of your bookmarks"
        f" also bookmarked this fic which has on average"
        f" {work.similarity_score or 0.0:.2f} tags similar to the rest of your bookmarks."
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/recommendations/{username}", response_model=RecommendationResponse)
async def recommendations_for_user(
    request: Request,
    username: str = Path(..., min_length=1),
    limit: int | None = Query(None, ge=1, le=100, description="Number of works to return"),
    seed: int | None = Query(None, description="Seed for the random pivot choice"),
    pivot_index: int | None = Query(None, ge=0, description="Explicit pivot bookmark index"),
) -> RecommendationResponse:
    fetcher = request.app.state.fetcher
    rng = random.Random(seed) if seed is not None else None

    try:
        result = await recommend(
            fetcher, user_link(username), rng=rng, pivot_index=pivot_index
        )
    except Exception as exc:
        logger.exception("Recommendation request for '%s' failed", username)
        raise HTTPException(
            status_code=502,
            detail=f"Recommendations for '{username}' failed",
        ) from exc

    shown = result.works[: limit or config.get_recommendation_limit()]
    return RecommendationResponse(
        pivot=result.pivot,
        total=len(result.works),
        results=[
            Recommendation(
                work=w,
                byline=byline(w),
                words=w.stat("words"),
                reason=explain(w),
            )
            for w in shown
        ],
    )
