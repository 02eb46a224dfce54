"""Tests for the two-hop recommendation traversal."""

import asyncio
import random

import pytest

from ...models import Link, Work, WorkListing
from ..fetcher import DocumentFetcher, FetchFailure
from ..similarity import similarity
from .orchestrator import choose_pivot, find_co_bookmarkers, harvest, recommend

BASE = "https://archive.test"

ME = Link(text="me", url=f"{BASE}/users/me")
V = Link(text="vee", url=f"{BASE}/users/vee")
W = Link(text="dub", url=f"{BASE}/users/dub")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

def make_work(work_id: str, fandoms: list[str] = (), bookmarks: int = 0) -> Work:
    return Work(
        id=work_id,
        title=Link(text=f"Work {work_id}", url=f"{BASE}/works/{work_id}"),
        tags={"fandoms": [Link(text=f, url=f"{BASE}/tags/{f}/works") for f in fandoms]},
        stats={"bookmarks": bookmarks},
    )


class FakeFetcher(DocumentFetcher):
    """In-memory archive keyed by user name and work id.

    Users missing from *bookmarks* and works missing from *bookmarkers* raise
    ``FetchFailure`` like an unreachable page would.
    """

    def __init__(
        self,
        bookmarks: dict[str, list[Work]],
        bookmarkers: dict[str, list[Link]] | None = None,
        delays: dict[str, float] | None = None,
    ):
        self._bookmarks = bookmarks
        self._bookmarkers = bookmarkers or {}
        self._delays = delays or {}
        self.bookmarker_calls: list[str] = []

    async def fetch_work_listing(self, locator: str) -> WorkListing:
        name = locator.rstrip("/").split("/")[-2]
        await asyncio.sleep(self._delays.get(name, 0))
        if name not in self._bookmarks:
            raise FetchFailure(locator, "HTTP 404")
        return WorkListing(works=self._bookmarks[name])

    async def fetch_bookmarkers(self, work_locator: str) -> list[Link]:
        work_id = work_locator.rstrip("/").split("/")[-1]
        self.bookmarker_calls.append(work_id)
        if work_id not in self._bookmarkers:
            raise FetchFailure(work_locator, "HTTP 404")
        return self._bookmarkers[work_id]


@pytest.fixture
def scenario_fetcher():
    return FakeFetcher(
        bookmarks={
            "me": [make_work("A", ["X"], bookmarks=3)],
            "vee": [make_work("B", ["X"]), make_work("C", ["Z"])],
            "dub": [make_work("B", ["X"])],
        },
        bookmarkers={"A": [ME, V, W]},
    )


# ---------------------------------------------------------------------------
# Unit tests – helpers
# ---------------------------------------------------------------------------

class TestChoosePivot:
    def test_explicit_index(self):
        seeds = [make_work("1"), make_work("2"), make_work("3")]
        assert choose_pivot(seeds, pivot_index=1).id == "2"

    def test_index_wraps(self):
        seeds = [make_work("1"), make_work("2")]
        assert choose_pivot(seeds, pivot_index=5).id == "2"

    def test_seeded_rng_is_reproducible(self):
        seeds = [make_work(str(i)) for i in range(10)]
        first = choose_pivot(seeds, rng=random.Random(7))
        second = choose_pivot(seeds, rng=random.Random(7))
        assert first.id == second.id

    def test_raises_on_empty(self):
        with pytest.raises(ValueError, match="No seed bookmarks"):
            choose_pivot([])


class TestFindCoBookmarkers:
    @pytest.mark.asyncio
    async def test_excludes_requesting_user(self, scenario_fetcher):
        users = await find_co_bookmarkers(scenario_fetcher, make_work("A"), ME)
        assert users == [V, W]

    @pytest.mark.asyncio
    async def test_matches_user_by_display_name(self):
        other_url_me = Link(text="me", url=f"{BASE}/users/me/pseuds/alt")
        fetcher = FakeFetcher(bookmarks={}, bookmarkers={"A": [other_url_me, V]})
        users = await find_co_bookmarkers(fetcher, make_work("A"), ME)
        assert users == [V]

    @pytest.mark.asyncio
    async def test_failure_yields_no_users(self):
        fetcher = FakeFetcher(bookmarks={})
        assert await find_co_bookmarkers(fetcher, make_work("A"), ME) == []


class TestHarvest:
    @pytest.mark.asyncio
    async def test_concatenates_in_user_order(self, scenario_fetcher):
        works = await harvest(scenario_fetcher, [V, W])
        assert [(w.id, w.bookmarkers) for w in works] == [
            ("B", {V}),
            ("C", {V}),
            ("B", {W}),
        ]

    @pytest.mark.asyncio
    async def test_completion_order_does_not_matter(self):
        fetcher = FakeFetcher(
            bookmarks={"vee": [make_work("B")], "dub": [make_work("C")]},
            delays={"vee": 0.02},
        )
        works = await harvest(fetcher, [V, W])
        assert [w.id for w in works] == ["B", "C"]

    @pytest.mark.asyncio
    async def test_unreachable_user_contributes_nothing(self):
        ghost = Link(text="ghost", url=f"{BASE}/users/ghost")
        fetcher = FakeFetcher(bookmarks={"vee": [make_work("B")]})
        works = await harvest(fetcher, [ghost, V])
        assert [w.id for w in works] == ["B"]

    @pytest.mark.asyncio
    async def test_unexpected_error_contributes_nothing(self):
        class BrokenFetcher(FakeFetcher):
            async def fetch_work_listing(self, locator: str) -> WorkListing:
                if "/users/vee/" in locator:
                    raise RuntimeError("boom")
                return await super().fetch_work_listing(locator)

        fetcher = BrokenFetcher(bookmarks={"dub": [make_work("C")]})
        works = await harvest(fetcher, [V, W])
        assert [w.id for w in works] == ["C"]

    @pytest.mark.asyncio
    async def test_cancelled_load_contributes_nothing(self):
        class CancellingFetcher(FakeFetcher):
            async def fetch_work_listing(self, locator: str) -> WorkListing:
                if "/users/vee/" in locator:
                    raise asyncio.CancelledError()
                return await super().fetch_work_listing(locator)

        fetcher = CancellingFetcher(bookmarks={"dub": [make_work("C")]})
        works = await harvest(fetcher, [V, W])
        assert [w.id for w in works] == ["C"]


# ---------------------------------------------------------------------------
# Integration-style tests – full traversal
# ---------------------------------------------------------------------------

class TestRecommend:
    @pytest.mark.asyncio
    async def test_two_hop_scenario(self, scenario_fetcher):
        result = await recommend(scenario_fetcher, ME, pivot_index=0)

        assert result.pivot.id == "A"
        assert [w.id for w in result.works] == ["B", "C"]

        b, c = result.works
        a = make_work("A", ["X"], bookmarks=3)
        assert b.bookmarkers == {V, W}
        assert b.similarity_score == similarity(b, a) == 1
        assert c.bookmarkers == {V}
        assert c.similarity_score == similarity(c, a) == 0

    @pytest.mark.asyncio
    async def test_excludes_own_bookmarks(self):
        fetcher = FakeFetcher(
            bookmarks={
                "me": [make_work("A", ["X"], bookmarks=3), make_work("D", ["X"], bookmarks=1)],
                "vee": [make_work("A", ["X"]), make_work("D", ["X"]), make_work("B", ["X"])],
            },
            bookmarkers={"A": [V]},
        )
        result = await recommend(fetcher, ME, pivot_index=0)
        assert [w.id for w in result.works] == ["B"]

    @pytest.mark.asyncio
    async def test_seeds_without_other_bookmarks_give_empty_result(self):
        fetcher = FakeFetcher(
            bookmarks={"me": [make_work("A", ["X"], bookmarks=0)]},
            bookmarkers={"A": [V]},
        )
        result = await recommend(fetcher, ME)
        assert result.pivot is None
        assert result.works == []
        assert fetcher.bookmarker_calls == []

    @pytest.mark.asyncio
    async def test_only_qualifying_seeds_are_sampled(self):
        fetcher = FakeFetcher(
            bookmarks={
                "me": [make_work("quiet", bookmarks=0), make_work("A", ["X"], bookmarks=2)],
                "vee": [make_work("B", ["X"])],
            },
            bookmarkers={"A": [V]},
        )
        result = await recommend(fetcher, ME, rng=random.Random(0))
        assert result.pivot.id == "A"
        assert [w.id for w in result.works] == ["B"]

    @pytest.mark.asyncio
    async def test_no_co_bookmarkers_gives_empty_result(self):
        fetcher = FakeFetcher(
            bookmarks={"me": [make_work("A", ["X"], bookmarks=1)]},
            bookmarkers={"A": [ME]},
        )
        result = await recommend(fetcher, ME)
        assert result.pivot.id == "A"
        assert result.works == []

    @pytest.mark.asyncio
    async def test_unreachable_user_gives_empty_result(self):
        result = await recommend(FakeFetcher(bookmarks={}), ME)
        assert result.pivot is None
        assert result.works == []
