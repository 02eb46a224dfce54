from html import escape

from pydantic import BaseModel, ConfigDict, Field, field_serializer

TAG_CATEGORIES = (
    "fandoms",
    "rating",
    "warnings",
    "categories",
    "relationships",
    "characters",
    "additional-tags",
)

STAT_NAMES = ("words", "comments", "kudos", "bookmarks", "hits")


class Link(BaseModel):
    """A labeled reference to an author, tag, user or work."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="Display text of the link")
    url: str = Field(..., description="Absolute URL the link points to")
    relation: str | None = Field(None, description="The anchor's rel attribute, if any")

    def html(self) -> str:
        """Render this link as an HTML anchor."""
        rel = f' rel="{escape(self.relation)}"' if self.relation else ""
        return f'<a{rel} href="{escape(self.url)}">{escape(self.text)}</a>'


class Work(BaseModel):
    """A work listed on the archive, the unit of recommendation."""

    id: str = Field(..., description="Work id, the last path segment of its URL")
    title: Link
    authors: list[Link] = Field(default_factory=list)
    summary: str = ""
    tags: dict[str, list[Link]] = Field(default_factory=dict)
    stats: dict[str, int] = Field(default_factory=dict)
    bookmarkers: set[Link] = Field(
        default_factory=set,
        description="Users seen bookmarking this work during the current traversal",
    )
    similarity_score: float | None = Field(
        None, description="Mean tag overlap with the requesting user's bookmarks"
    )

    @field_serializer("bookmarkers", when_used="json")
    def serialize_bookmarkers(self, bookmarkers: set[Link]) -> list[Link]:
        return sorted(bookmarkers, key=lambda user: (user.text, user.url))

    def stat(self, name: str) -> int:
        return self.stats.get(name, 0)


class WorkListing(BaseModel):
    """One parsed listing page: the works it shows and the series it links to."""

    works: list[Work] = Field(default_factory=list)
    series_locators: list[str] = Field(default_factory=list)


class RecommendationResult(BaseModel):
    """Ranked recommendations together with the bookmark that seeded them."""

    pivot: Work | None = None
    works: list[Work] = Field(default_factory=list)
