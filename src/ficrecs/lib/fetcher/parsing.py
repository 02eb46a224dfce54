"""HTML parsing for archive listing pages.

A listing page (``/users/<name>/bookmarks``, ``/series/<id>``) holds a list of
``.blurb`` elements.  Each blurb is one of:

* a deleted or inaccessible entry, which is skipped;
* a series, whose URL is returned so the caller can expand it;
* a work, which is parsed into a :class:`Work`.
"""

import logging
import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from ...models import Link, Work, WorkListing

logger = logging.getLogger(__name__)

_STAT_SELECTORS = {
    "words": "dd.words",
    "comments": "dd.comments",
    "kudos": "dd.kudos",
    "bookmarks": "dd.bookmarks",
    "hits": "dd.hits",
}


def slugify(text: str) -> str:
    """Return the archive's URL form of a tag name."""
    return text.replace(" ", "%20").replace("/", "*s*")


def get_text(context: Tag, selector: str) -> str:
    """Return the collective text of the elements matching *selector*, trimmed."""
    return "".join(el.get_text() for el in context.select(selector)).strip()


def get_number(context: Tag, selector: str) -> int:
    """Parse the text under *selector* as an integer, 0 when absent or malformed."""
    digits = re.sub(r"[,\s]", "", get_text(context, selector))
    try:
        return max(int(digits), 0)
    except ValueError:
        return 0


def make_link(anchor: Tag, base_url: str) -> Link:
    rel = anchor.get("rel")
    if isinstance(rel, list):
        rel = " ".join(rel)
    return Link(
        text=anchor.get_text().strip(),
        url=urljoin(base_url + "/", anchor.get("href", "")),
        relation=rel or None,
    )


def get_links(context: Tag, selector: str, base_url: str) -> list[Link]:
    """Return every anchor under the elements matching *selector* as Links."""
    return [make_link(a, base_url) for a in context.select(f"{selector} a")]


def _text_tags(context: Tag, selector: str, base_url: str) -> list[Link]:
    # Rating and category are rendered as plain text, not links.
    texts = [t.strip() for t in get_text(context, selector).split(", ")]
    return [
        Link(text=t, url=f"{base_url}/tags/{slugify(t)}/works")
        for t in texts
        if t
    ]


def parse_work(blurb: Tag, base_url: str) -> Work | None:
    """Build a Work from a work blurb.  Returns ``None`` if it has no title link."""
    heading_links = get_links(blurb, ".header .heading:not(.fandoms)", base_url)
    if not heading_links:
        return None
    title = heading_links[0]

    summary_el = blurb.select_one(".summary")
    summary = summary_el.decode_contents().strip() if summary_el else ""

    tags = {
        "fandoms": get_links(blurb, ".header .fandoms", base_url),
        "rating": _text_tags(blurb, ".required-tags .rating", base_url),
        "warnings": get_links(blurb, ".tags .warnings", base_url),
        "categories": _text_tags(
            blurb, ".required-tags .category:not(.category-none)", base_url
        ),
        "relationships": get_links(blurb, ".tags .relationships", base_url),
        "characters": get_links(blurb, ".tags .characters", base_url),
        "additional-tags": get_links(blurb, ".tags .freeforms", base_url),
    }
    stats = {name: get_number(blurb, sel) for name, sel in _STAT_SELECTORS.items()}

    return Work(
        id=title.url.rstrip("/").split("/")[-1],
        title=title,
        authors=[link for link in heading_links if link.relation == "author"],
        summary=summary,
        tags=tags,
        stats=stats,
    )


def _is_deleted(blurb: Tag) -> bool:
    return any("deleted" in m.get_text() for m in blurb.select(".message"))


def _is_series(blurb: Tag) -> bool:
    return any("Works" in dt.get_text() for dt in blurb.select("dt"))


def parse_work_listing(html: str, base_url: str) -> WorkListing:
    """Parse a listing page into its works and the series it references."""
    soup = BeautifulSoup(html, "html.parser")
    listing = WorkListing()
    for blurb in soup.select(".index .blurb"):
        if _is_deleted(blurb):
            continue
        if _is_series(blurb):
            anchor = blurb.select_one(".heading a")
            if anchor is not None and anchor.get("href"):
                listing.series_locators.append(urljoin(base_url + "/", anchor["href"]))
            continue
        work = parse_work(blurb, base_url)
        if work is None:
            logger.debug("Skipping blurb without a title link")
            continue
        listing.works.append(work)
    return listing


def parse_bookmarkers(html: str, base_url: str) -> list[Link]:
    """Return the users listed on a work's bookmarks page."""
    soup = BeautifulSoup(html, "html.parser")
    return get_links(soup, ".user .byline", base_url)
