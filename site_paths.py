"""
Site paths, breadcrumbs and pagination.

All paths are site-absolute and start and end with '/'. Every page is written
as ``<path>index.html`` and links to shared assets through ``relative_root``,
so the site works from any directory (including file://).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Sequence, TypeVar

from content_tree import Entity


HOME_ADDRESS = "/"
ARTICLES_ADDRESS = "/articles/"
TOPICS_ADDRESS = "/topics/"
ENTRY_ADDRESS = "/p/"

PAGE_SIZE = 5
# pagination window: shown in full up to this many pages
MAX_FULL_WINDOW = 10

T = TypeVar("T")


@dataclass(frozen=True)
class SiteLink:
    url: str
    label: str
    selected: bool = False


@dataclass(frozen=True)
class Pagination:
    """Groups of page links; the outer groups hold the standalone first/last links."""

    segments: List[List[SiteLink]] = field(default_factory=list)

    @property
    def visible(self) -> bool:
        return has_pagination(self)


def _check_path(path: str) -> None:
    if not (path.startswith("/") and path.endswith("/")):
        raise ValueError(f"site paths start and end with '/': {path!r}")


def create_url(path: str) -> str:
    _check_path(path)
    return path + "index.html"


def entity_path(entity: Entity) -> str:
    """ENTRY_ADDRESS followed by the ids of all ancestors and the entity itself."""
    ids = [a.id for a in entity.ancestors()] + [entity.id]
    return ENTRY_ADDRESS + "".join(f"{i}/" for i in ids)


def entity_url(entity: Entity) -> str:
    return create_url(entity_path(entity))


def topic_path(topic_id: str) -> str:
    return f"{TOPICS_ADDRESS}{topic_id}/"


def breadcrumbs(entity: Entity) -> List[SiteLink]:
    """Links from the outermost article down to ``entity`` itself, which is selected."""
    return [SiteLink(entity_url(e), e.title, e is entity) for e in entity.ancestors() + [entity]]


def relative_root(current_path: str) -> str:
    """Relative path from ``current_path`` back to the site root.

    "/" -> ".", "/articles/" -> "..", "/p/a/b/" -> "../../.."
    """
    _check_path(current_path)
    nesting = current_path.count("/")
    if nesting == 1:
        return "."
    return ("../" * (nesting - 1))[:-1]


def paginated_path(base_path: str, page: int) -> str:
    _check_path(base_path)
    if page < 0:
        raise ValueError(f"negative page index {page}")
    if page == 0:
        return base_path
    return f"{base_path}{page + 1}/"


def paginate(items: Sequence[T], page_size: int = PAGE_SIZE) -> List[List[T]]:
    """Split into pages of ``page_size``; there is always at least one page."""
    if page_size <= 0:
        raise ValueError("page size must be positive")
    pages = [list(items[i:i + page_size]) for i in range(0, len(items), page_size)]
    return pages or [[]]


def pagination_window(selected: int, page_count: int) -> range:
    if page_count <= 0 or not 0 <= selected < page_count:
        raise ValueError(f"invalid page {selected} of {page_count}")
    start, end = 0, page_count - 1
    if page_count > MAX_FULL_WINDOW:
        if selected < 5:
            end = 8
        elif selected > page_count - 6:
            start = page_count - 9
        else:
            start, end = selected - 3, selected + 3
    return range(start, end + 1)


def create_pagination(selected: int, page_count: int, link_for: Callable[[int], str]) -> Pagination:
    """Page links for ``page_count`` pages with page ``selected`` (0-based) active."""
    if page_count == 1:
        return Pagination([])
    window = pagination_window(selected, page_count)

    segments: List[List[SiteLink]] = []
    if window.start != 0:
        segments.append([SiteLink(link_for(0), "1", False)])
    segments.append([SiteLink(link_for(idx), str(idx + 1), idx == selected) for idx in window])
    if window[-1] != page_count - 1:
        segments.append([SiteLink(link_for(page_count - 1), str(page_count), selected == page_count - 1)])
    return Pagination(segments)


def has_pagination(pagination: Pagination) -> bool:
    if not pagination.segments:
        return False
    if len(pagination.segments) > 1:
        return True
    return len(pagination.segments[0]) != 1
