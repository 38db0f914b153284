"""Page data handed to the templates. Plain values only, no tree objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from site_paths import Pagination, SiteLink


@dataclass(frozen=True)
class SiteData:
    """Shared by every page: relative root, site title, owner and header links."""

    rel_path: str
    title: str
    owner: str
    headers: List[SiteLink]
    generated_at: str


@dataclass(frozen=True)
class ContentFragment:
    title: Optional[str]
    html: str


@dataclass(frozen=True)
class ArticlePreview:
    prefix: str
    title: str
    published: str
    preview_html: str
    rel_path: str
    url: str


@dataclass(frozen=True)
class ArticlePage:
    site: SiteData
    title: str
    breadcrumbs: List[SiteLink]
    published: str
    topics: List[SiteLink]
    content: List[ContentFragment]

    template = "article"


@dataclass(frozen=True)
class ArticleListPage:
    site: SiteData
    title: str
    pagination: Pagination
    articles: List[ArticlePreview] = field(default_factory=list)

    template = "article-list"


@dataclass(frozen=True)
class TopicListPage:
    site: SiteData
    title: str
    pagination: Pagination
    topics: List[SiteLink] = field(default_factory=list)

    template = "topic-list"


@dataclass(frozen=True)
class Homepage:
    site: SiteData
    articles: List[ArticlePreview]
    articles_url: str

    template = "homepage"
