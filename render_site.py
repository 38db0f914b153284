"""
Render a loaded project into a static site.

Output layout (every page is ``<path>index.html``):
- /                       home page with the top articles
- /p/<id>/.../            one page per article, sub-article and sub-sub-article
- /articles/, /articles/2/, ...   all entities, paginated
- /topics/, /topics/2/, ...       all topics, paginated
- /topics/<id>/, ...              entities per topic, paginated
- /css/main.css
"""

from __future__ import annotations

import logging
import shutil
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from content_tree import Entity, Image, LeafContent, Video, YoutubeVideo
from date_utils import readable_format
from formatted_text import FormattedDocument, separate_preview
from page_data import (
    ArticleListPage,
    ArticlePage,
    ArticlePreview,
    ContentFragment,
    Homepage,
    SiteData,
    TopicListPage,
)
from page_templates import MAIN_CSS, render
from project_builder import ArticleSorting, Project
from site_paths import (
    ARTICLES_ADDRESS,
    HOME_ADDRESS,
    PAGE_SIZE,
    TOPICS_ADDRESS,
    SiteLink,
    breadcrumbs,
    create_pagination,
    create_url,
    entity_path,
    entity_url,
    paginate,
    paginated_path,
    relative_root,
    topic_path,
)


logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 200
HOMEPAGE_ARTICLES = 5
READ_ON_PREFIX = "Read on: "


class UnsupportedContentError(Exception):
    """Leaf content of a type the renderer has no template for."""


class SiteRenderer:
    def __init__(self, target_dir: Path, sorting: ArticleSorting = ArticleSorting.TITLE, jobs: int = 1):
        self.target_dir = Path(target_dir)
        self.sorting = sorting
        self.jobs = max(1, jobs)
        self._project: Optional[Project] = None
        self._headers: Optional[List[SiteLink]] = None
        self._generated_at = ""

    # -- entry point --

    def render_project(self, project: Project) -> int:
        """Write the whole site; returns the number of pages written."""
        self._project = project
        self._headers = None
        self._generated_at = readable_format(datetime.now())
        project.assign_ids()

        self.target_dir.mkdir(parents=True, exist_ok=True)
        css = self.target_dir / "css" / "main.css"
        css.parent.mkdir(parents=True, exist_ok=True)
        css.write_text(MAIN_CSS, encoding="utf-8")

        entities = list(project.all_entities())
        count = 1
        self.render_homepage()
        if self.jobs > 1 and len(entities) > 1:
            with ThreadPoolExecutor(max_workers=self.jobs) as pool:
                # list() re-raises the first failure
                list(pool.map(self.render_entity, entities))
        else:
            for entity in entities:
                self.render_entity(entity)
        count += len(entities)
        count += self.render_article_list(entities)
        count += self.render_topic_list()
        for topic in project.all_topics():
            count += self.render_entity_list(
                topic_path(project.topic_id(topic)),
                f"Articles for: {topic.name}",
                project.entities_for_topic(topic),
            )
        logger.info("Wrote %d pages to %s", count, self.target_dir)
        return count

    # -- shared page parts --

    @property
    def project(self) -> Project:
        if self._project is None:
            raise RuntimeError("render_project() has not been called")
        return self._project

    def headers(self) -> List[SiteLink]:
        if self._headers is None:
            links = [
                SiteLink(create_url(HOME_ADDRESS), "Home"),
                SiteLink(create_url(ARTICLES_ADDRESS), "Articles"),
            ]
            if self.project.all_topics():
                links.append(SiteLink(create_url(TOPICS_ADDRESS), "Topics"))
            self._headers = links
        return self._headers

    def site_data(self, path: str) -> SiteData:
        return SiteData(
            rel_path=relative_root(path),
            title=self.project.title,
            owner=self.project.owner,
            headers=self.headers(),
            generated_at=self._generated_at,
        )

    def write_page(self, path: str, page) -> Path:
        out = self.target_dir / path.strip("/") / "index.html"
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(render(page.template, page), encoding="utf-8")
        logger.debug("Wrote %s", out)
        return out

    def preview(self, entity: Entity, rel_path: str, prefix: str = "") -> ArticlePreview:
        """Documents of the entity share one preview budget."""
        out: List[str] = []
        budget = PREVIEW_LENGTH
        for leaf in entity.content:
            if budget <= 0:
                break
            if not isinstance(leaf, FormattedDocument):
                continue
            start = len(out)
            budget = leaf.to_preview(out, budget)
            separate_preview(out, start)
        return ArticlePreview(
            prefix=prefix,
            title=entity.title,
            published=readable_format(entity.published_date),
            preview_html="".join(out),
            rel_path=rel_path,
            url=entity_url(entity),
        )

    # -- content --

    def render_content(self, leaf: LeafContent, page_dir: Path) -> ContentFragment:
        if isinstance(leaf, FormattedDocument):
            return ContentFragment(leaf.title, leaf.to_html())
        if isinstance(leaf, (Image, Video)):
            shutil.copy2(leaf.path, page_dir / leaf.path.name)
            template = "content-fragment-image" if isinstance(leaf, Image) else "content-fragment-video"
            return ContentFragment(None, render(template, {"address": leaf.path.name, "title": leaf.path.stem}))
        if isinstance(leaf, YoutubeVideo):
            return ContentFragment(leaf.title, render("content-fragment-youtube", {"id": leaf.youtube_id, "title": leaf.title or ""}))
        raise UnsupportedContentError(f"Cannot render content of type {type(leaf).__name__}")

    # -- pages --

    def render_homepage(self) -> None:
        site = self.site_data(HOME_ADDRESS)
        top = self.project.sorted_articles(self.sorting)[:HOMEPAGE_ARTICLES]
        articles = [self.preview(a, site.rel_path) for a in top]
        self.write_page(HOME_ADDRESS, Homepage(site, articles, create_url(ARTICLES_ADDRESS)))

    def render_entity(self, entity: Entity) -> None:
        path = entity_path(entity)
        site = self.site_data(path)
        page_dir = self.target_dir / path.strip("/")
        page_dir.mkdir(parents=True, exist_ok=True)

        content = [self.render_content(leaf, page_dir) for leaf in entity.content]
        for child in entity.children:
            preview = self.preview(child, site.rel_path, READ_ON_PREFIX)
            content.append(ContentFragment(child.title, render("article-preview", preview)))

        topics = [
            SiteLink(create_url(topic_path(self.project.topic_id(t))), t.name)
            for t in sorted(self.project.topics_of(entity))
        ]
        page = ArticlePage(
            site=site,
            title=entity.title,
            breadcrumbs=breadcrumbs(entity),
            published=readable_format(entity.published_date),
            topics=topics,
            content=content,
        )
        self.write_page(path, page)

    def render_entity_list(self, base_path: str, title: str, entities: Sequence[Entity]) -> int:
        pages = paginate(entities, PAGE_SIZE)
        for idx, chunk in enumerate(pages):
            path = paginated_path(base_path, idx)
            site = self.site_data(path)
            pagination = create_pagination(idx, len(pages), lambda i: create_url(paginated_path(base_path, i)))
            articles = [self.preview(e, site.rel_path) for e in chunk]
            self.write_page(path, ArticleListPage(site, title, pagination, articles))
        return len(pages)

    def render_article_list(self, entities: Sequence[Entity]) -> int:
        return self.render_entity_list(ARTICLES_ADDRESS, "Articles", entities)

    def render_topic_list(self) -> int:
        topics = self.project.all_topics()
        pages = paginate(topics, PAGE_SIZE)
        for idx, chunk in enumerate(pages):
            path = paginated_path(TOPICS_ADDRESS, idx)
            pagination = create_pagination(idx, len(pages), lambda i: create_url(paginated_path(TOPICS_ADDRESS, i)))
            links = [SiteLink(create_url(topic_path(self.project.topic_id(t))), t.name) for t in chunk]
            self.write_page(path, TopicListPage(self.site_data(path), "Topics", pagination, links))
        return len(pages)


def render_site(project: Project, target_dir: Path, sorting: ArticleSorting = ArticleSorting.TITLE, jobs: int = 1) -> int:
    return SiteRenderer(target_dir, sorting, jobs).render_project(project)
