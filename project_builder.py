"""
Builds the content tree from directory/file events.

The parser walks the content folder and reports what it finds; the builder
keeps a stack of open directories and attaches each finished directory to its
parent. The result is a frozen ``Project``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Set

from content_tree import (
    MAX_LEVEL,
    Entity,
    Image,
    LeafContent,
    Level,
    ProjectFormatError,
    Video,
    YoutubeVideo,
)
from formatted_text import FormattedDocument, Paragraph
from site_ids import IdGenerator
from topic_index import Topic, TopicIndex, topics_from_metadata


logger = logging.getLogger(__name__)


class ArticleSorting(Enum):
    TITLE = "title"
    PINNED = "pinned"
    PUBLISHED_FIRST = "published-first"
    PUBLISHED_LAST = "published-last"
    EDITED = "edited"


class Project:
    """A fully built, read-only site tree plus its topic index."""

    def __init__(self, title: str, owner: str, articles: Sequence[Entity], topic_index: TopicIndex, ids: IdGenerator):
        self.title = title
        self.owner = owner
        self.articles: List[Entity] = sorted(articles)
        self.topic_index = topic_index
        self.ids = ids

    def __repr__(self) -> str:
        return f"Project {self.title} by {self.owner} with {len(self.articles)} articles"

    def all_entities(self) -> Iterator[Entity]:
        """Articles, sub-articles and sub-sub-articles in pre-order."""
        for article in self.articles:
            yield from article.walk()

    def topics_of(self, entity: Entity) -> Set[Topic]:
        return self.topic_index.topics_of(entity)

    def all_topics(self) -> List[Topic]:
        return sorted(self.topic_index.all_topics())

    def entities_for_topic(self, topic: Topic) -> List[Entity]:
        return self.topic_index.entities_for(topic, self.all_entities())

    def topic_id(self, topic: Topic) -> str:
        return self.topic_index.topic_id(topic)

    @property
    def size_bytes(self) -> int:
        return sum(a.size_bytes for a in self.articles)

    def assign_ids(self) -> None:
        """Generate every id up front so they do not depend on rendering order."""
        for entity in self.all_entities():
            entity.id
        for topic in self.all_topics():
            self.topic_id(topic)

    def sorted_articles(self, sorting: ArticleSorting = ArticleSorting.TITLE) -> List[Entity]:
        articles = sorted(self.articles, key=lambda a: a.title)
        if sorting is ArticleSorting.PINNED:
            articles.sort(key=lambda a: not a.pinned)
        elif sorting is ArticleSorting.PUBLISHED_FIRST:
            articles.sort(key=lambda a: a.published_date, reverse=True)
        elif sorting is ArticleSorting.PUBLISHED_LAST:
            articles.sort(key=lambda a: a.published_date)
        elif sorting is ArticleSorting.EDITED:
            articles.sort(key=lambda a: a.last_updated_at)
        return articles


class ProjectBuilder:
    def __init__(self, name: str, created_at: datetime, last_updated_at: datetime):
        self.name = name
        self.created_at = created_at
        self.last_updated_at = last_updated_at
        self.ids = IdGenerator()
        self.topic_index = TopicIndex(self.ids)
        self.metadata: Dict[str, str] = {}
        self.articles: List[Entity] = []
        self._open: List[Entity] = []

    @property
    def depth(self) -> int:
        return len(self._open)

    def _current(self, what: str) -> Optional[Entity]:
        if not self._open:
            logger.warning("Ignoring %s at the top level of %s", what, self.name)
            return None
        return self._open[-1]

    def open_directory(self, name: str, created_at: datetime, last_updated_at: datetime) -> None:
        if self.depth >= MAX_LEVEL:
            path = "/".join([e.directory_name for e in self._open] + [name])
            raise ProjectFormatError(f"Directory {path} is nested deeper than {int(MAX_LEVEL)} levels")
        level = Level(self.depth + 1)
        self._open.append(Entity(level, name, created_at, last_updated_at, self.ids))

    def finish_directory(self) -> Entity:
        if not self._open:
            raise ProjectFormatError("finish_directory called without an open directory")
        entity = self._open.pop()
        if self._open:
            self._open[-1].add_child(entity)
        else:
            self.articles.append(entity)
        return entity

    def found_metadata(self, metadata: Mapping[str, str]) -> None:
        if not self._open:
            self.metadata.update(metadata)
            return
        entity = self._open[-1]
        topics = entity.add_metadata(metadata)
        self.topic_index.assign(entity, topics)

    def _add_leaf(self, leaf: LeafContent, topics: Set[Topic] = frozenset()) -> None:
        entity = self._current(type(leaf).__name__)
        if entity is None:
            return
        entity.add_content(leaf)
        self.topic_index.assign(leaf, topics)

    def found_text_document(
        self,
        paragraphs: Sequence[Paragraph],
        metadata: Mapping[str, str],
        created_at: datetime,
        last_updated_at: datetime,
        size_bytes: int,
    ) -> None:
        doc = FormattedDocument(tuple(paragraphs), dict(metadata), created_at, last_updated_at, size_bytes)
        self._add_leaf(doc, topics_from_metadata(metadata))

    def found_image(self, path: Path, created_at: datetime, last_updated_at: datetime, size_bytes: int) -> None:
        self._add_leaf(Image(path, created_at, last_updated_at, size_bytes))

    def found_video(self, path: Path, created_at: datetime, last_updated_at: datetime, size_bytes: int) -> None:
        self._add_leaf(Video(path, created_at, last_updated_at, size_bytes))

    def found_youtube_video(
        self,
        youtube_id: str,
        metadata: Mapping[str, str],
        created_at: datetime,
        last_updated_at: datetime,
        size_bytes: int,
    ) -> None:
        video = YoutubeVideo(youtube_id, dict(metadata), created_at, last_updated_at, size_bytes)
        self._add_leaf(video, topics_from_metadata(metadata))

    def build_project(self, title: Optional[str] = None, owner: Optional[str] = None) -> Project:
        if self._open:
            raise ProjectFormatError(f"Directory {self._open[-1].directory_name} was never finished")
        for article in self.articles:
            article.freeze()
        project = Project(
            title=title or self.metadata.get("title") or self.name,
            owner=owner or self.metadata.get("owner") or "",
            articles=self.articles,
            topic_index=self.topic_index,
            ids=self.ids,
        )
        project.assign_ids()
        logger.info("Loaded %r", project)
        return project
