"""
The content tree: articles, sub-articles and sub-sub-articles.

Each directory of the content folder becomes an ``Entity``. Entities hold leaf
content (documents, images, videos, youtube references) and the entities of
the next nesting level. The tree is exactly three levels deep.
"""

from __future__ import annotations

import logging
import weakref
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Set, Union

from date_utils import DateParseError, parse_date
from formatted_text import FormattedDocument
from site_ids import IdGenerator
from topic_index import Topic, topics_from_metadata


logger = logging.getLogger(__name__)


class ProjectFormatError(Exception):
    """The content folder (or the events describing it) is structurally broken."""


class Level(IntEnum):
    ARTICLE = 1
    SUB_ARTICLE = 2
    SUB_SUB_ARTICLE = 3

    @property
    def label(self) -> str:
        return {1: "Article", 2: "SubArticle", 3: "SubSubArticle"}[self.value]


MAX_LEVEL = Level.SUB_SUB_ARTICLE


# -- leaf content --

@dataclass(frozen=True)
class Image:
    path: Path
    created_at: datetime
    last_updated_at: datetime
    size_bytes: int = 0

    @property
    def title(self) -> Optional[str]:
        return None


@dataclass(frozen=True)
class Video:
    path: Path
    created_at: datetime
    last_updated_at: datetime
    size_bytes: int = 0

    @property
    def title(self) -> Optional[str]:
        return None


@dataclass(frozen=True)
class YoutubeVideo:
    youtube_id: str
    metadata: Dict[str, str] = field(default_factory=dict, compare=False)
    created_at: datetime = datetime.min
    last_updated_at: datetime = datetime.min
    size_bytes: int = 0

    @property
    def title(self) -> Optional[str]:
        return self.metadata.get("title") or None


LeafContent = Union[FormattedDocument, Image, Video, YoutubeVideo]


# -- entities --

class Entity:
    """A directory rendered as a page, at one of the three nesting levels."""

    def __init__(
        self,
        level: Level,
        directory_name: str,
        created_at: datetime,
        last_updated_at: datetime,
        ids: IdGenerator,
    ):
        if not directory_name:
            raise ValueError("directory name must not be empty")
        self.level = Level(level)
        self.directory_name = directory_name
        self.own_created_at = created_at
        self.own_last_updated_at = last_updated_at
        self._ids = ids
        self._id: Optional[str] = None
        self._metadata: Dict[str, str] = {}
        self._topics: Set[Topic] = set()
        self._content: List[LeafContent] = []
        self._children: List["Entity"] = []
        self._parent: Optional[weakref.ReferenceType] = None
        self._frozen = False

    def __repr__(self) -> str:
        return f"<{self.level.label} {self.directory_name!r}>"

    def __lt__(self, other: "Entity") -> bool:
        return self.title < other.title

    # construction (append-only, before freeze)

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RuntimeError(f"{self!r} is frozen")

    def add_content(self, leaf: LeafContent) -> None:
        self._check_mutable()
        self._content.append(leaf)

    def add_metadata(self, metadata: Mapping[str, str], topics: Optional[Set[Topic]] = None) -> Set[Topic]:
        """Merge metadata (later keys win) and return the topics it assigns."""
        self._check_mutable()
        self._metadata.update(metadata)
        if topics is None:
            topics = topics_from_metadata(metadata)
        self._topics |= topics
        return set(topics)

    def add_child(self, child: "Entity") -> None:
        self._check_mutable()
        if child.level != self.level + 1:
            raise ProjectFormatError(
                f"cannot nest {child.level.label} {child.directory_name!r} "
                f"inside {self.level.label} {self.directory_name!r}"
            )
        if child._parent is not None:
            raise ProjectFormatError(f"{child!r} already has a parent")
        child._parent = weakref.ref(self)
        self._children.append(child)

    def freeze(self) -> None:
        for child in self._children:
            child.freeze()
        self._frozen = True

    # read access

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def metadata(self) -> Dict[str, str]:
        return dict(self._metadata)

    @property
    def content(self) -> List[LeafContent]:
        return list(self._content)

    @property
    def children(self) -> List["Entity"]:
        return list(self._children)

    @property
    def topics(self) -> Set[Topic]:
        return set(self._topics)

    @property
    def parent(self) -> Optional["Entity"]:
        if self._parent is None:
            return None
        return self._parent()

    def ancestors(self) -> List["Entity"]:
        """Ancestors from the outermost article down to the direct parent."""
        result: List[Entity] = []
        node = self.parent
        while node is not None:
            result.insert(0, node)
            node = node.parent
        return result

    def walk(self) -> Iterator["Entity"]:
        yield self
        for child in self._children:
            yield from child.walk()

    @property
    def title(self) -> str:
        """Metadata title, else the first titled content, else the directory name."""
        if self._metadata.get("title"):
            return self._metadata["title"]
        for leaf in self._content:
            if leaf.title is not None:
                return leaf.title
        return self.directory_name

    @property
    def id(self) -> str:
        if self._id is None:
            self._id = self._ids.generate(self.title)
        return self._id

    @property
    def last_updated_at(self) -> datetime:
        return max([self.own_last_updated_at] + [c.last_updated_at for c in self._children])

    @property
    def created_at(self) -> datetime:
        # the latest, not the earliest, creation time in the subtree
        return max([self.own_created_at] + [c.created_at for c in self._children])

    @property
    def published_date(self) -> datetime:
        value = self._metadata.get("date")
        if value:
            try:
                return parse_date(value)
            except DateParseError as exc:
                logger.warning("%s: %s", self.directory_name, exc)
        return self.last_updated_at

    @property
    def pinned(self) -> bool:
        return "pinned" in self._metadata and self._metadata["pinned"] != "false"

    @property
    def size_bytes(self) -> int:
        """Bytes of documents, images and videos; youtube references are not content."""
        own = sum(leaf.size_bytes for leaf in self._content if not isinstance(leaf, YoutubeVideo))
        return own + sum(c.size_bytes for c in self._children)
