"""
Topics: normalized tags that cross-index entities for the topic pages.

Topics are assigned directly to entities (from ``.yml`` metadata) or to leaf
content (from markdown front matter). Queries always look at the whole subtree.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Set

from site_ids import IdGenerator


TOPIC_KEYS = {"topic", "topics", "tag", "tags"}
_INDEXED_KEY = re.compile(r"^(?P<key>[^\[]+)\[\d+\]$")


@dataclass(frozen=True, order=True)
class Topic:
    name: str

    @staticmethod
    def normalize(raw: str) -> str:
        return " ".join(raw.split()).lower()

    @classmethod
    def of(cls, raw: str) -> Optional["Topic"]:
        name = cls.normalize(raw)
        return cls(name) if name else None


def _is_topic_key(key: str) -> bool:
    match = _INDEXED_KEY.match(key)
    if match:
        key = match.group("key")
    return key.strip().lower() in TOPIC_KEYS


def topics_from_metadata(metadata: Mapping[str, str]) -> Set[Topic]:
    """Collect topics from recognized keys; values may be comma separated."""
    result: Set[Topic] = set()
    for key, value in metadata.items():
        if not _is_topic_key(key):
            continue
        for part in str(value).split(","):
            topic = Topic.of(part)
            if topic is not None:
                result.add(topic)
    return result


class TopicIndex:
    """Maps entities and leaf content to their directly assigned topics."""

    def __init__(self, ids: IdGenerator):
        self._ids = ids
        self._direct: Dict[int, Set[Topic]] = {}
        # keep assigned parts alive so their id() keys stay unique
        self._parts: Dict[int, object] = {}
        self._topic_ids: Dict[Topic, str] = {}

    def assign(self, part: object, topics: Iterable[Topic]) -> None:
        topics = set(topics)
        if not topics:
            return
        key = id(part)
        self._parts[key] = part
        self._direct.setdefault(key, set()).update(topics)

    def direct_topics(self, part: object) -> Set[Topic]:
        return set(self._direct.get(id(part), ()))

    def topics_of(self, entity) -> Set[Topic]:
        """Own topics plus those of the entity's content and all descendants."""
        result = self.direct_topics(entity)
        for item in entity.content:
            result |= self.direct_topics(item)
        for child in entity.children:
            result |= self.topics_of(child)
        return result

    def all_topics(self) -> Set[Topic]:
        result: Set[Topic] = set()
        for topics in self._direct.values():
            result |= topics
        return result

    def entities_for(self, topic: Topic, entities: Iterable) -> List:
        return [e for e in entities if topic in self.topics_of(e)]

    def topic_id(self, topic: Topic) -> str:
        if topic not in self._topic_ids:
            self._topic_ids[topic] = self._ids.generate(topic.name)
        return self._topic_ids[topic]
