from __future__ import annotations

import logging
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from content_tree import Entity, Image, Level, ProjectFormatError, YoutubeVideo
from formatted_text import FormattedDocument, Heading, PlainText
from site_ids import IdGenerator
from topic_index import Topic


def make(level: Level, name: str, ids: IdGenerator, when: datetime) -> Entity:
    return Entity(level, name, when, when, ids)


def test_child_must_be_exactly_one_level_deeper(ids: IdGenerator, when: datetime) -> None:
    article = make(Level.ARTICLE, "a", ids, when)
    with pytest.raises(ProjectFormatError):
        article.add_child(make(Level.SUB_SUB_ARTICLE, "c", ids, when))
    with pytest.raises(ProjectFormatError):
        article.add_child(make(Level.ARTICLE, "b", ids, when))


def test_child_gets_a_single_parent(ids: IdGenerator, when: datetime) -> None:
    first = make(Level.ARTICLE, "a", ids, when)
    second = make(Level.ARTICLE, "b", ids, when)
    child = make(Level.SUB_ARTICLE, "c", ids, when)
    first.add_child(child)
    assert child.parent is first
    with pytest.raises(ProjectFormatError):
        second.add_child(child)


def test_frozen_entity_rejects_changes(ids: IdGenerator, when: datetime) -> None:
    article = make(Level.ARTICLE, "a", ids, when)
    child = make(Level.SUB_ARTICLE, "b", ids, when)
    article.add_child(child)
    article.freeze()
    assert child.frozen
    with pytest.raises(RuntimeError):
        article.add_metadata({"title": "x"})
    with pytest.raises(RuntimeError):
        child.add_content(Image(Path("x.png"), when, when))


def test_title_precedence(ids: IdGenerator, when: datetime) -> None:
    article = make(Level.ARTICLE, "dir_name", ids, when)
    assert article.title == "dir_name"
    article.add_content(Image(Path("x.png"), when, when))
    article.add_content(YoutubeVideo("abc", {"title": "Video"}, when, when))
    assert article.title == "Video"
    article.add_metadata({"title": "Meta"})
    assert article.title == "Meta"


def test_title_from_document_heading(ids: IdGenerator, when: datetime) -> None:
    article = make(Level.ARTICLE, "dir", ids, when)
    article.add_content(FormattedDocument((Heading(PlainText("Doc title"), 1),)))
    assert article.title == "Doc title"


def test_id_is_generated_once_from_the_title(ids: IdGenerator, when: datetime) -> None:
    first = make(Level.ARTICLE, "Demo Day", ids, when)
    second = make(Level.ARTICLE, "Demo Day", ids, when)
    assert first.id == "demo_day"
    assert second.id == "demo_day2"
    assert first.id == "demo_day"


def test_times_aggregate_over_the_subtree(ids: IdGenerator, when: datetime) -> None:
    later = when + timedelta(days=3)
    article = make(Level.ARTICLE, "a", ids, when)
    sub = make(Level.SUB_ARTICLE, "b", ids, when)
    leaf = Entity(Level.SUB_SUB_ARTICLE, "c", later, later, ids)
    article.add_child(sub)
    sub.add_child(leaf)
    assert article.last_updated_at == later
    assert article.created_at == later
    assert article.last_updated_at >= sub.last_updated_at >= leaf.last_updated_at
    assert article.own_last_updated_at == when


def test_published_date_from_metadata(ids: IdGenerator, when: datetime) -> None:
    article = make(Level.ARTICLE, "a", ids, when)
    article.add_metadata({"date": "2023-01-15"})
    assert article.published_date == datetime(2023, 1, 15)


def test_bad_published_date_falls_back(ids: IdGenerator, when: datetime, caplog) -> None:
    article = make(Level.ARTICLE, "a", ids, when)
    article.add_metadata({"date": "not a date at all"})
    with caplog.at_level(logging.WARNING):
        assert article.published_date == when
    assert "not a date at all" in caplog.text


@pytest.mark.parametrize("value, pinned", [("true", True), ("yes", True), ("false", False)])
def test_pinned(ids: IdGenerator, when: datetime, value: str, pinned: bool) -> None:
    article = make(Level.ARTICLE, "a", ids, when)
    article.add_metadata({"pinned": value})
    assert article.pinned is pinned


def test_metadata_topics_are_returned(ids: IdGenerator, when: datetime) -> None:
    article = make(Level.ARTICLE, "a", ids, when)
    assert article.add_metadata({"tags": "One, Two"}) == {Topic("one"), Topic("two")}
    assert article.topics == {Topic("one"), Topic("two")}


def test_walk_and_ancestors(ids: IdGenerator, when: datetime) -> None:
    article = make(Level.ARTICLE, "a", ids, when)
    sub = make(Level.SUB_ARTICLE, "b", ids, when)
    leaf = make(Level.SUB_SUB_ARTICLE, "c", ids, when)
    other = make(Level.SUB_ARTICLE, "d", ids, when)
    article.add_child(sub)
    sub.add_child(leaf)
    article.add_child(other)
    assert [e.directory_name for e in article.walk()] == ["a", "b", "c", "d"]
    assert leaf.ancestors() == [article, sub]
    assert article.ancestors() == []


def test_size_counts_media_and_documents_not_youtube_references(ids: IdGenerator, when: datetime) -> None:
    article = make(Level.ARTICLE, "a", ids, when)
    sub = make(Level.SUB_ARTICLE, "b", ids, when)
    article.add_child(sub)
    article.add_content(Image(Path("a.png"), when, when, 10))
    sub.add_content(Image(Path("b.png"), when, when, 5))
    sub.add_content(YoutubeVideo("abc", {}, when, when, 40))
    assert article.size_bytes == 15
