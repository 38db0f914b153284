from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import pytest

from content_tree import Level, ProjectFormatError
from formatted_text import PlainText, TextParagraph
from project_builder import ArticleSorting, ProjectBuilder


def _article(builder: ProjectBuilder, name: str, when: datetime, **metadata: str) -> None:
    builder.open_directory(name, when, when)
    if metadata:
        builder.found_metadata(metadata)
    builder.finish_directory()


def test_directories_nest_into_levels(when: datetime) -> None:
    builder = ProjectBuilder("site", when, when)
    builder.open_directory("a", when, when)
    builder.open_directory("b", when, when)
    builder.open_directory("c", when, when)
    with pytest.raises(ProjectFormatError):
        builder.open_directory("d", when, when)
    leaf = builder.finish_directory()
    assert leaf.level is Level.SUB_SUB_ARTICLE
    builder.finish_directory()
    builder.finish_directory()
    project = builder.build_project()
    assert [e.directory_name for e in project.all_entities()] == ["a", "b", "c"]


def test_unbalanced_events(when: datetime) -> None:
    builder = ProjectBuilder("site", when, when)
    with pytest.raises(ProjectFormatError):
        builder.finish_directory()
    builder.open_directory("a", when, when)
    with pytest.raises(ProjectFormatError):
        builder.build_project()


def test_root_level_content_is_ignored(when: datetime, caplog) -> None:
    builder = ProjectBuilder("site", when, when)
    with caplog.at_level(logging.WARNING):
        builder.found_image(Path("x.png"), when, when, 3)
    assert "top level" in caplog.text
    assert builder.build_project().articles == []


def test_project_title_and_owner_fallbacks(when: datetime) -> None:
    builder = ProjectBuilder("folder", when, when)
    assert builder.build_project().title == "folder"

    builder = ProjectBuilder("folder", when, when)
    builder.found_metadata({"title": "From yml", "owner": "Ann"})
    project = builder.build_project()
    assert (project.title, project.owner) == ("From yml", "Ann")
    assert builder.build_project(title="Flag").title == "Flag"


def test_built_tree_is_frozen(when: datetime) -> None:
    builder = ProjectBuilder("site", when, when)
    builder.open_directory("a", when, when)
    builder.found_text_document([TextParagraph(PlainText("hi"))], {}, when, when, 2)
    builder.finish_directory()
    [article] = builder.build_project().articles
    assert article.frozen
    assert article.size_bytes == 2
    with pytest.raises(RuntimeError):
        article.add_metadata({})


def test_article_sorting(when: datetime) -> None:
    builder = ProjectBuilder("site", when, when)
    _article(builder, "b", when, title="B", date="2024-01-01")
    _article(builder, "a", when, title="A", date="2023-01-01")
    _article(builder, "c", when, title="C", date="2025-01-01", pinned="true")
    project = builder.build_project()

    def titles(sorting: ArticleSorting):
        return [a.title for a in project.sorted_articles(sorting)]

    assert titles(ArticleSorting.TITLE) == ["A", "B", "C"]
    assert titles(ArticleSorting.PINNED) == ["C", "A", "B"]
    assert titles(ArticleSorting.PUBLISHED_FIRST) == ["C", "B", "A"]
    assert titles(ArticleSorting.PUBLISHED_LAST) == ["A", "B", "C"]
    assert titles(ArticleSorting.EDITED) == ["A", "B", "C"]
