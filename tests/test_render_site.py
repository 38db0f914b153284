from __future__ import annotations

from pathlib import Path

import pytest

from page_templates import render
from project_builder import ArticleSorting
from project_parser import load_project
from render_site import SiteRenderer, UnsupportedContentError, render_site


@pytest.fixture
def site(content_dir: Path, tmp_path: Path) -> Path:
    out = tmp_path / "site"
    render_site(load_project(content_dir), out)
    return out


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def test_all_pages_are_written(site: Path) -> None:
    for rel in [
        "index.html",
        "css/main.css",
        "articles/index.html",
        "topics/index.html",
        "topics/space/index.html",
        "topics/rockets/index.html",
        "p/launch/index.html",
        "p/launch/press_notes/index.html",
        "p/launch/press_notes/photo1/index.html",
    ]:
        assert (site / rel).is_file(), rel


def test_media_is_copied_next_to_its_page(site: Path) -> None:
    page = site / "p" / "launch" / "press_notes" / "photo1"
    assert (page / "pic.png").is_file()
    assert 'src="pic.png"' in _read(page / "index.html")


def test_pages_link_back_to_the_root(site: Path) -> None:
    html = _read(site / "p" / "launch" / "press_notes" / "photo1" / "index.html")
    assert 'href="../../../../css/main.css"' in html
    assert 'href="../../../../p/launch/index.html"' in html
    assert 'href="../css/main.css"' in _read(site / "articles" / "index.html")


def test_article_page_content(site: Path) -> None:
    html = _read(site / "p" / "launch" / "index.html")
    assert "<h2>Launch day</h2>" in html
    assert "Fish &amp; chips" in html
    assert "&amp;amp;" not in html
    assert "Read on: Press notes" in html
    assert "Jun 3, 2024" in html
    assert 'href="../../topics/space/index.html"' in html


def test_homepage_and_listings(site: Path) -> None:
    home = _read(site / "index.html")
    assert "<title>My Site</title>" in home
    assert 'href="./p/launch/index.html"' in home
    assert 'href="./topics/index.html"' in home

    articles = _read(site / "articles" / "index.html")
    for title in ["Launch", "Press notes", "photo1"]:
        assert title in articles
    assert "pagination" not in articles

    topic = _read(site / "topics" / "space" / "index.html")
    assert "Articles for: space" in topic


def test_listings_paginate(tmp_path: Path) -> None:
    root = tmp_path / "content"
    for n in range(12):
        article = root / f"article{n:02d}"
        article.mkdir(parents=True)
        (article / "text.txt").write_text(f"Article {n:02d}\n", encoding="utf-8")
    out = tmp_path / "site"
    render_site(load_project(root), out)
    assert (out / "articles" / "3" / "index.html").is_file()
    assert not (out / "articles" / "4").exists()
    page = _read(out / "articles" / "2" / "index.html")
    assert 'class="pagination"' in page
    assert "Article 05" in page
    assert "Article 04" not in page
    # no topics: no header link and an empty topic listing
    assert "Topics" not in _read(out / "index.html").split("</header>")[0]
    assert (out / "topics" / "index.html").is_file()


def test_preview_budget_is_shared_across_documents(tmp_path: Path) -> None:
    article = tmp_path / "content" / "a"
    article.mkdir(parents=True)
    (article / "1.txt").write_text("x" * 150, encoding="utf-8")
    (article / "2.txt").write_text("y" * 150, encoding="utf-8")
    project = load_project(tmp_path / "content")
    renderer = SiteRenderer(tmp_path / "site")
    renderer.render_project(project)
    preview = renderer.preview(project.articles[0], ".")
    assert preview.preview_html == "x" * 150 + " " + "y" * 50 + "..."


def test_concurrent_rendering_writes_the_same_pages(content_dir: Path, tmp_path: Path) -> None:
    serial, parallel = tmp_path / "serial", tmp_path / "parallel"
    render_site(load_project(content_dir), serial)
    render_site(load_project(content_dir), parallel, ArticleSorting.TITLE, jobs=4)
    files = sorted(p.relative_to(serial) for p in serial.rglob("*") if p.is_file())
    assert files == sorted(p.relative_to(parallel) for p in parallel.rglob("*") if p.is_file())


def test_unknown_content_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(UnsupportedContentError):
        SiteRenderer(tmp_path).render_content(object(), tmp_path)


def test_unknown_template() -> None:
    with pytest.raises(KeyError):
        render("nope", None)
