#!/usr/bin/env python3
"""
Static site generator for a folder of articles.

Features:
- Top-level folders are articles; nested folders are sub-articles and
  sub-sub-articles (three levels at most)
- Markdown (.md) and text (.txt) files, images, videos and .youtube references
- .yml files hold metadata: title, date, pinned, topics
- Topic pages, paginated article listings, Bootstrap 5 styling via CDN

Usage:
  python build_static_site.py --input ./content --output ./site
  python build_static_site.py --input ./content --list-all --list-topics

Notes:
- Requires "markdown", "PyYAML" and "pandas": pip install -e .
"""

from __future__ import annotations

import argparse
import logging
import os
import shutil
import stat
from pathlib import Path
from typing import List, Optional, Sequence

from content_tree import Entity, ProjectFormatError
from date_utils import readable_format
from project_builder import ArticleSorting, Project
from project_parser import load_project
from render_site import UnsupportedContentError, render_site


logger = logging.getLogger(__name__)


# -- listings --
def _entity_line(project: Project, entity: Entity, with_topics: bool) -> str:
    indent = "  " * (int(entity.level) - 1)
    line = f"{indent}{entity.title} ({readable_format(entity.published_date)})"
    if with_topics:
        topics = sorted(t.name for t in project.topics_of(entity))
        if topics:
            line += f" [{', '.join(topics)}]"
    return line


def list_articles(project: Project, sorting: ArticleSorting, nested: bool = False, with_topics: bool = False) -> List[str]:
    lines: List[str] = []
    for article in project.sorted_articles(sorting):
        entities = list(article.walk()) if nested else [article]
        lines.extend(_entity_line(project, e, with_topics) for e in entities)
    return lines


def list_topics(project: Project) -> List[str]:
    return [t.name for t in project.all_topics()]


# -- output directory --
def _handle_remove_readonly(func, path, exc_info):
    # Windows: clear read-only then retry
    os.chmod(path, stat.S_IWRITE)
    func(path)


def clean_output(output_root: Path) -> None:
    if output_root.exists():
        logger.info("Removing %s", output_root)
        shutil.rmtree(output_root, onerror=_handle_remove_readonly)
    output_root.mkdir(parents=True, exist_ok=True)


# -- CLI --
def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a static site from a folder of articles.")
    parser.add_argument("--input", type=Path, required=True, help="Path to the content folder")
    parser.add_argument("--output", type=Path, default=Path("./site"), help="Output folder for generated site")
    parser.add_argument("--title", type=str, default=None, help="Site title (overrides title in the root .yml)")
    parser.add_argument("--owner", type=str, default=None, help="Site owner (overrides owner in the root .yml)")
    parser.add_argument(
        "--sort",
        choices=[s.value for s in ArticleSorting],
        default=ArticleSorting.TITLE.value,
        help="Article order for the home page and listings",
    )
    parser.add_argument("--list-articles", action="store_true", help="Print the articles")
    parser.add_argument("--list-all", action="store_true", help="Print articles with all nested entities")
    parser.add_argument("--list-topics", action="store_true", help="Print topics (with a listing: per entity)")
    parser.add_argument("--size", action="store_true", help="Print the size of documents, images and videos in bytes")
    parser.add_argument("--render", action="store_true", help="Render the site (default when no other action is given)")
    parser.add_argument("--no-clean", action="store_true", help="Do not empty the output folder before rendering")
    parser.add_argument("--jobs", type=int, default=1, help="Number of threads rendering entity pages")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    args = parser.parse_args(argv)
    if args.jobs < 1:
        parser.error("--jobs must be at least 1")
    return args


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def run(args: argparse.Namespace) -> None:
    input_root: Path = args.input.expanduser().resolve()
    output_root: Path = args.output.expanduser().resolve()
    sorting = ArticleSorting(args.sort)

    if not input_root.exists() or not input_root.is_dir():
        raise SystemExit(f"Input directory not found: {input_root}")

    project = load_project(input_root, title=args.title, owner=args.owner)

    listing = args.list_articles or args.list_all
    if listing:
        for line in list_articles(project, sorting, nested=args.list_all, with_topics=args.list_topics):
            print(line)
    if args.list_topics:
        for name in list_topics(project):
            print(name)
    if args.size:
        print(f"Project size in bytes: {project.size_bytes}")

    if args.render or not (listing or args.list_topics or args.size):
        if not args.no_clean:
            clean_output(output_root)
        render_site(project, output_root, sorting, jobs=args.jobs)
        print(f"Site generated at: {output_root}")


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose, args.quiet)
    try:
        run(args)
    except (OSError, ProjectFormatError, UnsupportedContentError) as exc:
        logger.error("%s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
