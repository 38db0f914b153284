"""
Loads a content folder and reports what it finds to a ProjectBuilder.

Top level: subdirectories (articles) and ``*.yml`` site metadata.
Below: markdown, text, images, videos, ``.youtube`` references and metadata.
Directories starting with '_' and hidden entries are skipped.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Tuple

from date_utils import from_timestamp
from markdown_reader import MarkdownReader, parse_metadata, read_plain_text
from project_builder import Project, ProjectBuilder


logger = logging.getLogger(__name__)

SKIP_PREFIX = "_"
MARKDOWN_SUFFIXES = {".md", ".markdown"}
TEXT_SUFFIXES = {".txt"}
IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".gif"}
VIDEO_SUFFIXES = {".mp4", ".mpg"}
YOUTUBE_SUFFIXES = {".youtube"}
METADATA_SUFFIXES = {".yml", ".yaml"}


def file_times(path: Path) -> Tuple[datetime, datetime, int]:
    """(created, last updated, size) of a filesystem entry."""
    st = path.stat()
    created = getattr(st, "st_birthtime", None) or st.st_ctime
    return from_timestamp(created), from_timestamp(st.st_mtime), st.st_size


def _is_hidden(path: Path) -> bool:
    return path.name.startswith(".")


def _entries(directory: Path):
    return sorted(directory.iterdir(), key=lambda p: p.name)


class ProjectParser:
    def __init__(self) -> None:
        self.markdown = MarkdownReader()

    def load_project(self, root: Path, title: Optional[str] = None, owner: Optional[str] = None) -> Project:
        """Load a whole content folder; a missing folder is an error."""
        root = Path(root)
        if not root.exists():
            raise FileNotFoundError(f"Project directory not found: {root}")
        if not root.is_dir():
            raise NotADirectoryError(f"Project path is not a directory: {root}")
        created, updated, _ = file_times(root)
        builder = ProjectBuilder(root.name, created, updated)
        for entry in _entries(root):
            if _is_hidden(entry):
                continue
            if entry.is_dir():
                self.process_directory(builder, entry)
            elif entry.suffix.lower() in METADATA_SUFFIXES:
                builder.found_metadata(self.read_metadata_file(entry))
        return builder.build_project(title=title, owner=owner)

    def process_directory(self, builder: ProjectBuilder, directory: Path) -> None:
        if directory.name.startswith(SKIP_PREFIX):
            logger.debug("Skipping %s", directory)
            return
        created, updated, _ = file_times(directory)
        builder.open_directory(directory.name, created, updated)
        for entry in _entries(directory):
            if _is_hidden(entry):
                continue
            if entry.is_dir():
                self.process_directory(builder, entry)
            else:
                self.process_file(builder, entry)
        builder.finish_directory()

    def process_file(self, builder: ProjectBuilder, path: Path) -> None:
        suffix = path.suffix.lower()
        if suffix in MARKDOWN_SUFFIXES:
            self.load_markdown(builder, path)
        elif suffix in TEXT_SUFFIXES:
            self.load_text_file(builder, path)
        elif suffix in IMAGE_SUFFIXES:
            builder.found_image(path, *file_times(path))
        elif suffix in VIDEO_SUFFIXES:
            builder.found_video(path, *file_times(path))
        elif suffix in YOUTUBE_SUFFIXES:
            self.load_youtube_video(builder, path)
        elif suffix in METADATA_SUFFIXES:
            builder.found_metadata(self.read_metadata_file(path))
        else:
            logger.debug("Ignoring unsupported file %s", path)

    def read_metadata_file(self, path: Path) -> Dict[str, str]:
        return parse_metadata(path.read_text(encoding="utf-8"), str(path))

    def load_markdown(self, builder: ProjectBuilder, path: Path) -> None:
        paragraphs, metadata = self.markdown.read(path.read_text(encoding="utf-8"), str(path))
        builder.found_text_document(paragraphs, metadata, *file_times(path))

    def load_text_file(self, builder: ProjectBuilder, path: Path) -> None:
        paragraphs = read_plain_text(path.read_text(encoding="utf-8"))
        builder.found_text_document(paragraphs, {}, *file_times(path))

    def load_youtube_video(self, builder: ProjectBuilder, path: Path) -> None:
        """``.youtube`` files are YAML with a required ``id`` and optional metadata."""
        metadata = self.read_metadata_file(path)
        if not metadata.get("id"):
            logger.warning("Youtube file does not contain id: %s", path)
            return
        builder.found_youtube_video(metadata["id"], metadata, *file_times(path))


def load_project(root: Path, title: Optional[str] = None, owner: Optional[str] = None) -> Project:
    return ProjectParser().load_project(root, title=title, owner=owner)
