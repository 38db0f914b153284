from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from site_ids import IdGenerator

# 1x1 transparent PNG
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000154a24f5d0000000049454e44ae426082"
)


@pytest.fixture
def ids() -> IdGenerator:
    return IdGenerator()


@pytest.fixture
def when() -> datetime:
    return datetime(2024, 6, 3, 16, 5)


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """A small content folder: one article with a sub-article and a sub-sub-article."""
    root = tmp_path / "content"
    launch = root / "launch"
    photo = launch / "press" / "photo1"
    photo.mkdir(parents=True)
    (root / "site.yml").write_text("title: My Site\nowner: Ann\n", encoding="utf-8")
    (launch / "article.yml").write_text(
        "title: Launch\ndate: 2024-06-03\ntopics: [Space, Rockets]\n", encoding="utf-8"
    )
    (launch / "intro.md").write_text("# Launch day\n\nFish & chips for everyone.\n", encoding="utf-8")
    (launch / "press" / "notes.txt").write_text("Press notes\nSecond line\n\nMore text.\n", encoding="utf-8")
    (photo / "pic.png").write_bytes(PNG_BYTES)
    (root / "_drafts").mkdir()
    (root / "_drafts" / "draft.md").write_text("# Draft\n", encoding="utf-8")
    (root / ".hidden").mkdir()
    return root
