"""
Stable, URL-safe identifiers derived from titles.

Every page of a generated site lives under a directory named after an id.
Ids are unique for one run: the first title that normalizes to a slug gets the
bare slug, later ones get ``slug2``, ``slug3`` and so on.
"""

from __future__ import annotations

import re
import threading
from typing import Dict


_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]")


def slugify(title: str) -> str:
    """Lowercase and replace every character outside [a-z0-9] with '_'."""
    return _NON_SLUG_CHARS.sub("_", title.lower())


class IdGenerator:
    """Collision-aware slug generator shared by everything built in one run."""

    def __init__(self) -> None:
        self._counter: Dict[str, int] = {}
        self._lock = threading.Lock()

    def generate(self, title: str) -> str:
        slug = slugify(title)
        with self._lock:
            seen = self._counter.get(slug)
            if seen is None:
                self._counter[slug] = 1
                return slug
            self._counter[slug] = seen + 1
            return f"{slug}{seen + 1}"

    def reset(self) -> None:
        with self._lock:
            self._counter.clear()

    def __len__(self) -> int:
        return len(self._counter)
