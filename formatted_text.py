"""
Formatted text documents: paragraphs of decorated text fragments.

Documents are immutable trees. They render to HTML and to short escaped
previews that share one character budget across several documents.
"""

from __future__ import annotations

import html
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple, Union


ELLIPSIS = "..."
MAX_HTML_HEADING = 6


def _escape(text: str) -> str:
    return html.escape(text)


# -- text fragments --

@dataclass(frozen=True)
class PlainText:
    text: str

    def to_html(self) -> str:
        return _escape(self.text)

    def to_plain_text(self) -> str:
        return self.text

    def to_preview(self, out: List[str], budget: int) -> int:
        if budget <= 0:
            return 0
        if len(self.text) > budget:
            out.append(_escape(self.text[:budget]))
            out.append(ELLIPSIS)
            return 0
        out.append(_escape(self.text))
        return budget - len(self.text)


@dataclass(frozen=True)
class FragmentSequence:
    fragments: Tuple["TextFragment", ...] = ()

    @staticmethod
    def create(fragments: Sequence["TextFragment"]) -> "TextFragment":
        if len(fragments) == 1:
            return fragments[0]
        return FragmentSequence(tuple(fragments))

    def to_html(self) -> str:
        return "".join(f.to_html() for f in self.fragments)

    def to_plain_text(self) -> str:
        return "".join(f.to_plain_text() for f in self.fragments)

    def to_preview(self, out: List[str], budget: int) -> int:
        for fragment in self.fragments:
            if budget <= 0:
                break
            budget = fragment.to_preview(out, budget)
        return budget


@dataclass(frozen=True)
class InlineImage:
    source: str
    alt: str = ""

    def to_html(self) -> str:
        return f'<img src="{_escape(self.source)}" alt="{_escape(self.alt)}" />'

    def to_plain_text(self) -> str:
        return ""

    def to_preview(self, out: List[str], budget: int) -> int:
        return budget


@dataclass(frozen=True)
class _Decorated:
    inner: "TextFragment"

    # subclasses set the fixed tag pair
    tag = ""

    def _open(self) -> str:
        return f"<{self.tag}>"

    def to_html(self) -> str:
        return f"{self._open()}{self.inner.to_html()}</{self.tag}>"

    def to_plain_text(self) -> str:
        return self.inner.to_plain_text()

    def to_preview(self, out: List[str], budget: int) -> int:
        return self.inner.to_preview(out, budget)


@dataclass(frozen=True)
class Emphasis(_Decorated):
    tag = "em"


@dataclass(frozen=True)
class StrongEmphasis(_Decorated):
    tag = "strong"


@dataclass(frozen=True)
class Link(_Decorated):
    target: str = ""

    tag = "a"

    def _open(self) -> str:
        return f'<a href="{_escape(self.target)}">'


TextFragment = Union[PlainText, FragmentSequence, InlineImage, Emphasis, StrongEmphasis, Link]


# -- paragraphs --

@dataclass(frozen=True)
class Heading:
    text: TextFragment
    level: int = 1

    def to_html(self) -> str:
        tag = f"h{min(self.level + 1, MAX_HTML_HEADING)}"
        return f"<{tag}>{self.text.to_html()}</{tag}>"

    def to_preview(self, out: List[str], budget: int) -> int:
        return self.text.to_preview(out, budget)


@dataclass(frozen=True)
class TextParagraph:
    text: TextFragment

    def to_html(self) -> str:
        return f"<p>{self.text.to_html()}</p>"

    def to_preview(self, out: List[str], budget: int) -> int:
        return self.text.to_preview(out, budget)


@dataclass(frozen=True)
class BulletList:
    items: Tuple["Paragraph", ...] = ()

    def to_html(self) -> str:
        inner = "".join(f"<li>{item.to_html()}</li>" for item in self.items)
        return f"<ul>{inner}</ul>"

    def to_preview(self, out: List[str], budget: int) -> int:
        return _preview_paragraphs(self.items, out, budget)


@dataclass(frozen=True)
class BlockQuote:
    paragraphs: Tuple["Paragraph", ...] = ()

    def to_html(self) -> str:
        return "<blockquote>" + "".join(p.to_html() for p in self.paragraphs) + "</blockquote>"

    def to_preview(self, out: List[str], budget: int) -> int:
        return _preview_paragraphs(self.paragraphs, out, budget)


@dataclass(frozen=True)
class CodeBlock:
    source: str
    language: str = ""

    def to_html(self) -> str:
        cls = f' class="language-{_escape(self.language)}"' if self.language else ""
        return f"<pre><code{cls}>{_escape(self.source)}</code></pre>"

    def to_preview(self, out: List[str], budget: int) -> int:
        return budget


@dataclass(frozen=True)
class HorizontalRow:
    def to_html(self) -> str:
        return "<hr />"

    def to_preview(self, out: List[str], budget: int) -> int:
        return budget


Paragraph = Union[Heading, TextParagraph, BulletList, BlockQuote, CodeBlock, HorizontalRow]


def separate_preview(out: List[str], start: int) -> None:
    """Put one space before the text appended to ``out`` at ``start``, unless there already is one."""
    if len(out) <= start or start == 0:
        return
    if out[start - 1].endswith(" ") or out[start].startswith(" "):
        return
    out.insert(start, " ")


def _preview_paragraphs(paragraphs: Sequence[Paragraph], out: List[str], budget: int) -> int:
    """Preview paragraphs in order, one space between paragraphs that emit text."""
    for paragraph in paragraphs:
        if budget <= 0:
            break
        start = len(out)
        budget = paragraph.to_preview(out, budget)
        separate_preview(out, start)
    return budget


# -- documents --

@dataclass(frozen=True)
class FormattedDocument:
    """A markdown or plain-text file as leaf content of an entity."""

    paragraphs: Tuple[Paragraph, ...]
    metadata: Dict[str, str] = field(default_factory=dict, compare=False)
    created_at: datetime = datetime.min
    last_updated_at: datetime = datetime.min
    size_bytes: int = 0

    def to_html(self) -> str:
        return "".join(p.to_html() for p in self.paragraphs)

    def to_preview(self, out: List[str], budget: int) -> int:
        """Append a preview of at most ``budget`` characters; return the rest."""
        return _preview_paragraphs(self.paragraphs, out, budget)

    def preview(self, max_length: int) -> str:
        out: List[str] = []
        self.to_preview(out, max_length)
        return "".join(out)

    @property
    def title(self) -> Optional[str]:
        if self.metadata.get("title"):
            return self.metadata["title"]
        for p in self.paragraphs:
            if isinstance(p, Heading) and p.level <= 1:
                return p.text.to_plain_text()
        # a leading text paragraph contributes its first line
        if self.paragraphs and isinstance(self.paragraphs[0], TextParagraph):
            first_line = self.paragraphs[0].text.to_plain_text().split("\n", 1)[0]
            if first_line.strip():
                return first_line
        return None
