"""
Markdown and plain text → formatted text paragraphs.

Markdown is parsed with the "markdown" package. Instead of serializing to
HTML, a tree processor captures the element tree after inline processing,
which is then mapped onto the paragraph/fragment model.
"""

from __future__ import annotations

import html
import logging
import re
from typing import Dict, List, Optional, Tuple
from xml.etree.ElementTree import Element

import markdown
import yaml
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor
from markdown.util import AMP_SUBSTITUTE, ETX, STX

from formatted_text import (
    BlockQuote,
    BulletList,
    CodeBlock,
    Emphasis,
    FragmentSequence,
    Heading,
    HorizontalRow,
    InlineImage,
    Link,
    Paragraph,
    PlainText,
    StrongEmphasis,
    TextFragment,
    TextParagraph,
)


logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(STX + r"wzxhzdk:(\d+)" + ETX)
_ESCAPED_CHAR_RE = re.compile(STX + r"(\d+)" + ETX)
_STASHED_CODE_RE = re.compile(
    r'<pre[^>]*><code(?:\s+class="(?:language-)?(?P<lang>[^"]*)")?[^>]*>(?P<code>.*?)</code></pre>',
    re.DOTALL,
)
_ENTITY_RE = re.compile(r"^&(#\d+|#x[0-9a-fA-F]+|\w+);$")
_FRONT_MATTER_RE = re.compile(r"\A\ufeff?---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)

_HEADINGS = {f"h{n}": n for n in range(1, 7)}
_BLOCK_TAGS = set(_HEADINGS) | {"p", "ul", "ol", "blockquote", "pre", "hr", "div", "table"}


# -- metadata --

def _metadata_value(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def flatten_metadata(data, prefix: str = "") -> Dict[str, str]:
    """Flatten parsed YAML into string key/value pairs.

    Lists become ``key[0]``, ``key[1]`` (a one-element list stays ``key``),
    nested mappings become ``key.sub``.
    """
    result: Dict[str, str] = {}
    if isinstance(data, dict):
        for key, value in data.items():
            name = f"{prefix}.{key}" if prefix else str(key)
            result.update(flatten_metadata(value, name))
    elif isinstance(data, list):
        if len(data) == 1:
            result.update(flatten_metadata(data[0], prefix))
        else:
            for idx, value in enumerate(data):
                result.update(flatten_metadata(value, f"{prefix}[{idx}]"))
    elif prefix:
        result[prefix] = _metadata_value(data)
    return result


def parse_metadata(text: str, source: str = "<string>") -> Dict[str, str]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        logger.warning("Invalid YAML in %s: %s", source, exc)
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Metadata in %s is not a mapping, ignoring it", source)
        return {}
    return flatten_metadata(data)


def split_front_matter(text: str) -> Tuple[str, str]:
    """Return (front matter yaml, body); front matter is '' when absent."""
    match = _FRONT_MATTER_RE.match(text)
    if not match:
        return "", text.lstrip("\ufeff")
    return match.group(1), text[match.end():]


# -- markdown --

class _CaptureTree(Treeprocessor):
    def run(self, root: Element) -> None:
        self.md.captured_root = root


class _CaptureTreeExtension(Extension):
    def extendMarkdown(self, md: markdown.Markdown) -> None:
        # after "inline" (20) and "unescape" (0)
        md.treeprocessors.register(_CaptureTree(md), "capture_tree", -10)


class MarkdownReader:
    def __init__(self) -> None:
        self._md = markdown.Markdown(extensions=["fenced_code", _CaptureTreeExtension()])

    def read(self, text: str, source: str = "<string>") -> Tuple[List[Paragraph], Dict[str, str]]:
        front_matter, body = split_front_matter(text)
        metadata = parse_metadata(front_matter, source) if front_matter else {}
        self._md.reset()
        self._md.captured_root = None
        self._md.convert(body)
        root = self._md.captured_root
        if root is None:
            return [], metadata
        return self._paragraphs(list(root)), metadata

    # block level

    def _paragraphs(self, elements: List[Element]) -> List[Paragraph]:
        result: List[Paragraph] = []
        for el in elements:
            paragraph = self._paragraph(el)
            if paragraph is not None:
                result.append(paragraph)
        return result

    def _paragraph(self, el: Element) -> Optional[Paragraph]:
        tag = el.tag
        if tag in _HEADINGS:
            return Heading(self._fragments(el), _HEADINGS[tag])
        if tag == "hr":
            return HorizontalRow()
        if tag == "p":
            stashed = self._stashed_block(el)
            if stashed is not None:
                return stashed or None
            return TextParagraph(self._fragments(el))
        if tag in ("ul", "ol"):
            items = [self._list_item(li) for li in el if li.tag == "li"]
            return BulletList(tuple(i for i in items if i is not None))
        if tag == "blockquote":
            return BlockQuote(tuple(self._paragraphs(list(el))))
        if tag == "pre":
            code = el.find("code")
            source = (code.text if code is not None else el.text) or ""
            return CodeBlock(html.unescape(self._unescape(source)), "")
        return None

    def _list_item(self, li: Element) -> Optional[Paragraph]:
        has_inline = (li.text or "").strip() or any(child.tag not in _BLOCK_TAGS for child in li)
        if has_inline:
            return TextParagraph(self._fragments(li))
        for child in li:
            paragraph = self._paragraph(child)
            if paragraph is not None:
                return paragraph
        return None

    def _stashed_block(self, el: Element):
        """Resolve a paragraph that only holds a stash placeholder.

        Returns None for ordinary paragraphs, a CodeBlock for fenced code and
        False for raw HTML blocks, which are dropped.
        """
        if len(el):
            return None
        match = _PLACEHOLDER_RE.fullmatch((el.text or "").strip())
        if not match:
            return None
        raw = self._stash(int(match.group(1)))
        code = _STASHED_CODE_RE.fullmatch(raw.strip())
        if code:
            return CodeBlock(html.unescape(code.group("code")), code.group("lang") or "")
        return False

    # inline level

    def _fragments(self, el: Element) -> TextFragment:
        parts: List[TextFragment] = []
        if el.text:
            parts.append(PlainText(self._unescape(el.text)))
        for child in el:
            if child.tag in _BLOCK_TAGS:
                # nested lists inside a list item are not inline text
                continue
            if child.tag == "em":
                parts.append(Emphasis(self._fragments(child)))
            elif child.tag == "strong":
                parts.append(StrongEmphasis(self._fragments(child)))
            elif child.tag == "a":
                parts.append(Link(self._fragments(child), target=self._unescape(child.get("href", ""))))
            elif child.tag == "img":
                parts.append(InlineImage(self._unescape(child.get("src", "")), self._unescape(child.get("alt", ""))))
            elif child.tag == "code":
                parts.append(PlainText(html.unescape(self._unescape(child.text or ""))))
            elif child.tag == "br":
                parts.append(PlainText("\n"))
            else:
                parts.append(PlainText(self._unescape("".join(child.itertext()))))
            if child.tail:
                parts.append(PlainText(self._unescape(child.tail)))
        return FragmentSequence.create([p for p in parts if not (isinstance(p, PlainText) and not p.text)])

    def _stash(self, idx: int) -> str:
        blocks = self._md.htmlStash.rawHtmlBlocks
        return str(blocks[idx]) if idx < len(blocks) else ""

    def _unescape(self, text: str) -> str:
        def _placeholder(match: re.Match) -> str:
            raw = self._stash(int(match.group(1)))
            # inline HTML is dropped, character entities are kept as text
            return html.unescape(raw) if _ENTITY_RE.match(raw) else ""

        text = _PLACEHOLDER_RE.sub(_placeholder, text).replace(AMP_SUBSTITUTE, "&")
        return _ESCAPED_CHAR_RE.sub(lambda m: chr(int(m.group(1))), text)


def read_plain_text(text: str) -> List[Paragraph]:
    """Plain text: paragraphs are separated by blank lines, no formatting."""
    paragraphs: List[Paragraph] = []
    current: List[str] = []
    for line in text.lstrip("\ufeff").splitlines():
        if line.strip():
            current.append(line)
        elif current:
            paragraphs.append(TextParagraph(PlainText("\n".join(current))))
            current = []
    if current:
        paragraphs.append(TextParagraph(PlainText("\n".join(current))))
    return paragraphs
