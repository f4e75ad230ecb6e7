"""Message body markup extraction (core domain).

Chat bodies arrive as small HTML fragments. Plain text is kept as-is, the
hidden team span is turned into a team tag, and every other element is kept
as its original source so links and images survive in the transcript.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import List, Optional, Union

from core.errors import MarkupError
from core.models import ExtractedMessage

LOGGER = logging.getLogger(__name__)

TEAM_SPAN_TAG = "span"
TEAM_SPAN_CLASSES = ["teamColorSpan"]
TEAM_PREFIX = "-team"
TEAM_SUFFIX = "-"

# Elements that never take an end tag.
VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)


@dataclass
class _Text:
    start: int
    end: int


@dataclass
class _Element:
    tag: str
    classes: List[str]
    start: int
    end: int = -1
    children: List["_Node"] = field(default_factory=list)


@dataclass
class _Other:
    kind: str
    content: str


_Node = Union[_Text, _Element, _Other]


def _line_offsets(markup: str) -> List[int]:
    offsets = [0]
    for index, char in enumerate(markup):
        if char == "\n":
            offsets.append(index + 1)
    return offsets


class _FragmentParser(HTMLParser):
    """Build a shallow node tree where every node remembers its source span."""

    def __init__(self, markup: str) -> None:
        # Entity references must stay verbatim in the transcript.
        super().__init__(convert_charrefs=False)
        self._markup = markup
        self._line_starts = _line_offsets(markup)
        self._open: List[_Element] = []
        self._cursor = 0
        self.roots: List[_Node] = []

    def parse(self) -> List[_Node]:
        self.feed(self._markup)
        self.close()
        self._fill_gap(len(self._markup))
        if self._open:
            raise MarkupError(f"Unclosed <{self._open[-1].tag}> element in message")
        return self.roots

    def _offset(self) -> int:
        line, column = self.getpos()
        return self._line_starts[line - 1] + column

    def _siblings(self) -> List[_Node]:
        if self._open:
            return self._open[-1].children
        return self.roots

    def _append_text(self, start: int, end: int) -> None:
        siblings = self._siblings()
        # Data and entity references next to each other form one text node.
        if siblings and isinstance(siblings[-1], _Text) and siblings[-1].end == start:
            siblings[-1].end = end
            return
        siblings.append(_Text(start, end))

    def _fill_gap(self, start: int) -> None:
        # HTMLParser swallows some characters without reporting them (the "&"
        # of a trailing "Q&A"); source no node covers is plain text.
        if start > self._cursor:
            self._append_text(self._cursor, start)
            self._cursor = start

    def _consume(self, start: int, end: int) -> None:
        self._fill_gap(start)
        self._cursor = max(self._cursor, end)

    def _add_text(self, start: int, end: int) -> None:
        self._fill_gap(start)
        self._append_text(start, end)
        self._cursor = max(self._cursor, end)

    def _markup_end(self, start: int) -> int:
        terminator = "-->" if self._markup.startswith("<!--", start) else ">"
        close = self._markup.find(terminator, start + 1)
        if close < 0:
            return len(self._markup)
        return close + len(terminator)

    def _add_other(self, kind: str, content: str) -> None:
        start = self._offset()
        self._consume(start, self._markup_end(start))
        self._siblings().append(_Other(kind, content))

    def _reference_end(self, start: int, name: str, marker: str) -> int:
        end = start + len(marker) + len(name)
        if self._markup.startswith(";", end):
            end += 1
        return end

    def _new_element(self, tag: str, attrs: list) -> _Element:
        classes: List[str] = []
        for attr_name, value in attrs:
            if attr_name == "class" and value:
                classes = value.split()
        return _Element(tag=tag, classes=classes, start=self._offset())

    def handle_starttag(self, tag: str, attrs: list) -> None:
        element = self._new_element(tag, attrs)
        self._consume(element.start, element.start + len(self.get_starttag_text() or ""))
        self._siblings().append(element)
        if tag in VOID_ELEMENTS:
            element.end = self._cursor
            return
        self._open.append(element)

    def handle_startendtag(self, tag: str, attrs: list) -> None:
        element = self._new_element(tag, attrs)
        element.end = element.start + len(self.get_starttag_text() or "")
        self._consume(element.start, element.end)
        self._siblings().append(element)

    def handle_endtag(self, tag: str) -> None:
        start = self._offset()
        close = self._markup.find(">", start)
        end = close + 1 if close >= 0 else len(self._markup)
        self._consume(start, end)
        if not self._open:
            if tag in VOID_ELEMENTS:
                LOGGER.debug("Ignoring stray </%s> in message", tag)
                return
            raise MarkupError(f"Unexpected </{tag}> with no open element")
        current = self._open[-1]
        if current.tag != tag:
            if tag in VOID_ELEMENTS:
                LOGGER.debug("Ignoring stray </%s> in message", tag)
                return
            raise MarkupError(f"Mismatched </{tag}>, expected </{current.tag}>")
        self._open.pop()
        current.end = end

    def handle_data(self, data: str) -> None:
        start = self._offset()
        self._add_text(start, start + len(data))

    def handle_entityref(self, name: str) -> None:
        start = self._offset()
        self._add_text(start, self._reference_end(start, name, "&"))

    def handle_charref(self, name: str) -> None:
        start = self._offset()
        self._add_text(start, self._reference_end(start, name, "&#"))

    def handle_comment(self, data: str) -> None:
        self._add_other("comment", data)

    def handle_decl(self, decl: str) -> None:
        self._add_other("declaration", decl)

    def unknown_decl(self, data: str) -> None:
        self._add_other("declaration", data)

    def handle_pi(self, data: str) -> None:
        self._add_other("processing instruction", data)


def team_from_span_text(text: str) -> Optional[str]:
    """Convert team span text (``-team<name>-``) into a team name."""

    if not text.startswith(TEAM_PREFIX):
        return None
    if not text.endswith(TEAM_SUFFIX):
        return None
    name = text[len(TEAM_PREFIX) : len(text) - len(TEAM_SUFFIX)]
    if not name:
        return None
    return name


def _is_team_span(element: _Element) -> bool:
    return element.tag == TEAM_SPAN_TAG and element.classes == TEAM_SPAN_CLASSES


def extract_markup(markup: str) -> ExtractedMessage:
    """Split a message body into plain text and an optional team tag.

    Only direct children of the fragment are inspected:
    - text is kept verbatim (entities included);
    - a ``span.teamColorSpan`` never reaches the text, its first text child
      may set the team;
    - any other element is kept as its original source, nested tags and all.

    Raises MarkupError when the fragment is structurally broken.
    """

    nodes = _FragmentParser(markup).parse()
    parts: List[str] = []
    team: Optional[str] = None
    for node in nodes:
        if isinstance(node, _Text):
            parts.append(markup[node.start : node.end])
        elif isinstance(node, _Element) and _is_team_span(node):
            first = node.children[0] if node.children else None
            if isinstance(first, _Text):
                named = team_from_span_text(markup[first.start : first.end])
                if named is not None:
                    team = named
        elif isinstance(node, _Element):
            parts.append(markup[node.start : node.end])
        else:
            LOGGER.debug("Found an unexpected member in message: %r", node)
    return ExtractedMessage(text="".join(parts).strip(), team=team)
