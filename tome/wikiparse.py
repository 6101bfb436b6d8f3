"""A small wikitext parser producing a node tree for HTML rendering.

Bold and italic markers are toggle nodes without children. Paragraphs are not
nodes of their own: inline content follows block nodes, and a blank line
yields a ``ParagraphBreak``. Extension tags (``<ref>``, ``<nowiki>`` and the
like) become ``Tag`` nodes with lower-cased names; plain HTML formatting tags
are dropped; anything that only looks like a tag stays as text.
"""

from __future__ import annotations

import enum
import html
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

_MAX_DEPTH = 100


class ParseError(ValueError):
    """Raised when wikitext cannot be parsed, e.g. nesting is too deep."""


@dataclass
class Text:
    value: str


@dataclass
class CharacterEntity:
    character: str


@dataclass
class Bold:
    """Toggles bold on or off."""


@dataclass
class Italic:
    """Toggles italic on or off."""


@dataclass
class BoldItalic:
    """Toggles bold italic on or off."""


@dataclass
class ParagraphBreak:
    """A blank line separating paragraphs."""


@dataclass
class Heading:
    level: int
    nodes: List["Node"] = field(default_factory=list)


@dataclass
class HorizontalDivider:
    """A ``----`` line."""


@dataclass
class Link:
    """An internal link; ``text`` is empty when no label was given."""

    target: str
    text: List["Node"] = field(default_factory=list)


@dataclass
class ExternalLink:
    """Bracketed external link; the first text token is the URL."""

    nodes: List["Node"] = field(default_factory=list)


@dataclass
class ListItem:
    nodes: List["Node"] = field(default_factory=list)


@dataclass
class UnorderedList:
    items: List[ListItem] = field(default_factory=list)


@dataclass
class OrderedList:
    items: List[ListItem] = field(default_factory=list)


class DefinitionItemType(enum.Enum):
    TERM = "term"
    DETAILS = "details"


@dataclass
class DefinitionListItem:
    type: DefinitionItemType
    nodes: List["Node"] = field(default_factory=list)


@dataclass
class DefinitionList:
    items: List[DefinitionListItem] = field(default_factory=list)


@dataclass
class Template:
    name: List["Node"] = field(default_factory=list)
    parameters: List[str] = field(default_factory=list)


@dataclass
class Image:
    target: str
    text: List["Node"] = field(default_factory=list)


@dataclass
class Tag:
    name: str
    nodes: List["Node"] = field(default_factory=list)


@dataclass
class Preformatted:
    nodes: List["Node"] = field(default_factory=list)


class TableCellType(enum.Enum):
    HEADING = "heading"
    ORDINARY = "ordinary"


@dataclass
class TableCell:
    type: TableCellType
    content: List["Node"] = field(default_factory=list)


@dataclass
class TableRow:
    cells: List[TableCell] = field(default_factory=list)


@dataclass
class Table:
    """A table; each caption is a list of nodes."""

    captions: List[List["Node"]] = field(default_factory=list)
    rows: List[TableRow] = field(default_factory=list)


@dataclass
class Comment:
    text: str = ""


@dataclass
class Category:
    target: str


@dataclass
class Redirect:
    target: str


@dataclass
class MagicWord:
    name: str


@dataclass
class Parameter:
    name: str


Node = Union[
    Text, CharacterEntity, Bold, Italic, BoldItalic, ParagraphBreak, Heading,
    HorizontalDivider, Link, ExternalLink, UnorderedList, OrderedList,
    DefinitionList, Template, Image, Tag, Preformatted, Table, Comment,
    Category, Redirect, MagicWord, Parameter,
]

_EXTENSION_TAGS = frozenset({
    "ref", "references", "nowiki", "pre", "math", "gallery", "source",
    "syntaxhighlight", "poem", "timeline", "score", "chem", "ce",
    "templatedata", "includeonly", "noinclude", "onlyinclude",
})
_RAW_TAGS = frozenset({"nowiki", "pre", "math", "source", "syntaxhighlight", "score", "timeline", "chem", "ce"})
_HTML_TAGS = frozenset({
    "b", "i", "u", "s", "br", "span", "div", "small", "big", "sup", "sub",
    "code", "blockquote", "center", "font", "p", "hr", "del", "ins", "tt",
    "cite", "abbr", "strike", "em", "strong", "var", "kbd", "samp", "q",
    "table", "tr", "td", "th", "caption", "ul", "ol", "li", "dl", "dt", "dd",
    "h1", "h2", "h3", "h4", "h5", "h6", "mark", "wbr", "bdi", "rb", "rp",
    "rt", "ruby", "data", "time",
})

_TAG_RE = re.compile(r"<(/?)([A-Za-z][A-Za-z0-9]*)(\s[^<>]*?)?\s*(/?)>")
_ENTITY_RE = re.compile(r"&(#[0-9]+|#[xX][0-9a-fA-F]+|[A-Za-z][A-Za-z0-9]*);")
_MAGIC_RE = re.compile(r"__([A-Z]+)__")
_EXTLINK_RE = re.compile(r"\[(?:https?:|ftp:|mailto:|//)", re.IGNORECASE)
_HEADING_RE = re.compile(r"(={1,6})(.+)\1[ \t]*$")
_REDIRECT_RE = re.compile(r"#REDIRECT\s*:?\s*\[\[([^\]|\n]+)(?:\|[^\]\n]*)?\]\]", re.IGNORECASE)
_HR_RE = re.compile(r"-{4,}")

_Handled = Optional[Tuple[List[Node], int]]


def parse(wikitext: str) -> List[Node]:
    """Parse ``wikitext`` into a list of nodes."""
    return _Parser(wikitext).document()


def _merge(nodes: List[Node]) -> List[Node]:
    merged: List[Node] = []
    for node in nodes:
        if isinstance(node, Text):
            if not node.value:
                continue
            if merged and isinstance(merged[-1], Text):
                merged[-1] = Text(merged[-1].value + node.value)
                continue
        merged.append(node)
    return merged


def _find_close(text: str, opener: str, closer: str, start: int) -> int:
    depth = 0
    i = start
    while i < len(text):
        if text.startswith(opener, i):
            depth += 1
            i += len(opener)
        elif text.startswith(closer, i):
            depth -= 1
            if depth == 0:
                return i
            i += len(closer)
        else:
            i += 1
    return -1


def _split_top(text: str, maxsplit: int = -1) -> List[str]:
    """Split on ``|`` outside nested links and templates."""
    parts: List[str] = []
    depth = 0
    start = 0
    i = 0
    while i < len(text):
        pair = text[i:i + 2]
        if pair in ("[[", "{{"):
            depth += 1
            i += 2
        elif pair in ("]]", "}}"):
            depth = max(0, depth - 1)
            i += 2
        elif text[i] == "|" and depth == 0 and (maxsplit < 0 or len(parts) < maxsplit):
            parts.append(text[start:i])
            i += 1
            start = i
        else:
            i += 1
    parts.append(text[start:])
    return parts


class _Parser:
    def __init__(self, text: str, depth: int = 0) -> None:
        if depth > _MAX_DEPTH:
            raise ParseError("wikitext nesting is too deep")
        self.text = text
        self.depth = depth
        self.pos = 0

    def _sub(self, text: str) -> List[Node]:
        return _Parser(text, self.depth + 1).inline()

    # --- block level ---------------------------------------------------

    def document(self) -> List[Node]:
        text = self.text
        lines = text.split("\n")
        nodes: List[Node] = []
        pending_break = False
        prev_para = False
        pos = 0
        while pos < len(text):
            eol = text.find("\n", pos)
            if eol == -1:
                eol = len(text)
            line = text[pos:eol]
            if not line.strip():
                pending_break = bool(nodes)
                prev_para = False
                pos = eol + 1
                continue
            if pending_break:
                nodes.append(ParagraphBreak())
                pending_break = False

            block = self._block(pos, line)
            if block is not None:
                new_nodes, pos = block
                nodes.extend(new_nodes)
                prev_para = False
                continue

            if prev_para:
                nodes.append(Text("\n"))
            self.pos = pos
            nodes.extend(self.inline(stop_at_newline=True))
            pos = self.pos
            if pos < len(text) and text[pos] == "\n":
                pos += 1
            prev_para = True
        del lines
        return _merge(nodes)

    def _lines_from(self, pos: int, accept) -> Tuple[List[str], int]:
        text = self.text
        collected: List[str] = []
        while pos < len(text):
            eol = text.find("\n", pos)
            if eol == -1:
                eol = len(text)
            line = text[pos:eol]
            if not accept(line):
                break
            collected.append(line)
            pos = eol + 1
        return collected, pos

    def _block(self, pos: int, line: str) -> _Handled:
        text = self.text
        end = text.find("\n", pos)
        next_pos = len(text) if end == -1 else end + 1

        if pos == 0:
            m = _REDIRECT_RE.match(line)
            if m:
                return [Redirect(m.group(1).strip())], next_pos

        m = _HEADING_RE.match(line)
        if m and m.group(2).strip():
            return [Heading(len(m.group(1)), self._sub(m.group(2).strip()))], next_pos

        m = _HR_RE.match(line)
        if m:
            nodes: List[Node] = [HorizontalDivider()]
            rest = line[m.end():].strip()
            if rest:
                nodes.extend(self._sub(rest))
            return nodes, next_pos

        first = line[0]
        if first in "*#":
            lines, after = self._lines_from(pos, lambda ln: ln[:1] == first)
            items = [ListItem(self._sub(ln.lstrip("*#:;").strip())) for ln in lines]
            cls = UnorderedList if first == "*" else OrderedList
            return [cls(items)], after
        if first in ";:":
            lines, after = self._lines_from(pos, lambda ln: ln[:1] in (";", ":"))
            return [DefinitionList(self._definition_items(lines))], after

        if line.lstrip().startswith("{|"):
            return self._table(pos)

        if first == " ":
            lines, after = self._lines_from(pos, lambda ln: ln[:1] == " " and bool(ln.strip()))
            joined = "\n".join(ln[1:] for ln in lines)
            return [Preformatted(self._sub(joined))], after
        return None

    def _definition_items(self, lines: List[str]) -> List[DefinitionListItem]:
        items: List[DefinitionListItem] = []
        for ln in lines:
            marker = ln[0]
            body = ln.lstrip("*#:;")
            if marker == ";":
                term, sep, details = body.partition(":")
                items.append(DefinitionListItem(DefinitionItemType.TERM, self._sub(term.strip())))
                if sep:
                    items.append(DefinitionListItem(DefinitionItemType.DETAILS, self._sub(details.strip())))
            else:
                items.append(DefinitionListItem(DefinitionItemType.DETAILS, self._sub(body.strip())))
        return items

    def _table(self, pos: int) -> Tuple[List[Node], int]:
        text = self.text
        eol = text.find("\n", pos)
        pos = len(text) if eol == -1 else eol + 1
        body, pos = self._lines_from(pos, lambda ln: not ln.lstrip().startswith("|}"))
        if pos < len(text):
            eol = text.find("\n", pos)
            pos = len(text) if eol == -1 else eol + 1

        captions: List[str] = []
        rows: List[List[List]] = [[]]
        last: Optional[List] = None
        for raw in body:
            s = raw.strip()
            if s.startswith("|+"):
                captions.append(s[2:])
                last = None
            elif s.startswith("|-"):
                rows.append([])
                last = None
            elif s.startswith("!"):
                for chunk in re.split(r"!!|\|\|", s[1:]):
                    last = [TableCellType.HEADING, chunk]
                    rows[-1].append(last)
            elif s.startswith("|"):
                for chunk in s[1:].split("||"):
                    last = [TableCellType.ORDINARY, chunk]
                    rows[-1].append(last)
            elif last is not None:
                last[1] += "\n" + raw
            elif captions:
                captions[-1] += "\n" + raw

        def content(raw_cell: str) -> List[Node]:
            parts = _split_top(raw_cell, maxsplit=1)
            return self._sub(parts[-1].strip())

        table = Table(
            captions=[content(c) for c in captions],
            rows=[
                TableRow([TableCell(kind, content(raw_cell)) for kind, raw_cell in row])
                for row in rows if row
            ],
        )
        return [table], pos

    # --- inline level --------------------------------------------------

    def inline(self, stop_at_newline: bool = False) -> List[Node]:
        text = self.text
        out: List[Node] = []
        buf: List[str] = []
        handlers = {
            "<": self._tag, "'": self._quotes, "[": self._bracket,
            "{": self._brace, "_": self._magic, "&": self._entity,
        }
        while self.pos < len(text):
            ch = text[self.pos]
            if ch == "\n" and stop_at_newline:
                break
            handler = handlers.get(ch)
            handled = handler() if handler else None
            if handled is None:
                buf.append(ch)
                self.pos += 1
                continue
            if buf:
                out.append(Text("".join(buf)))
                buf = []
            new_nodes, self.pos = handled
            out.extend(new_nodes)
        if buf:
            out.append(Text("".join(buf)))
        return _merge(out)

    def _quotes(self) -> _Handled:
        text, pos = self.text, self.pos
        end = pos
        while end < len(text) and text[end] == "'":
            end += 1
        n = end - pos
        if n < 2:
            return None
        if n == 2:
            return [Italic()], end
        if n == 3:
            return [Bold()], end
        if n == 4:
            return [Text("'"), Bold()], end
        return [Text("'" * (n - 5)), BoldItalic()], end

    def _bracket(self) -> _Handled:
        text, pos = self.text, self.pos
        if text.startswith("[[", pos):
            end = _find_close(text, "[[", "]]", pos)
            if end == -1:
                return None
            inner = text[pos + 2:end]
            if "\n" in inner:
                return None
            parts = _split_top(inner, maxsplit=1)
            target = parts[0].strip()
            if not target:
                return None
            label = self._sub(parts[1]) if len(parts) > 1 else []
            lower = target.lower()
            if lower.startswith("category:"):
                return [Category(target[len("category:"):].strip())], end + 2
            if lower.startswith(("file:", "image:")):
                return [Image(target, label)], end + 2
            return [Link(target, label)], end + 2
        if _EXTLINK_RE.match(text, pos):
            close = text.find("]", pos)
            newline = text.find("\n", pos)
            if close == -1 or (newline != -1 and newline < close):
                return None
            return [ExternalLink(self._sub(text[pos + 1:close]))], close + 1
        return None

    def _brace(self) -> _Handled:
        text, pos = self.text, self.pos
        if text.startswith("{{{", pos):
            end = _find_close(text, "{{{", "}}}", pos)
            if end != -1:
                name = _split_top(text[pos + 3:end], maxsplit=1)[0].strip()
                return [Parameter(name)], end + 3
        if text.startswith("{{", pos):
            end = _find_close(text, "{{", "}}", pos)
            if end == -1:
                return None
            parts = _split_top(text[pos + 2:end])
            name = parts[0].strip()
            if not name:
                return None
            params = [p.strip() for p in parts[1:]]
            return [Template(self._sub(name), params)], end + 2
        return None

    def _magic(self) -> _Handled:
        m = _MAGIC_RE.match(self.text, self.pos)
        if not m:
            return None
        return [MagicWord(m.group(1))], m.end()

    def _entity(self) -> _Handled:
        m = _ENTITY_RE.match(self.text, self.pos)
        if not m:
            return None
        decoded = html.unescape(m.group(0))
        if len(decoded) != 1 or decoded == m.group(0):
            return None
        return [CharacterEntity(decoded)], m.end()

    def _tag(self) -> _Handled:
        text, pos = self.text, self.pos
        if text.startswith("<!--", pos):
            end = text.find("-->", pos + 4)
            if end == -1:
                return [Comment(text[pos + 4:])], len(text)
            return [Comment(text[pos + 4:end])], end + 3
        m = _TAG_RE.match(text, pos)
        if not m:
            return None
        closing, name, self_closing = m.group(1), m.group(2).lower(), m.group(4)
        if name in _EXTENSION_TAGS:
            if closing:
                return [], m.end()
            if self_closing:
                return [Tag(name, [])], m.end()
            close_re = re.compile(r"</" + re.escape(name) + r"\s*>", re.IGNORECASE)
            cm = close_re.search(text, m.end())
            if not cm:
                return None
            inner = text[m.end():cm.start()]
            if name in _RAW_TAGS:
                nodes: List[Node] = [Text(inner)] if inner else []
            else:
                nodes = self._sub(inner)
            return [Tag(name, nodes)], cm.end()
        if name in _HTML_TAGS:
            return [], m.end()
        return None