"""Wikitext node tree to HTML.

Bold and italic are toggle nodes without children, so their state is tracked
across siblings and balanced tags are emitted. Paragraphs are inferred from
the layout: inline content opens a ``<p>``; block elements (headings, lists,
rules) and paragraph breaks close it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Tuple

from tome.escape import escape_attr, escape_text
from tome.link import LinkKind, LinkResolver
from tome.wikiparse import (
    Bold,
    BoldItalic,
    CharacterEntity,
    DefinitionItemType,
    DefinitionList,
    ExternalLink,
    Heading,
    HorizontalDivider,
    Image,
    Italic,
    Link,
    Node,
    OrderedList,
    ParagraphBreak,
    ParseError,
    Preformatted,
    Table,
    TableCellType,
    Tag,
    Template,
    Text,
    UnorderedList,
    parse,
)

_RESERVED_IN_TITLE = frozenset('#?%&"<>\\|{}')
_WHITESPACE = re.compile(r"\s")


@dataclass
class RenderOptions:
    """Heading level bounds.

    Article titles are shown as h1 by the surrounding UI, so wikitext
    headings start at h2 by default. HTML only knows h1 to h6.
    """

    min_heading_level: int = 2
    max_heading_level: int = 6


class Renderer:
    """Renders wikitext to HTML, resolving internal links with ``resolver``."""

    def __init__(self, resolver: LinkResolver, options: RenderOptions | None = None) -> None:
        self.resolver = resolver
        self.options = options if options is not None else RenderOptions()

    def with_options(self, options: RenderOptions) -> "Renderer":
        """Return a renderer with the same resolver and the given options."""
        return Renderer(self.resolver, options)

    def render(self, wikitext: str) -> str:
        """Render ``wikitext`` to HTML.

        If the parser fails, the raw wikitext is returned in a ``<pre>`` block
        under an error banner; the result is never blank.
        """
        try:
            nodes = parse(wikitext)
        except (ParseError, RecursionError) as err:
            return (
                f'<div class="tome-render-error">Parser error: {escape_text(str(err))}</div>'
                f'<pre class="tome-raw">{escape_text(wikitext)}</pre>'
            )
        state = _State(self.resolver, self.options)
        state.walk(nodes)
        state.close_inline()
        state.close_paragraph()
        state.flush_refs()
        return "".join(state.out)


@dataclass
class _State:
    resolver: LinkResolver
    options: RenderOptions
    out: List[str] = field(default_factory=list)
    bold: bool = False
    italic: bool = False
    bold_italic: bool = False
    in_paragraph: bool = False
    refs: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._handlers: Dict[type, Callable[[Node], None]] = {
            Text: self._text,
            CharacterEntity: self._entity,
            Bold: self._bold,
            Italic: self._italic,
            BoldItalic: self._bold_italic,
            ParagraphBreak: self._paragraph_break,
            Heading: self._heading,
            HorizontalDivider: self._divider,
            Link: self._link,
            ExternalLink: self._external_link,
            UnorderedList: lambda node: self._list(node, "ul"),
            OrderedList: lambda node: self._list(node, "ol"),
            DefinitionList: self._definition_list,
            Template: self._template,
            Image: self._image,
            Tag: self._tag,
            Preformatted: self._preformatted,
            Table: self._table,
        }

    # --- state helpers -------------------------------------------------

    def emit(self, html: str) -> None:
        self.out.append(html)

    def ensure_paragraph_open(self) -> None:
        if not self.in_paragraph:
            self.emit("<p>")
            self.in_paragraph = True

    def close_inline(self) -> None:
        """Close unbalanced emphasis so block boundaries stay well-formed."""
        if self.bold_italic:
            self.emit("</em></strong>")
            self.bold_italic = False
        if self.bold:
            self.emit("</strong>")
            self.bold = False
        if self.italic:
            self.emit("</em>")
            self.italic = False

    def close_paragraph(self) -> None:
        if self.in_paragraph:
            self.emit("</p>")
            self.in_paragraph = False

    def close_block(self) -> None:
        self.close_inline()
        self.close_paragraph()

    def flush_refs(self) -> None:
        if not self.refs:
            return
        self.emit('<section class="tome-references"><h2>References</h2><ol>')
        for n, content in enumerate(self.refs, start=1):
            self.emit(f'<li id="ref-{n}">{content}</li>')
        self.emit("</ol></section>")

    def walk(self, nodes: Iterable[Node]) -> None:
        for node in nodes:
            handler = self._handlers.get(type(node))
            # Comments, magic words, redirects, categories and parameters
            # have no visible rendering.
            if handler is not None:
                handler(node)

    def walk_unwrapped(self, nodes: Iterable[Node]) -> None:
        """Walk children without auto-opening a paragraph around them."""
        was_in_paragraph = self.in_paragraph
        self.in_paragraph = True
        self.walk(nodes)
        self.close_inline()
        self.in_paragraph = was_in_paragraph

    # --- node handlers -------------------------------------------------

    def _text(self, node: Text) -> None:
        self.ensure_paragraph_open()
        self.emit(escape_text(node.value))

    def _entity(self, node: CharacterEntity) -> None:
        self.ensure_paragraph_open()
        self.emit(escape_text(node.character))

    def _bold(self, node: Bold) -> None:
        self.ensure_paragraph_open()
        self.emit("</strong>" if self.bold else "<strong>")
        self.bold = not self.bold

    def _italic(self, node: Italic) -> None:
        self.ensure_paragraph_open()
        self.emit("</em>" if self.italic else "<em>")
        self.italic = not self.italic

    def _bold_italic(self, node: BoldItalic) -> None:
        self.ensure_paragraph_open()
        self.emit("</em></strong>" if self.bold_italic else "<strong><em>")
        self.bold_italic = not self.bold_italic

    def _paragraph_break(self, node: ParagraphBreak) -> None:
        self.close_block()

    def _heading(self, node: Heading) -> None:
        self.close_block()
        level = min(max(node.level, self.options.min_heading_level), self.options.max_heading_level)
        self.emit(f"<h{level}>")
        self.walk_unwrapped(node.nodes)
        self.emit(f"</h{level}>")

    def _divider(self, node: HorizontalDivider) -> None:
        self.close_block()
        self.emit("<hr/>")

    def _link(self, node: Link) -> None:
        self.ensure_paragraph_open()
        status = self.resolver.resolve_internal(node.target)
        if status.kind is LinkKind.REDIRECT and status.target is not None:
            resolved, css_class = status.target, "tome-wikilink"
        elif status.kind is LinkKind.MISSING:
            resolved, css_class = node.target, "tome-wikilink tome-missing"
        else:
            resolved, css_class = node.target, "tome-wikilink"
        self.emit(
            f'<a href="#/article/{escape_attr(url_encode_title(resolved))}" class="{css_class}">'
        )
        if node.text:
            self.walk(node.text)
        else:
            self.emit(escape_text(node.target))
        self.close_inline()
        self.emit("</a>")

    def _external_link(self, node: ExternalLink) -> None:
        self.ensure_paragraph_open()
        url, label = split_external_link(node.nodes)
        self.emit(
            f'<a href="{escape_attr(url)}" class="tome-extlink" target="_blank" '
            f'rel="noopener noreferrer">'
        )
        label = label.strip()
        self.emit(escape_text(label if label else url))
        self.emit("</a>")

    def _list(self, node, tag: str) -> None:
        self.close_block()
        self.emit(f"<{tag}>")
        for item in node.items:
            self.emit("<li>")
            self.walk_unwrapped(item.nodes)
            self.emit("</li>")
        self.emit(f"</{tag}>")

    def _definition_list(self, node: DefinitionList) -> None:
        self.close_block()
        self.emit("<dl>")
        for item in node.items:
            tag = "dt" if item.type is DefinitionItemType.TERM else "dd"
            self.emit(f"<{tag}>")
            self.walk_unwrapped(item.nodes)
            self.emit(f"</{tag}>")
        self.emit("</dl>")

    def _template(self, node: Template) -> None:
        self.ensure_paragraph_open()
        name = collect_text(node.name).strip()
        self.emit(
            '<span class="tome-template-placeholder" title="template not rendered locally">'
            f"[Template: {escape_text(name)}]</span>"
        )

    def _image(self, node: Image) -> None:
        self.ensure_paragraph_open()
        self.emit(
            '<span class="tome-image-placeholder" title="images not fetched">'
            f"[Image: {escape_text(node.target)}]</span>"
        )

    def _tag(self, node: Tag) -> None:
        name = node.name.lower()
        if name == "ref":
            self.ensure_paragraph_open()
            self.refs.append(collect_text(node.nodes))
            idx = len(self.refs)
            self.emit(f'<sup class="tome-ref"><a href="#ref-{idx}">[{idx}]</a></sup>')
        elif name == "nowiki":
            self.ensure_paragraph_open()
            self.emit(escape_text(collect_text(node.nodes)))
        else:
            # Pass the content through, dropping the tag itself.
            self.walk(node.nodes)

    def _preformatted(self, node: Preformatted) -> None:
        self.close_block()
        self.emit('<pre class="tome-preformatted">')
        self.emit(escape_text(collect_text(node.nodes)))
        self.emit("</pre>")

    def _table(self, node: Table) -> None:
        self.close_block()
        self.emit('<table class="tome-table">')
        for caption in node.captions:
            self.emit("<caption>")
            self.walk(caption)
            self.close_inline()
            self.emit("</caption>")
        for row in node.rows:
            self.emit("<tr>")
            for cell in row.cells:
                tag = "th" if cell.type is TableCellType.HEADING else "td"
                self.emit(f"<{tag}>")
                self.walk_unwrapped(cell.content)
                self.emit(f"</{tag}>")
            self.emit("</tr>")
        self.emit("</table>")


def collect_text(nodes: Iterable[Node]) -> str:
    """Flatten the plain text carried by ``nodes``.

    Emphasis toggles contribute nothing; templates contribute their name in
    braces; links contribute their label, or their target when unlabelled.
    """
    parts: List[str] = []
    for node in nodes:
        if isinstance(node, Text):
            parts.append(node.value)
        elif isinstance(node, CharacterEntity):
            parts.append(node.character)
        elif isinstance(node, (Heading, Tag)):
            parts.append(collect_text(node.nodes))
        elif isinstance(node, Link):
            parts.append(collect_text(node.text) if node.text else node.target)
        elif isinstance(node, Template):
            parts.append("{" + collect_text(node.name) + "}")
    return "".join(parts)


def url_encode_title(title: str) -> str:
    """Encode an article title for a URL fragment.

    Spaces become underscores; a small set of reserved characters is
    percent-encoded; everything else passes through.
    """
    out: List[str] = []
    for ch in title:
        if ch == " ":
            out.append("_")
        elif ch in _RESERVED_IN_TITLE:
            out.extend(f"%{byte:02X}" for byte in ch.encode("utf-8"))
        else:
            out.append(ch)
    return "".join(out)


def split_external_link(nodes: Iterable[Node]) -> Tuple[str, str]:
    """Split external link content into its URL and the remaining label."""
    joined = collect_text(nodes).lstrip()
    m = _WHITESPACE.search(joined)
    if m is None:
        return joined, ""
    return joined[: m.start()], joined[m.start():]