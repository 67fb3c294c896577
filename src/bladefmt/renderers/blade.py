"""Pretty printer: renders a Document back to normalized Blade source.

Layout rules:
- Directive blocks and elements that span lines in the source (or hold
  constructs that must be on their own lines) are broken: opener, body one
  level deeper, closer. Anything else flows inline.
- Author line breaks inside text are kept; blank-line runs are capped.
- Opaque spans (verbatim, raw code, comments, raw-text bodies, attribute
  values) are emitted byte-identical; only their first line is re-indented.
- Echoes are normalized to ``{{ expr }}`` when single-line, everywhere
  including attribute values.
- Malformed regions (unclosed blocks, orphan directives, stray end tags)
  are emitted exactly as written.

Thread Safety:
BladeRenderer holds only configuration; per-render state lives in a
RenderContext created by each render() call.

"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bladefmt.config import ClosingStyle, get_format_config
from bladefmt.directives.descriptor import Pairing
from bladefmt.lexer.modes import BLOCK_ELEMENTS, RAW_TEXT_ELEMENTS
from bladefmt.nodes import (
    Attribute,
    Block,
    Comment,
    Component,
    Directive,
    Echo,
    Element,
    EndTag,
    Opaque,
    Slot,
    Text,
)
from bladefmt.stringbuilder import LineBuilder
from bladefmt.utils.text import find_delimiter

if TYPE_CHECKING:
    from bladefmt.config import FormatConfig
    from bladefmt.nodes import Document, Node

_ECHO_START = re.compile(r"(?<!@)(\{\{(?!--)|\{!!)")

# Raw-text bodies whose trailing indentation belongs to the end tag
_REINDENT_CLOSE = frozenset({"script", "style"})


def format_echo(expression: str, raw: bool = False) -> str:
    """Canonical text of an echo.

    Single-line bodies get exactly one space inside each delimiter;
    multi-line bodies are kept verbatim.

    Example:
        >>> format_echo("$user->name")
        '{{ $user->name }}'
    """
    opener, closer = ("{!!", "!!}") if raw else ("{{", "}}")
    if "\n" in expression:
        return f"{opener}{expression}{closer}"
    body = expression.strip()
    if not body:
        return f"{opener} {closer}"
    return f"{opener} {body} {closer}"


def normalize_echoes(value: str) -> str:
    """Normalize every single-line echo inside an attribute value.

    Everything outside the echoes is returned unchanged.
    """
    if "{" not in value:
        return value
    parts: list[str] = []
    pos = 0
    while True:
        match = _ECHO_START.search(value, pos)
        if match is None:
            break
        opener = match.group(1)
        raw = opener == "{!!"
        closer = "!!}" if raw else "}}"
        body_start = match.end()
        close = find_delimiter(value, body_start, closer)
        if close == -1:
            break
        parts.append(value[pos : match.start()])
        parts.append(format_echo(value[body_start:close], raw))
        pos = close + len(closer)
    parts.append(value[pos:])
    return "".join(parts)


def order_attributes(attributes: tuple[Attribute, ...], sort: bool) -> tuple[Attribute, ...]:
    """Attribute order for output.

    With ``sort`` enabled, attributes are sorted by name (case-insensitive,
    stable) within each run delimited by fence entries: echo attributes,
    comments and directive-like names keep their position and nothing moves
    across them.
    """
    if not sort:
        return attributes
    ordered: list[Attribute] = []
    run: list[Attribute] = []
    for attr in attributes:
        if attr.is_fence:
            ordered.extend(sorted(run, key=_sort_key))
            run = []
            ordered.append(attr)
        else:
            run.append(attr)
    ordered.extend(sorted(run, key=_sort_key))
    return tuple(ordered)


def _sort_key(attr: Attribute) -> str:
    return attr.name.lower()


@dataclass(slots=True)
class RenderContext:
    """Per-render mutable state.

    Created fresh for each render, ensuring thread safety when sharing
    BladeRenderer instances across threads.
    """

    source: str
    out: LineBuilder
    inline_cache: dict[tuple[int, int], bool] = field(default_factory=dict)


class BladeRenderer:
    """Render a Document to formatted Blade source.

    Usage:
        >>> from bladefmt.parser import Parser
        >>> doc = Parser("<div><p>{{$x}}</p></div>").parse()
        >>> BladeRenderer().render(doc)
        '<div>\\n    <p>{{ $x }}</p>\\n</div>\\n'

    Thread Safety:
        Multiple threads can safely share a single BladeRenderer instance.
        Each render() call creates an independent RenderContext.
    """

    __slots__ = ("_config",)

    def __init__(self, config: FormatConfig | None = None) -> None:
        """Initialize renderer.

        Args:
            config: Formatting options; defaults to the active FormatConfig
        """
        self._config = config or get_format_config()

    @property
    def config(self) -> FormatConfig:
        return self._config

    def render(self, node: Document) -> str:
        """Render document AST to formatted source.

        Args:
            node: Document AST root

        Returns:
            Formatted text ending with a single newline (empty for an
            empty document)
        """
        out = LineBuilder(self._config.indent_unit, self._config.preserve_blank_lines)
        ctx = RenderContext(source=node.source, out=out)
        self._render_children(node.children, ctx)
        return out.build()

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _render_children(self, children: tuple[Node, ...], ctx: RenderContext) -> None:
        for child in children:
            self._render_node(child, ctx)

    def _render_node(self, node: Node, ctx: RenderContext) -> None:
        out = ctx.out
        match node:
            case Text():
                self._render_text(node.content, out)
            case Echo():
                out.raw(format_echo(node.expression, node.raw))
            case Comment():
                out.raw(node.content)
            case Opaque():
                out.raw(node.content)
            case Directive():
                out.raw(self._directive_text(node))
            case Block():
                self._render_block(node, ctx)
            case Element() | Component() | Slot():
                self._render_markup(node, ctx)
            case EndTag():
                out.raw(node.content)
            case _:
                out.raw(node.location.slice(ctx.source))

    # =========================================================================
    # Text
    # =========================================================================

    def _render_text(self, content: str, out: LineBuilder) -> None:
        """Re-indent text line by line, keeping author line breaks.

        Whitespace within a line collapses to one space at fragment
        boundaries; n consecutive line breaks keep n - 1 blank lines
        (capped by the builder).
        """
        segments = content.split("\n")
        self._text_segment(segments[0], out)
        breaks = 0
        for segment in segments[1:]:
            breaks += 1
            if segment.strip():
                out.newline()
                out.blank(breaks - 1)
                breaks = 0
                self._text_segment(segment, out)
        if breaks:
            out.newline()
            out.blank(breaks - 1)

    def _text_segment(self, segment: str, out: LineBuilder) -> None:
        body = segment.strip()
        if not body:
            if segment:
                out.space()
            return
        if segment[0].isspace():
            out.space()
        out.append(body)
        if segment[-1].isspace():
            out.space()

    # =========================================================================
    # Directives
    # =========================================================================

    def _directive_text(self, directive: Directive) -> str:
        """Canonical text of one directive occurrence.

        Registered names are printed in registry casing with canonical
        spacing; arguments are always verbatim. Unknown and orphan
        directives are printed exactly as written.
        """
        if directive.orphan or not directive.registered:
            return directive.source
        if (
            directive.pairing is Pairing.CLOSES
            and self._config.directive_closing_style is ClosingStyle.AS_WRITTEN
        ):
            return directive.source
        if directive.arguments is None:
            return f"@{directive.name}"
        space = " " if directive.spaced_args else ""
        return f"@{directive.name}{space}({directive.arguments})"

    def _render_block(self, block: Block, ctx: RenderContext) -> None:
        out = ctx.out
        if block.closer is None:
            # unclosed: reproduce the region as written
            out.raw(block.location.slice(ctx.source).rstrip())
            return

        if self._is_inline(block, out.level, ctx):
            out.raw(self._directive_text(block.opener))
            self._render_children(block.children, ctx)
            out.raw(self._directive_text(block.closer))
            return

        out.newline()
        out.raw(self._directive_text(block.opener))
        out.newline()
        out.indent()
        if block.indent_middles:
            self._render_indented_branches(block, ctx)
        else:
            for middle, nodes in block.branches:
                if middle is not None:
                    out.dedent()
                    out.newline()
                    out.raw(self._directive_text(middle))
                    out.newline()
                    out.indent()
                self._render_children(nodes, ctx)
        out.dedent()
        out.newline()
        out.raw(self._directive_text(block.closer))
        out.newline()

    def _render_indented_branches(self, block: Block, ctx: RenderContext) -> None:
        """``@switch`` layout: labels one level in, bodies and ``@break`` two."""
        out = ctx.out
        for middle, nodes in block.branches:
            if middle is None:
                self._render_children(nodes, ctx)
                continue
            is_label = middle.name != "break"
            if not is_label:
                out.indent()
            out.newline()
            out.raw(self._directive_text(middle))
            out.newline()
            if is_label:
                out.indent()
            self._render_children(nodes, ctx)
            out.newline()
            out.dedent()

    # =========================================================================
    # Markup
    # =========================================================================

    def _render_markup(self, node: Element | Component | Slot, ctx: RenderContext) -> None:
        out = ctx.out
        if not node.closed:
            # unclosed: open tag, then the content as written at the same level
            out.raw(self._start_tag_single_line(node))
            self._render_children(_source_order(_markup_children(node)), ctx)
            return

        if isinstance(node, Element) and node.tag.lower() in RAW_TEXT_ELEMENTS:
            self._render_raw_text_element(node, ctx)
            return

        level = out.level
        wrapped = self._attributes_wrap(node, level)
        if node.self_closing or (isinstance(node, Element) and node.void):
            if wrapped:
                out.newline()
                self._render_wrapped_start_tag(node, ctx)
                out.newline()
            else:
                out.raw(self._start_tag_single_line(node))
            return

        end = f"</{node.end_tag or node.tag}>"
        if _is_empty(node):
            if wrapped:
                out.newline()
                self._render_wrapped_start_tag(node, ctx, close_with=">" + end)
                out.newline()
            else:
                out.raw(self._start_tag_single_line(node) + end)
            return

        if not self._is_broken(node, level, ctx):
            out.raw(self._start_tag_single_line(node))
            self._render_children(node.children, ctx)
            out.append(end)
            return

        out.newline()
        if wrapped:
            self._render_wrapped_start_tag(node, ctx)
        else:
            out.raw(self._start_tag_single_line(node))
        out.newline()
        out.indent()
        for child in _markup_children(node):
            if isinstance(child, Slot):
                out.newline()
                self._render_markup(child, ctx)
                out.newline()
            else:
                self._render_node(child, ctx)
        out.dedent()
        out.newline()
        out.append(end)
        out.newline()

    def _render_raw_text_element(self, node: Element, ctx: RenderContext) -> None:
        """script/style/pre/textarea: the body is emitted as written.

        For script and style a whitespace-only last body line is the end
        tag's indentation and is replaced by the current one.
        """
        out = ctx.out
        body = "".join(
            child.content if isinstance(child, (Opaque, Text)) else child.location.slice(ctx.source)
            for child in node.children
        )
        end = f"</{node.end_tag or node.tag}>"
        if "\n" in body and node.tag.lower() in _REINDENT_CLOSE:
            head, _, last = body.rpartition("\n")
            if not last.strip():
                body = head + "\n"
        multiline = "\n" in body
        if multiline:
            out.newline()
        if self._attributes_wrap(node, out.level):
            self._render_wrapped_start_tag(node, ctx)
        else:
            out.raw(self._start_tag_single_line(node))
        if node.tag.lower() in _REINDENT_CLOSE:
            out.raw(body)
            out.append(end)
        else:
            out.raw(body + end)
        if multiline:
            out.newline()

    def _attribute_text(self, attr: Attribute) -> str:
        if attr.echo is not None:
            return format_echo(attr.echo.expression, attr.echo.raw)
        if attr.value is None:
            return attr.name
        return f"{attr.name}={normalize_echoes(attr.value)}"

    def _ordered_attributes(self, node: Element | Component | Slot) -> tuple[Attribute, ...]:
        return order_attributes(node.attributes, self._config.sort_attributes)

    def _start_tag_single_line(self, node: Element | Component | Slot) -> str:
        parts = [f"<{node.tag}"]
        parts.extend(self._attribute_text(attr) for attr in self._ordered_attributes(node))
        tail = " />" if node.self_closing else ">"
        return " ".join(parts) + tail

    def _attributes_wrap(self, node: Element | Component | Slot, level: int) -> bool:
        """Whether the attribute list goes one-per-line.

        Wraps when there is more than one attribute and some physical line
        of the single-line start tag, indentation included, is longer than
        ``max_line_length``.
        """
        if len(node.attributes) < 2:
            return False
        candidate = self._start_tag_single_line(node)
        limit = self._config.max_line_length
        first, *rest = candidate.split("\n")
        if level * self._config.indent_size + len(first) > limit:
            return True
        return any(len(line) > limit for line in rest)

    def _render_wrapped_start_tag(
        self,
        node: Element | Component | Slot,
        ctx: RenderContext,
        close_with: str | None = None,
    ) -> None:
        out = ctx.out
        out.append(f"<{node.tag}")
        out.newline()
        out.indent()
        for attr in self._ordered_attributes(node):
            out.raw(self._attribute_text(attr))
            out.newline()
        out.dedent()
        if close_with is None:
            close_with = "/>" if node.self_closing else ">"
        out.append(close_with)

    # =========================================================================
    # Layout decisions
    # =========================================================================

    def _is_broken(self, node: Element | Component | Slot, level: int, ctx: RenderContext) -> bool:
        """Whether a closed, non-empty element prints across lines."""
        if self._attributes_wrap(node, level):
            return True
        if isinstance(node, Component) and node.slots:
            return True
        children = node.children
        if node.tag.lower() in BLOCK_ELEMENTS and any(
            isinstance(child, (Element, Component, Slot, Block)) for child in children
        ):
            return True
        return not all(self._is_inline(child, level, ctx) for child in children)

    def _is_inline(self, node: Node, level: int, ctx: RenderContext) -> bool:
        """Whether ``node`` renders without line breaks at ``level``."""
        key = (id(node), level)
        cached = ctx.inline_cache.get(key)
        if cached is not None:
            return cached
        result = self._compute_inline(node, level, ctx)
        ctx.inline_cache[key] = result
        return result

    def _compute_inline(self, node: Node, level: int, ctx: RenderContext) -> bool:
        match node:
            case Text():
                return "\n" not in node.content
            case Echo():
                return "\n" not in node.expression
            case Comment() | Opaque() | EndTag():
                return "\n" not in node.content
            case Directive():
                return "\n" not in node.source
            case Block():
                if "\n" in node.location.slice(ctx.source):
                    return False
                if node.closer is None:
                    return True
                return all(self._is_inline(child, level, ctx) for child in node.children)
            case Element() | Component() | Slot():
                if "\n" in self._start_tag_single_line(node):
                    return False
                if not node.closed:
                    return all(self._is_inline(c, level, ctx) for c in _markup_children(node))
                if self._attributes_wrap(node, level):
                    return False
                if isinstance(node, Element) and node.tag.lower() in RAW_TEXT_ELEMENTS:
                    return all(self._is_inline(child, level, ctx) for child in node.children)
                if node.self_closing or _is_empty(node):
                    return True
                return not self._is_broken(node, level, ctx)
            case _:
                return "\n" not in node.location.slice(ctx.source)


def _markup_children(node: Element | Component | Slot) -> tuple[Node, ...]:
    """Printing order: a component's slots come before its default content."""
    if isinstance(node, Component):
        return (*node.slots, *node.children)
    return node.children


def _source_order(nodes: tuple[Node, ...]) -> tuple[Node, ...]:
    return tuple(sorted(nodes, key=lambda n: n.location.offset))


def _is_empty(node: Element | Component | Slot) -> bool:
    """No slots and only whitespace text (or nothing) inside."""
    if isinstance(node, Component) and node.slots:
        return False
    return all(isinstance(child, Text) and not child.content.strip() for child in node.children)
