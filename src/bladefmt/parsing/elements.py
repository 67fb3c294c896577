"""Element, component and slot building for the bladefmt parser."""

from __future__ import annotations

from typing import TYPE_CHECKING

from bladefmt.diagnostics import DiagnosticCode
from bladefmt.lexer.classifiers.attribute import AttributeKind, classify_attribute
from bladefmt.lexer.modes import SLOT_TAG, VOID_ELEMENTS
from bladefmt.nodes import Attribute, Component, Element, EndTag, Slot, Text
from bladefmt.parsing.frames import FrameKind, OpenFrame
from bladefmt.tokens import Token, TokenType

if TYPE_CHECKING:
    from bladefmt.diagnostics import DiagnosticSink
    from bladefmt.directives.registry import DirectiveRegistry
    from bladefmt.location import SourceLocation
    from bladefmt.nodes import Comment, Echo, Node
    from bladefmt.parsing.frames import FrameStack


def end_tag_name(value: str) -> str:
    """``</div >`` -> ``div``."""
    inner = value[2:].rstrip(">")
    parts = inner.split()
    return parts[0] if parts else ""


def slot_name(tag: str, attributes: tuple[Attribute, ...]) -> str:
    """Name of a slot from ``<x-slot:name>`` or ``<x-slot name="name">``."""
    if ":" in tag:
        return tag.split(":", 1)[1]
    for attr in attributes:
        if attr.name in ("name", ":name") and attr.value is not None:
            return attr.value.strip("\"'")
    return ""


class ElementBuildingMixin:
    """Mixin building Element, Component and Slot nodes.

    Start tags open a frame unless they are void or self-closing; end tags
    close the innermost open element with the same name. Elements left
    open when an enclosing construct closes are kept with ``closed=False``.

    Required Host Attributes:
        - _source: str
        - _frames: FrameStack
        - _registry: DirectiveRegistry
        - _diagnostics: DiagnosticSink

    """

    _source: str
    _current: Token | None
    _frames: FrameStack
    _registry: DirectiveRegistry
    _diagnostics: DiagnosticSink

    def _advance(self) -> Token | None:
        raise NotImplementedError

    def _take(self, token_type: TokenType) -> Token | None:
        raise NotImplementedError

    def _append(self, node: Node) -> None:
        raise NotImplementedError

    def _parse_echo(self) -> Echo:
        raise NotImplementedError

    def _parse_comment(self) -> Comment:
        raise NotImplementedError

    def _parse_start_tag(self) -> None:
        """Parse ``<tag attrs>`` and either emit a leaf or open a frame."""
        open_token = self._current
        assert open_token is not None
        self._advance()
        tag = open_token.value[1:]
        subkind = open_token.subkind

        attributes: list[Attribute] = []
        close_token: Token | None = None
        while self._current is not None:
            token = self._current
            if token.type == TokenType.TAG_CLOSE:
                close_token = token
                self._advance()
                break
            if token.type == TokenType.ATTRIBUTE_NAME:
                attributes.append(self._parse_attribute())
            elif token.type == TokenType.ECHO_OPEN:
                echo = self._parse_echo()
                attributes.append(
                    Attribute(
                        location=echo.location,
                        name=echo.location.slice(self._source),
                        kind=AttributeKind.HOST_ECHO,
                        echo=echo,
                    )
                )
            elif token.type == TokenType.COMMENT_OPEN:
                comment = self._parse_comment()
                attributes.append(
                    Attribute(location=comment.location, name=comment.content, comment=True)
                )
            else:
                break

        start = open_token.location.span_to(close_token.location if close_token else open_token.location)
        self_closing = close_token is not None and close_token.value == "/>"
        void = subkind is None and tag.lower() in VOID_ELEMENTS
        attrs = tuple(attributes)

        if self_closing or void:
            self._append(
                self._build_markup(
                    subkind, tag, attrs, (), start, self_closing=self_closing, void=void
                )
            )
            return

        self._frames.push(
            OpenFrame(FrameKind.ELEMENT, start, tag=tag, subkind=subkind, attributes=attrs)
        )

    def _parse_attribute(self) -> Attribute:
        name_token = self._current
        assert name_token is not None
        self._advance()
        value_token = self._take(TokenType.ATTRIBUTE_VALUE)
        end = value_token.location if value_token is not None else name_token.location
        has_value = value_token is not None
        kind = AttributeKind(name_token.subkind) if name_token.subkind else AttributeKind.PLAIN
        _, ambiguous = classify_attribute(name_token.value, has_value, self._registry)
        return Attribute(
            location=name_token.location.span_to(end),
            name=name_token.value,
            value=value_token.value if value_token is not None else None,
            kind=kind,
            ambiguous=ambiguous,
        )

    def _parse_end_tag(self) -> None:
        """Close the matching open element, or keep a stray end tag."""
        token = self._current
        assert token is not None
        self._advance()
        name = end_tag_name(token.value)
        index = self._frames.find_element(name)
        if index == -1:
            self._diagnostics.warning(
                token.location,
                DiagnosticCode.STRAY_END_TAG,
                f"'</{name}>' does not close any open element; kept as written",
            )
            self._append(EndTag(location=token.location, tag=name, content=token.value))
            return

        while len(self._frames) - 1 > index:
            # only elements can sit above: find_element stops at blocks
            self._append(self._close_element_frame(self._frames.pop(), None))
        frame = self._frames.pop()
        self._append(self._close_element_frame(frame, token))

    def _close_element_frame(self, frame: OpenFrame, end_token: Token | None) -> Node:
        """Turn an element frame into a node.

        Args:
            frame: The popped ELEMENT frame
            end_token: The END_TAG closing it, or None if left unclosed
        """
        if end_token is None:
            self._diagnostics.info(
                frame.start,
                DiagnosticCode.UNCLOSED_ELEMENT,
                f"'<{frame.tag}>' has no end tag; its content is kept at the same level",
            )
            location = frame.span()
            end_tag = None
        else:
            location = frame.start.span_to(end_token.location)
            end_tag = end_tag_name(end_token.value)

        return self._build_markup(
            frame.subkind,
            frame.tag,
            frame.attributes,
            tuple(frame.children),
            location,
            closed=end_token is not None,
            end_tag=end_tag,
        )

    def _build_markup(
        self,
        subkind: str | None,
        tag: str,
        attributes: tuple[Attribute, ...],
        children: tuple[Node, ...],
        location: SourceLocation,
        *,
        self_closing: bool = False,
        void: bool = False,
        closed: bool = True,
        end_tag: str | None = None,
    ) -> Node:
        if subkind == "slot":
            return Slot(
                location=location,
                name=slot_name(tag, attributes),
                tag=tag,
                attributes=attributes,
                children=children,
                self_closing=self_closing,
                closed=closed,
                end_tag=end_tag,
            )
        if subkind == "component":
            slots, default = _split_slots(children)
            return Component(
                location=location,
                tag=tag,
                attributes=attributes,
                slots=slots,
                children=default,
                self_closing=self_closing,
                closed=closed,
                end_tag=end_tag,
            )
        return Element(
            location=location,
            tag=tag,
            attributes=attributes,
            children=children,
            self_closing=self_closing,
            void=void,
            closed=closed,
            end_tag=end_tag,
        )


def _split_slots(children: tuple[Node, ...]) -> tuple[tuple[Slot, ...], tuple[Node, ...]]:
    """Separate direct slot children from the default slot content.

    Text on either side of a removed slot stays in separate nodes, so the
    whitespace each one carries is not joined into a longer run.
    """
    slots: list[Slot] = []
    default: list[Node] = []
    for child in children:
        if isinstance(child, Slot) and child.tag.lower().startswith(SLOT_TAG):
            slots.append(child)
        else:
            default.append(child)
    return tuple(slots), tuple(default)
