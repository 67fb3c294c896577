"""Idempotence Guard.

Re-runs the pipeline on the formatter's own output and refuses output that
does not round-trip:

1. The candidate output must scan without a LexError.
2. Its tree must have the same structure as the input's tree, compared
   per top-level node on whitespace-insensitive fingerprints.
3. Formatting the candidate again must reproduce it exactly.

Any failure raises IdempotenceViolation naming the line of the input's
top-level node (or output line) where the divergence starts; ``format()``
then falls back to the original text.

Thread Safety:
IdempotenceGuard holds only configuration. Safe to share across threads.

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from bladefmt.config import get_format_config
from bladefmt.errors import IdempotenceViolation, LexError
from bladefmt.nodes import (
    Attribute,
    Block,
    Component,
    Element,
    Node,
    Opaque,
    OpaqueKind,
    Slot,
    Text,
)
from bladefmt.parser import Parser
from bladefmt.renderers.blade import BladeRenderer, order_attributes
from bladefmt.utils.logger import get_logger
from bladefmt.utils.text import strip_whitespace
from bladefmt.visitor import BaseVisitor

if TYPE_CHECKING:
    from bladefmt.config import FormatConfig
    from bladefmt.nodes import (
        Comment,
        Directive,
        Document,
        Echo,
        EndTag,
    )

logger = get_logger(__name__)

type Fingerprint = tuple[object, ...]


class StructureFingerprinter(BaseVisitor[None]):
    """Flatten a subtree into a whitespace-insensitive pre-order signature.

    Containers emit an opening entry, their children, then an ``end``
    entry, so nesting is part of the signature. Whitespace-only text is
    skipped; other text, echo bodies, directive arguments and attribute
    values are compared with all whitespace removed. Comments and opaque
    spans are compared exactly (raw-text element bodies excepted, whose
    closing indentation may change).
    """

    def __init__(self, sort_attributes: bool = False) -> None:
        self.items: list[Fingerprint] = []
        self._sort_attributes = sort_attributes

    def visit(self, node: Node) -> None:
        super().visit(node)
        if isinstance(node, (Block, Element, Component, Slot)):
            self.items.append(("end",))

    def visit_text(self, node: Text) -> None:
        content = strip_whitespace(node.content)
        if not content:
            return
        # Text split by a removed slot prints as one run.
        if self.items and self.items[-1][0] == "text":
            self.items[-1] = ("text", self.items[-1][1] + content)
        else:
            self.items.append(("text", content))

    def visit_echo(self, node: Echo) -> None:
        self.items.append(("echo", node.raw, strip_whitespace(node.expression)))

    def visit_comment(self, node: Comment) -> None:
        self.items.append(("comment", node.content))

    def visit_opaque(self, node: Opaque) -> None:
        content = node.content
        if node.kind is OpaqueKind.RAW_TEXT:
            content = strip_whitespace(content)
        self.items.append(("opaque", node.kind.value, content))

    def visit_directive(self, node: Directive) -> None:
        name = node.name.lower() if node.registered else node.name
        arguments = strip_whitespace(node.arguments) if node.arguments is not None else None
        self.items.append(("directive", name, arguments, node.pairing.value, node.orphan))

    def visit_block(self, node: Block) -> None:
        self.items.append(("block", node.family, node.is_closed))

    def visit_element(self, node: Element) -> None:
        self.items.append(
            ("element", node.tag.lower(), node.closed, node.self_closing, self._attributes(node))
        )

    def visit_component(self, node: Component) -> None:
        self.items.append(
            ("component", node.tag.lower(), node.closed, node.self_closing, self._attributes(node))
        )

    def visit_slot(self, node: Slot) -> None:
        self.items.append(("slot", node.name, node.closed, self._attributes(node)))

    def visit_end_tag(self, node: EndTag) -> None:
        self.items.append(("end-tag", node.tag.lower()))

    def _attributes(self, node: Element | Component | Slot) -> Fingerprint:
        return tuple(
            _attribute_fingerprint(attr)
            for attr in order_attributes(node.attributes, self._sort_attributes)
        )


def _attribute_fingerprint(attr: Attribute) -> Fingerprint:
    if attr.echo is not None:
        return ("echo", attr.echo.raw, strip_whitespace(attr.echo.expression))
    value = strip_whitespace(attr.value) if attr.value is not None else None
    return (attr.kind.value, attr.name, value)


def fingerprint(node: Node, *, sort_attributes: bool = False) -> Fingerprint:
    """Structural signature of one node and its subtree."""
    visitor = StructureFingerprinter(sort_attributes)
    visitor.visit(node)
    return tuple(visitor.items)


def top_level_fingerprints(
    doc: Document, *, sort_attributes: bool = False
) -> list[tuple[int, Fingerprint]]:
    """(line, fingerprint) for each top-level node that is not blank text."""
    result: list[tuple[int, Fingerprint]] = []
    for child in doc.children:
        if isinstance(child, Text) and not child.content.strip():
            continue
        result.append((child.location.lineno, fingerprint(child, sort_attributes=sort_attributes)))
    return result


class IdempotenceGuard:
    """Verify that formatted output is a fixed point of the formatter.

    Usage:
        >>> guard = IdempotenceGuard()
        >>> guard.check(original_doc, formatted_text)  # raises on divergence

    """

    __slots__ = ("_config", "_renderer")

    def __init__(self, config: FormatConfig | None = None) -> None:
        self._config = config or get_format_config()
        self._renderer = BladeRenderer(self._config)

    def check(self, original: Document, formatted: str, source_file: str | None = None) -> None:
        """Raise IdempotenceViolation unless ``formatted`` round-trips.

        Args:
            original: Tree of the input text
            formatted: Candidate output rendered from ``original``
            source_file: File path for diagnostics

        Raises:
            IdempotenceViolation: On a LexError, a structural difference,
                or unstable output on the second pass.
        """
        try:
            second = Parser(
                formatted, source_file, registry=self._config.directive_registry
            ).parse()
        except LexError as exc:
            raise IdempotenceViolation(
                f"formatted output no longer scans: {exc.message}", region_line=exc.lineno
            ) from exc

        self._compare_structure(original, second)

        again = self._renderer.render(second)
        if again != formatted:
            line = _first_differing_line(formatted, again)
            raise IdempotenceViolation(
                f"second pass changes output line {line}", region_line=line
            )
        logger.debug("idempotence check passed (%d top-level nodes)", len(second.children))

    def _compare_structure(self, original: Document, second: Document) -> None:
        sort = self._config.sort_attributes
        before = top_level_fingerprints(original, sort_attributes=sort)
        after = top_level_fingerprints(second, sort_attributes=sort)
        for index, (line, expected) in enumerate(before):
            if index >= len(after):
                raise IdempotenceViolation("node missing from formatted output", region_line=line)
            if after[index][1] != expected:
                raise IdempotenceViolation("node structure changed", region_line=line)
        if len(after) > len(before):
            line = before[-1][0] if before else 1
            raise IdempotenceViolation("formatted output has extra nodes", region_line=line)


def _first_differing_line(a: str, b: str) -> int:
    a_lines = a.split("\n")
    b_lines = b.split("\n")
    for number, (left, right) in enumerate(zip(a_lines, b_lines, strict=False), start=1):
        if left != right:
            return number
    return min(len(a_lines), len(b_lines)) + 1
