"""Typed AST nodes for bladefmt.

All AST nodes are frozen dataclasses with slots for:
- Immutability: a Document is built once and consumed by the printer
- Pattern matching: match statements dispatch on node classes
- Memory efficiency: __slots__ reduces memory footprint

Node Hierarchy:
Node (base)
├── Document
├── Text
├── Echo
├── Comment
├── Opaque (verbatim, raw code, raw text, HTML comment, declaration,
│           front matter)
├── Directive (standalone leaf, block middle, or orphan)
├── Block (opener directive, children, closer directive or None)
├── Element
├── Component
├── Slot
└── EndTag (stray end tag)

Block middles (``@else``, ``@case``) stay in the block's children as
sibling markers; ``Block.branches`` groups the children between them.

Thread Safety:
All nodes are frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from bladefmt.directives.descriptor import CloseKind, Pairing
from bladefmt.lexer.classifiers.attribute import AttributeKind
from bladefmt.location import SourceLocation

if TYPE_CHECKING:
    from bladefmt.diagnostics import Diagnostic

# =============================================================================
# Base Node
# =============================================================================


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all AST nodes.

    ``location`` spans the node's full source text (offsets are exclusive
    at the end), so ``location.slice(source)`` recovers it verbatim.

    """

    location: SourceLocation


# =============================================================================
# Leaves
# =============================================================================


@dataclass(frozen=True, slots=True)
class Text(Node):
    """Literal text between other constructs, whitespace included."""

    content: str


@dataclass(frozen=True, slots=True)
class Echo(Node):
    """``{{ expr }}`` (escaped) or ``{!! expr !!}`` (raw).

    ``expression`` is the body between the delimiters, exactly as written.

    """

    expression: str
    raw: bool = False

    @property
    def delimiters(self) -> tuple[str, str]:
        return ("{!!", "!!}") if self.raw else ("{{", "}}")


@dataclass(frozen=True, slots=True)
class Comment(Node):
    """``{{-- ... --}}`` template comment, stored as its full source slice."""

    content: str


class OpaqueKind(Enum):
    """What an opaque span holds."""

    VERBATIM = "verbatim"  # @verbatim ... @endverbatim
    RAW_CODE = "raw-code"  # @php ... @endphp, <?php ... ?>
    RAW_TEXT = "raw-text"  # body of script/style/pre/textarea
    HTML_COMMENT = "html-comment"
    DECLARATION = "declaration"  # <!DOCTYPE html>, CDATA
    FRONT_MATTER = "front-matter"


@dataclass(frozen=True, slots=True)
class Opaque(Node):
    """Source region reproduced byte-identical, never tokenized further."""

    kind: OpaqueKind
    content: str


@dataclass(frozen=True, slots=True)
class Directive(Node):
    """One ``@name(args)`` occurrence.

    Attributes:
        name: Registry spelling for registered directives, else as written
        written_name: Name exactly as written (without ``@``)
        arguments: Text between the parentheses, verbatim; None without a list
        pairing: Resolved role of this occurrence
        family: Block family involved, None for standalone occurrences
        close_kind: Closing semantics when this occurrence closes a block
        registered: Whether the name is known to the registry
        spaced_args: Canonical form puts one space before ``(``
        orphan: A middle or closer with no block to attach to
        source: Exact source slice, used for verbatim re-emission

    """

    name: str
    written_name: str
    arguments: str | None
    pairing: Pairing = Pairing.NONE
    family: str | None = None
    close_kind: CloseKind | None = None
    registered: bool = False
    spaced_args: bool = False
    orphan: bool = False
    source: str = ""

    @property
    def has_arguments(self) -> bool:
        return self.arguments is not None


# =============================================================================
# Directive blocks
# =============================================================================


@dataclass(frozen=True, slots=True)
class Block(Node):
    """A matched (or implicitly closed) directive block.

    ``closer`` is None when the block was never closed in source; the
    matcher synthesizes the boundary and records a diagnostic.

    """

    opener: Directive
    family: str
    children: tuple[Node, ...]
    closer: Directive | None = None
    indent_middles: bool = False

    @property
    def close_kind(self) -> CloseKind | None:
        return self.closer.close_kind if self.closer is not None else None

    @property
    def is_closed(self) -> bool:
        return self.closer is not None

    @property
    def middles(self) -> tuple[Directive, ...]:
        return tuple(
            child
            for child in self.children
            if isinstance(child, Directive) and child.pairing is Pairing.MIDDLE and not child.orphan
        )

    @property
    def branches(self) -> tuple[tuple[Directive | None, tuple[Node, ...]], ...]:
        """Children grouped by the middle directive that starts each branch.

        The first branch has no middle (None); fallthrough ``@case`` labels
        simply produce empty branches.
        """
        groups: list[tuple[Directive | None, list[Node]]] = [(None, [])]
        for child in self.children:
            if isinstance(child, Directive) and child.pairing is Pairing.MIDDLE and not child.orphan:
                groups.append((child, []))
            else:
                groups[-1][1].append(child)
        return tuple((middle, tuple(nodes)) for middle, nodes in groups)


# =============================================================================
# Markup
# =============================================================================


@dataclass(frozen=True, slots=True)
class Attribute(Node):
    """One entry of a start tag's attribute list.

    Attributes:
        name: Name exactly as written; for echo and comment entries, the
            entry's full source text
        value: Value exactly as written including quotes, None if absent
        kind: Disambiguator classification
        ambiguous: Directive-like name kept as a plain attribute
        echo: Parsed echo for HOST_ECHO entries
        comment: The entry is a ``{{-- --}}`` comment

    """

    name: str
    value: str | None = None
    kind: AttributeKind = AttributeKind.PLAIN
    ambiguous: bool = False
    echo: Echo | None = None
    comment: bool = False

    @property
    def is_foreign_binding(self) -> bool:
        return self.kind.is_foreign

    @property
    def is_fence(self) -> bool:
        """Entries that attribute sorting never moves other entries across."""
        return self.kind is AttributeKind.HOST_ECHO or self.ambiguous or self.comment


@dataclass(frozen=True, slots=True)
class Element(Node):
    """An HTML element.

    ``closed`` is False when no end tag was found before the enclosing
    construct ended; ``end_tag`` holds the end tag's name as written.

    """

    tag: str
    attributes: tuple[Attribute, ...]
    children: tuple[Node, ...]
    self_closing: bool = False
    void: bool = False
    closed: bool = True
    end_tag: str | None = None


@dataclass(frozen=True, slots=True)
class Slot(Node):
    """``<x-slot:name>`` or ``<x-slot name="...">`` inside a component."""

    name: str
    tag: str
    attributes: tuple[Attribute, ...]
    children: tuple[Node, ...]
    self_closing: bool = False
    closed: bool = True
    end_tag: str | None = None


@dataclass(frozen=True, slots=True)
class Component(Node):
    """``<x-name>`` component invocation.

    Direct slot children are filed under ``slots`` in source order; all
    other children form ``children`` (the default slot).

    """

    tag: str
    attributes: tuple[Attribute, ...]
    slots: tuple[Slot, ...]
    children: tuple[Node, ...]
    self_closing: bool = False
    closed: bool = True
    end_tag: str | None = None

    @property
    def name(self) -> str:
        return self.tag[len("x-") :]

    @property
    def slot_map(self) -> dict[str, tuple[Node, ...]]:
        """Slot name to children; a repeated name keeps the last slot."""
        return {slot.name: slot.children for slot in self.slots}

    @property
    def foreign_bindings(self) -> tuple[Attribute, ...]:
        return tuple(attr for attr in self.attributes if attr.is_foreign_binding)


@dataclass(frozen=True, slots=True)
class EndTag(Node):
    """An end tag with no open element to close; kept as written."""

    tag: str
    content: str


# =============================================================================
# Document
# =============================================================================


@dataclass(frozen=True, slots=True)
class Document(Node):
    """Root node: top-level children plus diagnostics from scanning and matching."""

    children: tuple[Node, ...]
    diagnostics: tuple[Diagnostic, ...] = ()
    source: str = ""


type Markup = Element | Component | Slot
type Container = Document | Block | Element | Component | Slot
