"""Frame stack used while the Block Matcher builds the tree.

Directive blocks and open elements share one stack so that stack
discipline holds across both: a closer can only pop frames above the
frame it closes, and those are reported as implicitly closed.

Usage:
    stack = FrameStack(document_location)  # Initializes with DOCUMENT frame

    stack.push(OpenFrame(FrameKind.BLOCK, opener.location, family="if"))
    index = stack.find_block("if")
    frame = stack.pop()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING

from bladefmt.lexer.modes import SLOT_TAG
from bladefmt.nodes import Text

if TYPE_CHECKING:
    from bladefmt.location import SourceLocation
    from bladefmt.nodes import Attribute, Directive, Node


class FrameKind(Enum):
    """Types of open constructs."""

    DOCUMENT = auto()  # Root frame, never popped
    BLOCK = auto()  # Open directive block
    ELEMENT = auto()  # Open element, component or slot


@dataclass(slots=True)
class OpenFrame:
    """A construct whose closing token has not been seen yet.

    Attributes:
        kind: DOCUMENT, BLOCK or ELEMENT
        start: Location of the opening token(s)
        children: Nodes collected so far
        end: Location of the last consumed node (None while empty)
        opener: Opening directive (BLOCK)
        family: Block family (BLOCK)
        indent_middles: Print middles one level in (BLOCK)
        tag: Tag name as written (ELEMENT)
        subkind: "component", "slot" or None (ELEMENT)
        attributes: Parsed attribute list (ELEMENT)

    """

    kind: FrameKind
    start: SourceLocation
    children: list[Node] = field(default_factory=list)
    end: SourceLocation | None = None

    opener: Directive | None = None
    family: str | None = None
    indent_middles: bool = False

    tag: str = ""
    subkind: str | None = None
    attributes: tuple[Attribute, ...] = ()

    def append(self, node: Node) -> None:
        """Add a child, merging it into a preceding Text node when both are text."""
        children = self.children
        if isinstance(node, Text) and children and isinstance(children[-1], Text):
            previous = children[-1]
            children[-1] = Text(
                location=previous.location.span_to(node.location),
                content=previous.content + node.content,
            )
        else:
            children.append(node)
        self.end = node.location

    def span(self) -> SourceLocation:
        """Location from the opening token to the last consumed node."""
        return self.start.span_to(self.end or self.start)

    @property
    def is_block(self) -> bool:
        return self.kind is FrameKind.BLOCK

    @property
    def is_element(self) -> bool:
        return self.kind is FrameKind.ELEMENT


class FrameStack:
    """Stack of open frames with a permanent DOCUMENT frame at the bottom."""

    __slots__ = ("_frames",)

    def __init__(self, document_start: SourceLocation) -> None:
        self._frames: list[OpenFrame] = [OpenFrame(FrameKind.DOCUMENT, document_start)]

    @property
    def top(self) -> OpenFrame:
        return self._frames[-1]

    @property
    def root(self) -> OpenFrame:
        return self._frames[0]

    def push(self, frame: OpenFrame) -> None:
        self._frames.append(frame)

    def pop(self) -> OpenFrame:
        """Pop the top frame. The DOCUMENT frame is never popped."""
        if len(self._frames) == 1:
            raise IndexError("cannot pop the document frame")
        return self._frames.pop()

    def __len__(self) -> int:
        return len(self._frames)

    def __getitem__(self, index: int) -> OpenFrame:
        return self._frames[index]

    def nearest_block(self) -> tuple[int, OpenFrame | None]:
        """Innermost open block, looking through open elements."""
        for index in range(len(self._frames) - 1, 0, -1):
            frame = self._frames[index]
            if frame.is_block:
                return index, frame
        return -1, None

    def find_block(self, family: str) -> int:
        """Index of the innermost open block of ``family``, or -1."""
        for index in range(len(self._frames) - 1, 0, -1):
            frame = self._frames[index]
            if frame.is_block and frame.family == family:
                return index
        return -1

    def find_element(self, tag: str) -> int:
        """Index of the innermost open element named ``tag``, or -1.

        The search stops at the first open block: an end tag never closes
        an element opened outside the directive block it appears in. A bare
        ``</x-slot>`` also closes a named ``<x-slot:name>``.
        """
        wanted = tag.lower()
        for index in range(len(self._frames) - 1, 0, -1):
            frame = self._frames[index]
            if frame.is_block:
                return -1
            opened = frame.tag.lower()
            if opened == wanted or (wanted == SLOT_TAG and opened.startswith(SLOT_TAG + ":")):
                return index
        return -1
