"""AST Visitor for bladefmt.

Provides a base visitor class with match-based dispatch and a pre-order
walk helper.

Example: collect every block of a family.

    class BlockCollector(BaseVisitor[None]):
        def __init__(self, family: str) -> None:
            self.family = family
            self.blocks: list[Block] = []

        def visit_block(self, node: Block) -> None:
            if node.family == self.family:
                self.blocks.append(node)

    collector = BlockCollector("if")
    collector.visit(doc)

Thread Safety:
    Visitors are NOT shared across threads by default (they may accumulate
    mutable state). Create a new visitor per thread.

"""

from collections.abc import Iterator

from bladefmt.nodes import (
    Attribute,
    Block,
    Comment,
    Component,
    Directive,
    Document,
    Echo,
    Element,
    EndTag,
    Node,
    Opaque,
    Slot,
    Text,
)


class BaseVisitor[T]:
    """Base AST visitor with match-based dispatch.

    Subclass and override ``visit_*`` methods for node types you care about.
    Unhandled node types fall through to ``visit_default``. Children are
    walked automatically after the ``visit_*`` call; a component's slots
    are walked before its default children, and a markup node's attributes
    are not walked (override ``visit_element`` etc. to inspect them).

    Type parameter ``T`` is the return type of visit methods (use ``None``
    for side-effect-only visitors).

    """

    def visit(self, node: Node) -> T:
        """Dispatch to the appropriate ``visit_*`` method.

        Walks children automatically after the visit method returns.

        """
        result = self._dispatch(node)
        self._walk_children(node)
        return result

    def visit_default(self, node: Node) -> T:
        """Called for node types without a specific ``visit_*`` method.

        Override this for catch-all behavior. Default returns None
        (suitable for ``BaseVisitor[None]``).

        """
        return None  # type: ignore[return-value]

    def visit_document(self, node: Document) -> T:
        return self.visit_default(node)

    def visit_text(self, node: Text) -> T:
        return self.visit_default(node)

    def visit_echo(self, node: Echo) -> T:
        return self.visit_default(node)

    def visit_comment(self, node: Comment) -> T:
        return self.visit_default(node)

    def visit_opaque(self, node: Opaque) -> T:
        return self.visit_default(node)

    def visit_directive(self, node: Directive) -> T:
        return self.visit_default(node)

    def visit_block(self, node: Block) -> T:
        return self.visit_default(node)

    def visit_element(self, node: Element) -> T:
        return self.visit_default(node)

    def visit_component(self, node: Component) -> T:
        return self.visit_default(node)

    def visit_slot(self, node: Slot) -> T:
        return self.visit_default(node)

    def visit_end_tag(self, node: EndTag) -> T:
        return self.visit_default(node)

    def visit_attribute(self, node: Attribute) -> T:
        return self.visit_default(node)

    # -- Internal dispatch -----------------------------------------------------

    def _dispatch(self, node: Node) -> T:
        """Match-based dispatch to visit_* methods."""
        match node:
            case Document():
                return self.visit_document(node)
            case Text():
                return self.visit_text(node)
            case Echo():
                return self.visit_echo(node)
            case Comment():
                return self.visit_comment(node)
            case Opaque():
                return self.visit_opaque(node)
            case Directive():
                return self.visit_directive(node)
            case Block():
                return self.visit_block(node)
            case Element():
                return self.visit_element(node)
            case Component():
                return self.visit_component(node)
            case Slot():
                return self.visit_slot(node)
            case EndTag():
                return self.visit_end_tag(node)
            case Attribute():
                return self.visit_attribute(node)
            case _:
                return self.visit_default(node)

    def _walk_children(self, node: Node) -> None:
        """Recursively visit child nodes."""
        for child in child_nodes(node):
            self.visit(child)


def child_nodes(node: Node) -> tuple[Node, ...]:
    """Direct children in visiting order.

    Block middles are children like any other; a block's closer is
    visited after its children. Components yield slots first.
    """
    match node:
        case Document(children=children) | Element(children=children) | Slot(children=children):
            return children
        case Block(children=children, closer=closer):
            return (node.opener, *children, closer) if closer is not None else (node.opener, *children)
        case Component(slots=slots, children=children):
            return (*slots, *children)
        case _:
            return ()


def walk(node: Node) -> Iterator[Node]:
    """Yield ``node`` and all its descendants in pre-order."""
    yield node
    for child in child_nodes(node):
        yield from walk(child)
