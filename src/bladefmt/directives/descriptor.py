"""Directive descriptors: pairing metadata for ``@name`` directives.

Every registered directive is described by one frozen DirectiveDescriptor.
The Block Matcher consults descriptors through a single generic algorithm
instead of branching on directive names.

Thread Safety:
Descriptors are frozen and shared process-wide.

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Pairing(Enum):
    """Role a directive plays in block structure."""

    NONE = "none"  # standalone leaf (@csrf, @include, @continue)
    OPENS = "opens"  # pushes a block (@if, @foreach, @section)
    MIDDLE = "middle"  # separates branches of an open block (@else, @case)
    CLOSES = "closes"  # pops a block (@endif, @show)


class CloseKind(Enum):
    """Distinct closing semantics within one family.

    ``@section`` accepts several terminators that are not interchangeable:
    ``@endsection`` defines the section, ``@show`` defines and yields it
    immediately, ``@overwrite`` replaces the parent's content entirely.
    """

    END = "end"
    SHOW = "show"
    OVERWRITE = "overwrite"
    STOP = "stop"
    APPEND = "append"


@dataclass(frozen=True, slots=True)
class DirectiveDescriptor:
    """Pairing metadata for one directive name.

    Attributes:
        name: Canonical spelling (registry casing), without the ``@``
        pairing: Role in block structure
        family: Block family opened or closed (OPENS / CLOSES)
        middle_of: Families this directive may separate (MIDDLE)
        accepts_args: Whether a parenthesized argument list may follow
        allows_inline_condition: Loop control taking a boolean argument
        close_kind: Closing semantics (CLOSES)
        spaced_args: Print one space between name and argument list
        inline_arity: With at least this many arguments the directive is a
            standalone leaf (``@section('title', 'Home')``); 0 disables
        args_family: Family opened when called with arguments
            (``@empty($x)`` opens ``empty`` while bare ``@empty`` is a
            ``forelse`` middle)
        bare_middle_of: Family in which the argument-less form is a middle
            (bare ``@break`` directly inside ``@switch``)
        opaque_body: Body up to ``@end<name>`` is not tokenized
        indent_middles: Middles print one level deeper than the opener,
            with branch bodies one level deeper still (``@switch``)

    """

    name: str
    pairing: Pairing = Pairing.NONE
    family: str | None = None
    middle_of: frozenset[str] = frozenset()
    accepts_args: bool = True
    allows_inline_condition: bool = False
    close_kind: CloseKind | None = None
    spaced_args: bool = False
    inline_arity: int = 0
    args_family: str | None = None
    bare_middle_of: str | None = None
    opaque_body: bool = False
    indent_middles: bool = False

    @property
    def opaque_closer(self) -> str:
        """Directive name that terminates an opaque body."""
        return f"end{self.name}"

    def resolve(self, arg_count: int, open_family: str | None) -> tuple[Pairing, str | None]:
        """Effective pairing for one occurrence.

        Args:
            arg_count: Number of top-level arguments the occurrence carries
            open_family: Family of the innermost open block, if any

        Returns:
            (pairing, family) where family is the block family involved, or
            None for standalone occurrences.
        """
        if self.inline_arity and arg_count >= self.inline_arity:
            return Pairing.NONE, None
        if self.args_family is not None and arg_count > 0:
            return Pairing.OPENS, self.args_family
        if self.bare_middle_of is not None and arg_count == 0 and open_family == self.bare_middle_of:
            return Pairing.MIDDLE, self.bare_middle_of
        if self.pairing is Pairing.MIDDLE:
            if open_family in self.middle_of:
                return Pairing.MIDDLE, open_family
            return Pairing.MIDDLE, None
        return self.pairing, self.family


