"""Attribute-context disambiguator.

Blade directives are statement-level constructs: they never begin at an
attribute-name position. Inside a start tag, a leading ``@`` or ``:``
therefore belongs to a client-side framework (Alpine.js, Livewire, Vue)
and the whole attribute is passed through untouched, whatever its name
collides with.

Classification:
    @click.stop="..."        FOREIGN_EVENT
    x-on:keydown.enter="..." FOREIGN_EVENT
    :class="{ ... }"         FOREIGN_PROPERTY
    x-data="{ ... }"         FOREIGN_PROPERTY
    wire:model.live="..."    FOREIGN_PROPERTY
    {{ $attributes }}        HOST_ECHO (scanned as echo tokens)
    class="..."              PLAIN
    @disabled($x)            PLAIN, reported as ambiguous
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from bladefmt.diagnostics import DiagnosticCode

if TYPE_CHECKING:
    from bladefmt.diagnostics import DiagnosticSink
    from bladefmt.directives.registry import DirectiveRegistry
    from bladefmt.location import SourceLocation


class AttributeKind(Enum):
    """What an attribute-name position holds."""

    FOREIGN_EVENT = "foreign-event"
    FOREIGN_PROPERTY = "foreign-property"
    HOST_ECHO = "host-echo"
    PLAIN = "plain"

    @property
    def is_foreign(self) -> bool:
        return self in (AttributeKind.FOREIGN_EVENT, AttributeKind.FOREIGN_PROPERTY)


_EVENT_PREFIXES = ("x-on:", "v-on:")
_PROPERTY_PREFIXES = ("x-bind:", "v-bind:", "x-", "v-")
_WIRE_EVENTS = frozenset(
    {
        "click",
        "dblclick",
        "submit",
        "keydown",
        "keyup",
        "keypress",
        "change",
        "input",
        "blur",
        "focus",
        "mouseenter",
        "mouseleave",
    }
)

# Characters that end an attribute name
_NAME_STOP = frozenset(" \t\r\n\f=>\"'")


def _base_name(name: str) -> str:
    """``@click.stop`` -> ``click``; ``@class([...])`` -> ``class``."""
    body = name.lstrip("@:")
    for i, ch in enumerate(body):
        if ch in ".:( \t":
            return body[:i]
    return body


def classify_attribute(
    name: str,
    has_value: bool,
    registry: DirectiveRegistry,
) -> tuple[AttributeKind, bool]:
    """Classify an attribute name.

    Args:
        name: Attribute name exactly as written
        has_value: Whether ``=value`` follows the name
        registry: Directive registry, used only to detect name collisions

    Returns:
        (kind, ambiguous). ``ambiguous`` is True for a valueless ``@name``
        colliding with a registered directive (``@disabled($x)``); such
        attributes fall back to PLAIN and are never treated as directives.
    """
    if name.startswith("@"):
        if not has_value and registry.has(_base_name(name)):
            return AttributeKind.PLAIN, True
        return AttributeKind.FOREIGN_EVENT, False
    if name.startswith(":"):
        return AttributeKind.FOREIGN_PROPERTY, False

    lowered = name.lower()
    if lowered.startswith(_EVENT_PREFIXES):
        return AttributeKind.FOREIGN_EVENT, False
    if lowered.startswith("wire:"):
        if _base_name(lowered[len("wire:") :]) in _WIRE_EVENTS:
            return AttributeKind.FOREIGN_EVENT, False
        return AttributeKind.FOREIGN_PROPERTY, False
    if lowered.startswith(_PROPERTY_PREFIXES):
        return AttributeKind.FOREIGN_PROPERTY, False
    return AttributeKind.PLAIN, False


class AttributeClassifierMixin:
    """Mixin locating attribute names inside a start tag.

    Pure logic: computes where a name ends without moving the scanner.
    """

    _source: str
    _source_len: int
    _registry: DirectiveRegistry
    diagnostics: DiagnosticSink

    def _find_balanced_end(self, pos: int) -> int:
        raise NotImplementedError

    def _find_delimiter(self, pos: int, closer: str) -> int:
        raise NotImplementedError

    def _skip_inline_space(self, pos: int) -> int:
        raise NotImplementedError

    def _attribute_name_end(self, pos: int) -> int:
        """Index just past the attribute name starting at ``pos``.

        Handles modifier chains (``@click.outside.window``), colon
        namespaces (``x-on:click``, ``::class``), the parenthesized list of
        ``@name(...)`` forms (after spaces too, for directives taking
        arguments, as in ``@if ($x)``), and echoes embedded in names
        (``data-{{ $key }}``).
        """
        source = self._source
        n = self._source_len
        i = pos
        grouped = False
        while i < n:
            ch = source[i]
            if ch in _NAME_STOP:
                if ch in " \t" and source[pos] == "@" and not grouped:
                    # @if ($x): the directive's own spacing before its arguments
                    paren = self._skip_inline_space(i)
                    descriptor = self._registry.lookup(source[pos + 1 : i])
                    takes_args = descriptor is not None and descriptor.accepts_args
                    if takes_args and paren < n and source[paren] == "(":
                        end = self._find_balanced_end(paren)
                        if end != -1:
                            i = end
                            grouped = True
                            continue
                break
            if ch == "/" and source.startswith("/>", i):
                break
            if ch == "{" and source.startswith("{{", i):
                close = self._find_delimiter(i + 2, "}}")
                if close == -1:
                    break
                i = close + 2
                continue
            if ch == "(" and source[pos] == "@":
                end = self._find_balanced_end(i)
                if end == -1:
                    break
                i = end
                grouped = True
                continue
            i += 1
        if i == pos:
            # stray character where a name should start; take it alone
            return pos + 1
        return i

    def _classify_attribute_name(
        self, name: str, has_value: bool, location: SourceLocation
    ) -> AttributeKind:
        """Classify and report ambiguous names as informational diagnostics."""
        kind, ambiguous = classify_attribute(name, has_value, self._registry)
        if ambiguous:
            self.diagnostics.info(
                location,
                DiagnosticCode.AMBIGUOUS_ATTRIBUTE,
                f"'{name}' in an attribute list collides with directive "
                f"'@{_base_name(name)}'; kept as a plain attribute",
            )
        return kind
