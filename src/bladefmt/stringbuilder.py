"""Line-oriented output accumulator for the pretty printer.

Appends fragments to the current line, joins once at the end: O(n) total
vs O(n²) for repeated string concatenation. On top of plain accumulation
it tracks the indent level, the pending single space between inline
fragments, and the blank lines requested between siblings.

Thread Safety:
LineBuilder instances are local to each render() call.
No shared mutable state.

"""

from __future__ import annotations


class LineBuilder:
    """Indentation-aware line accumulator.

    Usage:
        >>> out = LineBuilder("    ", max_blank_lines=1)
        >>> out.append("<div>")
        >>> out.newline()
        >>> out.indent()
        >>> out.append("Hello")
        >>> out.dedent()
        >>> out.newline()
        >>> out.append("</div>")
        >>> out.build()
        '<div>\\n    Hello\\n</div>\\n'

    Rules:
        - The indent is written when the first fragment of a line arrives
        - ``space()`` requests one space before the next fragment on the
          same line; it is dropped at a line break
        - ``blank(n)`` requests up to n blank lines before the next line;
          requests are capped, and ignored at the start and end of a scope
          (right after indent()/dedent()) and at the start of output

    """

    __slots__ = (
        "_lines",
        "_current",
        "_unit",
        "_level",
        "_max_blank",
        "_pending_blank",
        "_pending_space",
        "_scope_start",
    )

    def __init__(self, indent_unit: str = "    ", max_blank_lines: int = 1) -> None:
        self._lines: list[str] = []
        self._current: list[str] = []
        self._unit = indent_unit
        self._level = 0
        self._max_blank = max_blank_lines
        self._pending_blank = 0
        self._pending_space = False
        self._scope_start = True

    @property
    def level(self) -> int:
        return self._level

    @property
    def at_line_start(self) -> bool:
        return not self._current

    def indent(self) -> None:
        self._level += 1
        self._pending_blank = 0
        self._scope_start = True

    def dedent(self) -> None:
        if self._level > 0:
            self._level -= 1
        self._pending_blank = 0
        self._scope_start = True

    def append(self, fragment: str) -> None:
        """Append a single-line fragment to the current line."""
        if not fragment:
            return
        if not self._current:
            if self._pending_blank and self._lines:
                self._lines.extend([""] * min(self._pending_blank, self._max_blank))
            self._pending_blank = 0
            self._current.append(self._unit * self._level)
        elif self._pending_space:
            self._current.append(" ")
        self._current.append(fragment)
        self._pending_space = False
        self._scope_start = False

    def raw(self, text: str) -> None:
        """Append text whose lines after the first are kept byte-identical.

        Only the first line is placed (and indented) like a fragment.
        """
        first, *rest = text.split("\n")
        skip_break = not first and not self._current
        self.append(first)
        for line in rest:
            if not skip_break:
                self._lines.append("".join(self._current))
            skip_break = False
            self._current = [line] if line else []
            self._pending_space = False
            self._scope_start = False

    def space(self) -> None:
        """Request a single space before the next fragment on this line."""
        if self._current:
            self._pending_space = True

    def newline(self) -> None:
        """End the current line; a no-op at the start of a line."""
        if self._current:
            self._lines.append("".join(self._current))
            self._current = []
        self._pending_space = False

    def blank(self, count: int) -> None:
        """Request up to ``count`` blank lines before the next line."""
        if count > 0 and not self._scope_start:
            self._pending_blank = max(self._pending_blank, count)

    def build(self) -> str:
        """Join all lines; non-empty output ends with exactly one newline."""
        self.newline()
        if not self._lines:
            return ""
        return "\n".join(self._lines) + "\n"

    def __len__(self) -> int:
        """Return number of completed lines."""
        return len(self._lines)
