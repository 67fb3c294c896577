"""ContextVar-based format configuration for bladefmt.

Provides thread-local configuration using Python's ContextVars (PEP 567).
Config is set once per format call and read by the scanner, parser and
renderer running in that context.

Thread Safety:
    ContextVars are thread-local. Each thread has independent storage,
    so formatting independent files from a worker pool needs no locks.

Usage:
    from bladefmt.config import FormatConfig, format_config_context

    with format_config_context(FormatConfig(indent_size=2)):
        doc = Parser(source).parse()

"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from bladefmt.directives.registry import DirectiveRegistry


class ClosingStyle(Enum):
    """How closing directives (``@endif``, ``@show``, ``@overwrite``...) are emitted."""

    CANONICAL = "canonical"  # registry casing, no stray whitespace
    AS_WRITTEN = "as_written"  # exact source text


# camelCase spellings accepted by from_dict (rc-file style option names)
_ALIASES = {
    "indentSize": "indent_size",
    "useTabs": "use_tabs",
    "maxLineLength": "max_line_length",
    "sortAttributes": "sort_attributes",
    "preserveBlankLines": "preserve_blank_lines",
    "directiveClosingStyle": "directive_closing_style",
    "checkIdempotence": "check_idempotence",
    "frontMatter": "front_matter",
    "reportUnknownDirectives": "report_unknown_directives",
    "directiveRegistry": "directive_registry",
}


@dataclass(frozen=True, slots=True)
class FormatConfig:
    """Immutable format configuration.

    Attributes:
        indent_size: Spaces per indentation level
        use_tabs: Indent with one tab per level instead of spaces
        max_line_length: Opening tags longer than this get one attribute per line
        sort_attributes: Sort attributes alphabetically between fences
        preserve_blank_lines: Maximum consecutive blank lines kept between siblings
        directive_closing_style: Canonical or verbatim closing directives
        check_idempotence: Re-run the pipeline on its own output and fall back
            to the source if the structure changes
        front_matter: Treat a leading ``---`` block as opaque
        report_unknown_directives: Report unregistered ``@names`` as info
        directive_registry: Registry used for pairing (defaults when None)

    """

    indent_size: int = 4
    use_tabs: bool = False
    max_line_length: int = 120
    sort_attributes: bool = False
    preserve_blank_lines: int = 1
    directive_closing_style: ClosingStyle = ClosingStyle.CANONICAL
    check_idempotence: bool = True
    front_matter: bool = True
    report_unknown_directives: bool = False
    directive_registry: DirectiveRegistry | None = None

    def __post_init__(self) -> None:
        if self.indent_size < 1:
            raise ValueError(f"indent_size must be positive, got {self.indent_size}")
        if self.max_line_length < 1:
            raise ValueError(f"max_line_length must be positive, got {self.max_line_length}")
        if self.preserve_blank_lines < 0:
            raise ValueError(
                f"preserve_blank_lines must not be negative, got {self.preserve_blank_lines}"
            )

    @property
    def indent_unit(self) -> str:
        """The string emitted for one level of indentation."""
        return "\t" if self.use_tabs else " " * self.indent_size

    @classmethod
    def from_dict(cls, config_dict: Mapping[str, Any]) -> "FormatConfig":
        """Create FormatConfig from a dictionary.

        Accepts both snake_case field names and the camelCase option names
        (``indentSize``, ``maxLineLength``...). Unknown keys are ignored.

        Example:
            >>> config = FormatConfig.from_dict({"indentSize": 2, "unknown": 1})
            >>> config.indent_size
            2

        Raises:
            ValueError: For an unknown closing style or out-of-range numbers.
        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered: dict[str, Any] = {}
        for key, value in config_dict.items():
            name = _ALIASES.get(key, key)
            if name in valid_fields:
                filtered[name] = value

        style = filtered.get("directive_closing_style")
        if isinstance(style, str):
            filtered["directive_closing_style"] = ClosingStyle(style.replace("-", "_").lower())
        return cls(**filtered)


# Module-level default config (reused, never recreated)
_DEFAULT_CONFIG: FormatConfig = FormatConfig()

_format_config: ContextVar[FormatConfig] = ContextVar(
    "format_config",
    default=_DEFAULT_CONFIG,
)


def get_format_config() -> FormatConfig:
    """Get the active FormatConfig for this thread/context."""
    return _format_config.get()


def set_format_config(config: FormatConfig) -> None:
    """Set format configuration for the current context."""
    _format_config.set(config)


def reset_format_config() -> None:
    """Reset to the module-level default configuration."""
    _format_config.set(_DEFAULT_CONFIG)


@contextmanager
def format_config_context(config: FormatConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Restores the previous config even if an exception is raised.

    Example:
        >>> with format_config_context(FormatConfig(use_tabs=True)):
        ...     get_format_config().indent_unit
        '\\t'
    """
    previous = _format_config.get()
    _format_config.set(config)
    try:
        yield
    finally:
        _format_config.set(previous)


__all__ = [
    "ClosingStyle",
    "FormatConfig",
    "get_format_config",
    "set_format_config",
    "reset_format_config",
    "format_config_context",
]
