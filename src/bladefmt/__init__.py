"""
bladefmt: structure-aware formatter for Blade templates

Reformats HTML interleaved with Blade directives, echoes and components
while leaving Alpine.js / Livewire attribute bindings byte-identical.
Zero runtime dependencies.

Quick Start:
    >>> from bladefmt import format
    >>> result = format("@if($user)\\n<p>{{$user->name}}</p>\\n@endif")
    >>> print(result.formatted_text)
    @if ($user)
        <p>{{ $user->name }}</p>
    @endif

    >>> # Or reuse one configuration across many files
    >>> from bladefmt import Formatter, FormatConfig
    >>> fmt = Formatter(FormatConfig(indent_size=2))
    >>> fmt("<div><span>hi</span></div>").formatted_text
    '<div>\\n  <span>hi</span>\\n</div>\\n'

Custom Directives:
    >>> from bladefmt import CloseKind, DirectiveDescriptor, Pairing, create_registry_with_defaults
    >>> registry = (
    ...     create_registry_with_defaults()
    ...     .register(DirectiveDescriptor("datetime"))
    ...     .register(DirectiveDescriptor("feature", Pairing.OPENS, family="feature"))
    ...     .register(
    ...         DirectiveDescriptor(
    ...             "endfeature", Pairing.CLOSES, family="feature", close_kind=CloseKind.END
    ...         )
    ...     )
    ...     .build()
    ... )
    >>> config = FormatConfig(directive_registry=registry)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from bladefmt.config import (
    ClosingStyle,
    FormatConfig,
    format_config_context,
    get_format_config,
    reset_format_config,
    set_format_config,
)
from bladefmt.diagnostics import Diagnostic, DiagnosticCode, Severity
from bladefmt.directives import (
    CloseKind,
    DirectiveDescriptor,
    DirectiveRegistry,
    DirectiveRegistryBuilder,
    Pairing,
    create_default_registry,
    create_registry_with_defaults,
)
from bladefmt.errors import BladeFormatError, IdempotenceViolation, LexError
from bladefmt.guard import IdempotenceGuard
from bladefmt.lexer import Scanner
from bladefmt.location import SourceLocation
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
    OpaqueKind,
    Slot,
    Text,
)
from bladefmt.parser import Parser
from bladefmt.renderers.blade import BladeRenderer
from bladefmt.renderers.protocol import ASTRenderer
from bladefmt.serialization import from_dict, from_json, to_dict, to_json
from bladefmt.tokens import Token, TokenType
from bladefmt.utils.logger import get_logger
from bladefmt.visitor import BaseVisitor, walk

__version__ = "0.1.0"

logger = get_logger(__name__)

type Options = FormatConfig | Mapping[str, Any] | None


@dataclass(frozen=True, slots=True)
class FormatResult:
    """Outcome of one format call.

    Attributes:
        formatted_text: Formatted source, or the input unchanged when
            formatting fell back (see ``diagnostics``)
        diagnostics: Findings ordered by position
        changed: Whether ``formatted_text`` differs from the input

    """

    formatted_text: str
    diagnostics: tuple[Diagnostic, ...] = ()
    changed: bool = False

    @property
    def failed(self) -> bool:
        """True when a fatal condition forced the original text back."""
        return any(d.severity is Severity.ERROR for d in self.diagnostics)


def _resolve_config(options: Options) -> FormatConfig:
    if options is None:
        return get_format_config()
    if isinstance(options, FormatConfig):
        return options
    return FormatConfig.from_dict(options)


def parse(
    source: str,
    *,
    source_file: str | None = None,
    config: FormatConfig | None = None,
) -> Document:
    """Parse Blade source into a typed AST.

    Args:
        source: Template source text
        source_file: Optional source file path for diagnostics
        config: Options (uses the active FormatConfig if None)

    Returns:
        Document AST root node, diagnostics attached

    Raises:
        LexError: For an unterminated lexical construct.

    Example:
        >>> doc = parse("@foreach($items as $item) {{ $item }} @endforeach")
        >>> doc.children[0].family
        'foreach'
    """
    with format_config_context(config or get_format_config()):
        return Parser(source, source_file=source_file).parse()


def render(doc: Document, *, config: FormatConfig | None = None) -> str:
    """Render an AST Document back to formatted Blade source.

    No idempotence check is made; use ``format()`` for the guarded pipeline.
    """
    active = config or get_format_config()
    with format_config_context(active):
        return BladeRenderer(active).render(doc)


def format(source: str, options: Options = None, file_path: str | None = None) -> FormatResult:
    """Format a Blade template.

    Never raises for malformed input. Recoverable problems (unmatched
    directives, stray end tags...) are reported as diagnostics and the
    rest of the file is still formatted. An unterminated construct or an
    unstable result returns the source unchanged with an ERROR diagnostic.

    Args:
        source: Template source text
        options: FormatConfig, a mapping of options (snake_case or camelCase
            keys), or None for the active configuration
        file_path: Optional path, used in diagnostics and log messages

    Returns:
        FormatResult

    Raises:
        ValueError: For invalid option values.
    """
    config = _resolve_config(options)
    with format_config_context(config):
        return _format_with(config, source, file_path)


def _format_with(config: FormatConfig, source: str, file_path: str | None) -> FormatResult:
    """Run the pipeline under an already-active config."""
    name = file_path or "<string>"
    try:
        doc = Parser(source, source_file=file_path).parse()
    except LexError as exc:
        logger.info("%s: not formatted: %s", name, exc)
        return _fallback(source, exc.lineno, exc.col_offset, exc.message, DiagnosticCode.LEX_ERROR)

    formatted = BladeRenderer(config).render(doc)

    if config.check_idempotence:
        try:
            IdempotenceGuard(config).check(doc, formatted, file_path)
        except IdempotenceViolation as exc:
            logger.info("%s: not formatted: %s", name, exc)
            return _fallback(
                source,
                exc.region_line,
                1,
                str(exc),
                DiagnosticCode.IDEMPOTENCE_VIOLATION,
                doc.diagnostics,
            )

    logger.debug("%s: formatted (%d diagnostics)", name, len(doc.diagnostics))
    return FormatResult(
        formatted_text=formatted,
        diagnostics=doc.diagnostics,
        changed=formatted != source,
    )


def _fallback(
    source: str,
    line: int | None,
    column: int | None,
    message: str,
    code: DiagnosticCode,
    recovered: tuple[Diagnostic, ...] = (),
) -> FormatResult:
    error = Diagnostic(
        line=line or 0,
        column=column or 0,
        severity=Severity.ERROR,
        message=message,
        code=code,
    )
    diagnostics = tuple(sorted((*recovered, error), key=lambda d: (d.line, d.column)))
    return FormatResult(formatted_text=source, diagnostics=diagnostics, changed=False)


class Formatter:
    """High-level formatter bound to one configuration.

    Usage:
        >>> fmt = Formatter(FormatConfig(indent_size=2, sort_attributes=True))
        >>> result = fmt('<input type="text" name="q">')
        >>> result.formatted_text
        '<input name="q" type="text">\\n'

        >>> # Access the AST
        >>> doc = fmt.parse("@section('title', 'Home')")
        >>> doc.children[0].name
        'section'

    Thread Safety:
        Uses ContextVar for thread-local configuration. Safe to use multiple
        Formatter instances concurrently from different threads.

    """

    __slots__ = ("_config",)

    def __init__(self, config: Options = None) -> None:
        # Resolve once so later changes to the context do not leak in
        self._config = _resolve_config(config)

    @property
    def config(self) -> FormatConfig:
        return self._config

    def __call__(self, source: str, *, file_path: str | None = None) -> FormatResult:
        """Format one template."""
        with format_config_context(self._config):
            return _format_with(self._config, source, file_path)

    def parse(self, source: str, *, source_file: str | None = None) -> Document:
        """Parse source into AST under this formatter's configuration.

        Raises:
            LexError: For an unterminated lexical construct.
        """
        return parse(source, source_file=source_file, config=self._config)

    def render(self, doc: Document) -> str:
        """Render AST to formatted source (unguarded)."""
        return render(doc, config=self._config)

    def format_many(
        self,
        sources: Iterable[str],
        *,
        file_path: str | None = None,
    ) -> list[FormatResult]:
        """Format multiple templates.

        Sets config once, formats all, restores once.

        Example:
            >>> fmt = Formatter()
            >>> results = fmt.format_many(["@csrf", "<br>", "{{$a}}"])
        """
        with format_config_context(self._config):
            return [_format_with(self._config, source, file_path) for source in sources]


__all__ = [
    # Main API
    "format",
    "parse",
    "render",
    "Formatter",
    "FormatResult",
    # Configuration
    "ClosingStyle",
    "FormatConfig",
    "format_config_context",
    "get_format_config",
    "reset_format_config",
    "set_format_config",
    # Diagnostics and errors
    "BladeFormatError",
    "Diagnostic",
    "DiagnosticCode",
    "IdempotenceViolation",
    "LexError",
    "Severity",
    # Directives
    "CloseKind",
    "DirectiveDescriptor",
    "DirectiveRegistry",
    "DirectiveRegistryBuilder",
    "Pairing",
    "create_default_registry",
    "create_registry_with_defaults",
    # Pipeline
    "ASTRenderer",
    "BladeRenderer",
    "IdempotenceGuard",
    "Parser",
    "Scanner",
    "SourceLocation",
    "Token",
    "TokenType",
    # AST
    "Attribute",
    "Block",
    "Comment",
    "Component",
    "Directive",
    "Document",
    "Echo",
    "Element",
    "EndTag",
    "Node",
    "Opaque",
    "OpaqueKind",
    "Slot",
    "Text",
    # Visitor and serialization
    "BaseVisitor",
    "walk",
    "from_dict",
    "from_json",
    "to_dict",
    "to_json",
    "__version__",
]
