"""Directive block matching for the bladefmt parser.

One generic algorithm driven by DirectiveDescriptor pairing:

- NONE: leaf, no stack interaction
- OPENS: push a block frame
- MIDDLE: attach to the innermost open block as a sibling marker
- CLOSES: pop the innermost open block of the same family

Malformed input never aborts the parse. Unmatched middles and closers
become orphan leaves; blocks left open are closed implicitly by an outer
closer or at end of input. Each recovery records a diagnostic.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from bladefmt.diagnostics import DiagnosticCode
from bladefmt.directives.descriptor import Pairing
from bladefmt.nodes import Block, Directive
from bladefmt.parsing.frames import FrameKind, OpenFrame
from bladefmt.tokens import Token, TokenType
from bladefmt.utils.logger import get_logger
from bladefmt.utils.text import count_arguments

if TYPE_CHECKING:
    from bladefmt.diagnostics import DiagnosticSink
    from bladefmt.directives.registry import DirectiveRegistry
    from bladefmt.nodes import Node
    from bladefmt.parsing.frames import FrameStack

logger = get_logger(__name__)


class BlockMatchingMixin:
    """Mixin matching directive openers, middles and closers.

    Required Host Attributes:
        - _source: str
        - _frames: FrameStack
        - _registry: DirectiveRegistry
        - _diagnostics: DiagnosticSink

    Required Host Methods:
        - _advance(), _check(), _take() (TokenNavigationMixin)
        - _close_element_frame(frame, end_token) (ElementBuildingMixin)

    """

    _source: str
    _current: Token | None
    _frames: FrameStack
    _registry: DirectiveRegistry
    _diagnostics: DiagnosticSink

    def _advance(self) -> Token | None:
        raise NotImplementedError

    def _check(self, token_type: TokenType) -> bool:
        raise NotImplementedError

    def _take(self, token_type: TokenType) -> Token | None:
        raise NotImplementedError

    def _append(self, node: Node) -> None:
        raise NotImplementedError

    def _close_element_frame(self, frame: OpenFrame, end_token: Token | None) -> Node:
        raise NotImplementedError

    def _read_directive(self) -> Directive:
        """Consume DIRECTIVE_NAME and an optional argument list.

        The returned directive is unresolved (pairing NONE); resolution
        depends on the open blocks and happens in _parse_directive.
        """
        name_token = self._current
        assert name_token is not None
        self._advance()

        last = name_token
        arguments: str | None = None
        if self._check(TokenType.DIRECTIVE_ARGS_OPEN):
            self._advance()
            args_token = self._take(TokenType.DIRECTIVE_ARGS)
            arguments = args_token.value if args_token is not None else ""
            last = self._take(TokenType.DIRECTIVE_ARGS_CLOSE) or last

        location = name_token.location.span_to(last.location)
        written = name_token.value[1:]
        return Directive(
            location=location,
            name=written,
            written_name=written,
            arguments=arguments,
            source=location.slice(self._source),
        )

    def _parse_directive(self) -> None:
        """Read one directive and apply its pairing to the frame stack."""
        raw = self._read_directive()
        descriptor = self._registry.lookup(raw.written_name)
        if descriptor is None:
            self._append(raw)
            return

        _, nearest = self._frames.nearest_block()
        open_family = nearest.family if nearest is not None else None
        arg_count = count_arguments(f"({raw.arguments})" if raw.has_arguments else None)
        pairing, family = descriptor.resolve(arg_count, open_family)

        directive = Directive(
            location=raw.location,
            name=descriptor.name,
            written_name=raw.written_name,
            arguments=raw.arguments,
            pairing=pairing,
            family=family,
            close_kind=descriptor.close_kind if pairing is Pairing.CLOSES else None,
            registered=True,
            spaced_args=descriptor.spaced_args,
            source=raw.source,
        )

        if pairing is Pairing.OPENS:
            assert family is not None
            self._frames.push(
                OpenFrame(
                    FrameKind.BLOCK,
                    directive.location,
                    opener=directive,
                    family=family,
                    indent_middles=descriptor.indent_middles,
                )
            )
        elif pairing is Pairing.MIDDLE:
            self._attach_middle(directive)
        elif pairing is Pairing.CLOSES:
            self._close_block(directive)
        else:
            self._append(directive)

    def _attach_middle(self, directive: Directive) -> None:
        """Attach a middle to its block, or keep it as an orphan leaf."""
        index, _ = self._frames.nearest_block()
        if directive.family is None or index == -1:
            self._diagnostics.warning(
                directive.location,
                DiagnosticCode.UNMATCHED_DIRECTIVE,
                f"'@{directive.written_name}' outside of a matching block; kept as written",
            )
            self._append(replace(directive, orphan=True))
            return
        self._unwind_to(index, directive)
        self._append(directive)

    def _close_block(self, closer: Directive) -> None:
        """Pop the innermost open block of the closer's family."""
        assert closer.family is not None
        index = self._frames.find_block(closer.family)
        if index == -1:
            self._diagnostics.warning(
                closer.location,
                DiagnosticCode.UNMATCHED_DIRECTIVE,
                f"'@{closer.written_name}' has no open '{closer.family}' block; kept as written",
            )
            self._append(replace(closer, orphan=True))
            return
        self._unwind_to(index, closer)
        frame = self._frames.pop()
        self._append(self._finish_block(frame, closer))

    def _unwind_to(self, index: int, cause: Directive) -> None:
        """Implicitly close every frame above ``index``."""
        while len(self._frames) - 1 > index:
            frame = self._frames.pop()
            if frame.is_block:
                assert frame.opener is not None
                self._diagnostics.warning(
                    frame.opener.location,
                    DiagnosticCode.UNMATCHED_DIRECTIVE,
                    f"'@{frame.opener.written_name}' is never closed; "
                    f"block ends at '@{cause.written_name}'",
                )
                logger.debug(
                    "implicitly closed %s block opened at line %d",
                    frame.family,
                    frame.opener.location.lineno,
                )
                self._append(self._finish_block(frame, None))
            else:
                self._append(self._close_element_frame(frame, None))

    def _finish_block(self, frame: OpenFrame, closer: Directive | None) -> Block:
        assert frame.opener is not None and frame.family is not None
        end = closer.location if closer is not None else (frame.end or frame.start)
        return Block(
            location=frame.start.span_to(end),
            opener=frame.opener,
            family=frame.family,
            children=tuple(frame.children),
            closer=closer,
            indent_middles=frame.indent_middles,
        )

    def _close_all_frames(self) -> None:
        """Close everything still open at end of input."""
        while len(self._frames) > 1:
            frame = self._frames.pop()
            if frame.is_block:
                assert frame.opener is not None
                self._diagnostics.warning(
                    frame.opener.location,
                    DiagnosticCode.UNMATCHED_DIRECTIVE,
                    f"'@{frame.opener.written_name}' is never closed; "
                    "block ends at end of input",
                )
                self._append(self._finish_block(frame, None))
            else:
                self._append(self._close_element_frame(frame, None))
