"""Renderers for bladefmt ASTs."""

from bladefmt.renderers.blade import (
    BladeRenderer,
    format_echo,
    normalize_echoes,
    order_attributes,
)
from bladefmt.renderers.protocol import ASTRenderer

__all__ = [
    "ASTRenderer",
    "BladeRenderer",
    "format_echo",
    "normalize_echoes",
    "order_attributes",
]
