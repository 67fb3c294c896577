"""Parsing subsystem for the bladefmt Block Matcher.

Provides mixin classes for modular tree building:
- `TokenNavigationMixin`: Token stream traversal
- `BlockMatchingMixin`: Directive stack discipline (open/middle/close)
- `ElementBuildingMixin`: Tags, components and slots

Architecture:
Directive blocks and open elements share one FrameStack, so a closer can
never close an ancestor while one of its descendants is still open.

Example:
    >>> from bladefmt.parsing import (
    ...     TokenNavigationMixin,
    ...     ElementBuildingMixin,
    ...     BlockMatchingMixin,
    ... )
    >>> class Parser(TokenNavigationMixin, ElementBuildingMixin, BlockMatchingMixin):
    ...     pass

"""

from bladefmt.parsing.blocks import BlockMatchingMixin
from bladefmt.parsing.elements import ElementBuildingMixin
from bladefmt.parsing.frames import FrameKind, FrameStack, OpenFrame
from bladefmt.parsing.token_nav import TokenNavigationMixin

__all__ = [
    "BlockMatchingMixin",
    "ElementBuildingMixin",
    "FrameKind",
    "FrameStack",
    "OpenFrame",
    "TokenNavigationMixin",
]
