"""Utility helpers for bladefmt."""

from bladefmt.utils.logger import get_logger
from bladefmt.utils.text import (
    count_arguments,
    find_delimiter,
    skip_quoted,
    split_top_level,
    strip_whitespace,
)

__all__ = [
    "count_arguments",
    "find_delimiter",
    "get_logger",
    "skip_quoted",
    "split_top_level",
    "strip_whitespace",
]
