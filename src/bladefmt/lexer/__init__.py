"""Blade scanner.

Turns template source into a flat token stream using an explicit stack of
lexical modes.
"""

from bladefmt.lexer.classifiers import AttributeKind, classify_attribute
from bladefmt.lexer.core import ModeFrame, Scanner
from bladefmt.lexer.modes import ScannerMode

__all__ = [
    "AttributeKind",
    "ModeFrame",
    "Scanner",
    "ScannerMode",
    "classify_attribute",
]
