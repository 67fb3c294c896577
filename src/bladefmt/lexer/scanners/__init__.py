"""Mode-specific scanners for the bladefmt scanner.

Each scanner is a mixin implementing one or two lexical modes.
"""

from bladefmt.lexer.scanners.directive import DirectiveScannerMixin
from bladefmt.lexer.scanners.echo import EchoScannerMixin
from bladefmt.lexer.scanners.opaque import OpaqueScannerMixin
from bladefmt.lexer.scanners.tag import TagScannerMixin
from bladefmt.lexer.scanners.text import TextScannerMixin

__all__ = [
    "DirectiveScannerMixin",
    "EchoScannerMixin",
    "OpaqueScannerMixin",
    "TagScannerMixin",
    "TextScannerMixin",
]
