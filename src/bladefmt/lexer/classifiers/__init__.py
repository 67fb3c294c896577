"""Classifiers for the bladefmt scanner.

Classifiers decide what a construct is without consuming input.
"""

from bladefmt.lexer.classifiers.attribute import (
    AttributeClassifierMixin,
    AttributeKind,
    classify_attribute,
)

__all__ = [
    "AttributeClassifierMixin",
    "AttributeKind",
    "classify_attribute",
]
