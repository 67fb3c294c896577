"""Scanner operating modes and markup constants.

This module defines the finite state machine modes for the scanner and the
element-name sets used for tag classification.
"""

from __future__ import annotations

from enum import Enum, auto


class ScannerMode(Enum):
    """Scanner operating modes.

    The scanner keeps a stack of modes; nested constructs push a mode and
    pop it when their terminator is consumed:
    - TEXT: Element content and top level; directives, echoes, tags start here
    - IN_DIRECTIVE_HEAD: ``@name`` just seen, deciding on arguments/opaque body
    - IN_DIRECTIVE_ARGS: Balanced ``( ... )`` argument list
    - IN_ECHO: ``{{ }}`` or ``{!! !!}`` body
    - IN_COMMENT: ``{{-- --}}`` body
    - IN_TAG: Attribute list of a start tag
    - IN_ATTRIBUTE_VALUE: Value after ``=`` in a start tag
    - IN_VERBATIM: ``@verbatim`` body, opaque
    - IN_RAW_CODE: ``@php`` / ``<?php`` body, opaque
    - IN_RAW_TEXT: Body of script/style/pre/textarea, opaque

    """

    TEXT = auto()
    IN_DIRECTIVE_HEAD = auto()
    IN_DIRECTIVE_ARGS = auto()
    IN_ECHO = auto()
    IN_COMMENT = auto()
    IN_TAG = auto()
    IN_ATTRIBUTE_VALUE = auto()
    IN_VERBATIM = auto()
    IN_RAW_CODE = auto()
    IN_RAW_TEXT = auto()


# Elements whose content is never tokenized or reflowed
RAW_TEXT_ELEMENTS = frozenset({"script", "style", "pre", "textarea"})

# Elements that never take an end tag
VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Block-level elements: printed on their own lines when they hold markup
BLOCK_ELEMENTS = frozenset(
    {
        "address",
        "article",
        "aside",
        "blockquote",
        "body",
        "details",
        "dialog",
        "dd",
        "div",
        "dl",
        "dt",
        "fieldset",
        "figcaption",
        "figure",
        "footer",
        "form",
        "head",
        "header",
        "hgroup",
        "html",
        "li",
        "main",
        "menu",
        "nav",
        "ol",
        "optgroup",
        "section",
        "select",
        "summary",
        "table",
        "tbody",
        "td",
        "template",
        "tfoot",
        "th",
        "thead",
        "tr",
        "ul",
    }
)

COMPONENT_PREFIX = "x-"
SLOT_TAG = "x-slot"

# Characters that may end a run of plain text
TEXT_TRIGGER_CHARS = frozenset("@{<")

# Characters allowed in tag names (<x-slot:header>, <livewire:counter>)
TAG_NAME_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-_:."
)


def tag_subkind(name: str) -> str | None:
    """Classify a tag name: "slot", "component" or None for markup."""
    lowered = name.lower()
    if lowered == SLOT_TAG or lowered.startswith(SLOT_TAG + ":"):
        return "slot"
    if lowered.startswith(COMPONENT_PREFIX):
        return "component"
    return None
