"""AST serialization: JSON round-trip for bladefmt AST nodes.

Converts typed AST nodes to/from JSON-compatible dicts. Useful for:
- Dumping a template's tree for debugging
- Snapshotting parse results in tests
- Handing the tree to editor tooling

All output is deterministic (sorted keys).

Example:
    from bladefmt import parse
    from bladefmt.serialization import to_json, from_json

    doc = parse("@if($x) <b>{{ $x }}</b> @endif")
    restored = from_json(to_json(doc))
    assert doc == restored

Thread Safety:
    All functions are pure and safe to call from any thread.

"""

import json
from dataclasses import fields
from enum import Enum
from typing import Any

from bladefmt.diagnostics import Diagnostic, DiagnosticCode, Severity
from bladefmt.directives.descriptor import CloseKind, Pairing
from bladefmt.lexer.classifiers.attribute import AttributeKind
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

# Registry of node type names to classes for deserialization
_NODE_TYPES: dict[str, type] = {
    "Document": Document,
    "Text": Text,
    "Echo": Echo,
    "Comment": Comment,
    "Opaque": Opaque,
    "Directive": Directive,
    "Block": Block,
    "Attribute": Attribute,
    "Element": Element,
    "Component": Component,
    "Slot": Slot,
    "EndTag": EndTag,
}

_ENUM_TYPES: dict[str, type[Enum]] = {
    "Pairing": Pairing,
    "CloseKind": CloseKind,
    "AttributeKind": AttributeKind,
    "OpaqueKind": OpaqueKind,
    "Severity": Severity,
    "DiagnosticCode": DiagnosticCode,
}


def to_dict(node: Node) -> dict[str, Any]:
    """Convert an AST node to a JSON-compatible dict.

    Includes a ``_type`` discriminator field for deserialization.
    Recursively serializes child nodes, locations, enums and diagnostics.

    Args:
        node: Any bladefmt AST node.

    Returns:
        Dict with ``_type`` and all node fields.

    """
    result: dict[str, Any] = {"_type": type(node).__name__}

    for f in fields(node):
        result[f.name] = _serialize_value(getattr(node, f.name))

    return result


def _serialize_value(value: Any) -> Any:
    """Serialize a single field value."""
    if isinstance(value, Node):
        return to_dict(value)
    if isinstance(value, SourceLocation):
        return {
            "_type": "SourceLocation",
            "lineno": value.lineno,
            "col_offset": value.col_offset,
            "offset": value.offset,
            "end_offset": value.end_offset,
            "end_lineno": value.end_lineno,
            "end_col_offset": value.end_col_offset,
            "source_file": value.source_file,
        }
    if isinstance(value, Diagnostic):
        return {
            "_type": "Diagnostic",
            **{f.name: _serialize_value(getattr(value, f.name)) for f in fields(value)},
        }
    if isinstance(value, Enum):
        return {"_enum": type(value).__name__, "value": value.value}
    if isinstance(value, tuple):
        return [_serialize_value(item) for item in value]
    # Primitives: str, int, bool, None
    return value


def from_dict(data: dict[str, Any]) -> Node:
    """Reconstruct a typed AST node from a dict.

    Args:
        data: Dict with ``_type`` and node fields (as produced by to_dict).

    Returns:
        Typed AST node (frozen dataclass).

    Raises:
        ValueError: If ``_type`` is missing or unknown.

    """
    type_name = data.get("_type")
    if type_name is None:
        msg = "Missing '_type' field in serialized node"
        raise ValueError(msg)

    node_cls = _NODE_TYPES.get(type_name)
    if node_cls is None:
        msg = f"Unknown node type: {type_name!r}"
        raise ValueError(msg)

    kwargs: dict[str, Any] = {}
    for f in fields(node_cls):
        if f.name in data:
            kwargs[f.name] = _deserialize_value(data[f.name])

    return node_cls(**kwargs)


def _deserialize_value(value: Any) -> Any:
    """Deserialize a single field value."""
    if isinstance(value, dict):
        if "_enum" in value:
            enum_cls = _ENUM_TYPES.get(value["_enum"])
            if enum_cls is None:
                msg = f"Unknown enum type: {value['_enum']!r}"
                raise ValueError(msg)
            return enum_cls(value["value"])
        type_name = value.get("_type")
        if type_name == "SourceLocation":
            return SourceLocation(
                lineno=value["lineno"],
                col_offset=value["col_offset"],
                offset=value.get("offset", 0),
                end_offset=value.get("end_offset", 0),
                end_lineno=value.get("end_lineno"),
                end_col_offset=value.get("end_col_offset"),
                source_file=value.get("source_file"),
            )
        if type_name == "Diagnostic":
            return Diagnostic(
                line=value["line"],
                column=value["column"],
                severity=_deserialize_value(value["severity"]),
                message=value["message"],
                code=_deserialize_value(value["code"]),
            )
        if type_name is not None:
            return from_dict(value)
        return value
    if isinstance(value, list):
        return tuple(_deserialize_value(item) for item in value)
    return value


def to_json(doc: Document, *, indent: int | None = None) -> str:
    """Serialize a Document AST to a JSON string.

    Args:
        doc: Document to serialize.
        indent: JSON indentation level (None for compact).

    Returns:
        JSON string with sorted keys.

    """
    return json.dumps(to_dict(doc), sort_keys=True, indent=indent)


def from_json(data: str) -> Document:
    """Deserialize a Document AST from a JSON string.

    Raises:
        ValueError: If the JSON doesn't represent a Document.

    """
    raw = json.loads(data)
    node = from_dict(raw)
    if not isinstance(node, Document):
        msg = f"Expected Document, got {type(node).__name__}"
        raise ValueError(msg)
    return node
