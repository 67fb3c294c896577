"""Tests for bladefmt.serialization: AST JSON round-trip."""

import json

import pytest

from bladefmt import parse
from bladefmt.diagnostics import DiagnosticCode
from bladefmt.location import SourceLocation
from bladefmt.nodes import Document, Text
from bladefmt.serialization import from_dict, from_json, to_dict, to_json

_LOC = SourceLocation(lineno=1, col_offset=1)

TEMPLATES = [
    "@if($a)\n<p>{{ $a }}</p>\n@elseif($b)\n{!! $b !!}\n@else\n-\n@endif",
    '<x-alert type="error" :dismissible="true"><x-slot:title>T</x-slot:title>Body</x-alert>',
    '<button @click="open = !open" {{ $attributes }} @disabled($off)>Go</button>',
    "<!DOCTYPE html>\n<script>let a = 1;</script>\n{{-- note --}}\n@verbatim {{ x }} @endverbatim",
    "@section('title')\nHome\n@show\n</span>\n@endif",
]


@pytest.mark.parametrize("source", TEMPLATES)
def test_json_round_trip(source: str) -> None:
    doc = parse(source)
    assert from_json(to_json(doc)) == doc


def test_diagnostics_survive_round_trip() -> None:
    doc = parse("</span>@endif")
    restored = from_json(to_json(doc))
    assert [d.code for d in restored.diagnostics] == [
        DiagnosticCode.STRAY_END_TAG,
        DiagnosticCode.UNMATCHED_DIRECTIVE,
    ]


def test_to_dict_shape() -> None:
    data = to_dict(Text(location=_LOC, content="hi"))
    assert data["_type"] == "Text"
    assert data["content"] == "hi"
    assert data["location"]["_type"] == "SourceLocation"


def test_enums_are_tagged() -> None:
    data = to_dict(parse("@csrf").children[0])
    assert data["pairing"] == {"_enum": "Pairing", "value": "none"}


def test_output_is_deterministic() -> None:
    doc = parse("<p class='a'>{{ $x }}</p>")
    assert to_json(doc) == to_json(doc)
    assert list(json.loads(to_json(doc))) == sorted(json.loads(to_json(doc)))


def test_indent() -> None:
    assert "\n" in to_json(Document(location=_LOC, children=()), indent=2)


class TestErrors:
    def test_missing_type(self) -> None:
        with pytest.raises(ValueError, match="Missing '_type'"):
            from_dict({"content": "x"})

    def test_unknown_type(self) -> None:
        with pytest.raises(ValueError, match="Unknown node type"):
            from_dict({"_type": "Paragraph"})

    def test_json_must_be_a_document(self) -> None:
        with pytest.raises(ValueError, match="Expected Document"):
            from_json(json.dumps(to_dict(Text(location=_LOC, content="x"))))
