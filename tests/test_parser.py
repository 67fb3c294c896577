"""Tests for the Block Matcher: directive pairing, elements, recovery."""

import pytest

from bladefmt import parse
from bladefmt.diagnostics import DiagnosticCode, Severity
from bladefmt.directives import CloseKind, Pairing
from bladefmt.errors import LexError
from bladefmt.lexer import AttributeKind
from bladefmt.nodes import (
    Block,
    Comment,
    Component,
    Directive,
    Echo,
    Element,
    EndTag,
    Opaque,
    OpaqueKind,
    Slot,
    Text,
)
from bladefmt.visitor import walk


def _blocks(source: str) -> list[Block]:
    return [node for node in walk(parse(source)) if isinstance(node, Block)]


def _codes(source: str) -> list[DiagnosticCode]:
    return [d.code for d in parse(source).diagnostics]


class TestLeaves:
    def test_text_only(self) -> None:
        doc = parse("Hello")
        assert doc.children == (Text(location=doc.children[0].location, content="Hello"),)

    def test_echo(self) -> None:
        echo = parse("{{ $name }}").children[0]
        assert isinstance(echo, Echo)
        assert echo.expression == " $name "
        assert echo.raw is False
        assert echo.delimiters == ("{{", "}}")

    def test_raw_echo(self) -> None:
        echo = parse("{!! $html !!}").children[0]
        assert isinstance(echo, Echo)
        assert echo.raw is True

    def test_comment_keeps_full_text(self) -> None:
        comment = parse("{{-- hi --}}").children[0]
        assert isinstance(comment, Comment)
        assert comment.content == "{{-- hi --}}"

    def test_standalone_directive(self) -> None:
        directive = parse("@include('partials.nav', ['a' => 1])").children[0]
        assert isinstance(directive, Directive)
        assert directive.name == "include"
        assert directive.arguments == "'partials.nav', ['a' => 1]"
        assert directive.pairing is Pairing.NONE
        assert directive.registered

    def test_unknown_directive_is_passthrough_leaf(self) -> None:
        doc = parse("@datetime($d)")
        directive = doc.children[0]
        assert isinstance(directive, Directive)
        assert directive.registered is False
        assert directive.pairing is Pairing.NONE
        assert doc.diagnostics == ()

    def test_opaque_spans(self) -> None:
        doc = parse("<!DOCTYPE html><!-- x -->@verbatim {{ a }} @endverbatim")
        kinds = [child.kind for child in doc.children if isinstance(child, Opaque)]
        assert kinds == [OpaqueKind.DECLARATION, OpaqueKind.HTML_COMMENT, OpaqueKind.VERBATIM]

    def test_verbatim_content_is_literal(self) -> None:
        source = "@verbatim\n    {{ $x }} @if($y) <div>\n@endverbatim"
        doc = parse(source)
        assert len(doc.children) == 1
        opaque = doc.children[0]
        assert isinstance(opaque, Opaque)
        assert opaque.content == source

    def test_adjacent_text_is_merged(self) -> None:
        # "<!" not starting a comment or declaration yields a lone "<" token
        doc = parse("a <! b")
        assert len(doc.children) == 1
        assert doc.children[0].content == "a <! b"  # type: ignore[union-attr]


class TestBlocks:
    def test_if_else_block(self) -> None:
        block = parse("@if($a) A @elseif($b) B @else C @endif").children[0]
        assert isinstance(block, Block)
        assert block.family == "if"
        assert block.is_closed
        assert [m.name for m in block.middles] == ["elseif", "else"]
        assert len(block.branches) == 3
        assert block.branches[0][0] is None

    def test_case_insensitive_closer(self) -> None:
        block = parse("@if($a) x @endIf").children[0]
        assert isinstance(block, Block)
        assert block.closer is not None
        assert block.closer.name == "endif"
        assert block.closer.written_name == "endIf"

    def test_partner_identity_ten_levels(self) -> None:
        families = ["if", "foreach", "while", "unless", "for"] * 2
        openers = {
            "if": "@if($c)",
            "foreach": "@foreach($xs as $x)",
            "while": "@while($w)",
            "unless": "@unless($u)",
            "for": "@for($i = 0; $i < 3; $i++)",
        }
        source = "\n".join(openers[f] for f in families)
        source += "\nbody\n"
        source += "\n".join(f"@end{f}" for f in reversed(families))

        doc = parse(source)
        assert doc.diagnostics == ()
        depth = 0
        node = doc.children[0]
        while isinstance(node, Block):
            assert node.closer is not None
            assert node.closer.family == node.opener.family == node.family
            assert node.closer.name == f"end{node.family}"
            assert node.family == families[depth]
            depth += 1
            inner = [c for c in node.children if isinstance(c, Block)]
            node = inner[0] if inner else None
        assert depth == 10

    def test_section_three_closers(self) -> None:
        source = (
            "@section('a')\nA\n@endsection\n"
            "@section('b')\nB\n@show\n"
            "@section('c')\nC\n@overwrite\n"
        )
        blocks = _blocks(source)
        assert [b.family for b in blocks] == ["section"] * 3
        assert [b.close_kind for b in blocks] == [
            CloseKind.END,
            CloseKind.SHOW,
            CloseKind.OVERWRITE,
        ]

    def test_stop_and_append_close_sections(self) -> None:
        blocks = _blocks("@section('a') x @stop @section('b') y @append")
        assert [b.close_kind for b in blocks] == [CloseKind.STOP, CloseKind.APPEND]

    def test_inline_section_is_standalone(self) -> None:
        doc = parse("@section('title', 'Home')\n<p>x</p>")
        assert doc.diagnostics == ()
        directive = doc.children[0]
        assert isinstance(directive, Directive)
        assert directive.pairing is Pairing.NONE

    def test_switch_fallthrough(self) -> None:
        source = (
            "@switch($i)\n"
            "@case(1)\n"
            "@case(2)\n"
            "one or two\n"
            "@break\n"
            "@default\n"
            "other\n"
            "@endswitch"
        )
        doc = parse(source)
        assert doc.diagnostics == ()
        block = doc.children[0]
        assert isinstance(block, Block)
        assert block.indent_middles
        assert [m.name for m in block.middles] == ["case", "case", "break", "default"]
        first_case_body = block.branches[1][1]
        assert all(isinstance(n, Text) and not n.content.strip() for n in first_case_body)

    def test_break_inside_loop_is_loop_control(self) -> None:
        block = parse("@foreach($xs as $x) @break @endforeach").children[0]
        assert isinstance(block, Block)
        assert block.middles == ()
        breaks = [c for c in block.children if isinstance(c, Directive) and c.name == "break"]
        assert breaks[0].pairing is Pairing.NONE

    def test_forelse_empty_middle(self) -> None:
        block = parse("@forelse($xs as $x) {{ $x }} @empty none @endforelse").children[0]
        assert isinstance(block, Block)
        assert block.family == "forelse"
        assert [m.name for m in block.middles] == ["empty"]

    def test_empty_with_arguments_opens_block(self) -> None:
        block = parse("@empty($xs) none @endempty").children[0]
        assert isinstance(block, Block)
        assert block.family == "empty"

    def test_php_inline_vs_block(self) -> None:
        inline = parse("@php($a = 1)").children[0]
        assert isinstance(inline, Directive)
        block = parse("@php $a = 1; @endphp").children[0]
        assert isinstance(block, Opaque)
        assert block.kind is OpaqueKind.RAW_CODE


class TestRecovery:
    def test_unclosed_if(self) -> None:
        doc = parse("@if($a)\n<p>x</p>\n")
        block = doc.children[0]
        assert isinstance(block, Block)
        assert block.is_closed is False
        assert [d.code for d in doc.diagnostics] == [DiagnosticCode.UNMATCHED_DIRECTIVE]
        assert doc.diagnostics[0].severity is Severity.WARNING
        assert doc.diagnostics[0].line == 1

    def test_orphan_closer(self) -> None:
        doc = parse("text @endforeach")
        directive = doc.children[-1]
        assert isinstance(directive, Directive)
        assert directive.orphan
        assert _codes("text @endforeach") == [DiagnosticCode.UNMATCHED_DIRECTIVE]

    def test_orphan_middle(self) -> None:
        directive = parse("@else").children[0]
        assert isinstance(directive, Directive)
        assert directive.orphan

    def test_outer_closer_closes_inner_block_implicitly(self) -> None:
        doc = parse("@foreach($xs as $x) @if($x) y @endforeach")
        outer = doc.children[0]
        assert isinstance(outer, Block)
        assert outer.is_closed
        inner = [c for c in outer.children if isinstance(c, Block)][0]
        assert inner.family == "if"
        assert inner.is_closed is False
        assert len(doc.diagnostics) == 1

    def test_unknown_directive_does_not_disturb_pairing(self) -> None:
        doc = parse("@if($a) @datetime($d) @endif")
        assert doc.diagnostics == ()
        assert isinstance(doc.children[0], Block)

    def test_lex_error_propagates_from_parse(self) -> None:
        with pytest.raises(LexError):
            parse("{{-- never closed")


class TestElements:
    def test_nested_elements(self) -> None:
        div = parse("<div><p>x</p></div>").children[0]
        assert isinstance(div, Element)
        assert div.tag == "div"
        assert div.closed
        p = div.children[0]
        assert isinstance(p, Element)
        assert p.children[0] == Text(location=p.children[0].location, content="x")

    def test_void_element(self) -> None:
        doc = parse("<br><p>x</p>")
        br = doc.children[0]
        assert isinstance(br, Element)
        assert br.void
        assert isinstance(doc.children[1], Element)

    def test_attributes(self) -> None:
        div = parse('<div x-data="{ open: false }" @click="open = !open" class="a" hidden></div>').children[0]
        assert isinstance(div, Element)
        assert [(a.name, a.value, a.kind) for a in div.attributes] == [
            ("x-data", '"{ open: false }"', AttributeKind.FOREIGN_PROPERTY),
            ("@click", '"open = !open"', AttributeKind.FOREIGN_EVENT),
            ("class", '"a"', AttributeKind.PLAIN),
            ("hidden", None, AttributeKind.PLAIN),
        ]

    def test_echo_attribute(self) -> None:
        div = parse("<div {{ $attributes->merge(['class' => 'a']) }}></div>").children[0]
        assert isinstance(div, Element)
        attr = div.attributes[0]
        assert attr.kind is AttributeKind.HOST_ECHO
        assert attr.echo is not None
        assert attr.is_fence

    def test_ambiguous_attribute(self) -> None:
        doc = parse("<input @disabled($off)>")
        attr = doc.children[0].attributes[0]  # type: ignore[union-attr]
        assert attr.ambiguous
        assert attr.kind is AttributeKind.PLAIN
        assert [d.code for d in doc.diagnostics] == [DiagnosticCode.AMBIGUOUS_ATTRIBUTE]
        assert doc.diagnostics[0].severity is Severity.INFO

    def test_stray_end_tag(self) -> None:
        doc = parse("x</span>")
        assert isinstance(doc.children[-1], EndTag)
        assert _codes("x</span>") == [DiagnosticCode.STRAY_END_TAG]

    def test_unclosed_element_inside_closed_one(self) -> None:
        doc = parse("<div><p>x</div>")
        div = doc.children[0]
        assert isinstance(div, Element)
        assert div.closed
        p = div.children[0]
        assert isinstance(p, Element)
        assert p.closed is False
        assert _codes("<div><p>x</div>") == [DiagnosticCode.UNCLOSED_ELEMENT]

    def test_end_tag_does_not_cross_block_boundary(self) -> None:
        doc = parse("<div>@if($a)</div>@endif")
        codes = [d.code for d in doc.diagnostics]
        assert DiagnosticCode.STRAY_END_TAG in codes

    def test_raw_text_element(self) -> None:
        script = parse("<script>if (a < b) {}</script>").children[0]
        assert isinstance(script, Element)
        body = script.children[0]
        assert isinstance(body, Opaque)
        assert body.kind is OpaqueKind.RAW_TEXT
        assert body.content == "if (a < b) {}"


class TestComponents:
    def test_component_with_named_slots(self) -> None:
        source = (
            '<x-card type="info">'
            "<x-slot:title>Title</x-slot:title>"
            '<x-slot name="footer">Foot</x-slot>'
            "Body"
            "</x-card>"
        )
        card = parse(source).children[0]
        assert isinstance(card, Component)
        assert card.name == "card"
        assert [slot.name for slot in card.slots] == ["title", "footer"]
        assert all(isinstance(slot, Slot) for slot in card.slots)
        assert set(card.slot_map) == {"title", "footer"}
        assert [c.content for c in card.children if isinstance(c, Text)] == ["Body"]

    def test_short_end_tag_closes_named_slot(self) -> None:
        doc = parse("<x-card>\n<x-slot:title>T</x-slot>\nBody\n</x-card>")
        assert doc.diagnostics == ()
        card = doc.children[0]
        assert isinstance(card, Component)
        (slot,) = card.slots
        assert slot.name == "title"
        assert slot.closed
        assert slot.end_tag == "x-slot"
        assert [c.content for c in slot.children if isinstance(c, Text)] == ["T"]
        assert "".join(c.content for c in card.children if isinstance(c, Text)) == "\n\nBody\n"

    def test_short_slot_end_tag_without_open_slot_is_stray(self) -> None:
        assert _codes("<x-card>x</x-slot></x-card>") == [DiagnosticCode.STRAY_END_TAG]

    def test_self_closing_component(self) -> None:
        icon = parse('<x-icon name="check" />').children[0]
        assert isinstance(icon, Component)
        assert icon.self_closing
        assert icon.slots == ()

    def test_foreign_bindings(self) -> None:
        comp = parse('<x-button wire:click="save" :disabled="$busy" type="submit" />').children[0]
        assert isinstance(comp, Component)
        assert [a.name for a in comp.foreign_bindings] == ["wire:click", ":disabled"]

    def test_livewire_tag_is_plain_element(self) -> None:
        node = parse("<livewire:counter />").children[0]
        assert isinstance(node, Element)
        assert node.tag == "livewire:counter"


class TestLocations:
    def test_node_location_slices_source(self) -> None:
        source = "<ul>\n  @foreach($xs as $x)\n    <li>{{ $x }}</li>\n  @endforeach\n</ul>"
        doc = parse(source)
        for node in walk(doc):
            if isinstance(node, (Block, Element)):
                text = node.location.slice(source)
                assert text.startswith("@" if isinstance(node, Block) else "<")
        block = _blocks(source)[0]
        assert block.location.slice(source).endswith("@endforeach")
        assert block.location.lineno == 2
