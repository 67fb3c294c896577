"""Tests for the pretty printer (BladeRenderer) through the public API."""

import pytest

from bladefmt import FormatConfig, format, parse, render
from bladefmt.config import ClosingStyle
from bladefmt.diagnostics import Severity
from bladefmt.renderers import format_echo, normalize_echoes, order_attributes


def fmt(source: str, **options: object) -> str:
    result = format(source, FormatConfig(**options))  # type: ignore[arg-type]
    assert not result.failed, result.diagnostics
    return result.formatted_text


class TestEchoes:
    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("{{$x}}", "{{ $x }}\n"),
            ("{{    $user->name   }}", "{{ $user->name }}\n"),
            ("{{}}", "{{ }}\n"),
            ("{!!$html!!}", "{!! $html !!}\n"),
        ],
    )
    def test_single_line_echo_spacing(self, source: str, expected: str) -> None:
        assert fmt(source) == expected

    def test_multi_line_echo_is_verbatim(self) -> None:
        source = "{{ collect([\n  1, 2,\n]) }}"
        assert fmt(source) == source + "\n"

    def test_echo_in_attribute_value(self) -> None:
        assert fmt('<a href="{{$url}}">x</a>') == '<a href="{{ $url }}">x</a>\n'

    def test_echo_inside_foreign_binding_value(self) -> None:
        assert fmt('<div x-data="{ id: {{$id}} }"></div>') == '<div x-data="{ id: {{ $id }} }"></div>\n'

    def test_escaped_echo_is_untouched(self) -> None:
        assert fmt("@{{ $vue }} and @@if") == "@{{ $vue }} and @@if\n"

    def test_format_echo_helper(self) -> None:
        assert format_echo(" $a ") == "{{ $a }}"
        assert format_echo("$a", raw=True) == "{!! $a !!}"
        assert format_echo("\n$a\n") == "{{\n$a\n}}"

    def test_normalize_echoes_leaves_other_text(self) -> None:
        assert normalize_echoes('"a {{$b}} c {!!$d!!}"') == '"a {{ $b }} c {!! $d !!}"'
        assert normalize_echoes('"{{-- c --}}"') == '"{{-- c --}}"'
        assert normalize_echoes('"@{{ $b }}"') == '"@{{ $b }}"'


class TestDirectives:
    def test_nested_blocks_are_indented(self) -> None:
        source = "@if($a)\n@if($b)\nx\n@endif\n@endif\n"
        assert fmt(source) == "@if ($a)\n    @if ($b)\n        x\n    @endif\n@endif\n"

    def test_single_line_block_stays_inline(self) -> None:
        assert fmt("@if($a) yes @endif") == "@if ($a) yes @endif\n"

    def test_canonical_spacing(self) -> None:
        source = "@foreach  ($xs as $x)\n{{$x}}\n@endforeach\n@include ('a')"
        assert fmt(source) == "@foreach ($xs as $x)\n    {{ $x }}\n@endforeach\n@include('a')\n"

    def test_registry_casing(self) -> None:
        assert fmt("@IF($a)\nx\n@ENDIF") == "@if ($a)\n    x\n@endif\n"

    def test_middles_align_with_opener(self) -> None:
        source = "@forelse($xs as $x)\n{{ $x }}\n@empty\nnone\n@endforelse"
        assert fmt(source) == (
            "@forelse ($xs as $x)\n    {{ $x }}\n@empty\n    none\n@endforelse\n"
        )

    def test_switch_layout(self) -> None:
        source = (
            "@switch($i)\n@case(1)\na\n@break\n@case(2)\n@default\nc\n@endswitch"
        )
        assert fmt(source) == (
            "@switch($i)\n"
            "    @case(1)\n"
            "        a\n"
            "        @break\n"
            "    @case(2)\n"
            "    @default\n"
            "        c\n"
            "@endswitch\n"
        )

    def test_unknown_directive_is_untouched(self) -> None:
        assert fmt("@datetime( $d )") == "@datetime( $d )\n"

    def test_closing_style_as_written(self) -> None:
        source = "@section('a')\nx\n@Show"
        assert fmt(source) == "@section('a')\n    x\n@show\n"
        assert fmt(source, directive_closing_style=ClosingStyle.AS_WRITTEN) == (
            "@section('a')\n    x\n@Show\n"
        )

    def test_unclosed_block_is_kept_as_written(self) -> None:
        source = "@if($a)\n      <p>x</p>\n"
        assert fmt(source) == source

    def test_orphan_closer_is_kept(self) -> None:
        assert fmt("@endif") == "@endif\n"

    def test_verbatim_body_is_byte_identical(self) -> None:
        source = "<div>\n@verbatim\n  {{ a }}   @if\n@endverbatim\n</div>"
        assert fmt(source) == "<div>\n    @verbatim\n  {{ a }}   @if\n@endverbatim\n</div>\n"

    def test_php_block_is_byte_identical(self) -> None:
        source = "@php\n  $a  =  1;\n@endphp"
        assert fmt(source) == source + "\n"


class TestMarkup:
    def test_block_element_breaks_around_children(self) -> None:
        expected = "<div>\n    <p>x</p>\n</div>\n"
        assert fmt("<div><p>x</p></div>") == expected
        assert fmt("<div>\n<p>x</p>\n</div>") == expected

    def test_inline_element_stays_inline(self) -> None:
        assert fmt("<p>Hello <b>{{ $name }}</b>!</p>") == "<p>Hello <b>{{ $name }}</b>!</p>\n"

    def test_inline_block_inside_element(self) -> None:
        assert fmt("<p>@if($a) yes @endif</p>") == "<p>@if ($a) yes @endif</p>\n"

    def test_loop_inside_list(self) -> None:
        source = "<ul>\n@foreach($xs as $x)\n<li>{{ $x }}</li>\n@endforeach\n</ul>"
        assert fmt(source) == (
            "<ul>\n"
            "    @foreach ($xs as $x)\n"
            "        <li>{{ $x }}</li>\n"
            "    @endforeach\n"
            "</ul>\n"
        )

    def test_foreign_bindings_are_byte_identical(self) -> None:
        source = '<div x-data="{ open: false }"><button @click="open = !open">Toggle</button></div>'
        assert fmt(source) == (
            '<div x-data="{ open: false }">\n'
            '    <button @click="open = !open">Toggle</button>\n'
            "</div>\n"
        )

    def test_modifier_chains_and_shorthands_kept(self) -> None:
        source = (
            "<div :class=\"{ 'a': b }\" @click.outside=\"open = false\" "
            'x-on:keydown.enter="go()"></div>'
        )
        assert fmt(source) == source + "\n"

    def test_empty_element(self) -> None:
        assert fmt("<div>   </div>") == "<div></div>\n"

    def test_void_element(self) -> None:
        assert fmt('<img src="a.png" alt="">') == '<img src="a.png" alt="">\n'

    def test_self_closing_normalized(self) -> None:
        assert fmt('<x-icon name="x"/>') == '<x-icon name="x" />\n'

    def test_component_with_slot(self) -> None:
        source = '<x-alert type="error"><x-slot:title>Oops</x-slot:title>Body</x-alert>'
        assert fmt(source) == (
            '<x-alert type="error">\n'
            "    <x-slot:title>Oops</x-slot:title>\n"
            "    Body\n"
            "</x-alert>\n"
        )

    def test_slots_print_before_default_content(self) -> None:
        source = "<x-card>Intro <x-slot:title>T</x-slot:title> Outro</x-card>"
        expected = (
            "<x-card>\n"
            "    <x-slot:title>T</x-slot:title>\n"
            "    Intro Outro\n"
            "</x-card>\n"
        )
        assert fmt(source) == expected
        assert fmt(expected) == expected

    def test_blank_line_after_slot_is_stable(self) -> None:
        source = "<x-card>\n<x-slot:title>T</x-slot:title>\n\n<p>x</p>\n</x-card>"
        expected = (
            "<x-card>\n"
            "    <x-slot:title>T</x-slot:title>\n"
            "\n"
            "    <p>x</p>\n"
            "</x-card>\n"
        )
        assert fmt(source) == expected
        assert fmt(expected) == expected

    def test_unclosed_element_keeps_children_at_same_level(self) -> None:
        assert fmt("<div>\n<p>x\n</div>") == "<div>\n    <p>x\n</div>\n"

    def test_stray_end_tag_kept(self) -> None:
        assert fmt("</span>") == "</span>\n"

    def test_ambiguous_attribute_kept(self) -> None:
        assert fmt("<input @disabled($off)>") == "<input @disabled($off)>\n"

    def test_directive_with_spaced_arguments_inside_tag(self) -> None:
        source = '<button class="b" @if ($p->stock === 0) disabled @endif>Add</button>'
        result = format(source)
        assert [d.code.value for d in result.diagnostics if d.severity is not Severity.INFO] == []
        assert result.formatted_text == source + "\n"

    def test_wrapped_tag_keeps_directive_arguments_on_one_line(self) -> None:
        source = '<button class="btn" @if ($p->stock === 0) disabled @endif>Add</button>'
        assert fmt(source, max_line_length=30) == (
            "<button\n"
            '    class="btn"\n'
            "    @if ($p->stock === 0)\n"
            "    disabled\n"
            "    @endif\n"
            ">\n"
            "    Add\n"
            "</button>\n"
        )

    def test_short_slot_end_tag(self) -> None:
        source = "<x-card>\n<x-slot:title>T</x-slot>\nBody\n</x-card>"
        assert fmt(source) == "<x-card>\n    <x-slot:title>T</x-slot>\n    Body\n</x-card>\n"


class TestAttributes:
    def test_sorting_respects_fences(self) -> None:
        source = '<input type="text" name="q" {{ $attributes }} id="a" class="b">'
        assert fmt(source, sort_attributes=True) == (
            '<input name="q" type="text" {{ $attributes }} class="b" id="a">\n'
        )

    def test_no_sorting_by_default(self) -> None:
        source = '<input type="text" name="q">'
        assert fmt(source) == source + "\n"

    def test_long_tag_wraps_one_attribute_per_line(self) -> None:
        source = '<div class="aaaa" id="bbbbbbbb">x</div>'
        assert fmt(source, max_line_length=20) == (
            "<div\n"
            '    class="aaaa"\n'
            '    id="bbbbbbbb"\n'
            ">\n"
            "    x\n"
            "</div>\n"
        )

    def test_single_attribute_never_wraps(self) -> None:
        source = '<div class="a-very-long-class-name another-one">x</div>'
        assert fmt(source, max_line_length=20) == source + "\n"

    def test_order_attributes_helper(self) -> None:
        div = parse('<div b="1" a="2" @disabled($x) d c></div>').children[0]
        names = [a.name for a in order_attributes(div.attributes, True)]  # type: ignore[union-attr]
        assert names == ["a", "b", "@disabled($x)", "c", "d"]


class TestWhitespace:
    def test_blank_lines_are_capped(self) -> None:
        assert fmt("a\n\n\n\nb") == "a\n\nb\n"
        assert fmt("a\n\n\n\nb", preserve_blank_lines=2) == "a\n\n\nb\n"
        assert fmt("a\n\n\n\nb", preserve_blank_lines=0) == "a\nb\n"

    def test_leading_and_trailing_blank_lines_dropped(self) -> None:
        assert fmt("\n\n<p>x</p>\n\n\n") == "<p>x</p>\n"

    def test_blank_line_at_scope_start_dropped(self) -> None:
        assert fmt("<div>\n\n<p>x</p>\n\n</div>") == "<div>\n    <p>x</p>\n</div>\n"

    def test_tabs(self) -> None:
        assert fmt("<div><p>x</p></div>", use_tabs=True) == "<div>\n\t<p>x</p>\n</div>\n"

    def test_indent_size(self) -> None:
        assert fmt("<div><p>x</p></div>", indent_size=2) == "<div>\n  <p>x</p>\n</div>\n"

    def test_empty_and_blank_input(self) -> None:
        assert fmt("") == ""
        assert fmt("  \n\n ") == ""


class TestOpaque:
    def test_script_closing_tag_reindented(self) -> None:
        source = "<script>\n    let a = 1;\n        </script>"
        assert fmt(source) == "<script>\n    let a = 1;\n</script>\n"

    def test_pre_is_byte_identical(self) -> None:
        source = "<pre>  a\n   b</pre>"
        assert fmt(source) == source + "\n"

    def test_html_comment_and_doctype(self) -> None:
        source = "<!DOCTYPE html>\n<!-- keep   this -->"
        assert fmt(source) == source + "\n"

    def test_template_comment(self) -> None:
        assert fmt("{{--   note   --}}") == "{{--   note   --}}\n"

    def test_front_matter(self) -> None:
        source = "---\ntitle: x\n---\n<p>a</p>"
        assert fmt(source) == source + "\n"


def test_render_without_guard() -> None:
    doc = parse("@if($a)\nx\n@endif")
    assert render(doc) == "@if ($a)\n    x\n@endif\n"
    assert render(doc, config=FormatConfig(indent_size=2)) == "@if ($a)\n  x\n@endif\n"


def test_blade_renderer_satisfies_protocol() -> None:
    from bladefmt.renderers import ASTRenderer, BladeRenderer

    def run(renderer: ASTRenderer, source: str) -> str:
        return renderer.render(parse(source))

    assert run(BladeRenderer(FormatConfig(use_tabs=True)), "<div><p>x</p></div>") == (
        "<div>\n\t<p>x</p>\n</div>\n"
    )
