"""Tests for the mode-stack scanner: token sequences per lexical mode."""

import pytest

from bladefmt.config import FormatConfig, format_config_context
from bladefmt.lexer import Scanner
from bladefmt.tokens import TokenType


def _tokens(source: str) -> list[tuple[TokenType, str]]:
    return [(t.type, t.value) for t in Scanner(source).tokenize()]


def _types(source: str) -> list[TokenType]:
    return [t.type for t in Scanner(source).tokenize()]


class TestTextMode:
    def test_plain_text_is_one_token(self) -> None:
        assert _tokens("Hello, world") == [
            (TokenType.TEXT, "Hello, world"),
            (TokenType.EOF, ""),
        ]

    def test_empty_source(self) -> None:
        assert _types("") == [TokenType.EOF]

    def test_email_address_is_not_a_directive(self) -> None:
        assert _tokens("mail user@example.com now") == [
            (TokenType.TEXT, "mail user@example.com now"),
            (TokenType.EOF, ""),
        ]

    def test_double_at_escape_stays_text(self) -> None:
        assert _tokens("@@if") == [(TokenType.TEXT, "@@if"), (TokenType.EOF, "")]

    def test_escaped_echo_stays_text(self) -> None:
        assert _tokens("@{{ $raw }}") == [(TokenType.TEXT, "@{{ $raw }}"), (TokenType.EOF, "")]

    def test_lone_angle_bracket_is_text(self) -> None:
        types = _types("a < b")
        assert types == [TokenType.TEXT, TokenType.EOF]

    def test_single_brace_is_text(self) -> None:
        assert _types("{ not an echo }") == [TokenType.TEXT, TokenType.EOF]


class TestDirectives:
    def test_directive_with_arguments(self) -> None:
        assert _tokens("@if($x) {{ $x }} @endif") == [
            (TokenType.DIRECTIVE_NAME, "@if"),
            (TokenType.DIRECTIVE_ARGS_OPEN, "("),
            (TokenType.DIRECTIVE_ARGS, "$x"),
            (TokenType.DIRECTIVE_ARGS_CLOSE, ")"),
            (TokenType.TEXT, " "),
            (TokenType.ECHO_OPEN, "{{"),
            (TokenType.ECHO_CONTENT, " $x "),
            (TokenType.ECHO_CLOSE, "}}"),
            (TokenType.TEXT, " "),
            (TokenType.DIRECTIVE_NAME, "@endif"),
            (TokenType.EOF, ""),
        ]

    def test_space_before_arguments_is_allowed(self) -> None:
        types = _types("@foreach ($items as $item)")
        assert types[:4] == [
            TokenType.DIRECTIVE_NAME,
            TokenType.DIRECTIVE_ARGS_OPEN,
            TokenType.DIRECTIVE_ARGS,
            TokenType.DIRECTIVE_ARGS_CLOSE,
        ]

    def test_parentheses_inside_strings_do_not_close(self) -> None:
        tokens = _tokens("@include('a)b', ['x' => ')'])")
        assert (TokenType.DIRECTIVE_ARGS, "'a)b', ['x' => ')']") in tokens
        assert tokens[-2] == (TokenType.DIRECTIVE_ARGS_CLOSE, ")")

    def test_empty_argument_list(self) -> None:
        assert _tokens("@yield()")[:3] == [
            (TokenType.DIRECTIVE_NAME, "@yield"),
            (TokenType.DIRECTIVE_ARGS_OPEN, "("),
            (TokenType.DIRECTIVE_ARGS_CLOSE, ")"),
        ]

    def test_closer_does_not_take_arguments(self) -> None:
        assert _tokens("@endif (x)") == [
            (TokenType.DIRECTIVE_NAME, "@endif"),
            (TokenType.TEXT, " (x)"),
            (TokenType.EOF, ""),
        ]

    def test_unknown_directive_with_unbalanced_paren_stays_text(self) -> None:
        assert _tokens("@custom(foo") == [
            (TokenType.DIRECTIVE_NAME, "@custom"),
            (TokenType.TEXT, "(foo"),
            (TokenType.EOF, ""),
        ]

    def test_unknown_directive_with_balanced_paren(self) -> None:
        assert _types("@datetime($d)") == [
            TokenType.DIRECTIVE_NAME,
            TokenType.DIRECTIVE_ARGS_OPEN,
            TokenType.DIRECTIVE_ARGS,
            TokenType.DIRECTIVE_ARGS_CLOSE,
            TokenType.EOF,
        ]

    def test_verbatim_body_is_one_span(self) -> None:
        source = "@verbatim {{ $x }} @if($y) @endverbatim"
        assert _tokens(source) == [(TokenType.VERBATIM_SPAN, source), (TokenType.EOF, "")]

    def test_php_block_is_one_span(self) -> None:
        source = "@php\n    $a = '@endif';\n@endphp"
        assert _tokens(source) == [(TokenType.RAW_CODE_SPAN, source), (TokenType.EOF, "")]

    def test_inline_php_is_a_directive(self) -> None:
        assert _types("@php($a = 1)")[0] == TokenType.DIRECTIVE_NAME

    def test_php_open_tag(self) -> None:
        source = "<?php echo 1; ?>"
        assert _tokens(source) == [(TokenType.RAW_CODE_SPAN, source), (TokenType.EOF, "")]

    def test_unclosed_php_open_tag_runs_to_end(self) -> None:
        source = "<?php\necho 1;\n"
        assert _tokens(source) == [(TokenType.RAW_CODE_SPAN, source), (TokenType.EOF, "")]


class TestEchoesAndComments:
    def test_raw_echo(self) -> None:
        tokens = list(Scanner("{!! $html !!}").tokenize())
        assert tokens[0].type == TokenType.ECHO_OPEN
        assert tokens[0].subkind == "raw"
        assert tokens[1].value == " $html "

    def test_closing_delimiter_inside_string(self) -> None:
        tokens = _tokens('{{ "}}" }}')
        assert (TokenType.ECHO_CONTENT, ' "}}" ') in tokens

    def test_comment_content_is_not_tokenized(self) -> None:
        assert _tokens("{{-- @if({{ --}}") == [
            (TokenType.COMMENT_OPEN, "{{--"),
            (TokenType.COMMENT_CONTENT, " @if({{ "),
            (TokenType.COMMENT_CLOSE, "--}}"),
            (TokenType.EOF, ""),
        ]


class TestTags:
    def test_attributes_are_classified(self) -> None:
        tokens = list(Scanner('<button @click="go()" disabled>').tokenize())
        assert [(t.type, t.value, t.subkind) for t in tokens] == [
            (TokenType.TAG_OPEN, "<button", None),
            (TokenType.ATTRIBUTE_NAME, "@click", "foreign-event"),
            (TokenType.ATTRIBUTE_VALUE, '"go()"', None),
            (TokenType.ATTRIBUTE_NAME, "disabled", "plain"),
            (TokenType.TAG_CLOSE, ">", None),
            (TokenType.EOF, "", None),
        ]

    def test_quoted_value_with_braces_is_opaque(self) -> None:
        tokens = _tokens("<div x-data=\"{ open: false, label: '>' }\">")
        assert (TokenType.ATTRIBUTE_VALUE, "\"{ open: false, label: '>' }\"") in tokens

    def test_echo_inside_value_may_contain_quotes(self) -> None:
        tokens = _tokens('<a class="{{ $a ? "x" : "y" }}">')
        assert (TokenType.ATTRIBUTE_VALUE, '"{{ $a ? "x" : "y" }}"') in tokens

    def test_unquoted_value(self) -> None:
        tokens = _tokens("<input type=text>")
        assert (TokenType.ATTRIBUTE_VALUE, "text") in tokens

    def test_echo_in_attribute_position(self) -> None:
        types = _types("<div {{ $attributes }}>")
        assert types == [
            TokenType.TAG_OPEN,
            TokenType.ECHO_OPEN,
            TokenType.ECHO_CONTENT,
            TokenType.ECHO_CLOSE,
            TokenType.TAG_CLOSE,
            TokenType.EOF,
        ]

    def test_component_and_slot_subkinds(self) -> None:
        tokens = list(Scanner("<x-card><x-slot:title>T</x-slot:title></x-card>").tokenize())
        opens = [t.subkind for t in tokens if t.type == TokenType.TAG_OPEN]
        ends = [t.subkind for t in tokens if t.type == TokenType.END_TAG]
        assert opens == ["component", "slot"]
        assert ends == ["slot", "component"]

    def test_self_closing(self) -> None:
        assert _tokens("<x-icon />")[1] == (TokenType.TAG_CLOSE, "/>")

    def test_directive_like_attribute_name_takes_its_arguments(self) -> None:
        tokens = _tokens("<div @class(['p-4' => $x])>")
        assert (TokenType.ATTRIBUTE_NAME, "@class(['p-4' => $x])") in tokens

    def test_spaced_directive_arguments_stay_in_the_attribute(self) -> None:
        tokens = _tokens('<button class="b" @if ($p->stock === 0) disabled @endif>Add</button>')
        names = [value for kind, value in tokens if kind == TokenType.ATTRIBUTE_NAME]
        assert names == ["class", "@if ($p->stock === 0)", "disabled", "@endif"]
        assert (TokenType.TEXT, "Add") in tokens
        assert TokenType.DIRECTIVE_NAME not in [kind for kind, _ in tokens]

    def test_space_before_parenthesis_only_joins_directives(self) -> None:
        names = [v for k, v in _tokens("<div @click (x)>") if k == TokenType.ATTRIBUTE_NAME]
        assert names == ["@click", "(x)"]


class TestOpaqueMarkup:
    def test_script_body_is_raw_text(self) -> None:
        tokens = list(Scanner("<script>if (a < b) { x = '{{'; }</script>").tokenize())
        assert [t.type for t in tokens] == [
            TokenType.TAG_OPEN,
            TokenType.TAG_CLOSE,
            TokenType.RAW_TEXT,
            TokenType.END_TAG,
            TokenType.EOF,
        ]
        assert tokens[2].value == "if (a < b) { x = '{{'; }"
        assert tokens[2].subkind == "script"

    def test_empty_raw_text_element(self) -> None:
        assert _types("<textarea></textarea>") == [
            TokenType.TAG_OPEN,
            TokenType.TAG_CLOSE,
            TokenType.END_TAG,
            TokenType.EOF,
        ]

    def test_html_comment_and_doctype(self) -> None:
        assert _tokens("<!DOCTYPE html><!-- @if -->") == [
            (TokenType.DECLARATION, "<!DOCTYPE html>"),
            (TokenType.HTML_COMMENT, "<!-- @if -->"),
            (TokenType.EOF, ""),
        ]

    def test_front_matter(self) -> None:
        tokens = _tokens("---\ntitle: Home\n---\n<p>x</p>")
        assert tokens[0] == (TokenType.FRONT_MATTER, "---\ntitle: Home\n---")

    def test_front_matter_disabled(self) -> None:
        with format_config_context(FormatConfig(front_matter=False)):
            tokens = list(Scanner("---\ntitle: Home\n---\n").tokenize())
        assert tokens[0].type == TokenType.TEXT


class TestLocations:
    def test_line_and_column_tracking(self) -> None:
        tokens = list(Scanner("a\n  @csrf").tokenize())
        directive = tokens[1]
        assert directive.type == TokenType.DIRECTIVE_NAME
        assert directive.lineno == 2
        assert directive.col == 3

    def test_location_slices_source(self) -> None:
        source = "<p>{{ $x }}</p>"
        for token in Scanner(source).tokenize():
            assert token.location.slice(source) == token.value


class TestDiagnostics:
    def test_ambiguous_attribute_is_reported(self) -> None:
        scanner = Scanner("<input @disabled($off)>")
        list(scanner.tokenize())
        codes = [d.code.value for d in scanner.diagnostics]
        assert codes == ["ambiguous-attribute"]

    def test_spaced_directive_attribute_is_ambiguous_not_unmatched(self) -> None:
        scanner = Scanner("<button @if ($off) disabled @endif>")
        list(scanner.tokenize())
        assert [d.code.value for d in scanner.diagnostics] == ["ambiguous-attribute"] * 2

    def test_unknown_directive_reported_only_on_request(self) -> None:
        quiet = Scanner("@datetime($d)")
        list(quiet.tokenize())
        assert len(quiet.diagnostics) == 0

        with format_config_context(FormatConfig(report_unknown_directives=True)):
            loud = Scanner("@datetime($d)")
            list(loud.tokenize())
        assert [d.code.value for d in loud.diagnostics] == ["unknown-directive"]


@pytest.mark.parametrize(
    ("source", "expected_line"),
    [
        ("@if(true)\n@endif", None),
        ("{{ $x", 1),
        ("a\n{{-- note", 2),
        ("@verbatim {{ x }}", 1),
        ("@php $a = 1;", 1),
        ("<div class=\"a>", 1),
        ("<script>alert(1)", 1),
        ("<!-- open", 1),
        ("\n\n@if($x", 3),
    ],
)
def test_lex_errors(source: str, expected_line: int | None) -> None:
    from bladefmt.errors import LexError

    if expected_line is None:
        list(Scanner(source).tokenize())
        return
    with pytest.raises(LexError) as exc_info:
        list(Scanner(source).tokenize())
    assert exc_info.value.lineno == expected_line
