# tests/test_tokenizer.py
"""Tests for the line tokenizer."""

import pytest

from codereel.tokenizer import (
    RULES,
    Token,
    TokenType,
    classify_word,
    tokenize,
    tokenize_line,
)

SAMPLE_LINES = [
    "",
    "    ",
    'if (x > 0) { return "ok"; }',
    "@Override public String toString() { return name; } // done",
    'String s = "unterminated;',
    'log("escaped \\" quote", 3.14f, 42L);',
    "a->b::c && d || !e",
    "map.put(key, value) # ` $ é \t",
    "//",
    "List<Map<String, Integer>> xs = new ArrayList<>();",
]


class TestRoundTrip:
    """Concatenated token texts reproduce the input line."""

    @pytest.mark.parametrize("line", SAMPLE_LINES)
    def test_round_trip(self, line):
        """Token texts join back to the original line."""
        assert "".join(t.text for t in tokenize_line(line)) == line

    @pytest.mark.parametrize("line", SAMPLE_LINES)
    def test_every_token_is_non_empty(self, line):
        """Every token consumed at least one character."""
        tokens = tokenize_line(line)
        assert all(t.text for t in tokens)
        assert len(tokens) <= len(line)

    def test_empty_line_has_no_tokens(self):
        """An empty line produces no tokens."""
        assert tokenize_line("") == []


class TestScenario:
    """Tags for a representative statement."""

    def test_if_return_statement_tags(self):
        """The if/return line produces the expected tag sequence."""
        tokens = tokenize_line('if (x > 0) { return "ok"; }')
        assert [t.type.value for t in tokens] == [
            "keyword", "plain", "punctuation", "plain", "operator", "plain",
            "number", "punctuation", "plain", "punctuation", "plain", "keyword",
            "plain", "string", "punctuation", "plain", "punctuation",
        ]

    def test_adjacent_plain_tokens_are_merged(self):
        """An identifier followed by whitespace becomes a single plain token."""
        tokens = tokenize_line("(x > 0)")
        assert tokens[1] == Token("x ", TokenType.PLAIN)


class TestRules:
    """Rule priority and individual classifications."""

    def test_rule_order(self):
        """Rules are applied in a fixed, visible order."""
        assert [rule.name for rule in RULES] == [
            "comment", "annotation", "string", "number", "word",
            "operator", "punctuation", "whitespace", "fallback",
        ]

    def test_comment_consumes_rest_of_line(self):
        """A line comment swallows everything after it, including quotes."""
        tokens = tokenize_line('x = 1; // say "hi" @Foo')
        assert tokens[-1] == Token('// say "hi" @Foo', TokenType.COMMENT)

    def test_annotation(self):
        """@ followed by word characters is an annotation."""
        assert tokenize_line("@Override")[0] == Token("@Override", TokenType.ANNOTATION)

    def test_string_with_escaped_quote(self):
        """Backslash-escaped quotes stay inside the string."""
        tokens = tokenize_line('"a\\"b"')
        assert tokens == [Token('"a\\"b"', TokenType.STRING)]

    def test_unterminated_string_falls_through(self):
        """An unterminated quote is not a string token."""
        tokens = tokenize_line('"abc')
        assert all(t.type is not TokenType.STRING for t in tokens)
        assert "".join(t.text for t in tokens) == '"abc'

    @pytest.mark.parametrize("text", ["0", "42", "3.14", "2.5f", "10L", "7d"])
    def test_numbers(self, text):
        """Digits with optional fraction and suffix are one number token."""
        assert tokenize_line(text) == [Token(text, TokenType.NUMBER)]

    def test_operators_are_longest_match(self):
        """Two-character operators win over their one-character prefixes."""
        tokens = [t for t in tokenize_line("a<=b&&c->d") if t.type is TokenType.OPERATOR]
        assert [t.text for t in tokens] == ["<=", "&&", "->"]

    def test_angle_brackets_are_operators(self):
        """< and > match the operator rule before the punctuation rule."""
        tokens = tokenize_line("List<String>")
        assert tokens[1] == Token("<", TokenType.OPERATOR)
        assert tokens[3] == Token(">", TokenType.OPERATOR)

    def test_semicolon_is_punctuation(self):
        assert tokenize_line(";") == [Token(";", TokenType.PUNCTUATION)]

    def test_unknown_character_is_plain(self):
        """Characters no rule recognizes fall back to plain."""
        assert tokenize_line("#") == [Token("#", TokenType.PLAIN)]


class TestClassifyWord:
    """Identifier classification."""

    def test_keyword(self):
        assert classify_word("return", " ") is TokenType.KEYWORD

    def test_builtin_type(self):
        assert classify_word("String", " ") is TokenType.TYPE

    def test_custom_type(self):
        """Caller-supplied names are highlighted as types."""
        assert classify_word("User", " ", ["User"]) is TokenType.TYPE
        assert classify_word("User", " ") is TokenType.PLAIN

    def test_method_requires_immediate_paren(self):
        """A word is a method only when "(" follows directly."""
        assert classify_word("save", "(") is TokenType.METHOD
        assert classify_word("save", " ") is TokenType.PLAIN

    def test_keyword_wins_over_method(self):
        """Reserved words stay keywords even before "("."""
        assert classify_word("if", "(") is TokenType.KEYWORD

    def test_custom_types_in_line(self):
        """tokenize_line passes custom types to the word rule."""
        tokens = tokenize_line("User u", custom_types=["User"])
        assert tokens[0] == Token("User", TokenType.TYPE)


class TestTokenizeText:
    """Multi-line tokenization."""

    def test_lines_are_tokenized_independently(self):
        """A comment on one line does not affect the next."""
        lines = tokenize("// a\nreturn b;")
        assert len(lines) == 2
        assert lines[0] == [Token("// a", TokenType.COMMENT)]
        assert lines[1][0] == Token("return", TokenType.KEYWORD)

    def test_crlf_line_endings_are_dropped(self):
        lines = tokenize("int a;\r\nreturn a;\r\n")
        assert len(lines) == 3
        assert "".join(t.text for t in lines[0]) == "int a;"
        assert "".join(t.text for t in lines[1]) == "return a;"
        assert lines[2] == []
