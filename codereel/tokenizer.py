"""Line tokenizer for syntax coloring.

Lexes one physical line of Java-like source text into typed tokens. The scan
walks left to right and, at each position, applies the first rule in ``RULES``
that matches. Every rule consumes at least one character, so a line of length
n is fully tokenized after at most n rule applications and tokenizing never
fails.

Classification is per line: a construct spanning several lines (a block
comment, a text block) is colored one line at a time.
"""

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum


class TokenType(str, Enum):
    """Closed set of token tags used for coloring."""

    KEYWORD = "keyword"
    TYPE = "type"
    STRING = "string"
    NUMBER = "number"
    OPERATOR = "operator"
    PUNCTUATION = "punctuation"
    METHOD = "method"
    COMMENT = "comment"
    ANNOTATION = "annotation"
    PLAIN = "plain"


@dataclass(frozen=True)
class Token:
    """A lexically classified substring of one source line."""

    text: str
    type: TokenType


KEYWORDS = frozenset({
    "void", "int", "long", "double", "float", "boolean", "char", "byte", "short",
    "if", "else", "for", "while", "do", "switch", "case", "default", "break",
    "continue", "return",
    "try", "catch", "finally", "throw", "throws",
    "class", "interface", "enum", "extends", "implements",
    "public", "private", "protected", "static", "final", "abstract",
    "synchronized", "volatile", "transient",
    "new", "this", "super", "instanceof",
    "true", "false", "null",
    "import", "package",
})

BUILTIN_TYPES = frozenset({
    "String", "Integer", "Long", "Double", "Float", "Boolean", "Character",
    "Byte", "Short", "Object", "Class", "Void",
    "List", "ArrayList", "Map", "HashMap", "Set", "HashSet",
    "Optional", "Stream",
    "Exception", "RuntimeException", "Error", "IllegalStateException",
    "LocalDate", "LocalDateTime", "Instant",
    "BigDecimal", "BigInteger",
})

# Two-character spellings come first so the alternation is longest-match.
OPERATORS = (
    "&&", "||", "==", "!=", "<=", ">=", "->", "::", "++", "--",
    "+", "-", "*", "/", "%", "=", "<", ">", "!", "&", "|", "^", "~", "?", ":",
)

# Classifier signature: (matched text, full line, match end, custom types)
Classifier = Callable[[str, str, int, frozenset[str]], TokenType]


@dataclass(frozen=True)
class Rule:
    """One tokenizer rule: a pattern anchored at the scan position.

    Attributes:
        name: Human-readable rule name, used in tests and debugging.
        pattern: Compiled regex matched with ``pattern.match(line, pos)``.
        classify: Callable producing the tag for a match.
        ends_line: If True, the match consumes the rest of the line.

    """

    name: str
    pattern: re.Pattern[str]
    classify: Classifier
    ends_line: bool = False


def _fixed(tag: TokenType) -> Classifier:
    def classify(text: str, line: str, end: int, custom_types: frozenset[str]) -> TokenType:
        return tag
    return classify


def classify_word(word: str, next_char: str, custom_types: Iterable[str] = ()) -> TokenType:
    """Classify an identifier-like word.

    Args:
        word: The word to classify.
        next_char: The character immediately after the word ("" at line end).
        custom_types: Extra identifiers to treat as type names.

    Returns:
        KEYWORD for reserved words, TYPE for known type names, METHOD when the
        word is immediately followed by "(", PLAIN otherwise.

    """
    if word in KEYWORDS:
        return TokenType.KEYWORD
    if word in BUILTIN_TYPES or word in custom_types:
        return TokenType.TYPE
    if next_char == "(":
        return TokenType.METHOD
    return TokenType.PLAIN


def _classify_word(text: str, line: str, end: int, custom_types: frozenset[str]) -> TokenType:
    return classify_word(text, line[end:end + 1], custom_types)


RULES: tuple[Rule, ...] = (
    Rule("comment", re.compile(r"//.*"), _fixed(TokenType.COMMENT), ends_line=True),
    Rule("annotation", re.compile(r"@\w+"), _fixed(TokenType.ANNOTATION)),
    Rule("string", re.compile(r'"(?:[^"\\]|\\.)*"'), _fixed(TokenType.STRING)),
    Rule("number", re.compile(r"\d+(?:\.\d+)?[fFdDlL]?"), _fixed(TokenType.NUMBER)),
    Rule("word", re.compile(r"[A-Za-z_]\w*"), _classify_word),
    Rule("operator", re.compile("|".join(re.escape(op) for op in OPERATORS)), _fixed(TokenType.OPERATOR)),
    Rule("punctuation", re.compile(r"[{}()\[\];,.<>]"), _fixed(TokenType.PUNCTUATION)),
    Rule("whitespace", re.compile(r"\s+"), _fixed(TokenType.PLAIN)),
    Rule("fallback", re.compile(r".", re.DOTALL), _fixed(TokenType.PLAIN)),
)


def _coalesce_plain(tokens: list[Token]) -> list[Token]:
    """Merge runs of adjacent plain tokens into one."""
    merged: list[Token] = []
    for token in tokens:
        if merged and token.type is TokenType.PLAIN and merged[-1].type is TokenType.PLAIN:
            merged[-1] = Token(merged[-1].text + token.text, TokenType.PLAIN)
        else:
            merged.append(token)
    return merged


def tokenize_line(line: str, custom_types: Iterable[str] = ()) -> list[Token]:
    """Tokenize a single line of source text.

    Args:
        line: One physical line, without its line terminator.
        custom_types: Extra identifiers classified as TYPE.

    Returns:
        Ordered tokens whose texts concatenate back to ``line``.

    """
    types = frozenset(custom_types)
    tokens: list[Token] = []
    pos = 0
    length = len(line)

    while pos < length:
        for rule in RULES:
            match = rule.pattern.match(line, pos)
            if match is None or match.end() == pos:
                continue
            text = line[pos:] if rule.ends_line else match.group(0)
            tokens.append(Token(text, rule.classify(text, line, match.end(), types)))
            pos = length if rule.ends_line else match.end()
            break

    return _coalesce_plain(tokens)


def tokenize(text: str, custom_types: Iterable[str] = ()) -> list[list[Token]]:
    """Tokenize every line of a multi-line string independently."""
    types = frozenset(custom_types)
    return [tokenize_line(line.rstrip("\r"), types) for line in text.split("\n")]
