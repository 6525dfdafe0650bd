"""Lexer for formation strings and balanced-bracket extraction.

The tokenizer never fails: characters it cannot place end up in ``unknown`` tokens
that later stages skip.
"""

from __future__ import annotations

from formation.parsing.attributes import POTENTIAL_WAGON_CODES
from formation.parsing.models import Token, TokenKind

_STRUCTURAL_KINDS: dict[str, TokenKind] = {
    "[": "bracket_open",
    "]": "bracket_close",
    "(": "paren_open",
    ")": "paren_close",
    ",": "comma",
    "\\": "backslash",
}
_BOUNDARY_CHARS = frozenset({"@", *_STRUCTURAL_KINDS})
_STATUS_SIGILS = ("-", ">", "=", "%")
_SUFFIX_PREFIXES = ("#", ":")


def tokenize(formation_string: str) -> list[Token]:
    """Split ``formation_string`` into typed tokens, scanning left to right.

    Rules:
    - ``@`` followed by an uppercase letter is one ``sector`` token; a bare ``@`` is ``unknown``.
    - ``[ ] ( ) , \\`` flush any pending free text and become single-character tokens.
    - A standalone ``F`` is a ``fictitious_wagon``.
    - Other characters accumulate and are classified when flushed.
    """

    tokens: list[Token] = []
    buffer: list[str] = []
    length = len(formation_string)
    index = 0

    def emit(kind: TokenKind, value: str) -> None:
        tokens.append(Token(kind=kind, value=value, position=len(tokens)))

    def flush() -> None:
        if buffer:
            value = "".join(buffer)
            buffer.clear()
            emit(classify_free_text(value), value)

    while index < length:
        char = formation_string[index]

        if char == "@":
            flush()
            following = formation_string[index + 1] if index + 1 < length else ""
            if following.isascii() and following.isupper():
                emit("sector", char + following)
                index += 2
                continue
            emit("unknown", char)
        elif char in _STRUCTURAL_KINDS:
            flush()
            emit(_STRUCTURAL_KINDS[char], char)
        elif char == "F" and not buffer and _is_boundary(formation_string, index + 1):
            emit("fictitious_wagon", char)
        else:
            buffer.append(char)
        index += 1

    flush()
    return tokens


def classify_free_text(value: str) -> TokenKind:
    """Classify one flushed free-text run."""

    if value.startswith("@") and len(value) > 1:
        return "sector"
    if value == "F":
        return "fictitious_wagon"
    if is_potential_wagon_token(value):
        return "vehicle"
    return "unknown"


def is_potential_wagon_token(token: str) -> bool:
    """Return True when ``token`` may describe a vehicle.

    Status sigils at the start or any known type code inside qualify. Pieces that
    start with ``#`` or ``:`` are group suffix data, not vehicles.
    """

    if not token or token.startswith(_SUFFIX_PREFIXES):
        return False
    if token.startswith(_STATUS_SIGILS):
        return True
    return any(code in token for code in POTENTIAL_WAGON_CODES)


def find_bracket_span(text: str, open_char: str, close_char: str) -> tuple[int, int] | None:
    """Locate the first balanced top-level ``open_char ... close_char`` span.

    Returns ``(open_index, close_index)`` of the delimiters themselves, or None when the
    delimiters are absent or never balance.
    """

    depth = 0
    start = -1
    for index, char in enumerate(text):
        if char == open_char:
            if depth == 0:
                start = index
            depth += 1
        elif char == close_char:
            if depth == 0:
                continue
            depth -= 1
            if depth == 0 and start != -1:
                return start, index
    return None


def extract_bracket_content(text: str, open_char: str, close_char: str) -> str | None:
    """Return the text strictly inside the first balanced span, or None."""

    span = find_bracket_span(text, open_char, close_char)
    if span is None:
        return None
    start, end = span
    return text[start + 1 : end]


def _is_boundary(text: str, index: int) -> bool:
    return index >= len(text) or text[index] in _BOUNDARY_CHARS
