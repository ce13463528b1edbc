"""Tokenizer for the Volt language.

The lexer turns source text into a flat list of tokens terminated by an
``EOF`` token. It never raises: unterminated strings and unexpected
characters become ``ERROR`` tokens so that the parser can report them
alongside any syntax errors it finds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Token:
    type: str
    lexeme: str
    line: int
    column: int
    literal: Optional[str] = None  # decoded string literal (escapes resolved)

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.lexeme!r}, {self.line}:{self.column})"


KEYWORDS = {
    'let', 'if', 'else', 'while', 'for', 'run', 'until', 'fn', 'return',
    'true', 'false', 'nil', 'print', 'break', 'continue',
}

# Operators that may be followed by a second character to form a longer one.
TWO_CHAR_OPS = {
    '==', '!=', '<=', '>=', '&&', '||', '++', '--', '+=', '-=', '*=', '/=',
}

SINGLE_OPS = {
    '(', ')', '{', '}', '[', ']', ';', ',', '.', '?', ':',
    '+', '-', '*', '/', '%', '=', '!', '<', '>',
}

ESCAPES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    '\\': '\\',
    '"': '"',
    '0': '\0',
}


def _is_ident_start(c: str) -> bool:
    return ('a' <= c <= 'z') or ('A' <= c <= 'Z') or c == '_'


def _is_digit(c: str) -> bool:
    return '0' <= c <= '9'


def tokenize(source: str) -> List[Token]:
    """Convert source code into a list of tokens.

    Whitespace and ``//`` line comments are skipped. Numbers are decimal
    with at most one fractional part. String literals keep their raw text
    in ``lexeme`` and the unescaped value in ``literal``.
    """
    tokens: List[Token] = []
    i = 0
    line = 1
    col = 1
    length = len(source)

    def peek(offset: int = 0) -> str:
        j = i + offset
        return source[j] if j < length else ''

    def advance(n: int = 1):
        nonlocal i, col, line
        for _ in range(n):
            if i < length and source[i] == '\n':
                line += 1
                col = 1
            else:
                col += 1
            i += 1

    while i < length:
        c = source[i]
        if c in ' \t\r\n':
            advance()
            continue
        if c == '/' and peek(1) == '/':
            while i < length and source[i] != '\n':
                advance()
            continue

        start_i, start_line, start_col = i, line, col

        if _is_ident_start(c):
            while i < length and (_is_ident_start(source[i]) or _is_digit(source[i])):
                advance()
            text = source[start_i:i]
            kind = text if text in KEYWORDS else 'IDENT'
            tokens.append(Token(kind, text, start_line, start_col))
            continue

        if _is_digit(c):
            while _is_digit(peek()):
                advance()
            # a trailing '.' without digits is left for member access
            if peek() == '.' and _is_digit(peek(1)):
                advance()
                while _is_digit(peek()):
                    advance()
            tokens.append(Token('NUMBER', source[start_i:i], start_line, start_col))
            continue

        if c == '"':
            advance()
            chars: List[str] = []
            while i < length and source[i] != '"':
                ch = source[i]
                if ch == '\\' and i + 1 < length:
                    escaped = source[i + 1]
                    if escaped in ESCAPES:
                        chars.append(ESCAPES[escaped])
                    else:
                        # unknown escapes are kept verbatim
                        chars.append('\\' + escaped)
                    advance(2)
                    continue
                chars.append(ch)
                advance()
            if i >= length:
                tokens.append(Token('ERROR', 'Unterminated string', start_line, start_col))
                continue
            advance()  # closing quote
            tokens.append(Token('STRING', source[start_i:i], start_line, start_col, ''.join(chars)))
            continue

        pair = source[i:i + 2]
        if pair in TWO_CHAR_OPS:
            advance(2)
            tokens.append(Token(pair, pair, start_line, start_col))
            continue
        if c in SINGLE_OPS:
            advance()
            tokens.append(Token(c, c, start_line, start_col))
            continue

        advance()
        tokens.append(Token('ERROR', f"Unexpected character {c!r}", start_line, start_col))

    tokens.append(Token('EOF', '', line, col))
    return tokens
