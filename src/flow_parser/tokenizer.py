"""Tokenizer for Flow type declarations.

Turns source text into a flat list of classified tokens. Whitespace and
comments are dropped. Words the grammar treats as contextual keywords
(``import``, ``export``, ``number``, ...) stay identifiers so they remain
usable as property names; only ``type``, ``true``, ``false`` and the two
reserved ``$ReadOnly`` markers get kinds of their own.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Final

from flow_parser.errors import TokenizeError

logger = logging.getLogger(__name__)


class TokenKind(Enum):
    """Token kinds. The value is the spelling used in error messages."""

    IDENTIFIER = 'identifier'
    STRING_LITERAL = 'string literal'
    NUMBER_LITERAL = 'number literal'

    KEYWORD_TRUE = "'true'"
    KEYWORD_FALSE = "'false'"
    KEYWORD_TYPE = "'type'"
    READONLY_ARRAY = "'$ReadOnlyArray'"
    READONLY = "'$ReadOnly'"

    LBRACE = "'{'"
    RBRACE = "'}'"
    LPAREN = "'('"
    RPAREN = "')'"
    LBRACKET = "'['"
    RBRACKET = "']'"
    LT = "'<'"
    GT = "'>'"
    PIPE = "'|'"
    QUESTION = "'?'"
    COLON = "':'"
    COMMA = "','"
    SEMICOLON = "';'"
    EQUALS = "'='"
    PLUS = "'+'"
    ELLIPSIS = "'...'"
    DOT = "'.'"
    STAR = "'*'"


@dataclass(slots=True, frozen=True)
class Position:
    index: int
    line: int
    column: int

    def __str__(self) -> str:
        return f'{self.line}:{self.column}'


@dataclass(slots=True, frozen=True)
class Token:
    kind: TokenKind
    text: str
    position: Position


_WORD_KINDS: Final = {
    'true': TokenKind.KEYWORD_TRUE,
    'false': TokenKind.KEYWORD_FALSE,
    'type': TokenKind.KEYWORD_TYPE,
    '$ReadOnlyArray': TokenKind.READONLY_ARRAY,
    '$ReadOnly': TokenKind.READONLY,
}

_PUNCTUATOR_KINDS: Final = {
    '{': TokenKind.LBRACE,
    '}': TokenKind.RBRACE,
    '(': TokenKind.LPAREN,
    ')': TokenKind.RPAREN,
    '[': TokenKind.LBRACKET,
    ']': TokenKind.RBRACKET,
    '<': TokenKind.LT,
    '>': TokenKind.GT,
    '|': TokenKind.PIPE,
    '?': TokenKind.QUESTION,
    ':': TokenKind.COLON,
    ',': TokenKind.COMMA,
    ';': TokenKind.SEMICOLON,
    '=': TokenKind.EQUALS,
    '+': TokenKind.PLUS,
    '...': TokenKind.ELLIPSIS,
    '.': TokenKind.DOT,
    '*': TokenKind.STAR,
}

_TOKEN_RE: Final = re.compile(
    r"""
      (?P<whitespace>\s+)
    | (?P<line_comment>//[^\n]*)
    | (?P<block_comment>/\*.*?\*/)
    | (?P<string>'(?:[^'\\\n]|\\.)*'|"(?:[^"\\\n]|\\.)*")
    | (?P<number>-?(?:0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+
        |(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?))
    | (?P<word>(?:[^\W\d]|\$)[\w$]*)
    | (?P<punctuator>\.\.\.|[{}()\[\]<>|?:,;=+.*])
    """,
    re.VERBOSE | re.DOTALL,
)

_ESCAPE_RE: Final = re.compile(
    r'\\(?:u\{([0-9a-fA-F]+)\}|u([0-9a-fA-F]{4})|x([0-9a-fA-F]{2})|(\r\n|.))',
    re.DOTALL,
)

_SIMPLE_ESCAPES: Final = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    'b': '\b',
    'f': '\f',
    'v': '\v',
    '0': '\0',
    '\n': '',
    '\r\n': '',
}


def _error_for(source: str, position: Position) -> TokenizeError:
    if source.startswith('/*', position.index):
        return TokenizeError('Unterminated comment', position)
    char = source[position.index]
    if char in '\'"':
        return TokenizeError('Unterminated string literal', position)
    return TokenizeError(f'Unexpected character {char!r}', position)


def tokenize(source: str, /) -> list[Token]:
    """
    Split Flow source text into tokens.

    Args:
        source: Source text

    Returns:
        Tokens in source order, without whitespace and comments

    Raises:
        TokenizeError: On text that does not form a token
    """
    tokens: list[Token] = []
    index = 0
    line = 1
    line_start = 0

    while index < len(source):
        position = Position(index, line, index - line_start + 1)
        match = _TOKEN_RE.match(source, index)
        if match is None:
            raise _error_for(source, position)

        text = match.group()
        group = match.lastgroup

        if group == 'string':
            tokens.append(Token(TokenKind.STRING_LITERAL, text, position))
        elif group == 'number':
            tokens.append(Token(TokenKind.NUMBER_LITERAL, text, position))
        elif group == 'word':
            kind = _WORD_KINDS.get(text, TokenKind.IDENTIFIER)
            tokens.append(Token(kind, text, position))
        elif group == 'punctuator':
            tokens.append(Token(_PUNCTUATOR_KINDS[text], text, position))

        newlines = text.count('\n')
        if newlines:
            line += newlines
            line_start = index + text.rindex('\n') + 1
        index = match.end()

    logger.debug('tokenized %d characters into %d tokens', len(source), len(tokens))
    return tokens


def _replace_escape(match: re.Match[str], /) -> str:
    braced, four, two, other = match.groups()
    if braced is not None:
        return chr(int(braced, 16))
    if four is not None:
        return chr(int(four, 16))
    if two is not None:
        return chr(int(two, 16))
    return _SIMPLE_ESCAPES.get(other, other)


def string_value(text: str, /) -> str:
    """Decode the text of a string literal token into the string it denotes."""
    return _ESCAPE_RE.sub(_replace_escape, text[1:-1])
