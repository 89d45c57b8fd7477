"""Exceptions raised by the tokenizer and the parser entry points.

Combinators never raise: failures inside the grammar are plain values that
drive backtracking. Only the public entry points turn the furthest failure
into one of the exceptions below.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from flow_parser.tokenizer import Position, Token


class FlowParseError(Exception):
    """Base class for every error reported while reading Flow source."""

    def __init__(self, message: str, position: Position | None = None) -> None:
        self.message = message
        self.position = position
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.position is not None:
            return f'{self.position.line}:{self.position.column}: {self.message}'
        return self.message


class TokenizeError(FlowParseError):
    """Raised when the source contains text that is not a Flow token."""


def _format_expected(expected: Iterable[str], /) -> str:
    names = sorted(expected)
    if not names:
        return ''
    if len(names) == 1:
        return f', expected {names[0]}'
    return f', expected one of {", ".join(names)}'


class UnexpectedToken(FlowParseError):
    """No grammar alternative accepts the token at this position."""

    def __init__(self, token: Token, expected: Iterable[str] = ()) -> None:
        self.token = token
        self.expected = frozenset(expected)
        super().__init__(
            f'Unexpected token {token.text!r}{_format_expected(self.expected)}',
            token.position,
        )


class UnexpectedEndOfInput(FlowParseError):
    """A construct needs more tokens than the input provides."""

    def __init__(
        self, expected: Iterable[str] = (), position: Position | None = None
    ) -> None:
        self.expected = frozenset(expected)
        super().__init__(
            f'Unexpected end of input{_format_expected(self.expected)}', position
        )


class TrailingInput(UnexpectedToken):
    """The program parsed, but unrecognized tokens follow the last statement."""

    def __init__(self, token: Token, expected: Iterable[str] = ()) -> None:
        super().__init__(token, expected)
        self.message = f'Unrecognized statement starting at {token.text!r}'
        self.args = (self._format_message(),)


class NestingTooDeep(FlowParseError):
    """The input nests types deeper than the parser can follow."""
