"""Backtracking parser combinators over a token list.

Every parser is a pure function of ``(tokens, pos)`` returning either a
:class:`Success` (value plus the position after it) or a :class:`Failure`
(the furthest position reached and what would have been accepted there).
A failing parser never consumes input: the caller still holds the position
it started from and can try the next alternative.

Successes also carry the furthest failure met on the way, so an entry point
can report the deepest point any rule reached instead of the point where
the outermost repetition gave up.

Grammars are built from module-level rules. Mutually recursive rules are
declared first with :class:`Rule` and bound with :meth:`Rule.set_pattern`
once every rule they mention exists.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, overload, override

from flow_parser.tokenizer import Token, TokenKind

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence


@dataclass(slots=True, frozen=True)
class Failure:
    pos: int
    expected: frozenset[str]


@dataclass(slots=True, frozen=True)
class Success[T]:
    value: T
    pos: int
    failure: Failure | None = None


type Result[T] = Success[T] | Failure


@overload
def furthest(first: Failure | None, second: Failure, /) -> Failure: ...
@overload
def furthest(first: Failure, second: Failure | None, /) -> Failure: ...
@overload
def furthest(first: Failure | None, second: Failure | None, /) -> Failure | None: ...
def furthest(first: Failure | None, second: Failure | None, /) -> Failure | None:
    """Keep the failure that got further; merge expectations on a tie."""
    if first is None:
        return second
    if second is None or first.pos > second.pos:
        return first
    if second.pos > first.pos:
        return second
    return Failure(first.pos, first.expected | second.expected)


class Parser[T](ABC):
    @abstractmethod
    def parse(self, tokens: Sequence[Token], pos: int, /) -> Result[T]: ...


@dataclass(slots=True)
class _Token(Parser[Token]):
    kind: TokenKind
    texts: frozenset[str]
    name: str

    @override
    def parse(self, tokens: Sequence[Token], pos: int, /) -> Result[Token]:
        if pos < len(tokens):
            token = tokens[pos]
            if token.kind is self.kind and (not self.texts or token.text in self.texts):
                return Success(token, pos + 1)
        return Failure(pos, frozenset({self.name}))


def tok(kind: TokenKind, /, *texts: str) -> Parser[Token]:
    """Match one token of ``kind``, optionally restricted to the given spellings."""
    name = ' or '.join(repr(text) for text in texts) if texts else kind.value
    return _Token(kind, frozenset(texts), name)


def word(text: str, /) -> Parser[Token]:
    """Match an identifier spelled ``text`` (a contextual keyword)."""
    return tok(TokenKind.IDENTIFIER, text)


@dataclass(slots=True)
class _Sequence(Parser[tuple[Any, ...]]):
    parsers: tuple[Parser[Any], ...]

    @override
    def parse(self, tokens: Sequence[Token], pos: int, /) -> Result[tuple[Any, ...]]:
        values: list[Any] = []
        failure: Failure | None = None

        for parser in self.parsers:
            result = parser.parse(tokens, pos)
            if isinstance(result, Failure):
                return furthest(failure, result)
            values.append(result.value)
            pos = result.pos
            failure = furthest(failure, result.failure)

        return Success(tuple(values), pos, failure)


def seq(*parsers: Parser[Any]) -> Parser[tuple[Any, ...]]:
    """Match every parser in order; the value is the tuple of their values."""
    return _Sequence(parsers)


@dataclass(slots=True)
class _Alternative[T](Parser[T]):
    parsers: tuple[Parser[T], ...]

    @override
    def parse(self, tokens: Sequence[Token], pos: int, /) -> Result[T]:
        failure: Failure | None = None

        for parser in self.parsers:
            result = parser.parse(tokens, pos)
            if isinstance(result, Success):
                return Success(result.value, result.pos, furthest(failure, result.failure))
            failure = furthest(failure, result)

        return failure if failure is not None else Failure(pos, frozenset())


def alt[T](*parsers: Parser[T]) -> Parser[T]:
    """Try each parser from the same position; the first success wins."""
    return _Alternative(parsers)


@dataclass(slots=True)
class _Optional[T](Parser[T | None]):
    parser: Parser[T]

    @override
    def parse(self, tokens: Sequence[Token], pos: int, /) -> Result[T | None]:
        result = self.parser.parse(tokens, pos)
        if isinstance(result, Failure):
            return Success(None, pos, result)
        return result


def opt[T](parser: Parser[T], /) -> Parser[T | None]:
    return _Optional(parser)


@dataclass(slots=True)
class _Repeat[T](Parser[list[T]]):
    parser: Parser[T]

    @override
    def parse(self, tokens: Sequence[Token], pos: int, /) -> Result[list[T]]:
        values: list[T] = []
        failure: Failure | None = None

        while True:
            result = self.parser.parse(tokens, pos)
            if isinstance(result, Failure):
                return Success(values, pos, furthest(failure, result))
            if result.pos == pos:
                return Success(values, pos, furthest(failure, result.failure))
            values.append(result.value)
            pos = result.pos
            failure = furthest(failure, result.failure)


def rep[T](parser: Parser[T], /) -> Parser[list[T]]:
    """Match ``parser`` zero or more times, as many times as possible."""
    return _Repeat(parser)


@dataclass(slots=True)
class _SeparatedList[T](Parser[list[T]]):
    parser: Parser[T]
    separator: Parser[Any]

    @override
    def parse(self, tokens: Sequence[Token], pos: int, /) -> Result[list[T]]:
        first = self.parser.parse(tokens, pos)
        if isinstance(first, Failure):
            return first

        values = [first.value]
        pos = first.pos
        failure = first.failure

        while True:
            separator = self.separator.parse(tokens, pos)
            if isinstance(separator, Failure):
                return Success(values, pos, furthest(failure, separator))
            item = self.parser.parse(tokens, separator.pos)
            if isinstance(item, Failure):
                # the separator is left for whoever follows the list
                return Success(values, pos, furthest(failure, item))
            values.append(item.value)
            pos = item.pos
            failure = furthest(furthest(failure, separator.failure), item.failure)


def list_sep[T](parser: Parser[T], separator: Parser[Any], /) -> Parser[list[T]]:
    """Match one or more ``parser`` separated by ``separator``."""
    return _SeparatedList(parser, separator)


@dataclass(slots=True)
class _Apply[T, U](Parser[U]):
    parser: Parser[T]
    callback: Callable[[T], U]

    @override
    def parse(self, tokens: Sequence[Token], pos: int, /) -> Result[U]:
        result = self.parser.parse(tokens, pos)
        if isinstance(result, Failure):
            return result
        return Success(self.callback(result.value), result.pos, result.failure)


def apply[T, U](parser: Parser[T], callback: Callable[[T], U], /) -> Parser[U]:
    """Transform the value of a successful match."""
    return _Apply(parser, callback)


@dataclass(slots=True)
class _LeftRecursion[T, U](Parser[T]):
    head: Parser[T]
    tail: Parser[U]
    combine: Callable[[T, U], T]

    @override
    def parse(self, tokens: Sequence[Token], pos: int, /) -> Result[T]:
        result = self.head.parse(tokens, pos)
        if isinstance(result, Failure):
            return result

        value = result.value
        pos = result.pos
        failure = result.failure

        while True:
            tail = self.tail.parse(tokens, pos)
            if isinstance(tail, Failure):
                return Success(value, pos, furthest(failure, tail))
            if tail.pos == pos:
                return Success(value, pos, furthest(failure, tail.failure))
            value = self.combine(value, tail.value)
            pos = tail.pos
            failure = furthest(failure, tail.failure)


def lrec[T, U](
    head: Parser[T], tail: Parser[U], combine: Callable[[T, U], T], /
) -> Parser[T]:
    """
    Parse ``head tail*`` and fold the tails into the head from the left.

    This is the left-recursion-free form of ``X = X tail | head``: each
    ``combine(left, tail)`` call receives the fully built left operand and
    returns the next complete value.

    Args:
        head: Parser for the first operand
        tail: Parser for one operator/operand pair
        combine: Reducer building the new left operand

    Returns:
        Parser yielding the folded value
    """
    return _LeftRecursion(head, tail, combine)


@dataclass(slots=True, eq=False)
class Rule[T](Parser[T]):
    """A named parser whose pattern is bound after construction."""

    name: str
    pattern: Parser[T] | None = field(default=None, repr=False)

    def set_pattern(self, pattern: Parser[T], /) -> None:
        self.pattern = pattern

    @override
    def parse(self, tokens: Sequence[Token], pos: int, /) -> Result[T]:
        if self.pattern is None:
            raise RuntimeError(f'Rule {self.name} has no pattern')
        return self.pattern.parse(tokens, pos)
