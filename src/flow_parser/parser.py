"""Grammar for Flow type declarations and the parser entry points.

Precedence, loosest first::

    TYPE       = ['|'] TYPE_ARRAY ('|' TYPE_ARRAY)*
    TYPE_ARRAY = TYPE_TERM ('[' ']')*
    TYPE_TERM  = primitive | literal | '?' TYPE | '(' TYPE ')'
               | '$ReadOnlyArray' '<' TYPE '>' | '$ReadOnly' '<' TYPE '>'
               | name ('.' name)* ['<' TYPE (',' TYPE)* '>']
               | object type

The two left-recursive levels are folded with :func:`lrec`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, cast

from flow_parser.ast import (
    READONLY_DECORATOR,
    ArrayType,
    DecoratedGenericType,
    FlowProgram,
    ImportAsStat,
    ImportEqualStat,
    ImportNameStat,
    LiteralType,
    ObjectIndexer,
    ObjectProp,
    ObjectType,
    OptionalType,
    ParenType,
    PrimitiveType,
    TypeAliasDecl,
    TypeReference,
    UnionType,
    UseStrictStat,
    entity_name_from_parts,
)
from flow_parser.combinators import (
    Failure,
    Rule,
    alt,
    apply,
    list_sep,
    lrec,
    opt,
    rep,
    seq,
    tok,
    word,
)
from flow_parser.errors import (
    NestingTooDeep,
    TrailingInput,
    UnexpectedEndOfInput,
    UnexpectedToken,
)
from flow_parser.tokenizer import Position, Token, TokenKind, string_value, tokenize

if TYPE_CHECKING:
    from collections.abc import Sequence

    from flow_parser._types import PrimitiveName
    from flow_parser.ast import Declaration, ObjectMember, Statement, Type
    from flow_parser.combinators import Parser, Result
    from flow_parser.errors import FlowParseError

logger = logging.getLogger(__name__)


def _apply_primitive(token: Token) -> Type:
    return PrimitiveType(cast('PrimitiveName', token.text))


def _apply_literal_type(token: Token) -> Type:
    return LiteralType(token.text)


def _apply_optional_type(value: tuple[Token, Type]) -> Type:
    element_type = value[1]
    # ??T is the same as ?T
    if isinstance(element_type, OptionalType):
        return element_type
    return OptionalType(element_type)


def _apply_paren_type(value: tuple[Token, Type, Token]) -> Type:
    return ParenType(value[1])


def _apply_readonly_array_type(value: tuple[Token, Token, Type, Token]) -> Type:
    return ArrayType(value[2], is_readonly=True)


def _apply_decorated_generic_type(value: tuple[Token, Token, Type, Token]) -> Type:
    return DecoratedGenericType(READONLY_DECORATOR, value[2])


def _apply_type_reference(
    value: tuple[list[Token], tuple[Token, list[Type], Token] | None],
) -> Type:
    names, type_arguments = value
    entity = entity_name_from_parts(name.text for name in names)

    if type_arguments is None:
        return TypeReference(entity)

    return TypeReference(entity, tuple(type_arguments[1]))


def _apply_object_type_mixin(value: tuple[Token, Type]) -> Type:
    return value[1]


def _apply_object_type_prop(
    value: tuple[Token | None, Token, Token | None, Token, Type],
) -> ObjectMember:
    is_readonly, name, is_optional, _, prop_type = value
    return ObjectProp(
        name.text,
        prop_type,
        is_readonly=is_readonly is not None,
        is_optional=is_optional is not None,
    )


def _apply_object_indexer(
    value: tuple[Token | None, Token, Token, Token, Type, Token, Token, Type],
) -> ObjectMember:
    is_readonly, _, key_name, _, key_type, _, _, value_type = value
    return ObjectIndexer(
        key_name.text,
        key_type,
        value_type,
        is_readonly=is_readonly is not None,
    )


def _apply_object_type(
    value: tuple[
        Token,
        Token | None,
        list[Type | ObjectMember] | None,
        Token | None,
        Token | None,
        Token,
    ],
) -> Type:
    _, leading_pipe, items, _, trailing_pipe, _ = value
    mixin_types: list[Type] = []
    members: list[ObjectMember] = []

    for item in items or ():
        if isinstance(item, ObjectProp | ObjectIndexer):
            members.append(item)
        else:
            mixin_types.append(item)

    return ObjectType(
        is_exact=leading_pipe is not None and trailing_pipe is not None,
        mixin_types=tuple(mixin_types),
        members=tuple(members),
    )


def _combine_array_type(element_type: Type, _: tuple[Token, Token]) -> Type:
    return ArrayType(element_type)


def _apply_union_head(value: tuple[Token | None, Type]) -> Type:
    return value[1]


def _combine_union_type(left: Type, value: tuple[Token, Type]) -> Type:
    right = value[1]
    if isinstance(left, UnionType):
        return UnionType((*left.element_types, right))
    return UnionType((left, right))


def _apply_type_alias_decl(
    value: tuple[Token | None, Token, Token, Token, Type, Token],
) -> Declaration:
    has_export, _, name, _, aliased_type, _ = value
    return TypeAliasDecl(name.text, aliased_type, has_export=has_export is not None)


def _apply_use_strict_stat(_: tuple[Token, Token]) -> Statement:
    return UseStrictStat()


def _apply_import_equal_stat(value: tuple[Any, ...]) -> Statement:
    _, name, _, _, _, source, _, _ = value
    return ImportEqualStat(name.text, string_value(source.text))


def _apply_import_as_stat(value: tuple[Any, ...]) -> Statement:
    _, _, _, name, _, source, _ = value
    return ImportAsStat(name.text, string_value(source.text))


def _apply_import_name_stat(value: tuple[Any, ...]) -> Statement:
    _, _, _, names, _, _, source, _ = value
    return ImportNameStat(
        tuple(name.text for name in names), string_value(source.text)
    )


def _apply_program(statements: list[Statement]) -> FlowProgram:
    return FlowProgram(tuple(statements))


IDENTIFIER: Rule[Token] = Rule('IDENTIFIER')
TYPE_TERM: Rule[Type] = Rule('TYPE_TERM')
TYPE_ARRAY: Rule[Type] = Rule('TYPE_ARRAY')
TYPE: Rule[Type] = Rule('TYPE')
DECL: Rule[Declaration] = Rule('DECL')
STAT: Rule[Statement] = Rule('STAT')
PROGRAM: Rule[FlowProgram] = Rule('PROGRAM')

IDENTIFIER.set_pattern(
    alt(
        tok(TokenKind.KEYWORD_TYPE),
        tok(TokenKind.IDENTIFIER),
    )
)

_OBJECT_MEMBER = alt(
    apply(
        seq(tok(TokenKind.ELLIPSIS), TYPE),
        _apply_object_type_mixin,
    ),
    apply(
        seq(
            opt(tok(TokenKind.PLUS)),
            IDENTIFIER,
            opt(tok(TokenKind.QUESTION)),
            tok(TokenKind.COLON),
            TYPE,
        ),
        _apply_object_type_prop,
    ),
    apply(
        seq(
            opt(tok(TokenKind.PLUS)),
            tok(TokenKind.LBRACKET),
            IDENTIFIER,
            tok(TokenKind.COLON),
            TYPE,
            tok(TokenKind.RBRACKET),
            tok(TokenKind.COLON),
            TYPE,
        ),
        _apply_object_indexer,
    ),
)

TYPE_TERM.set_pattern(
    alt(
        apply(
            alt(word('null'), word('number'), word('string'), word('boolean')),
            _apply_primitive,
        ),
        apply(
            alt(
                tok(TokenKind.STRING_LITERAL),
                tok(TokenKind.NUMBER_LITERAL),
                tok(TokenKind.KEYWORD_TRUE),
                tok(TokenKind.KEYWORD_FALSE),
            ),
            _apply_literal_type,
        ),
        apply(seq(tok(TokenKind.QUESTION), TYPE), _apply_optional_type),
        apply(
            seq(tok(TokenKind.LPAREN), TYPE, tok(TokenKind.RPAREN)),
            _apply_paren_type,
        ),
        apply(
            seq(
                tok(TokenKind.READONLY_ARRAY),
                tok(TokenKind.LT),
                TYPE,
                tok(TokenKind.GT),
            ),
            _apply_readonly_array_type,
        ),
        apply(
            seq(tok(TokenKind.READONLY), tok(TokenKind.LT), TYPE, tok(TokenKind.GT)),
            _apply_decorated_generic_type,
        ),
        apply(
            seq(
                list_sep(IDENTIFIER, tok(TokenKind.DOT)),
                opt(
                    seq(
                        tok(TokenKind.LT),
                        list_sep(TYPE, tok(TokenKind.COMMA)),
                        tok(TokenKind.GT),
                    )
                ),
            ),
            _apply_type_reference,
        ),
        apply(
            seq(
                tok(TokenKind.LBRACE),
                opt(tok(TokenKind.PIPE)),
                opt(list_sep(_OBJECT_MEMBER, tok(TokenKind.COMMA))),
                opt(tok(TokenKind.COMMA)),
                opt(tok(TokenKind.PIPE)),
                tok(TokenKind.RBRACE),
            ),
            _apply_object_type,
        ),
    )
)

TYPE_ARRAY.set_pattern(
    lrec(
        TYPE_TERM,
        seq(tok(TokenKind.LBRACKET), tok(TokenKind.RBRACKET)),
        _combine_array_type,
    )
)

TYPE.set_pattern(
    lrec(
        apply(seq(opt(tok(TokenKind.PIPE)), TYPE_ARRAY), _apply_union_head),
        seq(tok(TokenKind.PIPE), TYPE_ARRAY),
        _combine_union_type,
    )
)

DECL.set_pattern(
    apply(
        seq(
            opt(word('export')),
            tok(TokenKind.KEYWORD_TYPE),
            IDENTIFIER,
            tok(TokenKind.EQUALS),
            TYPE,
            tok(TokenKind.SEMICOLON),
        ),
        _apply_type_alias_decl,
    )
)

STAT.set_pattern(
    alt(
        DECL,
        apply(
            seq(
                word('const'),
                tok(TokenKind.IDENTIFIER),
                tok(TokenKind.EQUALS),
                word('require'),
                tok(TokenKind.LPAREN),
                tok(TokenKind.STRING_LITERAL),
                tok(TokenKind.RPAREN),
                tok(TokenKind.SEMICOLON),
            ),
            _apply_import_equal_stat,
        ),
        apply(
            seq(
                word('import'),
                tok(TokenKind.STAR),
                word('as'),
                tok(TokenKind.IDENTIFIER),
                word('from'),
                tok(TokenKind.STRING_LITERAL),
                tok(TokenKind.SEMICOLON),
            ),
            _apply_import_as_stat,
        ),
        apply(
            seq(
                word('import'),
                opt(tok(TokenKind.KEYWORD_TYPE)),
                tok(TokenKind.LBRACE),
                list_sep(tok(TokenKind.IDENTIFIER), tok(TokenKind.COMMA)),
                tok(TokenKind.RBRACE),
                word('from'),
                tok(TokenKind.STRING_LITERAL),
                tok(TokenKind.SEMICOLON),
            ),
            _apply_import_name_stat,
        ),
        apply(
            seq(
                tok(TokenKind.STRING_LITERAL, "'use strict'", '"use strict"'),
                tok(TokenKind.SEMICOLON),
            ),
            _apply_use_strict_stat,
        ),
    )
)

PROGRAM.set_pattern(apply(rep(STAT), _apply_program))


def _end_position(tokens: Sequence[Token], /) -> Position | None:
    if not tokens:
        return None
    last = tokens[-1]
    return Position(
        last.position.index + len(last.text),
        last.position.line,
        last.position.column + len(last.text),
    )


def _error_at(failure: Failure, tokens: Sequence[Token], /) -> FlowParseError:
    if failure.pos >= len(tokens):
        return UnexpectedEndOfInput(failure.expected, _end_position(tokens))
    return UnexpectedToken(tokens[failure.pos], failure.expected)


def _run[T](parser: Parser[T], tokens: Sequence[Token], /) -> Result[T]:
    try:
        return parser.parse(tokens, 0)
    except RecursionError as e:
        raise NestingTooDeep(
            'Types are nested too deeply', tokens[0].position if tokens else None
        ) from e


def _finish[T](
    result: Result[T],
    tokens: Sequence[Token],
    /,
    *,
    trailing: type[UnexpectedToken] = UnexpectedToken,
) -> T:
    """Return the value of a parse that must cover every token, or raise."""
    if isinstance(result, Failure):
        raise _error_at(result, tokens)

    if result.pos == len(tokens):
        return result.value

    failure = result.failure
    if failure is not None and failure.pos > result.pos:
        raise _error_at(failure, tokens)

    raise trailing(tokens[result.pos], failure.expected if failure else ())


def parse_program(tokens: Sequence[Token], /) -> FlowProgram:
    """
    Parse a token list into a program.

    Args:
        tokens: Tokens produced by :func:`~flow_parser.tokenizer.tokenize`

    Returns:
        The program with its statements in source order

    Raises:
        UnexpectedToken: A token no rule accepts, at the furthest position
            any rule reached
        UnexpectedEndOfInput: The input ends inside a statement
        TrailingInput: Tokens after the last statement start no statement
        NestingTooDeep: Types nest past the interpreter recursion limit
    """
    tokens = tuple(tokens)
    program = _finish(_run(PROGRAM, tokens), tokens, trailing=TrailingInput)
    logger.debug('parsed %d statements', len(program.statements))
    return program


def parse(source: str, /) -> FlowProgram:
    """Tokenize and parse Flow source text."""
    return parse_program(tokenize(source))


def parse_type(source: str, /) -> Type:
    """Parse source text holding exactly one type expression."""
    tokens = tuple(tokenize(source))
    return _finish(_run(TYPE, tokens), tokens)


__all__ = [
    'DECL',
    'IDENTIFIER',
    'PROGRAM',
    'STAT',
    'TYPE',
    'TYPE_ARRAY',
    'TYPE_TERM',
    'parse',
    'parse_program',
    'parse_type',
]
