"""Tests for the Flow grammar: type terms, composition, statements, errors."""

from __future__ import annotations

import pytest

from flow_parser.ast import (
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
    QualifiedName,
    TypeAliasDecl,
    TypeReference,
    UnionType,
    UseStrictStat,
)
from flow_parser.combinators import Failure, Success
from flow_parser.errors import (
    NestingTooDeep,
    TokenizeError,
    TrailingInput,
    UnexpectedEndOfInput,
    UnexpectedToken,
)
from flow_parser.parser import TYPE, parse, parse_program, parse_type
from flow_parser.tokenizer import tokenize

A = TypeReference('A')
B = TypeReference('B')
C = TypeReference('C')
NUMBER = PrimitiveType('number')
STRING = PrimitiveType('string')


# ============================================================================
# Type terms
# ============================================================================


class TestPrimitiveAndLiteralTypes:
    @pytest.mark.parametrize('name', ['null', 'number', 'string', 'boolean'])
    def test_primitive_keywords(self, name: str) -> None:
        assert parse_type(name) == PrimitiveType(name)  # pyright: ignore[reportArgumentType]

    @pytest.mark.parametrize('text', ["'small'", '"large"', '42', '-1.5', 'true', 'false'])
    def test_literal_types_keep_raw_text(self, text: str) -> None:
        assert parse_type(text) == LiteralType(text)

    def test_primitive_prefix_is_a_reference(self) -> None:
        assert parse_type('numbers') == TypeReference('numbers')


class TestOptionalType:
    def test_optional(self) -> None:
        assert parse_type('?number') == OptionalType(NUMBER)

    def test_double_optional_collapses(self) -> None:
        assert parse_type('??number') == parse_type('?number')
        assert parse_type('???A') == OptionalType(A)

    def test_optional_covers_following_union(self) -> None:
        assert parse_type('?A | B') == OptionalType(UnionType((A, B)))

    def test_optional_of_parenthesized_optional_is_kept(self) -> None:
        assert parse_type('?(?A)') == OptionalType(ParenType(OptionalType(A)))


class TestParenType:
    def test_paren_is_preserved(self) -> None:
        assert parse_type('(number)') == ParenType(NUMBER)

    def test_unclosed_paren(self) -> None:
        with pytest.raises(UnexpectedEndOfInput) as exc_info:
            parse_type('(number')

        assert "')'" in exc_info.value.expected


class TestReadonlyForms:
    def test_readonly_array(self) -> None:
        assert parse_type('$ReadOnlyArray<string>') == ArrayType(
            STRING, is_readonly=True
        )

    def test_readonly_decorator(self) -> None:
        assert parse_type('$ReadOnly<{ a: string }>') == DecoratedGenericType(
            '$ReadOnly', ObjectType(members=(ObjectProp('a', STRING),))
        )

    def test_readonly_marker_requires_argument(self) -> None:
        with pytest.raises(UnexpectedEndOfInput):
            parse_type('$ReadOnlyArray')


class TestTypeReference:
    def test_plain_name(self) -> None:
        assert parse_type('Foo') == TypeReference('Foo', ())

    def test_qualified_name(self) -> None:
        result = parse_type('a.b.c')

        assert result == TypeReference(QualifiedName(QualifiedName('a', 'b'), 'c'))
        assert isinstance(result, TypeReference)
        assert result.type_arguments == ()

    def test_type_arguments(self) -> None:
        assert parse_type('Map<string, Array<number>>') == TypeReference(
            'Map', (STRING, TypeReference('Array', (NUMBER,)))
        )

    def test_qualified_generic(self) -> None:
        assert parse_type('React.Ref<A>') == TypeReference(
            QualifiedName('React', 'Ref'), (A,)
        )

    def test_type_keyword_is_a_name(self) -> None:
        assert parse_type('type') == TypeReference('type')

    def test_empty_type_arguments_rejected(self) -> None:
        with pytest.raises(UnexpectedToken) as exc_info:
            parse_type('Array<>')

        assert exc_info.value.token.text == '>'


class TestObjectType:
    def test_exact(self) -> None:
        assert parse_type('{| a: number |}') == ObjectType(
            is_exact=True, members=(ObjectProp('a', NUMBER),)
        )

    def test_inexact(self) -> None:
        assert parse_type('{ a: number }') == ObjectType(
            is_exact=False, members=(ObjectProp('a', NUMBER),)
        )

    def test_empty(self) -> None:
        assert parse_type('{}') == ObjectType()

    def test_empty_exact(self) -> None:
        assert parse_type('{||}') == ObjectType(is_exact=True)

    def test_only_leading_pipe_is_inexact(self) -> None:
        result = parse_type('{| a: number }')

        assert isinstance(result, ObjectType)
        assert not result.is_exact

    def test_union_member_inside_exact_object(self) -> None:
        assert parse_type('{| a: A | B |}') == ObjectType(
            is_exact=True, members=(ObjectProp('a', UnionType((A, B))),)
        )

    def test_members(self) -> None:
        result = parse_type(
            '{ ...Base, +id: string, name?: ?string, [key: string]: number, }'
        )

        assert result == ObjectType(
            mixin_types=(TypeReference('Base'),),
            members=(
                ObjectProp('id', STRING, is_readonly=True),
                ObjectProp('name', OptionalType(STRING), is_optional=True),
                ObjectIndexer('key', STRING, NUMBER),
            ),
        )

    def test_readonly_indexer(self) -> None:
        assert parse_type('{ +[k: string]: A }') == ObjectType(
            members=(ObjectIndexer('k', STRING, A, is_readonly=True),)
        )

    def test_member_order_preserved(self) -> None:
        result = parse_type('{ c: C, a: A, b: B }')

        assert isinstance(result, ObjectType)
        assert [
            member.name for member in result.members if isinstance(member, ObjectProp)
        ] == ['c', 'a', 'b']

    def test_mixins_are_not_members(self) -> None:
        result = parse_type('{ ...A, x: B, ...C }')

        assert isinstance(result, ObjectType)
        assert result.mixin_types == (A, C)
        assert result.members == (ObjectProp('x', B),)

    def test_keyword_like_prop_names(self) -> None:
        result = parse_type('{ type: string, from: number, null: A }')

        assert isinstance(result, ObjectType)
        assert [
            member.name for member in result.members if isinstance(member, ObjectProp)
        ] == ['type', 'from', 'null']

    def test_missing_colon(self) -> None:
        with pytest.raises(UnexpectedToken) as exc_info:
            parse_type('{ a number }')

        assert exc_info.value.token.text == 'number'


# ============================================================================
# Composition
# ============================================================================


class TestArrayType:
    def test_array(self) -> None:
        assert parse_type('A[]') == ArrayType(A)

    def test_nested_arrays_fold_left(self) -> None:
        assert parse_type('A[][]') == ArrayType(ArrayType(A))

    def test_array_of_paren_union(self) -> None:
        assert parse_type('(A | B)[]') == ArrayType(ParenType(UnionType((A, B))))

    def test_generic_then_array(self) -> None:
        assert parse_type('Array<A>[]') == ArrayType(TypeReference('Array', (A,)))


class TestUnionType:
    def test_flattened(self) -> None:
        assert parse_type('A | B | C') == UnionType((A, B, C))

    def test_paren_prevents_flattening(self) -> None:
        assert parse_type('(A | B) | C') == UnionType(
            (ParenType(UnionType((A, B))), C)
        )

    def test_array_binds_tighter(self) -> None:
        assert parse_type('A | B[]') == UnionType((A, ArrayType(B)))

    def test_leading_pipe_ignored(self) -> None:
        assert parse_type('| A | B') == UnionType((A, B))
        assert parse_type('| A') == A

    def test_long_chain_stays_flat(self) -> None:
        result = parse_type(' | '.join(f'T{i}' for i in range(10)))

        assert isinstance(result, UnionType)
        assert len(result.element_types) == 10
        assert not any(isinstance(t, UnionType) for t in result.element_types)

    def test_dangling_pipe(self) -> None:
        with pytest.raises(UnexpectedEndOfInput):
            parse_type('A |')


class TestTypeRule:
    def test_partial_match_reports_position(self) -> None:
        tokens = tokenize('A | B;')
        result = TYPE.parse(tokens, 0)

        assert isinstance(result, Success)
        assert result.pos == 3

    def test_failure_does_not_consume(self) -> None:
        tokens = tokenize(';')
        result = TYPE.parse(tokens, 0)

        assert isinstance(result, Failure)
        assert result.pos == 0


# ============================================================================
# Statements and programs
# ============================================================================


class TestStatements:
    def test_exported_alias(self) -> None:
        assert parse('export type A = number;') == FlowProgram(
            (TypeAliasDecl('A', NUMBER, has_export=True),)
        )

    def test_alias(self) -> None:
        assert parse('type A = B | C;') == FlowProgram(
            (TypeAliasDecl('A', UnionType((B, C))),)
        )

    def test_import_names(self) -> None:
        assert parse("import type { Foo, Bar } from 'mod';") == FlowProgram(
            (ImportNameStat(('Foo', 'Bar'), 'mod'),)
        )

    def test_import_names_without_type(self) -> None:
        assert parse('import { Foo } from "./foo";') == FlowProgram(
            (ImportNameStat(('Foo',), './foo'),)
        )

    def test_require(self) -> None:
        assert parse("const x = require('y');") == FlowProgram(
            (ImportEqualStat('x', 'y'),)
        )

    def test_import_namespace(self) -> None:
        assert parse("import * as React from 'react';") == FlowProgram(
            (ImportAsStat('React', 'react'),)
        )

    @pytest.mark.parametrize('source', ["'use strict';", '"use strict";'])
    def test_use_strict(self, source: str) -> None:
        assert parse(source) == FlowProgram((UseStrictStat(),))

    def test_other_string_statement_rejected(self) -> None:
        with pytest.raises(TrailingInput):
            parse("'use sloppy';")

    def test_source_escapes_decoded(self) -> None:
        program = parse(r"const x = require('it\'s');")

        assert program.statements == (ImportEqualStat('x', "it's"),)


class TestProgram:
    def test_empty(self) -> None:
        assert parse('') == FlowProgram()
        assert parse('// @flow\n') == FlowProgram()

    def test_statement_order(self) -> None:
        program = parse(
            "'use strict';\ntype A = number;\nconst b = require('b');\n"
            'export type C = A;\n'
        )

        assert [type(statement) for statement in program.statements] == [
            UseStrictStat,
            TypeAliasDecl,
            ImportEqualStat,
            TypeAliasDecl,
        ]

    def test_sample(self, sample_program: FlowProgram) -> None:
        assert len(sample_program.statements) == 7
        size, props, handlers = sample_program.statements[4:]

        assert size == TypeAliasDecl(
            'Size',
            UnionType(
                (LiteralType("'small'"), LiteralType("'medium'"), LiteralType("'large'"))
            ),
            has_export=True,
        )

        assert isinstance(props, TypeAliasDecl)
        assert props.aliased_type == ObjectType(
            is_exact=True,
            mixin_types=(TypeReference('BaseProps'),),
            members=(
                ObjectProp(
                    'children',
                    OptionalType(TypeReference('Node')),
                    is_readonly=True,
                    is_optional=True,
                ),
                ObjectProp('size', TypeReference('Size')),
                ObjectProp('items', ArrayType(TypeReference('Item'), is_readonly=True)),
                ObjectIndexer('key', STRING, TypeReference('mixed')),
            ),
        )

        assert isinstance(handlers, TypeAliasDecl)
        assert isinstance(handlers.aliased_type, ObjectType)
        refs = handlers.aliased_type.members[2]
        assert refs == ObjectProp(
            'refs',
            ArrayType(
                TypeReference(
                    'Array',
                    (
                        TypeReference(
                            QualifiedName('React', 'Ref'), (TypeReference('Element'),)
                        ),
                    ),
                )
            ),
        )

    def test_parse_program_accepts_any_sequence(self) -> None:
        tokens = tokenize('type A = B;')

        assert parse_program(tokens) == parse_program(iter(tokens))  # pyright: ignore[reportArgumentType]


# ============================================================================
# Errors
# ============================================================================


class TestErrors:
    def test_missing_type(self) -> None:
        with pytest.raises(UnexpectedToken) as exc_info:
            parse('type A = ;')

        error = exc_info.value
        assert not isinstance(error, TrailingInput)
        assert error.token.text == ';'
        assert error.position is not None
        assert (error.position.line, error.position.column) == (1, 10)
        assert str(error).startswith('1:10: ')

    def test_missing_semicolon(self) -> None:
        with pytest.raises(UnexpectedEndOfInput) as exc_info:
            parse('type A = number')

        assert "';'" in exc_info.value.expected
        assert "'['" in exc_info.value.expected

    def test_error_in_second_statement(self) -> None:
        with pytest.raises(UnexpectedToken) as exc_info:
            parse('type A = number;\ntype B = { a: };')

        error = exc_info.value
        assert error.token.text == '}'
        assert error.position is not None
        assert error.position.line == 2

    def test_unknown_statement(self) -> None:
        with pytest.raises(TrailingInput) as exc_info:
            parse('type A = number;\nfoo;')

        assert exc_info.value.token.text == 'foo'
        assert "'type'" in exc_info.value.expected

    def test_import_without_semicolon(self) -> None:
        with pytest.raises(UnexpectedEndOfInput):
            parse("import { A } from 'a'")

    def test_trailing_tokens_after_type(self) -> None:
        with pytest.raises(UnexpectedToken) as exc_info:
            parse_type('number foo')

        assert not isinstance(exc_info.value, TrailingInput)
        assert exc_info.value.token.text == 'foo'

    def test_tokenize_error_propagates(self) -> None:
        with pytest.raises(TokenizeError):
            parse('type A = @;')

    @pytest.mark.parametrize(
        'source',
        ['(' * 2000 + 'A' + ')' * 2000, '?' * 2000 + 'A', '{ a: ' * 2000 + 'A' + ' }' * 2000],
    )
    def test_deep_nesting(self, source: str) -> None:
        with pytest.raises(NestingTooDeep) as exc_info:
            parse_type(source)

        assert exc_info.value.position == tokenize(source)[0].position

    def test_deep_nesting_in_program(self) -> None:
        with pytest.raises(NestingTooDeep):
            parse('type A = ' + '(' * 2000 + 'B' + ')' * 2000 + ';')
