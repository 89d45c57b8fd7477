"""Tests for flow_parser.ast_utilities."""

from __future__ import annotations

from typing import TYPE_CHECKING

from flow_parser.ast import (
    ArrayType,
    ObjectType,
    PrimitiveType,
    QualifiedName,
    TypeAliasDecl,
    TypeReference,
    UnionType,
)
from flow_parser.ast_utilities import (
    child_types,
    declared_aliases,
    entity_name_parts,
    format_entity_name,
    imported_names,
    referenced_names,
    walk_program,
    walk_type,
)
from flow_parser.parser import parse, parse_type

if TYPE_CHECKING:
    from flow_parser.ast import FlowProgram


class TestEntityNames:
    def test_format(self) -> None:
        assert format_entity_name('A') == 'A'
        assert format_entity_name(QualifiedName(QualifiedName('a', 'b'), 'c')) == 'a.b.c'

    def test_parts(self) -> None:
        assert entity_name_parts('A') == ['A']
        assert entity_name_parts(QualifiedName(QualifiedName('a', 'b'), 'c')) == [
            'a',
            'b',
            'c',
        ]


class TestWalk:
    def test_leaf_has_no_children(self) -> None:
        assert child_types(PrimitiveType('null')) == ()

    def test_object_children_order(self) -> None:
        node = parse_type('{ ...M, a: A, [k: K]: V }')

        assert child_types(node) == (
            TypeReference('M'),
            TypeReference('A'),
            TypeReference('K'),
            TypeReference('V'),
        )

    def test_walk_type_preorder(self) -> None:
        node = parse_type('A | B<C>[]')

        assert list(walk_type(node)) == [
            node,
            TypeReference('A'),
            ArrayType(TypeReference('B', (TypeReference('C'),))),
            TypeReference('B', (TypeReference('C'),)),
            TypeReference('C'),
        ]

    def test_walk_program(self) -> None:
        program = parse("'use strict';\ntype A = ?B;\nimport { C } from 'c';\n")

        assert [type(node).__name__ for node in walk_program(program)] == [
            'OptionalType',
            'TypeReference',
        ]


class TestProgramQueries:
    def test_referenced_names(self, sample_program: FlowProgram) -> None:
        assert referenced_names(sample_program) == {
            'Node',
            'Size',
            'Item',
            'BaseProps',
            'mixed',
            'Event',
            'Array',
            'React.Ref',
            'Element',
        }

    def test_imported_names(self, sample_program: FlowProgram) -> None:
        assert imported_names(sample_program) == {
            'invariant': 'invariant',
            'React': 'react',
            'Node': 'react',
            'Element': 'react',
        }

    def test_declared_aliases(self, sample_program: FlowProgram) -> None:
        aliases = declared_aliases(sample_program)

        assert list(aliases) == ['Size', 'Props', 'Handlers']
        assert isinstance(aliases['Props'].aliased_type, ObjectType)

    def test_later_alias_wins(self) -> None:
        program = parse('type A = number;\ntype A = string | null;')

        assert declared_aliases(program) == {
            'A': TypeAliasDecl(
                'A', UnionType((PrimitiveType('string'), PrimitiveType('null')))
            )
        }
