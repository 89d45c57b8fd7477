"""Walking and querying parsed Flow ASTs.

Helpers for downstream tools (converters, documentation extractors) that
need to visit every type node without matching each variant themselves.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, assert_never

from flow_parser.ast import (
    ArrayType,
    DecoratedGenericType,
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

if TYPE_CHECKING:
    from collections.abc import Iterator

    from flow_parser.ast import EntityName, FlowProgram, Statement, Type


def format_entity_name(name: EntityName, /) -> str:
    """Render an entity name in dotted form (``a.b.c``)."""
    if isinstance(name, str):
        return name
    return f'{format_entity_name(name.parent)}.{name.name}'


def entity_name_parts(name: EntityName, /) -> list[str]:
    """Split an entity name into its segments, outermost last."""
    parts: list[str] = []
    while isinstance(name, QualifiedName):
        parts.append(name.name)
        name = name.parent
    parts.append(name)
    parts.reverse()
    return parts


def child_types(node: Type, /) -> tuple[Type, ...]:
    """
    Return the direct type children of a type node, in source order.

    Args:
        node: Type node to inspect

    Returns:
        Child types; object types yield mixins first, then member types
    """
    match node:
        case PrimitiveType() | LiteralType():
            return ()
        case OptionalType() | ParenType() | ArrayType() | DecoratedGenericType():
            return (node.element_type,)
        case UnionType():
            return node.element_types
        case TypeReference():
            return node.type_arguments
        case ObjectType():
            children = list(node.mixin_types)
            for member in node.members:
                match member:
                    case ObjectProp():
                        children.append(member.prop_type)
                    case ObjectIndexer():
                        children.extend((member.key_type, member.value_type))
                    case _:
                        assert_never(member)
            return tuple(children)
        case _:
            assert_never(node)


def walk_type(node: Type, /) -> Iterator[Type]:
    """Yield ``node`` and every type nested in it, preorder."""
    yield node
    for child in child_types(node):
        yield from walk_type(child)


def statement_types(statement: Statement, /) -> tuple[Type, ...]:
    match statement:
        case TypeAliasDecl():
            return (statement.aliased_type,)
        case UseStrictStat() | ImportEqualStat() | ImportAsStat() | ImportNameStat():
            return ()
        case _:
            assert_never(statement)


def walk_program(program: FlowProgram, /) -> Iterator[Type]:
    """Yield every type node in a program, statement by statement."""
    for statement in program.statements:
        for root in statement_types(statement):
            yield from walk_type(root)


def referenced_names(program: FlowProgram, /) -> set[str]:
    """Dotted names of every type reference in a program."""
    return {
        format_entity_name(node.name)
        for node in walk_program(program)
        if isinstance(node, TypeReference)
    }


def imported_names(program: FlowProgram, /) -> dict[str, str]:
    """Map each name bound by an import statement to its module source."""
    names: dict[str, str] = {}

    for statement in program.statements:
        match statement:
            case ImportEqualStat() | ImportAsStat():
                names[statement.name] = statement.source
            case ImportNameStat():
                for name in statement.names:
                    names[name] = statement.source
            case TypeAliasDecl() | UseStrictStat():
                pass
            case _:
                assert_never(statement)

    return names


def declared_aliases(program: FlowProgram, /) -> dict[str, TypeAliasDecl]:
    """Type alias declarations by name; later declarations win."""
    return {
        statement.name: statement
        for statement in program.statements
        if isinstance(statement, TypeAliasDecl)
    }
