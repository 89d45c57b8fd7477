"""AST node classes for Flow type declarations.

Nodes are immutable. Each converts to and from the JSON shape described by
``flow-ast.schema.json``; the JSON form tags every node with a ``kind`` and
uses camelCase field names.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Final, Self

from jsonschema import validate

from flow_parser.common import AST_SCHEMA_ID, AST_SCHEMA_PATH

if TYPE_CHECKING:
    from collections.abc import Iterable

    from _typeshed import StrPath

    from flow_parser._types import (
        ArrayTypeDict,
        DecoratedGenericTypeDict,
        EntityNameDict,
        FlowProgramDict,
        ImportAsStatDict,
        ImportEqualStatDict,
        ImportNameStatDict,
        LiteralTypeDict,
        ObjectIndexerDict,
        ObjectMemberDict,
        ObjectPropDict,
        ObjectTypeDict,
        OptionalTypeDict,
        ParenTypeDict,
        PrimitiveName,
        PrimitiveTypeDict,
        QualifiedNameDict,
        StatementDict,
        TypeAliasDeclDict,
        TypeDict,
        TypeReferenceDict,
        UnionTypeDict,
        UseStrictStatDict,
    )

PRIMITIVE_NAMES: Final[frozenset[str]] = frozenset(
    {'null', 'number', 'string', 'boolean'}
)
READONLY_DECORATOR: Final = '$ReadOnly'


# ---------------------------------------------------------------------------
# Entity names
# ---------------------------------------------------------------------------
@dataclass(slots=True, frozen=True)
class QualifiedName:
    parent: EntityName
    name: str

    def to_json(self) -> QualifiedNameDict:
        return {'parent': entity_name_to_json(self.parent), 'name': self.name}

    @classmethod
    def from_json(cls, data: QualifiedNameDict) -> Self:
        return cls(entity_name_from_json(data['parent']), data['name'])


type EntityName = str | QualifiedName


def entity_name_to_json(name: EntityName, /) -> EntityNameDict:
    return name if isinstance(name, str) else name.to_json()


def entity_name_from_json(data: EntityNameDict, /) -> EntityName:
    match data:
        case str():
            return data
        case {'parent': _, 'name': str()}:
            return QualifiedName.from_json(data)
        case _:
            raise ValueError(f'Invalid entity name data: {data}')


def entity_name_from_parts(parts: Iterable[str], /) -> EntityName:
    """
    Build an entity name from dotted segments, left to right.

    The first segment is the innermost parent; ``['a', 'b', 'c']`` gives
    ``QualifiedName(QualifiedName('a', 'b'), 'c')``.
    """
    entity: EntityName | None = None
    for part in parts:
        entity = part if entity is None else QualifiedName(entity, part)

    if entity is None:
        raise ValueError('An entity name needs at least one segment')

    return entity


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------
@dataclass(slots=True, frozen=True)
class PrimitiveType:
    name: PrimitiveName

    def __post_init__(self) -> None:
        if self.name not in PRIMITIVE_NAMES:
            raise ValueError(f'Unknown primitive type: {self.name}')

    def to_json(self) -> PrimitiveTypeDict:
        return {'kind': 'PrimitiveType', 'name': self.name}

    @classmethod
    def from_json(cls, data: PrimitiveTypeDict) -> Self:
        return cls(data['name'])


@dataclass(slots=True, frozen=True)
class LiteralType:
    text: str

    def to_json(self) -> LiteralTypeDict:
        return {'kind': 'LiteralType', 'text': self.text}

    @classmethod
    def from_json(cls, data: LiteralTypeDict) -> Self:
        return cls(data['text'])


@dataclass(slots=True, frozen=True)
class OptionalType:
    element_type: Type

    def __post_init__(self) -> None:
        if isinstance(self.element_type, OptionalType):
            raise ValueError('OptionalType cannot wrap another OptionalType')

    def to_json(self) -> OptionalTypeDict:
        return {'kind': 'OptionalType', 'elementType': self.element_type.to_json()}

    @classmethod
    def from_json(cls, data: OptionalTypeDict) -> Self:
        return cls(type_from_json(data['elementType']))


@dataclass(slots=True, frozen=True)
class ParenType:
    element_type: Type

    def to_json(self) -> ParenTypeDict:
        return {'kind': 'ParenType', 'elementType': self.element_type.to_json()}

    @classmethod
    def from_json(cls, data: ParenTypeDict) -> Self:
        return cls(type_from_json(data['elementType']))


@dataclass(slots=True, frozen=True)
class ArrayType:
    element_type: Type
    is_readonly: bool = False

    def to_json(self) -> ArrayTypeDict:
        return {
            'kind': 'ArrayType',
            'isReadonly': self.is_readonly,
            'elementType': self.element_type.to_json(),
        }

    @classmethod
    def from_json(cls, data: ArrayTypeDict) -> Self:
        return cls(type_from_json(data['elementType']), is_readonly=data['isReadonly'])


@dataclass(slots=True, frozen=True)
class UnionType:
    element_types: tuple[Type, ...]

    def __post_init__(self) -> None:
        if len(self.element_types) < 2:  # noqa: PLR2004
            raise ValueError('UnionType needs at least two element types')
        if any(isinstance(element, UnionType) for element in self.element_types):
            raise ValueError('UnionType elements must be flattened')

    def to_json(self) -> UnionTypeDict:
        return {
            'kind': 'UnionType',
            'elementTypes': [element.to_json() for element in self.element_types],
        }

    @classmethod
    def from_json(cls, data: UnionTypeDict) -> Self:
        return cls(tuple(type_from_json(element) for element in data['elementTypes']))


@dataclass(slots=True, frozen=True)
class TypeReference:
    name: EntityName
    type_arguments: tuple[Type, ...] = ()

    def to_json(self) -> TypeReferenceDict:
        return {
            'kind': 'TypeReference',
            'name': entity_name_to_json(self.name),
            'typeArguments': [argument.to_json() for argument in self.type_arguments],
        }

    @classmethod
    def from_json(cls, data: TypeReferenceDict) -> Self:
        return cls(
            entity_name_from_json(data['name']),
            tuple(type_from_json(argument) for argument in data['typeArguments']),
        )


@dataclass(slots=True, frozen=True)
class DecoratedGenericType:
    name: str
    element_type: Type

    def to_json(self) -> DecoratedGenericTypeDict:
        return {
            'kind': 'DecoratedGenericType',
            'name': self.name,
            'elementType': self.element_type.to_json(),
        }

    @classmethod
    def from_json(cls, data: DecoratedGenericTypeDict) -> Self:
        return cls(data['name'], type_from_json(data['elementType']))


@dataclass(slots=True, frozen=True)
class ObjectProp:
    name: str
    prop_type: Type
    is_readonly: bool = False
    is_optional: bool = False

    def to_json(self) -> ObjectPropDict:
        return {
            'kind': 'Prop',
            'isReadonly': self.is_readonly,
            'name': self.name,
            'isOptional': self.is_optional,
            'propType': self.prop_type.to_json(),
        }

    @classmethod
    def from_json(cls, data: ObjectPropDict) -> Self:
        return cls(
            data['name'],
            type_from_json(data['propType']),
            is_readonly=data['isReadonly'],
            is_optional=data['isOptional'],
        )


@dataclass(slots=True, frozen=True)
class ObjectIndexer:
    key_name: str
    key_type: Type
    value_type: Type
    is_readonly: bool = False

    def to_json(self) -> ObjectIndexerDict:
        return {
            'kind': 'Indexer',
            'isReadonly': self.is_readonly,
            'keyName': self.key_name,
            'keyType': self.key_type.to_json(),
            'valueType': self.value_type.to_json(),
        }

    @classmethod
    def from_json(cls, data: ObjectIndexerDict) -> Self:
        return cls(
            data['keyName'],
            type_from_json(data['keyType']),
            type_from_json(data['valueType']),
            is_readonly=data['isReadonly'],
        )


type ObjectMember = ObjectProp | ObjectIndexer


def member_from_json(data: ObjectMemberDict, /) -> ObjectMember:
    match data:
        case {'kind': 'Prop'}:
            return ObjectProp.from_json(data)
        case {'kind': 'Indexer'}:
            return ObjectIndexer.from_json(data)
        case _:
            raise ValueError(f'Invalid object member data: {data}')


@dataclass(slots=True, frozen=True)
class ObjectType:
    is_exact: bool = False
    mixin_types: tuple[Type, ...] = ()
    members: tuple[ObjectMember, ...] = ()

    def to_json(self) -> ObjectTypeDict:
        return {
            'kind': 'ObjectType',
            'isExact': self.is_exact,
            'mixinTypes': [mixin.to_json() for mixin in self.mixin_types],
            'members': [member.to_json() for member in self.members],
        }

    @classmethod
    def from_json(cls, data: ObjectTypeDict) -> Self:
        return cls(
            is_exact=data['isExact'],
            mixin_types=tuple(type_from_json(mixin) for mixin in data['mixinTypes']),
            members=tuple(member_from_json(member) for member in data['members']),
        )


type Type = (
    PrimitiveType
    | LiteralType
    | OptionalType
    | ParenType
    | ArrayType
    | UnionType
    | TypeReference
    | DecoratedGenericType
    | ObjectType
)


def type_from_json(data: TypeDict, /) -> Type:  # noqa: PLR0911
    match data:
        case {'kind': 'PrimitiveType'}:
            return PrimitiveType.from_json(data)
        case {'kind': 'LiteralType'}:
            return LiteralType.from_json(data)
        case {'kind': 'OptionalType'}:
            return OptionalType.from_json(data)
        case {'kind': 'ParenType'}:
            return ParenType.from_json(data)
        case {'kind': 'ArrayType'}:
            return ArrayType.from_json(data)
        case {'kind': 'UnionType'}:
            return UnionType.from_json(data)
        case {'kind': 'TypeReference'}:
            return TypeReference.from_json(data)
        case {'kind': 'DecoratedGenericType'}:
            return DecoratedGenericType.from_json(data)
        case {'kind': 'ObjectType'}:
            return ObjectType.from_json(data)
        case _:
            raise ValueError(f'Invalid type data: {data}')


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------
@dataclass(slots=True, frozen=True)
class TypeAliasDecl:
    name: str
    aliased_type: Type
    has_export: bool = False

    def to_json(self) -> TypeAliasDeclDict:
        return {
            'kind': 'TypeAliasDecl',
            'hasExport': self.has_export,
            'name': self.name,
            'aliasedType': self.aliased_type.to_json(),
        }

    @classmethod
    def from_json(cls, data: TypeAliasDeclDict) -> Self:
        return cls(
            data['name'],
            type_from_json(data['aliasedType']),
            has_export=data['hasExport'],
        )


type Declaration = TypeAliasDecl


@dataclass(slots=True, frozen=True)
class UseStrictStat:
    def to_json(self) -> UseStrictStatDict:
        return {'kind': 'UseStrictStat'}

    @classmethod
    def from_json(cls, data: UseStrictStatDict) -> Self:  # noqa: ARG003
        return cls()


@dataclass(slots=True, frozen=True)
class ImportEqualStat:
    """``const name = require('source');``"""

    name: str
    source: str

    def to_json(self) -> ImportEqualStatDict:
        return {'kind': 'ImportEqualStat', 'name': self.name, 'source': self.source}

    @classmethod
    def from_json(cls, data: ImportEqualStatDict) -> Self:
        return cls(data['name'], data['source'])


@dataclass(slots=True, frozen=True)
class ImportAsStat:
    """``import * as name from 'source';``"""

    name: str
    source: str

    def to_json(self) -> ImportAsStatDict:
        return {'kind': 'ImportAsStat', 'name': self.name, 'source': self.source}

    @classmethod
    def from_json(cls, data: ImportAsStatDict) -> Self:
        return cls(data['name'], data['source'])


@dataclass(slots=True, frozen=True)
class ImportNameStat:
    """``import [type] { names } from 'source';``"""

    names: tuple[str, ...]
    source: str

    def to_json(self) -> ImportNameStatDict:
        return {
            'kind': 'ImportNameStat',
            'names': list(self.names),
            'source': self.source,
        }

    @classmethod
    def from_json(cls, data: ImportNameStatDict) -> Self:
        return cls(tuple(data['names']), data['source'])


type Statement = (
    TypeAliasDecl | UseStrictStat | ImportEqualStat | ImportAsStat | ImportNameStat
)


def statement_from_json(data: StatementDict, /) -> Statement:
    match data:
        case {'kind': 'TypeAliasDecl'}:
            return TypeAliasDecl.from_json(data)
        case {'kind': 'UseStrictStat'}:
            return UseStrictStat.from_json(data)
        case {'kind': 'ImportEqualStat'}:
            return ImportEqualStat.from_json(data)
        case {'kind': 'ImportAsStat'}:
            return ImportAsStat.from_json(data)
        case {'kind': 'ImportNameStat'}:
            return ImportNameStat.from_json(data)
        case _:
            raise ValueError(f'Invalid statement data: {data}')


@dataclass(slots=True, frozen=True)
class FlowProgram:
    statements: tuple[Statement, ...] = ()

    def to_json(self) -> FlowProgramDict:
        return {'statements': [statement.to_json() for statement in self.statements]}

    @classmethod
    def from_json(cls, data: FlowProgramDict) -> Self:
        return cls(tuple(statement_from_json(item) for item in data['statements']))

    @classmethod
    def load(cls, path: StrPath, /) -> Self:
        """Read a serialized program, validating it against the AST schema."""
        path = Path(path)
        program_data = json.loads(path.read_text(encoding='utf-8'))
        schema = json.loads(AST_SCHEMA_PATH.read_text(encoding='utf-8'))

        validate(program_data, schema)

        return cls.from_json(program_data)

    def dump(self, path: StrPath, /, *, indent: int | None = 2) -> None:
        data = self.to_json()
        path = Path(path)
        path.write_text(
            json.dumps({'$schema': AST_SCHEMA_ID, **data}, indent=indent) + '\n',
            encoding='utf-8',
        )
