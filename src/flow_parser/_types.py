from __future__ import annotations

from typing import Literal, NotRequired
from typing_extensions import TypedDict

type PrimitiveName = Literal['null', 'number', 'string', 'boolean']


class PrimitiveTypeDict(TypedDict):
    kind: Literal['PrimitiveType']
    name: PrimitiveName


class LiteralTypeDict(TypedDict):
    kind: Literal['LiteralType']
    text: str


class OptionalTypeDict(TypedDict):
    kind: Literal['OptionalType']
    elementType: TypeDict


class ParenTypeDict(TypedDict):
    kind: Literal['ParenType']
    elementType: TypeDict


class ArrayTypeDict(TypedDict):
    kind: Literal['ArrayType']
    isReadonly: bool
    elementType: TypeDict


class UnionTypeDict(TypedDict):
    kind: Literal['UnionType']
    elementTypes: list[TypeDict]


class QualifiedNameDict(TypedDict):
    parent: EntityNameDict
    name: str


type EntityNameDict = str | QualifiedNameDict


class TypeReferenceDict(TypedDict):
    kind: Literal['TypeReference']
    name: EntityNameDict
    typeArguments: list[TypeDict]


class DecoratedGenericTypeDict(TypedDict):
    kind: Literal['DecoratedGenericType']
    name: str
    elementType: TypeDict


class ObjectPropDict(TypedDict):
    kind: Literal['Prop']
    isReadonly: bool
    name: str
    isOptional: bool
    propType: TypeDict


class ObjectIndexerDict(TypedDict):
    kind: Literal['Indexer']
    isReadonly: bool
    keyName: str
    keyType: TypeDict
    valueType: TypeDict


type ObjectMemberDict = ObjectPropDict | ObjectIndexerDict


class ObjectTypeDict(TypedDict):
    kind: Literal['ObjectType']
    isExact: bool
    mixinTypes: list[TypeDict]
    members: list[ObjectMemberDict]


type TypeDict = (
    PrimitiveTypeDict
    | LiteralTypeDict
    | OptionalTypeDict
    | ParenTypeDict
    | ArrayTypeDict
    | UnionTypeDict
    | TypeReferenceDict
    | DecoratedGenericTypeDict
    | ObjectTypeDict
)


class TypeAliasDeclDict(TypedDict):
    kind: Literal['TypeAliasDecl']
    hasExport: bool
    name: str
    aliasedType: TypeDict


class UseStrictStatDict(TypedDict):
    kind: Literal['UseStrictStat']


class ImportEqualStatDict(TypedDict):
    kind: Literal['ImportEqualStat']
    name: str
    source: str


class ImportAsStatDict(TypedDict):
    kind: Literal['ImportAsStat']
    name: str
    source: str


class ImportNameStatDict(TypedDict):
    kind: Literal['ImportNameStat']
    names: list[str]
    source: str


type StatementDict = (
    TypeAliasDeclDict
    | UseStrictStatDict
    | ImportEqualStatDict
    | ImportAsStatDict
    | ImportNameStatDict
)


_ProgramBase = TypedDict('_ProgramBase', {'$schema': NotRequired[str]})


class FlowProgramDict(_ProgramBase):
    statements: list[StatementDict]
