import typing as T
import graphql

from typedgql.errors import (
    ImplicitlyFetchedFieldError,
    NoFieldError,
    UndefinedFieldError,
    UnfetchedFieldError,
)
from typedgql.execute.utils import ErrorCollection, List
from typedgql.query_result import QueryResult
from typedgql.utils import spreads, to_snake

if T.TYPE_CHECKING:
    from typedgql.gql_ast.models import Definition


class TypeUnit:
    """Runtime representation of a schema type: knows how to cast raw JSON."""

    def cast(self, value: T.Any, errors: ErrorCollection) -> T.Any:
        raise NotImplementedError

    def __or__(self, other: "TypeUnit") -> "TypeUnit":
        raise TypeError(f"cannot merge {self!r} with {other!r}")


class NamedTypeUnit(TypeUnit):
    def __init__(self, type_: graphql.GraphQLNamedType):
        self.type_ = type_

    @property
    def type_name(self) -> str:
        return self.type_.name

    def __or__(self, other: TypeUnit) -> TypeUnit:
        if type(other) is type(self) and other.type_name == self.type_name:
            return self
        raise TypeError(f"expected other to be {self!r}, but was {other!r}")

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and other.type_name == self.type_name

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.type_name))

    def __repr__(self) -> str:
        return self.type_name


class ScalarType(NamedTypeUnit):
    def __init__(
        self,
        type_: graphql.GraphQLScalarType,
        parse: T.Callable[[T.Any], T.Any] | None = None,
    ):
        super().__init__(type_)
        self.parse = parse or type_.parse_value

    def cast(self, value: T.Any, errors: ErrorCollection | None = None) -> T.Any:
        if value is None:
            return None
        return self.parse(value)


class EnumType(NamedTypeUnit):
    def __init__(self, type_: graphql.GraphQLEnumType):
        super().__init__(type_)
        self.values: tuple[str, ...] = tuple(type_.values)

    def __contains__(self, value: str) -> bool:
        return value in self.values

    def cast(self, value: T.Any, errors: ErrorCollection | None = None) -> T.Any:
        return value


class WrappingTypeUnit(TypeUnit):
    def __init__(self, of_unit: TypeUnit):
        self.of_unit = of_unit

    def __or__(self, other: TypeUnit) -> TypeUnit:
        if type(other) is not type(self):
            raise TypeError(f"expected other to be a {type(self).__name__}, but was {other!r}")
        return type(self)(self.of_unit | other.of_unit)

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and other.of_unit == self.of_unit

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.of_unit))


class NonNullType(WrappingTypeUnit):
    def cast(self, value: T.Any, errors: ErrorCollection) -> T.Any:
        return self.of_unit.cast(value, errors)

    def __repr__(self) -> str:
        return f"{self.of_unit!r}!"


class ListType(WrappingTypeUnit):
    def cast(self, value: T.Any, errors: ErrorCollection) -> List | None:
        if not isinstance(value, list):
            return None
        return List(
            [
                self.of_unit.cast(item, errors.filter_by_path(index))
                for index, item in enumerate(value)
            ],
            errors,
        )

    def __repr__(self) -> str:
        return f"[{self.of_unit!r}]"


def _typename_of(value: T.Any) -> str | None:
    if isinstance(value, QueryResult):
        value = value._data
    if isinstance(value, T.Mapping):
        return value.get("__typename")
    return None


class PossibleTypes(TypeUnit):
    """Dispatches interface and union values on their ``__typename``."""

    def __init__(self, types: T.Mapping[str, "ObjectType"]):
        self.types = dict(types)

    def cast(self, value: T.Any, errors: ErrorCollection) -> QueryResult | None:
        unit = self.types.get(_typename_of(value))
        if unit is None:
            return None
        return unit.cast(value, errors)

    def __or__(self, other: TypeUnit) -> TypeUnit:
        if not isinstance(other, PossibleTypes):
            raise TypeError(f"expected other to be a PossibleTypes, but was {other!r}")
        types = dict(self.types)
        for name, unit in other.types.items():
            types[name] = types[name] | unit if name in types else unit
        return PossibleTypes(types)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, PossibleTypes) and other.types == self.types

    def __hash__(self) -> int:
        return hash(frozenset(self.types))

    def __repr__(self) -> str:
        return f"<PossibleTypes {' | '.join(self.types)}>"


class ObjectType(NamedTypeUnit):
    """An object type together with the fields a view over it may read.

    Units built by ``generate`` cover every field of the schema type. Units
    built for a selection (``select``) cover exactly the selected fields and
    remember the node they were selected from.
    """

    def __init__(
        self,
        type_: graphql.GraphQLObjectType,
        fields: dict[str, TypeUnit] | None = None,
        *,
        supertypes: frozenset[str] = frozenset(),
        source_node: graphql.Node | None = None,
        source_definition: T.Optional["Definition"] = None,
        spread_names: frozenset[str] = frozenset(),
        name: str | None = None,
    ):
        super().__init__(type_)
        self.fields: dict[str, TypeUnit] = fields if fields is not None else {}
        self.supertypes = supertypes
        self.source_node = source_node
        self.source_definition = source_definition
        self.spread_names = spread_names
        self.name = name
        self._accessors: dict[str, str] | None = None

    def select(
        self,
        fields: dict[str, TypeUnit],
        *,
        source_node: graphql.Node,
        source_definition: "Definition",
        name: str | None = None,
    ) -> "ObjectType":
        return ObjectType(
            self.type_,
            fields,
            supertypes=self.supertypes,
            source_node=source_node,
            source_definition=source_definition,
            spread_names=frozenset(s.name.value for s in spreads(source_node)),
            name=name,
        )

    def is_a(self, name: str) -> bool:
        return name == self.type_name or name in self.supertypes

    @property
    def accessors(self) -> dict[str, str]:
        """Attribute name -> response key, for snake_case names and the keys themselves."""
        if self._accessors is None:
            accessors: dict[str, str] = {}
            for key in self.fields:
                accessors.setdefault(to_snake(key), key)
            for key in self.fields:
                accessors[key] = key
            self._accessors = accessors
        return self._accessors

    def accessor(self, name: str) -> str | None:
        return self.accessors.get(name)

    def accessor_names(self) -> list[str]:
        return [name for name in self.accessors if name.isidentifier()]

    def no_field_error(self, name: str, data: T.Mapping[str, T.Any]) -> NoFieldError:
        field_name = next(
            (
                f_name
                for f_name in self.type_.fields
                if f_name == name or to_snake(f_name) == name
            ),
            None,
        )
        if field_name is None:
            return UndefinedFieldError(
                f"undefined field `{name}' on {self.type_name} type.",
                field_name=name,
                type_name=self.type_name,
            )
        if data.get(field_name):
            error_cls: type[NoFieldError] = ImplicitlyFetchedFieldError
            message = f"implicitly fetched field `{field_name}' on {self.type_name} type."
        else:
            error_cls = UnfetchedFieldError
            message = f"unfetched field `{field_name}' on {self.type_name} type."
        if self.source_node is not None:
            query = graphql.print_ast(self.source_node)
            head, sep, tail = query.rpartition("}")
            if sep:
                message += f"\n\n{head}  + {field_name}\n}}{tail}"
        return error_cls(message, field_name=field_name, type_name=self.type_name)

    def cast(self, value: T.Any, errors: ErrorCollection | None = None) -> QueryResult | None:
        if errors is None:
            errors = ErrorCollection()
        if value is None:
            return None
        if isinstance(value, QueryResult):
            if value._unit is self:
                return value
            if self.source_node is not None:
                fragment_name = getattr(self.source_node, "name", None)
                if (
                    fragment_name is None
                    or fragment_name.value not in value._unit.spread_names
                ):
                    raise TypeError(
                        f"{self._definition_label()} is not included in "
                        f"{value._unit._definition_label()}"
                    )
            return QueryResult(self, value._data, value._errors)
        if isinstance(value, T.Mapping):
            return QueryResult(self, value, errors)
        raise TypeError(f"expected {value!r} to be a mapping")

    def _definition_label(self) -> str:
        if self.source_definition is not None:
            return self.source_definition.definition_name
        return self.name or self.type_name

    def __or__(self, other: TypeUnit) -> TypeUnit:
        if not isinstance(other, ObjectType) or other.type_name != self.type_name:
            raise TypeError(f"expected other to be a {self.type_name} object, but was {other!r}")
        fields = dict(self.fields)
        for key, unit in other.fields.items():
            fields[key] = fields[key] | unit if key in fields else unit
        return ObjectType(
            self.type_,
            fields,
            supertypes=self.supertypes,
            source_node=self.source_node or other.source_node,
            source_definition=self.source_definition or other.source_definition,
            spread_names=self.spread_names | other.spread_names,
            name=self.name or other.name,
        )

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, ObjectType)
            and other.type_name == self.type_name
            and other.fields.keys() == self.fields.keys()
        )

    def __hash__(self) -> int:
        return hash(self.type_name)

    def __repr__(self) -> str:
        return f"<{self.name or self.type_name} fields={list(self.fields)}>"


class AbstractType(NamedTypeUnit):
    """An interface or union; dispatch is assembled when a value is cast."""

    def __init__(
        self,
        type_: graphql.GraphQLInterfaceType | graphql.GraphQLUnionType,
        registry: "SchemaTypes",
    ):
        super().__init__(type_)
        self.registry = registry

    def possible_types(
        self, units: T.Mapping[str, ObjectType] | None = None
    ) -> PossibleTypes:
        source = units if units is not None else self.registry
        return PossibleTypes(
            {
                t.name: source[t.name]
                for t in self.registry.schema.get_possible_types(self.type_)
                if t.name in source
            }
        )

    def cast(self, value: T.Any, errors: ErrorCollection) -> QueryResult | None:
        return self.possible_types().cast(value, errors)


class SchemaTypes(T.Mapping[str, TypeUnit]):
    """Type units for every named output type of a schema."""

    def __init__(self, schema: graphql.GraphQLSchema):
        self.schema = schema
        self._units: dict[str, TypeUnit] = {}

    def __getitem__(self, name: str) -> TypeUnit:
        return self._units[name]

    def __iter__(self) -> T.Iterator[str]:
        return iter(self._units)

    def __len__(self) -> int:
        return len(self._units)

    def __getattr__(self, name: str) -> TypeUnit:
        try:
            return self.__dict__["_units"][name]
        except KeyError:
            raise AttributeError(name) from None

    def __repr__(self) -> str:
        return f"<SchemaTypes {list(self._units)}>"


class _UnitBuilder:
    def __init__(
        self,
        schema: graphql.GraphQLSchema,
        registry: SchemaTypes,
        scalars: T.Mapping[str, graphql.GraphQLScalarType],
    ):
        self.schema = schema
        self.registry = registry
        self.scalars = scalars
        # keyed by id(); the type object is kept alongside so the id stays valid
        self.cache: dict[int, tuple[graphql.GraphQLType, TypeUnit | None]] = {}
        self.union_members: dict[str, set[str]] = {}
        for type_ in schema.type_map.values():
            if isinstance(type_, graphql.GraphQLUnionType):
                for member in type_.types:
                    self.union_members.setdefault(member.name, set()).add(type_.name)

    def unit_for(self, type_: graphql.GraphQLType) -> TypeUnit | None:
        if id(type_) in self.cache:
            return self.cache[id(type_)][1]

        unit: TypeUnit | None
        if isinstance(type_, graphql.GraphQLInputObjectType):
            unit = None
        elif isinstance(type_, graphql.GraphQLScalarType):
            override = self.scalars.get(type_.name)
            unit = ScalarType(type_, parse=override.parse_value if override else None)
        elif isinstance(type_, graphql.GraphQLEnumType):
            unit = EnumType(type_)
        elif isinstance(type_, graphql.GraphQLList):
            unit = ListType(self.unit_for(type_.of_type))
        elif isinstance(type_, graphql.GraphQLNonNull):
            unit = NonNullType(self.unit_for(type_.of_type))
        elif isinstance(type_, (graphql.GraphQLInterfaceType, graphql.GraphQLUnionType)):
            unit = AbstractType(type_, self.registry)
        elif isinstance(type_, graphql.GraphQLObjectType):
            supertypes = {interface.name for interface in type_.interfaces}
            supertypes |= self.union_members.get(type_.name, set())
            unit = ObjectType(type_, supertypes=frozenset(supertypes))
            # cache before the fields so self-referencing types terminate
            self.cache[id(type_)] = (type_, unit)
            for field_name, field in type_.fields.items():
                unit.fields[field_name] = self.unit_for(field.type)
            return unit
        else:
            raise TypeError(f"unexpected {type(type_).__name__}")

        self.cache[id(type_)] = (type_, unit)
        return unit


def generate(
    schema: graphql.GraphQLSchema,
    scalars: T.Mapping[str, graphql.GraphQLScalarType] | None = None,
) -> SchemaTypes:
    registry = SchemaTypes(schema)
    builder = _UnitBuilder(schema=schema, registry=registry, scalars=scalars or {})
    for name, type_ in schema.type_map.items():
        if name.startswith("__"):
            continue
        unit = builder.unit_for(type_)
        if unit is not None:
            registry._units[name] = unit
    return registry


__all__ = [
    "TypeUnit",
    "ScalarType",
    "EnumType",
    "ListType",
    "NonNullType",
    "PossibleTypes",
    "ObjectType",
    "AbstractType",
    "SchemaTypes",
    "generate",
]
