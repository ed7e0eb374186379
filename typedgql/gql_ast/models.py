import typing as T
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
import graphql

from typedgql.execute.utils import ErrorCollection
from typedgql.gql_ast.document_types import DocumentTypes
from typedgql.schema_types import SchemaTypes, TypeUnit
from typedgql.selection import wrap


class DefinitionKind(str, Enum):
    operation = "operation"
    fragment = "fragment"


class SourceLocation(T.NamedTuple):
    filename: str
    lineno: int

    def __str__(self) -> str:
        return f"{self.filename}:{self.lineno}"


class NameBinding:
    """The emitted name of a definition, resolved once its whole block is known.

    A block is compiled in two phases: every definition is first created with
    only its provisional (source) name, then every binding is resolved to the
    final name and the AST rewritten. Reading ``value`` in between is an error.
    """

    __slots__ = ("provisional", "_final")

    def __init__(self, provisional: str | None):
        self.provisional = provisional
        self._final: str | None = None

    def resolve(self, final: str) -> None:
        if self._final is not None and self._final != final:
            raise RuntimeError(f"name already resolved to {self._final!r}")
        self._final = final

    @property
    def resolved(self) -> bool:
        return self._final is not None

    @property
    def value(self) -> str:
        if self._final is None:
            raise RuntimeError(
                f"name of {self.provisional or 'anonymous definition'} "
                "read before its block finished compiling"
            )
        return self._final

    def __repr__(self) -> str:
        return f"<NameBinding {self.provisional!r} -> {self._final!r}>"


@dataclass(frozen=True, eq=False)
class Definition:
    name: str | None
    definition_node: graphql.ExecutableDefinitionNode
    document: graphql.DocumentNode = field(repr=False)
    resolved_type: graphql.GraphQLNamedType
    source_location: SourceLocation
    schema: graphql.GraphQLSchema = field(repr=False)
    types: SchemaTypes = field(repr=False)
    document_types: DocumentTypes = field(repr=False)
    binding: NameBinding = field(repr=False)

    kind: T.ClassVar[DefinitionKind]

    @classmethod
    def for_node(
        cls, *, definition_node: graphql.ExecutableDefinitionNode, **kwargs: T.Any
    ) -> "Definition":
        if isinstance(definition_node, graphql.OperationDefinitionNode):
            return OperationDefinition(definition_node=definition_node, **kwargs)
        if isinstance(definition_node, graphql.FragmentDefinitionNode):
            return FragmentDefinition(definition_node=definition_node, **kwargs)
        raise TypeError(f"unexpected definition {type(definition_node).__name__}")

    @property
    def definition_name(self) -> str:
        return self.binding.value

    @cached_property
    def type(self) -> TypeUnit:
        return wrap(self, self.definition_node, self.resolved_type, name=self.definition_name)

    def new(self, data: T.Any, errors: ErrorCollection | None = None) -> T.Any:
        """Cast raw ``data`` (or a view that spreads this fragment) into this definition's view."""
        return self.type.cast(data, errors if errors is not None else ErrorCollection())

    def to_query_string(self) -> str:
        return graphql.print_ast(self.document)


@dataclass(frozen=True, eq=False)
class OperationDefinition(Definition):
    kind: T.ClassVar[DefinitionKind] = DefinitionKind.operation

    @property
    def operation_name(self) -> str | None:
        node = self.definition_node.name
        return node.value if node else None

    @property
    def operation_type(self) -> str:
        return self.definition_node.operation.value


@dataclass(frozen=True, eq=False)
class FragmentDefinition(Definition):
    kind: T.ClassVar[DefinitionKind] = DefinitionKind.fragment

    @property
    def type_condition(self) -> str:
        return self.definition_node.type_condition.name.value


class Definitions(T.Mapping[T.Optional[str], Definition]):
    """The named definitions compiled from one block of query text."""

    def __init__(self, definitions: T.Mapping[str | None, Definition]):
        self._definitions = dict(definitions)

    def __getitem__(self, name: str | None) -> Definition:
        return self._definitions[name]

    def __iter__(self) -> T.Iterator[str | None]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __getattr__(self, name: str) -> Definition:
        try:
            return self.__dict__["_definitions"][name]
        except KeyError:
            raise AttributeError(name) from None

    def fragments(self) -> list[FragmentDefinition]:
        return [d for d in self._definitions.values() if isinstance(d, FragmentDefinition)]

    def __repr__(self) -> str:
        return f"<Definitions {list(self._definitions)}>"


__all__ = [
    "DefinitionKind",
    "SourceLocation",
    "NameBinding",
    "Definition",
    "OperationDefinition",
    "FragmentDefinition",
    "Definitions",
]
