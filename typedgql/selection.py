import typing as T
import graphql

from typedgql.gql_ast.typename import TYPENAME
from typedgql.schema_types import (
    ListType,
    NonNullType,
    ObjectType,
    PossibleTypes,
    TypeUnit,
)
from typedgql.utils import response_key

if T.TYPE_CHECKING:
    from typedgql.gql_ast.models import Definition

SelectionParent = T.Union[
    graphql.OperationDefinitionNode,
    graphql.FragmentDefinitionNode,
    graphql.InlineFragmentNode,
    graphql.FieldNode,
]


def wrap(
    definition: "Definition",
    node: SelectionParent,
    type_: graphql.GraphQLOutputType,
    name: str | None = None,
) -> TypeUnit:
    """Build the unit for ``node``'s selection of ``type_``."""
    if isinstance(type_, graphql.GraphQLNonNull):
        return NonNullType(wrap(definition, node, type_.of_type, name=name))
    if isinstance(type_, graphql.GraphQLList):
        return ListType(wrap(definition, node, type_.of_type, name=name))
    if isinstance(type_, (graphql.GraphQLScalarType, graphql.GraphQLEnumType)):
        return definition.types[type_.name]
    if isinstance(type_, graphql.GraphQLObjectType):
        return wrap_object(definition, node, type_, name=name)
    if isinstance(type_, (graphql.GraphQLInterfaceType, graphql.GraphQLUnionType)):
        return PossibleTypes(
            {
                t.name: wrap_object(definition, node, t, name=name)
                for t in definition.schema.get_possible_types(type_)
            }
        )
    raise TypeError(f"unexpected {type(type_).__name__}")


def wrap_object(
    definition: "Definition",
    node: SelectionParent,
    type_: graphql.GraphQLObjectType,
    name: str | None = None,
) -> ObjectType:
    schema_unit = definition.types[type_.name]
    assert isinstance(schema_unit, ObjectType)
    return schema_unit.select(
        collect_fields(definition, node, type_, name=name),
        source_node=node,
        source_definition=definition,
        name=name,
    )


def type_condition_applies(
    definition: "Definition",
    node: graphql.InlineFragmentNode,
    type_: graphql.GraphQLObjectType,
) -> bool:
    if node.type_condition is None:
        return True
    condition = definition.schema.get_type(node.type_condition.name.value)
    if condition is None:
        return False
    if condition is type_:
        return True
    return graphql.is_abstract_type(condition) and definition.schema.is_sub_type(
        condition, type_
    )


def collect_fields(
    definition: "Definition",
    node: SelectionParent,
    type_: graphql.GraphQLObjectType,
    name: str | None = None,
) -> dict[str, TypeUnit]:
    """Units for the fields ``node`` selects on the concrete ``type_``.

    Fields reached through inline fragments are merged in when the fragment
    applies to ``type_``. Named fragment spreads are left out: their fields
    are only readable through the fragment's own definition.
    """
    fields: dict[str, TypeUnit] = {}

    def merge(key: str, unit: TypeUnit) -> None:
        fields[key] = fields[key] | unit if key in fields else unit

    # composite fields may be left without a selection set
    if node.selection_set is None:
        return fields

    for sel in node.selection_set.selections:
        if isinstance(sel, graphql.FieldNode):
            key = response_key(sel)
            if sel.name.value == TYPENAME:
                sel_type: graphql.GraphQLOutputType = graphql.GraphQLString
            else:
                sel_type = definition.document_types[sel]
            path = f"{name}.{key}" if name else key
            merge(key, wrap(definition, sel, sel_type, name=path))
        elif isinstance(sel, graphql.InlineFragmentNode):
            if type_condition_applies(definition, sel, type_):
                for key, unit in collect_fields(definition, sel, type_, name=name).items():
                    merge(key, unit)
    return fields


__all__ = ["wrap", "wrap_object", "type_condition_applies", "collect_fields"]
