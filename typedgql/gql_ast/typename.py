import graphql

from typedgql.gql_ast.document_types import DocumentTypes
from typedgql.utils import walk, response_key

TYPENAME = "__typename"


def typename_field() -> graphql.FieldNode:
    return graphql.FieldNode(
        name=graphql.NameNode(value=TYPENAME), arguments=(), directives=()
    )


def has_typename(selection_set: graphql.SelectionSetNode) -> bool:
    # a __typename under a type condition only covers that type
    return any(
        isinstance(sel, graphql.FieldNode) and response_key(sel) == TYPENAME
        for sel in selection_set.selections
    )


def insert_typename_fields(
    document: graphql.DocumentNode, types: DocumentTypes
) -> graphql.DocumentNode:
    """Select ``__typename`` wherever the selected type is an interface or union."""
    for node in list(walk(document)):
        selection_set = getattr(node, "selection_set", None)
        if selection_set is None:
            continue
        type_ = types.get(node)
        if type_ is None or not graphql.is_abstract_type(graphql.get_named_type(type_)):
            continue
        if has_typename(selection_set):
            continue
        selection_set.selections = (typename_field(), *selection_set.selections)
    return document


__all__ = [
    "TYPENAME",
    "typename_field",
    "has_typename",
    "insert_typename_fields",
]
