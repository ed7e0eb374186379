import typing as T
import graphql

TypedNode = T.Union[
    graphql.OperationDefinitionNode,
    graphql.FragmentDefinitionNode,
    graphql.InlineFragmentNode,
    graphql.FieldNode,
]


class DocumentTypes(T.Mapping[graphql.Node, graphql.GraphQLType]):
    """Schema type of each definition, inline fragment and field of a document.

    graphql-core nodes compare structurally, so two identical selections in
    different places would collide as dict keys; entries are keyed by node
    identity instead.
    """

    def __init__(self) -> None:
        self._types: dict[int, tuple[graphql.Node, graphql.GraphQLType]] = {}

    def record(self, node: graphql.Node, type_: graphql.GraphQLType | None) -> None:
        if type_ is not None:
            self._types[id(node)] = (node, type_)

    def __getitem__(self, node: graphql.Node) -> graphql.GraphQLType:
        return self._types[id(node)][1]

    def __iter__(self) -> T.Iterator[graphql.Node]:
        return (node for node, _ in self._types.values())

    def __len__(self) -> int:
        return len(self._types)


class DocumentTypesVisitor(graphql.Visitor):
    def __init__(self, type_info: graphql.TypeInfo, types: DocumentTypes):
        super().__init__()
        self.type_info = type_info
        self.types = types

    def enter_operation_definition(self, node: TypedNode, *_args: T.Any) -> None:
        self.types.record(node, self.type_info.get_type())

    enter_fragment_definition = enter_operation_definition
    enter_inline_fragment = enter_operation_definition
    enter_field = enter_operation_definition


def analyze_types(
    schema: graphql.GraphQLSchema, document: graphql.DocumentNode
) -> DocumentTypes:
    types = DocumentTypes()
    type_info = graphql.TypeInfo(schema)
    graphql.visit(
        document,
        graphql.TypeInfoVisitor(type_info, DocumentTypesVisitor(type_info, types)),
    )
    return types


__all__ = ["DocumentTypes", "DocumentTypesVisitor", "analyze_types"]
