import typing as T
import graphql

from typedgql.gql_ast.slice import slice_document


class VariableUsageVisitor(graphql.Visitor):
    def __init__(self, type_info: graphql.TypeInfo):
        super().__init__()
        self.type_info = type_info
        self.variables: dict[str, graphql.GraphQLInputType] = {}

    def enter_variable(self, node: graphql.VariableNode, *_args: T.Any) -> None:
        name = node.name.value
        input_type = self.type_info.get_input_type()
        if input_type is None:
            return
        existing = self.variables.get(name)
        # a non-null usage is the strictest requirement, keep it
        if (
            existing is not None
            and graphql.is_non_null_type(existing)
            and not graphql.is_non_null_type(input_type)
        ):
            return
        self.variables[name] = input_type


def variables(
    schema: graphql.GraphQLSchema,
    document: graphql.DocumentNode,
    definition_name: str | None = None,
) -> dict[str, graphql.GraphQLInputType]:
    if definition_name is not None:
        document = slice_document(document, definition_name)
    type_info = graphql.TypeInfo(schema)
    visitor = VariableUsageVisitor(type_info)
    graphql.visit(document, graphql.TypeInfoVisitor(type_info, visitor))
    return visitor.variables


def type_node(type_: graphql.GraphQLInputType) -> graphql.TypeNode:
    if isinstance(type_, graphql.GraphQLNonNull):
        return graphql.NonNullTypeNode(type=type_node(type_.of_type))
    if isinstance(type_, graphql.GraphQLList):
        return graphql.ListTypeNode(type=type_node(type_.of_type))
    return graphql.NamedTypeNode(name=graphql.NameNode(value=type_.name))


def operation_variables(
    schema: graphql.GraphQLSchema,
    document: graphql.DocumentNode,
    definition_name: str | None = None,
) -> list[graphql.VariableDefinitionNode]:
    return [
        graphql.VariableDefinitionNode(
            variable=graphql.VariableNode(name=graphql.NameNode(value=name)),
            type=type_node(type_),
            directives=(),
        )
        for name, type_ in variables(schema, document, definition_name).items()
    ]


__all__ = ["variables", "type_node", "operation_variables"]
