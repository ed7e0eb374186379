import graphql

from typedgql.utils import walk


def definition_name(node: graphql.DefinitionNode) -> str | None:
    name = getattr(node, "name", None)
    return name.value if name else None


def fragment_dependencies(node: graphql.Node) -> set[str]:
    return {n.name.value for n in walk(node) if isinstance(n, graphql.FragmentSpreadNode)}


def slice_document(document: graphql.DocumentNode, name: str) -> graphql.DocumentNode:
    """The named definition plus every fragment it transitively spreads.

    Each definition appears once, in document order.
    """
    definitions: dict[str, graphql.DefinitionNode] = {}
    for node in document.definitions:
        node_name = definition_name(node)
        if node_name is not None:
            definitions.setdefault(node_name, node)
    if name not in definitions:
        raise KeyError(f"no definition named {name!r} in document")

    names = {name}
    definitions_q = [definitions[name]]
    while len(definitions_q) > 0:
        node = definitions_q.pop(0)
        for dependency in fragment_dependencies(node):
            if dependency not in names and dependency in definitions:
                names.add(dependency)
                definitions_q.append(definitions[dependency])

    return graphql.DocumentNode(
        definitions=tuple(
            node for node_name, node in definitions.items() if node_name in names
        )
    )


__all__ = ["definition_name", "fragment_dependencies", "slice_document"]
