import re
import sys
import types
import typing as T
import graphql


def walk(node: graphql.Node) -> T.Iterator[graphql.Node]:
    """Yield ``node`` and every AST node below it, breadth first."""
    nodes_q = [node]
    while len(nodes_q) > 0:
        current = nodes_q.pop(0)
        yield current
        for key in current.keys:
            value = getattr(current, key, None)
            if isinstance(value, graphql.Node):
                nodes_q.append(value)
            elif isinstance(value, (list, tuple)):
                nodes_q.extend(v for v in value if isinstance(v, graphql.Node))


def freeze(node: graphql.Node) -> graphql.Node:
    """Replace every list in the tree with a tuple."""
    for current in walk(node):
        for key in current.keys:
            value = getattr(current, key, None)
            if isinstance(value, list):
                setattr(current, key, tuple(value))
    return node


def spreads(node: graphql.Node) -> list[graphql.FragmentSpreadNode]:
    """Fragment spreads directly in a selection set or nested in its inline fragments."""
    found: list[graphql.FragmentSpreadNode] = []
    if node.selection_set is None:
        return found
    for sel in node.selection_set.selections:
        if isinstance(sel, graphql.FragmentSpreadNode):
            found.append(sel)
        elif isinstance(sel, graphql.InlineFragmentNode):
            found.extend(spreads(sel))
    return found


def response_key(node: graphql.FieldNode) -> str:
    return node.alias.value if node.alias else node.name.value


def to_snake(s: str) -> str:
    if s.startswith("__"):
        return s
    return graphql.pyutils.camel_to_snake(s)


def caller_frame(depth: int = 1) -> types.FrameType:
    # depth counts frames above the caller of this function
    return sys._getframe(depth + 1)


def to_namespace(name: str) -> str:
    """A dotted module name as a prefix usable in a GraphQL name."""
    return re.sub(r"\W", "_", name.strip("_").replace(".", "__"))


def frame_namespace(frame: types.FrameType) -> str:
    return to_namespace(frame.f_globals.get("__name__") or "anonymous")


def frame_scope(frame: types.FrameType) -> dict[str, T.Any]:
    return {**frame.f_globals, **frame.f_locals}


__all__ = [
    "walk",
    "freeze",
    "spreads",
    "response_key",
    "to_snake",
    "caller_frame",
    "to_namespace",
    "frame_namespace",
    "frame_scope",
]
