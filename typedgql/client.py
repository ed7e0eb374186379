import json
import logging
import os
import threading
import time
import typing as T
from pathlib import Path

import graphql

from typedgql.errors import ClientError, DynamicQueryError, NotConfiguredError
from typedgql.execute.executor import (
    ExecuteFunc,
    Executor,
    SchemaExecutor,
    is_executor,
    run_executor,
)
from typedgql.execute.utils import ErrorCollection, Response, normalize_errors, stringify_keys
from typedgql.gql_ast.compiler import DocumentCompiler
from typedgql.gql_ast.models import (
    Definition,
    Definitions,
    FragmentDefinition,
    OperationDefinition,
    SourceLocation,
)
from typedgql.gql_ast.variables import operation_variables
from typedgql.schema_types import SchemaTypes, generate
from typedgql.utils import caller_frame, frame_namespace, frame_scope, to_namespace

logger = logging.getLogger(__name__)

SchemaSource = T.Union[
    graphql.GraphQLSchema, T.Mapping[str, T.Any], str, os.PathLike, Executor, ExecuteFunc
]

SDL_SUFFIXES = (".graphql", ".graphqls")


def load_schema(schema: SchemaSource) -> graphql.GraphQLSchema:
    """Build a schema from a schema object, an introspection result, a file or an executor."""
    if isinstance(schema, graphql.GraphQLSchema):
        return schema
    if isinstance(schema, T.Mapping):
        introspection = schema.get("data", schema)
        return graphql.build_client_schema(introspection)
    if isinstance(schema, (str, os.PathLike)):
        if isinstance(schema, str) and schema.lstrip().startswith("{"):
            return load_schema(json.loads(schema))
        path = Path(schema)
        if path.suffix == ".json" and path.is_file():
            return load_schema(json.loads(path.read_text()))
        if path.suffix in SDL_SUFFIXES and path.is_file():
            return graphql.build_schema(path.read_text())
        raise TypeError(f"expected {schema!r} to be JSON or a path to a schema file")
    if is_executor(schema):
        return load_schema(dump_schema(schema))
    raise TypeError(f"cannot load a schema from {type(schema).__name__}")


def dump_schema(
    schema: graphql.GraphQLSchema | Executor | ExecuteFunc,
    path: str | os.PathLike | None = None,
) -> T.Mapping[str, T.Any]:
    """Run the introspection query through ``schema`` and optionally save the result."""
    if isinstance(schema, graphql.GraphQLSchema):
        schema = SchemaExecutor(schema)
    if not is_executor(schema):
        raise TypeError(
            f"expected schema to have an execute method, but was {type(schema).__name__}"
        )
    result = run_executor(
        schema,
        document=graphql.parse(graphql.get_introspection_query()),
        operation_name="IntrospectionQuery",
        variables={},
        context={},
    )
    if path is not None:
        with open(path, "w") as f:
            json.dump(result, f, indent=2)
    return result


class Client:
    """Compiles query text against a schema and casts the results of running it."""

    def __init__(
        self,
        schema: SchemaSource,
        execute: Executor | ExecuteFunc | None = None,
        *,
        allow_dynamic_queries: bool = False,
        document_tracking_enabled: bool = False,
        scalars: T.Mapping[str, graphql.GraphQLScalarType] | None = None,
    ):
        self.schema = load_schema(schema)
        self.execute = execute
        self.allow_dynamic_queries = allow_dynamic_queries
        self.document_tracking_enabled = document_tracking_enabled
        self.types: SchemaTypes = generate(self.schema, scalars)
        self.document = graphql.DocumentNode(definitions=())
        self._lock = threading.Lock()
        self._names: dict[str, int] = {}

    def _allocate_name(self, namespace: str, name: str | None) -> str:
        base = f"{namespace}__{name or 'anonymous'}"
        with self._lock:
            count = self._names.get(base, 0)
            self._names[base] = count + 1
        return base if count == 0 else f"{base}_{count}"

    def parse(
        self,
        text: str,
        filename: str | None = None,
        lineno: int | None = None,
        *,
        namespace: str | None = None,
        scope: T.Mapping[str, T.Any] | None = None,
    ) -> Definition | Definitions:
        """Compile ``text`` into definitions.

        Fragments compiled earlier are spread by the name they are bound to in
        the calling code (``...PersonFragment`` or ``...person.Fragment``).
        When the text holds a single anonymous definition it is returned
        directly, otherwise the definitions are returned by name.
        """
        frame = caller_frame()
        if filename is None and lineno is None:
            filename, lineno = frame.f_code.co_filename, frame.f_lineno
        if not isinstance(filename, str):
            raise TypeError(
                f"expected filename to be a str, but was {type(filename).__name__}"
            )
        if not isinstance(lineno, int) or isinstance(lineno, bool):
            raise TypeError(f"expected lineno to be an int, but was {type(lineno).__name__}")

        namespace = to_namespace(namespace) if namespace is not None else frame_namespace(frame)
        definitions = DocumentCompiler(
            schema=self.schema,
            types=self.types,
            source=text,
            source_location=SourceLocation(filename, lineno),
            scope=scope if scope is not None else frame_scope(frame),
            allocate_name=lambda name: self._allocate_name(namespace, name),
        ).compile()

        if self.document_tracking_enabled:
            with self._lock:
                self.document = graphql.DocumentNode(
                    definitions=(
                        *self.document.definitions,
                        *(d.definition_node for d in definitions.values()),
                    )
                )

        if None in definitions:
            return definitions[None]
        return Definitions(definitions)

    def create_operation(
        self,
        fragment: FragmentDefinition,
        filename: str | None = None,
        lineno: int | None = None,
        *,
        name: str | None = None,
    ) -> OperationDefinition:
        """Wrap a fragment on a root type in an operation, inferring its variables.

        >>> FooFragment = client.parse('fragment on Mutation { updateFoo(id: $id) }')
        >>> FooMutation = client.create_operation(FooFragment)  # mutation ($id: ID!)
        """
        if not isinstance(fragment, FragmentDefinition):
            raise TypeError(
                f"expected fragment to be a FragmentDefinition, but was {type(fragment).__name__}"
            )
        frame = caller_frame()
        if filename is None and lineno is None:
            filename, lineno = frame.f_code.co_filename, frame.f_lineno

        roots = {
            graphql.OperationType.QUERY: self.schema.query_type,
            graphql.OperationType.MUTATION: self.schema.mutation_type,
            graphql.OperationType.SUBSCRIPTION: self.schema.subscription_type,
        }
        operation = next(
            (op for op, root in roots.items() if root and root.name == fragment.type_condition),
            None,
        )
        if operation is None:
            names = ", ".join(root.name for root in roots.values() if root)
            raise ClientError(f"Fragment must be defined on {names}")

        operation_name = name if name is not None else fragment.name
        document = graphql.DocumentNode(
            definitions=(
                graphql.OperationDefinitionNode(
                    operation=operation,
                    name=graphql.NameNode(value=operation_name) if operation_name else None,
                    variable_definitions=tuple(
                        operation_variables(
                            self.schema, fragment.document, fragment.definition_name
                        )
                    ),
                    directives=(),
                    selection_set=graphql.SelectionSetNode(
                        selections=(
                            graphql.FragmentSpreadNode(
                                name=graphql.NameNode(value=fragment.definition_name),
                                directives=(),
                            ),
                        )
                    ),
                ),
            )
        )
        compiled = self.parse(
            graphql.print_ast(document),
            filename,
            lineno,
            namespace=frame_namespace(frame),
            scope={fragment.definition_name: fragment},
        )
        if isinstance(compiled, Definitions):
            (compiled,) = compiled.values()
        assert isinstance(compiled, OperationDefinition)
        return compiled

    def query(
        self,
        definition: OperationDefinition,
        variables: T.Mapping[str, T.Any] | None = None,
        context: T.Any = None,
    ) -> Response:
        if self.execute is None:
            raise NotConfiguredError("client network execution not configured")
        if not isinstance(definition, OperationDefinition):
            raise TypeError(
                f"expected definition to be an OperationDefinition, but was {type(definition).__name__}"
            )
        if not self.allow_dynamic_queries and definition.name is None:
            raise DynamicQueryError(
                "expected definition to be a named operation, "
                "or allow_dynamic_queries to be enabled"
            )

        start = time.time()
        result = run_executor(
            self.execute,
            document=definition.document,
            operation_name=definition.operation_name,
            variables=stringify_keys(variables or {}),
            context=context if context is not None else {},
        )
        logger.debug(
            "[QUERY] %s took %.2f ms",
            definition.operation_name,
            (time.time() - start) * 1_000,
        )

        errors = normalize_errors(result.get("errors"))
        for error in errors:
            logger.warning(
                "[QUERY] %s error at %s: %s",
                definition.operation_name,
                "/".join(str(s) for s in error.normalized_path),
                error.message,
            )

        return Response(
            data=definition.new(result.get("data"), ErrorCollection(errors, ("data",))),
            errors=ErrorCollection(errors),
            extensions=result.get("extensions"),
            original=result,
        )


__all__ = ["Client", "load_schema", "dump_schema"]
