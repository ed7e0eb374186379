import logging
import time
import typing as T

import graphql

logger = logging.getLogger(__name__)


@T.runtime_checkable
class Executor(T.Protocol):
    """Runs a query document and returns the raw ``{"data", "errors"}`` result."""

    def execute(
        self,
        document: graphql.DocumentNode,
        operation_name: str | None = None,
        variables: dict[str, T.Any] | None = None,
        context: T.Any = None,
    ) -> T.Mapping[str, T.Any]:
        ...


ExecuteFunc = T.Callable[..., T.Mapping[str, T.Any]]


class SchemaExecutor:
    """Executes documents against a local graphql-core schema."""

    def __init__(self, schema: graphql.GraphQLSchema, root_value: T.Any = None):
        self.schema = schema
        self.root_value = root_value

    def execute(
        self,
        document: graphql.DocumentNode,
        operation_name: str | None = None,
        variables: dict[str, T.Any] | None = None,
        context: T.Any = None,
    ) -> dict[str, T.Any]:
        start = time.time()
        result = graphql.execute_sync(
            self.schema,
            document,
            root_value=self.root_value,
            context_value=context,
            variable_values=variables,
            operation_name=operation_name,
        )
        logger.debug(
            "[EXECUTE] %s took %.2f ms",
            operation_name,
            (time.time() - start) * 1_000,
        )
        return result.formatted


def run_executor(
    executor: Executor | ExecuteFunc,
    *,
    document: graphql.DocumentNode,
    operation_name: str | None,
    variables: dict[str, T.Any] | None,
    context: T.Any,
) -> T.Mapping[str, T.Any]:
    execute = executor.execute if isinstance(executor, Executor) else executor
    return execute(
        document=document,
        operation_name=operation_name,
        variables=variables,
        context=context,
    )


def is_executor(obj: T.Any) -> bool:
    return isinstance(obj, Executor) or callable(obj)


__all__ = ["Executor", "ExecuteFunc", "SchemaExecutor", "run_executor", "is_executor"]
