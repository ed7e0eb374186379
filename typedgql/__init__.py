from .client import Client, load_schema, dump_schema
from .errors import (
    ClientError,
    ValidationError,
    DynamicQueryError,
    NotConfiguredError,
    NoFieldError,
    ImplicitlyFetchedFieldError,
    UnfetchedFieldError,
    UndefinedFieldError,
)
from .gql_models import GQLError, GQLLocation
from .gql_ast.models import (
    Definition,
    Definitions,
    OperationDefinition,
    FragmentDefinition,
    SourceLocation,
)
from .execute.executor import Executor, SchemaExecutor
from .execute.utils import ErrorCollection, List, Response
from .query_result import QueryResult, cast
from .schema_types import SchemaTypes, generate

__all__ = [
    "Client",
    "load_schema",
    "dump_schema",
    "ClientError",
    "ValidationError",
    "DynamicQueryError",
    "NotConfiguredError",
    "NoFieldError",
    "ImplicitlyFetchedFieldError",
    "UnfetchedFieldError",
    "UndefinedFieldError",
    "GQLError",
    "GQLLocation",
    "Definition",
    "Definitions",
    "OperationDefinition",
    "FragmentDefinition",
    "SourceLocation",
    "Executor",
    "SchemaExecutor",
    "ErrorCollection",
    "List",
    "Response",
    "QueryResult",
    "cast",
    "SchemaTypes",
    "generate",
]
