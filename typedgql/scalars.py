"""Coercion for custom scalars of remote schemas.

A schema built from an introspection result knows its custom scalars only by
name, so response values stay the raw JSON strings. Passing these scalars to
``Client(scalars=...)`` makes views return Python values instead.
"""
import typing as T
from uuid import UUID
import json
from datetime import datetime, date, time
from graphql import GraphQLScalarType, ValueNode
from graphql.utilities import value_from_ast_untyped
from pydantic_core import to_jsonable_python

IsoType = T.TypeVar("IsoType", datetime, date, time)


def _from_iso(cls: type[IsoType], value: T.Any) -> IsoType:
    if isinstance(value, cls):
        return value
    if isinstance(value, str):
        # python < 3.11 does not accept the Z suffix
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return cls.fromisoformat(value)
    raise TypeError(f"expected an ISO formatted string, got {value!r}")


def serialize_iso(value: datetime | date | time) -> str:
    return value.isoformat()


def parse_datetime_value(value: T.Any) -> datetime:
    return _from_iso(datetime, value)


def parse_date_value(value: T.Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    return _from_iso(date, value)


def parse_time_value(value: T.Any) -> time:
    return _from_iso(time, value)


def serialize_uuid(value: UUID) -> str:
    return str(value)


def parse_uuid_value(value: T.Any) -> UUID:
    if isinstance(value, UUID):
        return value
    return UUID(str(value))


def serialize_json(value: T.Any) -> str:
    return json.dumps(to_jsonable_python(value))


def parse_json_value(value: T.Any) -> T.Any:
    # servers differ on whether JSON values arrive encoded or inline
    if isinstance(value, (str, bytes, bytearray)):
        return json.loads(value)
    return value


def literal_parser(
    parse_value: T.Callable[[T.Any], T.Any]
) -> T.Callable[[ValueNode, T.Optional[T.Dict[str, T.Any]]], T.Any]:
    def parse_literal(
        value_node: ValueNode, variables: T.Optional[T.Dict[str, T.Any]] = None
    ) -> T.Any:
        return parse_value(value_from_ast_untyped(value_node, variables))

    return parse_literal


DateTimeScalar = GraphQLScalarType(
    name="DateTime",
    description="Datetime given as ISO.",
    serialize=serialize_iso,
    parse_value=parse_datetime_value,
    parse_literal=literal_parser(parse_datetime_value),
)
DateScalar = GraphQLScalarType(
    name="Date",
    description="Date given as ISO.",
    serialize=serialize_iso,
    parse_value=parse_date_value,
    parse_literal=literal_parser(parse_date_value),
)
TimeScalar = GraphQLScalarType(
    name="Time",
    description="Time given as ISO.",
    serialize=serialize_iso,
    parse_value=parse_time_value,
    parse_literal=literal_parser(parse_time_value),
)
UUIDScalar = GraphQLScalarType(
    name="UUID",
    description="UUID given as String.",
    serialize=serialize_uuid,
    parse_value=parse_uuid_value,
    parse_literal=literal_parser(parse_uuid_value),
)
JSONScalar = GraphQLScalarType(
    name="JSON",
    description="JSON.",
    serialize=serialize_json,
    parse_value=parse_json_value,
    parse_literal=literal_parser(parse_json_value),
)

SCALARS: dict[str, GraphQLScalarType] = {
    s.name: s for s in (DateTimeScalar, DateScalar, TimeScalar, UUIDScalar, JSONScalar)
}

__all__ = [
    "UUIDScalar",
    "DateScalar",
    "TimeScalar",
    "DateTimeScalar",
    "JSONScalar",
    "SCALARS",
]
