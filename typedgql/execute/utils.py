import typing as T
from dataclasses import dataclass

from typedgql.gql_models import GQLError, PathSegment

if T.TYPE_CHECKING:
    from typedgql.query_result import QueryResult


def normalize_errors(
    raw_errors: T.Iterable[T.Mapping[str, T.Any] | GQLError] | None,
) -> list[GQLError]:
    return [
        error if isinstance(error, GQLError) else GQLError.model_validate(error)
        for error in raw_errors or ()
    ]


class ErrorCollection:
    """Errors scoped to a path into the response.

    Every collection shares the same underlying error list; ``filter_by_path``
    only extends the path prefix, it never copies or rewrites errors.

    ``details`` groups the errors visible at this path: errors on the path
    itself are keyed by ``None`` and errors on a direct child by the child's
    key. With ``all()``, errors anywhere below the path are included, keyed by
    the first segment beneath it.
    """

    __slots__ = ("_errors", "path", "nested", "_details")

    def __init__(
        self,
        errors: T.Sequence[GQLError] = (),
        path: tuple[PathSegment, ...] = (),
        nested: bool = False,
    ):
        self._errors = errors
        self.path = tuple(path)
        self.nested = nested
        self._details: dict[PathSegment | None, list[GQLError]] | None = None

    def filter_by_path(self, *segments: PathSegment) -> "ErrorCollection":
        return ErrorCollection(self._errors, (*self.path, *segments), self.nested)

    def all(self) -> "ErrorCollection":
        if self.nested:
            return self
        return ErrorCollection(self._errors, self.path, True)

    @property
    def details(self) -> dict[PathSegment | None, list[GQLError]]:
        if self._details is None:
            depth = len(self.path)
            details: dict[PathSegment | None, list[GQLError]] = {}
            for error in self._errors:
                path = error.normalized_path
                if path[:depth] != self.path:
                    continue
                if len(path) == depth:
                    key = None
                elif self.nested or len(path) == depth + 1:
                    key = path[depth]
                else:
                    continue
                details.setdefault(key, []).append(error)
            self._details = details
        return self._details

    @property
    def messages(self) -> dict[PathSegment | None, list[str]]:
        return {
            key: [error.message for error in errors]
            for key, errors in self.details.items()
        }

    def relative_path(self, error: GQLError) -> tuple[PathSegment, ...]:
        return error.normalized_path[len(self.path) :]

    def keys(self) -> list[PathSegment | None]:
        return list(self.details.keys())

    def values(self) -> list[list[str]]:
        return list(self.messages.values())

    def items(self) -> list[tuple[PathSegment | None, list[str]]]:
        return list(self.messages.items())

    def __getitem__(self, key: PathSegment | None) -> list[str]:
        return [error.message for error in self.details.get(key, [])]

    def __contains__(self, key: PathSegment | None) -> bool:
        return bool(self.details.get(key))

    def __iter__(self) -> T.Iterator[GQLError]:
        for errors in self.details.values():
            yield from errors

    def __len__(self) -> int:
        return sum(len(errors) for errors in self.details.values())

    def __bool__(self) -> bool:
        return len(self) > 0

    def __repr__(self) -> str:
        return f"<ErrorCollection path={list(self.path)} messages={self.messages}>"


class List(list):
    """A cast list value carrying the errors scoped to it."""

    def __init__(self, values: T.Iterable[T.Any] = (), errors: ErrorCollection | None = None):
        super().__init__(values)
        self.errors = errors if errors is not None else ErrorCollection()


@dataclass(frozen=True)
class Response:
    data: T.Optional["QueryResult"]
    errors: ErrorCollection
    extensions: dict[str, T.Any] | None
    original: T.Mapping[str, T.Any]


def stringify_keys(v: T.Any) -> T.Any:
    if isinstance(v, T.Mapping):
        return {str(k): stringify_keys(inner_v) for k, inner_v in v.items()}
    if isinstance(v, (list, tuple)):
        return [stringify_keys(inner_v) for inner_v in v]
    return v


__all__ = [
    "normalize_errors",
    "ErrorCollection",
    "List",
    "Response",
    "stringify_keys",
]
