import typing as T

from typedgql.errors import UnfetchedFieldError
from typedgql.execute.utils import ErrorCollection, normalize_errors
from typedgql.gql_models import GQLError

if T.TYPE_CHECKING:
    from typedgql.gql_ast.models import Definition
    from typedgql.schema_types import ObjectType

_MISSING = object()


class QueryResult:
    """A read-only view over a JSON object, limited to the fields its unit declares.

    Fields are read as attributes (``view.first_name``) or by response key
    (``view["firstName"]``). Values are cast on first access and cached for
    the life of the view. Reading a field the selection did not declare raises
    one of the ``NoFieldError`` subclasses.
    """

    __slots__ = ("_unit", "_data", "_errors", "_cache")

    def __init__(
        self,
        unit: "ObjectType",
        data: T.Mapping[str, T.Any],
        errors: ErrorCollection | None = None,
    ):
        object.__setattr__(self, "_unit", unit)
        object.__setattr__(self, "_data", data)
        object.__setattr__(self, "_errors", errors if errors is not None else ErrorCollection())
        object.__setattr__(self, "_cache", {})

    def _get(self, key: str) -> T.Any:
        cached = self._cache.get(key, _MISSING)
        if cached is not _MISSING:
            return cached
        if key not in self._data and self._unit.source_node is None:
            raise UnfetchedFieldError(
                f"unfetched field `{key}' on {self._unit.type_name} type.",
                field_name=key,
                type_name=self._unit.type_name,
            )
        value = self._unit.fields[key].cast(
            self._data.get(key), self._errors.filter_by_path(key)
        )
        self._cache[key] = value
        return value

    def __getattr__(self, name: str) -> T.Any:
        if name.startswith("__") and name.endswith("__"):
            raise AttributeError(name)
        key = self._unit.accessor(name)
        if key is None:
            raise self._unit.no_field_error(name, self._data)
        return self._get(key)

    def __getitem__(self, key: str) -> T.Any:
        if key not in self._unit.fields:
            raise self._unit.no_field_error(key, self._data)
        return self._get(key)

    def __setattr__(self, name: str, value: T.Any) -> None:
        raise AttributeError(f"{type(self).__name__} is read-only")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is read-only")

    def _present(self, name: str) -> bool:
        key = self._unit.accessor(name)
        if key is None:
            raise self._unit.no_field_error(name, self._data)
        return bool(self._data.get(key))

    @property
    def _fields(self) -> tuple[str, ...]:
        return tuple(self._unit.fields)

    @property
    def _typename(self) -> str:
        return self._data.get("__typename") or self._unit.type_name

    def _type_of(self, *type_names: str) -> bool:
        return any(self._unit.is_a(name) for name in type_names)

    def _to_dict(self) -> T.Mapping[str, T.Any]:
        return self._data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QueryResult):
            return NotImplemented
        return other._unit == self._unit and other._data == self._data

    __hash__ = None  # type: ignore[assignment]

    def __dir__(self) -> list[str]:
        names = set(super().__dir__())
        names.update(self._unit.accessor_names())
        return sorted(names)

    def __repr__(self) -> str:
        parts = []
        for key in self._unit.fields:
            value = self._data.get(key)
            if isinstance(value, (dict, list)):
                parts.append(f"{key}=...")
            else:
                parts.append(f"{key}={value!r}")
        label = self._unit.name or self._unit.type_name
        return f"<{' '.join([label, *parts])}>"


def cast(
    data: T.Any,
    definition: "Definition",
    errors: T.Iterable[T.Mapping[str, T.Any] | GQLError] | None = None,
) -> T.Any:
    """Cast a raw ``data`` value returned for ``definition``."""
    collection = ErrorCollection(normalize_errors(errors), ("data",))
    return definition.new(data, collection)


__all__ = ["QueryResult", "cast"]
