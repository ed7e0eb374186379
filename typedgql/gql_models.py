import typing as T
from pydantic import BaseModel, ConfigDict

PathSegment = T.Union[str, int]


class GQLLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    line: int
    column: int


class GQLError(BaseModel):
    """A response-level error as reported by the executor.

    The raw ``path`` is kept verbatim; ``normalized_path`` roots it under
    ``"data"`` so it can be matched against paths into the response.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    message: str
    path: tuple[PathSegment, ...] | None = None
    locations: tuple[GQLLocation, ...] | None = None
    extensions: dict[str, T.Any] | None = None

    @property
    def normalized_path(self) -> tuple[PathSegment, ...]:
        # errors without a path belong to the root of the data
        return ("data", *(self.path or ()))


__all__ = ["PathSegment", "GQLLocation", "GQLError"]
