class ClientError(Exception):
    """Base exception for all typedgql errors."""


class ValidationError(ClientError):
    """Raised at compile time when a query does not conform to the schema."""

    def __init__(
        self, message: str, *, filename: str | None = None, lineno: int | None = None
    ):
        super().__init__(message)
        self.message = message
        self.filename = filename
        self.lineno = lineno

    @property
    def source_location(self) -> tuple[str | None, int | None]:
        return self.filename, self.lineno

    def __str__(self) -> str:
        if self.filename is None:
            return self.message
        return f"{self.filename}:{self.lineno}: {self.message}"


class DynamicQueryError(ClientError):
    pass


class NotConfiguredError(ClientError, NotImplementedError):
    pass


class NoFieldError(ClientError, AttributeError):
    """A field was read that the selection did not declare."""

    def __init__(self, message: str, *, field_name: str, type_name: str):
        super().__init__(message)
        self.field_name = field_name
        self.type_name = type_name


class ImplicitlyFetchedFieldError(NoFieldError):
    pass


class UnfetchedFieldError(NoFieldError):
    pass


class UndefinedFieldError(NoFieldError):
    pass


__all__ = [
    "ClientError",
    "ValidationError",
    "DynamicQueryError",
    "NotConfiguredError",
    "NoFieldError",
    "ImplicitlyFetchedFieldError",
    "UnfetchedFieldError",
    "UndefinedFieldError",
]
