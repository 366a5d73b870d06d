"""Error types for adapter operations."""

from collections.abc import Mapping
from enum import StrEnum
from typing import final


class ErrorKind(StrEnum):
    """Classification of adapter errors."""

    CONFIGURATION = "configuration"
    UNSUPPORTED = "unsupported"
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    SERVER = "server"
    CONNECTION = "connection"
    HOST_NOT_FOUND = "host_not_found"
    TIMEOUT = "timeout"
    PROVIDER = "provider"


class DalError(Exception):
    """Base error for all adapter operations."""

    __slots__ = ("kind", "message", "source")

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.PROVIDER,
        source: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.source = source

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, kind={self.kind!r})"


@final
class ConfigurationError(DalError):
    """Required connection settings are missing for the requested plane."""

    __slots__ = ("missing",)

    def __init__(self, message: str, missing: tuple[str, ...] = ()) -> None:
        super().__init__(message, kind=ErrorKind.CONFIGURATION)
        self.missing = missing


@final
class UnsupportedOperationError(DalError):
    """The operation is not defined for the active product type."""

    __slots__ = ("operation", "product_type", "supported")

    def __init__(
        self,
        message: str,
        operation: str,
        product_type: str,
        supported: tuple[str, ...] = (),
    ) -> None:
        super().__init__(message, kind=ErrorKind.UNSUPPORTED)
        self.operation = operation
        self.product_type = product_type
        self.supported = supported


@final
class NotFoundError(DalError):
    """A name could not be resolved, or the backend answered 404."""

    __slots__ = ("status",)

    def __init__(
        self,
        message: str,
        status: int | None = None,
        source: BaseException | None = None,
    ) -> None:
        super().__init__(message, kind=ErrorKind.NOT_FOUND, source=source)
        self.status = status


@final
class InvalidRequestError(DalError):
    """Arguments were rejected locally or by the backend (HTTP 400)."""

    __slots__ = ("status",)

    def __init__(
        self,
        message: str,
        status: int | None = None,
        source: BaseException | None = None,
    ) -> None:
        super().__init__(message, kind=ErrorKind.INVALID_INPUT, source=source)
        self.status = status


@final
class BackendError(DalError):
    """The backend answered with a non-success HTTP status."""

    __slots__ = ("server_message", "status")

    def __init__(
        self,
        message: str,
        status: int,
        server_message: str | None = None,
        source: BaseException | None = None,
    ) -> None:
        super().__init__(message, kind=kind_for_status(status), source=source)
        self.status = status
        self.server_message = server_message


@final
class TransportError(DalError):
    """The request never produced an HTTP response."""


_STATUS_KINDS: Mapping[int, ErrorKind] = {
    400: ErrorKind.INVALID_INPUT,
    401: ErrorKind.UNAUTHORIZED,
    403: ErrorKind.FORBIDDEN,
    404: ErrorKind.NOT_FOUND,
    409: ErrorKind.CONFLICT,
    500: ErrorKind.SERVER,
}

DATABASE_HINTS: Mapping[int, str] = {
    400: "Bad Request: Invalid request parameters or malformed request",
    401: "Unauthorized: Check your InfluxDB token permissions",
    403: "Forbidden: Token does not have sufficient permissions for this operation",
    404: "Not Found: Resource does not exist or endpoint not available",
    409: "Conflict: Resource already exists or operation conflicts with current state",
    500: "Internal Server Error: InfluxDB server encountered an error",
}

SCHEMA_HINTS: Mapping[int, str] = {
    **DATABASE_HINTS,
    400: "Bad Request: Invalid schema definition or parameters",
    403: "Forbidden: Token lacks permissions for schema operations",
    404: "Not Found: Schema or bucket does not exist",
    409: "Conflict: Schema already exists or conflicts with bucket settings",
}


def kind_for_status(status: int) -> ErrorKind:
    """Map an HTTP status to an error kind."""
    return _STATUS_KINDS.get(status, ErrorKind.PROVIDER)


def describe_backend_error(
    error: BackendError,
    operation: str,
    hints: Mapping[int, str] = DATABASE_HINTS,
) -> DalError:
    """Rebuild a raw backend error into an actionable, operation-scoped one.

    Known statuses get a hint from `hints`; the backend's own message is
    appended as a labelled suffix. Unknown statuses pass the server message
    through, and a missing message falls back to naming the operation.
    """
    status = error.status
    hint = hints.get(status)
    if hint is not None:
        parts = [f"HTTP {status}", hint]
        if error.server_message:
            parts.append(f"Server message: {error.server_message}")
        message = " - ".join(parts)
    elif error.server_message:
        message = f"HTTP {status} - InfluxDB API error: {error.server_message}"
    else:
        message = f"Failed to {operation}: HTTP {status}"

    if status == 404:
        return NotFoundError(message, status=status, source=error)
    if status == 400:
        return InvalidRequestError(message, status=status, source=error)
    return BackendError(
        message,
        status=status,
        server_message=error.server_message,
        source=error,
    )
