"""Core protocols for connections and per-product strategies."""

from collections.abc import Sequence
from typing import Protocol, Self, TypeVar, runtime_checkable

from influxdb_dal.models.config import ConnectionConfig
from influxdb_dal.models.datatypes import DatabaseInfo, SchemaColumn, SchemaInfo
from influxdb_dal.models.params import DatabaseParams
from influxdb_dal.transport import HttpTransport

Config_contra = TypeVar("Config_contra", contravariant=True)


@runtime_checkable
class Connection(Protocol[Config_contra]):
    """Protocol for connection lifecycle management."""

    @classmethod
    async def connect(cls, config: Config_contra) -> Self:
        """Open the HTTP connection pool for `config`."""
        ...

    async def disconnect(self) -> None:
        """Release pooled connections."""
        ...


@runtime_checkable
class DatabaseBackend(Protocol):
    """Product-specific database lifecycle strategy.

    Implementations build requests for one product family and normalise its
    responses into `DatabaseInfo`. They never validate configuration; the
    dispatch layer does that before handing them a transport.
    """

    def __init__(self, config: ConnectionConfig) -> None: ...

    async def list_databases(self, transport: HttpTransport) -> list[DatabaseInfo]:
        """List user databases."""
        ...

    async def create_database(
        self,
        transport: HttpTransport,
        name: str,
        params: DatabaseParams,
    ) -> DatabaseInfo:
        """Create a database, applying product defaults for unset params."""
        ...

    async def update_database(
        self,
        transport: HttpTransport,
        name: str,
        params: DatabaseParams,
    ) -> DatabaseInfo:
        """Change an existing database's settings."""
        ...

    async def delete_database(self, transport: HttpTransport, name: str) -> None:
        """Delete a database by name."""
        ...


@runtime_checkable
class SchemaBackend(Protocol):
    """Product-specific explicit measurement schema strategy."""

    async def list_schemas(self, transport: HttpTransport, bucket_name: str) -> list[SchemaInfo]:
        ...

    async def get_schema(
        self,
        transport: HttpTransport,
        bucket_name: str,
        schema_name: str,
    ) -> SchemaInfo:
        ...

    async def create_schema(
        self,
        transport: HttpTransport,
        bucket_name: str,
        schema_name: str,
        columns: Sequence[SchemaColumn],
    ) -> SchemaInfo:
        ...

    async def update_schema(
        self,
        transport: HttpTransport,
        bucket_name: str,
        schema_name: str,
        columns: Sequence[SchemaColumn],
    ) -> SchemaInfo:
        ...
