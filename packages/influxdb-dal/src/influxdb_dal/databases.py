"""Database lifecycle dispatch.

Every call runs the same pipeline: check management capabilities, check the
operation's allow-list, bind a management-plane transport, run the
product strategy, and hand back canonical `DatabaseInfo`. Raw HTTP
failures are rewritten into operation-scoped messages on the way out.
"""

from collections.abc import Awaitable, Callable
from typing import ClassVar, TypeVar

import structlog

from influxdb_dal.connection import InfluxConnection
from influxdb_dal.errors import (
    DATABASE_HINTS,
    BackendError,
    InvalidRequestError,
    describe_backend_error,
)
from influxdb_dal.models.config import Plane, ProductType
from influxdb_dal.models.datatypes import DatabaseInfo
from influxdb_dal.models.params import DatabaseParams
from influxdb_dal.protocols import DatabaseBackend
from influxdb_dal.providers import provider_for
from influxdb_dal.transport import HttpTransport

logger = structlog.get_logger(__name__)

T = TypeVar("T")

ALL_PRODUCTS = tuple(ProductType)

UPDATE_DATABASE_SUPPORT = (
    ProductType.CLOUD_DEDICATED,
    ProductType.CLOUD_SERVERLESS,
    ProductType.CLUSTERED,
)


def _require_name(name: str) -> str:
    if not name or not name.strip():
        msg = "Database name is required"
        raise InvalidRequestError(msg)
    return name


class DatabaseManager:
    """List, create, update and delete databases on any supported product."""

    __slots__: ClassVar[tuple[str]] = ("_connection",)

    _connection: InfluxConnection

    def __init__(self, connection: InfluxConnection) -> None:
        self._connection = connection

    async def list_databases(self) -> list[DatabaseInfo]:
        return await self._dispatch(
            "list databases",
            ALL_PRODUCTS,
            lambda backend, transport: backend.list_databases(transport),
        )

    async def create_database(
        self,
        name: str,
        params: DatabaseParams | None = None,
    ) -> DatabaseInfo:
        """Create `name`; unset params take the product's defaults."""
        name = _require_name(name)
        params = params or DatabaseParams()
        database = await self._dispatch(
            f"create database '{name}'",
            ALL_PRODUCTS,
            lambda backend, transport: backend.create_database(transport, name, params),
        )
        logger.info("database_created", database=name, product=self._connection.product_type.value)
        return database

    async def update_database(self, name: str, params: DatabaseParams) -> DatabaseInfo:
        """Change limits or retention. Not available on Core / Enterprise."""
        name = _require_name(name)
        database = await self._dispatch(
            f"update database '{name}'",
            UPDATE_DATABASE_SUPPORT,
            lambda backend, transport: backend.update_database(transport, name, params),
            operation="update_database",
        )
        logger.info("database_updated", database=name, product=self._connection.product_type.value)
        return database

    async def delete_database(self, name: str) -> None:
        name = _require_name(name)
        await self._dispatch(
            f"delete database '{name}'",
            ALL_PRODUCTS,
            lambda backend, transport: backend.delete_database(transport, name),
        )
        logger.info("database_deleted", database=name, product=self._connection.product_type.value)

    async def _dispatch(
        self,
        description: str,
        supported: tuple[ProductType, ...],
        call: Callable[[DatabaseBackend, HttpTransport], Awaitable[T]],
        operation: str | None = None,
    ) -> T:
        connection = self._connection
        connection.validate_management_capabilities()
        connection.validate_operation_support(operation or description, supported)
        transport = connection.transport(Plane.MANAGEMENT)
        backend = provider_for(connection.config)
        try:
            return await call(backend, transport)
        except BackendError as e:
            raise describe_backend_error(e, description, DATABASE_HINTS) from e
