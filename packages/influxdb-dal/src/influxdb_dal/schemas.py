"""Explicit measurement schema dispatch (Cloud Serverless only).

The schema API is id-addressed, so every call first resolves the bucket
name (and, where needed, the measurement name) to an id.

Updates are additive: the backend only ever adds columns, and the request
must carry the complete column list (existing plus new). Callers fetch the
current schema with `get_schema` and send the union; this module does not
merge on their behalf.
"""

from collections.abc import Awaitable, Callable, Sequence
from typing import ClassVar, TypeVar

import structlog

from influxdb_dal.connection import InfluxConnection
from influxdb_dal.errors import (
    SCHEMA_HINTS,
    BackendError,
    ConfigurationError,
    InvalidRequestError,
    describe_backend_error,
)
from influxdb_dal.models.config import Plane, ProductType
from influxdb_dal.models.datatypes import SchemaColumn, SchemaInfo
from influxdb_dal.protocols import SchemaBackend
from influxdb_dal.providers.serverless import ServerlessProvider
from influxdb_dal.registry import display_name
from influxdb_dal.transport import HttpTransport

logger = structlog.get_logger(__name__)

T = TypeVar("T")

SCHEMA_SUPPORT = (ProductType.CLOUD_SERVERLESS,)


def _require(value: str, what: str) -> str:
    if not value or not value.strip():
        msg = f"{what} is required"
        raise InvalidRequestError(msg)
    return value


def _require_columns(columns: Sequence[SchemaColumn]) -> list[SchemaColumn]:
    if not columns:
        msg = "At least one column definition is required"
        raise InvalidRequestError(msg)
    return list(columns)


class SchemaManager:
    """List, inspect, create and extend measurement schemas."""

    __slots__: ClassVar[tuple[str]] = ("_connection",)

    _connection: InfluxConnection

    def __init__(self, connection: InfluxConnection) -> None:
        self._connection = connection

    async def list_schemas(self, bucket_name: str) -> list[SchemaInfo]:
        bucket_name = _require(bucket_name, "Bucket name")
        return await self._dispatch(
            f"list schemas for bucket '{bucket_name}'",
            lambda backend, transport: backend.list_schemas(transport, bucket_name),
        )

    async def get_schema(self, bucket_name: str, schema_name: str) -> SchemaInfo:
        bucket_name = _require(bucket_name, "Bucket name")
        schema_name = _require(schema_name, "Schema name")
        return await self._dispatch(
            f"get schema '{schema_name}' from bucket '{bucket_name}'",
            lambda backend, transport: backend.get_schema(transport, bucket_name, schema_name),
        )

    async def create_schema(
        self,
        bucket_name: str,
        schema_name: str,
        columns: Sequence[SchemaColumn],
    ) -> SchemaInfo:
        bucket_name = _require(bucket_name, "Bucket name")
        schema_name = _require(schema_name, "Schema name")
        column_list = _require_columns(columns)
        schema = await self._dispatch(
            f"create schema '{schema_name}' in bucket '{bucket_name}'",
            lambda backend, transport: backend.create_schema(
                transport, bucket_name, schema_name, column_list
            ),
        )
        logger.info("schema_created", bucket=bucket_name, schema=schema_name)
        return schema

    async def update_schema(
        self,
        bucket_name: str,
        schema_name: str,
        columns: Sequence[SchemaColumn],
    ) -> SchemaInfo:
        """Send the complete column list (existing + new) for `schema_name`."""
        bucket_name = _require(bucket_name, "Bucket name")
        schema_name = _require(schema_name, "Schema name")
        column_list = _require_columns(columns)
        schema = await self._dispatch(
            f"update schema '{schema_name}' in bucket '{bucket_name}'",
            lambda backend, transport: backend.update_schema(
                transport, bucket_name, schema_name, column_list
            ),
        )
        logger.info(
            "schema_updated",
            bucket=bucket_name,
            schema=schema_name,
            columns=len(column_list),
        )
        return schema

    async def _dispatch(
        self,
        description: str,
        call: Callable[[SchemaBackend, HttpTransport], Awaitable[T]],
    ) -> T:
        connection = self._connection
        try:
            connection.validate_management_capabilities()
        except ConfigurationError as e:
            if connection.product_type in SCHEMA_SUPPORT:
                raise
            supported = ", ".join(display_name(t) for t in SCHEMA_SUPPORT)
            current = display_name(connection.product_type)
            msg = (
                f"{e.message}. Schema management is not supported for {current} "
                f"({supported} only)"
            )
            raise ConfigurationError(msg, missing=e.missing) from e
        connection.validate_operation_support("schema management", SCHEMA_SUPPORT)
        transport = connection.transport(Plane.MANAGEMENT)
        backend = ServerlessProvider(connection.config)
        try:
            return await call(backend, transport)
        except BackendError as e:
            raise describe_backend_error(e, description, SCHEMA_HINTS) from e
