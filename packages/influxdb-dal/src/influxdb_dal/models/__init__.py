"""Pydantic models shared by every backend."""

from influxdb_dal.models.config import (
    ConnectionConfig,
    Plane,
    ProductType,
    ResolvedEndpoints,
)
from influxdb_dal.models.datatypes import (
    DEFAULT_BUCKET_RETENTION_SECONDS,
    ColumnDataType,
    ColumnType,
    ConnectionInfo,
    DatabaseInfo,
    HealthStatus,
    JsonValue,
    PingResult,
    SchemaColumn,
    SchemaInfo,
    nanoseconds_to_seconds,
    seconds_to_nanoseconds,
)
from influxdb_dal.models.params import DatabaseParams

__all__ = [
    # Configuration
    "ConnectionConfig",
    "Plane",
    "ProductType",
    "ResolvedEndpoints",
    # Params
    "DatabaseParams",
    # Canonical entities
    "ColumnDataType",
    "ColumnType",
    "ConnectionInfo",
    "DatabaseInfo",
    "HealthStatus",
    "JsonValue",
    "PingResult",
    "SchemaColumn",
    "SchemaInfo",
    # Retention units
    "DEFAULT_BUCKET_RETENTION_SECONDS",
    "nanoseconds_to_seconds",
    "seconds_to_nanoseconds",
]
