"""Uniform database management over InfluxDB Core, Enterprise, Cloud Dedicated, Clustered and Cloud Serverless."""

from influxdb_dal.capabilities import (
    CapabilityResult,
    has_data_capabilities,
    has_management_capabilities,
    validate_operation_support,
)
from influxdb_dal.connection import InfluxConnection
from influxdb_dal.databases import DatabaseManager
from influxdb_dal.errors import (
    BackendError,
    ConfigurationError,
    DalError,
    ErrorKind,
    InvalidRequestError,
    NotFoundError,
    TransportError,
    UnsupportedOperationError,
)
from influxdb_dal.models import (
    ColumnDataType,
    ColumnType,
    ConnectionConfig,
    DatabaseInfo,
    DatabaseParams,
    ProductType,
    ResolvedEndpoints,
    SchemaColumn,
    SchemaInfo,
)
from influxdb_dal.resolver import resolve
from influxdb_dal.schemas import SchemaManager
from influxdb_dal.service import InfluxService

__all__ = [
    "BackendError",
    "CapabilityResult",
    "ColumnDataType",
    "ColumnType",
    "ConfigurationError",
    "ConnectionConfig",
    "DalError",
    "DatabaseInfo",
    "DatabaseManager",
    "DatabaseParams",
    "ErrorKind",
    "InfluxConnection",
    "InfluxService",
    "InvalidRequestError",
    "NotFoundError",
    "ProductType",
    "ResolvedEndpoints",
    "SchemaColumn",
    "SchemaInfo",
    "SchemaManager",
    "TransportError",
    "UnsupportedOperationError",
    "has_data_capabilities",
    "has_management_capabilities",
    "resolve",
    "validate_operation_support",
]
