"""Canonical entities returned by the adapter.

These are rebuilt from a backend response on every call:
- `DatabaseInfo` for databases (buckets on Cloud Serverless)
- `SchemaInfo` and `SchemaColumn` for explicit measurement schemas
- `ConnectionInfo`, `PingResult`, `HealthStatus` for diagnostics
"""

from enum import StrEnum

from pydantic import BaseModel, Field
from typing_extensions import TypeAliasType

# JSON-compatible value type for passthrough payloads.
JsonValue = TypeAliasType("JsonValue", str | int | float | bool | None | list["JsonValue"] | dict[str, "JsonValue"])

NANOSECONDS_PER_SECOND = 1_000_000_000

DEFAULT_BUCKET_RETENTION_SECONDS = 30 * 24 * 60 * 60
"""Retention applied to Cloud Serverless buckets when none is given (30 days)."""


def seconds_to_nanoseconds(seconds: int) -> int:
    """Convert a bucket's `everySeconds` into canonical nanoseconds."""
    return seconds * NANOSECONDS_PER_SECOND


def nanoseconds_to_seconds(nanoseconds: int) -> int:
    """Convert canonical nanoseconds into whole seconds (floored)."""
    return nanoseconds // NANOSECONDS_PER_SECOND


class DatabaseInfo(BaseModel, frozen=True):
    """A database, whatever the backend calls it."""

    name: str
    """Database (or bucket) name."""

    max_tables: int | None = None
    """Table limit (Cloud Dedicated / Clustered)."""

    max_columns_per_table: int | None = None
    """Column-per-table limit (Cloud Dedicated / Clustered)."""

    retention_period: int | None = None
    """Retention in nanoseconds, whatever unit the backend uses natively."""

    bucket_id: str | None = None
    """Bucket id (Cloud Serverless)."""

    organization_id: str | None = None
    """Owning organization id (Cloud Serverless)."""

    storage_type: str | None = None
    description: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    retention_policy: str | None = None


class ColumnType(StrEnum):
    """Role of a column in a measurement schema."""

    TAG = "tag"
    FIELD = "field"
    TIMESTAMP = "timestamp"


class ColumnDataType(StrEnum):
    """Value type of a schema column."""

    STRING = "string"
    FLOAT = "float"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    TIME = "time"


class SchemaColumn(BaseModel, frozen=True):
    """One column of an explicit measurement schema."""

    name: str
    type: ColumnType
    data_type: ColumnDataType | None = None

    def to_payload(self) -> dict[str, str]:
        """Render for the schema API; `dataType` is only sent for fields."""
        column = {"name": self.name, "type": self.type.value}
        if self.type is ColumnType.FIELD and self.data_type is not None:
            column["dataType"] = self.data_type.value
        return column


class SchemaInfo(BaseModel, frozen=True):
    """An explicit measurement schema inside a Cloud Serverless bucket."""

    name: str
    """Measurement name."""

    bucket_id: str
    bucket_name: str
    columns: list[SchemaColumn] | None = None
    created_at: str | None = None
    updated_at: str | None = None


class ConnectionInfo(BaseModel, frozen=True):
    """Summary of the active configuration, without secrets."""

    type: str
    url: str
    """Resolved data host, or an empty string if none can be derived."""

    has_token: bool
    has_data_capabilities: bool
    has_management_capabilities: bool


class PingResult(BaseModel, frozen=True):
    """Outcome of `GET /ping` against the data host."""

    ok: bool
    version: str | None = None
    build: str | None = None
    message: str | None = None


class HealthStatus(BaseModel, frozen=True):
    """Outcome of `GET /health` against the data host."""

    status: str
    """`pass` or `fail` (as reported by the backend when it answers JSON)."""

    checks: list[JsonValue] = Field(default_factory=list)
    version: str | None = None
    message: str | None = None
