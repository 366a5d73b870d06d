"""Parameter types for database operations.

Params carry what the caller asked for. Unset fields stay `None` so each
backend can apply its own defaults (or refuse an empty update).
"""

from pydantic import BaseModel, Field


class DatabaseParams(BaseModel, frozen=True):
    """Optional settings for creating or updating a database."""

    max_tables: int | None = Field(default=None, ge=1)
    """Table limit (Cloud Dedicated / Clustered). Defaults to 500 on create."""

    max_columns_per_table: int | None = Field(default=None, ge=1)
    """Column-per-table limit (Cloud Dedicated / Clustered). Defaults to 200 on create."""

    retention_period: int | None = Field(default=None, ge=0)
    """Retention in nanoseconds. `0` means infinite where the backend supports it."""

    description: str | None = None
    """Bucket description (Cloud Serverless)."""

    new_name: str | None = None
    """Rename the bucket on update (Cloud Serverless)."""
