"""Environment-driven settings (`INFLUX_DB_*`) for process entry points."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from influxdb_dal.models.config import ConnectionConfig, ProductType


class InfluxSettings(BaseSettings):
    """
    Connection and runtime settings loaded from environment variables.

    Prefix: INFLUX_DB_

    Examples:
      INFLUX_DB_TYPE=cloud-dedicated
      INFLUX_DB_CLUSTER_ID=abc123
      INFLUX_DB_ACCOUNT_ID=acct-1
      INFLUX_DB_TOKEN=...
      INFLUX_DB_MANAGEMENT_TOKEN=...
    """

    model_config = SettingsConfigDict(
        env_prefix="INFLUX_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Connection
    type: ProductType = Field(
        ProductType.CORE,
        description="Product type: core, enterprise, cloud-dedicated, clustered, cloud-serverless.",
    )
    url: str | None = Field(
        default=None,
        description="Instance URL (region endpoint for Cloud Serverless).",
    )
    token: str | None = Field(
        default=None,
        repr=False,
        description="Database token for query/write (and Serverless management).",
    )
    management_token: str | None = Field(
        default=None,
        repr=False,
        description="Management token for Cloud Dedicated / Clustered.",
    )
    cluster_id: str | None = Field(
        default=None,
        description="Cluster id (Cloud Dedicated / Clustered).",
    )
    account_id: str | None = Field(
        default=None,
        description="Account id (Cloud Dedicated / Clustered).",
    )

    # Runtime
    timeout: float = Field(
        30.0,
        gt=0,
        description="Per-request HTTP timeout in seconds.",
    )
    log_level: str = Field(
        "INFO",
        description="Base log level (DEBUG, INFO, WARNING, ERROR).",
    )
    log_json: bool = Field(
        True,
        description="Render logs as JSON; console output otherwise.",
    )

    @field_validator("type", mode="before")
    @classmethod
    def _normalise_type(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower().replace("_", "-")
        return value

    def to_connection_config(self) -> ConnectionConfig:
        """Immutable connection configuration for the adapter core."""
        return ConnectionConfig(
            type=self.type,
            url=self.url,
            token=self.token,
            management_token=self.management_token,
            cluster_id=self.cluster_id,
            account_id=self.account_id,
        )


@lru_cache(maxsize=1)
def get_settings() -> InfluxSettings:
    """
    Cached singleton settings object, for process entry points only.

    Usage:
        from influxdb_dal.settings import get_settings
        settings = get_settings()
    """
    return InfluxSettings()
