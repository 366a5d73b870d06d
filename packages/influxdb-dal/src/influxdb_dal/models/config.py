"""Connection configuration types.

`ConnectionConfig` is set once and never mutated; every host, credential and
capability decision is derived from it on demand.
"""

from enum import StrEnum

from pydantic import BaseModel, Field, field_validator


class ProductType(StrEnum):
    """Backend variants the adapter can talk to."""

    CORE = "core"
    """Open-source InfluxDB 3 Core."""

    ENTERPRISE = "enterprise"
    """InfluxDB 3 Enterprise."""

    CLOUD_DEDICATED = "cloud-dedicated"
    """InfluxDB Cloud Dedicated (managed cluster, separate management API)."""

    CLUSTERED = "clustered"
    """Self-managed InfluxDB Clustered."""

    CLOUD_SERVERLESS = "cloud-serverless"
    """InfluxDB Cloud Serverless (v2-style buckets and orgs)."""


class Plane(StrEnum):
    """Which host/credential pair a call goes through."""

    DATA = "data"
    MANAGEMENT = "management"


class ConnectionConfig(BaseModel, frozen=True):
    """Raw connection settings for one backend.

    Which fields are required depends on `type` and on the plane being used;
    nothing here is globally mandatory except the product type.
    """

    type: ProductType = ProductType.CORE
    """Selected backend variant."""

    url: str | None = None
    """Base URL of the instance (data and management host for most types)."""

    token: str | None = Field(default=None, repr=False)
    """Database token used for the data plane."""

    management_token: str | None = Field(default=None, repr=False)
    """Management token (Cloud Dedicated / Clustered control plane)."""

    cluster_id: str | None = None
    """Cluster identifier (Cloud Dedicated / Clustered)."""

    account_id: str | None = None
    """Account identifier (Cloud Dedicated / Clustered)."""

    @field_validator("url", "token", "management_token", "cluster_id", "account_id")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None


class ResolvedEndpoints(BaseModel, frozen=True):
    """Base URLs derived from a `ConnectionConfig`; never stored."""

    data_host: str | None = None
    """Host for query and write operations."""

    management_host: str | None = None
    """Host for administrative operations."""

    def host_for(self, plane: Plane) -> str | None:
        """Return the host serving `plane`."""
        if plane is Plane.MANAGEMENT:
            return self.management_host
        return self.data_host
