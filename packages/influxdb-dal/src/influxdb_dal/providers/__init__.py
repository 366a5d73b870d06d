"""Per-product strategies.

Each provider module exports a `Provider` class alias for its strategy
class, along with the normalisers it uses for that product's responses.

Registered strategies:
- core: Core and Enterprise (`/api/v3/configure/database`)
- dedicated: Cloud Dedicated and Clustered (account/cluster management API)
- serverless: Cloud Serverless (v2 buckets and measurement schemas)
"""

from collections.abc import Mapping

from influxdb_dal.models.config import ConnectionConfig, ProductType
from influxdb_dal.protocols import DatabaseBackend
from influxdb_dal.providers import core, dedicated, serverless

PROVIDERS: Mapping[ProductType, type[DatabaseBackend]] = {
    ProductType.CORE: core.Provider,
    ProductType.ENTERPRISE: core.Provider,
    ProductType.CLOUD_DEDICATED: dedicated.Provider,
    ProductType.CLUSTERED: dedicated.Provider,
    ProductType.CLOUD_SERVERLESS: serverless.Provider,
}


def provider_for(config: ConnectionConfig) -> DatabaseBackend:
    """Instantiate the database strategy registered for `config.type`."""
    return PROVIDERS[config.type](config)


__all__ = [
    "PROVIDERS",
    "core",
    "dedicated",
    "provider_for",
    "serverless",
]
