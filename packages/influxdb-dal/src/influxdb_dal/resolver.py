"""Derive hosts and credentials from a connection configuration.

Resolution is pure: it never touches the network and never fails. A missing
field simply yields `None`; capability validation reports it.
"""

from influxdb_dal.models.config import ConnectionConfig, Plane, ResolvedEndpoints
from influxdb_dal.registry import (
    CLOUD_DEDICATED_DATA_HOST_TEMPLATE,
    CLOUD_DEDICATED_MANAGEMENT_HOST,
    HostRule,
    traits_for,
)


def _host(rule: HostRule, config: ConnectionConfig) -> str | None:
    match rule:
        case HostRule.DEDICATED_CONSOLE:
            return CLOUD_DEDICATED_MANAGEMENT_HOST
        case HostRule.CLUSTER_SUBDOMAIN if config.cluster_id:
            return CLOUD_DEDICATED_DATA_HOST_TEMPLATE.format(cluster_id=config.cluster_id)
        case _:
            return config.url.rstrip("/") if config.url else None


def resolve(config: ConnectionConfig) -> ResolvedEndpoints:
    """Compute the data-plane and management-plane hosts for `config`."""
    traits = traits_for(config.type)
    return ResolvedEndpoints(
        data_host=_host(traits.data_host, config),
        management_host=_host(traits.management_host, config),
    )


def credential_for(config: ConnectionConfig, plane: Plane) -> str | None:
    """Return the token that authenticates calls on `plane`."""
    field = traits_for(config.type).credential_field(plane)
    return getattr(config, field)
