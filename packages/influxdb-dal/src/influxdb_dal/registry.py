"""Static facts about each product type.

Every product-dependent rule (auth scheme, host derivation, which fields a
plane needs, which token the control plane uses) is read from here rather
than re-derived with conditionals at each call site.
"""

from collections.abc import Mapping
from enum import StrEnum
from typing import final

from pydantic import BaseModel

from influxdb_dal.models.config import Plane, ProductType

CLOUD_DEDICATED_MANAGEMENT_HOST = "https://console.influxdata.com"
"""Fixed origin of the Cloud Dedicated management API."""

CLOUD_DEDICATED_DATA_HOST_TEMPLATE = "https://{cluster_id}.a.influxdb.io"


class AuthScheme(StrEnum):
    """Prefix used in the `Authorization` header."""

    BEARER = "Bearer"
    TOKEN = "Token"


class HostRule(StrEnum):
    """How a plane's base URL is derived from the configuration."""

    URL = "url"
    """Use `config.url` as-is."""

    CLUSTER_SUBDOMAIN = "cluster_subdomain"
    """`https://{cluster_id}.a.influxdb.io`, falling back to `config.url`."""

    DEDICATED_CONSOLE = "dedicated_console"
    """The fixed Cloud Dedicated console origin."""


@final
class ProductTraits(BaseModel, frozen=True):
    """Everything the adapter needs to know about one product type."""

    display_name: str
    auth_scheme: AuthScheme
    data_host: HostRule
    management_host: HostRule
    data_fields: tuple[str, ...]
    """Config fields that must be set for query/write operations."""

    management_fields: tuple[str, ...]
    """Config fields that must be set for administrative operations."""

    management_credential: str = "token"
    """Config field holding the control-plane token."""

    def required_fields(self, plane: Plane) -> tuple[str, ...]:
        """Fields that `plane` needs."""
        if plane is Plane.MANAGEMENT:
            return self.management_fields
        return self.data_fields

    def credential_field(self, plane: Plane) -> str:
        """Config field holding the token for `plane`."""
        if plane is Plane.MANAGEMENT:
            return self.management_credential
        return "token"


_URL_AND_TOKEN = ("url", "token")
_DEDICATED_MANAGEMENT = ("cluster_id", "account_id", "management_token")

_TRAITS: Mapping[ProductType, ProductTraits] = {
    ProductType.CORE: ProductTraits(
        display_name="Core",
        auth_scheme=AuthScheme.BEARER,
        data_host=HostRule.URL,
        management_host=HostRule.URL,
        data_fields=_URL_AND_TOKEN,
        management_fields=_URL_AND_TOKEN,
    ),
    ProductType.ENTERPRISE: ProductTraits(
        display_name="Enterprise",
        auth_scheme=AuthScheme.BEARER,
        data_host=HostRule.URL,
        management_host=HostRule.URL,
        data_fields=_URL_AND_TOKEN,
        management_fields=_URL_AND_TOKEN,
    ),
    ProductType.CLOUD_DEDICATED: ProductTraits(
        display_name="Cloud Dedicated",
        auth_scheme=AuthScheme.BEARER,
        data_host=HostRule.CLUSTER_SUBDOMAIN,
        management_host=HostRule.DEDICATED_CONSOLE,
        data_fields=("cluster_id", "token"),
        management_fields=_DEDICATED_MANAGEMENT,
        management_credential="management_token",
    ),
    ProductType.CLUSTERED: ProductTraits(
        display_name="Clustered",
        auth_scheme=AuthScheme.BEARER,
        data_host=HostRule.URL,
        management_host=HostRule.URL,
        data_fields=_URL_AND_TOKEN,
        management_fields=_DEDICATED_MANAGEMENT,
        management_credential="management_token",
    ),
    ProductType.CLOUD_SERVERLESS: ProductTraits(
        display_name="Cloud Serverless",
        auth_scheme=AuthScheme.TOKEN,
        data_host=HostRule.URL,
        management_host=HostRule.URL,
        data_fields=_URL_AND_TOKEN,
        management_fields=_URL_AND_TOKEN,
    ),
}


def traits_for(product_type: ProductType) -> ProductTraits:
    """Look up the traits of `product_type`."""
    return _TRAITS[product_type]


def display_name(product_type: ProductType) -> str:
    """Human-readable product name used in diagnostics."""
    return _TRAITS[product_type].display_name
