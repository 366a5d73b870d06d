"""Capability checks over a connection configuration.

All checks are synchronous and side-effect free apart from raising, and are
meant to run before any request is sent so that a misconfigured deployment
fails with a precise message instead of a transport error.
"""

from collections.abc import Iterable

from pydantic import BaseModel

from influxdb_dal.errors import ConfigurationError, UnsupportedOperationError
from influxdb_dal.models.config import ConnectionConfig, Plane, ProductType
from influxdb_dal.registry import display_name, traits_for

ENV_PREFIX = "INFLUX_DB_"


class CapabilityResult(BaseModel, frozen=True):
    """Whether a plane is usable, and which fields are missing if not."""

    plane: Plane
    missing: tuple[str, ...] = ()

    @property
    def capable(self) -> bool:
        return not self.missing


def check_capabilities(config: ConnectionConfig, plane: Plane) -> CapabilityResult:
    """Report which fields `plane` needs but `config` does not set."""
    required = traits_for(config.type).required_fields(plane)
    missing = tuple(field for field in required if not getattr(config, field))
    return CapabilityResult(plane=plane, missing=missing)


def has_data_capabilities(config: ConnectionConfig) -> bool:
    """Can `config` perform query/write operations?"""
    return check_capabilities(config, Plane.DATA).capable


def has_management_capabilities(config: ConnectionConfig) -> bool:
    """Can `config` perform administrative operations?"""
    return check_capabilities(config, Plane.MANAGEMENT).capable


def validate_capabilities(config: ConnectionConfig, plane: Plane) -> None:
    """Raise `ConfigurationError` naming every field `plane` is missing."""
    result = check_capabilities(config, plane)
    if result.capable:
        return

    env_vars = ", ".join(f"{ENV_PREFIX}{field.upper()}" for field in result.missing)
    msg = (
        f"{display_name(config.type)} {plane.value} operations require: "
        f"{', '.join(result.missing)} (set {env_vars})"
    )
    raise ConfigurationError(msg, missing=result.missing)


def validate_data_capabilities(config: ConnectionConfig) -> None:
    validate_capabilities(config, Plane.DATA)


def validate_management_capabilities(config: ConnectionConfig) -> None:
    validate_capabilities(config, Plane.MANAGEMENT)


def validate_operation_support(
    operation: str,
    supported_types: Iterable[ProductType],
    current_type: ProductType,
) -> None:
    """Raise unless `current_type` is in the operation's allow-list."""
    supported = tuple(supported_types)
    if current_type in supported:
        return

    supported_names = tuple(display_name(t) for t in supported)
    current_name = display_name(current_type)
    msg = (
        f"Operation '{operation}' is not supported for {current_name}. "
        f"Supported types: {', '.join(supported_names)}"
    )
    raise UnsupportedOperationError(
        msg,
        operation=operation,
        product_type=current_name,
        supported=supported_names,
    )
