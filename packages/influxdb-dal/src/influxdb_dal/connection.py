"""Connection to one InfluxDB deployment.

Holds the immutable configuration and the shared HTTP pool, hands out
plane-specific transports, and answers the diagnostic calls (connection
info, ping, health).
"""

from collections.abc import Iterable
from typing import ClassVar, Self

import httpx
import structlog
from pydantic import ValidationError

from influxdb_dal import capabilities
from influxdb_dal.errors import ConfigurationError, DalError
from influxdb_dal.models.config import ConnectionConfig, Plane, ProductType, ResolvedEndpoints
from influxdb_dal.models.datatypes import ConnectionInfo, HealthStatus, PingResult
from influxdb_dal.registry import display_name, traits_for
from influxdb_dal.resolver import credential_for, resolve
from influxdb_dal.transport import DEFAULT_TIMEOUT, HttpTransport

logger = structlog.get_logger(__name__)


class InfluxConnection:
    """Implements Connection[ConnectionConfig]."""

    __slots__: ClassVar[tuple[str, str, str]] = ("_client", "_config", "_timeout")

    _client: httpx.AsyncClient
    _config: ConnectionConfig
    _timeout: float

    def __init__(
        self,
        client: httpx.AsyncClient,
        config: ConnectionConfig,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._client = client
        self._config = config
        self._timeout = timeout

    @classmethod
    async def connect(
        cls,
        config: ConnectionConfig,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> Self:
        """Create the shared HTTP pool. No request is sent."""
        client = httpx.AsyncClient(timeout=timeout, transport=transport)
        logger.info(
            "influx_connection_opened",
            product=config.type.value,
            data_capable=capabilities.has_data_capabilities(config),
            management_capable=capabilities.has_management_capabilities(config),
        )
        return cls(client, config, timeout)

    async def disconnect(self) -> None:
        """Close the HTTP pool."""
        await self._client.aclose()

    @property
    def config(self) -> ConnectionConfig:
        return self._config

    @property
    def product_type(self) -> ProductType:
        return self._config.type

    def endpoints(self) -> ResolvedEndpoints:
        """Resolve hosts from the current configuration."""
        return resolve(self._config)

    def has_data_capabilities(self) -> bool:
        return capabilities.has_data_capabilities(self._config)

    def has_management_capabilities(self) -> bool:
        return capabilities.has_management_capabilities(self._config)

    def validate_data_capabilities(self) -> None:
        capabilities.validate_data_capabilities(self._config)

    def validate_management_capabilities(self) -> None:
        capabilities.validate_management_capabilities(self._config)

    def validate_operation_support(
        self,
        operation: str,
        supported_types: Iterable[ProductType],
    ) -> None:
        capabilities.validate_operation_support(operation, supported_types, self._config.type)

    def transport(self, plane: Plane = Plane.DATA) -> HttpTransport:
        """Bind a transport to the host and credential serving `plane`."""
        host = self.endpoints().host_for(plane)
        if not host:
            msg = f"No {plane.value} host configured for {display_name(self._config.type)}"
            raise ConfigurationError(msg, missing=("url",))
        return HttpTransport(
            self._client,
            host,
            credential_for(self._config, plane),
            traits_for(self._config.type).auth_scheme,
            timeout=self._timeout,
        )

    def connection_info(self) -> ConnectionInfo:
        """Describe the configuration without exposing credentials."""
        return ConnectionInfo(
            type=self._config.type.value,
            url=self.endpoints().data_host or "",
            has_token=bool(self._config.token),
            has_data_capabilities=self.has_data_capabilities(),
            has_management_capabilities=self.has_management_capabilities(),
        )

    async def ping(self) -> PingResult:
        """Probe `/ping` on the data host.

        The result object carries failures as `ok=False` plus a message.
        """
        if not self.endpoints().data_host:
            return PingResult(ok=False, message="No data host configured")
        try:
            response = await self.transport(Plane.DATA).send("GET", "/ping")
        except DalError as e:
            logger.warning("influx_ping_failed", error=e.message)
            return PingResult(ok=False, message=e.message)

        if not response.is_success:
            return PingResult(ok=False, message=f"Ping failed with status {response.status_code}")

        version = response.headers.get("x-influxdb-version") or None
        build = response.headers.get("x-influxdb-build") or None
        if version and not build:
            build = "Other"
        return PingResult(ok=True, version=version, build=build)

    async def health(self) -> HealthStatus:
        """Query `/health` on the data host; any failure reports `fail`."""
        if not self.endpoints().data_host:
            return HealthStatus(status="fail", message="No data host configured")
        try:
            response = await self.transport(Plane.DATA).send("GET", "/health")
        except DalError as e:
            logger.warning("influx_health_failed", error=e.message, kind=str(e.kind))
            return HealthStatus(status="fail", message=e.message)

        if not response.is_success:
            return HealthStatus(status="fail", message=f"HTTP {response.status_code}")
        try:
            body = response.json()
        except ValueError:
            return HealthStatus(status="pass")
        if not isinstance(body, dict):
            return HealthStatus(status="pass")
        try:
            return HealthStatus(
                status=str(body.get("status", "pass")),
                checks=body.get("checks") or [],
                version=body.get("version"),
                message=body.get("message"),
            )
        except ValidationError as e:
            logger.warning("influx_health_unreadable", errors=e.error_count())
            return HealthStatus(status="fail", message="Unexpected /health response structure")

