"""Single entry point bundling the connection with both dispatchers."""

from types import TracebackType
from typing import ClassVar, Self

import httpx

from influxdb_dal.connection import InfluxConnection
from influxdb_dal.databases import DatabaseManager
from influxdb_dal.models.config import ConnectionConfig
from influxdb_dal.schemas import SchemaManager
from influxdb_dal.settings import InfluxSettings
from influxdb_dal.transport import DEFAULT_TIMEOUT


class InfluxService:
    """What a tool layer talks to.

    Usage:
        async with await InfluxService.connect(config) as influx:
            databases = await influx.databases.list_databases()
    """

    __slots__: ClassVar[tuple[str, str, str]] = ("connection", "databases", "schemas")

    connection: InfluxConnection
    databases: DatabaseManager
    schemas: SchemaManager

    def __init__(self, connection: InfluxConnection) -> None:
        self.connection = connection
        self.databases = DatabaseManager(connection)
        self.schemas = SchemaManager(connection)

    @classmethod
    async def connect(
        cls,
        config: ConnectionConfig,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> Self:
        connection = await InfluxConnection.connect(config, timeout=timeout, transport=transport)
        return cls(connection)

    @classmethod
    async def from_settings(
        cls,
        settings: InfluxSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> Self:
        """Connect with the configuration and timeout held by `settings`."""
        return await cls.connect(
            settings.to_connection_config(),
            timeout=settings.timeout,
            transport=transport,
        )

    async def disconnect(self) -> None:
        await self.connection.disconnect()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.disconnect()
