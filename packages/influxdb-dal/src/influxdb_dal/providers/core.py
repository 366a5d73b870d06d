"""InfluxDB 3 Core / Enterprise provider (`/api/v3/configure`)."""

from typing import ClassVar

from influxdb_dal.envelope import envelope_paths, extract_array
from influxdb_dal.errors import UnsupportedOperationError
from influxdb_dal.models.config import ConnectionConfig
from influxdb_dal.models.datatypes import DatabaseInfo, JsonValue
from influxdb_dal.models.params import DatabaseParams
from influxdb_dal.registry import display_name
from influxdb_dal.transport import HttpTransport

DATABASE_PATH = "/api/v3/configure/database"


def database_from_item(item: JsonValue) -> DatabaseInfo:
    """Normalise one entry of the database listing.

    Entries come back as bare names, as `{"iox::database": name}` rows, or
    as `{"name": name}` objects depending on the server version.
    """
    if isinstance(item, str):
        return DatabaseInfo(name=item)
    if isinstance(item, dict):
        name = item.get("iox::database") or item.get("name")
        if name:
            return DatabaseInfo(name=str(name))
    return DatabaseInfo(name=str(item))


class CoreProvider:
    """Database lifecycle for Core and Enterprise.

    Implements DatabaseBackend.
    """

    __slots__: ClassVar[tuple[str]] = ("_config",)

    _config: ConnectionConfig

    def __init__(self, config: ConnectionConfig) -> None:
        self._config = config

    async def list_databases(self, transport: HttpTransport) -> list[DatabaseInfo]:
        response = await transport.get(DATABASE_PATH, params={"format": "json"})
        items = extract_array(response, envelope_paths("databases"), what="databases")
        return [database_from_item(item) for item in items]

    async def create_database(
        self,
        transport: HttpTransport,
        name: str,
        params: DatabaseParams,
    ) -> DatabaseInfo:
        _ = await transport.post(DATABASE_PATH, {"db": name})
        return DatabaseInfo(name=name)

    async def update_database(
        self,
        transport: HttpTransport,
        name: str,
        params: DatabaseParams,
    ) -> DatabaseInfo:
        product = display_name(self._config.type)
        msg = f"Database update is not supported for {product}"
        raise UnsupportedOperationError(msg, operation="update_database", product_type=product)

    async def delete_database(self, transport: HttpTransport, name: str) -> None:
        _ = await transport.delete(DATABASE_PATH, params={"db": name})


Provider = CoreProvider
