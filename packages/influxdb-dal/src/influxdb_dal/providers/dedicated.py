"""Cloud Dedicated / Clustered provider (account and cluster scoped management API)."""

from typing import ClassVar
from urllib.parse import quote

from influxdb_dal.envelope import envelope_paths, extract_array
from influxdb_dal.errors import InvalidRequestError
from influxdb_dal.models.config import ConnectionConfig
from influxdb_dal.models.datatypes import DatabaseInfo, JsonValue
from influxdb_dal.models.params import DatabaseParams
from influxdb_dal.transport import HttpTransport

DEFAULT_MAX_TABLES = 500
DEFAULT_MAX_COLUMNS_PER_TABLE = 200
DEFAULT_RETENTION_PERIOD = 0
"""Nanoseconds; zero means data is kept forever."""


def _as_int(value: JsonValue) -> int | None:
    return value if isinstance(value, int) and not isinstance(value, bool) else None


def database_from_item(item: JsonValue) -> DatabaseInfo:
    """Normalise one database object from the management API."""
    if isinstance(item, dict) and item.get("name"):
        return DatabaseInfo(
            name=str(item["name"]),
            max_tables=_as_int(item.get("maxTables")),
            max_columns_per_table=_as_int(item.get("maxColumnsPerTable")),
            retention_period=_as_int(item.get("retentionPeriod")),
        )
    return DatabaseInfo(name=str(item))


class DedicatedProvider:
    """Database lifecycle for Cloud Dedicated and Clustered.

    Implements DatabaseBackend. Retention is already in nanoseconds here.
    """

    __slots__: ClassVar[tuple[str]] = ("_config",)

    _config: ConnectionConfig

    def __init__(self, config: ConnectionConfig) -> None:
        self._config = config

    @property
    def databases_path(self) -> str:
        """`/api/v0/accounts/{account_id}/clusters/{cluster_id}/databases`."""
        account = quote(self._config.account_id or "", safe="")
        cluster = quote(self._config.cluster_id or "", safe="")
        return f"/api/v0/accounts/{account}/clusters/{cluster}/databases"

    def database_path(self, name: str) -> str:
        return f"{self.databases_path}/{quote(name, safe='')}"

    async def list_databases(self, transport: HttpTransport) -> list[DatabaseInfo]:
        response = await transport.get(self.databases_path)
        items = extract_array(response, envelope_paths("databases"), what="databases")
        return [database_from_item(item) for item in items]

    async def create_database(
        self,
        transport: HttpTransport,
        name: str,
        params: DatabaseParams,
    ) -> DatabaseInfo:
        payload: dict[str, JsonValue] = {
            "name": name,
            "maxTables": (
                params.max_tables if params.max_tables is not None else DEFAULT_MAX_TABLES
            ),
            "maxColumnsPerTable": (
                params.max_columns_per_table
                if params.max_columns_per_table is not None
                else DEFAULT_MAX_COLUMNS_PER_TABLE
            ),
            "retentionPeriod": (
                params.retention_period
                if params.retention_period is not None
                else DEFAULT_RETENTION_PERIOD
            ),
        }
        response = await transport.post(self.databases_path, payload)
        if isinstance(response, dict) and response.get("name"):
            return database_from_item(response)
        return database_from_item(payload)

    async def update_database(
        self,
        transport: HttpTransport,
        name: str,
        params: DatabaseParams,
    ) -> DatabaseInfo:
        payload: dict[str, JsonValue] = {}
        if params.max_tables is not None:
            payload["maxTables"] = params.max_tables
        if params.max_columns_per_table is not None:
            payload["maxColumnsPerTable"] = params.max_columns_per_table
        if params.retention_period is not None:
            payload["retentionPeriod"] = params.retention_period
        if not payload:
            msg = (
                "No configuration parameters provided for update: "
                "set max_tables, max_columns_per_table or retention_period"
            )
            raise InvalidRequestError(msg)

        response = await transport.patch(self.database_path(name), payload)
        if isinstance(response, dict) and response.get("name"):
            return database_from_item(response)
        return database_from_item({"name": name, **payload})

    async def delete_database(self, transport: HttpTransport, name: str) -> None:
        _ = await transport.delete(self.database_path(name))


Provider = DedicatedProvider
