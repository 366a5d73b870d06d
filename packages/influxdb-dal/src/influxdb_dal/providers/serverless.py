"""Cloud Serverless provider (v2 buckets, orgs and measurement schemas).

Databases are called buckets here, retention is expressed in seconds, and
every resource is addressed by id. Names are resolved to ids on each call
by listing; nothing is cached.
"""

from collections.abc import Sequence
from typing import ClassVar

from pydantic import ValidationError
from typing_extensions import TypeAliasType

from influxdb_dal.envelope import envelope_paths, extract_array
from influxdb_dal.errors import DalError, ErrorKind, InvalidRequestError, NotFoundError
from influxdb_dal.models.config import ConnectionConfig
from influxdb_dal.models.datatypes import (
    DEFAULT_BUCKET_RETENTION_SECONDS,
    NANOSECONDS_PER_SECOND,
    DatabaseInfo,
    JsonValue,
    SchemaColumn,
    SchemaInfo,
    nanoseconds_to_seconds,
    seconds_to_nanoseconds,
)
from influxdb_dal.models.params import DatabaseParams
from influxdb_dal.transport import HttpTransport

BUCKETS_PATH = "/api/v2/buckets"
ORGS_PATH = "/api/v2/orgs"

Bucket = TypeAliasType("Bucket", dict[str, JsonValue])


def _str(value: JsonValue) -> str | None:
    return str(value) if value else None


def expire_rules(every_seconds: int) -> list[JsonValue]:
    """Single `expire` retention rule."""
    return [{"type": "expire", "everySeconds": every_seconds}]


def retention_rules(retention_period: int | None) -> list[JsonValue]:
    """Rules for a nanosecond retention; `None` means the 30-day default.

    Buckets keep whole seconds and `0` means never expire, so a non-zero
    retention under one second raises `InvalidRequestError`.
    """
    if retention_period is None:
        return expire_rules(DEFAULT_BUCKET_RETENTION_SECONDS)
    if 0 < retention_period < NANOSECONDS_PER_SECOND:
        msg = (
            f"Retention period {retention_period}ns is shorter than one second; "
            "Cloud Serverless buckets use whole seconds (0 means infinite)"
        )
        raise InvalidRequestError(msg)
    return expire_rules(nanoseconds_to_seconds(retention_period))


def retention_from_rules(rules: JsonValue) -> int | None:
    """Canonical nanosecond retention from a bucket's `retentionRules`."""
    if not isinstance(rules, list) or not rules or not isinstance(rules[0], dict):
        return None
    every_seconds = rules[0].get("everySeconds")
    if isinstance(every_seconds, int) and every_seconds:
        return seconds_to_nanoseconds(every_seconds)
    return None


def is_user_bucket(bucket: JsonValue) -> bool:
    """System buckets (`_monitoring`, `_tasks`) are never exposed."""
    return not (isinstance(bucket, dict) and bucket.get("type") == "system")


def database_from_bucket(bucket: JsonValue) -> DatabaseInfo:
    """Normalise a bucket into a `DatabaseInfo`, keeping bucket metadata."""
    if isinstance(bucket, dict) and bucket.get("name"):
        return DatabaseInfo(
            name=str(bucket["name"]),
            retention_period=retention_from_rules(bucket.get("retentionRules")),
            bucket_id=_str(bucket.get("id")),
            organization_id=_str(bucket.get("orgID")),
            storage_type=_str(bucket.get("storageType")),
            description=_str(bucket.get("description")),
            created_at=_str(bucket.get("createdAt")),
            updated_at=_str(bucket.get("updatedAt")),
            retention_policy=_str(bucket.get("rp")),
        )
    return DatabaseInfo(name=str(bucket))


def column_from_item(item: JsonValue) -> SchemaColumn:
    data = item if isinstance(item, dict) else {}
    try:
        return SchemaColumn.model_validate(
            {"name": data.get("name"), "type": data.get("type"), "data_type": data.get("dataType")}
        )
    except ValidationError as e:
        msg = f"Unexpected schema column in response: {item!r}"
        raise DalError(msg, kind=ErrorKind.PROVIDER, source=e) from e


def schema_from_item(item: JsonValue, bucket_id: str, bucket_name: str) -> SchemaInfo:
    """Normalise a measurement schema object."""
    data = item if isinstance(item, dict) else {}
    columns = data.get("columns")
    return SchemaInfo(
        name=str(data.get("name", "")),
        bucket_id=_str(data.get("bucketID")) or bucket_id,
        bucket_name=bucket_name,
        columns=[column_from_item(c) for c in columns] if isinstance(columns, list) else None,
        created_at=_str(data.get("createdAt")),
        updated_at=_str(data.get("updatedAt")),
    )


class ServerlessProvider:
    """Bucket and measurement-schema lifecycle for Cloud Serverless.

    Implements DatabaseBackend and SchemaBackend.
    """

    __slots__: ClassVar[tuple[str]] = ("_config",)

    _config: ConnectionConfig

    def __init__(self, config: ConnectionConfig) -> None:
        self._config = config

    # -- lookups -----------------------------------------------------------

    async def list_buckets(self, transport: HttpTransport) -> list[JsonValue]:
        response = await transport.get(BUCKETS_PATH)
        return extract_array(response, envelope_paths("buckets"), what="buckets")

    async def find_bucket(
        self,
        transport: HttpTransport,
        name: str,
        label: str = "Database (bucket)",
    ) -> Bucket:
        """Resolve a user bucket by exact name."""
        for bucket in await self.list_buckets(transport):
            if isinstance(bucket, dict) and bucket.get("name") == name and is_user_bucket(bucket):
                if bucket.get("id"):
                    return bucket
        msg = f"{label} '{name}' not found"
        raise NotFoundError(msg)

    async def organization_id(self, transport: HttpTransport) -> str:
        """Id of the first organization visible to the token."""
        response = await transport.get(ORGS_PATH)
        orgs = extract_array(response, envelope_paths("orgs"), what="organizations")
        for org in orgs:
            if isinstance(org, dict) and org.get("id"):
                return str(org["id"])
        msg = "Could not find organization ID for bucket creation"
        raise NotFoundError(msg)

    async def find_measurement(
        self,
        transport: HttpTransport,
        bucket_id: str,
        bucket_name: str,
        schema_name: str,
    ) -> dict[str, JsonValue]:
        """Resolve a measurement schema by name inside a bucket."""
        for schema in await self._measurement_schemas(transport, bucket_id):
            if isinstance(schema, dict) and schema.get("name") == schema_name and schema.get("id"):
                return schema
        msg = f"Schema '{schema_name}' not found in bucket '{bucket_name}'"
        raise NotFoundError(msg)

    async def _measurement_schemas(
        self,
        transport: HttpTransport,
        bucket_id: str,
    ) -> list[JsonValue]:
        response = await transport.get(_measurements_path(bucket_id))
        return extract_array(
            response,
            envelope_paths("measurementSchemas"),
            what="measurement schemas",
        )

    # -- databases ---------------------------------------------------------

    async def list_databases(self, transport: HttpTransport) -> list[DatabaseInfo]:
        buckets = await self.list_buckets(transport)
        return [database_from_bucket(b) for b in buckets if is_user_bucket(b)]

    async def create_database(
        self,
        transport: HttpTransport,
        name: str,
        params: DatabaseParams,
    ) -> DatabaseInfo:
        rules = retention_rules(params.retention_period)
        org_id = await self.organization_id(transport)
        payload: Bucket = {"name": name, "orgID": org_id, "retentionRules": rules}
        if params.description:
            payload["description"] = params.description

        response = await transport.post(BUCKETS_PATH, payload)
        if isinstance(response, dict) and response.get("name"):
            return database_from_bucket(response)
        return database_from_bucket(payload)

    async def update_database(
        self,
        transport: HttpTransport,
        name: str,
        params: DatabaseParams,
    ) -> DatabaseInfo:
        requested_rules = (
            retention_rules(params.retention_period)
            if params.retention_period is not None
            else None
        )
        bucket = await self.find_bucket(transport, name)

        payload: Bucket = {}
        if params.new_name and params.new_name != bucket.get("name"):
            payload["name"] = params.new_name
        if params.description is not None:
            payload["description"] = params.description
        if requested_rules is not None:
            payload["retentionRules"] = requested_rules
        else:
            payload["retentionRules"] = bucket.get("retentionRules") or retention_rules(None)

        response = await transport.patch(f"{BUCKETS_PATH}/{bucket['id']}", payload)
        if isinstance(response, dict) and response.get("name"):
            return database_from_bucket(response)
        return database_from_bucket({**bucket, **payload})

    async def delete_database(self, transport: HttpTransport, name: str) -> None:
        bucket = await self.find_bucket(transport, name)
        _ = await transport.delete(f"{BUCKETS_PATH}/{bucket['id']}")

    # -- measurement schemas -------------------------------------------------

    async def list_schemas(self, transport: HttpTransport, bucket_name: str) -> list[SchemaInfo]:
        bucket_id = await self._bucket_id(transport, bucket_name)
        schemas = await self._measurement_schemas(transport, bucket_id)
        return [schema_from_item(s, bucket_id, bucket_name) for s in schemas]

    async def get_schema(
        self,
        transport: HttpTransport,
        bucket_name: str,
        schema_name: str,
    ) -> SchemaInfo:
        bucket_id = await self._bucket_id(transport, bucket_name)
        measurement = await self.find_measurement(transport, bucket_id, bucket_name, schema_name)
        response = await transport.get(_measurement_path(bucket_id, measurement))
        return schema_from_item(response, bucket_id, bucket_name)

    async def create_schema(
        self,
        transport: HttpTransport,
        bucket_name: str,
        schema_name: str,
        columns: Sequence[SchemaColumn],
    ) -> SchemaInfo:
        bucket_id = await self._bucket_id(transport, bucket_name)
        payload: dict[str, JsonValue] = {
            "name": schema_name,
            "columns": [c.to_payload() for c in columns],
        }
        response = await transport.post(_measurements_path(bucket_id), payload)
        if isinstance(response, dict) and response.get("name"):
            return schema_from_item(response, bucket_id, bucket_name)
        return SchemaInfo(
            name=schema_name,
            bucket_id=bucket_id,
            bucket_name=bucket_name,
            columns=list(columns),
        )

    async def update_schema(
        self,
        transport: HttpTransport,
        bucket_name: str,
        schema_name: str,
        columns: Sequence[SchemaColumn],
    ) -> SchemaInfo:
        """Replace the column list; the backend only accepts additions."""
        bucket_id = await self._bucket_id(transport, bucket_name)
        measurement = await self.find_measurement(transport, bucket_id, bucket_name, schema_name)
        payload: dict[str, JsonValue] = {"columns": [c.to_payload() for c in columns]}
        response = await transport.patch(_measurement_path(bucket_id, measurement), payload)
        if isinstance(response, dict) and response.get("name"):
            return schema_from_item(response, bucket_id, bucket_name)
        return SchemaInfo(
            name=schema_name,
            bucket_id=bucket_id,
            bucket_name=bucket_name,
            columns=list(columns),
        )

    async def _bucket_id(self, transport: HttpTransport, bucket_name: str) -> str:
        bucket = await self.find_bucket(transport, bucket_name, label="Bucket")
        return str(bucket["id"])


def _measurements_path(bucket_id: str) -> str:
    return f"{BUCKETS_PATH}/{bucket_id}/schema/measurements"


def _measurement_path(bucket_id: str, measurement: dict[str, JsonValue]) -> str:
    return f"{_measurements_path(bucket_id)}/{measurement['id']}"


Provider = ServerlessProvider
