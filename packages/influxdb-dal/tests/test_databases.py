"""Tests for database lifecycle dispatch across every product type.

Tests cover:
- Request shapes per product (paths, payloads, hosts, credentials)
- Normalisation into DatabaseInfo, including retention unit conversion
- Preconditions (capabilities, allow-list) failing before any request
- HTTP status rewriting into operation-scoped errors
"""

import httpx
import pytest

from influxdb_dal.errors import (
    BackendError,
    ConfigurationError,
    ErrorKind,
    InvalidRequestError,
    NotFoundError,
    TransportError,
    UnsupportedOperationError,
)
from influxdb_dal.models import ConnectionConfig, DatabaseInfo, DatabaseParams, ProductType
from influxdb_dal.protocols import DatabaseBackend
from influxdb_dal.providers import PROVIDERS, core, dedicated, provider_for, serverless

from conftest import CLUSTERED, CORE, DEDICATED, ENTERPRISE, SERVERLESS, FakeInflux

CORE_PATH = "/api/v3/configure/database"
DEDICATED_PATH = "/api/v0/accounts/acct-1/clusters/abc123/databases"
CLUSTERED_PATH = "/api/v0/accounts/a-1/clusters/c-1/databases"
BUCKETS = "/api/v2/buckets"
ORGS = "/api/v2/orgs"

ONE_DAY_NS = 86_400_000_000_000


@pytest.mark.parametrize(
    ("product", "strategy"),
    [
        (ProductType.CORE, core.CoreProvider),
        (ProductType.ENTERPRISE, core.CoreProvider),
        (ProductType.CLOUD_DEDICATED, dedicated.DedicatedProvider),
        (ProductType.CLUSTERED, dedicated.DedicatedProvider),
        (ProductType.CLOUD_SERVERLESS, serverless.ServerlessProvider),
    ],
)
def test_strategy_registered_per_product(product: ProductType, strategy: type) -> None:
    backend = provider_for(ConnectionConfig(type=product))

    assert PROVIDERS[product] is strategy
    assert isinstance(backend, strategy)
    assert isinstance(backend, DatabaseBackend)


# ============================================================================
# Core / Enterprise
# ============================================================================


class TestCore:
    @pytest.mark.parametrize(
        "body",
        [
            [{"iox::database": "metrics"}, {"iox::database": "logs"}],
            {"databases": ["metrics", "logs"]},
            {"data": {"databases": [{"name": "metrics"}, {"name": "logs"}]}},
        ],
    )
    async def test_list_accepts_every_envelope(self, fake: FakeInflux, make_service, body) -> None:
        fake.on("GET", CORE_PATH, json=body)
        service = await make_service(CORE)

        databases = await service.databases.list_databases()

        assert [d.name for d in databases] == ["metrics", "logs"]
        request = fake.sent("GET", CORE_PATH)[0]
        assert request.url.params["format"] == "json"
        assert request.url.host == "localhost"
        assert request.headers["Authorization"] == "Bearer core-token"

    async def test_create_posts_db_name(self, fake: FakeInflux, make_service) -> None:
        fake.on("POST", CORE_PATH)
        service = await make_service(CORE)

        database = await service.databases.create_database("metrics")

        assert database == DatabaseInfo(name="metrics")
        assert fake.last_json("POST", CORE_PATH) == {"db": "metrics"}

    @pytest.mark.parametrize("config", [CORE, ENTERPRISE])
    async def test_update_is_rejected_before_any_request(
        self, fake: FakeInflux, make_service, config: ConnectionConfig
    ) -> None:
        service = await make_service(config)

        with pytest.raises(UnsupportedOperationError) as excinfo:
            await service.databases.update_database("metrics", DatabaseParams(max_tables=10))

        assert excinfo.value.operation == "update_database"
        assert "Cloud Dedicated" in excinfo.value.message
        assert fake.requests == []

    async def test_delete_uses_query_parameter(self, fake: FakeInflux, make_service) -> None:
        fake.on("DELETE", CORE_PATH)
        service = await make_service(ENTERPRISE)

        assert await service.databases.delete_database("metrics") is None

        request = fake.sent("DELETE", CORE_PATH)[0]
        assert request.url.params["db"] == "metrics"
        assert request.url.host == "enterprise"

    async def test_missing_token_fails_without_request(self, fake: FakeInflux, make_service) -> None:
        service = await make_service(ConnectionConfig(type=ProductType.CORE, url="http://x"))

        with pytest.raises(ConfigurationError) as excinfo:
            await service.databases.list_databases()

        assert excinfo.value.missing == ("token",)
        assert fake.requests == []

    @pytest.mark.parametrize("name", ["", "   "])
    async def test_blank_name_is_rejected(self, fake: FakeInflux, make_service, name: str) -> None:
        service = await make_service(CORE)

        with pytest.raises(InvalidRequestError, match="Database name is required"):
            await service.databases.create_database(name)

        assert fake.requests == []

    async def test_delete_without_any_response_is_an_error(
        self, fake: FakeInflux, make_service
    ) -> None:
        fake.on(
            "DELETE",
            CORE_PATH,
            raises=httpx.RemoteProtocolError("Server disconnected without sending a response."),
        )
        service = await make_service(CORE)

        with pytest.raises(TransportError) as excinfo:
            await service.databases.delete_database("metrics")

        assert excinfo.value.kind is ErrorKind.CONNECTION

    async def test_delete_closed_mid_response_succeeds(self, fake: FakeInflux, make_service) -> None:
        fake.on("DELETE", CORE_PATH, raises=httpx.ReadError("Connection aborted"))
        service = await make_service(CORE)

        assert await service.databases.delete_database("metrics") is None


# ============================================================================
# Cloud Dedicated / Clustered
# ============================================================================


class TestDedicated:
    async def test_management_host_and_credential(self, fake: FakeInflux, make_service) -> None:
        fake.on("GET", DEDICATED_PATH, json=[])
        service = await make_service(DEDICATED)

        await service.databases.list_databases()

        request = fake.sent("GET", DEDICATED_PATH)[0]
        assert request.url.scheme == "https"
        assert request.url.host == "console.influxdata.com"
        assert request.headers["Authorization"] == "Bearer mgmt-token"

    async def test_list_normalises_limits(self, fake: FakeInflux, make_service) -> None:
        fake.on(
            "GET",
            DEDICATED_PATH,
            json=[
                {
                    "accountId": "acct-1",
                    "clusterId": "abc123",
                    "name": "metrics",
                    "maxTables": 100,
                    "maxColumnsPerTable": 50,
                    "retentionPeriod": ONE_DAY_NS,
                }
            ],
        )
        service = await make_service(DEDICATED)

        [database] = await service.databases.list_databases()

        assert database == DatabaseInfo(
            name="metrics",
            max_tables=100,
            max_columns_per_table=50,
            retention_period=ONE_DAY_NS,
        )

    async def test_create_applies_defaults(self, fake: FakeInflux, make_service) -> None:
        fake.on("POST", DEDICATED_PATH, status=204)
        service = await make_service(DEDICATED)

        database = await service.databases.create_database("metrics")

        assert fake.last_json("POST", DEDICATED_PATH) == {
            "name": "metrics",
            "maxTables": 500,
            "maxColumnsPerTable": 200,
            "retentionPeriod": 0,
        }
        assert database.max_tables == 500
        assert database.retention_period == 0

    async def test_create_uses_response_when_present(self, fake: FakeInflux, make_service) -> None:
        fake.on(
            "POST",
            DEDICATED_PATH,
            json={"name": "metrics", "maxTables": 20, "maxColumnsPerTable": 10, "retentionPeriod": 5},
        )
        service = await make_service(DEDICATED)

        database = await service.databases.create_database(
            "metrics",
            DatabaseParams(max_tables=20, max_columns_per_table=10, retention_period=5),
        )

        assert database.max_tables == 20
        assert fake.last_json("POST", DEDICATED_PATH)["maxColumnsPerTable"] == 10

    async def test_update_sends_only_provided_fields(self, fake: FakeInflux, make_service) -> None:
        path = f"{DEDICATED_PATH}/metrics"
        fake.on("PATCH", path, json={"name": "metrics", "maxTables": 800})
        service = await make_service(DEDICATED)

        database = await service.databases.update_database("metrics", DatabaseParams(max_tables=800))

        assert fake.last_json("PATCH", path) == {"maxTables": 800}
        assert database.max_tables == 800

    async def test_empty_update_is_invalid(self, fake: FakeInflux, make_service) -> None:
        service = await make_service(DEDICATED)

        with pytest.raises(InvalidRequestError, match="No configuration parameters"):
            await service.databases.update_database("metrics", DatabaseParams())

        assert fake.requests == []

    async def test_delete_by_path(self, fake: FakeInflux, make_service) -> None:
        path = f"{DEDICATED_PATH}/metrics"
        fake.on("DELETE", path, status=204)
        service = await make_service(DEDICATED)

        await service.databases.delete_database("metrics")

        assert len(fake.sent("DELETE", path)) == 1

    async def test_clustered_uses_configured_url(self, fake: FakeInflux, make_service) -> None:
        fake.on("GET", CLUSTERED_PATH, json={"databases": [{"name": "a"}]})
        service = await make_service(CLUSTERED)

        [database] = await service.databases.list_databases()

        assert database.name == "a"
        request = fake.sent("GET", CLUSTERED_PATH)[0]
        assert request.url.host == "influx.internal"
        assert request.headers["Authorization"] == "Bearer mgmt-token"

    async def test_missing_management_fields_fail_without_request(
        self, fake: FakeInflux, make_service
    ) -> None:
        config = DEDICATED.model_copy(update={"account_id": None, "management_token": None})
        service = await make_service(config)

        with pytest.raises(ConfigurationError) as excinfo:
            await service.databases.create_database("metrics")

        assert excinfo.value.missing == ("account_id", "management_token")
        assert fake.requests == []


# ============================================================================
# Cloud Serverless
# ============================================================================

USER_BUCKET = {
    "id": "b-1",
    "orgID": "org-1",
    "type": "user",
    "name": "metrics",
    "description": "app metrics",
    "retentionRules": [{"type": "expire", "everySeconds": 86400}],
    "createdAt": "2024-01-01T00:00:00Z",
    "updatedAt": "2024-01-02T00:00:00Z",
}
SYSTEM_BUCKETS = [
    {"id": "s-1", "type": "system", "name": "_monitoring", "retentionRules": []},
    {"id": "s-2", "type": "system", "name": "_tasks", "retentionRules": []},
]


class TestServerless:
    async def test_token_scheme(self, fake: FakeInflux, make_service) -> None:
        fake.on("GET", BUCKETS, json={"buckets": []})
        service = await make_service(SERVERLESS)

        await service.databases.list_databases()

        assert fake.sent("GET", BUCKETS)[0].headers["Authorization"] == "Token sl-token"

    async def test_list_filters_system_buckets(self, fake: FakeInflux, make_service) -> None:
        fake.on("GET", BUCKETS, json={"buckets": [*SYSTEM_BUCKETS, USER_BUCKET]})
        service = await make_service(SERVERLESS)

        databases = await service.databases.list_databases()

        assert [d.name for d in databases] == ["metrics"]
        database = databases[0]
        assert database.retention_period == ONE_DAY_NS
        assert database.bucket_id == "b-1"
        assert database.organization_id == "org-1"
        assert database.description == "app metrics"

    async def test_infinite_retention_lists_as_none(self, fake: FakeInflux, make_service) -> None:
        bucket = {**USER_BUCKET, "retentionRules": [{"type": "expire", "everySeconds": 0}]}
        fake.on("GET", BUCKETS, json={"buckets": [bucket]})
        service = await make_service(SERVERLESS)

        [database] = await service.databases.list_databases()

        assert database.retention_period is None

    async def test_create_converts_retention_to_seconds(self, fake: FakeInflux, make_service) -> None:
        fake.on("GET", ORGS, json={"orgs": [{"id": "org-1", "name": "acme"}]})
        fake.on("POST", BUCKETS, status=201, json=USER_BUCKET)
        service = await make_service(SERVERLESS)

        database = await service.databases.create_database(
            "metrics",
            DatabaseParams(retention_period=ONE_DAY_NS, description="app metrics"),
        )

        assert fake.last_json("POST", BUCKETS) == {
            "name": "metrics",
            "orgID": "org-1",
            "retentionRules": [{"type": "expire", "everySeconds": 86400}],
            "description": "app metrics",
        }
        assert database.retention_period == ONE_DAY_NS
        assert database.bucket_id == "b-1"

    async def test_create_defaults_to_thirty_days(self, fake: FakeInflux, make_service) -> None:
        fake.on("GET", ORGS, json={"orgs": [{"id": "org-1"}]})
        fake.on("POST", BUCKETS, status=201)
        service = await make_service(SERVERLESS)

        database = await service.databases.create_database("metrics")

        rules = fake.last_json("POST", BUCKETS)["retentionRules"]
        assert rules == [{"type": "expire", "everySeconds": 2_592_000}]
        assert database.retention_period == 2_592_000 * 1_000_000_000

    async def test_create_without_organization(self, fake: FakeInflux, make_service) -> None:
        fake.on("GET", ORGS, json={"orgs": []})
        service = await make_service(SERVERLESS)

        with pytest.raises(NotFoundError, match="Could not find organization ID"):
            await service.databases.create_database("metrics")

        assert fake.sent("POST", BUCKETS) == []

    @pytest.mark.parametrize("retention", [1, 500_000_000, 999_999_999])
    async def test_sub_second_retention_is_rejected(
        self, fake: FakeInflux, make_service, retention: int
    ) -> None:
        service = await make_service(SERVERLESS)

        with pytest.raises(InvalidRequestError, match="shorter than one second"):
            await service.databases.create_database(
                "metrics", DatabaseParams(retention_period=retention)
            )
        with pytest.raises(InvalidRequestError, match="shorter than one second"):
            await service.databases.update_database(
                "metrics", DatabaseParams(retention_period=retention)
            )

        assert fake.requests == []

    async def test_zero_retention_means_never_expire(self, fake: FakeInflux, make_service) -> None:
        fake.on("GET", ORGS, json={"orgs": [{"id": "org-1"}]})
        fake.on("POST", BUCKETS, status=201)
        service = await make_service(SERVERLESS)

        database = await service.databases.create_database(
            "metrics", DatabaseParams(retention_period=0)
        )

        rules = fake.last_json("POST", BUCKETS)["retentionRules"]
        assert rules == [{"type": "expire", "everySeconds": 0}]
        assert database.retention_period is None

    async def test_update_keeps_existing_rules(self, fake: FakeInflux, make_service) -> None:
        fake.on("GET", BUCKETS, json={"buckets": [USER_BUCKET]})
        fake.on("PATCH", f"{BUCKETS}/b-1", json={**USER_BUCKET, "description": "renamed"})
        service = await make_service(SERVERLESS)

        database = await service.databases.update_database(
            "metrics", DatabaseParams(description="renamed")
        )

        assert fake.last_json("PATCH", f"{BUCKETS}/b-1") == {
            "description": "renamed",
            "retentionRules": [{"type": "expire", "everySeconds": 86400}],
        }
        assert database.description == "renamed"

    async def test_update_without_rules_falls_back_to_default(
        self, fake: FakeInflux, make_service
    ) -> None:
        bucket = {**USER_BUCKET, "retentionRules": []}
        fake.on("GET", BUCKETS, json={"buckets": [bucket]})
        fake.on("PATCH", f"{BUCKETS}/b-1", status=200)
        service = await make_service(SERVERLESS)

        database = await service.databases.update_database("metrics", DatabaseParams())

        payload = fake.last_json("PATCH", f"{BUCKETS}/b-1")
        assert payload == {"retentionRules": [{"type": "expire", "everySeconds": 2_592_000}]}
        assert database.name == "metrics"

    async def test_update_renames_and_sets_retention(self, fake: FakeInflux, make_service) -> None:
        fake.on("GET", BUCKETS, json={"buckets": [USER_BUCKET]})
        fake.on("PATCH", f"{BUCKETS}/b-1", status=200)
        service = await make_service(SERVERLESS)

        database = await service.databases.update_database(
            "metrics", DatabaseParams(new_name="metrics-v2", retention_period=2 * ONE_DAY_NS)
        )

        assert fake.last_json("PATCH", f"{BUCKETS}/b-1") == {
            "name": "metrics-v2",
            "retentionRules": [{"type": "expire", "everySeconds": 172800}],
        }
        assert database.name == "metrics-v2"
        assert database.retention_period == 2 * ONE_DAY_NS

    async def test_delete_resolves_id(self, fake: FakeInflux, make_service) -> None:
        fake.on("GET", BUCKETS, json={"buckets": [*SYSTEM_BUCKETS, USER_BUCKET]})
        fake.on("DELETE", f"{BUCKETS}/b-1", status=204)
        service = await make_service(SERVERLESS)

        await service.databases.delete_database("metrics")

        assert len(fake.sent("DELETE", f"{BUCKETS}/b-1")) == 1

    async def test_unknown_bucket_is_not_found(self, fake: FakeInflux, make_service) -> None:
        fake.on("GET", BUCKETS, json={"buckets": [USER_BUCKET]})
        service = await make_service(SERVERLESS)

        with pytest.raises(NotFoundError, match="Database \\(bucket\\) 'missing' not found"):
            await service.databases.delete_database("missing")

        assert [r.method for r in fake.requests] == ["GET"]

    async def test_system_bucket_cannot_be_targeted(self, fake: FakeInflux, make_service) -> None:
        fake.on("GET", BUCKETS, json={"buckets": SYSTEM_BUCKETS})
        service = await make_service(SERVERLESS)

        with pytest.raises(NotFoundError):
            await service.databases.delete_database("_monitoring")


# ============================================================================
# HTTP status rewriting
# ============================================================================


class TestStatusMapping:
    @pytest.mark.parametrize(
        ("status", "kind", "hint"),
        [
            (401, ErrorKind.UNAUTHORIZED, "Unauthorized: Check your InfluxDB token permissions"),
            (403, ErrorKind.FORBIDDEN, "Forbidden: Token does not have sufficient permissions"),
            (409, ErrorKind.CONFLICT, "Conflict: Resource already exists"),
            (500, ErrorKind.SERVER, "Internal Server Error"),
        ],
    )
    async def test_known_statuses(
        self, fake: FakeInflux, make_service, status: int, kind: ErrorKind, hint: str
    ) -> None:
        fake.on("POST", CORE_PATH, status=status, json={"error": "backend said no"})
        service = await make_service(CORE)

        with pytest.raises(BackendError) as excinfo:
            await service.databases.create_database("metrics")

        error = excinfo.value
        assert error.kind is kind
        assert error.message.startswith(f"HTTP {status} - {hint}")
        assert error.message.endswith("Server message: backend said no")

    async def test_not_found(self, fake: FakeInflux, make_service) -> None:
        fake.on("DELETE", CORE_PATH, status=404, json={"error": "database not found"})
        service = await make_service(CORE)

        with pytest.raises(NotFoundError) as excinfo:
            await service.databases.delete_database("metrics")

        assert "Not Found: Resource does not exist" in excinfo.value.message

    async def test_bad_request(self, fake: FakeInflux, make_service) -> None:
        fake.on("POST", CORE_PATH, status=400, json={"error": "invalid name"})
        service = await make_service(CORE)

        with pytest.raises(InvalidRequestError):
            await service.databases.create_database("bad name")

    async def test_unknown_status_passes_message_through(
        self, fake: FakeInflux, make_service
    ) -> None:
        fake.on("GET", CORE_PATH, status=418, json={"message": "teapot"})
        service = await make_service(CORE)

        with pytest.raises(BackendError, match="HTTP 418 - InfluxDB API error: teapot"):
            await service.databases.list_databases()

    async def test_unknown_status_without_body(self, fake: FakeInflux, make_service) -> None:
        fake.on("GET", CORE_PATH, status=502)
        service = await make_service(CORE)

        with pytest.raises(BackendError, match="Failed to list databases: HTTP 502"):
            await service.databases.list_databases()
