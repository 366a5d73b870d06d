"""Shared fixtures: canned configurations and a recording fake backend."""

import json
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

import httpx
import pytest

from influxdb_dal.connection import InfluxConnection
from influxdb_dal.models.config import ConnectionConfig, ProductType
from influxdb_dal.service import InfluxService

CORE = ConnectionConfig(
    type=ProductType.CORE,
    url="http://localhost:8181",
    token="core-token",
)
ENTERPRISE = ConnectionConfig(
    type=ProductType.ENTERPRISE,
    url="http://enterprise:8181/",
    token="ent-token",
)
DEDICATED = ConnectionConfig(
    type=ProductType.CLOUD_DEDICATED,
    token="db-token",
    management_token="mgmt-token",
    cluster_id="abc123",
    account_id="acct-1",
)
CLUSTERED = ConnectionConfig(
    type=ProductType.CLUSTERED,
    url="https://influx.internal",
    token="db-token",
    management_token="mgmt-token",
    cluster_id="c-1",
    account_id="a-1",
)
SERVERLESS = ConnectionConfig(
    type=ProductType.CLOUD_SERVERLESS,
    url="https://us-east-1-1.aws.cloud2.influxdata.com",
    token="sl-token",
)


class FakeInflux:
    """Answers requests from a route table and records every request sent.

    Routes are keyed by (method, path). A route is either a canned response
    or an exception instance to raise from the handler.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Any] = {}
        self.requests: list[httpx.Request] = []

    def on(
        self,
        method: str,
        path: str,
        *,
        status: int = 200,
        json: Any = None,
        text: str | None = None,
        headers: dict[str, str] | None = None,
        raises: Exception | None = None,
    ) -> None:
        if raises is not None:
            self.routes[(method, path)] = raises
        else:
            self.routes[(method, path)] = (status, json, text, headers or {})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(599, json={"message": f"unrouted {request.method} {request.url.path}"})
        if isinstance(route, Exception):
            raise route
        status, body, text, headers = route
        if body is not None:
            return httpx.Response(status, json=body, headers=headers)
        if text is not None:
            return httpx.Response(status, text=text, headers=headers)
        return httpx.Response(status, headers=headers)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def sent(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def last_json(self, method: str, path: str) -> Any:
        requests = self.sent(method, path)
        assert requests, f"no {method} {path} was sent"
        return json.loads(requests[-1].content)


@pytest.fixture
def fake() -> FakeInflux:
    return FakeInflux()


@pytest.fixture
async def make_connection(
    fake: FakeInflux,
) -> AsyncIterator[Callable[[ConnectionConfig], Awaitable[InfluxConnection]]]:
    opened: list[InfluxConnection] = []

    async def _make(config: ConnectionConfig) -> InfluxConnection:
        connection = await InfluxConnection.connect(config, timeout=5.0, transport=fake.transport())
        opened.append(connection)
        return connection

    yield _make
    for connection in opened:
        await connection.disconnect()


@pytest.fixture
async def make_service(
    fake: FakeInflux,
) -> AsyncIterator[Callable[[ConnectionConfig], Awaitable[InfluxService]]]:
    opened: list[InfluxService] = []

    async def _make(config: ConnectionConfig) -> InfluxService:
        service = await InfluxService.connect(config, timeout=5.0, transport=fake.transport())
        opened.append(service)
        return service

    yield _make
    for service in opened:
        await service.disconnect()
