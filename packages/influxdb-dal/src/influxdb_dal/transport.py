"""Authenticated HTTP transport over httpx.

One `HttpTransport` is bound to one resolved host and one credential. The
underlying `httpx.AsyncClient` (and its connection pool) is owned by the
connection and shared between transports.
"""

import socket
from collections.abc import Mapping
from typing import ClassVar, cast

import httpx
import structlog
from typing_extensions import TypeAliasType

from influxdb_dal.errors import BackendError, ConfigurationError, ErrorKind, TransportError
from influxdb_dal.models.datatypes import JsonValue
from influxdb_dal.registry import AuthScheme

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 30.0
"""Per-request timeout in seconds."""

_HOST_NOT_FOUND_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "no address associated",
    "temporary failure in name resolution",
)

_CLOSED_MID_RESPONSE_MARKERS = (
    "aborted",
    "peer closed connection without sending complete message body",
)

QueryParams = TypeAliasType("QueryParams", Mapping[str, str | int])


def auth_headers(token: str | None, scheme: AuthScheme) -> dict[str, str]:
    """Build default headers, including `Authorization` when a token is set."""
    headers = {"Content-Type": "application/json", "Accept": "application/json"}
    if token and token.strip():
        headers["Authorization"] = f"{scheme.value} {token}"
    return headers


def _caused_by(exc: BaseException, kind: type[BaseException]) -> bool:
    seen: set[int] = set()
    node: BaseException | None = exc
    while node is not None and id(node) not in seen:
        if isinstance(node, kind):
            return True
        seen.add(id(node))
        node = node.__cause__ or node.__context__
    return False


def _closed_mid_response(exc: BaseException) -> bool:
    """True when the peer dropped the socket while sending its response.

    A disconnect before any response arrived does not qualify: the request
    may never have been processed.
    """
    if isinstance(exc, httpx.ConnectError | httpx.TimeoutException):
        return False
    text = str(exc).lower()
    return any(marker in text for marker in _CLOSED_MID_RESPONSE_MARKERS)


def _server_message(response: httpx.Response) -> str | None:
    message: str | None = None
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        message = text.splitlines()[0][:200] if text else None
    else:
        if isinstance(body, dict):
            for key in ("message", "error"):
                value = body.get(key)
                if isinstance(value, str) and value:
                    message = value
                    break
    if message == response.reason_phrase:
        return None
    return message


def _decode(response: httpx.Response) -> JsonValue:
    if not response.content:
        return None
    try:
        return cast("JsonValue", response.json())
    except ValueError:
        return response.text


class HttpTransport:
    """Minimal authenticated client for one InfluxDB host."""

    __slots__: ClassVar[tuple[str, str, str, str]] = (
        "_base_url",
        "_client",
        "_headers",
        "_timeout",
    )

    _base_url: str
    _client: httpx.AsyncClient
    _headers: dict[str, str]
    _timeout: float

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        token: str | None,
        scheme: AuthScheme,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._headers = auth_headers(token, scheme)
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def headers(self) -> Mapping[str, str]:
        return self._headers

    async def send(
        self,
        method: str,
        path: str,
        *,
        json: JsonValue = None,
        params: QueryParams | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        """Send a request and return the raw response, whatever its status.

        Connection-level failures are raised as `TransportError`.
        """
        url = f"{self._base_url}{path}"
        try:
            response = await self._client.request(
                method,
                url,
                json=json,
                params=params,
                headers={**self._headers, **(headers or {})},
                timeout=self._timeout,
            )
        except httpx.InvalidURL as e:
            msg = f"Invalid InfluxDB URL '{self._base_url}': {e}"
            raise ConfigurationError(msg, missing=("url",)) from e
        except httpx.TimeoutException as e:
            msg = f"Request timed out after {self._timeout:g}s: {method} {url}"
            raise TransportError(msg, kind=ErrorKind.TIMEOUT, source=e) from e
        except httpx.TransportError as e:
            raise self._transport_error(e) from e

        logger.debug(
            "influx_request",
            method=method,
            url=url,
            status=response.status_code,
        )
        return response

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: JsonValue = None,
        params: QueryParams | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> JsonValue:
        """Send a request and return the decoded body of a 2xx response."""
        response = await self.send(method, path, json=json, params=params, headers=headers)
        if response.is_success:
            return _decode(response)

        server_message = _server_message(response)
        msg = f"HTTP {response.status_code} - {response.reason_phrase}"
        if server_message:
            msg = f"{msg} - Server message: {server_message}"
        raise BackendError(
            msg,
            status=response.status_code,
            server_message=server_message,
        )

    async def get(self, path: str, *, params: QueryParams | None = None) -> JsonValue:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, body: JsonValue = None) -> JsonValue:
        return await self.request("POST", path, json=body)

    async def patch(self, path: str, body: JsonValue = None) -> JsonValue:
        return await self.request("PATCH", path, json=body)

    async def delete(self, path: str, *, params: QueryParams | None = None) -> JsonValue:
        """Send a DELETE, treating a socket closed mid-response as success.

        Some backends close the connection right after acknowledging a delete,
        which surfaces client-side as an aborted read rather than a 204.
        """
        try:
            return await self.request(
                "DELETE",
                path,
                params=params,
                headers={"Connection": "close"},
            )
        except TransportError as e:
            if e.source is None or not _closed_mid_response(e.source):
                raise
            logger.warning(
                "delete_connection_closed",
                url=f"{self._base_url}{path}",
                error=str(e.source),
            )
            return None

    def _transport_error(self, exc: httpx.TransportError) -> TransportError:
        text = str(exc).lower()
        if isinstance(exc, httpx.ConnectError):
            if _caused_by(exc, socket.gaierror) or any(m in text for m in _HOST_NOT_FOUND_MARKERS):
                msg = f"Host not found: Check your InfluxDB URL ({self._base_url})"
                return TransportError(msg, kind=ErrorKind.HOST_NOT_FOUND, source=exc)
            if _caused_by(exc, ConnectionRefusedError) or "refused" in text:
                msg = "Connection refused: Check if InfluxDB is running and URL is correct"
                return TransportError(msg, kind=ErrorKind.CONNECTION, source=exc)
        msg = f"Connection to {self._base_url} failed: {exc}"
        return TransportError(msg, kind=ErrorKind.CONNECTION, source=exc)
