"""Pull a list out of a response whose envelope varies between releases."""

from collections.abc import Sequence

from typing_extensions import TypeAliasType

from influxdb_dal.errors import DalError, ErrorKind
from influxdb_dal.models.datatypes import JsonValue

KeyPath = TypeAliasType("KeyPath", tuple[str, ...])


def envelope_paths(key: str) -> tuple[KeyPath, ...]:
    """Candidate locations of `key`: top level, then under `data`, then `result`."""
    return ((key,), ("data", key), ("result", key))


def _lookup(payload: JsonValue, path: KeyPath) -> JsonValue:
    node = payload
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def extract_array(
    payload: JsonValue,
    paths: Sequence[KeyPath],
    *,
    what: str = "items",
) -> list[JsonValue]:
    """Return the first list found at any of `paths`.

    A top-level array is accepted as-is. Anything else that matches none of
    the candidate paths is an unexpected response shape.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for path in paths:
            found = _lookup(payload, path)
            if isinstance(found, list):
                return found
    msg = f"Unexpected response structure while reading {what}"
    raise DalError(msg, kind=ErrorKind.PROVIDER)
