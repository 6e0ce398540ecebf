"""Layered settings resolution for a single connection.

The effective configuration is the merge of four layers, lowest
precedence first:

1. :data:`BUILTIN_DEFAULTS` — hard-coded fallbacks.
2. The ``USER`` environment variable, if present.
3. Non-null rows of the ``defaults`` table.
4. Non-null, non-empty columns of the connection row itself.

:func:`merge_layers` is pure; :func:`get_connection` only reads.
"""

from __future__ import annotations

from collections.abc import Mapping

from ssh_cm.core.models import ConnectionProfile, EffectiveConnection
from ssh_cm.core.protocols import ConnectionStore, Environment
from ssh_cm.exceptions import NotFoundError


BUILTIN_DEFAULTS: Mapping[str, str] = {
    "args": "",
    "binary": "ssh",
    "command": "",
    "description": "",
    "host": "",
    "id": "",
    "identity": "",
    "nickname": "",
    "user": "",
}

RESOLVED_KEYS: frozenset[str] = frozenset(BUILTIN_DEFAULTS)

DB_SOURCED_KEYS: frozenset[str] = frozenset({"description", "host", "id", "nickname"})
"""Built-in keys that only ever come from the connection row."""


def _overlay(
    target: dict[str, str],
    layer: Mapping[str, object],
) -> None:
    for key, value in layer.items():
        if key not in RESOLVED_KEYS or value is None:
            continue
        text = str(value)
        if text:
            target[key] = text


def merge_layers(
    environ: Environment,
    defaults: Mapping[str, str | None],
    profile: ConnectionProfile,
) -> EffectiveConnection:
    """Merge every layer for *profile* and return the effective settings."""
    merged = dict(BUILTIN_DEFAULTS)
    _overlay(merged, {"user": environ.get("USER")})
    _overlay(merged, defaults)
    _overlay(merged, profile.as_dict())
    return EffectiveConnection(**merged)


def get_connection(
    store: ConnectionStore,
    connection_id: int,
    environ: Environment,
) -> EffectiveConnection:
    """Resolve the effective settings for *connection_id*.

    Raises
    ------
    NotFoundError
        If no connection has that ID.
    """
    profile = store.get_profile(connection_id)
    if profile is None:
        raise NotFoundError(f"Connection ID {connection_id} does not exist.")
    return merge_layers(environ, store.get_defaults(), profile)
