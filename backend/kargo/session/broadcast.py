"""Shared fan-out utility for sending messages to a room's connections."""

from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable

    from kargo.messaging.protocol import ConnectionProtocol


async def send_one(connection: ConnectionProtocol, message: dict[str, Any]) -> None:
    """Reply to a single requester. A peer that dropped mid-request is left to its disconnect handler."""
    with contextlib.suppress(RuntimeError, OSError):
        await connection.send_message(message)


async def send_each(deliveries: Iterable[tuple[ConnectionProtocol, dict[str, Any]]]) -> None:
    """Send each message to its own connection.

    A connection that fails mid-send is skipped so the rest still receive
    their message; its own disconnect handler cleans it up.
    """
    for connection, message in list(deliveries):
        with contextlib.suppress(RuntimeError, OSError):
            await connection.send_message(message)


async def close_all(connections: Iterable[ConnectionProtocol], code: int, reason: str) -> None:
    for connection in list(connections):
        with contextlib.suppress(RuntimeError, OSError):
            await connection.close(code=code, reason=reason)
