"""Transport-independent connection interface used by the session layer."""

from abc import ABC, abstractmethod
from typing import Any

from kargo.messaging.encoder import decode, encode


class ConnectionProtocol(ABC):
    """
    One live client connection.

    The session layer only ever talks to this interface, so it runs the
    same against a WebSocket and against an in-memory test double.
    """

    @property
    @abstractmethod
    def connection_id(self) -> str:
        """Transport-assigned identifier, distinct from any player id."""
        ...

    @abstractmethod
    async def send_bytes(self, data: bytes) -> None: ...

    @abstractmethod
    async def receive_bytes(self) -> bytes: ...

    @abstractmethod
    async def close(self, code: int = 1000, reason: str = "") -> None: ...

    async def send_message(self, data: dict[str, Any]) -> None:
        await self.send_bytes(encode(data))

    async def receive_message(self) -> dict[str, Any]:
        """
        Receive one frame and decode it.

        Raises DecodeError for malformed frames.
        """
        raw = await self.receive_bytes()
        return decode(raw)
