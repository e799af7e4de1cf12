from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from kargo.logic.exceptions import GameRuleError, UnauthorizedError
from kargo.messaging.types import (
    ActionAckMessage,
    PongMessage,
    RoomCreatedMessage,
    RoomJoinedMessage,
    RoomLeftMessage,
    RoomStateMessage,
)
from kargo.session.broadcast import close_all, send_each, send_one
from kargo.session.registry import RoomRegistry

if TYPE_CHECKING:
    from kargo.logic.state import GameAction
    from kargo.messaging.protocol import ConnectionProtocol
    from kargo.session.room import Room

logger = structlog.get_logger()


class SessionManager:
    """
    Bridge between live connections and rooms.

    Every operation that touches a room's game state holds that room's lock
    from authorization through fan-out, so intents for one room apply one at
    a time in arrival order. Rejected requests surface as KargoError
    subclasses for the caller (the message router) to report.
    """

    def __init__(self, registry: RoomRegistry | None = None) -> None:
        self._registry = registry if registry is not None else RoomRegistry()
        self._connections: dict[str, ConnectionProtocol] = {}

    @property
    def registry(self) -> RoomRegistry:
        return self._registry

    @property
    def room_count(self) -> int:
        return self._registry.room_count

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def get_room(self, room_id: str) -> Room | None:
        return self._registry.get(room_id)

    def register_connection(self, connection: ConnectionProtocol) -> None:
        self._connections[connection.connection_id] = connection

    def unregister_connection(self, connection: ConnectionProtocol) -> None:
        self._connections.pop(connection.connection_id, None)

    async def create_room(self, connection: ConnectionProtocol, player_name: str) -> None:
        room, player_id = self._registry.create(player_name, connection.connection_id)
        structlog.contextvars.bind_contextvars(room_id=room.room_id, player_id=player_id)
        async with room.lock:
            created = RoomCreatedMessage(room_id=room.room_id, player_id=player_id)
            await send_one(connection, created.model_dump(mode="json"))
            await self._broadcast_state(room)

    async def join_room(self, connection: ConnectionProtocol, room_id: str, player_name: str) -> None:
        room = self._registry.require(room_id)
        async with room.lock:
            # the registry re-checks: the room may have been destroyed while we waited
            room, player_id = self._registry.join(room_id, player_name, connection.connection_id)
            structlog.contextvars.bind_contextvars(room_id=room.room_id, player_id=player_id)
            joined = RoomJoinedMessage(room_id=room.room_id, player_id=player_id)
            await send_one(connection, joined.model_dump(mode="json"))
            await self._broadcast_state(room)

    async def leave_room(self, connection: ConnectionProtocol) -> None:
        """Leave the bound room. Same roster effect as a disconnect."""
        room = await self._detach(connection)
        if room is None:
            return
        structlog.contextvars.unbind_contextvars("room_id", "player_id")
        await send_one(connection, RoomLeftMessage(room_id=room.room_id).model_dump(mode="json"))

    async def submit_action(
        self,
        connection: ConnectionProtocol,
        room_id: str,
        player_id: str,
        action: GameAction,
    ) -> None:
        """
        Apply one player intent to a room.

        The binding check runs before any game-rule validation, so a
        connection can never act for a player it is not bound to.

        Raises:
            RoomNotFoundError: No such room.
            UnauthorizedError: The connection is not bound to `player_id` in this room.
            GameRuleError: The validator rejected the action.

        """
        room = self._registry.require(room_id)
        async with room.lock:
            if not room.bindings.is_bound(connection.connection_id, player_id):
                raise UnauthorizedError
            try:
                room.apply(player_id, action)
            except GameRuleError as e:
                logger.info("action rejected", room_id=room_id, kind=action.kind, error_code=e.code, reason=e.message)
                raise
            logger.info("action applied", room_id=room_id, kind=action.kind, phase=room.phase)
            await send_one(connection, ActionAckMessage(room_id=room_id, kind=action.kind).model_dump(mode="json"))
            await self._broadcast_state(room)

    async def on_room_state_changed(self, room: Room) -> None:
        """Push a freshly projected state to every connection bound to `room`."""
        async with room.lock:
            await self._broadcast_state(room)

    async def on_connection_closed(self, connection: ConnectionProtocol) -> None:
        await self._detach(connection)
        self.unregister_connection(connection)

    async def handle_ping(self, connection: ConnectionProtocol) -> None:
        await send_one(connection, PongMessage().model_dump(mode="json"))

    async def close_room_on_error(self, connection: ConnectionProtocol) -> None:
        """
        Close every connection of the caller's room after an unrecoverable error.

        The disconnect handlers clean up bindings and roster when the
        connections close. A connection outside any room is closed alone.
        """
        room = self._registry.room_for_connection(connection.connection_id)
        if room is None:
            targets = [connection]
        else:
            targets = [c for cid, _ in room.bindings.items() if (c := self._connections.get(cid)) is not None]
        await close_all(targets, code=1011, reason="internal_error")

    async def _detach(self, connection: ConnectionProtocol) -> Room | None:
        room = self._registry.room_for_connection(connection.connection_id)
        if room is None:
            return None
        async with room.lock:
            self._registry.remove_connection(connection.connection_id)
            if self._registry.get(room.room_id) is room:
                await self._broadcast_state(room)
        return room

    async def _broadcast_state(self, room: Room) -> None:
        """Fan out per-viewer projections. Caller must hold `room.lock`."""
        activity = room.activity_feed()
        deliveries: list[tuple[ConnectionProtocol, dict[str, Any]]] = []
        for connection_id, player_id in room.bindings.items():
            connection = self._connections.get(connection_id)
            if connection is None:
                continue
            message = RoomStateMessage(
                room_id=room.room_id,
                you=player_id,
                state=room.snapshot_for(player_id),
                activity=activity,
            )
            deliveries.append((connection, message.model_dump(mode="json")))
        await send_each(deliveries)
