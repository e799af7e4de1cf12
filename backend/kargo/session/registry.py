"""Process-wide room registry: creation, lookup, joining and connection cleanup."""

import secrets

import structlog

from kargo.logic.exceptions import AlreadyInRoomError, RoomNotFoundError, ServerAtCapacityError
from kargo.session.room import DEFAULT_MAX_PLAYERS, Room, validate_max_players

logger = structlog.get_logger()

ROOM_CODE_DIGITS = 6
ROOM_CODE_ATTEMPTS = 20


def _random_code(digits: int) -> str:
    return str(secrets.randbelow(10**digits)).zfill(digits)


class RoomRegistry:
    """Own every live Room and the connection -> room mapping.

    All methods are synchronous; callers that touch a room's game state
    afterwards must do so under that room's lock.
    """

    def __init__(self, *, max_rooms: int | None = None, max_players_per_room: int = DEFAULT_MAX_PLAYERS) -> None:
        validate_max_players(max_players_per_room)
        self._max_rooms = max_rooms
        self._max_players_per_room = max_players_per_room
        self._rooms: dict[str, Room] = {}
        self._room_by_connection: dict[str, str] = {}  # connection_id -> room_id

    @property
    def room_count(self) -> int:
        return len(self._rooms)

    @property
    def max_rooms(self) -> int | None:
        return self._max_rooms

    def get(self, room_id: str) -> Room | None:
        return self._rooms.get(room_id)

    def require(self, room_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFoundError
        return room

    def room_for_connection(self, connection_id: str) -> Room | None:
        room_id = self._room_by_connection.get(connection_id)
        return self._rooms.get(room_id) if room_id is not None else None

    def create(self, host_name: str, connection_id: str) -> tuple[Room, str]:
        """Create a room, seat the host and bind it to `connection_id`.

        Returns:
            The new room and the host's player id.

        Raises:
            AlreadyInRoomError: The connection is already bound in some room.
            ServerAtCapacityError: The registry holds `max_rooms` rooms.

        """
        self._ensure_unbound(connection_id)
        if self._max_rooms is not None and len(self._rooms) >= self._max_rooms:
            raise ServerAtCapacityError

        room = Room(room_id=self._generate_room_id(), max_players=self._max_players_per_room)
        self._rooms[room.room_id] = room
        player = room.add_player(host_name)
        self._bind(room, connection_id, player.id)
        logger.info("room created", room_id=room.room_id, player_id=player.id)
        return room, player.id

    def join(self, room_id: str, name: str, connection_id: str) -> tuple[Room, str]:
        """Seat a new player in an existing lobby and bind it to `connection_id`.

        Raises:
            AlreadyInRoomError: The connection is already bound in some room.
            RoomNotFoundError: No such room.
            GameAlreadyStartedError: The room has left the lobby.
            RoomFullError: The room is at capacity.

        """
        self._ensure_unbound(connection_id)
        room = self.require(room_id)
        player = room.add_player(name)
        self._bind(room, connection_id, player.id)
        logger.info("player joined", room_id=room.room_id, player_id=player.id)
        return room, player.id

    def remove_connection(self, connection_id: str) -> Room | None:
        """Unbind a connection and clean up after it.

        In lobby the bound player is removed from the roster, and an empty
        lobby room is destroyed. Started rooms keep the seat so the game
        state stays intact. Returns the room the connection was bound to,
        or None if it was not bound anywhere.
        """
        room_id = self._room_by_connection.pop(connection_id, None)
        if room_id is None:
            return None
        room = self._rooms.get(room_id)
        if room is None:
            return None

        player_id = room.bindings.unbind_connection(connection_id)
        if player_id is not None and room.remove_player(player_id) is not None:
            logger.info("player left", room_id=room_id, player_id=player_id)

        if room.in_lobby and room.is_empty:
            del self._rooms[room_id]
            logger.info("room destroyed", room_id=room_id)
        return room

    def _ensure_unbound(self, connection_id: str) -> None:
        if connection_id in self._room_by_connection:
            raise AlreadyInRoomError

    def _bind(self, room: Room, connection_id: str, player_id: str) -> None:
        replaced = room.bindings.bind(connection_id, player_id)
        if replaced is not None:
            self._room_by_connection.pop(replaced, None)
        self._room_by_connection[connection_id] = room.room_id

    def _generate_room_id(self) -> str:
        for _ in range(ROOM_CODE_ATTEMPTS):
            code = _random_code(ROOM_CODE_DIGITS)
            if code not in self._rooms:
                return code
        while True:
            code = _random_code(ROOM_CODE_DIGITS + 1)
            if code not in self._rooms:
                return code
