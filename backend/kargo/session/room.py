"""Room: the session wrapper that owns one authoritative game state."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import uuid4

import structlog

from kargo.logic.deck import DECK_SIZE
from kargo.logic.enums import ActionKind, GamePhase
from kargo.logic.exceptions import (
    GameAlreadyStartedError,
    RoomFullError,
    error_for_code,
)
from kargo.logic.projection import PublicGameState, project_state
from kargo.logic.reducer import apply_action
from kargo.logic.state import HAND_SIZE, MIN_PLAYERS_TO_START, GameAction, GameState, Player
from kargo.logic.state_utils import add_player, remove_player
from kargo.logic.validator import validate_action
from kargo.session.activity import ActivityEntry, ActivityLog

if TYPE_CHECKING:
    import random

logger = structlog.get_logger()

DEFAULT_MAX_PLAYERS = 8
# every seat needs a full hand from a single deck
MAX_PLAYERS_PER_ROOM = DECK_SIZE // HAND_SIZE


def validate_max_players(max_players: int) -> None:
    if not MIN_PLAYERS_TO_START <= max_players <= MAX_PLAYERS_PER_ROOM:
        raise ValueError(
            f"max_players must be between {MIN_PLAYERS_TO_START} and {MAX_PLAYERS_PER_ROOM}, got {max_players}"
        )


def new_player_id() -> str:
    return f"p_{uuid4().hex[:8]}"


class ConnectionBindings:
    """Bidirectional connection_id <-> player_id map.

    A player has at most one bound connection; binding a player again
    replaces its previous connection.
    """

    def __init__(self) -> None:
        self._player_by_connection: dict[str, str] = {}
        self._connection_by_player: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._player_by_connection)

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._player_by_connection

    def bind(self, connection_id: str, player_id: str) -> str | None:
        """Bind the pair. Return the connection id this replaced, if any."""
        previous = self._connection_by_player.get(player_id)
        if previous is not None and previous != connection_id:
            self._player_by_connection.pop(previous, None)
        stale_player = self._player_by_connection.get(connection_id)
        if stale_player is not None and stale_player != player_id:
            self._connection_by_player.pop(stale_player, None)
        self._player_by_connection[connection_id] = player_id
        self._connection_by_player[player_id] = connection_id
        return previous if previous != connection_id else None

    def unbind_connection(self, connection_id: str) -> str | None:
        """Drop the connection's binding. Return the player it was bound to."""
        player_id = self._player_by_connection.pop(connection_id, None)
        if player_id is not None:
            self._connection_by_player.pop(player_id, None)
        return player_id

    def player_for(self, connection_id: str) -> str | None:
        return self._player_by_connection.get(connection_id)

    def connection_for(self, player_id: str) -> str | None:
        return self._connection_by_player.get(player_id)

    def is_bound(self, connection_id: str, player_id: str) -> bool:
        return self._player_by_connection.get(connection_id) == player_id

    def items(self) -> list[tuple[str, str]]:
        """Snapshot of (connection_id, player_id) pairs."""
        return list(self._player_by_connection.items())


def describe_action(kind: ActionKind, before: GameState) -> str:
    """Activity text for an applied action. Never names a hidden card."""
    if kind == ActionKind.READY:
        return "is ready"
    if kind == ActionKind.DRAW:
        return "drew a card"
    if kind == ActionKind.DISCARD:
        if before.drawn_card is not None:
            return "discarded a card along with the drawn card"
        return "discarded a card"
    if kind == ActionKind.SWAP_WITH_HAND:
        return "swapped the drawn card into their hand"
    return "took the top discard into their hand"


@dataclass
class Room:
    """One isolated game instance.

    Owns exactly one GameState, replaced wholesale on every transition,
    plus the connection binding table and the activity log. Callers
    serialize access through `lock`.
    """

    room_id: str
    max_players: int = DEFAULT_MAX_PLAYERS
    state: GameState = field(default_factory=GameState)
    bindings: ConnectionBindings = field(default_factory=ConnectionBindings)
    activity: ActivityLog = field(default_factory=ActivityLog)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    rng: random.Random | None = None

    def __post_init__(self) -> None:
        validate_max_players(self.max_players)

    @property
    def phase(self) -> GamePhase:
        return self.state.phase

    @property
    def in_lobby(self) -> bool:
        return self.state.phase == GamePhase.LOBBY

    @property
    def player_count(self) -> int:
        return len(self.state.players)

    @property
    def is_empty(self) -> bool:
        return self.player_count == 0

    @property
    def is_full(self) -> bool:
        return self.player_count >= self.max_players

    def get_player(self, player_id: str) -> Player | None:
        return self.state.get_player(player_id)

    def add_player(self, name: str) -> Player:
        """Seat a new player. Only allowed while the room is in lobby."""
        if not self.in_lobby:
            raise GameAlreadyStartedError
        if self.is_full:
            raise RoomFullError
        player = Player(id=new_player_id(), name=name)
        self._replace_state(add_player(self.state, player))
        self.activity.append("joined the room", player=name)
        return player

    def remove_player(self, player_id: str) -> Player | None:
        """Unseat a player. Returns None outside lobby or if not seated."""
        player = self.get_player(player_id)
        if player is None or not self.in_lobby:
            return None
        self._replace_state(remove_player(self.state, player_id))
        self.activity.append("left the room", player=player.name)
        return player

    def apply(self, player_id: str, action: GameAction, rng: random.Random | None = None) -> GameState:
        """Validate, reduce and swap in the next state as one step.

        Raises a KargoError subclass, with no effect on the room, when the
        validator rejects the action.
        """
        result = validate_action(self.state, player_id, action)
        if not result.ok:
            raise error_for_code(result.code, result.reason or "Action rejected")

        before = self.state
        after = apply_action(before, player_id, action, rng=rng if rng is not None else self.rng)
        self._replace_state(after)

        kind = ActionKind(action.kind)
        player = before.get_player(player_id)
        self.activity.append(describe_action(kind, before), player=player.name if player else None)
        if before.phase == GamePhase.LOBBY and after.phase == GamePhase.TURN:
            self.activity.append("Game started")
            logger.info("game started", room_id=self.room_id, players=len(after.players))
        return after

    def snapshot_for(self, player_id: str) -> PublicGameState:
        return project_state(self.state, player_id)

    def activity_feed(self) -> list[ActivityEntry]:
        return self.activity.recent()

    def _replace_state(self, new_state: GameState) -> None:
        self.state = new_state
