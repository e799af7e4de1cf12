from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from kargo.logic.deck import Card, create_rng
from kargo.logic.enums import GamePhase, Rank, Suit, TurnStep
from kargo.logic.reducer import start_game
from kargo.logic.state import GameState, Player
from kargo.messaging.router import MessageRouter
from kargo.server.app import create_app
from kargo.server.settings import KargoServerSettings
from kargo.session.manager import SessionManager
from kargo.session.registry import RoomRegistry
from kargo.tests.mocks.connection import MockConnection

if TYPE_CHECKING:
    from collections.abc import Sequence


# ============================================================================
# Test State Builder Helpers
# ============================================================================


def make_card(card_id: str, suit: Suit = Suit.SPADES, rank: Rank = Rank.ACE) -> Card:
    return Card(id=card_id, suit=suit, rank=rank)


def create_player(
    player_id: str = "p_alice",
    name: str | None = None,
    *,
    ready: bool = False,
    hand: Sequence[Card] = (),
) -> Player:
    """Create a Player with sensible defaults for testing."""
    return Player(
        id=player_id,
        name=name if name is not None else player_id.removeprefix("p_").title(),
        ready=ready,
        hand=tuple(hand),
    )


def create_lobby_state(*player_ids: str, ready: bool = False) -> GameState:
    return GameState(players=tuple(create_player(pid, ready=ready) for pid in player_ids))


def create_started_state(*player_ids: str, seed: int = 7) -> GameState:
    """Deal a fresh seeded game exactly as READY would when everyone is ready."""
    ids = player_ids or ("p_alice", "p_bob")
    return start_game(create_lobby_state(*ids, ready=True), create_rng(seed))


def create_turn_state(
    *,
    players: Sequence[Player],
    deck: Sequence[Card] | None = None,
    discard: Sequence[Card] = (),
    drawn_card: Card | None = None,
    turn_index: int = 0,
    turn_step: TurnStep = TurnStep.DRAW,
) -> GameState:
    """Build an in-turn state directly, bypassing the deal."""
    return GameState(
        phase=GamePhase.TURN,
        players=tuple(players),
        deck=tuple(deck) if deck is not None else (),
        discard=tuple(discard),
        drawn_card=drawn_card,
        turn_player_id=players[turn_index].id,
        turn_index=turn_index,
        turn_step=turn_step,
    )


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def settings():
    return KargoServerSettings(max_rooms=10, cors_origins=["http://testserver"])


@pytest.fixture
def registry():
    return RoomRegistry(max_rooms=10)


@pytest.fixture
def session_manager(registry):
    return SessionManager(registry)


@pytest.fixture
def message_router(session_manager):
    return MessageRouter(session_manager)


@pytest.fixture
def mock_connection():
    return MockConnection()


@pytest.fixture
def app(settings, session_manager, message_router):
    return create_app(settings=settings, session_manager=session_manager, message_router=message_router)
