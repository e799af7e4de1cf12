"""
Per-viewer projection of the authoritative game state.

project_state() is the only path from GameState to anything a client sees.
Other players' cards collapse to id-only placeholders, the deck collapses to
a count, the discard pile to its top card, and the drawn card is shown only
to the player holding it. The result is assembled from new frozen models,
so dumping it never exposes a reference into the authoritative state.
"""

from pydantic import BaseModel, ConfigDict

from kargo.logic.deck import Card
from kargo.logic.enums import GamePhase, TurnStep
from kargo.logic.state import GameState, Player


class HiddenCard(BaseModel):
    """Placeholder for a card the viewer may not see. Reveals the id only."""

    model_config = ConfigDict(frozen=True)

    id: str


class PublicPlayer(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    ready: bool
    kargo_called: bool
    hand: tuple[Card | HiddenCard, ...]


class PublicGameState(BaseModel):
    """What a single viewer is allowed to know about a room's game."""

    model_config = ConfigDict(frozen=True)

    phase: GamePhase
    players: tuple[PublicPlayer, ...]
    deck_count: int
    discard: tuple[Card, ...]  # empty or just the top card
    drawn_card: Card | None
    turn_player_id: str | None
    turn_index: int
    turn_step: TurnStep


def _copy_card(card: Card) -> Card:
    return Card(id=card.id, suit=card.suit, rank=card.rank)


def _project_player(player: Player, viewer_id: str) -> PublicPlayer:
    if player.id == viewer_id:
        hand: tuple[Card | HiddenCard, ...] = tuple(_copy_card(card) for card in player.hand)
    else:
        hand = tuple(HiddenCard(id=card.id) for card in player.hand)
    return PublicPlayer(
        id=player.id,
        name=player.name,
        ready=player.ready,
        kargo_called=player.kargo_called,
        hand=hand,
    )


def project_state(state: GameState, viewer_id: str) -> PublicGameState:
    """Build the masked snapshot of `state` for `viewer_id`. Pure."""
    top = state.top_discard
    show_drawn = state.drawn_card is not None and state.turn_player_id == viewer_id
    return PublicGameState(
        phase=state.phase,
        players=tuple(_project_player(player, viewer_id) for player in state.players),
        deck_count=len(state.deck),
        discard=(_copy_card(top),) if top is not None else (),
        drawn_card=_copy_card(state.drawn_card) if show_drawn and state.drawn_card is not None else None,
        turn_player_id=state.turn_player_id,
        turn_index=state.turn_index,
        turn_step=state.turn_step,
    )
