"""
Immutable state update utilities using Pydantic model_copy.

Provides helper functions for common immutable state updates on frozen
Pydantic models. These functions never mutate the input state - they
always return new state objects with the requested changes applied.
"""

from kargo.logic.deck import Card
from kargo.logic.enums import TurnStep
from kargo.logic.exceptions import StateCorruptionError
from kargo.logic.state import GameState, Player


def update_player(
    state: GameState,
    player_id: str,
    **updates: object,
) -> GameState:
    """
    Return new state with the given player's fields updated.

    Raises:
        StateCorruptionError: If the player is not seated in this state

    """
    index = state.player_index(player_id)
    if index is None:
        raise StateCorruptionError(f"player {player_id} missing from roster")
    players = list(state.players)
    players[index] = state.players[index].model_copy(update=updates)
    return state.model_copy(update={"players": tuple(players)})


def add_player(state: GameState, player: Player) -> GameState:
    """Return new state with the player appended to the roster."""
    return state.model_copy(update={"players": (*state.players, player)})


def remove_player(state: GameState, player_id: str) -> GameState:
    """Return new state without the given player (no-op if absent)."""
    players = tuple(p for p in state.players if p.id != player_id)
    return state.model_copy(update={"players": players})


def pop_from_deck(state: GameState) -> tuple[GameState, Card]:
    """
    Return (new state, card) with the top card removed from the deck.

    Raises:
        StateCorruptionError: If the deck is empty

    """
    if not state.deck:
        raise StateCorruptionError("draw from empty deck")
    return state.model_copy(update={"deck": state.deck[:-1]}), state.deck[-1]


def pop_from_discard(state: GameState) -> tuple[GameState, Card]:
    """
    Return (new state, card) with the top discard removed.

    Raises:
        StateCorruptionError: If the discard pile is empty

    """
    if not state.discard:
        raise StateCorruptionError("take from empty discard pile")
    return state.model_copy(update={"discard": state.discard[:-1]}), state.discard[-1]


def push_to_discard(state: GameState, *cards: Card) -> GameState:
    """Return new state with cards appended to the discard pile, last on top."""
    return state.model_copy(update={"discard": (*state.discard, *cards)})


def remove_card_from_hand(state: GameState, player_id: str, card_id: str) -> tuple[GameState, Card]:
    """
    Return (new state, removed card) with the card taken out of the player's hand.

    Raises:
        StateCorruptionError: If the card is not in the player's hand

    """
    player = _require_player(state, player_id)
    index = player.card_index(card_id)
    if index is None:
        raise StateCorruptionError(f"card {card_id} not in hand of {player_id}")
    removed = player.hand[index]
    hand = player.hand[:index] + player.hand[index + 1 :]
    return update_player(state, player_id, hand=hand), removed


def replace_card_in_hand(
    state: GameState,
    player_id: str,
    card_id: str,
    replacement: Card,
) -> tuple[GameState, Card]:
    """
    Return (new state, replaced card) with `replacement` put in the same slot.

    Raises:
        StateCorruptionError: If the card is not in the player's hand

    """
    player = _require_player(state, player_id)
    index = player.card_index(card_id)
    if index is None:
        raise StateCorruptionError(f"card {card_id} not in hand of {player_id}")
    replaced = player.hand[index]
    hand = (*player.hand[:index], replacement, *player.hand[index + 1 :])
    return update_player(state, player_id, hand=hand), replaced


def advance_turn(state: GameState) -> GameState:
    """
    Return new state with the turn rotated to the next player.

    Resets the turn step to DRAW and clears the drawn card slot.
    """
    turn_index = (state.turn_index + 1) % len(state.players)
    return state.model_copy(
        update={
            "turn_index": turn_index,
            "turn_player_id": state.players[turn_index].id,
            "turn_step": TurnStep.DRAW,
            "drawn_card": None,
        }
    )


def _require_player(state: GameState, player_id: str) -> Player:
    player = state.get_player(player_id)
    if player is None:
        raise StateCorruptionError(f"player {player_id} missing from roster")
    return player
