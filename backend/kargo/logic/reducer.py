"""
State transition function for KARGO.

apply_action() applies a single, already-validated action and returns the
next GameState. It never mutates its input and never re-checks legality:
callers must run validate_action() first. A failure inside a transition
therefore means an invariant was broken and surfaces as StateCorruptionError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from kargo.logic.deck import Card, build_deck, create_rng, shuffle_deck
from kargo.logic.enums import ActionKind, GamePhase, TurnStep
from kargo.logic.exceptions import StateCorruptionError
from kargo.logic.state import HAND_SIZE, GameAction, GameState
from kargo.logic.state_utils import (
    advance_turn,
    pop_from_deck,
    pop_from_discard,
    push_to_discard,
    remove_card_from_hand,
    replace_card_in_hand,
    update_player,
)

if TYPE_CHECKING:
    import random
    from collections.abc import Callable

logger = structlog.get_logger()


def deal_hands(state: GameState, deck: tuple[Card, ...]) -> GameState:
    """
    Deal HAND_SIZE cards to every player round-robin from the end of `deck`.

    Each pass gives one card to every player in seat order; the undealt
    remainder becomes the state's deck.
    """
    remaining = list(deck)
    hands: list[list[Card]] = [[] for _ in state.players]
    for _ in range(HAND_SIZE):
        for hand in hands:
            hand.append(remaining.pop())
    players = tuple(
        player.model_copy(update={"hand": tuple(hand)}) for player, hand in zip(state.players, hands, strict=True)
    )
    return state.model_copy(update={"players": players, "deck": tuple(remaining)})


def start_game(state: GameState, rng: random.Random) -> GameState:
    """Shuffle a fresh deck, deal, and hand the first turn to seat 0."""
    cleared = state.model_copy(
        update={
            "players": tuple(p.model_copy(update={"hand": ()}) for p in state.players),
            "discard": (),
            "drawn_card": None,
            "phase": GamePhase.DEALT,
        }
    )
    dealt = deal_hands(cleared, shuffle_deck(build_deck(), rng))
    return dealt.model_copy(
        update={
            "turn_index": 0,
            "turn_player_id": dealt.players[0].id,
            "turn_step": TurnStep.DRAW,
            "phase": GamePhase.TURN,
        }
    )


def _apply_ready(state: GameState, player_id: str, _action: GameAction, rng: random.Random | None) -> GameState:
    new_state = update_player(state, player_id, ready=True)
    if new_state.all_ready:
        logger.info("all players ready, starting game", players=len(new_state.players))
        return start_game(new_state, rng if rng is not None else create_rng())
    return new_state


def _apply_draw(state: GameState, _player_id: str, _action: GameAction, _rng: random.Random | None) -> GameState:
    new_state, card = pop_from_deck(state)
    return new_state.model_copy(update={"drawn_card": card, "turn_step": TurnStep.PLAY})


def _apply_discard(state: GameState, player_id: str, action: GameAction, _rng: random.Random | None) -> GameState:
    new_state, removed = remove_card_from_hand(state, player_id, _require_card_id(action.card_id))
    # a held drawn card goes down too, on top
    cards = (removed,) if state.drawn_card is None else (removed, state.drawn_card)
    return advance_turn(push_to_discard(new_state, *cards))


def _apply_swap_with_hand(
    state: GameState, player_id: str, action: GameAction, _rng: random.Random | None
) -> GameState:
    if state.drawn_card is None:
        raise StateCorruptionError("swap with hand while no drawn card is held")
    new_state, replaced = replace_card_in_hand(
        state, player_id, _require_card_id(action.target_card_id), state.drawn_card
    )
    return advance_turn(push_to_discard(new_state, replaced))


def _apply_swap_with_discard(
    state: GameState, player_id: str, action: GameAction, _rng: random.Random | None
) -> GameState:
    new_state, taken = pop_from_discard(state)
    new_state, replaced = replace_card_in_hand(new_state, player_id, _require_card_id(action.target_card_id), taken)
    # consumes the draw step only; the player still owes a play-step action
    return push_to_discard(new_state, replaced).model_copy(update={"turn_step": TurnStep.PLAY, "drawn_card": None})


def _require_card_id(card_id: str | None) -> str:
    if not card_id:
        raise StateCorruptionError("validated action is missing its card id")
    return card_id


_REDUCERS: dict[ActionKind, Callable[[GameState, str, GameAction, random.Random | None], GameState]] = {
    ActionKind.READY: _apply_ready,
    ActionKind.DRAW: _apply_draw,
    ActionKind.DISCARD: _apply_discard,
    ActionKind.SWAP_WITH_HAND: _apply_swap_with_hand,
    ActionKind.SWAP_WITH_DISCARD: _apply_swap_with_discard,
}


def apply_action(
    state: GameState,
    player_id: str,
    action: GameAction,
    *,
    rng: random.Random | None = None,
) -> GameState:
    """
    Return the state produced by applying a validated action.

    `rng` is only consulted when the action starts the game; pass a seeded
    random.Random to make the deal reproducible.
    """
    try:
        kind = ActionKind(action.kind)
    except ValueError:
        raise StateCorruptionError(f"unvalidated action kind reached the reducer: {action.kind}") from None
    return _REDUCERS[kind](state, player_id, action, rng)
