"""
Legality gate for the turn state machine.

validate_action() is the sole authority on which transitions are legal.
The reducer trusts its verdict completely and performs no re-checking.

Check order: the player must exist, then the action kind must be known,
then the kind's own checks run as phase, turn ownership, turn step, and
finally the extra preconditions. The first failing check is reported.
"""

from collections.abc import Callable
from typing import NamedTuple

from kargo.logic.enums import ActionKind, ErrorCode, GamePhase, TurnStep
from kargo.logic.state import GameAction, GameState, Player


class ValidationResult(NamedTuple):
    """Outcome of validating one action against one state snapshot."""

    ok: bool
    code: ErrorCode | None = None
    reason: str | None = None


_OK = ValidationResult(ok=True)


def _illegal(reason: str) -> ValidationResult:
    return ValidationResult(ok=False, code=ErrorCode.ILLEGAL_ACTION, reason=reason)


def _check_turn(state: GameState, player: Player, step: TurnStep, wrong_step_reason: str) -> ValidationResult:
    """Shared phase, ownership and step checks for in-turn actions."""
    if state.phase != GamePhase.TURN:
        return _illegal("Not in turn phase")
    if state.turn_player_id != player.id:
        return _illegal("Not your turn")
    if state.turn_step != step:
        return _illegal(wrong_step_reason)
    return _OK


def _check_owned(player: Player, card_id: str | None, field_name: str) -> ValidationResult:
    if not card_id:
        return _illegal(f"Missing {field_name}")
    if not player.has_card(card_id):
        return _illegal("Card is not in your hand")
    return _OK


def _validate_ready(state: GameState, _player: Player, _action: GameAction) -> ValidationResult:
    if state.phase != GamePhase.LOBBY:
        return _illegal("Not in lobby")
    return _OK


def _validate_draw(state: GameState, player: Player, _action: GameAction) -> ValidationResult:
    result = _check_turn(state, player, TurnStep.DRAW, "Resolve your drawn card first")
    if not result.ok:
        return result
    if not state.deck:
        return _illegal("Deck is empty")
    return _OK


def _validate_discard(state: GameState, player: Player, action: GameAction) -> ValidationResult:
    result = _check_turn(state, player, TurnStep.PLAY, "You must draw first")
    if not result.ok:
        return result
    return _check_owned(player, action.card_id, "card_id")


def _validate_swap_with_hand(state: GameState, player: Player, action: GameAction) -> ValidationResult:
    result = _check_turn(state, player, TurnStep.PLAY, "You must draw first")
    if not result.ok:
        return result
    if state.drawn_card is None:
        return _illegal("No drawn card to swap")
    return _check_owned(player, action.target_card_id, "target_card_id")


def _validate_swap_with_discard(state: GameState, player: Player, action: GameAction) -> ValidationResult:
    result = _check_turn(state, player, TurnStep.DRAW, "You already drew this turn")
    if not result.ok:
        return result
    if not state.discard:
        return _illegal("Discard pile is empty")
    return _check_owned(player, action.target_card_id, "target_card_id")


_VALIDATORS: dict[ActionKind, Callable[[GameState, Player, GameAction], ValidationResult]] = {
    ActionKind.READY: _validate_ready,
    ActionKind.DRAW: _validate_draw,
    ActionKind.DISCARD: _validate_discard,
    ActionKind.SWAP_WITH_HAND: _validate_swap_with_hand,
    ActionKind.SWAP_WITH_DISCARD: _validate_swap_with_discard,
}


def validate_action(state: GameState, player_id: str, action: GameAction) -> ValidationResult:
    """Decide whether `player_id` may apply `action` to `state`. Pure."""
    player = state.get_player(player_id)
    if player is None:
        return ValidationResult(ok=False, code=ErrorCode.PLAYER_NOT_FOUND, reason="Player not found")

    try:
        kind = ActionKind(action.kind)
    except ValueError:
        return ValidationResult(ok=False, code=ErrorCode.UNKNOWN_ACTION, reason=f"Unknown action: {action.kind}")

    return _VALIDATORS[kind](state, player, action)
