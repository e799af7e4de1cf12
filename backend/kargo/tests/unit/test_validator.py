"""
Unit tests for the action validator: check order, reasons and error codes.
"""

import pytest

from kargo.logic.enums import ActionKind, ErrorCode, TurnStep
from kargo.logic.state import GameAction
from kargo.logic.validator import validate_action
from kargo.tests.conftest import (
    create_lobby_state,
    create_player,
    create_started_state,
    create_turn_state,
    make_card,
)


def _two_player_turn(**kwargs):
    alice = create_player("p_alice", hand=[make_card("c_1"), make_card("c_2")])
    bob = create_player("p_bob", hand=[make_card("c_3"), make_card("c_4")])
    kwargs.setdefault("deck", [make_card("c_10"), make_card("c_11")])
    return create_turn_state(players=[alice, bob], **kwargs)


def _assert_illegal(result, reason):
    assert result.ok is False
    assert result.code == ErrorCode.ILLEGAL_ACTION
    assert result.reason == reason


class TestGeneralChecks:
    def test_unknown_player(self):
        result = validate_action(create_lobby_state("p_alice"), "p_ghost", GameAction(kind=ActionKind.READY))
        assert result.ok is False
        assert result.code == ErrorCode.PLAYER_NOT_FOUND

    def test_unknown_action_kind(self):
        result = validate_action(create_lobby_state("p_alice"), "p_alice", GameAction(kind="TELEPORT"))
        assert result.ok is False
        assert result.code == ErrorCode.UNKNOWN_ACTION
        assert result.reason == "Unknown action: TELEPORT"

    def test_player_check_runs_before_kind_check(self):
        result = validate_action(create_lobby_state("p_alice"), "p_ghost", GameAction(kind="TELEPORT"))
        assert result.code == ErrorCode.PLAYER_NOT_FOUND


class TestReady:
    def test_allowed_in_lobby(self):
        assert validate_action(create_lobby_state("p_alice"), "p_alice", GameAction(kind="READY")).ok

    def test_rejected_after_start(self):
        state = create_started_state()
        _assert_illegal(validate_action(state, "p_alice", GameAction(kind="READY")), "Not in lobby")


class TestDraw:
    def test_allowed_for_turn_player(self):
        assert validate_action(_two_player_turn(), "p_alice", GameAction(kind="DRAW")).ok

    def test_rejected_in_lobby(self):
        _assert_illegal(
            validate_action(create_lobby_state("p_alice"), "p_alice", GameAction(kind="DRAW")),
            "Not in turn phase",
        )

    def test_rejected_out_of_turn(self):
        _assert_illegal(validate_action(_two_player_turn(), "p_bob", GameAction(kind="DRAW")), "Not your turn")

    def test_rejected_twice_in_one_turn(self):
        state = _two_player_turn(turn_step=TurnStep.PLAY, drawn_card=make_card("c_12"))
        _assert_illegal(
            validate_action(state, "p_alice", GameAction(kind="DRAW")),
            "Resolve your drawn card first",
        )

    def test_rejected_on_empty_deck(self):
        _assert_illegal(
            validate_action(_two_player_turn(deck=[]), "p_alice", GameAction(kind="DRAW")),
            "Deck is empty",
        )

    def test_ownership_reported_before_step(self):
        state = _two_player_turn(turn_step=TurnStep.PLAY, drawn_card=make_card("c_12"))
        _assert_illegal(validate_action(state, "p_bob", GameAction(kind="DRAW")), "Not your turn")


class TestDiscard:
    def test_allowed_after_draw(self):
        state = _two_player_turn(turn_step=TurnStep.PLAY, drawn_card=make_card("c_12"))
        assert validate_action(state, "p_alice", GameAction(kind="DISCARD", card_id="c_1")).ok

    def test_rejected_before_draw(self):
        _assert_illegal(
            validate_action(_two_player_turn(), "p_alice", GameAction(kind="DISCARD", card_id="c_1")),
            "You must draw first",
        )

    def test_missing_card_id(self):
        state = _two_player_turn(turn_step=TurnStep.PLAY, drawn_card=make_card("c_12"))
        _assert_illegal(validate_action(state, "p_alice", GameAction(kind="DISCARD")), "Missing card_id")

    @pytest.mark.parametrize("card_id", ["c_3", "c_12", "c_99"])
    def test_card_not_in_own_hand(self, card_id):
        """Opponent's card, the drawn card and unknown ids are all rejected."""
        state = _two_player_turn(turn_step=TurnStep.PLAY, drawn_card=make_card("c_12"))
        _assert_illegal(
            validate_action(state, "p_alice", GameAction(kind="DISCARD", card_id=card_id)),
            "Card is not in your hand",
        )


class TestSwapWithHand:
    def test_allowed_with_drawn_card(self):
        state = _two_player_turn(turn_step=TurnStep.PLAY, drawn_card=make_card("c_12"))
        assert validate_action(state, "p_alice", GameAction(kind="SWAP_WITH_HAND", target_card_id="c_2")).ok

    def test_rejected_before_draw(self):
        _assert_illegal(
            validate_action(_two_player_turn(), "p_alice", GameAction(kind="SWAP_WITH_HAND", target_card_id="c_2")),
            "You must draw first",
        )

    def test_rejected_without_drawn_card(self):
        """After SWAP_WITH_DISCARD the step is PLAY but no card is held."""
        state = _two_player_turn(turn_step=TurnStep.PLAY)
        _assert_illegal(
            validate_action(state, "p_alice", GameAction(kind="SWAP_WITH_HAND", target_card_id="c_2")),
            "No drawn card to swap",
        )

    def test_missing_target(self):
        state = _two_player_turn(turn_step=TurnStep.PLAY, drawn_card=make_card("c_12"))
        _assert_illegal(
            validate_action(state, "p_alice", GameAction(kind="SWAP_WITH_HAND")),
            "Missing target_card_id",
        )


class TestSwapWithDiscard:
    def test_allowed_at_draw_step(self):
        state = _two_player_turn(discard=[make_card("c_20")])
        assert validate_action(state, "p_alice", GameAction(kind="SWAP_WITH_DISCARD", target_card_id="c_1")).ok

    def test_rejected_after_draw(self):
        state = _two_player_turn(turn_step=TurnStep.PLAY, drawn_card=make_card("c_12"), discard=[make_card("c_20")])
        _assert_illegal(
            validate_action(state, "p_alice", GameAction(kind="SWAP_WITH_DISCARD", target_card_id="c_1")),
            "You already drew this turn",
        )

    def test_rejected_on_empty_discard(self):
        _assert_illegal(
            validate_action(_two_player_turn(), "p_alice", GameAction(kind="SWAP_WITH_DISCARD", target_card_id="c_1")),
            "Discard pile is empty",
        )

    def test_target_must_be_own_card(self):
        state = _two_player_turn(discard=[make_card("c_20")])
        _assert_illegal(
            validate_action(state, "p_alice", GameAction(kind="SWAP_WITH_DISCARD", target_card_id="c_3")),
            "Card is not in your hand",
        )


class TestPurity:
    def test_validation_does_not_change_state(self):
        state = _two_player_turn()
        before = state.model_dump()
        validate_action(state, "p_bob", GameAction(kind="DRAW"))
        validate_action(state, "p_alice", GameAction(kind="DRAW"))
        assert state.model_dump() == before
