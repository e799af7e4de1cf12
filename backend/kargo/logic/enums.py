"""
String enum definitions for KARGO game concepts.
"""

from enum import StrEnum


class Suit(StrEnum):
    SPADES = "spades"
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"


class Rank(StrEnum):
    ACE = "A"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"


class GamePhase(StrEnum):
    """Phase of a room's game.

    DEALT exists in the state machine but is never observable: dealing and
    turn start happen in the same transition.
    """

    LOBBY = "lobby"
    DEALT = "dealt"
    TURN = "turn"


class TurnStep(StrEnum):
    """Sub-step within the active player's turn."""

    DRAW = "draw"
    PLAY = "play"


class ActionKind(StrEnum):
    """Intents a player can submit against a room's game state."""

    READY = "READY"
    DRAW = "DRAW"
    DISCARD = "DISCARD"
    SWAP_WITH_HAND = "SWAP_WITH_HAND"
    SWAP_WITH_DISCARD = "SWAP_WITH_DISCARD"


class ErrorCode(StrEnum):
    """Error codes sent to clients for rejected requests."""

    ROOM_NOT_FOUND = "room_not_found"
    PLAYER_NOT_FOUND = "player_not_found"
    UNAUTHORIZED = "unauthorized"
    GAME_ALREADY_STARTED = "game_already_started"
    ROOM_FULL = "room_full"
    ALREADY_IN_ROOM = "already_in_room"
    SERVER_AT_CAPACITY = "server_at_capacity"
    ILLEGAL_ACTION = "illegal_action"
    UNKNOWN_ACTION = "unknown_action"
    INVALID_MESSAGE = "invalid_message"
    RATE_LIMITED = "rate_limited"
