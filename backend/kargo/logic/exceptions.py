"""Typed domain exceptions for rejected requests and broken invariants.

Every user-facing failure is a subclass of KargoError carrying an ErrorCode.
These are caught at the message router and converted to session_error
replies; the room keeps running afterwards. StateCorruptionError is not a
KargoError and takes the fatal-error path instead.
"""

from kargo.logic.enums import ErrorCode


class KargoError(Exception):
    """Base exception for rejected requests."""

    code: ErrorCode = ErrorCode.ILLEGAL_ACTION

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class SessionError(KargoError):
    """Request rejected by the room/session layer before reaching the game rules."""


class RoomNotFoundError(SessionError):
    code = ErrorCode.ROOM_NOT_FOUND

    def __init__(self, message: str = "Room not found") -> None:
        super().__init__(message)


class PlayerNotFoundError(SessionError):
    code = ErrorCode.PLAYER_NOT_FOUND

    def __init__(self, message: str = "Player not found") -> None:
        super().__init__(message)


class UnauthorizedError(SessionError):
    """Connection is not bound to the player it claims to act for."""

    code = ErrorCode.UNAUTHORIZED

    def __init__(self, message: str = "Connection is not bound to this player") -> None:
        super().__init__(message)


class GameAlreadyStartedError(SessionError):
    code = ErrorCode.GAME_ALREADY_STARTED

    def __init__(self, message: str = "Game already started") -> None:
        super().__init__(message)


class RoomFullError(SessionError):
    code = ErrorCode.ROOM_FULL

    def __init__(self, message: str = "Room is full") -> None:
        super().__init__(message)


class AlreadyInRoomError(SessionError):
    code = ErrorCode.ALREADY_IN_ROOM

    def __init__(self, message: str = "You must leave your current room first") -> None:
        super().__init__(message)


class ServerAtCapacityError(SessionError):
    code = ErrorCode.SERVER_AT_CAPACITY

    def __init__(self, message: str = "Server at capacity") -> None:
        super().__init__(message)


class GameRuleError(KargoError):
    """Action violates the turn state machine (phase, ownership, step, cards)."""


class IllegalActionError(GameRuleError):
    code = ErrorCode.ILLEGAL_ACTION


class UnknownActionError(GameRuleError):
    code = ErrorCode.UNKNOWN_ACTION


class StateCorruptionError(Exception):
    """Raised when an invariant the validator guaranteed no longer holds.

    Indicates a programming error (for example a card id that passed
    validation but is missing from the hand at reduction time), never a
    bad client request.

    Attributes:
        detail: Human-readable description of the violated invariant.

    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"state corruption: {detail}")


_ERRORS_BY_CODE: dict[ErrorCode, type[KargoError]] = {
    ErrorCode.PLAYER_NOT_FOUND: PlayerNotFoundError,
    ErrorCode.ILLEGAL_ACTION: IllegalActionError,
    ErrorCode.UNKNOWN_ACTION: UnknownActionError,
}


def error_for_code(code: ErrorCode, message: str) -> KargoError:
    """Build the exception matching a validator error code."""
    return _ERRORS_BY_CODE.get(code, IllegalActionError)(message)
