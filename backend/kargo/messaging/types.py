from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from kargo.logic.enums import ErrorCode
from kargo.logic.projection import PublicGameState
from kargo.logic.state import GameAction
from kargo.session.activity import ActivityEntry
from shared.validators import clean_display_name

_ROOM_ID_FIELD = Field(min_length=6, max_length=7, pattern=r"^[0-9]+$")
_PLAYER_ID_FIELD = Field(min_length=1, max_length=50)


class ClientMessageType(StrEnum):
    CREATE_ROOM = "create_room"
    JOIN_ROOM = "join_room"
    LEAVE_ROOM = "leave_room"
    ACTION = "action"
    PING = "ping"


class ServerMessageType(StrEnum):
    ROOM_CREATED = "room_created"
    ROOM_JOINED = "room_joined"
    ROOM_LEFT = "room_left"
    ACTION_ACK = "action_ack"
    ROOM_STATE = "room_state"
    ERROR = "session_error"
    PONG = "pong"


class CreateRoomMessage(BaseModel):
    type: Literal[ClientMessageType.CREATE_ROOM] = ClientMessageType.CREATE_ROOM
    player_name: str = Field(min_length=1, max_length=30)

    @field_validator("player_name")
    @classmethod
    def _validate_name(cls, v: str) -> str:
        return clean_display_name(v)


class JoinRoomMessage(BaseModel):
    type: Literal[ClientMessageType.JOIN_ROOM] = ClientMessageType.JOIN_ROOM
    room_id: str = _ROOM_ID_FIELD
    player_name: str = Field(min_length=1, max_length=30)

    @field_validator("player_name")
    @classmethod
    def _validate_name(cls, v: str) -> str:
        return clean_display_name(v)


class LeaveRoomMessage(BaseModel):
    type: Literal[ClientMessageType.LEAVE_ROOM] = ClientMessageType.LEAVE_ROOM


class ActionMessage(BaseModel):
    """A player intent. `action.kind` is checked by the validator, not here."""

    type: Literal[ClientMessageType.ACTION] = ClientMessageType.ACTION
    room_id: str = _ROOM_ID_FIELD
    player_id: str = _PLAYER_ID_FIELD
    action: GameAction


class PingMessage(BaseModel):
    type: Literal[ClientMessageType.PING] = ClientMessageType.PING


AnyClientMessage = CreateRoomMessage | JoinRoomMessage | LeaveRoomMessage | ActionMessage | PingMessage

ClientMessage = Annotated[AnyClientMessage, Field(discriminator="type")]


class RoomCreatedMessage(BaseModel):
    type: Literal[ServerMessageType.ROOM_CREATED] = ServerMessageType.ROOM_CREATED
    room_id: str
    player_id: str


class RoomJoinedMessage(BaseModel):
    type: Literal[ServerMessageType.ROOM_JOINED] = ServerMessageType.ROOM_JOINED
    room_id: str
    player_id: str


class RoomLeftMessage(BaseModel):
    type: Literal[ServerMessageType.ROOM_LEFT] = ServerMessageType.ROOM_LEFT
    room_id: str


class ActionAckMessage(BaseModel):
    type: Literal[ServerMessageType.ACTION_ACK] = ServerMessageType.ACTION_ACK
    room_id: str
    kind: str


class RoomStateMessage(BaseModel):
    """Per-connection push after every change to a room.

    `you` is the recipient's own player id; `state` is already masked for it.
    """

    type: Literal[ServerMessageType.ROOM_STATE] = ServerMessageType.ROOM_STATE
    room_id: str
    you: str
    state: PublicGameState
    activity: list[ActivityEntry]


class ErrorMessage(BaseModel):
    type: Literal[ServerMessageType.ERROR] = ServerMessageType.ERROR
    code: ErrorCode
    message: str


class PongMessage(BaseModel):
    type: Literal[ServerMessageType.PONG] = ServerMessageType.PONG


_client_message_adapter = TypeAdapter(ClientMessage)


def parse_client_message(data: dict[str, Any]) -> AnyClientMessage:
    """Parse a raw dict into a typed client message. Raises pydantic.ValidationError."""
    return _client_message_adapter.validate_python(data)
