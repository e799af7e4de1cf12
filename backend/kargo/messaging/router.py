from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from kargo.logic.enums import ErrorCode
from kargo.logic.exceptions import KargoError
from kargo.messaging.types import (
    ActionMessage,
    CreateRoomMessage,
    ErrorMessage,
    JoinRoomMessage,
    LeaveRoomMessage,
    PingMessage,
    parse_client_message,
)

if TYPE_CHECKING:
    from kargo.messaging.protocol import ConnectionProtocol
    from kargo.session.manager import SessionManager

logger = structlog.get_logger()


class MessageRouter:
    """
    Routes incoming messages to the session manager.

    This class contains pure business logic and can be tested
    without real WebSocket connections.
    """

    def __init__(self, session_manager: SessionManager) -> None:
        self._session_manager = session_manager

    async def handle_message(
        self,
        connection: ConnectionProtocol,
        raw_message: dict[str, Any],
    ) -> None:
        try:
            message = parse_client_message(raw_message)
        except ValidationError as e:
            logger.warning("invalid message", errors=e.error_count())
            await self._send_error(connection, ErrorCode.INVALID_MESSAGE, _summarize(e))
            return

        try:
            await self._dispatch(connection, message)
        except KargoError as e:
            logger.warning("request rejected", error_code=e.code, reason=e.message)
            await self._send_error(connection, e.code, e.message)
        except Exception:
            logger.exception("fatal error while handling message", message_type=raw_message.get("type"))
            await self._session_manager.close_room_on_error(connection)

    async def _dispatch(
        self,
        connection: ConnectionProtocol,
        message: CreateRoomMessage | JoinRoomMessage | LeaveRoomMessage | ActionMessage | PingMessage,
    ) -> None:
        if isinstance(message, CreateRoomMessage):
            await self._session_manager.create_room(connection, message.player_name)
        elif isinstance(message, JoinRoomMessage):
            await self._session_manager.join_room(connection, message.room_id, message.player_name)
        elif isinstance(message, LeaveRoomMessage):
            await self._session_manager.leave_room(connection)
        elif isinstance(message, ActionMessage):
            await self._session_manager.submit_action(
                connection,
                room_id=message.room_id,
                player_id=message.player_id,
                action=message.action,
            )
        elif isinstance(message, PingMessage):
            await self._session_manager.handle_ping(connection)

    async def _send_error(self, connection: ConnectionProtocol, code: ErrorCode, message: str) -> None:
        await connection.send_message(ErrorMessage(code=code, message=message).model_dump(mode="json"))

    async def handle_connect(self, connection: ConnectionProtocol) -> None:
        self._session_manager.register_connection(connection)

    async def handle_disconnect(self, connection: ConnectionProtocol) -> None:
        await self._session_manager.on_connection_closed(connection)


def _summarize(error: ValidationError) -> str:
    """First validation problem as `field: message`, without echoing input values."""
    first = error.errors(include_url=False, include_input=False)[0]
    location = ".".join(str(part) for part in first["loc"]) or "message"
    return f"{location}: {first['msg']}"
