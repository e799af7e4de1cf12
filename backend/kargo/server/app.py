from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from starlette.applications import Starlette
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
from starlette.routing import Route, WebSocketRoute

from kargo.messaging.router import MessageRouter
from kargo.server.settings import KargoServerSettings
from kargo.server.websocket import websocket_endpoint
from kargo.session.manager import SessionManager
from kargo.session.registry import RoomRegistry
from shared.logging import setup_logging

logger = structlog.get_logger()

if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.websockets import WebSocket


async def health(_request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok"})


async def status(request: Request) -> JSONResponse:
    session_manager: SessionManager = request.app.state.session_manager
    settings: KargoServerSettings = request.app.state.settings
    return JSONResponse(
        {
            "status": "ok",
            "active_rooms": session_manager.room_count,
            "connections": session_manager.connection_count,
            "max_rooms": settings.max_rooms,
        },
    )


def create_app(
    settings: KargoServerSettings | None = None,
    session_manager: SessionManager | None = None,
    message_router: MessageRouter | None = None,
) -> Starlette:
    if settings is None:  # pragma: no cover
        settings = KargoServerSettings()

    if session_manager is None:
        registry = RoomRegistry(max_rooms=settings.max_rooms, max_players_per_room=settings.max_players_per_room)
        session_manager = SessionManager(registry)

    if message_router is None:
        message_router = MessageRouter(session_manager)

    async def ws_endpoint(websocket: WebSocket) -> None:
        await websocket_endpoint(websocket, message_router, settings)

    routes = [
        Route("/health", health, methods=["GET"]),
        Route("/status", status, methods=["GET"]),
        WebSocketRoute("/ws", ws_endpoint),
    ]

    app = Starlette(routes=routes)
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_methods=["GET"],
        allow_headers=["Content-Type"],
    )
    app.state.settings = settings
    app.state.session_manager = session_manager

    logger.info("kargo server ready", max_rooms=settings.max_rooms)
    return app


def get_app() -> Starlette:  # pragma: no cover
    """ASGI application factory for production use (e.g., uvicorn --factory)."""
    settings = KargoServerSettings()
    setup_logging(log_dir=settings.log_dir)
    return create_app(settings=settings)
