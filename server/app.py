"""Realtime card-room server: FastAPI for HTTP, python-socketio for play."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import socketio
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from engine.errors import RoomNotFound
from engine.game import TurnEngine
from engine.registry import RoomRegistry
from engine.service import room_payload
from server.config import Settings, get_settings, setup_logging
from server.dispatcher import Dispatch, Dispatcher

logger = logging.getLogger(__name__)


class SocketGateway:
    """Bind dispatcher events to a Socket.IO server and deliver the results."""

    def __init__(self, sio: Any, dispatcher: Dispatcher, *, tick_seconds: float = 1.0) -> None:
        self.sio = sio
        self.dispatcher = dispatcher
        self.tick_seconds = tick_seconds
        self._timer_task = None

    def register(self) -> None:
        self.sio.on("connect", handler=self.on_connect)
        self.sio.on("disconnect", handler=self.on_disconnect)
        for event in self.dispatcher.events:
            self.sio.on(event, handler=self._relay(event))

    def _relay(self, event: str):
        async def handler(sid: str, *args: Any) -> Optional[dict]:
            payload = args[0] if args else None
            result = self.dispatcher.handle(event, sid, payload)
            await self.deliver(result)
            # Returned value is sent back as the Socket.IO acknowledgement.
            return result.reply

        handler.__name__ = f"on_{event}"
        return handler

    async def deliver(self, result: Dispatch) -> None:
        for membership in result.memberships:
            if membership.joined:
                await self.sio.enter_room(membership.sid, membership.group)
            else:
                await self.sio.leave_room(membership.sid, membership.group)
        for message in result.messages:
            await self.sio.emit(message.event, message.data, to=message.to)

    async def on_connect(self, sid: str, environ: dict, auth: Any = None) -> None:
        logger.info("Player connected: %s", sid)
        self.ensure_timer()

    async def on_disconnect(self, sid: str, reason: Any = None) -> None:
        logger.info("Player disconnected: %s", sid)
        await self.deliver(self.dispatcher.disconnect(sid))

    def ensure_timer(self) -> None:
        if self.dispatcher.engine.rules.turn_timeout_seconds is None:
            return
        if self._timer_task is not None and not self._timer_task.done():
            return
        self._timer_task = self.sio.start_background_task(self.turn_timer_loop)

    async def turn_timer_loop(self) -> None:
        while True:
            await self.sio.sleep(self.tick_seconds)
            try:
                await self.deliver(self.dispatcher.expire_turns())
            except Exception:
                logger.exception("Turn timer tick failed")


def build_api(registry: RoomRegistry, settings: Settings) -> FastAPI:
    api = FastAPI(title="Card Rooms", description="Room-based realtime card game server")
    api.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @api.get("/")
    def root() -> Dict[str, str]:
        return {"message": "Card Rooms server", "status": "ok"}

    @api.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "healthy"}

    @api.get("/rooms")
    def list_rooms() -> List[str]:
        return registry.list_room_names()

    @api.get("/rooms/{name}")
    def get_room(name: str) -> Dict[str, Any]:
        try:
            room = registry.get(name)
        except RoomNotFound as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return room_payload(room)

    return api


@dataclass
class GameServer:
    settings: Settings
    registry: RoomRegistry
    engine: TurnEngine
    dispatcher: Dispatcher
    api: FastAPI
    sio: socketio.AsyncServer
    gateway: SocketGateway
    asgi: socketio.ASGIApp


def create_server(settings: Optional[Settings] = None, *, engine: Optional[TurnEngine] = None) -> GameServer:
    settings = settings or get_settings()
    if engine is None:
        engine = TurnEngine(RoomRegistry(settings.rules()))
    registry = engine.registry
    dispatcher = Dispatcher(engine)

    api = build_api(registry, settings)
    sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins=settings.allowed_origins)
    gateway = SocketGateway(sio, dispatcher, tick_seconds=settings.timer_tick_seconds)
    gateway.register()
    asgi = socketio.ASGIApp(sio, other_asgi_app=api, socketio_path="socket.io")

    return GameServer(
        settings=settings,
        registry=registry,
        engine=engine,
        dispatcher=dispatcher,
        api=api,
        sio=sio,
        gateway=gateway,
        asgi=asgi,
    )


def main() -> None:
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level)
    server = create_server(settings)
    logger.info("Card Rooms listening on %s:%d (mode=%s)", settings.host, settings.port, settings.game_mode)
    uvicorn.run(server.asgi, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
