"""
Connection handles: one per live client transport
"""

import asyncio
import time
import uuid
from typing import Awaitable, Callable, List

from fastapi import WebSocket
from starlette.websockets import WebSocketState
from websockets.asyncio.server import ServerConnection
from websockets.exceptions import ConnectionClosed
from websockets.protocol import State

from .constants import OUTBOX_MAX_SIZE
from .logger import get_logger, log_websocket_event
from .models import Session, WireEvent

logger = get_logger()

CloseListener = Callable[["ConnectionHandle"], Awaitable[None]]


class ConnectionHandle:
    """
    Transport-independent view of one client connection

    The relay only ever calls ``send`` and ``is_open``; it never awaits the
    transport. Outbound frames go through a bounded outbox that ``pump``
    drains from the connection's writer task.
    """

    def __init__(self, connection_id: str = None):
        self.connection_id = connection_id or f"conn_{uuid.uuid4().hex[:8]}"
        self.session = Session()
        self.last_seen = time.monotonic()
        self._closed = False
        self._close_notified = False
        self._close_listeners: List[CloseListener] = []
        self._outbox: asyncio.Queue = asyncio.Queue(maxsize=OUTBOX_MAX_SIZE)

    def __repr__(self):
        return f"<{type(self).__name__} {self.connection_id}>"

    # Transport hooks

    def _transport_open(self) -> bool:
        raise NotImplementedError

    async def _transmit(self, payload: str):
        raise NotImplementedError

    async def ping(self, timeout: float) -> bool:
        """Ping the peer; True if it answered in time"""
        raise NotImplementedError

    async def close(self, code: int = 1000, reason: str = ""):
        raise NotImplementedError

    # Relay-facing API

    def is_open(self) -> bool:
        return not self._closed and self._transport_open()

    def send(self, event: WireEvent) -> bool:
        """
        Queue an event for delivery without blocking

        Returns:
            True if queued; False if the connection is closed or backed up
        """
        if not self.is_open():
            log_websocket_event("send_skipped", self.connection_id, f"closed, dropped {event.type}")
            return False

        try:
            self._outbox.put_nowait(event.to_json())
        except asyncio.QueueFull:
            logger.warning(f"Outbox full for {self.connection_id}, dropped {event.type}")
            return False
        return True

    async def pump(self):
        """Writer task: drain the outbox onto the transport in order"""
        while True:
            payload = await self._outbox.get()
            try:
                if self.is_open():
                    await self._transmit(payload)
            except Exception as e:
                logger.warning(f"Send failed for {self.connection_id}: {e}")
                self._closed = True
            finally:
                self._outbox.task_done()

    def touch(self):
        """Record inbound activity for the liveness check"""
        self.last_seen = time.monotonic()

    def add_close_listener(self, listener: CloseListener):
        self._close_listeners.append(listener)

    async def notify_closed(self, reason: str = "disconnect") -> bool:
        """
        Fire the disconnect notification

        Only the first call runs the listeners; later calls return False.
        """
        if self._close_notified:
            return False
        self._close_notified = True
        self._closed = True

        log_websocket_event("closed", self.connection_id, reason)
        for listener in self._close_listeners:
            try:
                await listener(self)
            except Exception as e:
                logger.error(f"Close listener failed for {self.connection_id}: {e}")
        return True


class StarletteConnection(ConnectionHandle):
    """Adapter for FastAPI/Starlette WebSockets served by uvicorn"""

    def __init__(self, websocket: WebSocket):
        super().__init__(f"ws_{id(websocket)}")
        self.websocket = websocket

    def _transport_open(self) -> bool:
        return (self.websocket.client_state == WebSocketState.CONNECTED
                and self.websocket.application_state == WebSocketState.CONNECTED)

    async def _transmit(self, payload: str):
        await self.websocket.send_text(payload)

    async def ping(self, timeout: float) -> bool:
        # uvicorn answers protocol pings itself (ws_ping_interval/ws_ping_timeout)
        return self.is_open()

    async def close(self, code: int = 1000, reason: str = ""):
        if self._transport_open():
            await self.websocket.close(code=code, reason=reason)


class WebsocketsConnection(ConnectionHandle):
    """Adapter for connections accepted by the ``websockets`` server"""

    def __init__(self, websocket: ServerConnection):
        super().__init__(f"ws_{websocket.id.hex[:8]}")
        self.websocket = websocket

    def _transport_open(self) -> bool:
        return self.websocket.state is State.OPEN

    async def _transmit(self, payload: str):
        await self.websocket.send(payload)

    async def ping(self, timeout: float) -> bool:
        try:
            pong_waiter = await self.websocket.ping()
            await asyncio.wait_for(pong_waiter, timeout)
        except (asyncio.TimeoutError, ConnectionClosed):
            return False
        self.touch()
        return True

    async def close(self, code: int = 1000, reason: str = ""):
        await self.websocket.close(code=code, reason=reason)
