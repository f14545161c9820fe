"""
Liveness check: reap connections that stopped answering
"""

import asyncio
import time
from typing import Set
from .connection import ConnectionHandle
from .constants import HEARTBEAT_INTERVAL, HEARTBEAT_TIMEOUT
from .logger import get_logger, log_connection_event

logger = get_logger()


class HeartbeatMonitor:
    """Periodically pings idle connections and closes the dead ones"""

    def __init__(self, interval: float = HEARTBEAT_INTERVAL, timeout: float = HEARTBEAT_TIMEOUT):
        self.interval = interval
        self.timeout = timeout
        self._connections: Set[ConnectionHandle] = set()

    def track(self, connection: ConnectionHandle):
        self._connections.add(connection)

    async def untrack(self, connection: ConnectionHandle):
        self._connections.discard(connection)

    @property
    def tracked(self) -> int:
        return len(self._connections)

    async def _ping_alive(self, connection: ConnectionHandle) -> bool:
        try:
            return await connection.ping(self.timeout)
        except Exception as e:
            logger.warning(f"Ping failed for {connection.connection_id}: {e}")
            return False

    async def sweep(self) -> int:
        """
        Ping every connection idle for at least one interval

        Idle connections are pinged concurrently, so a sweep takes about one
        timeout however many peers are dead. Dead connections go through the
        normal disconnect notification, so the registry runs the same leave
        path as a client close.

        Returns:
            Number of connections reaped
        """
        now = time.monotonic()
        idle = [conn for conn in list(self._connections) if now - conn.last_seen >= self.interval]
        if not idle:
            return 0

        results = await asyncio.gather(*(self._ping_alive(conn) for conn in idle))

        reaped = 0
        for connection, alive in zip(idle, results):
            if alive:
                continue

            log_connection_event(
                connection.connection_id, "heartbeat_timeout",
                connection.session.username or "", connection.session.room_id or "",
            )
            try:
                await connection.close(code=1001, reason="Heartbeat timeout")
            except Exception as e:
                logger.warning(f"Close failed for {connection.connection_id}: {e}")
            await connection.notify_closed("heartbeat_timeout")
            self._connections.discard(connection)
            reaped += 1

        if reaped:
            logger.info(f"Reaped {reaped} unresponsive connections")
        return reaped

    async def run(self):
        """Background task for the periodic sweep"""
        while True:
            try:
                await asyncio.sleep(self.interval)
                await self.sweep()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Heartbeat sweep error: {e}")
