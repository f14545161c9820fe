"""
Standalone relay served directly by the ``websockets`` library

Same protocol as the FastAPI endpoint, without the HTTP routes:

    python -m relay.standalone --port 3001
"""

import argparse
import asyncio
import functools

from websockets.asyncio.server import ServerConnection, serve
from websockets.exceptions import ConnectionClosed

from .connection import WebsocketsConnection
from .constants import HEARTBEAT_INTERVAL, HEARTBEAT_TIMEOUT, HOST, PORT
from .heartbeat import HeartbeatMonitor
from .logger import get_logger, log_connection_event, log_system_event
from .message_handler import MessageHandler
from .room_registry import RoomRegistry

logger = get_logger()


async def handle_connection(websocket: ServerConnection, handler: MessageHandler):
    """Reader loop for one raw WebSocket connection"""
    connection = WebsocketsConnection(websocket)
    handler.attach(connection)
    writer = asyncio.create_task(connection.pump())
    log_connection_event(connection.connection_id, "connect")

    try:
        async for raw in websocket:
            await handler.handle_message(connection, raw)
    except ConnectionClosed as e:
        logger.info(f"Connection {connection.connection_id} closed abruptly: {e}")
    except Exception as e:
        logger.error(f"Connection loop error for {connection.connection_id}: {e}")
    finally:
        await connection.notify_closed("disconnect")
        writer.cancel()
        log_connection_event(connection.connection_id, "disconnect")


def serve_relay(handler: MessageHandler, host: str = HOST, port: int = PORT) -> serve:
    """
    Build the server; use as ``async with serve_relay(...) as server``

    Protocol pings are left to the handler's heartbeat monitor.
    """
    return serve(
        functools.partial(handle_connection, handler=handler),
        host,
        port,
        ping_interval=None,
    )


async def run(host: str = HOST, port: int = PORT):
    registry = RoomRegistry()
    heartbeat = HeartbeatMonitor(HEARTBEAT_INTERVAL, HEARTBEAT_TIMEOUT)
    handler = MessageHandler(registry, heartbeat)

    heartbeat_task = asyncio.create_task(heartbeat.run())
    try:
        async with serve_relay(handler, host, port) as server:
            log_system_event("startup", f"Standalone relay listening on ws://{host}:{port}")
            await server.serve_forever()
    finally:
        heartbeat_task.cancel()
        log_system_event("shutdown", "Standalone relay stopped")


def main():
    parser = argparse.ArgumentParser(description="Room Relay (standalone WebSocket server)")
    parser.add_argument("--host", default=HOST, help="Bind address")
    parser.add_argument("--port", type=int, default=PORT, help="Bind port")
    args = parser.parse_args()

    try:
        asyncio.run(run(args.host, args.port))
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting")


if __name__ == "__main__":
    main()
