"""
FastAPI WebSocket Room Relay
Clients join rooms by id and broadcast chat messages to everyone in the room
"""

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import asyncio
import time
import uvicorn

from relay import (
    RoomRegistry,
    MessageHandler,
    HeartbeatMonitor,
    StarletteConnection,
    get_logger,
    log_connection_event,
    log_system_event,
    CORS_ORIGINS,
    CORS_ALLOW_CREDENTIALS,
    HEARTBEAT_INTERVAL,
    HEARTBEAT_TIMEOUT,
    HOST,
    PORT,
    WEBSOCKET_PATH,
)

logger = get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: the registry lives exactly as long as the app"""
    logger.info("Room Relay starting up...")

    registry = RoomRegistry()
    heartbeat = HeartbeatMonitor(HEARTBEAT_INTERVAL, HEARTBEAT_TIMEOUT)
    app.state.registry = registry
    app.state.heartbeat = heartbeat
    app.state.message_handler = MessageHandler(registry, heartbeat)

    heartbeat_task = asyncio.create_task(heartbeat.run())

    yield

    heartbeat_task.cancel()
    logger.info("Room Relay shutting down...")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Room Relay",
        description="Real-time room chat relay over WebSockets",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=CORS_ALLOW_CREDENTIALS,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        try:
            connection_stats = await app.state.registry.get_connection_stats()
            return {
                "status": "healthy",
                "timestamp": time.time(),
                "connections": connection_stats,
            }
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            raise HTTPException(status_code=503, detail="Service unavailable")

    @app.get("/stats")
    async def get_stats():
        """Get relay statistics"""
        try:
            registry: RoomRegistry = app.state.registry
            return {
                "server": "Room Relay",
                "timestamp": time.time(),
                "connections": await registry.get_connection_stats(),
                "rooms": await registry.get_all_rooms_info(),
            }
        except Exception as e:
            logger.error(f"Stats endpoint failed: {e}")
            raise HTTPException(status_code=500, detail="Failed to get stats")

    @app.websocket(WEBSOCKET_PATH)
    async def websocket_endpoint(websocket: WebSocket):
        """Relay endpoint: one reader loop plus one writer task per connection"""
        await websocket.accept()
        connection = StarletteConnection(websocket)
        handler: MessageHandler = websocket.app.state.message_handler
        handler.attach(connection)
        writer = asyncio.create_task(connection.pump())

        client_ip = websocket.client.host if websocket.client else "unknown"
        log_connection_event(connection.connection_id, "connect")
        logger.info(f"WebSocket connection from {client_ip}")

        try:
            while True:
                # Text and binary frames both go to the decoder
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(message.get("code", 1000))
                raw = message.get("text")
                if raw is None:
                    raw = message.get("bytes") or b""
                await handler.handle_message(connection, raw)
        except WebSocketDisconnect:
            logger.info(f"WebSocket disconnected: {connection.connection_id}")
        except Exception as e:
            logger.error(f"WebSocket error for {connection.connection_id}: {e}")
            try:
                await connection.close(code=1011, reason="Internal error")
            except RuntimeError as close_error:
                logger.warning(f"Close failed for {connection.connection_id}: {close_error}")
        finally:
            await connection.notify_closed("disconnect")
            writer.cancel()
            log_connection_event(connection.connection_id, "disconnect")

    return app


app = create_app()


if __name__ == "__main__":
    log_system_event("startup", f"Starting Room Relay on {HOST}:{PORT}")

    uvicorn.run(
        "main:app",
        host=HOST,
        port=PORT,
        reload=False,
        log_level="info",
        access_log=True,
        # Transport-level liveness for StarletteConnection
        ws_ping_interval=HEARTBEAT_INTERVAL,
        ws_ping_timeout=HEARTBEAT_TIMEOUT,
    )
