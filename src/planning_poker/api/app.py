"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket

from planning_poker.adapters.websocket_connection import WebSocketConnection
from planning_poker.api.sessions import router as sessions_router
from planning_poker.app_logging import configure_logging
from planning_poker.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)
    websocket_path = container.settings.websocket_path

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Planning poker websocket listening at %s", websocket_path)
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(sessions_router)

    @app.get("/api/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.websocket(websocket_path)
    async def planning_poker_socket(websocket: WebSocket) -> None:
        """Serve one client connection until it closes."""
        state_container: AppContainer = websocket.app.state.container
        handler = state_container.protocol_handler
        await websocket.accept()
        connection = WebSocketConnection(websocket)
        client = websocket.client.host if websocket.client else "unknown"
        logger.info("Websocket connection established from %s", client)
        await handler.connect(connection)
        try:
            while True:
                event = await websocket.receive()
                if event["type"] == "websocket.disconnect":
                    break
                raw = event.get("text")
                if raw is None:
                    raw = (event.get("bytes") or b"").decode("utf-8", errors="replace")
                await handler.handle_message(connection, raw)
        finally:
            await handler.disconnect(connection)
            logger.info("Websocket connection from %s closed", client)

    return app
