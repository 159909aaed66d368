"""Starlette websocket adapter for the connection registry."""

from dataclasses import dataclass

from fastapi.websockets import WebSocket, WebSocketState


@dataclass(eq=False)
class WebSocketConnection:
    """Wraps a FastAPI websocket as a registry connection."""

    websocket: WebSocket

    @property
    def is_open(self) -> bool:
        """Return true while both sides of the socket are connected."""
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    async def send_text(self, data: str) -> None:
        """Send one text frame."""
        await self.websocket.send_text(data)
