"""Session-scoped message delivery."""

import asyncio
import json
import logging
from dataclasses import dataclass

from planning_poker.services.registry import Connection, ConnectionRegistry

logger = logging.getLogger(__name__)


@dataclass
class SessionBroadcaster:
    """Delivers messages to one connection or to every member of a session."""

    registry: ConnectionRegistry
    send_timeout: float | None = 5.0

    async def send(self, connection: Connection, message: dict[str, object]) -> bool:
        """Send a message to one connection; failures are logged, not raised."""
        if not connection.is_open:
            logger.debug("Skipping send to closed connection")
            return False
        try:
            await asyncio.wait_for(
                connection.send_text(json.dumps(message)), timeout=self.send_timeout
            )
        except Exception:
            logger.warning(
                "Failed to send message",
                exc_info=True,
                extra={"message_type": message.get("type")},
            )
            return False
        return True

    async def broadcast(
        self,
        session_id: str,
        message: dict[str, object],
        exclude: Connection | None = None,
    ) -> int:
        """Send a message to every open connection bound to the session.

        Destinations are written concurrently, so a stalled client delays
        nobody else; the call returns once every send finished or timed out.
        """
        targets = [
            entry.connection
            for entry in self.registry.entries_for_session(session_id)
            if entry.connection is not exclude
        ]
        results = await asyncio.gather(
            *(self.send(connection, message) for connection in targets)
        )
        delivered = sum(results)
        logger.debug(
            "Broadcast %s to %d connections in session %s",
            message.get("type"),
            delivered,
            session_id,
        )
        return delivered
