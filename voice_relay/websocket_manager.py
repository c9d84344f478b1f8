"""
WebSocket connection manager for the browser voice client.

This module implements the server side of the browser protocol:
- Accept client WebSocket connections
- Route incoming control messages to the appropriate handler by their `type`
- Send handler responses back as JSON notifications
- Tear down the bound upstream session when the client goes away

Failures while handling a single message are reported to the client as an
`error` notification; they never close the client connection.
"""

import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from fastapi import WebSocket, WebSocketDisconnect

from voice_relay.bot.gemini_session import GeminiLiveSession
from voice_relay.bot.notifier import send_notification
from voice_relay.config.constants import (
    LOGGER_NAME,
    MESSAGE_TYPE_AUDIO_DATA,
    MESSAGE_TYPE_END_SESSION,
    MESSAGE_TYPE_PING,
    MESSAGE_TYPE_START_SESSION,
)
from voice_relay.config.settings import RelaySettings
from voice_relay.handlers.audio_handlers import handle_audio_data
from voice_relay.handlers.keepalive_handlers import handle_ping
from voice_relay.handlers.session_handlers import (
    handle_end_session,
    handle_start_session,
)
from voice_relay.models.connection import RelayConnection, SessionFactory
from voice_relay.models.message_schemas import BaseMessage, ErrorNotification

logger = logging.getLogger(LOGGER_NAME)

# Type hint for handler functions
HandlerFunc = Callable[
    [Dict[str, Any], RelayConnection],
    Awaitable[Optional[BaseMessage]],
]


class WebSocketManager:
    """Accepts browser connections and routes their messages to handlers.

    Each connection gets its own RelayConnection, and through it its own
    upstream session; nothing mutable is shared between connections.
    """

    def __init__(
        self,
        settings: RelaySettings,
        session_factory: Optional[SessionFactory] = None,
    ):
        self.settings = settings
        self.session_factory = session_factory or (lambda: GeminiLiveSession(settings))

        self.handlers: Dict[str, HandlerFunc] = {
            MESSAGE_TYPE_START_SESSION: handle_start_session,
            MESSAGE_TYPE_AUDIO_DATA: handle_audio_data,
            MESSAGE_TYPE_END_SESSION: handle_end_session,
            MESSAGE_TYPE_PING: handle_ping,
        }

    async def handle_websocket(self, websocket: WebSocket) -> None:
        """Handle a browser WebSocket connection throughout its lifecycle.

        Args:
            websocket (WebSocket): The FastAPI WebSocket connection object

        Messages are processed one at a time until the client disconnects,
        so upstream sends for a client keep the order the client issued them.
        """
        await websocket.accept()
        logger.info("Client connected")
        connection = RelayConnection(websocket, self.session_factory)

        try:
            while True:
                try:
                    data = await websocket.receive_text()
                except WebSocketDisconnect as e:
                    logger.info(f"Client disconnected: {e.code} {e.reason or ''}".rstrip())
                    break
                await self.handle_message(data, connection)
        except Exception as e:
            logger.error(f"Error in client WebSocket connection: {e}", exc_info=True)
        finally:
            await connection.end()
            logger.info("Client connection cleaned up")

    async def handle_message(self, data: str, connection: RelayConnection) -> None:
        """Parse one client message and dispatch it to its handler."""
        try:
            message_dict = json.loads(data)
            if not isinstance(message_dict, dict):
                raise ValueError("message must be a JSON object")

            message_type = message_dict.get("type")
            logger.debug(f"Client message type: {message_type}")

            handler = self.handlers.get(message_type)
            if handler is None:
                logger.warning(f"Unknown message type received: {message_type}")
                return

            response = await handler(message_dict, connection)
            if response is not None:
                await send_notification(connection.websocket, response)
        except Exception as e:
            logger.error(f"Error handling client message: {e}", exc_info=True)
            await send_notification(
                connection.websocket, ErrorNotification(message=f"Server error: {e}")
            )
