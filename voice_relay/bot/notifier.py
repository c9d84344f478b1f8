"""Delivery of notifications to the browser client."""

import logging

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from voice_relay.config.constants import LOGGER_NAME
from voice_relay.models.message_schemas import BaseMessage

logger = logging.getLogger(LOGGER_NAME)


async def send_notification(websocket: WebSocket, notification: BaseMessage) -> bool:
    """
    Send a notification to the client if its socket is still connected.

    A client that has already gone away is not an error for the relay, so
    failures are logged and reported through the return value.

    Returns:
        bool: True if the notification was written to the socket
    """
    if websocket is None or websocket.client_state == WebSocketState.DISCONNECTED:
        logger.debug(f"Client gone, dropping {notification.type} notification")
        return False

    try:
        await websocket.send_text(notification.to_json())
        return True
    except Exception as e:
        logger.warning(f"Could not deliver {notification.type} notification: {e}")
        return False
