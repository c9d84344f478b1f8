"""
Manages the upstream session lifecycle for a browser connection.

This module handles the start_session and end_session control messages. Starting
binds a fresh Gemini session to the connection and opens it; ending disconnects
and discards whatever session is bound.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from voice_relay.config.constants import LOGGER_NAME
from voice_relay.config.settings import ConfigurationError
from voice_relay.models.connection import RelayConnection
from voice_relay.models.message_schemas import (
    EndSessionMessage,
    ErrorNotification,
    StartSessionMessage,
)

logger = logging.getLogger(LOGGER_NAME)


async def handle_start_session(
    message: Dict[str, Any],
    connection: RelayConnection,
) -> Optional[ErrorNotification]:
    """
    Handle the start_session message from the browser.

    Any session already bound to the connection is disconnected first, so a
    client can restart after an error or after reconnects have run out. The
    `ready` notification is sent by the session itself once the upstream
    handshake completes.

    Args:
        message: The start_session message
        connection: The connection the session is bound to

    Returns:
        An error notification if the session could not be started, else None
    """
    try:
        StartSessionMessage(**message)
    except ValidationError as e:
        logger.error(f"Invalid start_session message: {e}")
        return ErrorNotification(message="Invalid start_session message")

    logger.info("Starting new session...")
    session = await connection.open_session()
    try:
        await session.connect(connection.websocket)
    except ConfigurationError as e:
        logger.error(f"Failed to connect to Gemini: {e}")
        connection.discard_session()
        return ErrorNotification(message=f"Connection error: {e}")

    return None


async def handle_end_session(
    message: Dict[str, Any],
    connection: RelayConnection,
) -> None:
    """
    Handle the end_session message from the browser.

    The browser connection itself stays open; only the upstream session is
    torn down. A pending reconnect is cancelled along with it.

    Args:
        message: The end_session message
        connection: The connection whose session should end

    Returns:
        None, as no response is expected
    """
    try:
        EndSessionMessage(**message)
    except ValidationError as e:
        logger.warning(f"Invalid end_session message, ending anyway: {e}")

    logger.info("Ending session...")
    await connection.end()
    return None
