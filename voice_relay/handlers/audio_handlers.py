"""
Handles audio chunks sent by the browser.

Each audio_data message is forwarded upstream as its own complete turn. Chunks
that arrive without a payload, or before any session has been started, are
answered with an error and dropped.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from voice_relay.config.constants import LOGGER_NAME
from voice_relay.models.connection import RelayConnection
from voice_relay.models.message_schemas import AudioDataMessage, ErrorNotification

logger = logging.getLogger(LOGGER_NAME)


async def handle_audio_data(
    message: Dict[str, Any],
    connection: RelayConnection,
) -> Optional[ErrorNotification]:
    """
    Handle the audio_data message from the browser.

    Args:
        message: The audio_data message carrying an opaque `audio` payload
        connection: The connection whose session receives the audio

    Returns:
        An error notification if the chunk was rejected here, else None.
        Errors raised by the session (not connected, send failure) are sent
        by the session directly.
    """
    try:
        audio_message = AudioDataMessage(**message)
    except ValidationError as e:
        logger.error(f"Invalid audio_data message: {e}")
        return ErrorNotification(message="Invalid audio_data message")

    logger.debug(f"Received audio data, size: {len(audio_message.audio or '')}")

    if not audio_message.has_audio:
        logger.warning("Rejecting audio_data without a payload")
        return ErrorNotification(message="No audio data received")

    if connection.session is None:
        logger.warning("Rejecting audio_data with no session started")
        return ErrorNotification(message="Not connected to AI service")

    await connection.session.send_audio(audio_message.audio)
    return None
