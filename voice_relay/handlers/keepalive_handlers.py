"""Keepalive handling for the browser connection."""

from typing import Any, Dict

from voice_relay.models.connection import RelayConnection
from voice_relay.models.message_schemas import PongNotification


async def handle_ping(
    message: Dict[str, Any],
    connection: RelayConnection,
) -> PongNotification:
    """Answer a ping with a pong in every state, without touching the session."""
    return PongNotification()
