"""
Connectivity check against the Gemini Live API.

Opens an upstream connection with a text-only setup, sends a single text turn
and waits for the model to answer. Used by `check_api.py` to confirm that an
API key and model work before the relay is started.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Optional

import websockets
from pydantic import ValidationError

from voice_relay.bot.gemini_session import ConnectFunc
from voice_relay.bot.transport_errors import classify_transport_error
from voice_relay.config.constants import (
    GEMINI_LIVE_URL,
    LOGGER_NAME,
    RESPONSE_MODALITY_TEXT,
    WS_MAX_SIZE,
)
from voice_relay.config.settings import RelaySettings
from voice_relay.models.gemini_schemas import (
    ServerMessage,
    build_setup_message,
    build_text_turn,
)

logger = logging.getLogger(LOGGER_NAME)

CHECK_SYSTEM_INSTRUCTION = (
    "You are a test assistant. Respond with 'Connection test successful' "
    "when you receive this message."
)
CHECK_PROMPT = "Hello, this is a connection test"
CHECK_TIMEOUT = 30  # seconds


@dataclass
class ConnectionCheckResult:
    """Outcome of a connectivity check."""

    connected: bool = False
    setup_complete: bool = False
    responded: bool = False
    response_text: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.responded and self.error is None


async def check_connection(
    settings: RelaySettings,
    prompt: str = CHECK_PROMPT,
    timeout: float = CHECK_TIMEOUT,
    connect_fn: Optional[ConnectFunc] = None,
) -> ConnectionCheckResult:
    """
    Run the connectivity check.

    Args:
        settings: Relay settings providing the API key and model
        prompt: Text turn sent once setup completes
        timeout: Overall time budget for the check, in seconds
        connect_fn: Replacement for websockets.connect

    Returns:
        ConnectionCheckResult describing how far the check got

    Raises:
        ConfigurationError: If the API key is missing or malformed
    """
    api_key = settings.validate_api_key()
    check_settings = settings.model_copy(
        update={"system_instruction": CHECK_SYSTEM_INSTRUCTION}
    )
    result = ConnectionCheckResult()

    try:
        await asyncio.wait_for(
            _run_check(
                connect_fn or websockets.connect,
                f"{GEMINI_LIVE_URL}?key={api_key}",
                check_settings,
                prompt,
                result,
            ),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        logger.error(f"Connection check timed out after {timeout}s")
        result.error = f"Connection timeout ({timeout} seconds)"

    return result


async def _run_check(
    connect: ConnectFunc,
    url: str,
    settings: RelaySettings,
    prompt: str,
    result: ConnectionCheckResult,
) -> None:
    try:
        ws = await connect(url, max_size=WS_MAX_SIZE)
    except Exception as e:
        logger.error(f"Connection check failed to connect: {e}")
        result.error = classify_transport_error(e)
        return

    result.connected = True
    logger.info("Successfully connected to Gemini Live API")

    try:
        await ws.send(json.dumps(build_setup_message(settings, RESPONSE_MODALITY_TEXT)))
        logger.info("Sent setup message")

        async for raw in ws:
            try:
                message = ServerMessage.model_validate_json(raw)
            except ValidationError as e:
                logger.error(f"Error parsing response: {e}")
                result.error = "Failed to parse AI response"
                return

            if message.error is not None:
                result.error = f"AI Error: {message.error.message or 'Unknown error'}"
                return

            if message.is_setup_complete:
                result.setup_complete = True
                logger.info("Setup completed, sending test message")
                await ws.send(json.dumps(build_text_turn(prompt)))
                continue

            content = message.server_content
            if content is not None and content.model_turn is not None:
                result.responded = True
                texts = content.text_parts
                result.response_text = texts[0] if texts else None
                logger.info(f"Received AI response: {result.response_text}")
                return

        result.error = f"Connection closed: {ws.close_code} {ws.close_reason or ''}".rstrip()
    finally:
        await ws.close()
