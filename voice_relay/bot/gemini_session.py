import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Optional

import websockets
from fastapi import WebSocket
from pydantic import ValidationError
from websockets.exceptions import ConnectionClosed

from voice_relay.bot.notifier import send_notification
from voice_relay.bot.transport_errors import classify_transport_error
from voice_relay.config.constants import (
    CLOSE_CODE_ABNORMAL,
    CLOSE_CODE_NORMAL,
    CONNECTION_TIMEOUT,
    GEMINI_LIVE_URL,
    LOGGER_NAME,
    MAX_RECONNECT_ATTEMPTS,
    RECONNECT_DELAY,
    WS_MAX_SIZE,
)
from voice_relay.config.settings import RelaySettings
from voice_relay.models.gemini_schemas import (
    ServerMessage,
    build_audio_turn,
    build_setup_message,
)
from voice_relay.models.message_schemas import (
    AudioNotification,
    BaseMessage,
    ErrorNotification,
    InterruptedNotification,
    ReadyNotification,
    TurnCompleteNotification,
)

logger = logging.getLogger(LOGGER_NAME)

ConnectFunc = Callable[..., Awaitable[Any]]

WS_PING_INTERVAL = 20  # seconds


class GeminiLiveSession:
    """
    One upstream Gemini Live connection bound to one browser client.

    The session opens the socket, performs the setup handshake, forwards client
    audio as complete turns and translates server frames into client
    notifications. Abnormal closes are retried after a fixed delay until
    `max_reconnect_attempts` consecutive failures have been seen, at which point
    a single terminal error is sent and the session stays down.
    """

    def __init__(
        self,
        settings: RelaySettings,
        connect_fn: Optional[ConnectFunc] = None,
        reconnect_delay: float = RECONNECT_DELAY,
        max_reconnect_attempts: int = MAX_RECONNECT_ATTEMPTS,
    ):
        self.settings = settings
        self.ws = None
        self.client: Optional[WebSocket] = None
        self.connected = False
        self.failed = False
        self.reconnect_attempts = 0
        self.max_reconnect_attempts = max_reconnect_attempts
        self.reconnect_delay = reconnect_delay
        self._connect_fn = connect_fn
        self._recv_task: Optional[asyncio.Task] = None
        self._reconnect_task: Optional[asyncio.Task] = None
        self._is_closing = False
        self._api_key: Optional[str] = None

    @property
    def reconnect_pending(self) -> bool:
        return self._reconnect_task is not None and not self._reconnect_task.done()

    def _url(self, api_key: str) -> str:
        return f"{GEMINI_LIVE_URL}?key={api_key}"

    async def connect(self, client: WebSocket) -> bool:
        """
        Open the upstream connection on behalf of `client`.

        Transport failures are reported to the client and handed to the
        reconnect policy rather than raised.

        Args:
            client: The browser WebSocket that receives notifications

        Returns:
            bool: True if the upstream socket was opened

        Raises:
            ConfigurationError: If the API key is missing or malformed
        """
        api_key = self.settings.validate_api_key()
        logger.info(f"API key found: {self.settings.masked_api_key}")

        self._api_key = api_key
        self.client = client
        self._is_closing = False
        self.failed = False
        await self._cancel_reconnect()
        return await self._open(api_key)

    async def _open(self, api_key: str) -> bool:
        # Never hold two upstream sockets at once
        await self._release_socket()

        connect = self._connect_fn or websockets.connect
        logger.info(f"Connecting to Gemini Live API with model: {self.settings.model}")
        try:
            ws = await asyncio.wait_for(
                connect(
                    self._url(api_key),
                    max_size=WS_MAX_SIZE,
                    ping_interval=WS_PING_INTERVAL,
                    compression=None,
                ),
                timeout=CONNECTION_TIMEOUT,
            )
        except asyncio.TimeoutError:
            logger.error(f"Timeout while connecting to Gemini Live API (after {CONNECTION_TIMEOUT}s)")
            await self._handle_transport_error("connection timed out")
            await self._handle_close(CLOSE_CODE_ABNORMAL, "connection timed out")
            return False
        except Exception as e:
            logger.error(f"Failed to connect to Gemini Live API: {e}")
            await self._handle_transport_error(e)
            await self._handle_close(CLOSE_CODE_ABNORMAL, str(e))
            return False

        if self._is_closing:
            # disconnect() ran while the handshake was in flight
            await ws.close(code=CLOSE_CODE_NORMAL)
            return False

        self.ws = ws
        logger.info("Connected to Gemini Live API")
        await self._send_setup()
        self._recv_task = asyncio.create_task(self._recv_loop(ws))
        return True

    async def _send_setup(self) -> None:
        setup_message = build_setup_message(self.settings)
        logger.info(f"Setting up session with model: {self.settings.model}")
        logger.debug(f"Setup message: {json.dumps(setup_message)[:500]}")
        try:
            await self.ws.send(json.dumps(setup_message))
        except Exception as e:
            logger.error(f"Error sending setup message: {e}")
            await self._notify_error("Failed to setup AI session")

    async def _recv_loop(self, ws) -> None:
        """Drain frames from `ws` in order, then apply the close policy."""
        close_code = None
        close_reason = ""
        try:
            async for raw in ws:
                await self._handle_server_message(raw)
        except ConnectionClosed:
            pass
        except Exception as e:
            logger.error(f"Gemini WebSocket error: {e}", exc_info=True)
            await self._handle_transport_error(e)
            close_code, close_reason = CLOSE_CODE_ABNORMAL, str(e)
            try:
                await ws.close()
            except Exception as close_error:
                logger.warning(f"Error closing failed Gemini socket: {close_error}")

        if self.ws is ws:
            self.ws = None
        if close_code is None:
            close_code = ws.close_code if ws.close_code is not None else CLOSE_CODE_ABNORMAL
            close_reason = ws.close_reason or ""
        await self._handle_close(close_code, close_reason)

    async def _handle_server_message(self, raw) -> None:
        try:
            message = ServerMessage.model_validate_json(raw)
        except ValidationError as e:
            logger.error(f"Error parsing Gemini message: {e}")
            await self._notify_error("Failed to parse AI response")
            return

        try:
            await self._dispatch(message)
        except Exception as e:
            logger.error(f"Error handling Gemini message: {e}", exc_info=True)
            await self._notify_error("Failed to process AI response")

    async def _dispatch(self, message: ServerMessage) -> None:
        if message.is_setup_complete:
            logger.info("Gemini setup complete")
            self.connected = True
            self.reconnect_attempts = 0
            await self._notify(ReadyNotification())
            return

        content = message.server_content
        if content is not None:
            for inline in content.audio_parts:
                logger.debug(f"Sending audio to client, size: {len(inline.data)}")
                await self._notify(AudioNotification(data=inline.data))

            for text in content.text_parts:
                logger.debug(f"Model text: {text[:200]}")

            if content.turn_complete:
                logger.info("Turn complete")
                await self._notify(TurnCompleteNotification())

            # Independent of turn_complete; both may be set on one frame
            if content.interrupted:
                logger.info("Turn interrupted")
                await self._notify(InterruptedNotification())

        if message.error is not None:
            logger.error(f"Gemini API error: {message.error}")
            await self._notify_error(f"AI Error: {message.error.message or 'Unknown error'}")

    async def _handle_transport_error(self, error) -> None:
        await self._notify_error(classify_transport_error(error))

    async def _handle_close(self, code: int, reason: str) -> None:
        self.connected = False
        logger.info(f"Disconnected from Gemini Live API (code={code}, reason={reason!r})")

        if self._is_closing or code == CLOSE_CODE_NORMAL:
            return

        self.reconnect_attempts += 1
        if self.reconnect_attempts < self.max_reconnect_attempts:
            logger.info(
                f"Attempting reconnect {self.reconnect_attempts}/{self.max_reconnect_attempts} "
                f"in {self.reconnect_delay}s"
            )
            self._reconnect_task = asyncio.create_task(self._reconnect_after_delay())
        else:
            logger.error(
                f"Giving up after {self.reconnect_attempts} consecutive abnormal closes"
            )
            self.failed = True
            await self._notify_error(f"Connection closed: {code} {reason}".rstrip())

    async def _reconnect_after_delay(self) -> None:
        await asyncio.sleep(self.reconnect_delay)
        if self._is_closing:
            return
        await self._open(self._api_key)

    async def send_audio(self, audio: Optional[str]) -> bool:
        """
        Forward one audio chunk upstream as a complete user turn.

        Problems are reported to the client, never raised.

        Args:
            audio: Opaque encoded audio payload from the browser

        Returns:
            bool: True if the turn was written to the upstream socket
        """
        if not self.connected or self.ws is None:
            logger.error("Not connected to Gemini")
            await self._notify_error("Not connected to AI service")
            return False

        if not audio:
            logger.error("No audio data to send")
            await self._notify_error("No audio data received")
            return False

        try:
            await self.ws.send(json.dumps(build_audio_turn(audio)))
        except Exception as e:
            logger.error(f"Error sending audio: {e}")
            await self._notify_error("Failed to send audio to AI")
            return False

        logger.debug(f"Sent audio to Gemini, size: {len(audio)}")
        return True

    async def disconnect(self) -> None:
        """Close the upstream socket and cancel any pending reconnect. Idempotent."""
        self._is_closing = True
        self.connected = False
        await self._cancel_reconnect()
        await self._release_socket()

    async def _cancel_reconnect(self) -> None:
        task, self._reconnect_task = self._reconnect_task, None
        if task is None or task.done() or task is asyncio.current_task():
            return
        logger.debug("Cancelling pending reconnect")
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            logger.debug("Pending reconnect cancelled")

    async def _release_socket(self) -> None:
        task, self._recv_task = self._recv_task, None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                logger.debug("Receive task cancelled")

        ws, self.ws = self.ws, None
        if ws is not None:
            logger.info("Closing Gemini Live connection")
            try:
                await ws.close(code=CLOSE_CODE_NORMAL)
            except Exception as e:
                logger.warning(f"Error closing Gemini WebSocket: {e}")

    async def _notify(self, notification: BaseMessage) -> bool:
        if self.client is None:
            return False
        return await send_notification(self.client, notification)

    async def _notify_error(self, message: str) -> bool:
        return await self._notify(ErrorNotification(message=message))
