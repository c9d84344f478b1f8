"""
Per-connection state for the browser relay.

A RelayConnection binds one browser WebSocket to at most one upstream session
for its lifetime. The gateway state (idle, starting, active, ended) is derived
from the bound session rather than stored separately, so it cannot drift from
what the session is actually doing.
"""

import logging
from enum import Enum
from typing import Callable, Optional

from fastapi import WebSocket

from voice_relay.bot.gemini_session import GeminiLiveSession
from voice_relay.config.constants import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

SessionFactory = Callable[[], GeminiLiveSession]


class ConnectionState(str, Enum):
    """Lifecycle of one browser connection."""

    IDLE = "idle"
    STARTING = "starting"
    ACTIVE = "active"
    ENDED = "ended"


class RelayConnection:
    """
    Binds a browser WebSocket to its upstream Gemini session.

    Only one session is ever bound at a time; starting a new one tears the
    previous one down first.
    """

    def __init__(self, websocket: WebSocket, session_factory: SessionFactory):
        self.websocket = websocket
        self.session_factory = session_factory
        self.session: Optional[GeminiLiveSession] = None
        self._ended = False

    @property
    def state(self) -> ConnectionState:
        if self.session is None:
            return ConnectionState.ENDED if self._ended else ConnectionState.IDLE
        if self.session.connected:
            return ConnectionState.ACTIVE
        if self.session.failed:
            return ConnectionState.ENDED
        return ConnectionState.STARTING

    async def open_session(self) -> GeminiLiveSession:
        """
        Replace any bound session with a fresh, not yet connected one.

        Returns:
            The newly bound session
        """
        await self.close_session()
        self._ended = False
        self.session = self.session_factory()
        logger.info("Bound new upstream session to client connection")
        return self.session

    async def close_session(self) -> None:
        """Disconnect and discard the bound session, if any."""
        session, self.session = self.session, None
        if session is not None:
            await session.disconnect()
            logger.info("Upstream session released")

    async def end(self) -> None:
        """Move to the ended state, tearing down the session if one is bound."""
        await self.close_session()
        self._ended = True

    def discard_session(self) -> None:
        """Drop a session that never opened a socket."""
        self.session = None
