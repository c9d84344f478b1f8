"""
Pydantic models for the browser client WebSocket protocol.

Every message carries a `type` tag. Incoming models cover what the browser may
send (start_session, audio_data, end_session, ping); outgoing models are the
only notifications the gateway is allowed to send back.
"""

from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from voice_relay.config.constants import (
    MESSAGE_TYPE_AUDIO,
    MESSAGE_TYPE_AUDIO_DATA,
    MESSAGE_TYPE_END_SESSION,
    MESSAGE_TYPE_ERROR,
    MESSAGE_TYPE_INTERRUPTED,
    MESSAGE_TYPE_PING,
    MESSAGE_TYPE_PONG,
    MESSAGE_TYPE_READY,
    MESSAGE_TYPE_START_SESSION,
    MESSAGE_TYPE_TURN_COMPLETE,
)

READY_MESSAGE = "AI assistant is ready to chat!"


class BaseMessage(BaseModel):
    """Base model for all client WebSocket messages."""

    type: str = Field(..., description="Message type identifier")

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)


# Client -> gateway
class StartSessionMessage(BaseMessage):
    """Request to open an upstream session."""

    type: Literal["start_session"] = MESSAGE_TYPE_START_SESSION


class AudioDataMessage(BaseMessage):
    """One encoded audio chunk recorded by the browser."""

    type: Literal["audio_data"] = MESSAGE_TYPE_AUDIO_DATA
    audio: Optional[str] = Field(None, description="Opaque encoded audio payload")

    @property
    def has_audio(self) -> bool:
        return bool(self.audio)


class EndSessionMessage(BaseMessage):
    """Request to tear down the upstream session."""

    type: Literal["end_session"] = MESSAGE_TYPE_END_SESSION


class PingMessage(BaseMessage):
    """Keepalive from the browser."""

    type: Literal["ping"] = MESSAGE_TYPE_PING


# Gateway -> client
class ReadyNotification(BaseMessage):
    type: Literal["ready"] = MESSAGE_TYPE_READY
    message: Optional[str] = READY_MESSAGE


class AudioNotification(BaseMessage):
    type: Literal["audio"] = MESSAGE_TYPE_AUDIO
    data: str = Field(..., description="Inline audio fragment, forwarded verbatim")


class TurnCompleteNotification(BaseMessage):
    type: Literal["turn_complete"] = MESSAGE_TYPE_TURN_COMPLETE


class InterruptedNotification(BaseMessage):
    type: Literal["interrupted"] = MESSAGE_TYPE_INTERRUPTED


class ErrorNotification(BaseMessage):
    type: Literal["error"] = MESSAGE_TYPE_ERROR
    message: str = Field(..., description="Human readable failure description")


class PongNotification(BaseMessage):
    type: Literal["pong"] = MESSAGE_TYPE_PONG


# Union type for all possible incoming messages
IncomingMessage = Union[
    StartSessionMessage,
    AudioDataMessage,
    EndSessionMessage,
    PingMessage,
]

# Union type for all possible outgoing notifications
OutgoingNotification = Union[
    ReadyNotification,
    AudioNotification,
    TurnCompleteNotification,
    InterruptedNotification,
    ErrorNotification,
    PongNotification,
]
