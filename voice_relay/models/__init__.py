"""
Models module for data structures and per-connection state in the voice relay.

Key components:
- message_schemas: Pydantic models for the browser protocol, both the control
  messages the client sends and the notifications the gateway sends back.
- gemini_schemas: Lenient models for Gemini Live server frames and builders
  for the setup and client-turn frames.
- connection: RelayConnection, binding one browser WebSocket to one upstream
  session, and the derived ConnectionState.

Usage examples:
```python
from voice_relay.models.message_schemas import AudioDataMessage, ErrorNotification

message = AudioDataMessage(**{"type": "audio_data", "audio": "AAAA"})
await websocket.send_text(ErrorNotification(message="No audio data received").to_json())

from voice_relay.models.gemini_schemas import ServerMessage

frame = ServerMessage.model_validate_json('{"setupComplete": {}}')
assert frame.is_setup_complete
```
"""

from voice_relay.models.message_schemas import (
    AudioDataMessage,
    AudioNotification,
    BaseMessage,
    EndSessionMessage,
    ErrorNotification,
    IncomingMessage,
    InterruptedNotification,
    OutgoingNotification,
    PingMessage,
    PongNotification,
    ReadyNotification,
    StartSessionMessage,
    TurnCompleteNotification,
)
