"""
Handlers module for the browser control messages of the voice relay.

Every handler takes the parsed message dict and the RelayConnection it arrived
on, and may return a notification model for the gateway to send back.

Key components:
- session_handlers: start_session and end_session, which bind, open and tear
  down the upstream Gemini session.
- audio_handlers: audio_data, forwarding each chunk upstream as a complete turn.
- keepalive_handlers: ping, answered with pong in every state.

Usage examples:
```python
from voice_relay.handlers.keepalive_handlers import handle_ping
from voice_relay.models.connection import RelayConnection

connection = RelayConnection(websocket, session_factory)
response = await handle_ping({"type": "ping"}, connection)
await websocket.send_text(response.to_json())
```
"""
