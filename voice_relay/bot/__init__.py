"""
Bot module for relaying browser audio to the Gemini Live API.

Key components:
- GeminiLiveSession: One upstream Gemini Live connection per browser client,
  covering the setup handshake, turn forwarding, frame translation and
  bounded automatic reconnection.
- classify_transport_error: Best-effort mapping of transport failures to
  client-facing error text.
- send_notification: Delivery of notifications to a browser socket that may
  already have gone away.

Usage examples:
```python
from voice_relay.bot import GeminiLiveSession
from voice_relay.config.settings import RelaySettings

session = GeminiLiveSession(RelaySettings.from_env())
await session.connect(browser_websocket)   # sends `ready` once set up
await session.send_audio(base64_webm_chunk)
await session.disconnect()
```
"""

from voice_relay.bot.gemini_session import GeminiLiveSession
from voice_relay.bot.notifier import send_notification
from voice_relay.bot.transport_errors import classify_transport_error

__all__ = ["GeminiLiveSession", "classify_transport_error", "send_notification"]
