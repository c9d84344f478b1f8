"""
Voice Relay - Browser voice client to Gemini Live API bridge

This application relays a browser-based voice chat to Google's Gemini Live API.
Each browser WebSocket connection gets its own upstream Gemini Live connection;
the relay translates a small set of browser control messages into Gemini frames
and Gemini's streaming responses back into browser notifications.

Architecture Overview:
- FastAPI server exposing the `/ws` WebSocket endpoint for browsers
- One Gemini Live session per browser connection, with a setup handshake,
  one-chunk-one-turn audio forwarding and bounded automatic reconnection
- Payloads are opaque: audio is forwarded as received, never decoded

Key Components:
- bot: The upstream Gemini session, transport error classification and client
  notification delivery
- config: Constants, environment settings and logging setup
- handlers: Handlers for the browser control messages
- models: Browser protocol models, Gemini frame models and per-connection state
- services: Standalone connectivity check against the Gemini Live API
- websocket_manager: Accepts browser connections and routes their messages

Getting Started:
1. Set up environment variables (or a .env file):
   - GEMINI_API_KEY: Your Gemini API key (starts with "AI")
   - GEMINI_MODEL: Live model to use (default gemini-2.0-flash-live-001)
   - PORT: Port to run the server on (default 8000)
   - HOST: Host to bind the server to (default 0.0.0.0)
   - LOG_LEVEL: Logging level (default INFO)

2. Check the key works:
   ```bash
   python check_api.py
   ```

3. Start the server:
   ```bash
   python run.py
   ```
"""
