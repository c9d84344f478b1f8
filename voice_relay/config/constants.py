"""
Constants and configuration values used throughout the application.

This module defines constants that are used across different parts of the relay,
providing a centralized location for protocol names, upstream defaults and the
reconnect policy.
"""

# Logger name used throughout the application
LOGGER_NAME = "voice_relay"

# Gemini Live API endpoint (the API key is appended as a query parameter)
GEMINI_LIVE_URL = (
    "wss://generativelanguage.googleapis.com/ws/"
    "google.ai.generativelanguage.v1alpha.GenerativeService.BidiGenerateContent"
)

# Default Gemini model for the Live API
DEFAULT_MODEL = "gemini-2.0-flash-live-001"

# Gemini API keys issued by AI Studio share this prefix
API_KEY_PREFIX = "AI"

# Generation settings sent in the setup frame
DEFAULT_VOICE = "Aoede"
RESPONSE_MODALITY_AUDIO = "AUDIO"
RESPONSE_MODALITY_TEXT = "TEXT"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_OUTPUT_TOKENS = 1024

# MIME type attached to every audio chunk the browser sends
INPUT_AUDIO_MIME_TYPE = "audio/webm"

# Reconnection policy
MAX_RECONNECT_ATTEMPTS = 3
RECONNECT_DELAY = 2.0  # seconds
CONNECTION_TIMEOUT = 30  # seconds

# WebSocket close codes
CLOSE_CODE_NORMAL = 1000
CLOSE_CODE_ABNORMAL = 1006

# WebSocket configuration
WS_MAX_SIZE = 16 * 1024 * 1024  # 16MB - large enough for audio chunks

# Client -> gateway message types
MESSAGE_TYPE_START_SESSION = "start_session"
MESSAGE_TYPE_AUDIO_DATA = "audio_data"
MESSAGE_TYPE_END_SESSION = "end_session"
MESSAGE_TYPE_PING = "ping"

# Gateway -> client notification types
MESSAGE_TYPE_READY = "ready"
MESSAGE_TYPE_AUDIO = "audio"
MESSAGE_TYPE_TURN_COMPLETE = "turn_complete"
MESSAGE_TYPE_INTERRUPTED = "interrupted"
MESSAGE_TYPE_ERROR = "error"
MESSAGE_TYPE_PONG = "pong"

# System instruction sent with every setup frame
SYSTEM_INSTRUCTION = """You are Rev, the friendly AI assistant for Revolt Motors, India's leading electric motorcycle company.

Key information about Revolt Motors:
- We make electric motorcycles including the RV400 (AI-enabled flagship), RV1 (commuter bike), and RV BlazeX
- Prices start from ₹94,983 for the RV1
- Available in 25+ cities across India
- Our mission is clean, accessible commuting with next-gen mobility solutions
- We offer features like AI integration, impressive range, speed, and eco-friendly rides
- Booking starts at just ₹499

Guidelines:
- Always stay on topic about Revolt Motors, electric bikes, sustainability, and related automotive topics
- Be enthusiastic about the electric revolution and sustainable mobility
- If asked about competitors or unrelated topics, politely redirect to Revolt Motors
- Provide helpful information about our bikes, features, pricing, and availability
- Keep responses conversational and engaging
- If you don't know specific technical details, suggest visiting revoltmotors.com or contacting our sales team
- Keep responses under 30 seconds when speaking
- Be friendly and professional"""
