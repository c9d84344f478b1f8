"""
FastAPI server for the browser-to-Gemini voice relay.

This module initializes the FastAPI application that browsers connect to. The
`/ws` endpoint carries the relay protocol; `/health` and `/debug` report the
configuration the relay is running with.
"""

import platform
from datetime import datetime, timezone
from pathlib import Path

import dotenv
from fastapi import FastAPI, WebSocket

from voice_relay.config.logging_config import configure_logging
from voice_relay.config.settings import RelaySettings
from voice_relay.websocket_manager import WebSocketManager

# Load environment variables from .env file if it exists
env_path = Path(".") / ".env"
if env_path.exists():
    dotenv.load_dotenv(env_path)

logger = configure_logging()

settings = RelaySettings.from_env()

app = FastAPI(
    title="Voice Relay",
    description="Relay between a browser voice client and the Gemini Live API",
    version="1.0.0",
)

websocket_manager = WebSocketManager(settings)


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """WebSocket endpoint for browser voice clients.

    Accepts start_session, audio_data, end_session and ping messages and
    streams ready, audio, turn_complete, interrupted, error and pong
    notifications back.
    """
    await websocket_manager.handle_websocket(websocket)


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring system status.

    Returns:
        dict: Status information indicating the server is operational
    """
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "api_key_configured": settings.api_key_configured,
        "model": settings.model,
        "python_version": platform.python_version(),
    }


@app.get("/debug")
async def debug_info():
    """Configuration details useful when a session refuses to start."""
    return {
        "api_key_configured": settings.api_key_configured,
        "api_key_length": len(settings.api_key or ""),
        "api_key_prefix": settings.api_key[:5] if settings.api_key else "None",
        "model": settings.model,
        "environment": settings.environment,
        "port": settings.port,
    }


@app.get("/")
async def root():
    """Root endpoint to display basic information about the API."""
    return {
        "name": "Voice Relay",
        "description": "Relay between a browser voice client and the Gemini Live API",
        "version": "1.0.0",
        "endpoints": {
            "/ws": "WebSocket endpoint for browser voice clients",
            "/health": "Health check endpoint",
            "/debug": "Configuration details",
        },
    }


if __name__ == "__main__":
    import sys

    import uvicorn

    from voice_relay.config.settings import ConfigurationError

    try:
        settings.validate_api_key()
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(f"Starting server on http://{settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, http="h11")
