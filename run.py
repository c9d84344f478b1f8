"""
Run script for starting the Voice Relay server.

The server refuses to start without a usable GEMINI_API_KEY; every other
failure is handled per connection once the server is up.

Usage:
    python run.py [--port PORT] [--host HOST] [--log-level LEVEL]
"""

import argparse
import os
import sys
from pathlib import Path

import dotenv
import uvicorn

sys.path.append(str(Path(__file__).parent))

from voice_relay.config.logging_config import configure_logging
from voice_relay.config.settings import ConfigurationError, RelaySettings


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Start the Voice Relay server")
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("PORT", "8000")),
        help="Port to run the server on (default: 8000 or PORT env var)",
    )
    parser.add_argument(
        "--host",
        default=os.getenv("HOST", "0.0.0.0"),
        help="Host to bind the server to (default: 0.0.0.0 or HOST env var)",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO or LOG_LEVEL env var)",
    )
    return parser.parse_args(argv)


def main(argv=None):
    """Validate configuration, then start uvicorn."""
    dotenv.load_dotenv()
    args = parse_args(argv)
    logger = configure_logging(args.log_level)

    settings = RelaySettings.from_env()
    try:
        settings.validate_api_key()
    except ConfigurationError as e:
        logger.error(str(e))
        logger.error("Create a .env file with GEMINI_API_KEY=your_key_here")
        logger.error("Get your key from: https://aistudio.google.com/")
        sys.exit(1)

    logger.info(f"Starting server on http://{args.host}:{args.port}")
    logger.info(f"Log level: {args.log_level}")
    logger.info(f"Model: {settings.model}")
    logger.info(f"API key: {settings.masked_api_key}")

    uvicorn.run(
        "voice_relay.main:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
        http="h11",
        access_log=False,
        reload=settings.environment.lower() == "development",
    )


if __name__ == "__main__":
    main()
