"""
Check that the configured Gemini API key and model can serve a live session.

Usage:
    python check_api.py [--timeout SECONDS]

Exits 0 when the model answered a test prompt, 1 otherwise.
"""

import argparse
import asyncio
import sys
from pathlib import Path

import dotenv

sys.path.append(str(Path(__file__).parent))

from voice_relay.config.logging_config import configure_logging
from voice_relay.config.settings import ConfigurationError, RelaySettings
from voice_relay.services.connection_check import CHECK_TIMEOUT, check_connection


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Test the Gemini Live API connection")
    parser.add_argument("--timeout", type=float, default=CHECK_TIMEOUT)
    args = parser.parse_args(argv)

    dotenv.load_dotenv()
    logger = configure_logging()
    settings = RelaySettings.from_env()

    logger.info(f"API key configured: {settings.api_key_configured}")
    logger.info(f"API key length: {len(settings.api_key or '')}")
    logger.info(f"Model: {settings.model}")

    try:
        result = asyncio.run(check_connection(settings, timeout=args.timeout))
    except ConfigurationError as e:
        logger.error(str(e))
        logger.error("Get your key from: https://aistudio.google.com/")
        return 1

    if result.ok:
        logger.info("Test completed successfully - your API key is working")
        return 0

    logger.error(f"Test failed: {result.error or 'no response from model'}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
