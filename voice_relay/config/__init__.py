"""
Configuration module for the voice relay.

This module provides centralized configuration for the application: protocol
constants, the immutable settings model loaded from the environment, and the
logging setup.

Key components:
- constants: Message type names, upstream defaults, close codes and the
  reconnect policy.
- settings: RelaySettings (read once from the environment) and the
  ConfigurationError raised when the API key is missing or malformed.
- logging_config: Console and rotating-file logging for the `voice_relay` logger.

Usage examples:
```python
from voice_relay.config.logging_config import configure_logging
from voice_relay.config.settings import RelaySettings

logger = configure_logging()
settings = RelaySettings.from_env()
settings.validate_api_key()  # raises ConfigurationError
```
"""

from voice_relay.config.settings import ConfigurationError, RelaySettings

__all__ = ["ConfigurationError", "RelaySettings"]
