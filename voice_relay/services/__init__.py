"""
Services module for standalone checks against external APIs.

Key components:
- connection_check: Verifies that the configured API key and model can open a
  Gemini Live session and get an answer to a text turn.

Usage examples:
```python
import asyncio

from voice_relay.config.settings import RelaySettings
from voice_relay.services.connection_check import check_connection

result = asyncio.run(check_connection(RelaySettings.from_env()))
print("OK" if result.ok else result.error)
```
"""
