"""
Environment-driven settings for the relay.

Settings are read once into an immutable model at startup and shared read-only
by every upstream session. The API key is validated separately so the HTTP
surface can still come up (and report the problem on /health and /debug)
while each session attempt refuses to open a socket without a usable key.
"""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from voice_relay.config.constants import (
    API_KEY_PREFIX,
    DEFAULT_MAX_OUTPUT_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    DEFAULT_VOICE,
    SYSTEM_INSTRUCTION,
)


class ConfigurationError(ValueError):
    """Raised when the relay is missing configuration it cannot run without."""


class RelaySettings(BaseModel):
    """Read-only configuration shared by the gateway and all sessions."""

    model_config = ConfigDict(frozen=True)

    api_key: Optional[str] = Field(None, description="Gemini API key")
    model: str = Field(DEFAULT_MODEL, description="Gemini Live model identifier")
    voice: str = Field(DEFAULT_VOICE, description="Prebuilt voice for audio responses")
    temperature: float = Field(DEFAULT_TEMPERATURE, ge=0.0, le=2.0)
    max_output_tokens: int = Field(DEFAULT_MAX_OUTPUT_TOKENS, gt=0)
    system_instruction: str = Field(SYSTEM_INSTRUCTION)
    host: str = Field("0.0.0.0")
    port: int = Field(8000)
    environment: str = Field("production")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RelaySettings":
        """Build settings from environment variables (os.environ by default)."""
        env = os.environ if environ is None else environ
        return cls(
            api_key=env.get("GEMINI_API_KEY") or None,
            model=env.get("GEMINI_MODEL") or DEFAULT_MODEL,
            voice=env.get("GEMINI_VOICE") or DEFAULT_VOICE,
            host=env.get("HOST", "0.0.0.0"),
            port=int(env.get("PORT", "8000")),
            environment=env.get("ENV", "production"),
        )

    @property
    def api_key_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def masked_api_key(self) -> str:
        """First ten characters of the key, for log lines."""
        if not self.api_key:
            return "None"
        return f"{self.api_key[:10]}..."

    def validate_api_key(self) -> str:
        """
        Return the API key, or raise if it is missing or malformed.

        Raises:
            ConfigurationError: If GEMINI_API_KEY is unset or lacks the expected prefix
        """
        if not self.api_key:
            raise ConfigurationError("GEMINI_API_KEY not found in environment variables")
        if not self.api_key.startswith(API_KEY_PREFIX):
            raise ConfigurationError(
                f'Invalid GEMINI_API_KEY format - should start with "{API_KEY_PREFIX}"'
            )
        return self.api_key
