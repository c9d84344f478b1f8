"""
Pydantic models and frame builders for the Gemini Live API.

Incoming server frames are parsed leniently: both the snake_case field names
and the camelCase names the service emits on the wire are accepted, and unknown
fields are ignored. Outgoing frames (setup and client turns) are built as plain
dictionaries ready for json.dumps.
"""

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from voice_relay.config.constants import INPUT_AUDIO_MIME_TYPE, RESPONSE_MODALITY_AUDIO
from voice_relay.config.settings import RelaySettings


class GeminiModel(BaseModel):
    """Base model for Gemini server frames."""

    model_config = ConfigDict(
        extra="ignore", populate_by_name=True, protected_namespaces=()
    )


class InlineData(GeminiModel):
    """Inline binary payload, base64 encoded by the service."""

    mime_type: Optional[str] = Field(
        None, validation_alias=AliasChoices("mime_type", "mimeType")
    )
    data: str = ""

    @property
    def is_audio(self) -> bool:
        return bool(self.mime_type) and self.mime_type.startswith("audio/")


class Part(GeminiModel):
    """One part of a model turn: inline data or text."""

    text: Optional[str] = None
    inline_data: Optional[InlineData] = Field(
        None, validation_alias=AliasChoices("inline_data", "inlineData")
    )


class ModelTurn(GeminiModel):
    parts: List[Part] = Field(default_factory=list)


class ServerContent(GeminiModel):
    """Streaming content for the current model turn."""

    model_turn: Optional[ModelTurn] = Field(
        None, validation_alias=AliasChoices("model_turn", "modelTurn")
    )
    turn_complete: bool = Field(
        False, validation_alias=AliasChoices("turn_complete", "turnComplete")
    )
    interrupted: bool = False

    @property
    def audio_parts(self) -> List[InlineData]:
        if not self.model_turn:
            return []
        return [
            part.inline_data
            for part in self.model_turn.parts
            if part.inline_data is not None and part.inline_data.is_audio
        ]

    @property
    def text_parts(self) -> List[str]:
        if not self.model_turn:
            return []
        return [part.text for part in self.model_turn.parts if part.text]


class ServerError(GeminiModel):
    code: Optional[int] = None
    message: Optional[str] = None
    status: Optional[str] = None


class ServerMessage(GeminiModel):
    """A single frame received from the Gemini Live API."""

    setup_complete: Optional[Dict[str, Any]] = Field(
        None, validation_alias=AliasChoices("setup_complete", "setupComplete")
    )
    server_content: Optional[ServerContent] = Field(
        None, validation_alias=AliasChoices("server_content", "serverContent")
    )
    error: Optional[ServerError] = None

    @field_validator("error", mode="before")
    @classmethod
    def coerce_error(cls, v):
        """Some error frames carry a bare string instead of an object."""
        if isinstance(v, str):
            return {"message": v}
        return v

    @property
    def is_setup_complete(self) -> bool:
        # The acknowledgement is an empty object, so presence is what matters
        return self.setup_complete is not None


def build_setup_message(
    settings: RelaySettings, response_modality: str = RESPONSE_MODALITY_AUDIO
) -> Dict[str, Any]:
    """
    Build the one-time setup frame that must precede any client turn.

    Args:
        settings: Relay settings providing model, voice and generation limits
        response_modality: AUDIO for voice chat, TEXT for connectivity checks

    Returns:
        The setup frame as a JSON-serializable dict
    """
    generation_config: Dict[str, Any] = {
        "response_modalities": [response_modality],
        "temperature": settings.temperature,
        "max_output_tokens": settings.max_output_tokens,
    }
    if response_modality == RESPONSE_MODALITY_AUDIO:
        generation_config["speech_config"] = {
            "voice_config": {
                "prebuilt_voice_config": {"voice_name": settings.voice}
            }
        }

    return {
        "setup": {
            "model": f"models/{settings.model}",
            "generation_config": generation_config,
            "system_instruction": {
                "parts": [{"text": settings.system_instruction}]
            },
        }
    }


def build_audio_turn(audio: str, mime_type: str = INPUT_AUDIO_MIME_TYPE) -> Dict[str, Any]:
    """Wrap one audio chunk as a complete single-part user turn."""
    return {
        "client_content": {
            "turns": [
                {
                    "role": "user",
                    "parts": [{"inline_data": {"mime_type": mime_type, "data": audio}}],
                }
            ],
            "turn_complete": True,
        }
    }


def build_text_turn(text: str) -> Dict[str, Any]:
    """Wrap a text prompt as a complete single-part user turn."""
    return {
        "client_content": {
            "turns": [{"role": "user", "parts": [{"text": text}]}],
            "turn_complete": True,
        }
    }
