"""
Best-effort classification of upstream transport failures.

The Gemini Live endpoint does not surface structured error codes on a failed
WebSocket handshake, so failures are mapped to client-facing text by matching
substrings of the exception message. Patterns are checked in order and the
first match wins.
"""

from typing import List, Tuple, Union

GENERIC_CONNECTION_ERROR = "Connection to AI service failed"

# (substrings, client-facing message)
TRANSPORT_ERROR_PATTERNS: List[Tuple[Tuple[str, ...], str]] = [
    (("401", "Unauthorized"), "Invalid API key - check your GEMINI_API_KEY"),
    (("403",), "API access denied - check permissions"),
    (("429",), "Rate limit exceeded - please wait"),
    (("500",), "AI service temporarily unavailable"),
]


def classify_transport_error(error: Union[BaseException, str, None]) -> str:
    """
    Map a transport failure to the message shown to the client.

    Args:
        error: The exception raised by the transport, or its message

    Returns:
        A client-facing error description
    """
    text = str(error) if error is not None else ""
    if not text:
        return GENERIC_CONNECTION_ERROR

    for needles, message in TRANSPORT_ERROR_PATTERNS:
        if any(needle in text for needle in needles):
            return message
    return GENERIC_CONNECTION_ERROR
