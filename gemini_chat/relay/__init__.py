"""Gemini relay logic for LLM calls.

Handles single-turn generation requests against the Gemini API.

Responsibilities:
    - Credential and generation settings from the environment
    - Data-URI image decoding into inline binary parts
    - Reply extraction with a soft fallback for empty answers
    - HTTP client used by the chat page to reach the relay

Maintains clean separation from the HTTP layer.
"""

from gemini_chat.relay.client import RelayClient, RelayClientError
from gemini_chat.relay.config import RelayConfig, RelayConfigError, get_relay_config
from gemini_chat.relay.gemini import (
    NO_RESPONSE_FALLBACK,
    GeminiClient,
    RelayError,
    UpstreamError,
)

__all__ = [
    "NO_RESPONSE_FALLBACK",
    "GeminiClient",
    "RelayClient",
    "RelayClientError",
    "RelayConfig",
    "RelayConfigError",
    "RelayError",
    "UpstreamError",
    "get_relay_config",
]
