"""Pydantic models for relay requests and responses.

Provides type safety and validation for the relay HTTP contract.

Models:
    - RelayRequest: Incoming utterance with optional data-URI image
    - RelayResponse: Successful reply text
    - RelayErrorResponse: Failure description
"""

from gemini_chat.models.schemas import RelayErrorResponse, RelayRequest, RelayResponse

__all__ = ["RelayErrorResponse", "RelayRequest", "RelayResponse"]
