"""Gemini relay core: request composition, upstream call, reply extraction.

Each call is single-turn. No prior conversation is forwarded to the model,
even though the user's history is persisted.
"""

import logging
from typing import Any

import httpx
from pydantic import BaseModel

from gemini_chat.relay.config import RelayConfig

logger = logging.getLogger(__name__)

NO_RESPONSE_FALLBACK = "No response from AI"


class RelayError(Exception):
    """Raised when a relay request cannot be completed."""

    pass


class UpstreamError(RelayError):
    """Raised when the Gemini API answers with a non-success status."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Gemini API error: {status_code}")
        self.status_code = status_code


class InlineImage(BaseModel):
    """Image decoded from a data-URI, in Gemini ``inlineData`` shape."""

    mime_type: str
    data: str


def parse_data_uri(data_uri: str) -> InlineImage:
    """Split a ``data:<mime>;base64,<payload>`` URI into MIME type and payload.

    Args:
        data_uri: The encoded image.

    Returns:
        InlineImage with the raw base64 payload and its MIME type.

    Raises:
        RelayError: If the URI lacks the expected delimiters.
    """
    header, sep, payload = data_uri.partition(",")
    _, colon, mime_type = header.split(";")[0].partition(":")
    if not sep or not colon or not mime_type or not payload:
        raise RelayError("Invalid image data URI")
    return InlineImage(mime_type=mime_type, data=payload.split(",")[0])


def build_request_body(
    message: str,
    image_url: str | None,
    config: RelayConfig,
) -> dict[str, Any]:
    """Compose the ``generateContent`` request body.

    The image part, when present, precedes the text part.
    """
    parts: list[dict[str, Any]] = []

    if image_url:
        image = parse_data_uri(image_url)
        parts.append({"inlineData": {"mimeType": image.mime_type, "data": image.data}})

    parts.append({"text": message})

    return {
        "contents": [{"parts": parts}],
        "generationConfig": {
            "temperature": config.temperature,
            "maxOutputTokens": config.max_output_tokens,
        },
    }


def extract_reply_text(payload: Any) -> str:
    """Return the first candidate's first text part.

    A missing field yields ``NO_RESPONSE_FALLBACK`` rather than an error so
    the conversation keeps going.
    """
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return NO_RESPONSE_FALLBACK
    return text or NO_RESPONSE_FALLBACK


class GeminiClient:
    """Thin async client for the Gemini ``generateContent`` endpoint."""

    def __init__(
        self,
        config: RelayConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Relay configuration with credential and model settings.
            transport: Optional httpx transport (tests swap in a mock).
        """
        self._config = config
        self._transport = transport

    async def generate(self, message: str, image_url: str | None = None) -> str:
        """Send one utterance to Gemini and return the reply text.

        Args:
            message: The user's text.
            image_url: Optional data-URI image attached to the turn.

        Returns:
            The model's reply, or the fallback text when none was produced.

        Raises:
            RelayError: If the image cannot be decoded.
            UpstreamError: If Gemini answers with a non-success status.
            httpx.HTTPError: On transport failure.
        """
        body = build_request_body(message, image_url, self._config)

        async with httpx.AsyncClient(timeout=None, transport=self._transport) as client:
            response = await client.post(
                self._config.generate_url,
                params={"key": self._config.api_key},
                json=body,
            )

        if not response.is_success:
            logger.error(f"Gemini API error: {response.text}")
            raise UpstreamError(response.status_code)

        return extract_reply_text(response.json())
