"""HTTP client for the relay endpoint.

Used by the chat page to reach the relay the same way a browser would.
"""

import logging

import httpx

logger = logging.getLogger(__name__)

RELAY_PATH = "/functions/v1/gemini-chat"
DEFAULT_ERROR = "Failed to get response from AI"


class RelayClientError(Exception):
    """Raised when the relay call fails, carrying a user-facing message."""

    pass


class RelayClient:
    """Sends single-turn utterances to the relay and returns the reply.

    ``is_loading`` is True while a call is outstanding, so the UI can show a
    thinking indicator. No history is kept or forwarded.
    """

    def __init__(
        self,
        base_url: str,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.is_loading = False
        self._transport = transport
        self._timeout = timeout

    async def send(self, message: str, image_url: str | None = None) -> str:
        """Relay one utterance and return the model's text reply.

        Args:
            message: The user's text.
            image_url: Optional data-URI image.

        Returns:
            The reply text.

        Raises:
            RelayClientError: On transport failure or relay-reported error.
        """
        self.is_loading = True
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    f"{self.base_url}{RELAY_PATH}",
                    json={"message": message, "imageUrl": image_url},
                )
            data = response.json()
            if not response.is_success or data.get("error"):
                raise RelayClientError(data.get("error") or DEFAULT_ERROR)
            return data["response"]
        except httpx.HTTPError as e:
            logger.error(f"Relay request failed: {e}")
            raise RelayClientError(str(e) or DEFAULT_ERROR) from e
        except (ValueError, KeyError, AttributeError) as e:
            logger.error(f"Malformed relay response: {e}")
            raise RelayClientError(DEFAULT_ERROR) from e
        finally:
            self.is_loading = False
