"""Chat turn orchestration.

A turn persists the user's message, relays it to the model, and persists
the reply. At most one turn runs at a time per page session: ``in_flight``
is set before the first storage call and released when the turn ends,
whether it succeeded or not.
"""

import base64
import logging
from collections.abc import Callable
from typing import Protocol

from gemini_chat.relay.client import RelayClientError
from gemini_chat.store.history import ChatHistory
from gemini_chat.store.message_store import MessageStoreError
from gemini_chat.ui.voice_input import VoiceInput

logger = logging.getLogger(__name__)

MAX_IMAGE_SIZE = 5 * 1024 * 1024  # 5MB
SEND_FAILED = "Failed to send message"


class Relay(Protocol):
    async def send(self, message: str, image_url: str | None = None) -> str: ...


Notifier = Callable[[str, str], None]


def to_data_uri(content: bytes, mime_type: str) -> str:
    """Encode image bytes as a ``data:<mime>;base64,<payload>`` URI."""
    payload = base64.b64encode(content).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


class ChatOrchestrator:
    """Drives chat turns for one user session.

    Two producers write the ``draft`` cell: typing through ``set_draft`` and
    speech through the voice transcript. The last write wins.

    Attributes:
        draft: Current input text.
        staged_image: Data-URI of the image attached to the next turn.
        in_flight: True while a turn is running.
    """

    def __init__(
        self,
        history: ChatHistory,
        relay: Relay,
        notify: Notifier,
        voice: VoiceInput | None = None,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            history: The user's message history.
            relay: Client used to reach the model relay.
            notify: Shows a user-visible error as ``(title, description)``.
            voice: Optional speech input; its transcripts overwrite the draft.
            on_change: Called whenever visible state changes.
        """
        self.history = history
        self.relay = relay
        self.voice = voice
        self.draft = ""
        self.staged_image: str | None = None
        self.in_flight = False
        self._notify = notify
        self._on_change = on_change

        if voice is not None:
            voice.on_transcript = self.set_draft

    @property
    def typing_locked(self) -> bool:
        """Manual edits are blocked during a turn and while voice input is listening."""
        return self.in_flight or (self.voice is not None and self.voice.is_listening)

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()

    def set_draft(self, text: str) -> None:
        self.draft = text
        self._changed()

    def stage_image(self, content: bytes, mime_type: str) -> bool:
        """Attach an image to the next turn.

        Images above ``MAX_IMAGE_SIZE`` are rejected with a notification and
        leave the current state untouched.

        Returns:
            True if the image was staged.
        """
        if len(content) > MAX_IMAGE_SIZE:
            self.reject_oversized_image()
            return False

        self.staged_image = to_data_uri(content, mime_type or "application/octet-stream")
        self._changed()
        return True

    def reject_oversized_image(self) -> None:
        self._notify("File too large", "Please select an image smaller than 5MB")

    def remove_image(self) -> None:
        self.staged_image = None
        self._changed()

    def toggle_voice(self) -> None:
        if self.voice is None:
            return
        if self.voice.is_listening:
            self.voice.stop()
        else:
            self.voice.start()
        self._changed()

    def _clear_input(self) -> None:
        self.draft = ""
        self.staged_image = None
        if self.voice is not None:
            self.voice.reset()

    async def submit(self) -> bool:
        """Run one chat turn with the current draft and staged image.

        Returns:
            False if nothing was sent (empty input or a turn already running),
            True once the turn has run, even if it ended in an error.
        """
        text = self.draft.strip()
        image_url = self.staged_image
        if (not text and not image_url) or self.in_flight:
            return False

        self.in_flight = True
        self._changed()
        try:
            await self.history.save(text, is_from_assistant=False, image_url=image_url)

            self._clear_input()
            self._changed()

            reply = await self.relay.send(text, image_url)
            await self.history.save(reply, is_from_assistant=True)
        except MessageStoreError as e:
            logger.error(f"Chat turn failed to persist: {e}")
            self._notify("Error", SEND_FAILED)
        except RelayClientError as e:
            logger.error(f"Chat turn failed at relay: {e}")
            self._notify("Error", str(e) or SEND_FAILED)
        except Exception as e:
            logger.exception(f"Chat turn failed: {e}")
            self._notify("Error", SEND_FAILED)
        finally:
            self.in_flight = False
            self._changed()
        return True

    async def clear_history(self) -> None:
        """Delete the user's whole conversation."""
        try:
            await self.history.clear()
        except MessageStoreError as e:
            logger.error(f"Failed to clear history: {e}")
            self._notify("Error", "Failed to clear history")
        self._changed()
