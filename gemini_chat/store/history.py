"""Per-session view over one user's message history.

Keeps an in-memory copy of the user's messages in step with the store.
Store calls run in a worker thread so the event loop stays responsive.
"""

import asyncio
import logging

from gemini_chat.store.message_store import MessageStore, MessageStoreError
from gemini_chat.store.models import Message

logger = logging.getLogger(__name__)


class ChatHistory:
    """Messages of a single user, loaded once and appended as turns happen."""

    def __init__(self, store: MessageStore, user_id: str | None) -> None:
        self.user_id = user_id
        self.messages: list[Message] = []
        self.loading = True
        self._store = store

    async def load(self) -> None:
        """Load the user's history. Failures are logged and leave it empty."""
        if not self.user_id:
            self.messages = []
            self.loading = False
            return

        try:
            self.messages = await asyncio.to_thread(self._store.list_messages, self.user_id)
        except MessageStoreError as e:
            logger.error(f"Error loading messages: {e}")
        finally:
            self.loading = False

    async def save(
        self,
        content: str,
        is_from_assistant: bool,
        image_url: str | None = None,
    ) -> Message | None:
        """Persist a message and append it to the in-memory list.

        Raises:
            MessageStoreError: If the store rejects the write.
        """
        if not self.user_id:
            return None

        message = await asyncio.to_thread(
            self._store.append, self.user_id, content, is_from_assistant, image_url
        )
        if message is not None:
            self.messages.append(message)
        return message

    async def clear(self) -> None:
        """Delete the user's whole history.

        Raises:
            MessageStoreError: If the delete fails.
        """
        if not self.user_id:
            return

        await asyncio.to_thread(self._store.clear_all, self.user_id)
        self.messages = []
