"""Per-user message repository.

Every query and mutation is filtered by ``user_id``. A missing user id
turns all operations into no-ops.
"""

import logging

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from gemini_chat.store.db import get_engine
from gemini_chat.store.models import Message

logger = logging.getLogger(__name__)


class MessageStoreError(Exception):
    """Raised when the message database cannot be read or written."""

    pass


class MessageStore:
    """SQLModel-backed store of chat messages keyed by user."""

    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def list_messages(self, user_id: str | None) -> list[Message]:
        """Return the user's messages, oldest first."""
        if not user_id:
            return []

        try:
            with Session(self._engine) as session:
                return list(
                    session.exec(
                        select(Message)
                        .where(Message.user_id == user_id)
                        .order_by(Message.created_at, Message.id)
                    ).all()
                )
        except SQLAlchemyError as e:
            logger.error(f"Error loading messages: {e}")
            raise MessageStoreError("Failed to load messages") from e

    def append(
        self,
        user_id: str | None,
        content: str,
        is_from_assistant: bool,
        image_url: str | None = None,
    ) -> Message | None:
        """Insert a message; the store assigns ``id`` and ``created_at``.

        Returns:
            The stored message, or None when no user is given.

        Raises:
            MessageStoreError: If the insert fails.
        """
        if not user_id:
            return None

        message = Message(
            user_id=user_id,
            content=content,
            is_from_assistant=is_from_assistant,
            image_url=image_url,
        )
        try:
            with Session(self._engine) as session:
                session.add(message)
                session.commit()
                session.refresh(message)
        except SQLAlchemyError as e:
            logger.error(f"Error saving message: {e}")
            raise MessageStoreError("Failed to save message") from e
        return message

    def clear_all(self, user_id: str | None) -> None:
        """Delete every message owned by the user."""
        if not user_id:
            return

        try:
            with Session(self._engine) as session:
                owned = session.exec(select(Message).where(Message.user_id == user_id)).all()
                for message in owned:
                    session.delete(message)
                session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error clearing history: {e}")
            raise MessageStoreError("Failed to clear history") from e
        logger.info(f"Cleared message history for user {user_id}")


# Module-level singleton instance
_message_store: MessageStore | None = None


def get_message_store() -> MessageStore:
    """Get or create the global message store."""
    global _message_store
    if _message_store is None:
        _message_store = MessageStore()
    return _message_store
