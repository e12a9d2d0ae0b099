"""Message persistence scoped to a user identity.

Supports listing a user's history in creation order, appending a turn,
and clearing the whole history. There is no update path.
"""

from gemini_chat.store.db import get_engine, init_db
from gemini_chat.store.history import ChatHistory
from gemini_chat.store.message_store import MessageStore, MessageStoreError, get_message_store
from gemini_chat.store.models import Message

__all__ = [
    "ChatHistory",
    "Message",
    "MessageStore",
    "MessageStoreError",
    "get_engine",
    "get_message_store",
    "init_db",
]
