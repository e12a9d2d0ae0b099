"""Chat turn flow: persist the user turn, relay it, persist the reply."""

from gemini_chat.chat.orchestrator import MAX_IMAGE_SIZE, ChatOrchestrator, to_data_uri

__all__ = ["MAX_IMAGE_SIZE", "ChatOrchestrator", "to_data_uri"]
