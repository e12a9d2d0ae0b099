"""Gemini Chat - browser chat interface backed by a Gemini relay.

Combines FastAPI for the relay endpoint, NiceGUI for the chat page,
SQLModel for per-user message history, and Pydantic for data validation.

Components:
    - api: HTTP relay endpoint and health check
    - relay: Gemini payload composition and the relay HTTP client
    - store: Per-user message persistence
    - chat: Turn orchestration (persist, relay, persist)
    - ui: Web interface for chat interactions and voice input
"""

__version__ = "0.1.0"
