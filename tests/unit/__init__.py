"""Unit tests for individual components in isolation.

Ensures fast execution with minimal dependencies.

Coverage:
    - relay/: Configuration, request composition, reply extraction, client
    - store/: Per-user persistence and history view
    - chat/: Turn orchestration
    - ui/: Voice input state

Uses fakes for the relay and an in-memory database for the store.
"""
