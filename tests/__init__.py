"""Test package for Gemini Chat.

Structure:
    - unit/: Individual function and class tests
    - integration/: End-to-end workflow tests

Leverages pytest with pytest-asyncio and pytest-check for soft assertions.
"""
