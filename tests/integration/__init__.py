"""Integration tests for components working together as a system.

Coverage:
    - Relay endpoint with real HTTP requests through the ASGI app
    - Full chat turn from orchestrator to stored reply

The Gemini API is the only replaced component; no network access needed.
"""
