"""FastAPI endpoints for Gemini Chat.

Endpoints:
    - GET /health: Service health status
    - OPTIONS /functions/v1/gemini-chat: Cross-origin pre-flight
    - POST /functions/v1/gemini-chat: Single-turn relay to Gemini
"""

from gemini_chat.api.app import app, create_app

__all__ = ["app", "create_app"]
