"""FastAPI application factory and configuration.

Main application entry point with lifespan management and router
registration.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from gemini_chat.api.relay import router as relay_router
from gemini_chat.store.db import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    Creates the message tables on startup.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    # Startup
    logger.info("Starting Gemini Chat API...")
    init_db()
    yield
    # Shutdown
    logger.info("Shutting down Gemini Chat API...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    CORS headers are attached by the relay router itself so that pre-flight
    and error responses carry them too.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="Gemini Chat API",
        description=(
            "Relay between the chat page and the Gemini API. Holds the API "
            "credential server-side, forwards single-turn text and image "
            "prompts, and normalizes replies and errors."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.include_router(relay_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "gemini-chat"}

    return application


app = create_app()
