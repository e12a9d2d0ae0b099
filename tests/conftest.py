"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - engine: In-memory SQLite engine with the message tables created
    - store: MessageStore over the in-memory engine
    - gemini_api_key: GEMINI_API_KEY set for the duration of a test
    - upstream: Stand-in for the Gemini API, served through httpx.MockTransport
    - relay_app: FastAPI app whose relay talks to the stand-in upstream
    - async_client: HTTPX client for API testing
"""

import json
from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from gemini_chat.api.app import create_app
from gemini_chat.api.relay import get_upstream_transport
from gemini_chat.store.db import init_db
from gemini_chat.store.message_store import MessageStore


class UpstreamStub:
    """Records Gemini requests and answers with a canned response."""

    def __init__(self) -> None:
        self.status_code = 200
        self.body: Any = {"candidates": [{"content": {"parts": [{"text": "Hi there!"}]}}]}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.body, str):
            return httpx.Response(self.status_code, text=self.body)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last_body(self) -> dict[str, Any]:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def engine() -> Engine:
    """Create an in-memory database shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    return engine


@pytest.fixture
def store(engine: Engine) -> MessageStore:
    return MessageStore(engine)


@pytest.fixture
def gemini_api_key(monkeypatch: pytest.MonkeyPatch) -> str:
    """Set a test API key and default upstream settings."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.delenv("GEMINI_BASE_URL", raising=False)
    monkeypatch.delenv("GEMINI_MODEL", raising=False)
    return "test-key"


@pytest.fixture
def upstream() -> UpstreamStub:
    return UpstreamStub()


@pytest.fixture
def relay_app(upstream: UpstreamStub) -> FastAPI:
    """FastAPI app with the Gemini call routed to the upstream stub."""
    app = create_app()
    app.dependency_overrides[get_upstream_transport] = lambda: upstream.transport
    return app


@pytest.fixture
async def async_client(relay_app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=relay_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
