"""Unit tests for ChatOrchestrator turn handling.

Uses a real in-memory store and a fake relay.
"""

import asyncio
from unittest.mock import patch

import httpx
import pytest

from gemini_chat.chat.orchestrator import (
    MAX_IMAGE_SIZE,
    SEND_FAILED,
    ChatOrchestrator,
    to_data_uri,
)
from gemini_chat.relay.client import RelayClientError
from gemini_chat.store.history import ChatHistory
from gemini_chat.store.message_store import MessageStore, MessageStoreError
from gemini_chat.ui.voice_input import VoiceInput


class FakeRelay:
    """Relay double recording calls and replying with fixed text."""

    def __init__(self, reply: str = "Hello from AI", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[tuple[str, str | None]] = []
        self.gate: asyncio.Event | None = None

    async def send(self, message: str, image_url: str | None = None) -> str:
        self.calls.append((message, image_url))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.reply


class Notifications:
    def __init__(self) -> None:
        self.items: list[tuple[str, str]] = []

    def __call__(self, title: str, description: str) -> None:
        self.items.append((title, description))


@pytest.fixture
def relay() -> FakeRelay:
    return FakeRelay()


@pytest.fixture
def notify() -> Notifications:
    return Notifications()


@pytest.fixture
def history(store: MessageStore) -> ChatHistory:
    return ChatHistory(store, "alice")


@pytest.fixture
def orchestrator(
    history: ChatHistory, relay: FakeRelay, notify: Notifications
) -> ChatOrchestrator:
    return ChatOrchestrator(history, relay, notify)


class TestSubmit:
    """Tests for a full chat turn."""

    async def test_turn_persists_user_and_assistant(
        self,
        orchestrator: ChatOrchestrator,
        relay: FakeRelay,
        store: MessageStore,
        notify: Notifications,
    ) -> None:
        orchestrator.set_draft("  Hello  ")

        assert await orchestrator.submit() is True

        messages = store.list_messages("alice")
        assert [(m.content, m.is_from_assistant) for m in messages] == [
            ("Hello", False),
            ("Hello from AI", True),
        ]
        assert relay.calls == [("Hello", None)]
        assert notify.items == []
        assert orchestrator.in_flight is False

    async def test_image_is_sent_and_stored_on_user_turn_only(
        self, orchestrator: ChatOrchestrator, relay: FakeRelay, store: MessageStore
    ) -> None:
        orchestrator.set_draft("What is this?")
        orchestrator.stage_image(b"\x89PNG", "image/png")
        image_url = orchestrator.staged_image

        await orchestrator.submit()

        user_turn, ai_turn = store.list_messages("alice")
        assert user_turn.image_url == image_url
        assert ai_turn.image_url is None
        assert relay.calls == [("What is this?", image_url)]

    async def test_image_only_turn_is_allowed(
        self, orchestrator: ChatOrchestrator, relay: FakeRelay
    ) -> None:
        orchestrator.stage_image(b"\xff\xd8\xff", "image/jpeg")

        assert await orchestrator.submit() is True
        assert relay.calls[0][0] == ""

    @pytest.mark.parametrize("draft", ["", "   ", "\n\t"])
    async def test_empty_submission_is_noop(
        self,
        orchestrator: ChatOrchestrator,
        relay: FakeRelay,
        store: MessageStore,
        draft: str,
    ) -> None:
        orchestrator.set_draft(draft)

        assert await orchestrator.submit() is False
        assert store.list_messages("alice") == []
        assert relay.calls == []

    async def test_input_cleared_after_user_turn_saved(
        self, orchestrator: ChatOrchestrator, relay: FakeRelay
    ) -> None:
        """Input is cleared as soon as the user turn is stored, before the reply."""
        relay.gate = asyncio.Event()
        orchestrator.set_draft("Hello")
        orchestrator.stage_image(b"img", "image/png")

        task = asyncio.create_task(orchestrator.submit())
        while not relay.calls:
            await asyncio.sleep(0)

        assert orchestrator.draft == ""
        assert orchestrator.staged_image is None
        assert orchestrator.in_flight is True

        relay.gate.set()
        await task
        assert orchestrator.in_flight is False

    async def test_second_submit_while_in_flight_is_rejected(
        self, orchestrator: ChatOrchestrator, relay: FakeRelay, store: MessageStore
    ) -> None:
        relay.gate = asyncio.Event()
        orchestrator.set_draft("first")
        task = asyncio.create_task(orchestrator.submit())
        while not relay.calls:
            await asyncio.sleep(0)

        orchestrator.set_draft("second")
        assert await orchestrator.submit() is False
        assert len(store.list_messages("alice")) == 1
        assert len(relay.calls) == 1

        relay.gate.set()
        await task
        assert [m.content for m in store.list_messages("alice")] == ["first", "Hello from AI"]

    async def test_store_failure_keeps_input_and_skips_relay(
        self,
        orchestrator: ChatOrchestrator,
        relay: FakeRelay,
        store: MessageStore,
        notify: Notifications,
    ) -> None:
        orchestrator.set_draft("Hello")
        orchestrator.stage_image(b"img", "image/png")
        image_url = orchestrator.staged_image

        with patch.object(store, "append", side_effect=MessageStoreError("write rejected")):
            await orchestrator.submit()

        assert relay.calls == []
        assert orchestrator.draft == "Hello"
        assert orchestrator.staged_image == image_url
        assert notify.items == [("Error", SEND_FAILED)]
        assert orchestrator.in_flight is False

    async def test_relay_failure_notifies_once(
        self,
        orchestrator: ChatOrchestrator,
        relay: FakeRelay,
        store: MessageStore,
        notify: Notifications,
    ) -> None:
        relay.error = RelayClientError("Gemini API error: 500")
        orchestrator.set_draft("Hello")

        await orchestrator.submit()

        assert notify.items == [("Error", "Gemini API error: 500")]
        assert [m.content for m in store.list_messages("alice")] == ["Hello"]
        assert orchestrator.draft == ""
        assert orchestrator.in_flight is False

    async def test_can_submit_again_after_failure(
        self, orchestrator: ChatOrchestrator, relay: FakeRelay
    ) -> None:
        relay.error = RelayClientError("Failed to get response from AI")
        orchestrator.set_draft("first")
        await orchestrator.submit()

        relay.error = None
        orchestrator.set_draft("second")

        assert await orchestrator.submit() is True
        assert [c[0] for c in relay.calls] == ["first", "second"]

    @pytest.mark.parametrize(
        "error", [RuntimeError("connection reset"), httpx.InvalidURL("bad url")]
    )
    async def test_unexpected_relay_error_notifies_and_releases_turn(
        self,
        orchestrator: ChatOrchestrator,
        relay: FakeRelay,
        notify: Notifications,
        error: Exception,
    ) -> None:
        relay.error = error
        orchestrator.set_draft("first")

        assert await orchestrator.submit() is True
        assert notify.items == [("Error", SEND_FAILED)]
        assert orchestrator.in_flight is False

        relay.error = None
        orchestrator.set_draft("second")

        assert await orchestrator.submit() is True
        assert [c[0] for c in relay.calls] == ["first", "second"]

    async def test_on_change_reports_in_flight(
        self, history: ChatHistory, relay: FakeRelay, notify: Notifications
    ) -> None:
        states: list[bool] = []
        orchestrator = ChatOrchestrator(history, relay, notify)
        orchestrator._on_change = lambda: states.append(orchestrator.in_flight)
        orchestrator.draft = "Hello"

        await orchestrator.submit()

        assert states[0] is True
        assert states[-1] is False


class TestStageImage:
    """Tests for image staging."""

    def test_stages_data_uri(self, orchestrator: ChatOrchestrator) -> None:
        assert orchestrator.stage_image(b"AAA", "image/png") is True
        assert orchestrator.staged_image == "data:image/png;base64,QUFB"

    def test_rejects_oversized_image(
        self, orchestrator: ChatOrchestrator, notify: Notifications
    ) -> None:
        assert orchestrator.stage_image(b"x" * (MAX_IMAGE_SIZE + 1), "image/png") is False

        assert orchestrator.staged_image is None
        assert notify.items == [("File too large", "Please select an image smaller than 5MB")]

    def test_accepts_image_at_limit(self, orchestrator: ChatOrchestrator) -> None:
        assert orchestrator.stage_image(b"x" * MAX_IMAGE_SIZE, "image/png") is True

    def test_oversized_image_keeps_previous_one(self, orchestrator: ChatOrchestrator) -> None:
        orchestrator.stage_image(b"small", "image/png")
        previous = orchestrator.staged_image

        orchestrator.stage_image(b"x" * (MAX_IMAGE_SIZE + 1), "image/png")

        assert orchestrator.staged_image == previous

    async def test_oversized_image_never_reaches_store_or_relay(
        self, orchestrator: ChatOrchestrator, relay: FakeRelay, store: MessageStore
    ) -> None:
        orchestrator.stage_image(b"x" * (MAX_IMAGE_SIZE + 1), "image/png")

        assert await orchestrator.submit() is False
        assert store.list_messages("alice") == []
        assert relay.calls == []

    def test_reject_oversized_image_notifies(
        self, orchestrator: ChatOrchestrator, notify: Notifications
    ) -> None:
        orchestrator.stage_image(b"small", "image/png")
        previous = orchestrator.staged_image

        orchestrator.reject_oversized_image()

        assert notify.items == [("File too large", "Please select an image smaller than 5MB")]
        assert orchestrator.staged_image == previous

    def test_remove_image(self, orchestrator: ChatOrchestrator) -> None:
        orchestrator.stage_image(b"img", "image/png")
        orchestrator.remove_image()

        assert orchestrator.staged_image is None

    def test_to_data_uri(self) -> None:
        assert to_data_uri(b"hi", "image/gif") == "data:image/gif;base64,aGk="


class TestVoiceDraft:
    """Tests for voice transcript handling in the draft."""

    @pytest.fixture
    def voice(self) -> VoiceInput:
        voice = VoiceInput(run_javascript=lambda code: None)
        voice.handle_support({"supported": True})
        return voice

    def test_transcript_overwrites_typed_text(
        self, history: ChatHistory, relay: FakeRelay, notify: Notifications, voice: VoiceInput
    ) -> None:
        orchestrator = ChatOrchestrator(history, relay, notify, voice=voice)
        orchestrator.set_draft("typed text")

        voice.handle_result(
            {"resultIndex": 0, "results": [{"transcript": "spoken", "isFinal": True}]}
        )

        assert orchestrator.draft == "spoken"

    async def test_submit_resets_transcript(
        self, history: ChatHistory, relay: FakeRelay, notify: Notifications, voice: VoiceInput
    ) -> None:
        orchestrator = ChatOrchestrator(history, relay, notify, voice=voice)
        voice.handle_result(
            {"resultIndex": 0, "results": [{"transcript": "hello", "isFinal": True}]}
        )

        await orchestrator.submit()

        assert voice.transcript == ""
        assert relay.calls == [("hello", None)]

    def test_toggle_voice(
        self, history: ChatHistory, relay: FakeRelay, notify: Notifications, voice: VoiceInput
    ) -> None:
        orchestrator = ChatOrchestrator(history, relay, notify, voice=voice)

        orchestrator.toggle_voice()
        assert voice.is_listening is True

        orchestrator.toggle_voice()
        assert voice.is_listening is False

    def test_typing_locked_while_listening(
        self, history: ChatHistory, relay: FakeRelay, notify: Notifications, voice: VoiceInput
    ) -> None:
        orchestrator = ChatOrchestrator(history, relay, notify, voice=voice)
        assert orchestrator.typing_locked is False

        orchestrator.toggle_voice()
        assert orchestrator.typing_locked is True

        orchestrator.toggle_voice()
        assert orchestrator.typing_locked is False

    async def test_typing_locked_while_in_flight(
        self, history: ChatHistory, relay: FakeRelay, notify: Notifications, voice: VoiceInput
    ) -> None:
        orchestrator = ChatOrchestrator(history, relay, notify, voice=voice)
        relay.gate = asyncio.Event()
        orchestrator.set_draft("Hello")

        task = asyncio.create_task(orchestrator.submit())
        while not relay.calls:
            await asyncio.sleep(0)
        assert orchestrator.typing_locked is True

        relay.gate.set()
        await task
        assert orchestrator.typing_locked is False


class TestClearHistory:
    async def test_clears_user_history(
        self, orchestrator: ChatOrchestrator, store: MessageStore
    ) -> None:
        orchestrator.set_draft("Hello")
        await orchestrator.submit()

        await orchestrator.clear_history()

        assert store.list_messages("alice") == []
        assert orchestrator.history.messages == []

    async def test_failure_notifies(
        self, orchestrator: ChatOrchestrator, store: MessageStore, notify: Notifications
    ) -> None:
        with patch.object(store, "clear_all", side_effect=MessageStoreError("boom")):
            await orchestrator.clear_history()

        assert notify.items == [("Error", "Failed to clear history")]
