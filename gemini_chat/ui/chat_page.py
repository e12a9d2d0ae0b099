"""NiceGUI chat page with image attachments and voice input."""

import logging
import os
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from nicegui import app, events, ui

from gemini_chat.chat.orchestrator import MAX_IMAGE_SIZE, ChatOrchestrator
from gemini_chat.relay.client import RelayClient
from gemini_chat.store.db import init_db
from gemini_chat.store.history import ChatHistory
from gemini_chat.store.message_store import get_message_store
from gemini_chat.store.models import Message
from gemini_chat.ui.voice_input import VOICE_SCRIPT, VoiceInput

logger = logging.getLogger(__name__)

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }

    body { background: linear-gradient(135deg, #eff6ff 0%, #faf5ff 100%); min-height: 100vh; }

    .app-container {
        background: rgba(255, 255, 255, 0.85);
        border-radius: 16px;
        box-shadow: 0 10px 30px rgba(0, 0, 0, 0.08);
        overflow: hidden;
    }

    .header { background: linear-gradient(90deg, #3b82f6 0%, #8b5cf6 100%); }

    .message-user {
        background: linear-gradient(90deg, #3b82f6 0%, #8b5cf6 100%);
        color: white;
        border-radius: 18px 18px 4px 18px;
    }

    .message-assistant {
        background: white;
        color: #1f2937;
        border: 1px solid #e5e7eb;
        border-radius: 18px 18px 18px 4px;
    }

    .avatar-user { background: #3b82f6; }
    .avatar-assistant { background: #8b5cf6; }

    .typing-dot {
        width: 8px; height: 8px;
        background: #8b5cf6;
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.2s; }
    .typing-dot:nth-child(3) { animation-delay: 0.4s; }

    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }

    .input-box {
        background: #f9fafb;
        border: 1px solid #e5e7eb;
        border-radius: 12px;
    }
    .input-box:focus-within { border-color: #8b5cf6; }

    .send-btn { background: linear-gradient(90deg, #3b82f6 0%, #8b5cf6 100%) !important; }
</style>
"""


def resolve_timezone(name: object) -> tzinfo | None:
    """Zone for an IANA name reported by the browser, or None if unknown."""
    if not isinstance(name, str) or not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        logger.warning(f"Unknown browser timezone {name!r}: {e}")
        return None


def format_time(created_at: datetime, tz: tzinfo | None = None) -> str:
    """HH:MM display for a stored (UTC) timestamp.

    Uses the browser's zone when known, otherwise the server's local zone.
    """
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    return created_at.astimezone(tz).strftime("%H:%M")


def create_image_upload(
    orchestrator: ChatOrchestrator,
    on_upload: Callable[[events.UploadEventArguments], Awaitable[None]],
) -> ui.upload:
    """Hidden image picker. The browser refuses files above ``MAX_IMAGE_SIZE``."""
    return (
        ui.upload(
            on_upload=on_upload,
            on_rejected=orchestrator.reject_oversized_image,
            max_file_size=MAX_IMAGE_SIZE,
            auto_upload=True,
        )
        .props("accept=image/*")
        .classes("hidden")
    )


@ui.page("/")
async def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    ui.add_body_html(VOICE_SCRIPT)

    user_id = app.storage.browser.get("id")
    logger.debug(f"Chat page opened for user {user_id}")
    history = ChatHistory(get_message_store(), user_id)
    relay = RelayClient(API_BASE_URL)
    voice = VoiceInput()
    browser_tz: tzinfo | None = None

    def notify(title: str, description: str) -> None:
        ui.notify(title, caption=description, type="negative")

    messages_container: ui.column
    preview_container: ui.row
    mic_btn: ui.button

    def render_avatar(is_user: bool) -> None:
        css = "avatar-user" if is_user else "avatar-assistant"
        icon = "person" if is_user else "smart_toy"
        with ui.element("div").classes(
            f"w-8 h-8 rounded-full flex items-center justify-center shrink-0 {css}"
        ):
            ui.icon(icon).classes("text-white text-base")

    def render_message(msg: Message) -> None:
        is_user = not msg.is_from_assistant
        align = "justify-end" if is_user else "justify-start"
        bubble = "message-user" if is_user else "message-assistant"

        with ui.row().classes(f"w-full {align} gap-3 items-end no-wrap"):
            if not is_user:
                render_avatar(False)
            with ui.column().classes("max-w-[80%] gap-1"):
                with ui.element("div").classes(f"px-4 py-3 {bubble}"):
                    if msg.image_url:
                        ui.image(msg.image_url).classes("max-w-xs rounded-lg mb-2")
                    if msg.content:
                        if is_user:
                            ui.label(msg.content).classes("text-sm whitespace-pre-wrap")
                        else:
                            ui.markdown(msg.content).classes("text-sm")
                ui.label(format_time(msg.created_at, browser_tz)).classes(
                    f"text-[10px] text-gray-400 {'self-end' if is_user else 'self-start'}"
                )
            if is_user:
                render_avatar(True)

    def refresh() -> None:
        messages_container.clear()
        with messages_container:
            if history.loading:
                ui.spinner(size="lg").classes("self-center")
            elif not history.messages:
                with ui.column().classes("w-full h-64 items-center justify-center gap-3"):
                    ui.icon("smart_toy").classes("text-5xl text-gray-300")
                    ui.label("Start a conversation with your AI assistant!").classes(
                        "text-gray-400"
                    )
            else:
                for msg in history.messages:
                    render_message(msg)

        preview_container.clear()
        with preview_container:
            if orchestrator.staged_image:
                with ui.element("div").classes("relative"):
                    ui.image(orchestrator.staged_image).classes("w-20 h-20 rounded-lg")
                    ui.button(icon="close", on_click=orchestrator.remove_image).props(
                        "round dense size=xs color=negative"
                    ).classes("absolute -top-2 -right-2")

        mic_btn.set_visibility(voice.is_supported)
        mic_btn.props(f"icon={'mic_off' if voice.is_listening else 'mic'}")
        scroll_area.scroll_to(percent=1.0)

    orchestrator = ChatOrchestrator(history, relay, notify, voice=voice, on_change=refresh)
    voice.on_change = refresh
    voice.attach()

    async def handle_upload(e: events.UploadEventArguments) -> None:
        orchestrator.stage_image(e.content.read(), e.type)
        upload.reset()

    async def send_message() -> None:
        await orchestrator.submit()

    # === UI Layout ===
    with (
        ui.element("div").classes("w-full min-h-screen p-4 md:p-8"),
        ui.column().classes("w-full max-w-4xl mx-auto app-container").style(
            "height: calc(100vh - 4rem)"
        ),
    ):
        # Header
        with ui.row().classes("w-full header px-5 py-4 items-center justify-between"):
            with ui.row().classes("items-center gap-3"):
                ui.icon("smart_toy").classes("text-white text-3xl")
                ui.label("AI Assistant").classes("text-lg font-semibold text-white")
            ui.button(icon="delete", on_click=orchestrator.clear_history).props(
                "flat round color=white"
            ).tooltip("Clear history")

        # Messages
        with (
            ui.scroll_area().classes("flex-grow w-full") as scroll_area,
            ui.column().classes("w-full p-5"),
        ):
            messages_container = ui.column().classes("w-full gap-4")

        # Thinking indicator
        with ui.row().classes("px-5 gap-3 items-end") as thinking_row:
            render_avatar(False)
            with ui.element("div").classes("message-assistant px-4 py-3"):
                with ui.row().classes("gap-1"):
                    for _ in range(3):
                        ui.element("div").classes("typing-dot")
        thinking_row.bind_visibility_from(relay, "is_loading")

        # Input
        with ui.column().classes("w-full p-4 gap-2 bg-white border-t"):
            preview_container = ui.row().classes("gap-2")
            with ui.row().classes("w-full gap-2 items-end no-wrap"):
                upload = create_image_upload(orchestrator, handle_upload)
                ui.button(
                    icon="image", on_click=lambda: upload.run_method("pickFiles")
                ).props("flat round").bind_enabled_from(
                    orchestrator, "in_flight", backward=lambda busy: not busy
                )
                mic_btn = (
                    ui.button(icon="mic", on_click=orchestrator.toggle_voice)
                    .props("flat round")
                    .bind_enabled_from(orchestrator, "in_flight", backward=lambda b: not b)
                )
                with ui.element("div").classes("flex-grow input-box px-3 py-1"):
                    (
                        ui.textarea(placeholder="Type your message or use voice input...")
                        .props("autogrow borderless dense rows=1")
                        .classes("w-full")
                        .bind_value(orchestrator, "draft")
                        .bind_enabled_from(
                            orchestrator, "typing_locked", backward=lambda locked: not locked
                        )
                        .on("keydown.enter.prevent", send_message)
                    )
                (
                    ui.button(icon="send", on_click=send_message)
                    .props("round unelevated")
                    .classes("send-btn")
                    .bind_enabled_from(orchestrator, "in_flight", backward=lambda b: not b)
                )

    refresh()

    await ui.context.client.connected()
    try:
        browser_tz = resolve_timezone(
            await ui.run_javascript("Intl.DateTimeFormat().resolvedOptions().timeZone")
        )
    except TimeoutError:
        logger.warning("Browser did not report its timezone, using server time")
    voice.setup()
    await history.load()
    refresh()


def main() -> None:
    init_db()
    ui.run(
        title="AI Assistant",
        port=8080,
        reload=False,
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "gemini-chat-secret"),
    )


if __name__ == "__main__":
    main()
