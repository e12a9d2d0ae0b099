"""Speech-to-text input backed by the browser's Web Speech API.

The recognizer lives in the browser. It reports results, end of speech and
errors back to Python as NiceGUI events, and this module keeps the
listening state and the current transcript.
"""

import logging
from collections.abc import Callable
from typing import Any

from nicegui import ui

logger = logging.getLogger(__name__)

VOICE_SCRIPT = """
<script>
window.chatVoice = {
  recognition: null,
  setup() {
    const Recognition = window.SpeechRecognition || window.webkitSpeechRecognition;
    if (!Recognition) {
      emitEvent('voice_support', {supported: false});
      return;
    }
    const recognition = new Recognition();
    recognition.continuous = true;
    recognition.interimResults = true;
    recognition.lang = 'en-US';
    recognition.onresult = (event) => {
      const results = [];
      for (let i = 0; i < event.results.length; i++) {
        results.push({transcript: event.results[i][0].transcript, isFinal: event.results[i].isFinal});
      }
      emitEvent('voice_result', {resultIndex: event.resultIndex, results: results});
    };
    recognition.onend = () => emitEvent('voice_end', {});
    recognition.onerror = (event) => emitEvent('voice_error', {error: event.error});
    this.recognition = recognition;
    emitEvent('voice_support', {supported: true});
  },
  start() { if (this.recognition) this.recognition.start(); },
  stop() { if (this.recognition) this.recognition.stop(); },
};
</script>
"""


class VoiceInput:
    """Listening state and finalized transcript for one page session.

    Only finalized segments are reported; interim results are ignored.
    The recognizer may stop on its own (end of speech or error), so callers
    should not assume ``is_listening`` stays True.
    """

    def __init__(
        self,
        on_transcript: Callable[[str], None] | None = None,
        on_change: Callable[[], None] | None = None,
        run_javascript: Callable[[str], Any] | None = None,
    ) -> None:
        self.on_transcript = on_transcript
        self.on_change = on_change
        self.is_listening = False
        self.is_supported = False
        self.transcript = ""
        self._run_javascript = run_javascript or ui.run_javascript

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()

    def attach(self) -> None:
        """Register the browser event handlers on the current page."""
        ui.on("voice_support", lambda e: self.handle_support(e.args))
        ui.on("voice_result", lambda e: self.handle_result(e.args))
        ui.on("voice_end", lambda e: self.handle_end())
        ui.on("voice_error", lambda e: self.handle_error(e.args))

    def setup(self) -> None:
        """Create the browser recognizer. Needs a connected client."""
        self._run_javascript("window.chatVoice.setup()")

    def start(self) -> None:
        if not self.is_supported or self.is_listening:
            return
        self.transcript = ""
        self._run_javascript("window.chatVoice.start()")
        self.is_listening = True
        self._changed()

    def stop(self) -> None:
        if not self.is_supported or not self.is_listening:
            return
        self._run_javascript("window.chatVoice.stop()")
        self.is_listening = False
        self._changed()

    def reset(self) -> None:
        self.transcript = ""

    def handle_support(self, args: dict[str, Any]) -> None:
        self.is_supported = bool(args.get("supported"))
        if not self.is_supported:
            logger.info("Speech recognition not supported by this browser")
        self._changed()

    def handle_result(self, args: dict[str, Any]) -> None:
        """Join the finalized segments of a recognition event.

        A non-empty result replaces the transcript and is passed on to
        ``on_transcript``.
        """
        results = args.get("results") or []
        start = args.get("resultIndex", 0)
        final = "".join(r.get("transcript", "") for r in results[start:] if r.get("isFinal"))
        if not final:
            return
        self.transcript = final
        if self.on_transcript is not None:
            self.on_transcript(final)

    def handle_end(self) -> None:
        self.is_listening = False
        self._changed()

    def handle_error(self, args: dict[str, Any]) -> None:
        logger.warning(f"Speech recognition error: {args.get('error')}")
        self.is_listening = False
        self._changed()
