"""Voice-capture state machine shared by every mode page.

One turn runs IDLE -> CAPTURING -> AWAITING_RESPONSE -> RESPONSE_READY.
Voice capture listens for a bounded window driven by ``update(dt_ms)``; when
the window ends with nothing heard the capture restarts a fixed number of
times and then gives up into ERROR, where typing is offered instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

log = logging.getLogger(__name__)

DEFAULT_LISTEN_WINDOW_MS = 15_000.0
MIN_LISTEN_WINDOW_MS = 15_000.0
MAX_LISTEN_WINDOW_MS = 20_000.0
DEFAULT_MAX_RESTARTS = 2


class CaptureState(str, Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    AWAITING_RESPONSE = "awaiting_response"
    RESPONSE_READY = "response_ready"
    ERROR = "error"


class InputMode(str, Enum):
    VOICE = "voice"
    TEXT = "text"


ALLOWED_TRANSITIONS: dict[CaptureState, frozenset[CaptureState]] = {
    CaptureState.IDLE: frozenset({CaptureState.CAPTURING}),
    CaptureState.CAPTURING: frozenset(
        {CaptureState.AWAITING_RESPONSE, CaptureState.ERROR, CaptureState.IDLE}
    ),
    CaptureState.AWAITING_RESPONSE: frozenset(
        {CaptureState.RESPONSE_READY, CaptureState.ERROR, CaptureState.IDLE}
    ),
    CaptureState.RESPONSE_READY: frozenset({CaptureState.CAPTURING, CaptureState.IDLE}),
    CaptureState.ERROR: frozenset({CaptureState.CAPTURING, CaptureState.IDLE}),
}


class InvalidTransition(RuntimeError):
    """Raised when a move is not in ``ALLOWED_TRANSITIONS``."""

    def __init__(self, current: CaptureState, target: CaptureState) -> None:
        super().__init__(f"cannot move from {current.value} to {target.value}")
        self.current = current
        self.target = target


@dataclass(slots=True)
class VoiceCaptureMachine:
    """Explicit states instead of recognizer callbacks restarting each other."""

    listen_window_ms: float = DEFAULT_LISTEN_WINDOW_MS
    max_restarts: int = DEFAULT_MAX_RESTARTS

    state: CaptureState = CaptureState.IDLE
    prev_state: CaptureState = CaptureState.IDLE
    input_mode: InputMode = InputMode.VOICE
    remaining_ms: float = 0.0
    restarts: int = 0
    transcript: str = ""
    submitted_text: str = ""
    error_reason: str = ""
    fallback_offered: bool = False

    _changed: bool = False

    def __post_init__(self) -> None:
        if not (MIN_LISTEN_WINDOW_MS <= self.listen_window_ms <= MAX_LISTEN_WINDOW_MS):
            raise ValueError("listen_window_ms must be within 15000-20000")
        if self.max_restarts < 0:
            raise ValueError("max_restarts must be >= 0")

    # ── Transitions ─────────────────────────────────────────────────────

    def _move(self, target: CaptureState) -> None:
        if target not in ALLOWED_TRANSITIONS[self.state]:
            raise InvalidTransition(self.state, target)
        self.prev_state = self.state
        self.state = target
        self._changed = True
        log.debug("capture %s -> %s", self.prev_state.value, target.value)

    def consume_changed(self) -> bool:
        """Return True once per state transition (then resets)."""
        if self._changed:
            self._changed = False
            return True
        return False

    def start_capture(self, mode: InputMode = InputMode.VOICE) -> None:
        self._move(CaptureState.CAPTURING)
        self.input_mode = mode
        self.restarts = 0
        self.error_reason = ""
        self.fallback_offered = False
        self._begin_listening()

    def _begin_listening(self) -> None:
        self.transcript = ""
        self.remaining_ms = (
            self.listen_window_ms if self.input_mode is InputMode.VOICE else 0.0
        )

    def hear(self, text: str) -> None:
        """Append recognised speech to the current capture."""
        if self.state is not CaptureState.CAPTURING:
            return
        text = text.strip()
        if text:
            self.transcript = f"{self.transcript} {text}".strip()

    def submit(self, text: str | None = None) -> str:
        """Send the capture (or typed ``text``) to the server."""
        if self.state is not CaptureState.CAPTURING:
            raise InvalidTransition(self.state, CaptureState.AWAITING_RESPONSE)
        message = (text if text is not None else self.transcript).strip()
        if not message:
            raise ValueError("nothing to submit")
        self._move(CaptureState.AWAITING_RESPONSE)
        self.submitted_text = message
        self.remaining_ms = 0.0
        return message

    def receive_response(self) -> None:
        self._move(CaptureState.RESPONSE_READY)

    def fail(self, reason: str) -> None:
        """Enter ERROR; typing is always offered as the way forward."""
        self._move(CaptureState.ERROR)
        self.error_reason = reason
        self.fallback_offered = True
        self.remaining_ms = 0.0

    def switch_to_text(self) -> None:
        """Take the fallback: capture again, this time by typing."""
        self._move(CaptureState.CAPTURING)
        self.input_mode = InputMode.TEXT
        self.error_reason = ""
        self._begin_listening()

    def reset(self) -> None:
        if self.state is CaptureState.IDLE:
            return
        self._move(CaptureState.IDLE)
        self.input_mode = InputMode.VOICE
        self.transcript = ""
        self.remaining_ms = 0.0
        self.restarts = 0
        self.error_reason = ""
        self.fallback_offered = False

    # ── Countdown ───────────────────────────────────────────────────────

    def update(self, dt_ms: float) -> None:
        """Advance the listening countdown and handle window expiry."""
        if self.state is not CaptureState.CAPTURING or self.input_mode is not InputMode.VOICE:
            return
        self.remaining_ms -= dt_ms
        if self.remaining_ms > 0.0:
            return

        if self.transcript:
            self.submit()
        elif self.restarts < self.max_restarts:
            self.restarts += 1
            log.info("No speech heard, restarting capture (%d/%d)", self.restarts, self.max_restarts)
            self._begin_listening()
        else:
            self.fail("no_speech")
