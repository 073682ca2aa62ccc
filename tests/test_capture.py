"""Tests for the voice-capture state machine."""

from __future__ import annotations

import pytest

from murfkiddo.client.capture import (
    CaptureState,
    InputMode,
    InvalidTransition,
    VoiceCaptureMachine,
)


def _listening() -> VoiceCaptureMachine:
    machine = VoiceCaptureMachine()
    machine.start_capture()
    return machine


def test_starts_idle_with_fifteen_second_window():
    machine = VoiceCaptureMachine()
    assert machine.state is CaptureState.IDLE
    machine.start_capture()
    assert machine.state is CaptureState.CAPTURING
    assert machine.remaining_ms == 15_000.0


def test_window_must_be_fifteen_to_twenty_seconds():
    VoiceCaptureMachine(listen_window_ms=20_000.0)
    with pytest.raises(ValueError):
        VoiceCaptureMachine(listen_window_ms=10_000.0)
    with pytest.raises(ValueError):
        VoiceCaptureMachine(listen_window_ms=25_000.0)


def test_window_not_yet_expired_keeps_listening():
    machine = _listening()
    machine.update(14_999.0)
    assert machine.state is CaptureState.CAPTURING
    assert machine.restarts == 0


def test_silence_restarts_twice_then_offers_typing():
    machine = _listening()
    machine.update(15_000.0)
    assert machine.state is CaptureState.CAPTURING
    assert machine.restarts == 1
    assert machine.remaining_ms == 15_000.0

    machine.update(15_000.0)
    assert machine.restarts == 2

    machine.update(15_000.0)
    assert machine.state is CaptureState.ERROR
    assert machine.error_reason == "no_speech"
    assert machine.fallback_offered is True


def test_window_expiry_submits_what_was_heard():
    machine = _listening()
    machine.hear("why is the")
    machine.hear(" sky blue ")
    machine.update(15_000.0)
    assert machine.state is CaptureState.AWAITING_RESPONSE
    assert machine.submitted_text == "why is the sky blue"


def test_full_turn_and_next_capture():
    machine = _listening()
    machine.hear("hello")
    assert machine.submit() == "hello"
    machine.receive_response()
    assert machine.state is CaptureState.RESPONSE_READY
    machine.start_capture()
    assert machine.state is CaptureState.CAPTURING
    assert machine.transcript == ""


def test_submit_with_nothing_heard_is_rejected():
    machine = _listening()
    with pytest.raises(ValueError):
        machine.submit()
    assert machine.state is CaptureState.CAPTURING


def test_illegal_transitions_raise():
    machine = VoiceCaptureMachine()
    with pytest.raises(InvalidTransition):
        machine.receive_response()
    with pytest.raises(InvalidTransition):
        machine.submit("hi")

    waiting = _listening()
    waiting.submit("hi")
    with pytest.raises(InvalidTransition):
        waiting.switch_to_text()


def test_switch_to_text_after_error():
    machine = _listening()
    machine.fail("mic_denied")
    machine.switch_to_text()
    assert machine.state is CaptureState.CAPTURING
    assert machine.input_mode is InputMode.TEXT

    # Typing has no listening window.
    machine.update(60_000.0)
    assert machine.state is CaptureState.CAPTURING
    assert machine.submit("  what is a volcano ") == "what is a volcano"


def test_hear_outside_capture_is_ignored():
    machine = VoiceCaptureMachine()
    machine.hear("ghost")
    assert machine.transcript == ""


def test_reset_returns_to_idle_from_anywhere():
    machine = _listening()
    machine.hear("hi")
    machine.submit()
    machine.reset()
    assert machine.state is CaptureState.IDLE
    assert machine.input_mode is InputMode.VOICE
    machine.reset()
    assert machine.state is CaptureState.IDLE


def test_consume_changed_fires_once_per_transition():
    machine = VoiceCaptureMachine()
    assert machine.consume_changed() is False
    machine.start_capture()
    assert machine.consume_changed() is True
    assert machine.consume_changed() is False
