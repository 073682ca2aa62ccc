"""Error taxonomy shared by adapters and route handlers.

Adapters raise ``AdapterError`` subclasses so provider-specific exception
shapes never leave the adapter. Routes raise ``KiddoError`` subclasses,
which the app's exception handlers render as the ``{"success": false}``
envelope with a message a child can read.
"""

from __future__ import annotations

from typing import Any

TIMEOUT_MESSAGE = "That took too long. Let's try again!"


class AdapterError(RuntimeError):
    """Base error for external provider failures."""

    def __init__(self, message: str, *, timed_out: bool = False) -> None:
        super().__init__(message)
        self.timed_out = timed_out


class GenerationFailure(AdapterError):
    """Raised when the generative text provider fails or times out."""


class SpeechSynthesisFailure(AdapterError):
    """Raised when the text-to-speech provider fails or times out."""


class TranscriptionFailure(AdapterError):
    """Raised when speech-to-text is unavailable or returns nothing usable."""


class KiddoError(Exception):
    """An error that maps onto the JSON failure envelope."""

    status_code = 500

    def __init__(self, message: str, *, extra: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.extra = dict(extra or {})

    def to_envelope(self) -> dict[str, Any]:
        return {"success": False, "error": self.message, **self.extra}


class ValidationError(KiddoError):
    """A required field is missing or malformed."""

    status_code = 400


class UpstreamTimeout(KiddoError):
    """An external call exceeded its time budget."""

    status_code = 408

    def __init__(
        self, message: str = TIMEOUT_MESSAGE, *, extra: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message, extra=extra)


class UpstreamFailure(KiddoError):
    """An external provider failed for a reason other than a timeout."""

    status_code = 500


def map_adapter_error(exc: AdapterError, failure_message: str) -> KiddoError:
    """Translate an adapter failure into the route-level error taxonomy."""
    if exc.timed_out:
        return UpstreamTimeout()
    return UpstreamFailure(failure_message)
