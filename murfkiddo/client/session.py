"""Client-side chat transcript for one page session."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

import httpx

log = logging.getLogger(__name__)

Role = Literal["user", "assistant"]


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(slots=True)
class ConversationTurn:
    role: Role
    content: str
    timestamp: str = field(default_factory=_utc_now)
    audio_url: str | None = None

    def to_history_item(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


class ChatError(RuntimeError):
    """The server answered with ``success: false`` or was unreachable."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ChatSession:
    """Ordered turns plus the round trip to ``/api/chat``.

    The transcript is never persisted; it lives as long as this object.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        child_name: str = "",
        voice_type: str = "friendly",
    ) -> None:
        self._client = client
        self.child_name = child_name
        self.voice_type = voice_type
        self.turns: list[ConversationTurn] = []

    async def send(self, message: str) -> ConversationTurn:
        """Post ``message`` with prior history; return the assistant turn.

        The user's turn is only recorded once the server replies, so a
        failed call can be retried without duplicating it.
        """
        text = message.strip()
        if not text:
            raise ValueError("message must not be empty")

        body = {
            "message": text,
            "childName": self.child_name,
            "voiceType": self.voice_type,
            "chatHistory": [turn.to_history_item() for turn in self.turns],
        }
        try:
            resp = await self._client.post("/api/chat", json=body)
        except httpx.HTTPError as exc:
            raise ChatError(f"chat request failed: {exc}") from exc

        try:
            data = resp.json()
        except ValueError as exc:
            raise ChatError("chat reply was not JSON", resp.status_code) from exc
        if resp.status_code != 200 or not data.get("success"):
            raise ChatError(str(data.get("error", "chat failed")), resp.status_code)

        self.turns.append(ConversationTurn(role="user", content=text))
        reply = ConversationTurn(
            role="assistant",
            content=str(data.get("message", "")),
            timestamp=str(data.get("timestamp") or _utc_now()),
            audio_url=data.get("audioUrl"),
        )
        self.turns.append(reply)
        log.debug("chat turn %d done (audio=%s)", len(self.turns) // 2, bool(reply.audio_url))
        return reply
