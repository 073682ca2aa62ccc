"""Tests for the client chat session against a mocked server."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from murfkiddo.client.session import ChatError, ChatSession


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")


def test_send_records_both_turns_and_sends_history():
    async def _run() -> None:
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/chat"
            body = json.loads(request.content)
            bodies.append(body)
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "message": f"You said {body['message']}!",
                    "audioUrl": None,
                    "timestamp": "2026-03-01T18:00:00Z",
                },
            )

        async with _client(handler) as client:
            session = ChatSession(client, child_name="Mia")
            first = await session.send("dogs")
            await session.send("cats")

        assert first.content == "You said dogs!"
        assert first.timestamp == "2026-03-01T18:00:00Z"
        assert [turn.role for turn in session.turns] == ["user", "assistant"] * 2
        assert bodies[0]["chatHistory"] == []
        assert bodies[1]["chatHistory"] == [
            {"role": "user", "content": "dogs"},
            {"role": "assistant", "content": "You said dogs!"},
        ]
        assert bodies[1]["childName"] == "Mia"

    asyncio.run(_run())


def test_failed_send_leaves_transcript_unchanged():
    async def _run() -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                500, json={"success": False, "error": "Failed to generate chat response"}
            )

        async with _client(handler) as client:
            session = ChatSession(client)
            with pytest.raises(ChatError) as info:
                await session.send("hello")

        assert info.value.status_code == 500
        assert str(info.value) == "Failed to generate chat response"
        assert session.turns == []

    asyncio.run(_run())


def test_unreachable_server_is_chat_error():
    async def _run() -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _client(handler) as client:
            session = ChatSession(client)
            with pytest.raises(ChatError):
                await session.send("hello")
            assert session.turns == []

    asyncio.run(_run())


def test_blank_message_is_rejected_locally():
    async def _run() -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        async with _client(handler) as client:
            with pytest.raises(ValueError):
                await ChatSession(client).send("   ")

    asyncio.run(_run())
