from __future__ import annotations

import json
import sys
from pathlib import Path

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from webpilot.tools.chat import ChatTool
from webpilot.tools.errors import ChatToolError

URL = "https://chat.example/v1/chat/completions"


def _tool(handler, api_key: str | None = "sk-test") -> ChatTool:
    return ChatTool(URL, api_key, max_tokens=256, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_request_shape_and_reply() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "Paris"}}]})

    reply = await _tool(handler).complete("Capital of France?", "some/model")
    assert reply == "Paris"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"] == {
        "model": "some/model",
        "messages": [{"role": "user", "content": "Capital of France?"}],
        "max_tokens": 256,
    }


@pytest.mark.asyncio
async def test_empty_content_gives_placeholder() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"choices": [{"message": {"content": None}}]})

    assert await _tool(handler).complete("x", "m") == "No response"


@pytest.mark.asyncio
async def test_missing_key_fails_before_request() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    with pytest.raises(ChatToolError, match="QUBRID_API_KEY"):
        await _tool(handler, api_key=None).complete("x", "m")
    assert calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 429, 503])
async def test_http_error_status(status: int) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, text="denied")

    with pytest.raises(ChatToolError) as exc:
        await _tool(handler).complete("x", "m")
    assert f"HTTP {status}" in str(exc.value)
    assert "denied" in str(exc.value)
    assert exc.value.status_code == status


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [{}, {"choices": []}, {"choices": [{"message": {}}]}, {"choices": [{"message": {"content": 5}}]}],
)
async def test_malformed_body(payload: dict) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    with pytest.raises(ChatToolError, match="Malformed chat response"):
        await _tool(handler).complete("x", "m")


@pytest.mark.asyncio
async def test_non_json_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>oops</html>")

    with pytest.raises(ChatToolError, match="non-JSON"):
        await _tool(handler).complete("x", "m")


@pytest.mark.asyncio
async def test_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ChatToolError, match="network error"):
        await _tool(handler).complete("x", "m")
