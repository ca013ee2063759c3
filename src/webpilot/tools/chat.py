from __future__ import annotations

from typing import Any

import httpx

from .errors import ChatToolError


class ChatTool:
    """Single-shot client for an OpenAI-compatible chat-completions endpoint."""

    def __init__(
        self,
        url: str,
        api_key: str | None,
        *,
        max_tokens: int = 1024,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.api_key = api_key
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._transport = transport

    async def complete(self, prompt: str, model: str) -> str:
        if not self.api_key:
            raise ChatToolError(
                "Chat API key is not configured. Set the QUBRID_API_KEY environment variable."
            )
        payload: dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self.max_tokens,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            body = exc.response.text[:300]
            detail = f": {body}" if body else ""
            raise ChatToolError(
                f"Chat API error: HTTP {status}{detail}",
                status_code=status,
            ) from exc
        except httpx.TimeoutException as exc:
            raise ChatToolError("Chat API request timed out") from exc
        except httpx.HTTPError as exc:
            raise ChatToolError(f"Chat API network error: {exc}") from exc
        except ValueError as exc:
            raise ChatToolError("Chat API returned a non-JSON body") from exc
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ChatToolError("Malformed chat response: missing choices[0].message.content") from exc
        if content is not None and not isinstance(content, str):
            raise ChatToolError("Malformed chat response: message content is not text")
        return content or "No response"
