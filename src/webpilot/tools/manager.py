from __future__ import annotations

import logging
import math
import time
from collections.abc import Awaitable, Callable
from datetime import datetime
from pathlib import Path
from typing import Any

from ..config import AppConfig, chat_api_key
from ..state import ErrorKind, ToolResult
from . import registry
from .browser import BrowserSession
from .chat import ChatTool
from .errors import NoActiveSessionError, ToolRequestError, ToolValidationError, UnknownToolError

log = logging.getLogger("webpilot.tools")

Handler = Callable[[dict[str, Any]], Awaitable[str]]


def _format_number(value: float) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if value.is_integer():
            return str(int(value))
    return str(value)


def calculate(operation: str, a: float, b: float) -> float:
    if operation == "add":
        return a + b
    if operation == "subtract":
        return a - b
    if operation == "multiply":
        return a * b
    if operation == "divide":
        return a / b if b != 0 else math.nan
    raise ToolValidationError(
        f"Unknown operation: {operation}. Valid: add, subtract, multiply, divide"
    )


def default_screenshot_path(directory: str | Path) -> str:
    return str(Path(directory).expanduser() / f"screenshot-{int(time.time() * 1000)}.png")


class ToolManager:
    """Executes validated tool calls against the single browser session.

    ``execute`` never raises: every outcome, including unknown tools and
    bad arguments, comes back as a :class:`ToolResult`.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        browser: BrowserSession | None = None,
        chat: ChatTool | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self.browser = browser or BrowserSession(
            viewport=(self.config.viewport_width, self.config.viewport_height),
            navigation_timeout_ms=self.config.navigation_timeout_ms,
        )
        self.chat = chat or ChatTool(
            self.config.chat_api_url,
            chat_api_key(),
            max_tokens=self.config.chat_max_tokens,
            timeout=self.config.chat_timeout,
        )
        self._handlers: dict[str, Handler] = {
            "hello": self.run_hello,
            "get_time": self.run_get_time,
            "calculate": self.run_calculate,
            "chat": self.run_chat,
            "browser_open": self.run_browser_open,
            "browser_navigate": self.run_browser_navigate,
            "browser_click": self.run_browser_click,
            "browser_type": self.run_browser_type,
            "browser_screenshot": self.run_browser_screenshot,
            "browser_get_text": self.run_browser_get_text,
            "browser_close": self.run_browser_close,
        }

    async def execute(self, name: str, params: dict[str, Any] | None = None) -> ToolResult:
        try:
            call = registry.validate(name, params)
        except UnknownToolError as exc:
            log.warning("rejected unknown tool %r", name)
            return ToolResult.failure(ErrorKind.UNKNOWN_TOOL, str(exc))
        except ToolValidationError as exc:
            log.warning("rejected %s: %s", name, exc)
            return ToolResult.failure(ErrorKind.VALIDATION, str(exc))

        handler = self._handlers[call.name]
        log.info("executing %s", call.name)
        try:
            message = await handler(call.params)
        except NoActiveSessionError as exc:
            return ToolResult.failure(ErrorKind.NO_SESSION, str(exc))
        except ToolValidationError as exc:
            return ToolResult.failure(ErrorKind.VALIDATION, f"Error: {exc}")
        except ToolRequestError as exc:
            log.warning("%s failed: %s", call.name, exc)
            return ToolResult.failure(ErrorKind.ACTION, f"Error: {exc}")
        except Exception as exc:  # noqa: BLE001
            log.exception("%s raised unexpectedly", call.name)
            return ToolResult.failure(ErrorKind.ACTION, f"Error: {exc}")
        return ToolResult.success(message)

    async def aclose(self) -> None:
        await self.browser.close()

    # ------------------------------------------------------------------
    # Built-in tools
    # ------------------------------------------------------------------

    async def run_hello(self, params: dict[str, Any]) -> str:
        return f"Hello, {params.get('name') or 'World'}! 👋"

    async def run_get_time(self, params: dict[str, Any]) -> str:
        return f"Current time: {datetime.now().strftime('%c')}"

    async def run_calculate(self, params: dict[str, Any]) -> str:
        operation, a, b = params["operation"], params["a"], params["b"]
        result = calculate(operation, a, b)
        return f"{_format_number(a)} {operation} {_format_number(b)} = {_format_number(result)}"

    async def run_chat(self, params: dict[str, Any]) -> str:
        model = params.get("model") or self.config.chat_model
        return await self.chat.complete(params["prompt"], model)

    # ------------------------------------------------------------------
    # Browser tools
    # ------------------------------------------------------------------

    async def run_browser_open(self, params: dict[str, Any]) -> str:
        headless = params.get("headless")
        if headless is None:
            headless = self.config.headless
        url = params["url"]
        await self.browser.open(url, headless=headless)
        return f"Browser opened and navigated to: {url}"

    async def run_browser_navigate(self, params: dict[str, Any]) -> str:
        url = params["url"]
        await self.browser.navigate(url)
        return f"Navigated to: {url}"

    async def run_browser_click(self, params: dict[str, Any]) -> str:
        selector = params["selector"]
        await self.browser.click(selector)
        return f"Clicked on: {selector}"

    async def run_browser_type(self, params: dict[str, Any]) -> str:
        selector, text = params["selector"], params["text"]
        await self.browser.type(selector, text)
        return f'Typed "{text}" into: {selector}'

    async def run_browser_screenshot(self, params: dict[str, Any]) -> str:
        path = params.get("path") or default_screenshot_path(self.config.screenshot_dir)
        saved = await self.browser.screenshot(path, full_page=bool(params.get("full_page")))
        return f"Screenshot saved to: {saved}"

    async def run_browser_get_text(self, params: dict[str, Any]) -> str:
        text = await self.browser.get_text(params["selector"])
        return text.strip() or "(empty)"

    async def run_browser_close(self, params: dict[str, Any]) -> str:
        if await self.browser.close():
            return "Browser closed."
        return "No browser is open."
