from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from .commands import parse_command
from .config import AppConfig
from .state import ErrorKind, ToolResult
from .tools.manager import ToolManager

log = logging.getLogger("webpilot.console")

PROMPT = "You > "

BANNER = "\n".join(
    [
        "",
        "🤖 webpilot - browser control from the command line",
        "━" * 45,
        "Commands:",
        "  open [url]               - Open browser (e.g. 'open google')",
        "  go to [url]              - Navigate the open browser",
        "  click [selector]         - Click element",
        '  type "text" into [sel]   - Type into an element',
        "  type [text]              - Type into the focused element",
        "  screenshot [full]        - Take screenshot",
        "  close                    - Close browser",
        "  time | hello [name] | 5 + 3",
        "  help                     - Show this help",
        "  exit                     - Exit",
        "",
    ]
)

UNKNOWN_COMMAND = "❓ Unknown command. Try 'open google', 'screenshot', or 'exit'"

Reader = Callable[[str], Awaitable[str]]
Writer = Callable[[str], None]


async def _read_stdin(prompt: str) -> str:
    return await asyncio.to_thread(input, prompt)


def render(result: ToolResult) -> str:
    if result.ok:
        return f"✅ {result.message}"
    if result.error is ErrorKind.NO_SESSION:
        return "❌ No browser open. Use 'open <url>' first."
    return f"❌ {result.message}"


class Console:
    def __init__(
        self,
        manager: ToolManager,
        *,
        reader: Reader = _read_stdin,
        writer: Writer = print,
    ) -> None:
        self.manager = manager
        self.reader = reader
        self.writer = writer

    async def handle_line(self, line: str) -> bool:
        """Process one input line. Returns False once the user asked to exit."""
        text = line.strip()
        if not text:
            return True
        lowered = text.lower()
        if lowered in ("exit", "quit"):
            return False
        if lowered == "help":
            self.writer(BANNER)
            return True

        call = parse_command(text, screenshot_dir=self.manager.config.screenshot_dir)
        if call is None:
            self.writer(UNKNOWN_COMMAND)
            return True
        self.writer(f"\n🔧 Executing: {call.name} {call.params}")
        result = await self.manager.execute(call.name, call.params)
        self.writer(render(result))
        return True

    async def run(self) -> None:
        self.writer(BANNER)
        try:
            while True:
                try:
                    line = await self.reader(PROMPT)
                except (EOFError, KeyboardInterrupt):
                    self.writer("")
                    break
                if not await self.handle_line(line):
                    break
        finally:
            await self.manager.aclose()
            self.writer("👋 Goodbye!")


def main(config: AppConfig | None = None) -> None:
    console = Console(ToolManager(config))
    try:
        asyncio.run(console.run())
    except KeyboardInterrupt:
        log.info("interrupted")
