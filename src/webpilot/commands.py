"""
Local command parser for the console.

Free text is matched against an ordered list of rules and the first rule that
matches produces the tool call.  Order is significant: a line such as
``"what time is 5 + 3"`` is a time request, because the time rule is checked
before the arithmetic rule.
"""
from __future__ import annotations

import re
from collections.abc import Callable
from pathlib import Path

from .state import ToolCall
from .tools.manager import default_screenshot_path

SITE_ALIASES: dict[str, str] = {
    "google": "https://www.google.com",
    "google.com": "https://www.google.com",
    "youtube": "https://www.youtube.com",
    "youtube.com": "https://www.youtube.com",
    "github": "https://www.github.com",
    "github.com": "https://www.github.com",
    "twitter": "https://www.x.com",
    "x": "https://www.x.com",
    "x.com": "https://www.x.com",
}

FOCUSED_ELEMENT = ":focus"

_OPERATORS = {"+": "add", "-": "subtract", "*": "multiply", "/": "divide"}

_OPEN_RE = re.compile(r"^open\s+(.+)$", re.IGNORECASE)
_NAVIGATE_RE = re.compile(r"^(?:go\s+to|navigate)\s+(.+)$", re.IGNORECASE)
_CLICK_RE = re.compile(r"^click\s+(.+)$", re.IGNORECASE)
_TYPE_INTO_RE = re.compile(r"""^type\s+(["'])(.+?)\1\s+(?:in|into)\s+(.+)$""", re.IGNORECASE)
_TYPE_RE = re.compile(r"^type\s+(.+)$", re.IGNORECASE)
_HELLO_RE = re.compile(r"^(?:say\s+hello(?:\s+to)?|hello|hi)\b[\s,!]*(.*)$", re.IGNORECASE)
_CALC_RE = re.compile(r"(\d+(?:\.\d+)?)\s*([+\-*/])\s*(\d+(?:\.\d+)?)")

Rule = Callable[[str, str], ToolCall | None]


def normalize_url(target: str) -> str:
    target = target.strip()
    if target.lower() in SITE_ALIASES:
        return SITE_ALIASES[target.lower()]
    if re.match(r"^[a-z][a-z0-9+.-]*://", target, re.IGNORECASE):
        return target
    return f"https://{target}"


def _number(text: str) -> int | float:
    return float(text) if "." in text else int(text)


def _open(text: str, screenshot_dir: str) -> ToolCall | None:
    match = _OPEN_RE.match(text)
    if not match:
        return None
    return ToolCall("browser_open", {"url": normalize_url(match.group(1))})


def _navigate(text: str, screenshot_dir: str) -> ToolCall | None:
    match = _NAVIGATE_RE.match(text)
    if not match:
        return None
    return ToolCall("browser_navigate", {"url": normalize_url(match.group(1))})


def _click(text: str, screenshot_dir: str) -> ToolCall | None:
    match = _CLICK_RE.match(text)
    if not match:
        return None
    return ToolCall("browser_click", {"selector": match.group(1).strip()})


def _type(text: str, screenshot_dir: str) -> ToolCall | None:
    match = _TYPE_INTO_RE.match(text)
    if match:
        return ToolCall("browser_type", {"text": match.group(2), "selector": match.group(3).strip()})
    match = _TYPE_RE.match(text)
    if match:
        return ToolCall("browser_type", {"text": match.group(1).strip(), "selector": FOCUSED_ELEMENT})
    return None


def _screenshot(text: str, screenshot_dir: str) -> ToolCall | None:
    lowered = text.lower()
    if "screenshot" not in lowered:
        return None
    params: dict[str, object] = {"path": default_screenshot_path(screenshot_dir)}
    if "full" in lowered:
        params["full_page"] = True
    return ToolCall("browser_screenshot", params)


def _close(text: str, screenshot_dir: str) -> ToolCall | None:
    if text.lower() in ("close", "close browser"):
        return ToolCall("browser_close", {})
    return None


def _time(text: str, screenshot_dir: str) -> ToolCall | None:
    if "time" in text.lower():
        return ToolCall("get_time", {})
    return None


def _hello(text: str, screenshot_dir: str) -> ToolCall | None:
    match = _HELLO_RE.match(text)
    if not match:
        return None
    return ToolCall("hello", {"name": match.group(1).strip() or "World"})


def _calculate(text: str, screenshot_dir: str) -> ToolCall | None:
    match = _CALC_RE.search(text)
    if not match:
        return None
    a, op, b = match.groups()
    return ToolCall("calculate", {"operation": _OPERATORS[op], "a": _number(a), "b": _number(b)})


RULES: tuple[Rule, ...] = (
    _open,
    _navigate,
    _click,
    _type,
    _screenshot,
    _close,
    _time,
    _hello,
    _calculate,
)


def parse_command(text: str, *, screenshot_dir: str | Path = ".") -> ToolCall | None:
    """Map a console line to a tool call, or ``None`` when nothing matches."""
    stripped = text.strip()
    if not stripped:
        return None
    for rule in RULES:
        call = rule(stripped, str(screenshot_dir))
        if call is not None:
            return call
    return None
