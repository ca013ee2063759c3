from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NO_SESSION = "no_session"
    ACTION = "action"
    UNKNOWN_TOOL = "unknown_tool"


@dataclass(slots=True)
class ToolCall:
    name: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ToolResult:
    """Normalized outcome of a tool execution, rendered by both front-ends."""

    ok: bool
    message: str
    error: ErrorKind | None = None

    @classmethod
    def success(cls, message: str) -> "ToolResult":
        return cls(ok=True, message=message)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "ToolResult":
        return cls(ok=False, message=message, error=kind)
