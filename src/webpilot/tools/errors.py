from __future__ import annotations


class ToolRequestError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ToolValidationError(ToolRequestError):
    """Raised when tool arguments are missing or cannot be coerced."""


class UnknownToolError(ToolRequestError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class NoActiveSessionError(ToolRequestError):
    def __init__(self, message: str = "No browser is open. Use browser_open first.") -> None:
        super().__init__(message)


class BrowserToolError(ToolRequestError):
    pass


class ChatToolError(ToolRequestError):
    pass
