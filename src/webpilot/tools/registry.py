"""
Static tool catalog.

Every tool the dispatcher can run is declared here once.  Both front-ends go
through :func:`validate` before anything executes, and the MCP server publishes
:func:`catalog` verbatim as its ``tools/list`` response.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..state import ToolCall
from .errors import ToolValidationError, UnknownToolError


class ParamKind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class ParameterSpec:
    name: str
    kind: ParamKind
    required: bool = False
    default: Any = None
    description: str = ""
    choices: tuple[str, ...] = ()


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    parameters: tuple[ParameterSpec, ...] = ()

    def input_schema(self) -> dict[str, Any]:
        properties: dict[str, Any] = {}
        for spec in self.parameters:
            prop: dict[str, Any] = {"type": spec.kind.value}
            if spec.description:
                prop["description"] = spec.description
            if spec.choices:
                prop["enum"] = list(spec.choices)
            if spec.default is not None:
                prop["default"] = spec.default
            properties[spec.name] = prop
        return {
            "type": "object",
            "properties": properties,
            "required": [spec.name for spec in self.parameters if spec.required],
        }


_S, _N, _B = ParamKind.STRING, ParamKind.NUMBER, ParamKind.BOOLEAN

# Defaults of None mean "omitted"; the executor fills them from configuration.
TOOL_DEFINITIONS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        "hello",
        "Returns a greeting message",
        (ParameterSpec("name", _S, default="World", description="Name to greet"),),
    ),
    ToolDefinition("get_time", "Returns the current date and time"),
    ToolDefinition(
        "calculate",
        "Performs basic math operations",
        (
            ParameterSpec(
                "operation", _S, required=True,
                description="Operation to apply",
                choices=("add", "subtract", "multiply", "divide"),
            ),
            ParameterSpec("a", _N, required=True, description="First number"),
            ParameterSpec("b", _N, required=True, description="Second number"),
        ),
    ),
    ToolDefinition(
        "chat",
        "Send a prompt to the remote chat-completion model and return its reply",
        (
            ParameterSpec("prompt", _S, required=True, description="The prompt to send"),
            ParameterSpec("model", _S, description="Model to use (defaults to the configured model)"),
        ),
    ),
    ToolDefinition(
        "browser_open",
        "Opens a browser and navigates to a URL, replacing any open browser",
        (
            ParameterSpec("url", _S, required=True, description="URL to navigate to"),
            ParameterSpec("headless", _B, description="Run in headless mode (defaults to configuration)"),
        ),
    ),
    ToolDefinition(
        "browser_navigate",
        "Navigates to a new URL in the current browser",
        (ParameterSpec("url", _S, required=True, description="URL to navigate to"),),
    ),
    ToolDefinition(
        "browser_click",
        "Clicks on an element by CSS selector",
        (ParameterSpec("selector", _S, required=True, description="CSS selector of element to click"),),
    ),
    ToolDefinition(
        "browser_type",
        "Types text into an input field",
        (
            ParameterSpec("selector", _S, required=True, description="CSS selector of input field"),
            ParameterSpec("text", _S, required=True, description="Text to type"),
        ),
    ),
    ToolDefinition(
        "browser_screenshot",
        "Takes a PNG screenshot of the current page",
        (
            ParameterSpec("path", _S, description="File path to save screenshot (auto-generated if omitted)"),
            ParameterSpec("full_page", _B, default=False, description="Capture the full scrollable page"),
        ),
    ),
    ToolDefinition(
        "browser_get_text",
        "Gets text content from an element",
        (ParameterSpec("selector", _S, required=True, description="CSS selector of element"),),
    ),
    ToolDefinition("browser_close", "Closes the browser"),
)

_BY_NAME: dict[str, ToolDefinition] = {tool.name: tool for tool in TOOL_DEFINITIONS}

_TRUE_STRINGS = {"true", "yes", "on", "1"}
_FALSE_STRINGS = {"false", "no", "off", "0"}


def lookup(name: str) -> ToolDefinition | None:
    return _BY_NAME.get(name)


def tool_names() -> list[str]:
    return [tool.name for tool in TOOL_DEFINITIONS]


def catalog() -> list[dict[str, Any]]:
    return [
        {"name": tool.name, "description": tool.description, "inputSchema": tool.input_schema()}
        for tool in TOOL_DEFINITIONS
    ]


def _coerce(tool: str, spec: ParameterSpec, value: Any) -> Any:
    if spec.kind is ParamKind.STRING:
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
    elif spec.kind is ParamKind.NUMBER:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip():
            text = value.strip()
            try:
                return int(text)
            except ValueError:
                pass
            try:
                number = float(text)
            except ValueError:
                pass
            else:
                if not math.isinf(number):
                    return number
    elif spec.kind is ParamKind.BOOLEAN:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
    raise ToolValidationError(
        f"Invalid value for '{spec.name}' in {tool}: expected {spec.kind.value}, got {value!r}"
    )


def validate(name: str, raw_params: dict[str, Any] | None) -> ToolCall:
    """Check, coerce and default *raw_params* for tool *name*.

    Raises :class:`UnknownToolError` for names outside the catalog and
    :class:`ToolValidationError` for missing or malformed parameters.
    Parameters the tool does not declare are dropped.
    """
    tool = lookup(name)
    if tool is None:
        raise UnknownToolError(name)
    raw = raw_params or {}
    if not isinstance(raw, dict):
        raise ToolValidationError(f"Arguments for {name} must be an object")
    params: dict[str, Any] = {}
    missing: list[str] = []
    for spec in tool.parameters:
        value = raw.get(spec.name)
        if value is None:
            if spec.required:
                missing.append(spec.name)
            elif spec.default is not None:
                params[spec.name] = spec.default
            continue
        params[spec.name] = _coerce(name, spec, value)
    if missing:
        raise ToolValidationError(f"Missing required parameter(s) for {name}: {', '.join(missing)}")
    return ToolCall(name=name, params=params)
