"""
MCP (Model Context Protocol) server for webpilot.

Exposes the webpilot tool suite (hello, get_time, calculate, chat and the
browser_* tools) to any MCP-compatible client (Claude Desktop, LM Studio, ...).

Protocol: JSON-RPC 2.0 over stdio (one JSON object per line).  Requests are
handled strictly one at a time, in arrival order, so the single browser
session never sees concurrent calls.

Screenshot responses include an inline base64-encoded PNG image block so
clients that support the MCP image content type can render it directly.

Usage
-----
Run directly:
    python -m webpilot.mcp_server

Or via the CLI:
    webpilot mcp

Client configuration entry
--------------------------
{
  "mcpServers": {
    "webpilot": {
      "command": "webpilot",
      "args": ["mcp"],
      "env": {"QUBRID_API_KEY": "<token>"}
    }
  }
}
"""
from __future__ import annotations

import asyncio
import base64
import json
import logging
import os
import sys
from typing import Any

from . import __version__
from .config import AppConfig, load_config
from .state import ToolResult
from .tools import registry
from .tools.manager import ToolManager

log = logging.getLogger("webpilot.mcp")

SUPPORTED_PROTOCOL_VERSIONS = {"2024-11-05", "2025-03-26", "2025-06-18"}
DEFAULT_PROTOCOL_VERSION = "2024-11-05"

# Upper bound for one JSON-RPC line on stdin (inline arguments can be large).
MAX_LINE_BYTES = 16 * 1024 * 1024

_manager: ToolManager | None = None


def configure(manager: ToolManager) -> None:
    """Install the manager shared by every request on this server."""
    global _manager
    _manager = manager


def _get_manager() -> ToolManager:
    global _manager
    if _manager is None:
        _manager = ToolManager()
    return _manager


# ---------------------------------------------------------------------------
# Tool dispatch — returns list of MCP content blocks
# ---------------------------------------------------------------------------

def _image_content_blocks(path: str, text: str) -> list[dict[str, Any]]:
    """Build MCP content list with a text summary and inline base64 PNG."""
    blocks: list[dict[str, Any]] = [{"type": "text", "text": text}]
    if path and os.path.isfile(path):
        try:
            with open(path, "rb") as fh:
                b64 = base64.standard_b64encode(fh.read()).decode("ascii")
        except OSError as exc:
            log.warning("could not inline screenshot %s: %s", path, exc)
        else:
            blocks.append({"type": "image", "data": b64, "mimeType": "image/png"})
    return blocks


def _content_blocks(name: str, result: ToolResult) -> list[dict[str, Any]]:
    if name == "browser_screenshot" and result.ok:
        prefix = "Screenshot saved to: "
        path = result.message[len(prefix):] if result.message.startswith(prefix) else ""
        return _image_content_blocks(path, result.message)
    return [{"type": "text", "text": result.message}]


async def _call_tool(name: str, arguments: dict[str, Any]) -> tuple[list[dict[str, Any]], bool]:
    """Run a tool and return ``(content blocks, is_error)``."""
    result = await _get_manager().execute(name, arguments)
    return _content_blocks(name, result), not result.ok


# ---------------------------------------------------------------------------
# JSON-RPC 2.0 helpers
# ---------------------------------------------------------------------------

def _ok(request_id: Any, result: Any) -> dict:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def _err(request_id: Any, code: int, message: str) -> dict:
    return {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}


def _write(obj: dict) -> None:
    sys.stdout.write(json.dumps(obj, ensure_ascii=False) + "\n")
    sys.stdout.flush()


# ---------------------------------------------------------------------------
# Main request handler
# ---------------------------------------------------------------------------

async def _handle(line: str) -> None:
    try:
        req = json.loads(line)
    except json.JSONDecodeError:
        _write(_err(None, -32700, "Parse error"))
        return
    if not isinstance(req, dict):
        _write(_err(None, -32600, "Invalid Request"))
        return

    req_id = req.get("id")
    method = req.get("method", "")
    params = req.get("params") or {}
    if not isinstance(params, dict):
        params = {}

    try:
        await _dispatch(req_id, method, params)
    except Exception:
        log.exception("request %r (%s) failed", req_id, method)
        if req_id is not None:
            _write(_err(req_id, -32603, "Internal error"))


async def _dispatch(req_id: Any, method: Any, params: dict[str, Any]) -> None:
    if method == "initialize":
        client_ver = params.get("protocolVersion")
        agreed_ver = (
            client_ver
            if isinstance(client_ver, str) and client_ver in SUPPORTED_PROTOCOL_VERSIONS
            else DEFAULT_PROTOCOL_VERSION
        )
        _write(_ok(req_id, {
            "protocolVersion": agreed_ver,
            "capabilities": {"tools": {}},
            "serverInfo": {
                "name": "webpilot",
                "version": __version__,
            },
        }))

    elif method in ("notifications/initialized", "initialized"):
        # Notification, no response
        pass

    elif method == "tools/list":
        _write(_ok(req_id, {"tools": registry.catalog()}))

    elif method == "tools/call":
        tool_name = str(params.get("name") or "")
        arguments = params.get("arguments") or {}
        if registry.lookup(tool_name) is None:
            _write(_err(req_id, -32602, f"Unknown tool: {tool_name}"))
            return
        content_blocks, is_error = await _call_tool(tool_name, arguments)
        _write(_ok(req_id, {
            "content": content_blocks,
            "isError": is_error,
        }))

    elif method == "ping":
        _write(_ok(req_id, {}))

    else:
        if req_id is not None:
            _write(_err(req_id, -32601, f"Method not found: {method}"))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

async def _skip_oversized_line(reader: asyncio.StreamReader, consumed: int) -> None:
    """Drop the rest of a line that overran the reader's limit."""
    while True:
        await reader.readexactly(consumed)
        try:
            await reader.readuntil(b"\n")
            return
        except asyncio.LimitOverrunError as exc:
            consumed = exc.consumed
        except asyncio.IncompleteReadError:
            return


async def _serve(reader: asyncio.StreamReader) -> None:
    while True:
        try:
            line_bytes = await reader.readuntil(b"\n")
        except asyncio.IncompleteReadError as exc:
            # EOF; a final line without a newline is still a request
            line_bytes = exc.partial
            if not line_bytes:
                break
        except asyncio.LimitOverrunError as exc:
            log.warning("request line exceeds %d bytes, skipped", MAX_LINE_BYTES)
            await _skip_oversized_line(reader, exc.consumed)
            _write(_err(None, -32600, "Request too large"))
            continue
        except ConnectionError as exc:
            log.warning("stdin closed: %s", exc)
            break
        line = line_bytes.decode(errors="replace").strip()
        if line:
            await _handle(line)


async def _run() -> None:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader(limit=MAX_LINE_BYTES)
    protocol = asyncio.StreamReaderProtocol(reader)
    await loop.connect_read_pipe(lambda: protocol, sys.stdin)
    log.info("MCP server running on stdio")

    try:
        await _serve(reader)
    finally:
        await _get_manager().aclose()


def main(config: AppConfig | None = None) -> None:
    if config is not None:
        configure(ToolManager(config))
    asyncio.run(_run())


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        stream=sys.stderr,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    main(AppConfig.from_dict(load_config()))
