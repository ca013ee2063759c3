"""webpilot: browser and utility tools behind a console and an MCP server."""

__version__ = "1.0.0"
