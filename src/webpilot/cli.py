from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import CONFIG_PATH, AppConfig, load_config
from .console import main as console_main
from .mcp_server import main as mcp_main


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webpilot",
        description="Drive a browser and a few utility tools from a console or over MCP.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=CONFIG_PATH,
        help=f"Path to the YAML config file (default: {CONFIG_PATH})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log tool activity to stderr")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("console", help="Interactive console (default)")
    subparsers.add_parser(
        "mcp",
        help=(
            "Run the MCP (Model Context Protocol) server over stdio. "
            "Hook this up to Claude Desktop, LM Studio or any MCP client."
        ),
    )
    return parser


def setup_logging(level: str) -> None:
    # stdout carries the MCP protocol, so logs always go to stderr.
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        stream=sys.stderr,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    config = AppConfig.from_dict(load_config(args.config))
    setup_logging("INFO" if args.verbose else config.log_level)
    if args.command in (None, "console"):
        console_main(config)
        return
    if args.command == "mcp":
        mcp_main(config)
        return
    parser.print_help()
    sys.exit(2)


if __name__ == "__main__":
    main()
