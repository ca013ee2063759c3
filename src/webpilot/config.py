from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

# Chat endpoint – override via WEBPILOT_CHAT_URL env var or config file.
_DEFAULT_CHAT_URL = os.environ.get(
    "WEBPILOT_CHAT_URL",
    "https://platform.qubrid.com/api/v1/qubridai/chat/completions",
)

# The bearer token is read from the environment only and never written to disk.
CHAT_API_KEY_ENV = "QUBRID_API_KEY"

CONFIG_PATH = Path.home() / ".config" / "webpilot" / "config.yml"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class AppConfig:
    chat_api_url: str = _DEFAULT_CHAT_URL
    chat_model: str = "openai/gpt-oss-120b"
    chat_max_tokens: int = 1024
    chat_timeout: float = 60.0
    headless: bool = False
    viewport_width: int = 1920
    viewport_height: int = 1080
    navigation_timeout_ms: int = 30000
    screenshot_dir: str = str(Path.home() / "Pictures" / "webpilot")
    log_level: str = "WARNING"
    config_version: int = 1

    @classmethod
    def from_dict(cls, cfg: dict[str, Any]) -> "AppConfig":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in _validate(cfg).items() if k in known})


def chat_api_key() -> str | None:
    value = os.environ.get(CHAT_API_KEY_ENV, "").strip()
    return value or None


def _positive_int(value: Any, default: int) -> int:
    if isinstance(value, (int, float)) and not isinstance(value, bool) and int(value) > 0:
        return int(value)
    return default


def _validate(cfg: dict[str, Any]) -> dict[str, Any]:
    defaults = AppConfig().__dict__.copy()
    merged = {**defaults, **cfg}
    for key in ("chat_api_url", "chat_model", "screenshot_dir"):
        if not isinstance(merged.get(key), str) or not merged[key].strip():
            merged[key] = defaults[key]
    if not merged["chat_api_url"].startswith(("http://", "https://")):
        merged["chat_api_url"] = defaults["chat_api_url"]
    merged["screenshot_dir"] = str(Path(merged["screenshot_dir"]).expanduser())
    merged["chat_max_tokens"] = _positive_int(merged.get("chat_max_tokens"), defaults["chat_max_tokens"])
    raw_timeout = merged.get("chat_timeout")
    merged["chat_timeout"] = (
        float(raw_timeout)
        if isinstance(raw_timeout, (int, float)) and not isinstance(raw_timeout, bool) and raw_timeout > 0
        else defaults["chat_timeout"]
    )
    if not isinstance(merged.get("headless"), bool):
        merged["headless"] = defaults["headless"]
    merged["viewport_width"] = _positive_int(merged.get("viewport_width"), defaults["viewport_width"])
    merged["viewport_height"] = _positive_int(merged.get("viewport_height"), defaults["viewport_height"])
    merged["navigation_timeout_ms"] = _positive_int(
        merged.get("navigation_timeout_ms"), defaults["navigation_timeout_ms"]
    )
    level = str(merged.get("log_level") or "").upper()
    merged["log_level"] = level if level in _LOG_LEVELS else defaults["log_level"]
    merged["config_version"] = defaults["config_version"]
    return merged


def load_config(path: Path = CONFIG_PATH) -> dict[str, Any]:
    path.parent.mkdir(parents=True, exist_ok=True)
    if not path.exists():
        cfg = _validate({})
        save_config(cfg, path)
        return cfg

    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    cfg = _validate(raw if isinstance(raw, dict) else {})
    if cfg != raw:
        save_config(cfg, path)
    return cfg


def save_config(cfg: dict[str, Any], path: Path = CONFIG_PATH) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    validated = _validate(cfg)
    tmp_path = path.with_suffix(".tmp")
    tmp_path.write_text(yaml.safe_dump(validated, sort_keys=True), encoding="utf-8")
    tmp_path.replace(path)
