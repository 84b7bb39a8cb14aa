from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

LogLevel = Literal["debug", "info", "warning", "error"]

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


@dataclass(frozen=True)
class Settings:
    log_level: LogLevel
    log_json: bool
    config_file: str
    listen_address: str


def split_listen_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` into its parts.  An empty host means all interfaces."""
    host, sep, port_raw = address.rpartition(":")
    if not sep:
        raise ValueError(f"listen address must be host:port (got {address!r})")
    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"listen address port must be an integer (got {address!r})") from None
    if not 0 < port < 65536:
        raise ValueError(f"listen address port out of range (got {address!r})")
    # [::1]:9469 -> ::1
    host = host.strip("[]")
    return host or "0.0.0.0", port


def load_settings() -> Settings:
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    log_json_raw = _getenv("LOG_JSON", "false").lower()
    config_file = _getenv("CONFIG_FILE", "config.yaml")
    listen_address = _getenv("LISTEN_ADDRESS", ":9469")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    if log_json_raw in _TRUTHY:
        log_json = True
    elif log_json_raw in _FALSY:
        log_json = False
    else:
        raise ValueError(f"LOG_JSON must be a boolean (got {log_json_raw!r})")

    if not config_file:
        raise ValueError("CONFIG_FILE must not be empty")

    split_listen_address(listen_address)

    return Settings(  # type: ignore[arg-type]
        log_level=log_level_raw,
        log_json=log_json,
        config_file=config_file,
        listen_address=listen_address,
    )


SETTINGS = load_settings()
