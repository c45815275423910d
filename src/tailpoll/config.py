from __future__ import annotations

import codecs
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from tailpoll import paths
from tailpoll.errors import ConfigError

# "os" -> os.linesep of the running platform
OS_DELIMITER = "os"


@dataclass(frozen=True)
class TailConfig:
    delimiter: str = OS_DELIMITER
    poll_interval_ms: int = 500

    # Decoding
    encoding: str = "utf-8"
    errors: str = "replace"

    # True: start() skips whatever was appended while stopped
    reset_before_restart: bool = True

    @property
    def line_delimiter(self) -> str:
        if self.delimiter == OS_DELIMITER:
            return os.linesep
        return self.delimiter

    @property
    def poll_interval(self) -> float:
        return self.poll_interval_ms / 1000.0


DEFAULT_CONFIG = TailConfig()


def _to_dict(cfg: TailConfig) -> Dict[str, Any]:
    return {
        "delimiter": cfg.delimiter,
        "poll_interval_ms": cfg.poll_interval_ms,
        "decode": {
            "encoding": cfg.encoding,
            "errors": cfg.errors,
        },
        "reset_before_restart": cfg.reset_before_restart,
    }


def as_dict(cfg: TailConfig) -> Dict[str, Any]:
    return asdict(cfg)


def ensure_config_exists() -> None:
    """Write config.yaml with defaults if missing."""
    paths.ensure_dirs()
    cfg_path = paths.config_file()
    if cfg_path.exists():
        return

    cfg_path.write_text(
        yaml.safe_dump(_to_dict(DEFAULT_CONFIG), sort_keys=False),
        encoding="utf-8",
    )


def _interval(raw: Any) -> int:
    try:
        ms = int(raw)
    except (TypeError, ValueError):
        raise ConfigError("poll_interval_ms", f"not an integer: {raw!r}") from None
    if ms <= 0:
        raise ConfigError("poll_interval_ms", f"must be > 0, got {ms}")
    return ms


def _delimiter(raw: Any) -> str:
    if not isinstance(raw, str) or raw == "":
        raise ConfigError("delimiter", "must be a non-empty string")
    return raw


def _encoding(raw: Any) -> str:
    try:
        return codecs.lookup(str(raw)).name
    except LookupError:
        raise ConfigError("decode.encoding", f"unknown encoding: {raw!r}") from None


def _errors(raw: Any) -> str:
    try:
        codecs.lookup_error(str(raw))
    except LookupError:
        raise ConfigError("decode.errors", f"unknown error handler: {raw!r}") from None
    return str(raw)


def load_config(path: Optional[Path] = None) -> TailConfig:
    """Load config.yaml, falling back to defaults for missing keys."""
    if path is None:
        ensure_config_exists()
        path = paths.config_file()

    if not path.exists():
        return DEFAULT_CONFIG

    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ConfigError("<root>", "expected a mapping")

    decode = raw.get("decode", {}) or {}
    reset = raw.get("reset_before_restart", DEFAULT_CONFIG.reset_before_restart)
    if not isinstance(reset, bool):
        raise ConfigError("reset_before_restart", f"expected true/false, got {reset!r}")

    return TailConfig(
        delimiter=_delimiter(raw.get("delimiter", DEFAULT_CONFIG.delimiter)),
        poll_interval_ms=_interval(raw.get("poll_interval_ms", DEFAULT_CONFIG.poll_interval_ms)),
        encoding=_encoding(decode.get("encoding", DEFAULT_CONFIG.encoding)),
        errors=_errors(decode.get("errors", DEFAULT_CONFIG.errors)),
        reset_before_restart=reset,
    )
