from __future__ import annotations
from pathlib import Path


def config_dir() -> Path:
    """User config folder (Linux standard)."""
    return Path.home() / ".config" / "tailpoll"


def ensure_dirs() -> None:
    config_dir().mkdir(parents=True, exist_ok=True)


def config_file() -> Path:
    return config_dir() / "config.yaml"
