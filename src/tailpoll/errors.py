from __future__ import annotations


class TailError(Exception):
    """Base class for tailpoll errors."""


class InvalidArgumentError(TailError, ValueError):
    """Bad engine argument (empty delimiter, unknown encoding, ...)."""


class ConfigError(TailError, ValueError):
    """Invalid value in config.yaml."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(f"{key}: {message}")
        self.key = key


class EngineClosedError(TailError, RuntimeError):
    """The observed file was deleted; the engine cannot be restarted."""
