from __future__ import annotations

__version__ = "0.3.0"

from tailpoll.config import TailConfig, load_config
from tailpoll.engine import TailEngine
from tailpoll.errors import ConfigError, EngineClosedError, InvalidArgumentError, TailError

__all__ = [
    "__version__",
    "TailConfig",
    "TailEngine",
    "load_config",
    "TailError",
    "InvalidArgumentError",
    "ConfigError",
    "EngineClosedError",
]
