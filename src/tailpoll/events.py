from __future__ import annotations

import logging
import threading
from typing import Any, Callable, List

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


class EventHook:
    """
    Ordered fan-out of one signal to many handlers.
    Handlers run in registration order on the emitting thread.
    A failing handler is logged and skipped: the others still get the event.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._lock = threading.Lock()
        self._handlers: List[Handler] = []

    def connect(self, handler: Handler) -> Handler:
        with self._lock:
            self._handlers.append(handler)
        return handler

    def disconnect(self, handler: Handler) -> bool:
        with self._lock:
            try:
                self._handlers.remove(handler)
            except ValueError:
                return False
        return True

    def emit(self, *args: Any) -> None:
        with self._lock:
            handlers = list(self._handlers)

        for handler in handlers:
            try:
                handler(*args)
            except Exception:
                logger.exception("%s handler %r failed", self.name, handler)

    def __len__(self) -> int:
        with self._lock:
            return len(self._handlers)

    def __repr__(self) -> str:
        return f"EventHook({self.name!r}, handlers={len(self)})"
