from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Ticker:
    """
    Periodic scheduler: one daemon thread, wait `interval()` seconds, call `tick`.
    The interval is re-read before every wait.
    """

    def __init__(self, tick: Callable[[], object], interval: Callable[[], float], name: str = "tailpoll-ticker") -> None:
        self._tick = tick
        self._interval = interval
        self._name = name
        self._stop: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop.is_set()

    def start(self) -> None:
        if self.alive:
            return
        # Fresh event per run: a previous thread still finishing its tick
        # keeps seeing its own (set) event and exits.
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._loop, args=(self._stop,), name=self._name, daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 2.0) -> None:
        if self._stop is None:
            return
        self._stop.set()
        t = self._thread
        if t is not None and t is not threading.current_thread():
            t.join(timeout=timeout)

    def _loop(self, stop: threading.Event) -> None:
        while not stop.wait(self._interval()):
            try:
                self._tick()
            except Exception:
                # Never kill the ticker because of one bad cycle
                logger.exception("tick failed")
