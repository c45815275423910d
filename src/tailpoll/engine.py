from __future__ import annotations

import codecs
import errno
import logging
import os
import threading
from pathlib import Path
from typing import Optional, Union

from tailpoll.config import TailConfig
from tailpoll.errors import EngineClosedError, InvalidArgumentError
from tailpoll.events import EventHook
from tailpoll.splitter import LineSplitter
from tailpoll.ticker import Ticker

logger = logging.getLogger(__name__)


class TailEngine:
    """
    Polling "tail -f" for one file.

    Every poll compares the file size with the last known size and reads only
    the appended byte range. Complete lines (terminated by `delimiter`) are
    stripped and emitted through `line_added`, in file order; the unterminated
    rest waits in a carry buffer for the next poll.

    - first poll: adopts the current size, reports nothing
    - file shrank: baseline reset to the new size, carry buffer dropped
    - file gone: `file_deleted` fires once and the engine stops for good

    Events: line_added(text), file_deleted(), started(), stopped().
    """

    def __init__(
        self,
        path: Union[str, os.PathLike],
        delimiter: str = os.linesep,
        poll_interval: float = 0.5,
        encoding: str = "utf-8",
        errors: str = "replace",
        reset_before_restart: bool = True,
    ) -> None:
        p = Path(path)
        if not p.is_file():
            raise FileNotFoundError(errno.ENOENT, "Could not find file", str(p))

        if not isinstance(delimiter, str) or delimiter == "":
            raise InvalidArgumentError("delimiter must be a non-empty string")
        try:
            self._encoding = codecs.lookup(encoding).name
            codecs.lookup_error(errors)
        except LookupError as e:
            raise InvalidArgumentError(str(e)) from None

        self.path = p.absolute()
        self._delimiter = delimiter
        self._errors = errors
        self.poll_interval = poll_interval
        self.reset_before_restart = bool(reset_before_restart)

        self._splitter = LineSplitter(delimiter)
        self._decoder = codecs.getincrementaldecoder(self._encoding)(errors=errors)

        # None = not initialized yet (distinct from an empty file)
        self._last_known_size: Optional[int] = None
        self._guard = threading.Lock()
        self._lifecycle = threading.Lock()
        self._running = False
        self._deleted = False
        self._resync_pending = False

        self.line_added = EventHook("line_added")
        self.file_deleted = EventHook("file_deleted")
        self.started = EventHook("started")
        self.stopped = EventHook("stopped")

        self._ticker = Ticker(self.poll, lambda: self._poll_interval, name=f"tailpoll:{p.name}")

    @classmethod
    def from_config(cls, path: Union[str, os.PathLike], cfg: TailConfig) -> "TailEngine":
        return cls(
            path,
            delimiter=cfg.line_delimiter,
            poll_interval=cfg.poll_interval,
            encoding=cfg.encoding,
            errors=cfg.errors,
            reset_before_restart=cfg.reset_before_restart,
        )

    # --- properties ---

    @property
    def delimiter(self) -> str:
        return self._delimiter

    @property
    def encoding(self) -> str:
        return self._encoding

    @property
    def poll_interval(self) -> float:
        return self._poll_interval

    @poll_interval.setter
    def poll_interval(self, seconds: float) -> None:
        seconds = float(seconds)
        if seconds <= 0:
            raise InvalidArgumentError(f"poll_interval must be > 0, got {seconds}")
        self._poll_interval = seconds

    @property
    def last_known_size(self) -> Optional[int]:
        return self._last_known_size

    @property
    def buffer(self) -> str:
        return self._splitter.buffer

    @property
    def running(self) -> bool:
        return self._running

    @property
    def deleted(self) -> bool:
        return self._deleted

    # --- lifecycle ---

    def start(self) -> None:
        """
        Start polling. No-op if already running.
        Called while a cycle is running (e.g. from a handler), the resync is
        left to the next poll.
        """
        with self._lifecycle:
            if self._deleted:
                raise EngineClosedError(f"{self.path} was deleted; create a new engine")
            if self._running:
                return
            self._running = True

        if self.reset_before_restart and self._last_known_size is not None:
            self._resync()

        with self._lifecycle:
            if not self._running:
                return
            self._ticker.start()

        logger.info("Monitoring started: %s", self.path)
        self.started.emit()

    def stop(self) -> None:
        """Stop polling. The carry buffer is kept; an in-flight cycle completes."""
        with self._lifecycle:
            if not self._running:
                return
            self._running = False

        self._ticker.stop()
        logger.info("Monitoring stopped: %s", self.path)
        self.stopped.emit()

    def _resync(self) -> None:
        # Skip whatever was appended while stopped ("tail from now")
        if not self._guard.acquire(blocking=False):
            self._resync_pending = True
            logger.debug("resync of %s deferred: cycle in progress", self.path)
            return
        try:
            size = self.path.stat().st_size
        except OSError as e:
            # Deletion is reported by the next poll
            logger.debug("resync of %s skipped: %s", self.path, e)
            return
        else:
            self._reset_to(size)
        finally:
            self._guard.release()

    def _reset_to(self, size: int) -> None:
        """Guard held."""
        self._last_known_size = size
        self._resync_pending = False
        self._splitter.clear()
        self._decoder.reset()
        logger.debug("Reset file size to %d", size)

    # --- poll cycle ---

    def poll(self) -> bool:
        """
        Run one poll cycle. Returns False when skipped: another cycle holds
        the guard, or the file was already reported deleted.
        """
        if not self._guard.acquire(blocking=False):
            logger.debug("poll skipped: previous cycle still running")
            return False
        try:
            if self._deleted:
                return False
            gone = self._cycle()
        finally:
            self._guard.release()

        if gone:
            logger.warning("File deleted: %s", self.path)
            self.stop()
            self.file_deleted.emit()
        return True

    def _cycle(self) -> bool:
        """Guard held. Returns True when the file disappeared."""
        try:
            size = self.path.stat().st_size
        except FileNotFoundError:
            self._deleted = True
            return True
        except OSError as e:
            logger.warning("stat of %s failed, retry next poll: %s", self.path, e)
            return False

        if self._resync_pending:
            self._reset_to(size)
            return False

        baseline = self._last_known_size
        if baseline is None:
            self._last_known_size = size
            logger.debug("Initial file size set to %d", size)
            return False

        if size == baseline:
            return False

        if size < baseline:
            logger.info("%s shrank from %d to %d bytes; buffer cleared", self.path, baseline, size)
            self._last_known_size = size
            self._splitter.clear()
            self._decoder.reset()
            return False

        logger.debug("Old size %d | New size %d", baseline, size)

        state = self._decoder.getstate()
        try:
            with self.path.open("rb") as f:
                f.seek(baseline)
                data = f.read(size - baseline)
            text = self._decoder.decode(data)
        except (OSError, UnicodeDecodeError) as e:
            self._decoder.setstate(state)
            logger.warning("read of %s [%d, %d) failed, retry next poll: %s", self.path, baseline, size, e)
            return False

        lines, carry = self._splitter.feed(text)
        for line in lines:
            self.line_added.emit(line)

        self._splitter.commit(carry)
        # The file may have shrunk between stat and read
        self._last_known_size = baseline + len(data)
        return False

    def __repr__(self) -> str:
        state = "deleted" if self._deleted else ("running" if self._running else "stopped")
        return f"TailEngine({str(self.path)!r}, delimiter={self._delimiter!r}, {state})"
