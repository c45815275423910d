from __future__ import annotations

from typing import List, Tuple


def split_lines(text: str, delimiter: str) -> List[str]:
    """Split on every delimiter, strip each token, drop the empty ones."""
    out: List[str] = []
    for token in text.split(delimiter):
        token = token.strip()
        if token:
            out.append(token)
    return out


class LineSplitter:
    """
    Carry buffer + delimiter-aware split.

    feed() is a pure computation: it returns the complete lines and the new
    carry without touching state, so a caller can commit() only once the
    lines were delivered.
    """

    def __init__(self, delimiter: str) -> None:
        if not delimiter:
            raise ValueError("delimiter must be a non-empty string")
        self.delimiter = delimiter
        self._buffer = ""

    @property
    def buffer(self) -> str:
        return self._buffer

    def feed(self, chunk: str) -> Tuple[List[str], str]:
        if not chunk:
            return [], self._buffer

        text = self._buffer + chunk
        # The carry holds no full delimiter, but may end with a prefix of one:
        # start the search where a match can first overlap the new chunk.
        start = max(0, len(self._buffer) - len(self.delimiter) + 1)
        cut = text.rfind(self.delimiter, start)
        if cut < 0:
            return [], text

        end = cut + len(self.delimiter)
        return split_lines(text[:end], self.delimiter), text[end:]

    def commit(self, carry: str) -> None:
        self._buffer = carry

    def clear(self) -> None:
        self._buffer = ""

    def __repr__(self) -> str:
        return f"LineSplitter(delimiter={self.delimiter!r}, buffered={len(self._buffer)})"
