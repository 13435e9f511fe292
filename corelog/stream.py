"""A byte writer that logs each line it receives as an entry."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from .core import Core, Entry
from .level import Level

__all__ = ["LineWriter"]


class LineWriter:
    """Splits written data on newlines and logs each line through a core.

    Partial lines are buffered until a newline arrives or until ``sync``
    or ``close`` is called. Use it as a context manager to flush on exit.
    """

    def __init__(self, core: Core, level: Level = Level.INFO) -> None:
        self.core = core
        self.level = level
        self._buffer = bytearray()

    def __enter__(self) -> LineWriter:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def write(self, data: bytes | bytearray | str) -> int:
        """Log every complete line in ``data`` and return its length."""
        if not self.core.enabled(self.level):
            return len(data)
        raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        while raw:
            raw = self._write_line(raw)
        return len(data)

    def _write_line(self, line: bytes) -> bytes:
        idx = line.find(b"\n")
        if idx < 0:
            self._buffer += line
            return b""
        line, remaining = line[:idx], line[idx + 1 :]
        if not self._buffer:
            self._log(line)
            return remaining
        self._buffer += line
        # Empty lines in the middle of a stream are kept as empty messages.
        self._flush(allow_empty=True)
        return remaining

    def close(self) -> None:
        """Flush buffered data; call once writing is finished."""
        self.sync()

    def sync(self) -> None:
        """Log buffered data as an entry even without a trailing newline."""
        self._flush(allow_empty=False)

    def _flush(self, allow_empty: bool) -> None:
        if allow_empty or self._buffer:
            self._log(bytes(self._buffer))
        self._buffer.clear()

    def _log(self, data: bytes) -> None:
        entry = Entry(
            level=self.level,
            message=data.decode("utf-8", errors="replace"),
            time=datetime.now(timezone.utc),
        )
        checked = self.core.check(entry, None)
        if checked is not None:
            checked.write()