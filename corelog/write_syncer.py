"""Writers that can also flush buffered data."""

from __future__ import annotations

import threading
from typing import Any, Protocol, runtime_checkable

__all__ = [
    "WriteSyncer",
    "LockedWriteSyncer",
    "MultiWriteSyncer",
    "add_sync",
    "lock",
    "new_multi_write_syncer",
]


@runtime_checkable
class WriteSyncer(Protocol):
    """A writer that can also flush any buffered data."""

    def write(self, data: bytes) -> int: ...

    def sync(self) -> None: ...


class _WriterWrapper:
    """Adds a sync to a plain writer, flushing it when it can be flushed."""

    def __init__(self, writer: Any) -> None:
        self._writer = writer

    def write(self, data: bytes) -> int:
        written = self._writer.write(data)
        return len(data) if written is None else written

    def sync(self) -> None:
        flush = getattr(self._writer, "flush", None)
        if callable(flush):
            flush()


def add_sync(writer: Any) -> WriteSyncer:
    """Return the writer itself if it can sync, else wrap it with a sync."""
    if callable(getattr(writer, "write", None)) and callable(getattr(writer, "sync", None)):
        return writer
    return _WriterWrapper(writer)


class LockedWriteSyncer:
    """A WriteSyncer guarded by a mutex for concurrent use."""

    def __init__(self, ws: WriteSyncer) -> None:
        self._ws = ws
        self._lock = threading.Lock()

    def write(self, data: bytes) -> int:
        with self._lock:
            return self._ws.write(data)

    def sync(self) -> None:
        with self._lock:
            self._ws.sync()


def lock(ws: WriteSyncer) -> WriteSyncer:
    """Wrap a WriteSyncer in a lock, unless it is already locked."""
    if isinstance(ws, LockedWriteSyncer):
        return ws
    return LockedWriteSyncer(ws)


def _raise_combined(errors: list[Exception], message: str) -> None:
    if len(errors) == 1:
        raise errors[0]
    if errors:
        raise ExceptionGroup(message, errors)


class MultiWriteSyncer:
    """Duplicates writes and syncs to every underlying WriteSyncer.

    When the writers report different byte counts, the smallest non-zero
    count is returned.
    """

    def __init__(self, syncers) -> None:
        self._syncers = tuple(syncers)

    def write(self, data: bytes) -> int:
        errors: list[Exception] = []
        written = 0
        for ws in self._syncers:
            try:
                n = ws.write(data)
            except Exception as exc:  # every writer is tried before reporting
                errors.append(exc)
                n = 0
            if written == 0 and n != 0:
                written = n
            elif n < written:
                written = n
        _raise_combined(errors, "write failed")
        return written

    def sync(self) -> None:
        errors: list[Exception] = []
        for ws in self._syncers:
            try:
                ws.sync()
            except Exception as exc:  # every syncer is tried before reporting
                errors.append(exc)
        _raise_combined(errors, "sync failed")


def new_multi_write_syncer(*args: WriteSyncer) -> WriteSyncer:
    """Combine WriteSyncers; a single one is returned unchanged."""
    if len(args) == 1:
        return args[0]
    return MultiWriteSyncer(args)