"""A logger with the method set that gRPC's logging interfaces expect."""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from typing import Any, Callable

from .core import Core, Entry
from .level import Level

__all__ = [
    "GrpcLogger",
    "GRPC_INFO",
    "GRPC_WARN",
    "GRPC_ERROR",
    "GRPC_FATAL",
]

GRPC_INFO = 0
GRPC_WARN = 1
GRPC_ERROR = 2
GRPC_FATAL = 3

_GRPC_TO_LEVEL = {
    GRPC_INFO: Level.INFO,
    GRPC_WARN: Level.WARN,
    GRPC_ERROR: Level.ERROR,
    GRPC_FATAL: Level.FATAL,
}
# Unknown gRPC verbosity values map to the level whose value is zero.
_UNKNOWN_GRPC_LEVEL = Level(0)


def _format_value(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _sprint(args: tuple[Any, ...]) -> str:
    """Join values, adding a space between two neighbours that are not strings."""
    parts: list[str] = []
    prev_is_str = False
    for index, arg in enumerate(args):
        is_str = isinstance(arg, str)
        if index > 0 and not is_str and not prev_is_str:
            parts.append(" ")
        parts.append(_format_value(arg))
        prev_is_str = is_str
    return "".join(parts)


def _sprintln(args: tuple[Any, ...]) -> str:
    """Join values with single spaces, without a trailing newline."""
    return " ".join(_format_value(arg) for arg in args)


def _sprintf(fmt: str, args: tuple[Any, ...]) -> str:
    return fmt % args if args else fmt


class GrpcLogger:
    """Logs gRPC's info, warning, error and fatal messages through a core.

    ``print``, ``printf`` and ``println`` log at INFO, or at DEBUG when
    ``debug`` is true. The fatal methods log at FATAL and then exit the
    process with status 1.
    """

    def __init__(self, core: Core, *, debug: bool = False) -> None:
        self._core = core
        self._print_level = Level.DEBUG if debug else Level.INFO

    def _emit(self, level: Level, render: Callable[[], str]) -> None:
        if level < Level.DPANIC and not self._core.enabled(level):
            return
        try:
            entry = Entry(level=level, message=render(), time=datetime.now(timezone.utc))
            checked = self._core.check(entry, None)
            if checked is not None:
                checked.write()
        finally:
            if level == Level.FATAL:
                sys.exit(1)

    def _emit_ln(self, level: Level, args: tuple[Any, ...]) -> None:
        if self._core.enabled(level):
            self._emit(level, lambda: _sprintln(args))

    def print(self, *args: Any) -> None:
        self._emit(self._print_level, lambda: _sprint(args))

    def printf(self, fmt: str, *args: Any) -> None:
        self._emit(self._print_level, lambda: _sprintf(fmt, args))

    def println(self, *args: Any) -> None:
        self._emit_ln(self._print_level, args)

    def info(self, *args: Any) -> None:
        self._emit(Level.INFO, lambda: _sprint(args))

    def infoln(self, *args: Any) -> None:
        self._emit_ln(Level.INFO, args)

    def infof(self, fmt: str, *args: Any) -> None:
        self._emit(Level.INFO, lambda: _sprintf(fmt, args))

    def warning(self, *args: Any) -> None:
        self._emit(Level.WARN, lambda: _sprint(args))

    def warningln(self, *args: Any) -> None:
        self._emit_ln(Level.WARN, args)

    def warningf(self, fmt: str, *args: Any) -> None:
        self._emit(Level.WARN, lambda: _sprintf(fmt, args))

    def error(self, *args: Any) -> None:
        self._emit(Level.ERROR, lambda: _sprint(args))

    def errorln(self, *args: Any) -> None:
        self._emit_ln(Level.ERROR, args)

    def errorf(self, fmt: str, *args: Any) -> None:
        self._emit(Level.ERROR, lambda: _sprintf(fmt, args))

    def fatal(self, *args: Any) -> None:
        self._emit(Level.FATAL, lambda: _sprint(args))

    def fatalln(self, *args: Any) -> None:
        self._emit_ln(Level.FATAL, args)

    def fatalf(self, fmt: str, *args: Any) -> None:
        self._emit(Level.FATAL, lambda: _sprintf(fmt, args))

    def v(self, level: int) -> bool:
        """Report whether the given gRPC verbosity level is enabled."""
        return self._core.enabled(_GRPC_TO_LEVEL.get(level, _UNKNOWN_GRPC_LEVEL))