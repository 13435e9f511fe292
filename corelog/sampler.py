"""A core that samples entries to cap the cost of repetitive logging."""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from enum import IntFlag
from typing import Callable, Iterable

from .core import CheckedEntry, Core, Entry, Field
from .level import MAX_LEVEL, MIN_LEVEL, Level, level_of

__all__ = ["SamplingDecision", "Sampler", "new_sampler"]

_COUNTERS_PER_LEVEL = 4096
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MICROSECOND = timedelta(microseconds=1)


class SamplingDecision(IntFlag):
    """A bit field describing what the sampler did with an entry."""

    LOG_DROPPED = 1
    LOG_SAMPLED = 2


SamplerHook = Callable[[Entry, SamplingDecision], None]


def _fnv32a(text: str) -> int:
    """Return the 32-bit FNV-1a hash of the UTF-8 bytes of ``text``."""
    hash_ = 2166136261
    for byte in text.encode("utf-8"):
        hash_ ^= byte
        hash_ = (hash_ * 16777619) & 0xFFFFFFFF
    return hash_


def _nanoseconds(value: timedelta) -> int:
    return (value // _MICROSECOND) * 1000


def _unix_nanos(moment: datetime | None) -> int:
    if moment is None:
        moment = datetime.now(timezone.utc)
    elif moment.tzinfo is None:
        moment = moment.astimezone()
    return _nanoseconds(moment - _EPOCH)


class _Counter:
    """Counts entries within one tick, resetting when the tick has passed."""

    __slots__ = ("_lock", "_reset_at", "_count")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._reset_at = 0
        self._count = 0

    def inc_check_reset(self, now_ns: int, tick_ns: int) -> int:
        with self._lock:
            if self._reset_at > now_ns:
                self._count += 1
                return self._count
            self._count = 1
            self._reset_at = now_ns + tick_ns
            return 1


class _Counters:
    """A lazily filled table of counters per level and message hash bucket."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._table: dict[tuple[int, int], _Counter] = {}

    def get(self, lvl: Level, message: str) -> _Counter:
        key = (int(lvl) - int(MIN_LEVEL), _fnv32a(message) % _COUNTERS_PER_LEVEL)
        with self._lock:
            counter = self._table.get(key)
            if counter is None:
                counter = self._table[key] = _Counter()
            return counter


def _nop_hook(entry: Entry, decision: SamplingDecision) -> None:
    return None


class Sampler(Core):
    """Logs the first ``first`` entries with a given level and message each
    tick, then every ``thereafter``-th one; a ``thereafter`` of zero drops
    all the rest in that tick.

    Children made by ``with_fields`` share their parent's counters.
    """

    def __init__(
        self,
        core: Core,
        tick: timedelta | float,
        first: int,
        thereafter: int,
        hook: SamplerHook | None = None,
        *,
        _counts: _Counters | None = None,
    ) -> None:
        if not isinstance(tick, timedelta):
            tick = timedelta(seconds=tick)
        self.core = core
        self.tick = tick
        self.first = first
        self.thereafter = thereafter
        self.hook: SamplerHook = hook if hook is not None else _nop_hook
        self._counts = _counts if _counts is not None else _Counters()

    def level(self) -> Level:
        return level_of(self.core)

    def enabled(self, lvl: Level) -> bool:
        return self.core.enabled(lvl)

    def with_fields(self, fields: Iterable[Field]) -> Core:
        return Sampler(
            self.core.with_fields(fields),
            self.tick,
            self.first,
            self.thereafter,
            self.hook,
            _counts=self._counts,
        )

    def check(self, entry: Entry, checked: CheckedEntry | None) -> CheckedEntry | None:
        if not self.enabled(entry.level):
            return checked
        if MIN_LEVEL <= entry.level <= MAX_LEVEL:
            counter = self._counts.get(entry.level, entry.message)
            n = counter.inc_check_reset(_unix_nanos(entry.time), _nanoseconds(self.tick))
            if n > self.first and (
                self.thereafter == 0 or (n - self.first) % self.thereafter != 0
            ):
                self.hook(entry, SamplingDecision.LOG_DROPPED)
                return checked
            self.hook(entry, SamplingDecision.LOG_SAMPLED)
        return self.core.check(entry, checked)

    def write(self, entry: Entry, fields: list[Field]) -> None:
        self.core.write(entry, fields)

    def sync(self) -> None:
        self.core.sync()


def new_sampler(
    core: Core,
    tick: timedelta | float,
    first: int,
    thereafter: int,
    hook: SamplerHook | None = None,
) -> Sampler:
    """Return a sampling core wrapped around ``core``."""
    return Sampler(core, tick, first, thereafter, hook)