"""An in-memory core that records entries for assertions in tests."""

from __future__ import annotations

import dataclasses
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from .core import CheckedEntry, Core, Entry, Field, add_core
from .encoder import MapObjectEncoder
from .level import Level, LevelEnabler, level_of

__all__ = ["LoggedEntry", "ObservedLogs", "ObserverCore", "observe"]

_ENTRY_FIELDS = tuple(f.name for f in dataclasses.fields(Entry))


@dataclass
class LoggedEntry(Entry):
    """An entry together with the full context it was logged with."""

    context: list[Field] = field(default_factory=list)

    def context_map(self) -> dict[str, Any]:
        """Return the context encoded as a dict."""
        encoder = MapObjectEncoder()
        for ctx_field in self.context:
            ctx_field.add_to(encoder)
        return encoder.fields


def _logged(entry: Entry, context: list[Field]) -> LoggedEntry:
    values = {name: getattr(entry, name) for name in _ENTRY_FIELDS}
    return LoggedEntry(**values, context=context)


class ObservedLogs:
    """A thread-safe, ordered collection of observed entries."""

    def __init__(self, logs: Iterable[LoggedEntry] = ()) -> None:
        self._lock = threading.Lock()
        self._logs: list[LoggedEntry] = list(logs)

    def __len__(self) -> int:
        with self._lock:
            return len(self._logs)

    def all(self) -> list[LoggedEntry]:
        """Return a copy of all observed entries."""
        with self._lock:
            return list(self._logs)

    def take_all(self) -> list[LoggedEntry]:
        """Return all observed entries and clear the collection."""
        with self._lock:
            taken, self._logs = self._logs, []
        return taken

    def all_untimed(self) -> list[LoggedEntry]:
        """Return copies of all entries with their times cleared."""
        return [
            dataclasses.replace(e, time=None, context=list(e.context)) for e in self.all()
        ]

    def filter_level_exact(self, level: Level) -> ObservedLogs:
        """Keep entries logged at exactly ``level``."""
        return self.filter(lambda e: e.level == level)

    def filter_message(self, msg: str) -> ObservedLogs:
        """Keep entries whose message equals ``msg``."""
        return self.filter(lambda e: e.message == msg)

    def filter_message_snippet(self, snippet: str) -> ObservedLogs:
        """Keep entries whose message contains ``snippet``."""
        return self.filter(lambda e: snippet in e.message)

    def filter_field(self, field: Field) -> ObservedLogs:
        """Keep entries whose context holds a field equal to ``field``."""
        return self.filter(lambda e: any(f == field for f in e.context))

    def filter_field_key(self, key: str) -> ObservedLogs:
        """Keep entries whose context holds a field with ``key``."""
        return self.filter(lambda e: any(f.key == key for f in e.context))

    def filter(self, keep: Callable[[LoggedEntry], bool]) -> ObservedLogs:
        """Return a new collection of the entries for which ``keep`` is true."""
        return ObservedLogs(e for e in self.all() if keep(e))

    def _add(self, entry: LoggedEntry) -> None:
        with self._lock:
            self._logs.append(entry)


class ObserverCore(Core):
    """A core that stores entries, unencoded, in an ObservedLogs."""

    def __init__(
        self,
        enabler: LevelEnabler,
        logs: ObservedLogs,
        context: Iterable[Field] = (),
    ) -> None:
        self._enabler = enabler
        self._logs = logs
        self._context: tuple[Field, ...] = tuple(context)

    def level(self) -> Level:
        return level_of(self._enabler)

    def enabled(self, lvl: Level) -> bool:
        return self._enabler.enabled(lvl)

    def check(self, entry: Entry, checked: CheckedEntry | None) -> CheckedEntry | None:
        if self.enabled(entry.level):
            return add_core(checked, entry, self)
        return checked

    def with_fields(self, fields: Iterable[Field]) -> Core:
        return ObserverCore(self._enabler, self._logs, (*self._context, *fields))

    def write(self, entry: Entry, fields: list[Field]) -> None:
        self._logs._add(_logged(entry, [*self._context, *fields]))

    def sync(self) -> None:
        return None


def observe(enabler: LevelEnabler) -> tuple[ObserverCore, ObservedLogs]:
    """Return a new observing core and the collection it records into."""
    logs = ObservedLogs()
    return ObserverCore(enabler, logs), logs