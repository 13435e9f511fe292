"""Log entries, fields, checked entries, the Core interface and tees of cores."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Iterable

from .encoder import ArrayMarshaler, ObjectMarshaler
from .level import MAX_LEVEL, Level, level_of

__all__ = [
    "Entry",
    "Field",
    "CheckedEntry",
    "Core",
    "NopCore",
    "MultiCore",
    "namespace",
    "add_core",
    "new_tee",
]


def _raise_combined(errors: list[Exception], message: str) -> None:
    if len(errors) == 1:
        raise errors[0]
    if errors:
        raise ExceptionGroup(message, errors)


@dataclass
class Entry:
    """A single log event, apart from its structured context."""

    level: Level = Level.INFO
    message: str = ""
    time: datetime | None = None
    logger_name: str = ""
    stack: str = ""


@dataclass(frozen=True, eq=False)
class Field:
    """A keyed value added to a log context.

    The way a value is encoded follows from its Python type. A field made
    with ``namespace=True`` opens a nested namespace instead of holding a
    value.
    """

    key: str
    value: Any = None
    namespace: bool = False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Field):
            return NotImplemented
        return (
            self.key == other.key
            and self.namespace == other.namespace
            and type(self.value) is type(other.value)
            and self.value == other.value
        )

    __hash__ = None  # type: ignore[assignment]

    def add_to(self, encoder: Any) -> None:
        """Add this field to an object encoder.

        If an object or array marshaler fails, its message is added under
        ``<key>Error`` and the partial output is kept.
        """
        key, value = self.key, self.value
        if self.namespace:
            encoder.open_namespace(key)
        elif isinstance(value, bool):
            encoder.add_bool(key, value)
        elif isinstance(value, int):
            encoder.add_int(key, value)
        elif isinstance(value, float):
            encoder.add_float(key, value)
        elif isinstance(value, complex):
            encoder.add_complex(key, value)
        elif isinstance(value, str):
            encoder.add_string(key, value)
        elif isinstance(value, (bytes, bytearray)):
            encoder.add_binary(key, bytes(value))
        elif isinstance(value, timedelta):
            encoder.add_duration(key, value)
        elif isinstance(value, datetime):
            encoder.add_time(key, value)
        elif isinstance(value, (ObjectMarshaler, ArrayMarshaler)):
            try:
                if isinstance(value, ObjectMarshaler):
                    encoder.add_object(key, value)
                else:
                    encoder.add_array(key, value)
            except Exception as exc:  # marshaler failures are recorded, not raised
                encoder.add_string(f"{key}Error", str(exc))
        else:
            encoder.add_reflected(key, value)


def namespace(key: str) -> Field:
    """Return a field that nests all following fields under ``key``."""
    return Field(key, namespace=True)


class CheckedEntry:
    """An entry together with the cores that agreed to log it."""

    def __init__(self, entry: Entry) -> None:
        self.entry = entry
        self.cores: list[Core] = []

    def write(self, *args: Field) -> None:
        """Write the entry with the given fields to every core.

        Every core is written to before any failure is raised.
        """
        fields = list(args)
        errors: list[Exception] = []
        for core in self.cores:
            try:
                core.write(self.entry, fields)
            except Exception as exc:  # every core is tried before reporting
                errors.append(exc)
        _raise_combined(errors, "write failed")


def add_core(checked: CheckedEntry | None, entry: Entry, core: Core) -> CheckedEntry:
    """Add a core to a checked entry, creating the checked entry if needed."""
    if checked is None:
        checked = CheckedEntry(entry)
    checked.cores.append(core)
    return checked


class Core(ABC):
    """The minimal interface behind a logger: filtering, context and output."""

    @abstractmethod
    def enabled(self, lvl: Level) -> bool:
        """Report whether entries at ``lvl`` are logged."""

    @abstractmethod
    def with_fields(self, fields: Iterable[Field]) -> Core:
        """Return a core that adds ``fields`` to every entry."""

    @abstractmethod
    def check(self, entry: Entry, checked: CheckedEntry | None) -> CheckedEntry | None:
        """Add this core to ``checked`` if the entry should be logged."""

    @abstractmethod
    def write(self, entry: Entry, fields: list[Field]) -> None:
        """Write the entry and fields unconditionally."""

    @abstractmethod
    def sync(self) -> None:
        """Flush any buffered output."""


@dataclass(frozen=True)
class NopCore(Core):
    """A core that logs nothing."""

    def enabled(self, lvl: Level) -> bool:
        return False

    def with_fields(self, fields: Iterable[Field]) -> Core:
        return self

    def check(self, entry: Entry, checked: CheckedEntry | None) -> CheckedEntry | None:
        return checked

    def write(self, entry: Entry, fields: list[Field]) -> None:
        return None

    def sync(self) -> None:
        return None


class MultiCore(Core):
    """Duplicates entries into several underlying cores."""

    def __init__(self, cores: Iterable[Core]) -> None:
        self.cores: tuple[Core, ...] = tuple(cores)

    def level(self) -> Level:
        """Return the lowest level enabled by any underlying core."""
        return min([MAX_LEVEL, *(level_of(core) for core in self.cores)])

    def enabled(self, lvl: Level) -> bool:
        return any(core.enabled(lvl) for core in self.cores)

    def with_fields(self, fields: Iterable[Field]) -> Core:
        fields = list(fields)
        return MultiCore(core.with_fields(fields) for core in self.cores)

    def check(self, entry: Entry, checked: CheckedEntry | None) -> CheckedEntry | None:
        for core in self.cores:
            checked = core.check(entry, checked)
        return checked

    def write(self, entry: Entry, fields: list[Field]) -> None:
        errors: list[Exception] = []
        for core in self.cores:
            try:
                core.write(entry, fields)
            except Exception as exc:  # every core is tried before reporting
                errors.append(exc)
        _raise_combined(errors, "write failed")

    def sync(self) -> None:
        errors: list[Exception] = []
        for core in self.cores:
            try:
                core.sync()
            except Exception as exc:  # every core is tried before reporting
                errors.append(exc)
        _raise_combined(errors, "sync failed")


def new_tee(*args: Core) -> Core:
    """Combine cores; no cores give a NopCore and one core is returned as is."""
    if not args:
        return NopCore()
    if len(args) == 1:
        return args[0]
    return MultiCore(args)