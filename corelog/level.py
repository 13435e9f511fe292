"""Logging levels, their text forms and level enablers."""

from __future__ import annotations

from typing import ClassVar, Protocol, runtime_checkable

__all__ = [
    "Level",
    "LevelEnabler",
    "UnrecognizedLevelError",
    "parse_level",
    "level_of",
    "MIN_LEVEL",
    "MAX_LEVEL",
    "INVALID_LEVEL",
]


class UnrecognizedLevelError(ValueError):
    """Raised when text does not name a known level."""


_NAMES = {
    -1: "debug",
    0: "stat",
    1: "info",
    2: "warn",
    3: "error",
    4: "dpanic",
    5: "panic",
    6: "fatal",
}


class Level(int):
    """A logging priority. Higher levels are more important.

    A level also acts as a level enabler that accepts itself and every
    higher level.
    """

    __slots__ = ()

    DEBUG: ClassVar[Level]
    STAT: ClassVar[Level]
    INFO: ClassVar[Level]
    WARN: ClassVar[Level]
    ERROR: ClassVar[Level]
    DPANIC: ClassVar[Level]
    PANIC: ClassVar[Level]
    FATAL: ClassVar[Level]
    INVALID: ClassVar[Level]

    def __str__(self) -> str:
        name = _NAMES.get(int(self))
        return name if name is not None else f"Level({int(self)})"

    def __repr__(self) -> str:
        name = _NAMES.get(int(self))
        return f"Level.{name.upper()}" if name is not None else f"Level({int(self)})"

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)

    def capital_string(self) -> str:
        """Return the all-caps name of the level."""
        name = _NAMES.get(int(self))
        return name.upper() if name is not None else f"LEVEL({int(self)})"

    def marshal_text(self) -> str:
        """Return the lower-case text form of the level."""
        return str(self)

    def enabled(self, lvl: int) -> bool:
        """Report whether ``lvl`` is at or above this level."""
        return lvl >= self


for _value, _name in _NAMES.items():
    setattr(Level, _name.upper(), Level(_value))

MIN_LEVEL = Level.DEBUG
MAX_LEVEL = Level.FATAL
INVALID_LEVEL = Level(MAX_LEVEL + 1)
Level.INVALID = INVALID_LEVEL

_BY_NAME = {name: Level(value) for value, name in _NAMES.items()}
_BY_NAME[""] = Level.INFO  # make the empty text useful


@runtime_checkable
class LevelEnabler(Protocol):
    """Decides whether a given logging level is enabled."""

    def enabled(self, lvl: Level) -> bool: ...


def parse_level(text: str | bytes) -> Level:
    """Parse a level name, in any letter case, into a Level."""
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode("utf-8", errors="replace")
    try:
        return _BY_NAME[text.lower()]
    except KeyError:
        raise UnrecognizedLevelError(f'unrecognized level: "{text}"') from None


def level_of(enabler: LevelEnabler) -> Level:
    """Return the lowest level the enabler accepts, or INVALID_LEVEL.

    An enabler with a ``level()`` method decides this for itself.
    """
    own_level = getattr(enabler, "level", None)
    if callable(own_level):
        return own_level()
    for value in range(MIN_LEVEL, MAX_LEVEL + 1):
        lvl = Level(value)
        if enabler.enabled(lvl):
            return lvl
    return INVALID_LEVEL