"""Marshaler protocols and in-memory and JSON encoders for log fields."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Protocol, runtime_checkable

__all__ = [
    "ObjectMarshaler",
    "ArrayMarshaler",
    "ObjectMarshalerFunc",
    "ArrayMarshalerFunc",
    "MapObjectEncoder",
    "SliceArrayEncoder",
    "JSONReflectedEncoder",
]


@runtime_checkable
class ObjectMarshaler(Protocol):
    """Something that adds itself to a log context as a set of keyed values."""

    def marshal_log_object(self, encoder: "MapObjectEncoder") -> None: ...


@runtime_checkable
class ArrayMarshaler(Protocol):
    """Something that adds itself to a log context as a sequence of values."""

    def marshal_log_array(self, encoder: "SliceArrayEncoder") -> None: ...


@dataclass(frozen=True)
class ObjectMarshalerFunc:
    """Turns a function taking an object encoder into an ObjectMarshaler."""

    func: Callable[[Any], Any]

    def marshal_log_object(self, encoder: Any) -> None:
        self.func(encoder)


@dataclass(frozen=True)
class ArrayMarshalerFunc:
    """Turns a function taking an array encoder into an ArrayMarshaler."""

    func: Callable[[Any], Any]

    def marshal_log_array(self, encoder: Any) -> None:
        self.func(encoder)


class MapObjectEncoder:
    """An object encoder backed by a plain dict; meant for tests, not speed.

    ``fields`` holds the whole encoded context. Opening a namespace makes
    later values go into a nested dict.
    """

    def __init__(self) -> None:
        self.fields: dict[str, Any] = {}
        self._cur: dict[str, Any] = self.fields

    def add_array(self, key: str, marshaler: ArrayMarshaler) -> None:
        """Encode an array under ``key``; partial output is kept on failure."""
        arr = SliceArrayEncoder()
        self._cur[key] = arr.elems
        marshaler.marshal_log_array(arr)

    def add_object(self, key: str, marshaler: ObjectMarshaler) -> None:
        """Encode a nested object under ``key``; partial output is kept on failure."""
        nested = MapObjectEncoder()
        self._cur[key] = nested.fields
        marshaler.marshal_log_object(nested)

    def add_binary(self, key: str, value: bytes) -> None:
        self._cur[key] = bytes(value)

    def add_byte_string(self, key: str, value: bytes) -> None:
        self._cur[key] = bytes(value).decode("utf-8", errors="replace")

    def add_bool(self, key: str, value: bool) -> None:
        self._cur[key] = value

    def add_complex(self, key: str, value: complex) -> None:
        self._cur[key] = value

    def add_duration(self, key: str, value: timedelta) -> None:
        self._cur[key] = value

    def add_float(self, key: str, value: float) -> None:
        self._cur[key] = value

    def add_int(self, key: str, value: int) -> None:
        self._cur[key] = value

    def add_string(self, key: str, value: str) -> None:
        self._cur[key] = value

    def add_time(self, key: str, value: datetime) -> None:
        self._cur[key] = value

    def add_reflected(self, key: str, value: Any) -> None:
        self._cur[key] = value

    def open_namespace(self, key: str) -> None:
        """Start a nested dict that receives all subsequent values."""
        ns: dict[str, Any] = {}
        self._cur[key] = ns
        self._cur = ns


class SliceArrayEncoder:
    """An array encoder backed by a plain list; meant for tests, not speed."""

    def __init__(self) -> None:
        self.elems: list[Any] = []

    def append_array(self, marshaler: ArrayMarshaler) -> None:
        inner = SliceArrayEncoder()
        self.elems.append(inner.elems)
        marshaler.marshal_log_array(inner)

    def append_object(self, marshaler: ObjectMarshaler) -> None:
        inner = MapObjectEncoder()
        self.elems.append(inner.fields)
        marshaler.marshal_log_object(inner)

    def append_reflected(self, value: Any) -> None:
        self.elems.append(value)

    def append_bool(self, value: bool) -> None:
        self.elems.append(value)

    def append_byte_string(self, value: bytes) -> None:
        self.elems.append(bytes(value).decode("utf-8", errors="replace"))

    def append_complex(self, value: complex) -> None:
        self.elems.append(value)

    def append_duration(self, value: timedelta) -> None:
        self.elems.append(value)

    def append_float(self, value: float) -> None:
        self.elems.append(value)

    def append_int(self, value: int) -> None:
        self.elems.append(value)

    def append_string(self, value: str) -> None:
        self.elems.append(value)

    def append_time(self, value: datetime) -> None:
        self.elems.append(value)


class JSONReflectedEncoder:
    """Writes values as compact JSON, one per line, to a byte writer.

    HTML characters are left unescaped; object keys are sorted.
    """

    def __init__(self, writer: Any) -> None:
        self._writer = writer

    def encode(self, value: Any) -> None:
        """Serialize ``value`` and write it followed by a newline.

        Raises TypeError or ValueError if the value cannot be serialized.
        """
        text = json.dumps(
            value,
            ensure_ascii=False,
            separators=(",", ":"),
            sort_keys=True,
            allow_nan=False,
        )
        text = text.replace("\u2028", "\\u2028").replace("\u2029", "\\u2029")
        self._writer.write((text + "\n").encode("utf-8"))