import io
from datetime import datetime, timedelta, timezone

import pytest

from corelog.encoder import (
    ArrayMarshaler,
    ArrayMarshalerFunc,
    JSONReflectedEncoder,
    MapObjectEncoder,
    ObjectMarshaler,
    ObjectMarshalerFunc,
    SliceArrayEncoder,
)


class Loggable:
    def __init__(self, ok):
        self.ok = ok

    def marshal_log_object(self, enc):
        if not self.ok:
            raise RuntimeError("can't marshal")
        enc.add_string("loggable", "yes")


class Turducken:
    def marshal_log_object(self, enc):
        def ducks(arr):
            for _ in range(2):
                arr.append_object(ObjectMarshalerFunc(lambda e: e.add_string("in", "chicken")))

        enc.add_array("ducks", ArrayMarshalerFunc(ducks))


class Turduckens:
    def __init__(self, n):
        self.n = n

    def marshal_log_array(self, arr):
        for _ in range(self.n):
            arr.append_object(Turducken())


class MaybeNamespace:
    def __init__(self, nested):
        self.nested = nested

    def marshal_log_object(self, enc):
        enc.add_string("obj-out", "obj-outside-namespace")
        if self.nested:
            enc.open_namespace("obj-namespace")
            enc.add_string("obj-in", "obj-inside-namespace")


WANT_TURDUCKEN = {"ducks": [{"in": "chicken"}, {"in": "chicken"}]}
TIME = datetime.fromtimestamp(0, tz=timezone.utc) + timedelta(microseconds=100)


def _bools(arr):
    arr.append_bool(True)
    arr.append_bool(False)
    arr.append_bool(True)


def _namespaces(e):
    e.open_namespace("k")
    e.add_int("foo", 1)
    e.open_namespace("middle")
    e.add_int("foo", 2)
    e.open_namespace("inner")
    e.add_int("foo", 3)


def _obj_then_string(nested):
    def f(e):
        e.open_namespace("k")
        e.add_object("obj", MaybeNamespace(nested))
        e.add_string("not-obj", "should-be-outside-obj")

    return f


ADD_CASES = [
    ("AddObject", lambda e: e.add_object("k", Loggable(True)), {"loggable": "yes"}),
    ("AddObject nested", lambda e: e.add_object("k", Turducken()), WANT_TURDUCKEN),
    ("AddArray", lambda e: e.add_array("k", ArrayMarshalerFunc(_bools)), [True, False, True]),
    ("AddArray nested", lambda e: e.add_array("k", Turduckens(2)), [WANT_TURDUCKEN, WANT_TURDUCKEN]),
    ("AddArray empty", lambda e: e.add_array("k", Turduckens(0)), []),
    ("AddBinary", lambda e: e.add_binary("k", b"foo"), b"foo"),
    ("AddByteString", lambda e: e.add_byte_string("k", b"foo"), "foo"),
    ("AddBool", lambda e: e.add_bool("k", True), True),
    ("AddComplex", lambda e: e.add_complex("k", 1 + 2j), 1 + 2j),
    ("AddDuration", lambda e: e.add_duration("k", timedelta(milliseconds=1)), timedelta(milliseconds=1)),
    ("AddFloat", lambda e: e.add_float("k", 3.14), 3.14),
    ("AddInt", lambda e: e.add_int("k", 42), 42),
    ("AddString", lambda e: e.add_string("k", "v"), "v"),
    ("AddTime", lambda e: e.add_time("k", TIME), TIME),
    ("AddReflected", lambda e: e.add_reflected("k", {"foo": 5}), {"foo": 5}),
    (
        "OpenNamespace",
        _namespaces,
        {"foo": 1, "middle": {"foo": 2, "inner": {"foo": 3}}},
    ),
    (
        "object (no nested namespace) then string",
        _obj_then_string(False),
        {"obj": {"obj-out": "obj-outside-namespace"}, "not-obj": "should-be-outside-obj"},
    ),
    (
        "object (with nested namespace) then string",
        _obj_then_string(True),
        {
            "obj": {
                "obj-out": "obj-outside-namespace",
                "obj-namespace": {"obj-in": "obj-inside-namespace"},
            },
            "not-obj": "should-be-outside-obj",
        },
    ),
]


@pytest.mark.parametrize("desc,f,expected", ADD_CASES, ids=[c[0] for c in ADD_CASES])
def test_map_object_encoder_add(desc, f, expected):
    enc = MapObjectEncoder()
    f(enc)
    assert enc.fields["k"] == expected


def _array_of_arrays(e):
    def inner(a):
        a.append_bool(True)
        a.append_bool(False)

    e.append_array(ArrayMarshalerFunc(inner))


def _arr_obj_then_string(nested):
    def f(e):
        def inner(a):
            a.append_object(MaybeNamespace(nested))
            a.append_string("should-be-outside-obj")

        e.append_array(ArrayMarshalerFunc(inner))

    return f


APPEND_CASES = [
    ("AppendBool", lambda e: e.append_bool(True), True),
    ("AppendByteString", lambda e: e.append_byte_string(b"foo"), "foo"),
    ("AppendComplex", lambda e: e.append_complex(1 + 2j), 1 + 2j),
    ("AppendDuration", lambda e: e.append_duration(timedelta(seconds=1)), timedelta(seconds=1)),
    ("AppendFloat", lambda e: e.append_float(3.14), 3.14),
    ("AppendInt", lambda e: e.append_int(42), 42),
    ("AppendString", lambda e: e.append_string("foo"), "foo"),
    ("AppendTime", lambda e: e.append_time(TIME), TIME),
    ("AppendReflected", lambda e: e.append_reflected({"foo": 5}), {"foo": 5}),
    ("AppendArray (arrays of arrays)", _array_of_arrays, [True, False]),
    (
        "object (no nested namespace) then string",
        _arr_obj_then_string(False),
        [{"obj-out": "obj-outside-namespace"}, "should-be-outside-obj"],
    ),
    (
        "object (with nested namespace) then string",
        _arr_obj_then_string(True),
        [
            {
                "obj-out": "obj-outside-namespace",
                "obj-namespace": {"obj-in": "obj-inside-namespace"},
            },
            "should-be-outside-obj",
        ],
    ),
]


@pytest.mark.parametrize("desc,f,expected", APPEND_CASES, ids=[c[0] for c in APPEND_CASES])
def test_slice_array_encoder_append(desc, f, expected):
    enc = MapObjectEncoder()

    def both(arr):
        f(arr)
        f(arr)

    enc.add_array("k", ArrayMarshalerFunc(both))
    assert enc.fields["k"] == [expected, expected]


def test_map_object_encoder_reflection_failures():
    enc = MapObjectEncoder()
    with pytest.raises(RuntimeError):
        enc.add_object("object", Loggable(False))
    assert enc.fields == {"object": {}}


def test_add_array_keeps_partial_output_on_failure():
    enc = MapObjectEncoder()

    def failing(arr):
        arr.append_int(1)
        raise ValueError("boom")

    with pytest.raises(ValueError):
        enc.add_array("k", ArrayMarshalerFunc(failing))
    assert enc.fields == {"k": [1]}


def test_marshaler_funcs_satisfy_protocols():
    obj_func = ObjectMarshalerFunc(lambda e: e.add_string("a", "b"))
    arr_func = ArrayMarshalerFunc(lambda e: e.append_int(7))
    assert isinstance(obj_func, ObjectMarshaler)
    assert isinstance(arr_func, ArrayMarshaler)
    assert not isinstance(obj_func, ArrayMarshaler)

    enc = MapObjectEncoder()
    obj_func.marshal_log_object(enc)
    assert enc.fields == {"a": "b"}

    arr = SliceArrayEncoder()
    arr_func.marshal_log_array(arr)
    assert arr.elems == [7]


def test_slice_array_encoder_direct():
    arr = SliceArrayEncoder()
    arr.append_int(1)
    arr.append_object(Loggable(True))
    assert arr.elems == [1, {"loggable": "yes"}]


def test_json_reflected_encoder_writes_compact_line():
    buf = io.BytesIO()
    JSONReflectedEncoder(buf).encode({"b": [1, 2], "a": "<tag>&"})
    assert buf.getvalue() == b'{"a":"<tag>&","b":[1,2]}\n'


def test_json_reflected_encoder_multiple_values():
    buf = io.BytesIO()
    enc = JSONReflectedEncoder(buf)
    enc.encode("caf\u00e9")
    enc.encode(None)
    assert buf.getvalue().decode("utf-8").splitlines() == ['"caf\u00e9"', "null"]


def test_json_reflected_encoder_rejects_unserializable():
    buf = io.BytesIO()
    with pytest.raises(TypeError):
        JSONReflectedEncoder(buf).encode(object())
    assert buf.getvalue() == b""