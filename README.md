# corelog

Building blocks for structured logging pipelines. There are no runtime
dependencies beyond the Python 3.11+ standard library.

## Modules

- `corelog.level` defines the priorities. `Level` is an `int` subclass and its
  members are `Level.DEBUG`, `Level.STAT`, `Level.INFO`, `Level.WARN`,
  `Level.ERROR`, `Level.DPANIC`, `Level.PANIC` and `Level.FATAL`, plus
  `Level.INVALID`. `str(level)` gives the lower-case name and
  `level.capital_string()` the upper-case name. Unknown values render as
  `Level(n)` and `LEVEL(n)`. A level also works as an enabler:
  `level.enabled(other)` is true when `other >= level`.
  - `parse_level(text)` accepts a name in any letter case, and the empty
    string gives `Level.INFO`. Any other text raises `UnrecognizedLevelError`,
    which is a `ValueError`.
  - `level_of(enabler)` returns the lowest level the enabler accepts, or
    `INVALID_LEVEL` if it accepts none. An enabler that has a `level()` method
    answers for itself.
- `corelog.write_syncer` provides writers that can also be synced.
  - `add_sync(writer)` returns the writer unchanged if it already has
    `write` and `sync`. Otherwise it wraps the writer, and the wrapper's
    `sync` calls `flush` when the writer has one.
  - `lock(ws)` wraps a syncer in a `LockedWriteSyncer`. A syncer that is
    already locked is returned unchanged.
  - `new_multi_write_syncer(*syncers)` duplicates writes and syncs to every
    syncer, and returns a single syncer unchanged. Every syncer is tried
    before errors are raised. One error is raised as it is, and several are
    raised as an `ExceptionGroup`. `write` returns the smallest non-zero byte
    count.
- `corelog.encoder` holds the marshalers and encoders.
  - The `ObjectMarshaler` and `ArrayMarshaler` protocols, with the
    `ObjectMarshalerFunc` and `ArrayMarshalerFunc` adapters for plain
    functions.
  - `MapObjectEncoder` encodes into a plain dict held in `.fields`.
    `open_namespace` nests every value added after it.
  - `SliceArrayEncoder` encodes into a plain list held in `.elems`.
  - `JSONReflectedEncoder(writer).encode(value)` writes compact JSON with
    sorted keys, followed by a newline, as UTF-8 bytes.
- `corelog.core` holds the entry types, the `Core` interface and tees.
  - `Entry` has `level`, `message`, `time`, `logger_name` and `stack`.
  - `Field(key, value)`: the value's Python type decides how `add_to`
    encodes it. `namespace(key)` makes a field that opens a namespace.
  - `CheckedEntry` and `add_core`.
  - The abstract `Core` interface: `enabled`, `with_fields`, `check`, `write`
    and `sync`.
  - `NopCore` logs nothing.
  - `new_tee(*cores)` returns a `MultiCore` that writes each entry to every
    core. With no cores it returns a `NopCore`, and a single core is returned
    unchanged.
- `corelog.observer` records log output for tests. `observe(enabler)` returns
  an `ObserverCore` and the `ObservedLogs` it records into.
  - `ObservedLogs` supports `len()`, `all`, `take_all` and `all_untimed`.
  - Its filters are `filter_level_exact`, `filter_message`,
    `filter_message_snippet`, `filter_field`, `filter_field_key` and `filter`.
  - Each recorded `LoggedEntry` carries its `context` fields and provides
    `context_map()`.
- `corelog.sampler` caps repeated entries. `new_sampler(core, tick, first,
  thereafter, hook)` returns a `Sampler`. The sampler works per tick, and
  `tick` is a `timedelta` or a number of seconds.
  - Within a tick, the first `first` entries with the same level and message
    pass through.
  - After those, every `thereafter`-th entry passes. A `thereafter` of zero
    drops all the rest of that tick.
  - The optional `hook(entry, decision)` receives
    `SamplingDecision.LOG_SAMPLED` or `SamplingDecision.LOG_DROPPED`.
- `corelog.grpclog`: `GrpcLogger(core, debug=False)` has the gRPC logger
  method set.
  - `info`/`infoln`/`infof`, `warning…`, `error…` and `fatal…` log at the
    matching level. `print`/`printf`/`println` log at INFO, or at DEBUG when
    `debug=True`.
  - The fatal methods log at FATAL and then call `sys.exit(1)`.
  - `v(level)` reports whether a gRPC verbosity level is enabled. The levels
    are `GRPC_INFO`, `GRPC_WARN`, `GRPC_ERROR` and `GRPC_FATAL`.
- `corelog.stream`: `LineWriter(core, level=Level.INFO)` is a writer that logs
  one entry per line.
  - A partial line stays buffered until `sync()` or `close()`.
  - It works as a context manager.

## Observing logs in tests

```python
from corelog.core import Entry, Field
from corelog.level import Level
from corelog.observer import observe

core, logs = observe(Level.INFO)
checked = core.with_fields([Field("attempt", 3)]).check(
    Entry(level=Level.INFO, message="hello"), None
)
if checked is not None:
    checked.write()

assert [e.message for e in logs.all()] == ["hello"]
assert logs.all()[0].context_map() == {"attempt": 3}
```

## Sampling

```python
from corelog.sampler import new_sampler

sampled = new_sampler(core, tick=1.0, first=10, thereafter=5, hook=None)
```

Within each one-second tick, the first 10 entries that share a level and
message pass through. After that, only every 5th one does.

## Logging a stream line by line

```python
from corelog.stream import LineWriter

with LineWriter(core, Level.WARN) as out:
    out.write(b"first line\nsecond ")
    out.write(b"line\n")
```

## What is not included

The package has no logger front end with convenience methods, no encoder that
turns entries into JSON or console lines, and no core that writes encoded
entries to a `WriteSyncer`. It also loads no configuration. You supply a
`Core` yourself, for example the `ObserverCore` from `observe`. The package
has no command-line tool.

## Running the tests

```
pip install -e ".[test]"
pytest
```