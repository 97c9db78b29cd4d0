"""Pipeline stages and the enriching core that feeds the entry queue."""

import json
from typing import Any, Iterable, Protocol, Sequence

from cloudwatch_hook.entry_queue import EntryQueue, shared_queue
from cloudwatch_hook.errors import SerializationError
from cloudwatch_hook.levels import Level
from cloudwatch_hook.models import INTEGER_TYPES, Field, FieldType, LogEntry

_INT64_MASK = (1 << 64) - 1
_INT64_SIGN = 1 << 63


class Core(Protocol):
    """A stage of the logging pipeline."""

    def enabled(self, level: Level) -> bool:
        ...

    def write(self, entry: LogEntry, fields: Sequence[Field]) -> None:
        ...


def to_int64(value: int) -> int:
    """Wrap an integer into the signed 64-bit range (two's complement)."""
    value &= _INT64_MASK
    if value & _INT64_SIGN:
        value -= 1 << 64
    return value


def field_value(f: Field) -> Any:
    """Convert a field to the primitive value that gets serialized."""
    if f.type is FieldType.STRING:
        return f.string
    if f.type in INTEGER_TYPES:
        return to_int64(f.integer)
    if f.type is FieldType.BOOL:
        return bool(f.integer)
    return f.interface


def serialize_fields(fields: Sequence[Field]) -> str:
    """Serialize fields as a compact JSON object. Later keys overwrite earlier ones."""
    mapping = {f.key: field_value(f) for f in fields}
    try:
        return json.dumps(mapping, separators=(",", ":"), sort_keys=True, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Cannot serialize fields {sorted(mapping)}: {e}") from e


class EnrichingCore:
    """Wraps another core, appending serialized fields to each message.

    Every enriched entry is pushed onto the entry queue for the dispatch hook
    before the call is forwarded to the wrapped core.
    """

    def __init__(self, next_core: Core, level: Level = Level.DEBUG,
                 queue: EntryQueue | None = None, levels: Iterable[Level] | None = None):
        self._next = next_core
        self._level = level
        # An explicit level set replaces the threshold.
        self._levels = frozenset(levels) if levels is not None else None
        self._queue = queue if queue is not None else shared_queue

    @property
    def queue(self) -> EntryQueue:
        return self._queue

    def enabled(self, level: Level) -> bool:
        """True when this core enriches the level or the wrapped core writes it."""
        return self._accepts(level) or self._next.enabled(level)

    def _accepts(self, level: Level) -> bool:
        if self._levels is not None:
            return level in self._levels
        return level >= self._level

    def should_handle(self, entry: LogEntry) -> bool:
        """Whether this core's own filter accepts the entry."""
        return self._accepts(entry.level)

    def handle(self, entry: LogEntry, fields: Sequence[Field]):
        if self.enabled(entry.level):
            self.write(entry, fields)

    def write(self, entry: LogEntry, fields: Sequence[Field]):
        """Enrich, enqueue, then forward; entries this core rejects pass straight through.

        Raises SerializationError before any side effect.
        """
        if not self.should_handle(entry):
            if self._next.enabled(entry.level):
                self._next.write(entry, fields)
            return
        serialized = serialize_fields(fields)
        enriched = entry.with_message(f"{entry.message} {serialized}")
        self._queue.push(enriched)
        self._next.write(enriched, fields)
