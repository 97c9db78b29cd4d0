"""Log entry and structured field models."""

import dataclasses
import datetime
import enum
import uuid
from dataclasses import dataclass, field
from typing import Any, Mapping

from cloudwatch_hook.levels import Level


class FieldType(enum.Enum):
    STRING = "string"
    INT64 = "int64"
    INT32 = "int32"
    INT16 = "int16"
    INT8 = "int8"
    UINT64 = "uint64"
    UINT32 = "uint32"
    UINT16 = "uint16"
    UINT8 = "uint8"
    BOOL = "bool"
    FLOAT64 = "float64"
    ANY = "any"


INTEGER_TYPES = frozenset({
    FieldType.INT64,
    FieldType.INT32,
    FieldType.INT16,
    FieldType.INT8,
    FieldType.UINT64,
    FieldType.UINT32,
    FieldType.UINT16,
    FieldType.UINT8,
})


@dataclass(frozen=True)
class Field:
    """A typed key/value pair attached to a log call.

    Integer-family and bool values live in ``integer``, strings in ``string``,
    anything else in ``interface``.
    """

    key: str
    type: FieldType
    integer: int = 0
    string: str = ""
    interface: Any = None


def _new_entry_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class LogEntry:
    level: Level
    logger_name: str = ""
    message: str = ""
    timestamp: datetime.datetime = field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
    )
    entry_id: str = field(default_factory=_new_entry_id)
    # formatted traceback, kept apart so enrichment appends to the message line
    stack: str = ""

    def with_message(self, message: str) -> "LogEntry":
        """Return a copy carrying *message*; the entry id is preserved."""
        return dataclasses.replace(self, message=message)


def string_field(key: str, value: str) -> Field:
    return Field(key=key, type=FieldType.STRING, string=value)


def int_field(key: str, value: int, type: FieldType = FieldType.INT64) -> Field:
    if type not in INTEGER_TYPES:
        raise ValueError(f"{type} is not an integer field type")
    return Field(key=key, type=type, integer=value)


def uint_field(key: str, value: int) -> Field:
    return Field(key=key, type=FieldType.UINT64, integer=value)


def bool_field(key: str, value: bool) -> Field:
    return Field(key=key, type=FieldType.BOOL, integer=1 if value else 0)


def float_field(key: str, value: float) -> Field:
    return Field(key=key, type=FieldType.FLOAT64, interface=value)


def any_field(key: str, value: Any) -> Field:
    return Field(key=key, type=FieldType.ANY, interface=value)


def fields_from_mapping(mapping: Mapping[str, Any]) -> list[Field]:
    """Infer a typed field for each item of *mapping*, preserving its order."""
    fields: list[Field] = []
    for key, value in mapping.items():
        # bool is a subclass of int, so it must be checked first
        if isinstance(value, bool):
            fields.append(bool_field(key, value))
        elif isinstance(value, int):
            fields.append(int_field(key, value))
        elif isinstance(value, str):
            fields.append(string_field(key, value))
        elif isinstance(value, float):
            fields.append(float_field(key, value))
        else:
            fields.append(any_field(key, value))
    return fields
