"""Runtime introspection of compared values.

:func:`classify` maps any Python value to the :class:`ValueKind` that selects
its comparison policy, and :func:`record_fields` lists the fields of a
record.  Records are recognised in this order:

1. objects exposing ``__delta_fields__()``, which returns ``(name, value,
   public)`` triples; this lets types without introspectable storage take
   part in comparisons,
2. dataclass instances,
3. pydantic models,
4. named tuples,
5. any other class instance with a ``__dict__`` or ``__slots__``.

Field visibility follows the Python convention: names starting with an
underscore are private.
"""

from __future__ import annotations

import asyncio
import dataclasses
import datetime
import inspect
import queue
import uuid
from collections.abc import Iterable, Iterator, Mapping, Sequence, Set
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from pathlib import PurePath
from typing import Any, NamedTuple

from pydantic import BaseModel

_MISSING: Any = object()

_SCALAR_TYPES: tuple[type, ...] = (
    Enum,
    Decimal,
    Fraction,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    uuid.UUID,
    PurePath,
)

# Channel-like values: reading them would consume or block.
_CHANNEL_TYPES: tuple[type, ...] = (
    queue.Queue,
    queue.SimpleQueue,
    asyncio.Queue,
    Iterator,
)


class ValueKind(str, Enum):
    ABSENT = "absent"
    RECORD = "record"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    SCALAR = "scalar"
    OPAQUE = "opaque"


class FieldInfo(NamedTuple):
    name: str
    value: Any
    public: bool


def is_public_name(name: str) -> bool:
    return bool(name) and not name.startswith("_")


def classify(value: Any) -> ValueKind:
    """Return the comparison kind of *value*."""
    if value is None:
        return ValueKind.ABSENT
    if isinstance(value, type) or inspect.ismodule(value) or inspect.isroutine(value):
        return ValueKind.OPAQUE
    if callable(getattr(value, "__delta_fields__", None)):
        return ValueKind.RECORD
    # Enums first: IntEnum and StrEnum members are also ints and strings.
    if isinstance(value, Enum):
        return ValueKind.SCALAR
    if isinstance(value, (bool, int)):
        return ValueKind.INTEGER
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, complex):
        return ValueKind.OPAQUE
    if isinstance(value, (str, bytes, bytearray)):
        return ValueKind.STRING
    if isinstance(value, _SCALAR_TYPES):
        return ValueKind.SCALAR
    if dataclasses.is_dataclass(value) or isinstance(value, BaseModel):
        return ValueKind.RECORD
    if isinstance(value, tuple) and hasattr(value, "_fields"):
        return ValueKind.RECORD
    if isinstance(value, Sequence):
        return ValueKind.SEQUENCE
    if isinstance(value, (Mapping, Set)):
        return ValueKind.MAPPING
    if isinstance(value, _CHANNEL_TYPES) or inspect.isawaitable(value) or callable(value):
        return ValueKind.OPAQUE
    if hasattr(value, "__dict__") or _slot_names(type(value)):
        return ValueKind.RECORD
    return ValueKind.OPAQUE


def record_fields(value: Any) -> list[FieldInfo]:
    """List the fields of a record in declaration order."""
    custom = getattr(value, "__delta_fields__", None)
    if callable(custom):
        return [FieldInfo(name, field_value, bool(public)) for name, field_value, public in custom()]

    if dataclasses.is_dataclass(value):
        return _named(value, (f.name for f in dataclasses.fields(value)))

    if isinstance(value, BaseModel):
        return _named(value, type(value).model_fields)

    if isinstance(value, tuple) and hasattr(value, "_fields"):
        return [FieldInfo(name, item, is_public_name(name)) for name, item in zip(value._fields, value)]

    names = dict.fromkeys(_slot_names(type(value)))
    names.update(dict.fromkeys(getattr(value, "__dict__", {})))
    return _named(value, names)


def public_fields(value: Any) -> dict[str, Any]:
    """Map of public field name to value, in declaration order."""
    return {f.name: f.value for f in record_fields(value) if f.public}


def has_public_fields(value: Any) -> bool:
    return any(f.public for f in record_fields(value))


def _named(value: Any, names: Iterable[str]) -> list[FieldInfo]:
    # Declared but never assigned (e.g. dataclass ``field(init=False)``) counts as absent.
    fields: list[FieldInfo] = []
    for name in names:
        field_value = getattr(value, name, _MISSING)
        if field_value is not _MISSING:
            fields.append(FieldInfo(name, field_value, is_public_name(name)))
    return fields


def _slot_names(cls: type) -> list[str]:
    names: list[str] = []
    for klass in cls.__mro__:
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        names.extend(s for s in slots if s not in ("__dict__", "__weakref__") and s not in names)
    return names
