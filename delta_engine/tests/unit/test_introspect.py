"""Unit tests for delta_engine.diff.introspect."""

from __future__ import annotations

import asyncio
import datetime
import queue
import uuid
from collections import namedtuple
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum, IntEnum
from pathlib import Path
from typing import NamedTuple

import pytest
from delta_engine.diff.introspect import (
    FieldInfo,
    ValueKind,
    classify,
    has_public_fields,
    is_public_name,
    public_fields,
    record_fields,
)
from pydantic import BaseModel, PrivateAttr


@dataclass
class Account:
    owner: str
    balance: float
    _audit: str = "internal"


class Profile(BaseModel):
    name: str
    age: int
    _cache: dict = PrivateAttr(default_factory=dict)


class Pair(NamedTuple):
    left: int
    right: int


LegacyPair = namedtuple("LegacyPair", ["left", "right"])


class Plain:
    def __init__(self) -> None:
        self.visible = 1
        self._hidden = 2


class Slotted:
    __slots__ = ("a", "_b")

    def __init__(self) -> None:
        self.a = 1
        self._b = 2


class SlottedChild(Slotted):
    __slots__ = ("c",)

    def __init__(self) -> None:
        super().__init__()
        self.c = 3


class Priority(IntEnum):
    LOW = 1
    HIGH = 2


class Mode(Enum):
    ON = "on"


class Hooked:
    def __delta_fields__(self):
        return [("shown", 1, True), ("concealed", 2, False)]


def _generator():
    yield 1


# ---------------------------------------------------------------------------
# classify
# ---------------------------------------------------------------------------


class TestClassify:
    @pytest.mark.parametrize(
        "value,kind",
        [
            (None, ValueKind.ABSENT),
            (True, ValueKind.INTEGER),
            (7, ValueKind.INTEGER),
            (1.5, ValueKind.FLOAT),
            ("s", ValueKind.STRING),
            (b"s", ValueKind.STRING),
            (Decimal("1.1"), ValueKind.SCALAR),
            (datetime.date(2024, 1, 1), ValueKind.SCALAR),
            (datetime.datetime(2024, 1, 1, 12), ValueKind.SCALAR),
            (uuid.UUID(int=1), ValueKind.SCALAR),
            (Path("/tmp"), ValueKind.SCALAR),
            (Priority.HIGH, ValueKind.SCALAR),
            (Mode.ON, ValueKind.SCALAR),
            ([1], ValueKind.SEQUENCE),
            ((1, 2), ValueKind.SEQUENCE),
            ({"a": 1}, ValueKind.MAPPING),
            ({1, 2}, ValueKind.MAPPING),
            (frozenset(), ValueKind.MAPPING),
            (1 + 2j, ValueKind.OPAQUE),
            (len, ValueKind.OPAQUE),
            (lambda: None, ValueKind.OPAQUE),
            (Account, ValueKind.OPAQUE),
            (pytest, ValueKind.OPAQUE),
            (queue.Queue(), ValueKind.OPAQUE),
            (iter([1]), ValueKind.OPAQUE),
            (object(), ValueKind.OPAQUE),
        ],
    )
    def test_kinds(self, value, kind):
        assert classify(value) is kind

    def test_generator_is_opaque(self):
        assert classify(_generator()) is ValueKind.OPAQUE

    def test_asyncio_queue_is_opaque(self):
        assert classify(asyncio.Queue()) is ValueKind.OPAQUE

    @pytest.mark.parametrize(
        "value",
        [
            Account("a", 1.0),
            Profile(name="n", age=1),
            Pair(1, 2),
            LegacyPair(1, 2),
            Plain(),
            Slotted(),
            Hooked(),
        ],
    )
    def test_records(self, value):
        assert classify(value) is ValueKind.RECORD

    def test_hook_on_class_is_not_a_record(self):
        assert classify(Hooked) is ValueKind.OPAQUE


# ---------------------------------------------------------------------------
# record_fields
# ---------------------------------------------------------------------------


class TestRecordFields:
    def test_dataclass(self):
        fields = record_fields(Account("ann", 2.5))
        assert fields == [
            FieldInfo("owner", "ann", True),
            FieldInfo("balance", 2.5, True),
            FieldInfo("_audit", "internal", False),
        ]

    def test_pydantic_private_attrs_not_listed(self):
        names = [f.name for f in record_fields(Profile(name="n", age=3))]
        assert names == ["name", "age"]

    def test_named_tuple(self):
        assert public_fields(Pair(1, 2)) == {"left": 1, "right": 2}
        assert public_fields(LegacyPair(3, 4)) == {"left": 3, "right": 4}

    def test_plain_instance(self):
        assert public_fields(Plain()) == {"visible": 1}

    def test_slots_across_hierarchy(self):
        fields = {f.name: f for f in record_fields(SlottedChild())}
        assert set(fields) == {"a", "_b", "c"}
        assert not fields["_b"].public

    def test_unset_slot_skipped(self):
        value = Slotted.__new__(Slotted)
        value.a = 5
        assert public_fields(value) == {"a": 5}

    def test_unassigned_dataclass_field_skipped(self):
        @dataclass
        class Lazy:
            name: str
            computed: int = field(init=False)

        assert record_fields(Lazy("x")) == [FieldInfo("name", "x", True)]

    def test_hook(self):
        fields = record_fields(Hooked())
        assert fields == [FieldInfo("shown", 1, True), FieldInfo("concealed", 2, False)]
        assert public_fields(Hooked()) == {"shown": 1}

    def test_has_public_fields(self):
        @dataclass
        class Hidden:
            _a: int

        @dataclass
        class Empty:
            pass

        assert has_public_fields(Account("a", 1.0))
        assert not has_public_fields(Hidden(1))
        assert not has_public_fields(Empty())


class TestIsPublicName:
    @pytest.mark.parametrize(
        "name,expected",
        [("name", True), ("Name", True), ("_name", False), ("__dunder__", False), ("", False)],
    )
    def test_names(self, name, expected):
        assert is_public_name(name) is expected
