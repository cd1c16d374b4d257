"""Recursive comparison engine for record values."""

from delta_engine.diff.delta_serializer import (
    delta_to_tree,
    deserialize_tree,
    parse_delta_json,
    serialize_delta,
)
from delta_engine.diff.engine import (
    DeltaEngine,
    DeltaEngineError,
    NotARecordError,
    TypeMismatchError,
    compare,
)
from delta_engine.diff.introspect import FieldInfo, ValueKind, classify, record_fields

__all__ = [
    "DeltaEngine",
    "DeltaEngineError",
    "FieldInfo",
    "NotARecordError",
    "TypeMismatchError",
    "ValueKind",
    "classify",
    "compare",
    "delta_to_tree",
    "deserialize_tree",
    "parse_delta_json",
    "record_fields",
    "serialize_delta",
]
