"""Structured deltas between two values of the same record type.

Example::

    from delta_engine import EngineConfig, compare

    delta = compare(old_config, new_config, EngineConfig(excluded_fields={"updated_at"}))
    if delta:
        print(delta.to_json(pretty=True))
"""

from delta_engine.config import EngineConfig, Settings, load_settings
from delta_engine.diff import (
    DeltaEngine,
    DeltaEngineError,
    NotARecordError,
    TypeMismatchError,
    compare,
    serialize_delta,
)
from delta_engine.models import ChangeEntry, ChangeKind, Delta

__version__ = "0.1.0"

__all__ = [
    "ChangeEntry",
    "ChangeKind",
    "Delta",
    "DeltaEngine",
    "DeltaEngineError",
    "EngineConfig",
    "NotARecordError",
    "Settings",
    "TypeMismatchError",
    "compare",
    "load_settings",
    "serialize_delta",
]
