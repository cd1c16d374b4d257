"""Recursive comparison engine for record values.

:func:`compare` walks two values of the same record type field by field and
returns a :class:`Delta` holding only the fields that differ.  Each field is
compared according to its kind:

* ``None`` acts as an absent optional reference.  None to value reports a
  ``MOD`` entry with only ``new_value``; value to None one with only
  ``old_value``; two present values are compared recursively.
* Records recurse into their public fields.  A record without public fields
  is compared by ``str()`` rendering and reported with its full values.
* Sequences are compared by position, not by minimal edit distance: an
  element moved from index 2 to index 5 shows up as unrelated ``MOD``,
  ``ADD`` or ``DEL`` entries rather than as a move.
* Ints, bools, strings and other plain scalars use exact equality.
* Floats differ only when ``abs(old - new)`` exceeds the configured
  tolerance.
* Mappings, sets, callables, channel-like objects and complex numbers are
  not compared and never produce an entry.

Configuration is passed per call through :class:`EngineConfig`; excluded
field names are skipped at every nesting level.  The engine never mutates
its inputs and keeps no state between calls.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from delta_engine.config import EngineConfig
from delta_engine.diff.introspect import ValueKind, classify, has_public_fields, public_fields
from delta_engine.models.delta import ChangeEntry, Delta
from delta_engine.telemetry.profiling import profile_operation

logger = logging.getLogger(__name__)


class DeltaEngineError(Exception):
    """Base class for comparison failures."""


class TypeMismatchError(DeltaEngineError):
    """The two inputs are not of the identical type."""

    def __init__(self, old_type: type, new_type: type) -> None:
        self.old_type = old_type
        self.new_type = new_type
        super().__init__(
            f"input values do not share the same type: {old_type.__qualname__} != {new_type.__qualname__}"
        )


class NotARecordError(DeltaEngineError):
    """The inputs are not record values."""

    def __init__(self, value_type: type) -> None:
        self.value_type = value_type
        super().__init__(f"input values are not records: {value_type.__qualname__}")


class DeltaEngine:
    """Comparison engine bound to one :class:`EngineConfig`.

    Instances hold no mutable state and may be shared between threads.
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self._config = config if config is not None else EngineConfig()

    @property
    def config(self) -> EngineConfig:
        return self._config

    def compare(self, old: Any, new: Any) -> Delta:
        """Compare two records of the same type.

        Raises
        ------
        TypeMismatchError
            If ``type(old)`` is not ``type(new)``.
        NotARecordError
            If the inputs are not records.
        """
        old_type, new_type = type(old), type(new)
        if old_type is not new_type:
            raise TypeMismatchError(old_type, new_type)
        if classify(old) is not ValueKind.RECORD:
            raise NotARecordError(old_type)

        name = old_type.__name__
        if not (has_public_fields(old) or has_public_fields(new)):
            entry = self._compare_rendered(old, new, name)
            return Delta({name: entry} if entry is not None else {})

        return Delta(self._compare_fields(old, new, depth=1, path=name))

    # -- records -----------------------------------------------------------

    def _compare_fields(self, old: Any, new: Any, depth: int, path: str) -> dict[str, ChangeEntry]:
        old_fields = public_fields(old)
        new_fields = public_fields(new)

        changes: dict[str, ChangeEntry] = {}
        for name in {**old_fields, **new_fields}:
            if self._config.is_excluded(name):
                continue
            # Plain instances may gain or lose attributes at runtime.
            if name not in new_fields:
                changes[name] = ChangeEntry.removed(old_fields[name])
            elif name not in old_fields:
                changes[name] = ChangeEntry.added(new_fields[name])
            else:
                entry = self._compare_value(old_fields[name], new_fields[name], depth, f"{path}.{name}")
                if entry is not None:
                    changes[name] = entry
        return changes

    def _compare_record(self, old: Any, new: Any, depth: int, path: str) -> ChangeEntry | None:
        if type(old) is not type(new):
            return ChangeEntry.modified(old, new)
        if not (has_public_fields(old) or has_public_fields(new)):
            return self._compare_rendered(old, new, path)

        changes = self._compare_fields(old, new, depth + 1, path)
        return ChangeEntry.nested(changes) if changes else None

    # -- sequences ---------------------------------------------------------

    def _compare_sequence(self, old: Any, new: Any, depth: int, path: str) -> ChangeEntry | None:
        n, m = len(old), len(new)
        changes: dict[str, ChangeEntry] = {}

        for i in range(min(n, m)):
            entry = self._compare_value(old[i], new[i], depth + 1, f"{path}[{i}]")
            if entry is not None:
                changes[str(i)] = entry
        for i in range(m, n):
            changes[str(i)] = ChangeEntry.removed(old[i])
        for i in range(n, m):
            changes[str(i)] = ChangeEntry.added(new[i])

        return ChangeEntry.nested(changes) if changes else None

    # -- dispatch ----------------------------------------------------------

    def _compare_value(self, old: Any, new: Any, depth: int, path: str) -> ChangeEntry | None:
        if old is None or new is None:
            if old is None and new is None:
                return None
            if old is None:
                return ChangeEntry.modified(new_value=new)
            return ChangeEntry.modified(old_value=old)

        old_kind, new_kind = classify(old), classify(new)

        if old_kind in _CONTAINER_KINDS and old_kind is new_kind:
            max_depth = self._config.max_depth
            if max_depth is not None and depth > max_depth:
                logger.warning(
                    "max depth %d reached at %s; comparing rendered values",
                    max_depth,
                    path,
                    extra={"path": path},
                )
                return self._compare_rendered(old, new, path)
            if old_kind is ValueKind.RECORD:
                return self._compare_record(old, new, depth, path)
            return self._compare_sequence(old, new, depth, path)

        if old_kind in _NUMERIC_KINDS and new_kind in _NUMERIC_KINDS and ValueKind.FLOAT in (old_kind, new_kind):
            if _floats_differ(old, new, self._config.float_tolerance):
                return ChangeEntry.modified(old, new)
            return None

        if old_kind in _UNCOMPARED_KINDS or new_kind in _UNCOMPARED_KINDS:
            return None

        if old != new:
            return ChangeEntry.modified(old, new)
        return None

    def _compare_rendered(self, old: Any, new: Any, path: str) -> ChangeEntry | None:
        if str(old) == str(new):
            return None
        logger.debug("%s differs by rendered value", path, extra={"path": path})
        return ChangeEntry.modified(old, new)


_CONTAINER_KINDS = frozenset({ValueKind.RECORD, ValueKind.SEQUENCE})
_NUMERIC_KINDS = frozenset({ValueKind.INTEGER, ValueKind.FLOAT})
_UNCOMPARED_KINDS = frozenset({ValueKind.MAPPING, ValueKind.OPAQUE})


def _floats_differ(old: float, new: float, tolerance: float) -> bool:
    """Absolute-difference test; NaN only equals NaN."""
    old_nan, new_nan = math.isnan(old), math.isnan(new)
    if old_nan or new_nan:
        return old_nan != new_nan
    if old == new:
        return False
    return abs(old - new) > tolerance


@profile_operation("delta.compare")
def compare(old: Any, new: Any, config: EngineConfig | None = None) -> Delta:
    """Compute the delta between two records of the same type.

    Parameters
    ----------
    old:
        The base value.
    new:
        The target value; must be of exactly the same type as *old*.
    config:
        Per-call options.  ``None`` uses :class:`EngineConfig` defaults.

    Returns
    -------
    Delta
        Changes keyed by field name; empty when the values are equal.

    Raises
    ------
    TypeMismatchError
        If the inputs differ in type.
    NotARecordError
        If the inputs are not records.
    """
    return DeltaEngine(config).compare(old, new)
