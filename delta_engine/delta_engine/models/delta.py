"""Delta models produced by the comparison engine.

A :class:`Delta` maps path segments (field names for records, stringified
indices for sequences) to :class:`ChangeEntry` values.  A change entry is a
tagged union over three kinds:

* ``ADD`` carries only ``new_value``.
* ``DEL`` carries only ``old_value``.
* ``MOD`` carries either scalar payloads (``old_value`` and/or ``new_value``)
  or a nested :class:`Delta` in ``value``, never both.

Payload presence is tracked through pydantic's ``model_fields_set``: a
payload explicitly set to ``None`` is present, an omitted one is absent.
"""

from __future__ import annotations

from collections.abc import ItemsView, Iterator, KeysView, Mapping, ValuesView
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator, model_validator

_UNSET: Any = object()


class ChangeKind(str, Enum):
    """Classification of a single change."""

    ADD = "ADD"
    DEL = "DEL"
    MOD = "MOD"


class ChangeEntry(BaseModel):
    """One difference at a path."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: ChangeKind = Field(..., description="Addition, deletion or modification.")
    old_value: Any = Field(default=None, description="Value in the old input.")
    new_value: Any = Field(default=None, description="Value in the new input.")
    value: Delta | None = Field(
        default=None,
        description="Nested changes of a record or sequence subtree.",
    )

    @model_validator(mode="after")
    def _check_shape(self) -> ChangeEntry:
        has_old, has_new, nested = self.has_old, self.has_new, self.is_nested

        if self.kind is ChangeKind.ADD:
            if has_old or nested or not has_new:
                raise ValueError("ADD entries carry only new_value")
        elif self.kind is ChangeKind.DEL:
            if has_new or nested or not has_old:
                raise ValueError("DEL entries carry only old_value")
        else:
            if nested and (has_old or has_new):
                raise ValueError("MOD entries carry either scalar payloads or a nested delta, not both")
            if not (nested or has_old or has_new):
                raise ValueError("MOD entries need a payload")
            if nested and self.value.is_empty():
                raise ValueError("nested deltas must not be empty")
        return self

    # -- constructors ------------------------------------------------------

    @classmethod
    def added(cls, new_value: Any) -> ChangeEntry:
        return cls(kind=ChangeKind.ADD, new_value=new_value)

    @classmethod
    def removed(cls, old_value: Any) -> ChangeEntry:
        return cls(kind=ChangeKind.DEL, old_value=old_value)

    @classmethod
    def modified(cls, old_value: Any = _UNSET, new_value: Any = _UNSET) -> ChangeEntry:
        """Scalar modification; omit a side to mark it absent."""
        payload: dict[str, Any] = {}
        if old_value is not _UNSET:
            payload["old_value"] = old_value
        if new_value is not _UNSET:
            payload["new_value"] = new_value
        return cls(kind=ChangeKind.MOD, **payload)

    @classmethod
    def nested(cls, delta: Delta | dict[str, ChangeEntry]) -> ChangeEntry:
        if not isinstance(delta, Delta):
            delta = Delta(delta)
        return cls(kind=ChangeKind.MOD, value=delta)

    # -- inspection --------------------------------------------------------

    @property
    def has_old(self) -> bool:
        return "old_value" in self.model_fields_set

    @property
    def has_new(self) -> bool:
        return "new_value" in self.model_fields_set

    @property
    def is_nested(self) -> bool:
        return self.value is not None

    def to_tree(self) -> dict[str, Any]:
        from delta_engine.diff.delta_serializer import entry_to_tree

        return entry_to_tree(self)


class Delta(RootModel[Mapping[str, ChangeEntry]]):
    """Read-only mapping of path segments to changes.

    An empty delta means "no difference"; test with :meth:`is_empty` or
    plain truthiness.  The entries are held in a ``MappingProxyType`` so a
    returned delta cannot be changed in place.
    """

    model_config = ConfigDict(frozen=True)

    root: Mapping[str, ChangeEntry] = Field(default_factory=dict, validate_default=True)

    @field_validator("root")
    @classmethod
    def _freeze_entries(cls, v: Mapping[str, ChangeEntry]) -> Mapping[str, ChangeEntry]:
        return MappingProxyType(dict(v))

    def is_empty(self) -> bool:
        return not self.root

    def __len__(self) -> int:
        return len(self.root)

    def __iter__(self) -> Iterator[str]:  # type: ignore[override]
        return iter(self.root)

    def __contains__(self, key: object) -> bool:
        return key in self.root

    def __getitem__(self, key: str) -> ChangeEntry:
        return self.root[key]

    def get(self, key: str, default: ChangeEntry | None = None) -> ChangeEntry | None:
        return self.root.get(key, default)

    def keys(self) -> KeysView[str]:
        return self.root.keys()

    def values(self) -> ValuesView[ChangeEntry]:
        return self.root.values()

    def items(self) -> ItemsView[str, ChangeEntry]:
        return self.root.items()

    def to_tree(self) -> dict[str, Any]:
        """Render as a plain tree of primitives (see :mod:`delta_engine.diff.delta_serializer`)."""
        from delta_engine.diff.delta_serializer import delta_to_tree

        return delta_to_tree(self)

    def to_json(self, pretty: bool = False) -> str:
        from delta_engine.diff.delta_serializer import serialize_delta

        return serialize_delta(self, pretty=pretty)


ChangeEntry.model_rebuild()
Delta.model_rebuild()
