"""Rendering of deltas into plain trees and JSON.

The rendered tree uses one object per delta level, keyed by path segment, and
one object per change entry with the keys ``type`` (``"ADD"``, ``"DEL"`` or
``"MOD"``), ``old_value``, ``new_value`` and ``value`` (nested delta).  Keys
without a payload are omitted rather than written as ``null``.

Leaf values are converted to JSON-compatible primitives.  Finite floats and ints
are kept as-is so that no precision is lost, while NaN and infinities become
the strings ``"NaN"``, ``"Infinity"`` and ``"-Infinity"``.  Records, pydantic
models included, become objects of their public fields; a record with no
public fields renders as ``str(value)``.

Both JSON modes use sorted keys so that identical deltas always produce
byte-identical output.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping, Set
from enum import Enum
from typing import Any

from delta_engine.diff.introspect import ValueKind, classify, has_public_fields, public_fields
from delta_engine.models.delta import ChangeEntry, ChangeKind, Delta

_PAYLOAD_KEYS = ("old_value", "new_value", "value")

# JSON has no NaN or infinity literals.
_NON_FINITE = {"nan": "NaN", "inf": "Infinity", "-inf": "-Infinity"}


def delta_to_tree(delta: Delta) -> dict[str, Any]:
    """Render *delta* recursively as nested dicts of primitives."""
    return {key: entry_to_tree(entry) for key, entry in delta.items()}


def entry_to_tree(entry: ChangeEntry) -> dict[str, Any]:
    node: dict[str, Any] = {"type": entry.kind.value}
    if entry.has_old:
        node["old_value"] = value_to_tree(entry.old_value)
    if entry.has_new:
        node["new_value"] = value_to_tree(entry.new_value)
    if entry.value is not None:
        node["value"] = delta_to_tree(entry.value)
    return node


def value_to_tree(value: Any) -> Any:
    """Convert a compared value to a JSON-compatible primitive tree."""
    if isinstance(value, Enum):
        return value_to_tree(value.value)
    if isinstance(value, float) and not math.isfinite(value):
        return _NON_FINITE[repr(float(value))]
    if value is None or isinstance(value, (bool, int, float, str)):
        return value

    kind = classify(value)
    if kind is ValueKind.RECORD:
        if not has_public_fields(value):
            return str(value)
        return {name: value_to_tree(field_value) for name, field_value in public_fields(value).items()}
    if kind is ValueKind.SEQUENCE:
        return [value_to_tree(item) for item in value]
    if isinstance(value, Mapping):
        return {str(k): value_to_tree(v) for k, v in value.items()}
    if isinstance(value, Set):
        return sorted((value_to_tree(item) for item in value), key=repr)
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    return str(value)


def serialize_delta(delta: Delta, pretty: bool = False) -> str:
    """Serialize *delta* to a deterministic JSON string.

    Parameters
    ----------
    delta:
        The delta to render.
    pretty:
        Use 2-space indentation instead of the compact form.  Both modes
        carry the same tree.
    """
    tree = delta_to_tree(delta)
    if pretty:
        return json.dumps(tree, indent=2, sort_keys=True, ensure_ascii=False, allow_nan=False)
    return json.dumps(tree, separators=(",", ":"), sort_keys=True, ensure_ascii=False, allow_nan=False)


def deserialize_tree(tree: Mapping[str, Any]) -> Delta:
    """Rebuild a :class:`Delta` from a tree produced by :func:`delta_to_tree`.

    Leaf values stay in their primitive form.

    Raises
    ------
    ValueError
        If a node is not an entry object or carries an unknown ``type``.
    pydantic.ValidationError
        If an entry's payload keys do not fit its type.
    """
    entries: dict[str, ChangeEntry] = {}
    for key, node in tree.items():
        if not isinstance(node, Mapping) or "type" not in node:
            raise ValueError(f"{key}: expected a change entry object")
        try:
            kind = ChangeKind(node["type"])
        except ValueError:
            raise ValueError(f"{key}: unknown change type {node['type']!r}") from None

        payload: dict[str, Any] = {k: node[k] for k in _PAYLOAD_KEYS if k in node}
        if "value" in payload:
            if not isinstance(payload["value"], Mapping):
                raise ValueError(f"{key}: nested value must be an object")
            payload["value"] = deserialize_tree(payload["value"])
        entries[str(key)] = ChangeEntry(kind=kind, **payload)
    return Delta(entries)


def parse_delta_json(json_str: str) -> Delta:
    """Parse JSON produced by :func:`serialize_delta` back into a :class:`Delta`."""
    tree = json.loads(json_str)
    if not isinstance(tree, Mapping):
        raise ValueError("delta JSON must be an object")
    return deserialize_tree(tree)
