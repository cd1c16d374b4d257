"""Result models for the comparison engine."""

from __future__ import annotations

from delta_engine.models.delta import ChangeEntry, ChangeKind, Delta

__all__ = [
    "ChangeEntry",
    "ChangeKind",
    "Delta",
]
