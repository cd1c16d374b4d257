"""Logging configuration and call profiling."""

from __future__ import annotations

from delta_engine.telemetry.json_formatter import JSONFormatter, configure_logging
from delta_engine.telemetry.profiling import ProfileCollector, ProfileResult, profile_operation

__all__ = [
    "JSONFormatter",
    "ProfileCollector",
    "ProfileResult",
    "configure_logging",
    "profile_operation",
]
