"""Shared fixtures for CLI tests.

The CLI callback installs its own root log handler and reads ``DELTA_*``
settings from the environment and ``.env``.  Every test runs in a clean
working directory with the root logger restored afterwards.
"""

from __future__ import annotations

import logging
import os

import pytest


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path):
    for name in list(os.environ):
        if name.upper().startswith("DELTA_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
