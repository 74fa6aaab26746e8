"""Pytest configuration ensuring project root is importable.

Adds repository root to sys.path explicitly to avoid interpreter/path quirks.
"""
from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def _isolate_global_state():  # noqa: D401
    """Ensure process-wide state does not leak between tests.

    - Drop the default dispatcher (and with it every registration)
    - Reset metrics counters
    - Clear aggregated config cache, restore EVENTCORE_CONFIG_DIR
    """
    from eventcore import metrics
    from eventcore.config import clear_config_cache
    from eventcore.dispatcher import reset_default_dispatcher

    prev = os.environ.get("EVENTCORE_CONFIG_DIR")
    reset_default_dispatcher()
    metrics.reset_for_tests()
    clear_config_cache()
    try:
        yield
    finally:
        reset_default_dispatcher()
        metrics.reset_for_tests()
        clear_config_cache()
        if prev is None:
            os.environ.pop("EVENTCORE_CONFIG_DIR", None)
        else:
            os.environ["EVENTCORE_CONFIG_DIR"] = prev


@pytest.fixture
def empty_config_dir(tmp_path, monkeypatch):
    """Point config loading at an empty dir so defaults apply."""
    monkeypatch.setenv("EVENTCORE_CONFIG_DIR", str(tmp_path))
    return tmp_path
