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
def _isolate_config_env():  # noqa: D401
    """Ensure global config/env/metrics side effects do not leak.

    - Point SVCBUS_CONFIG_DIR at the repository configs/ directory
    - Clear aggregated config cache and metrics between tests
    - Restore SVCBUS_CONFIG_DIR to original value
    """
    from svcbus import metrics
    from svcbus.config import clear_config_cache

    prev = os.environ.get("SVCBUS_CONFIG_DIR")
    os.environ["SVCBUS_CONFIG_DIR"] = str(ROOT / "configs")
    clear_config_cache()
    metrics.reset_for_tests()
    try:
        yield
    finally:
        clear_config_cache()
        if prev is None:
            os.environ.pop("SVCBUS_CONFIG_DIR", None)
        else:
            os.environ["SVCBUS_CONFIG_DIR"] = prev


@pytest.fixture()
def registry():
    from svcbus.defer import QueueScheduler
    from svcbus.modules import ModuleRegistry

    return ModuleRegistry(scheduler=QueueScheduler())
