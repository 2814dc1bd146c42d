"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from gridcalc.logging.events import set_log_dir


@pytest.fixture(autouse=True)
def _no_event_sink():
    """Keep the module-level event sink unset between tests."""
    set_log_dir(None)
    yield
    set_log_dir(None)
