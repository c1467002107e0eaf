"""
Repo-wide pytest hooks:
- Register the markers used across the suites
- Keep cached configuration and logging context from leaking between tests
"""

from __future__ import annotations

import pytest

from mockvm import logging as mlog
from mockvm.config import load_config


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "property: hypothesis-driven property test")


@pytest.fixture(autouse=True)
def _fresh_config_and_log_context():
    """Each test sees MOCKVM_* env as it is now and starts with an empty log context."""
    load_config.cache_clear()
    mlog.clear_context()
    yield
    load_config.cache_clear()
    mlog.clear_context()
