"""Root conftest — shared test configuration."""

import os

# Never touch a real database or data file from the test suite
os.environ.setdefault("FIRECHECK_PERSISTENCE_BACKEND", "local")
os.environ.setdefault("FIRECHECK_LOCAL_STORE_PATH", "")
os.environ.setdefault("FIRECHECK_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("FIRECHECK_LOG_FORMAT", "text")

import pytest  # noqa: E402

from tests.factories import TickingClock  # noqa: E402


@pytest.fixture
def clock():
    return TickingClock()
