"""
Pytest Configuration and Fixtures.
Shared fixtures for ledger, engine and API tests.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from mutualpool.core.config import Settings
from mutualpool.core.constants import SECONDS_PER_DAY
from mutualpool.core.dependencies import get_engine
from mutualpool.main import app
from mutualpool.services.insurance_engine import InsuranceEngine
from mutualpool.storage.ledger_store import LedgerStore

OWNER = "owner"
ALICE = "alice"
BOB = "bob"
THIRTY_DAYS = 30 * SECONDS_PER_DAY


class FakeClock:
    """Controllable time source."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, days: int = 0, seconds: int = 0):
        self.now = self.now + timedelta(days=days, seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 1, tzinfo=timezone.utc))


@pytest.fixture
def test_settings():
    return Settings(OWNER_ID=OWNER, PERSIST_LEDGER=False)


@pytest.fixture
def store():
    return LedgerStore()


@pytest.fixture
def engine(store, test_settings, clock):
    return InsuranceEngine(store=store, config=test_settings, clock=clock)


@pytest.fixture
def funded_engine(engine):
    """Engine whose pool already holds 10,000 from an unrelated holder's premium."""
    engine.create_policy(BOB, coverage_amount=1_000_000, duration_seconds=365 * SECONDS_PER_DAY, payment=10_000)
    return engine


@pytest.fixture
def client(engine):
    app.dependency_overrides[get_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "api: tests that go through the HTTP layer")
