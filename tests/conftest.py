"""Shared fixtures: a temporary SQLite store seeded with the demo dataset."""

from datetime import date

import pytest

from fanpulse.serving.fan_service import FanPulseService
from fanpulse.storage.demo_data import seed_demo_data
from fanpulse.storage.sqlite_fan_store import SQLiteFanStore

TODAY = date(2026, 1, 15)


@pytest.fixture
def empty_store(tmp_path) -> SQLiteFanStore:
    store = SQLiteFanStore(str(tmp_path / "fanpulse.db"))
    store.ensure_schema()
    return store


@pytest.fixture
def store(empty_store: SQLiteFanStore) -> SQLiteFanStore:
    seed_demo_data(empty_store)
    return empty_store


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def service(store: SQLiteFanStore, today: date) -> FanPulseService:
    return FanPulseService(store, today=lambda: today)
