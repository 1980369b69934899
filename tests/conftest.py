"""
Shared test configuration and fixtures.

Stores are wired against an in-memory key-value store, an in-memory
remote document client, and a session identity provider that tests
drive directly (initialize / sign_in / sign_out).
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

import pytest

from timber_storage import (
    HuntLog,
    HuntPlan,
    InMemoryDocumentClient,
    InventoryItem,
    LocationRef,
    MemoryKeyValueStore,
    SessionIdentityProvider,
    TimberStorage,
    WeatherSnapshot,
)

USER_ID = "user-abc123"


class SteppingClock:
    """Deterministic clock; each call advances one second."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 11, 1, 5, 30, tzinfo=UTC)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def local():
    """Device-local key-value store."""
    return MemoryKeyValueStore()


@pytest.fixture
def remote():
    """Remote document store with a deterministic clock."""
    return InMemoryDocumentClient(clock=SteppingClock())


@pytest.fixture
def identity():
    """Identity provider that starts unresolved (loading)."""
    return SessionIdentityProvider()


@pytest.fixture
async def storage(identity, local, remote):
    """Started TimberStorage; identity is still resolving."""
    storage = TimberStorage(identity, local, remote)
    await storage.start()
    yield storage
    await storage.stop()


@pytest.fixture
async def anonymous_storage(storage, identity):
    """Started TimberStorage with identity resolved to anonymous."""
    await identity.initialize()
    return storage


@pytest.fixture
def package_logger():
    """The timber_storage logger, restored after the test reconfigures it."""
    logger = logging.getLogger("timber_storage")
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)


def make_item(name: str = "Shotgun", category: str = "Firearm", **fields) -> InventoryItem:
    return InventoryItem.new(name, category, **fields)


def make_weather() -> WeatherSnapshot:
    return WeatherSnapshot(temperature=34, wind_speed=12, wind_direction="NW", sky_condition="Overcast")


def make_log(date: str = "2025-11-02", plan_id: str | None = None, **fields) -> HuntLog:
    return HuntLog.new(
        date=date,
        location=LocationRef(name="Bayou Flats", latitude=29.95, longitude=-90.07),
        weather=make_weather(),
        plan_id=plan_id,
        **fields,
    )


def make_plan(title: str = "Opening Day", date: str = "2025-11-02", **fields) -> HuntPlan:
    return HuntPlan.new(title=title, date=date, location="Bayou Flats", weather=make_weather(), **fields)
