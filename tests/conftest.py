"""Pytest configuration and shared fixtures for TrackMyStudy tests.

This module provides database fixtures, a controllable clock and tracker
factories for testing the store, derivations and mutations without touching
the real app database.
"""

from __future__ import annotations

import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from trackmystudy.config import TestConfig
from trackmystudy.infra.database import create_db_engine, create_session_factory, init_database
from trackmystudy.infra.repositories import SQLModelKeyValueStore
from trackmystudy.models import Subject
from trackmystudy.services.store import UserDataStore
from trackmystudy.services.tracker import StudyTracker

# A Wednesday; the surrounding week starts on Sunday 2025-03-09.
START = datetime(2025, 3, 12, 9, 0, 0)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = START):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, *, days: int = 0, hours: int = 0, minutes: int = 0) -> datetime:
        self.current += timedelta(days=days, hours=hours, minutes=minutes)
        return self.current


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def test_config(tmp_path):
    """Configuration rooted in a per-test temporary directory."""
    return TestConfig(data_dir=tmp_path)


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine with all tables created
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    config = TestConfig(data_dir=db_path.parent)
    config.DATABASE_URL = f"sqlite:///{db_path}"
    engine = create_db_engine(config)
    init_database(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching the one repositories receive in the app."""
    return create_session_factory(db_engine)


@pytest.fixture
def kv_store(session_factory) -> SQLModelKeyValueStore:
    return SQLModelKeyValueStore(session_factory)


# =============================================================================
# Service Fixtures
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(kv_store, clock) -> UserDataStore:
    store = UserDataStore(kv_store, clock=clock)
    store.load()
    return store


@pytest.fixture
def tracker_factory(kv_store, clock):
    """Factory building a freshly loaded tracker over the shared key-value store.

    Calling it twice simulates an application restart.

    Returns:
        Callable: Function returning a loaded StudyTracker
    """

    def _create_tracker(config=None) -> StudyTracker:
        store = UserDataStore(kv_store, config=config, clock=clock)
        tracker = StudyTracker(store, config=config, clock=clock)
        tracker.load()
        return tracker

    return _create_tracker


@pytest.fixture
def tracker(tracker_factory) -> StudyTracker:
    return tracker_factory()


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def subject_factory():
    """Factory for subject snapshots with sensible defaults."""

    def _create_subject(name: str = "Mathematics", score: float = 80.0, attendance: float = 90.0) -> Subject:
        return Subject(name=name, score=score, attendance=attendance)

    return _create_subject
