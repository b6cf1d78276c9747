"""Shared pytest fixtures for ChainTimer tests."""

import sys
import pytest

from PyQt6.QtCore import QCoreApplication

from chaintimer.database.db import configure_engine, init_db
from chaintimer.timer.engine import SessionEngine

from helpers import FakeClock


@pytest.fixture(scope="session")
def qapp():
    """A single QCoreApplication instance shared across the entire test run."""
    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(qapp, clock):
    """Default 3-task × 3-round engine, policies OFF, fake wall clock."""
    return SessionEngine(parent=None, now_fn=clock)


@pytest.fixture
def engine_auto(qapp, clock):
    """Engine with auto-continue ON."""
    return SessionEngine(parent=None, now_fn=clock, auto_continue=True)


@pytest.fixture
def engine_rollover(qapp, clock):
    """Engine with rollover ON."""
    return SessionEngine(parent=None, now_fn=clock, rollover=True)
