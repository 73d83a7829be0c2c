"""Shared pytest fixtures for LoopTimer tests."""

import os
import sys
import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from looptimer.database.db import configure_engine, init_db
from looptimer.session import SequenceSession
from looptimer.storage import PersistenceGateway
from looptimer.timer.engine import PlaybackEngine

from helpers import FakeCue


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def cue():
    return FakeCue()


@pytest.fixture
def engine(qapp, cue):
    """Fresh PlaybackEngine with a recording cue and no steps."""
    return PlaybackEngine(parent=None, cue=cue)


@pytest.fixture
def gateway():
    return PersistenceGateway()


@pytest.fixture
def session(qapp, cue, gateway):
    """Fresh SequenceSession backed by the in-memory store."""
    return SequenceSession(parent=None, gateway=gateway, cue=cue)
