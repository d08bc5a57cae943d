"""Shared pytest fixtures and configuration."""

import os
import pytest
from unittest.mock import Mock
from datetime import datetime, timezone

# Set test environment variables
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("STATUS_REFRESH_INTERVAL_SECONDS", "300")
os.environ.setdefault("UPCOMING_WINDOW_DAYS", "7")

from tasktrack.models.task_type import TaskType
from tasktrack.services.notification_manager import NotificationManager
from tasktrack.services.task_store import TaskStore
from tests.utils.helpers import FakeClock

FROZEN_NOW = datetime(2024, 12, 9, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """Fixed 'current time' shared by store and tests."""
    return FROZEN_NOW


@pytest.fixture
def clock(now):
    """Controllable clock starting at FROZEN_NOW."""
    return FakeClock(now)


@pytest.fixture
def mock_reminders():
    """Mock reminder collaborator."""
    return Mock(spec=NotificationManager)


@pytest.fixture
def task_store(mock_reminders, clock):
    """TaskStore with the default catalog, a fake clock and mocked reminders."""
    return TaskStore(reminders=mock_reminders, clock=clock)


@pytest.fixture
def work_type(task_store) -> TaskType:
    """The default 'Work' task type."""
    return next(t for t in task_store.task_types if t.name == "Work")


@pytest.fixture
def personal_type(task_store) -> TaskType:
    """The default 'Personal' task type."""
    return next(t for t in task_store.task_types if t.name == "Personal")


@pytest.fixture
def notification_manager(clock):
    """Real notification manager on the fake clock."""
    return NotificationManager(clock=clock)

