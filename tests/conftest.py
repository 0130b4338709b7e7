"""
Shared pytest fixtures.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Tuple

import pytest

from break_monitor.activity_state import ActivityState
from break_monitor.errors import NotifyError, ProbeError
from break_monitor.idle_probe import IdleTimeProbe
from break_monitor.logging_setup import LOGGER_NAME
from break_monitor.notifier import Notifier
from break_monitor.state_machine import ActivityStateMachine, Timings
from break_monitor.state_store import JsonStateStore

IDLE = 60
ACTIVE = 0

NOW = datetime(2024, 3, 4, 9, 30, 0)


class ReplayProbe(IdleTimeProbe):
    """Returns queued samples; a ProbeError instance in the queue is raised."""

    name = "replay"

    def __init__(self, samples: Iterable = ()):
        self.samples = list(samples)
        self.calls = 0

    def idle_seconds(self) -> int:
        self.calls += 1
        sample = self.samples.pop(0) if self.samples else ACTIVE
        if isinstance(sample, Exception):
            raise sample
        return sample


class RecordingNotifier(Notifier):
    """Keeps every notification instead of showing it."""

    name = "recording"

    def __init__(self, fail: bool = False):
        super().__init__()
        self.sent: List[Tuple[str, str, str]] = []
        self.fail = fail

    def _show(self, title: str, subtitle: str, message: str) -> None:
        if self.fail:
            raise NotifyError("display unavailable")
        self.sent.append((title, subtitle, message))


@pytest.fixture
def timings():
    return Timings()


@pytest.fixture
def machine(timings):
    return ActivityStateMachine(timings)


@pytest.fixture
def initial_state():
    return ActivityState.initial(now=NOW)


@pytest.fixture
def state_path(tmp_path):
    return tmp_path / "data" / "day_activity.json"


@pytest.fixture
def store(state_path):
    return JsonStateStore(state_path)


@pytest.fixture
def notifier():
    return RecordingNotifier()


def probe_failure(message: str = "ioreg exited with 1") -> ProbeError:
    return ProbeError(message)


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by the CLI so later tests don't log to closed streams."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
