"""
Tests for the day activity record and its document format.
"""

import json
from dataclasses import replace
from datetime import date, datetime

import pytest

from break_monitor.activity_state import ActivityState
from break_monitor.errors import StateFormatError
from tests.conftest import NOW


def test_initial_state(initial_state):
    assert initial_state.is_working is False
    assert initial_state.is_long_break is False
    assert initial_state.break_duration == 300
    assert initial_state.work_sessions_completed == 0
    assert initial_state.breaks_completed == 0
    assert initial_state.active_time_in_session == 0
    assert initial_state.idle_time_accumulated == 0
    assert initial_state.day_date == NOW
    assert initial_state.last_updated_at == NOW


def test_initial_state_drops_microseconds():
    state = ActivityState.initial(now=datetime(2024, 3, 4, 9, 30, 0, 123456))

    assert state.day_date.microsecond == 0


def test_to_dict_uses_stable_field_names(initial_state):
    data = initial_state.to_dict()

    assert data == {
        'is_working': False,
        'is_long_break': False,
        'break_duration': 300,
        'work_sessions_completed': 0,
        'breaks_completed': 0,
        'active_time_in_session': 0,
        'idle_time_accumulated': 0,
        'day_date': '2024-03-04T09:30:00',
        'last_updated_at': '2024-03-04T09:30:00',
    }


def test_document_round_trip(initial_state):
    state = replace(initial_state, is_working=True, is_long_break=True, break_duration=900,
                    work_sessions_completed=4, breaks_completed=3,
                    active_time_in_session=620, idle_time_accumulated=1825,
                    last_updated_at=datetime(2024, 3, 4, 13, 5, 45))

    restored = ActivityState.from_dict(json.loads(json.dumps(state.to_dict())))

    assert restored == state


def test_from_dict_accepts_legacy_field_names():
    legacy = {
        "is_working": True,
        "is_long_break": False,
        "break_time": 300,
        "activities_count": 2,
        "breaks_count": 1,
        "current_activity_time": 45,
        "current_idle_time": 910,
        "date": "2024-03-04T08:00:00",
        "last_updated_at": "2024-03-04T11:20:05",
    }

    state = ActivityState.from_dict(legacy)

    assert state.work_sessions_completed == 2
    assert state.breaks_completed == 1
    assert state.active_time_in_session == 45
    assert state.idle_time_accumulated == 910
    assert state.day_date == datetime(2024, 3, 4, 8, 0, 0)


@pytest.mark.parametrize("field, value", [
    ("is_working", "yes"),
    ("break_duration", -5),
    ("breaks_completed", 1.5),
    ("work_sessions_completed", True),
    ("day_date", "yesterday"),
    ("last_updated_at", None),
])
def test_from_dict_rejects_bad_values(initial_state, field, value):
    data = initial_state.to_dict()
    data[field] = value

    with pytest.raises(StateFormatError):
        ActivityState.from_dict(data)


def test_from_dict_rejects_missing_field(initial_state):
    data = initial_state.to_dict()
    del data['idle_time_accumulated']

    with pytest.raises(StateFormatError, match="idle_time_accumulated"):
        ActivityState.from_dict(data)


def test_from_dict_rejects_non_object():
    with pytest.raises(StateFormatError):
        ActivityState.from_dict([1, 2, 3])


def test_is_stale(initial_state):
    assert not initial_state.is_stale(date(2024, 3, 4))
    assert initial_state.is_stale(date(2024, 3, 5))


def test_break_minutes(initial_state):
    assert initial_state.break_minutes == 5
    assert replace(initial_state, break_duration=900).break_minutes == 15
