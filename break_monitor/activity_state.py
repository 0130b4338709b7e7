"""
Activity State Module

The persisted record of today's work/break progress.
"""

from dataclasses import dataclass, asdict
from datetime import date, datetime
from typing import Any, Dict, Optional

from .errors import StateFormatError

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"
SHORT_BREAK_SECONDS = 300

# Field names written by the first release of the tool
LEGACY_FIELD_NAMES = {
    'break_time': 'break_duration',
    'activities_count': 'work_sessions_completed',
    'breaks_count': 'breaks_completed',
    'current_activity_time': 'active_time_in_session',
    'current_idle_time': 'idle_time_accumulated',
    'date': 'day_date',
}

_BOOL_FIELDS = ('is_working', 'is_long_break')
_INT_FIELDS = (
    'break_duration',
    'work_sessions_completed',
    'breaks_completed',
    'active_time_in_session',
    'idle_time_accumulated',
)
_TIME_FIELDS = ('day_date', 'last_updated_at')


def now_seconds() -> datetime:
    """Current local time truncated to whole seconds."""
    return datetime.now().replace(microsecond=0)


@dataclass
class ActivityState:
    """Work/break progress for a single day."""
    is_working: bool
    is_long_break: bool
    break_duration: int
    work_sessions_completed: int
    breaks_completed: int
    active_time_in_session: int
    idle_time_accumulated: int
    day_date: datetime
    last_updated_at: datetime

    @classmethod
    def initial(cls,
                now: Optional[datetime] = None,
                short_break_seconds: int = SHORT_BREAK_SECONDS) -> "ActivityState":
        """
        Create the record used when no state has been persisted yet.

        Args:
            now: Creation time (defaults to the current time)
            short_break_seconds: Initial required break length

        Returns:
            A resting state with all counters at zero
        """
        stamp = (now or now_seconds()).replace(microsecond=0)
        return cls(
            is_working=False,
            is_long_break=False,
            break_duration=short_break_seconds,
            work_sessions_completed=0,
            breaks_completed=0,
            active_time_in_session=0,
            idle_time_accumulated=0,
            day_date=stamp,
            last_updated_at=stamp,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert the state to a JSON-ready document."""
        data = asdict(self)
        for name in _TIME_FIELDS:
            data[name] = data[name].strftime(TIMESTAMP_FORMAT)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ActivityState":
        """
        Build a state from a document produced by to_dict().

        Documents written with the legacy field names are accepted too.

        Args:
            data: Parsed JSON object

        Returns:
            ActivityState instance

        Raises:
            StateFormatError: If a field is missing or has the wrong type
        """
        if not isinstance(data, dict):
            raise StateFormatError(f"Expected a JSON object, got {type(data).__name__}")

        fields = {LEGACY_FIELD_NAMES.get(key, key): value for key, value in data.items()}
        values: Dict[str, Any] = {}

        for name in _BOOL_FIELDS + _INT_FIELDS + _TIME_FIELDS:
            if name not in fields:
                raise StateFormatError(f"Missing field: {name}")

        for name in _BOOL_FIELDS:
            if not isinstance(fields[name], bool):
                raise StateFormatError(f"Field {name} must be a boolean")
            values[name] = fields[name]

        for name in _INT_FIELDS:
            value = fields[name]
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise StateFormatError(f"Field {name} must be a non-negative integer")
            values[name] = value

        for name in _TIME_FIELDS:
            try:
                values[name] = datetime.strptime(fields[name], TIMESTAMP_FORMAT)
            except (TypeError, ValueError) as e:
                raise StateFormatError(f"Field {name} is not a timestamp: {e}") from e

        return cls(**values)

    def is_stale(self, today: Optional[date] = None) -> bool:
        """Return True if the record was created on another day."""
        return self.day_date.date() != (today or date.today())

    @property
    def break_minutes(self) -> int:
        return self.break_duration // 60
