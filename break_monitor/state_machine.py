"""
Activity State Machine

Turns one idle-time sample per tick into the next ActivityState and
the notifications to show. Performs no I/O.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .activity_state import ActivityState, now_seconds
from .logging_setup import get_logger


@dataclass(frozen=True)
class Timings:
    """Tick length, thresholds and break lengths in seconds."""
    tick_seconds: int = 5
    idle_threshold_seconds: int = 5
    work_session_seconds: int = 25 * 60
    short_break_seconds: int = 5 * 60
    long_break_seconds: int = 15 * 60
    long_break_every: int = 4
    # Mark the session as working on an idle tick while resting
    resume_while_idle: bool = True
    # Clear the idle accumulator when a break starts and when it ends
    reset_idle_on_break: bool = False


class NotificationKind(str, Enum):
    BREAK = "break"
    BREAK_NOT_FINISHED = "break_not_finished"
    WORK = "work"


@dataclass(frozen=True)
class Notification:
    """A message for the user, delivered by a Notifier."""
    kind: NotificationKind
    title: str
    subtitle: str = ""
    message: str = ""

    @classmethod
    def take_break(cls, minutes: int) -> "Notification":
        return cls(NotificationKind.BREAK, "It's time to break!", "",
                   f"Take a {minutes} minutes break")

    @classmethod
    def break_not_finished(cls) -> "Notification":
        return cls(NotificationKind.BREAK_NOT_FINISHED, "Your break is not finished yet!",
                   "Take a break", "You started working too early")

    @classmethod
    def back_to_work(cls) -> "Notification":
        return cls(NotificationKind.WORK, "It's time to work")


@dataclass
class TickResult:
    state: ActivityState
    notifications: List[Notification] = field(default_factory=list)
    is_idle: bool = False


class ActivityStateMachine:
    """Work/break transition rules applied once per tick."""

    def __init__(self, timings: Optional[Timings] = None):
        """
        Initialize the state machine.

        Args:
            timings: Tick, session and break lengths (defaults if omitted)
        """
        self.timings = timings or Timings()
        self.logger = get_logger(__name__)

    def is_idle(self, idle_seconds: int) -> bool:
        return idle_seconds >= self.timings.idle_threshold_seconds

    def step(self,
             state: ActivityState,
             idle_seconds: int,
             now: Optional[datetime] = None) -> TickResult:
        """
        Apply one sample to the state.

        The rules run in a fixed order; later rules read fields changed
        by earlier ones.

        Args:
            state: Current state (left unmodified)
            idle_seconds: Seconds since the last user input
            now: Tick time (defaults to the current time)

        Returns:
            TickResult with the new state and notifications to show
        """
        t = self.timings
        idle = self.is_idle(idle_seconds)
        new = replace(state)
        notifications: List[Notification] = []

        # 1. Accumulate
        if idle:
            new.idle_time_accumulated += t.tick_seconds
        else:
            new.active_time_in_session += t.tick_seconds
        new.last_updated_at = now or now_seconds()

        # 2. Idle tick while resting marks the session as working again
        if (t.resume_while_idle and idle and not new.is_working
                and new.active_time_in_session <= t.work_session_seconds):
            new.is_working = True

        # 3. Work session length reached
        if new.active_time_in_session >= t.work_session_seconds and new.is_working:
            if idle:
                self._end_session(new)
            else:
                self._choose_break(new)
                notifications.append(Notification.take_break(new.break_minutes))

        # 4. Rest sufficiency
        if (new.idle_time_accumulated < new.break_duration
                and not new.is_working and not idle):
            notifications.append(Notification.break_not_finished())
        if new.idle_time_accumulated > new.break_duration and not new.is_working:
            if idle:
                notifications.append(Notification.back_to_work())
            else:
                self._finish_break(new)

        return TickResult(state=new, notifications=notifications, is_idle=idle)

    def _end_session(self, state: ActivityState) -> None:
        state.is_working = False
        state.active_time_in_session = 0
        state.work_sessions_completed += 1
        if self.timings.reset_idle_on_break:
            state.idle_time_accumulated = 0
        self.logger.info(f"Work session {state.work_sessions_completed} completed, "
                         f"{state.break_minutes} minutes break required")

    def _choose_break(self, state: ActivityState) -> None:
        t = self.timings
        if state.work_sessions_completed % t.long_break_every == 0:
            state.break_duration = t.long_break_seconds
            state.is_long_break = True
        else:
            state.break_duration = t.short_break_seconds
            state.is_long_break = False

    def _finish_break(self, state: ActivityState) -> None:
        state.is_working = True
        state.breaks_completed += 1
        if self.timings.reset_idle_on_break:
            state.idle_time_accumulated = 0
        self.logger.info(f"Break {state.breaks_completed} completed, back to work")
