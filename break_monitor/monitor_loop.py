"""
Monitor Loop Module

Drives the tick cadence: samples the idle probe, applies the state
machine, persists the result and delivers notifications.
"""

import threading
from datetime import date
from typing import Any, Dict, List, Optional

from .activity_state import ActivityState
from .config import ConfigManager
from .errors import NotifyError, ProbeError
from .idle_probe import IdleTimeProbe, create_probe
from .logging_setup import get_logger
from .notifier import Notifier, create_notifier
from .state_machine import ActivityStateMachine, Notification, TickResult, Timings
from .state_store import JsonStateStore


class MonitorLoop:
    """Owns the day activity record and runs one tick at a time."""

    def __init__(self,
                 store: JsonStateStore,
                 probe: IdleTimeProbe,
                 notifier: Notifier,
                 timings: Optional[Timings] = None,
                 max_probe_failures: int = 3,
                 fail_on_notify_error: bool = False,
                 interval: Optional[float] = None):
        """
        Initialize the monitor loop.

        Args:
            store: Where the day activity record is persisted
            probe: Source of idle time samples
            notifier: Backend used to show notifications
            timings: Tick, session and break lengths
            max_probe_failures: Consecutive probe failures tolerated before giving up
            fail_on_notify_error: Treat notification failures as fatal
            interval: Seconds to wait between ticks (defaults to the tick length)
        """
        self.logger = get_logger(__name__)
        self.store = store
        self.probe = probe
        self.notifier = notifier
        self.machine = ActivityStateMachine(timings)
        self.timings = self.machine.timings
        self.max_probe_failures = max_probe_failures
        self.fail_on_notify_error = fail_on_notify_error
        self.interval = self.timings.tick_seconds if interval is None else interval

        self.state: Optional[ActivityState] = None
        self.is_running = False
        self.stop_event = threading.Event()
        self.tick_count = 0
        self.consecutive_probe_failures = 0
        self.failed_notifications = 0

    @classmethod
    def from_config(cls, config: ConfigManager,
                    probe_name: Optional[str] = None,
                    notifier_name: Optional[str] = None) -> "MonitorLoop":
        """
        Build a loop and its collaborators from the configuration.

        Args:
            config: Configuration manager instance
            probe_name: Overrides monitoring.probe
            notifier_name: Overrides notifications.backend
        """
        probe = create_probe(probe_name or config.get('monitoring.probe', 'auto'))
        notifier = create_notifier(
            notifier_name or config.get('notifications.backend', 'auto'),
            sound=config.get('notifications.sound'),
            app_icon=config.get('notifications.app_icon'),
        )
        return cls(
            store=JsonStateStore(config.get_state_path()),
            probe=probe,
            notifier=notifier,
            timings=config.get_timings(),
            max_probe_failures=config.get('monitoring.max_probe_failures', 3),
            fail_on_notify_error=config.get('notifications.fail_on_error', False),
        )

    def open(self) -> ActivityState:
        """
        Load (or create) today's record and enter the working state.

        Raises:
            StartupError: If the state file is corrupt or cannot be created
        """
        state = self.store.load_or_create(
            lambda: ActivityState.initial(short_break_seconds=self.timings.short_break_seconds)
        )
        if state.is_stale(date.today()):
            self.logger.warning(
                f"Day activity is from {state.day_date.date()}, continuing it for today")
        state.is_working = True
        self.state = state
        return state

    def tick(self) -> Optional[TickResult]:
        """
        Run a single tick.

        Returns:
            The TickResult, or None if the probe failed and the tick was skipped

        Raises:
            ProbeError: After max_probe_failures consecutive probe failures
            StorageError: If the new state cannot be written
            NotifyError: If a notification fails and fail_on_notify_error is set
        """
        if self.state is None:
            self.open()

        try:
            idle_seconds = self.probe.idle_seconds()
        except ProbeError as e:
            self.consecutive_probe_failures += 1
            self.logger.error(f"Idle probe failed ({self.consecutive_probe_failures}/"
                              f"{self.max_probe_failures}): {e}")
            if self.consecutive_probe_failures >= self.max_probe_failures:
                raise
            return None
        self.consecutive_probe_failures = 0

        result = self.machine.step(self.state, idle_seconds)
        self.store.save(result.state)
        self.state = result.state
        self.tick_count += 1

        self._log_tick(result)
        self._deliver(result.notifications)
        return result

    def run(self, max_ticks: Optional[int] = None) -> None:
        """
        Tick until stop() is called or max_ticks ticks have run.

        Args:
            max_ticks: Stop after this many ticks (runs forever if None)
        """
        if self.state is None:
            self.open()

        self.logger.info(f"Monitoring started, writing to {self.store.path}")
        self.is_running = True
        self.stop_event.clear()
        try:
            while not self.stop_event.is_set():
                self.tick()
                if max_ticks is not None and self.tick_count >= max_ticks:
                    break
                self.stop_event.wait(self.interval)
        finally:
            self.is_running = False
            self.logger.info("Monitoring stopped")

    def stop(self) -> None:
        """Ask the loop to exit after the current tick."""
        self.stop_event.set()

    def _deliver(self, notifications: List[Notification]) -> None:
        for notification in notifications:
            try:
                self.notifier.notify(notification.title, notification.subtitle,
                                     notification.message)
            except NotifyError as e:
                self.failed_notifications += 1
                if self.fail_on_notify_error:
                    raise
                self.logger.error(f"Failed to show notification: {e}")

    def _log_tick(self, result: TickResult) -> None:
        state = result.state
        status = "IDLE" if result.is_idle else "ACTIVE"
        phase = "working" if state.is_working else "resting"
        self.logger.debug(f"Tick {self.tick_count}: {status} | {phase} | "
                          f"active {state.active_time_in_session}s | "
                          f"idle {state.idle_time_accumulated}s | "
                          f"sessions {state.work_sessions_completed} | "
                          f"breaks {state.breaks_completed}")

    def get_status(self) -> Dict[str, Any]:
        """Get current status of the monitor."""
        return {
            'is_running': self.is_running,
            'tick_count': self.tick_count,
            'consecutive_probe_failures': self.consecutive_probe_failures,
            'failed_notifications': self.failed_notifications,
            'state': self.state.to_dict() if self.state else None,
        }
