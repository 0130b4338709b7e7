"""
Desktop Notification Module

Shows break and work reminders to the user through a platform
notification tool.
"""

import subprocess
import sys
from typing import List, Optional

from .errors import NotifyError
from .logging_setup import get_logger


class Notifier:
    """Base class for notification backends."""

    name = "base"

    def __init__(self):
        self.logger = get_logger(__name__)
        self.notification_count = 0

    def notify(self, title: str, subtitle: str = "", message: str = "") -> None:
        """
        Display a notification.

        Args:
            title: Notification title
            subtitle: Secondary line (may be empty)
            message: Body text (may be empty)

        Raises:
            NotifyError: If the notification could not be shown
        """
        self.logger.info(f"NOTIFY: {title} {subtitle} {message}".rstrip())
        self._show(title, subtitle, message)
        self.notification_count += 1

    def _show(self, title: str, subtitle: str, message: str) -> None:
        raise NotImplementedError


class LogNotifier(Notifier):
    """Only writes notifications to the log."""

    name = "log"

    def _show(self, title: str, subtitle: str, message: str) -> None:
        pass


class CommandNotifier(Notifier):
    """Runs an external command to display each notification."""

    timeout = 10

    def build_command(self, title: str, subtitle: str, message: str) -> List[str]:
        raise NotImplementedError

    def _show(self, title: str, subtitle: str, message: str) -> None:
        command = self.build_command(title, subtitle, message)
        try:
            subprocess.run(command, capture_output=True, text=True,
                           timeout=self.timeout, check=True)
        except FileNotFoundError as e:
            raise NotifyError(f"{command[0]} is not installed") from e
        except subprocess.CalledProcessError as e:
            raise NotifyError(f"{command[0]} exited with {e.returncode}: {e.stderr.strip()}") from e
        except subprocess.TimeoutExpired as e:
            raise NotifyError(f"{command[0]} timed out after {self.timeout}s") from e


class TerminalNotifier(CommandNotifier):
    """macOS notifications via terminal-notifier."""

    name = "terminal-notifier"

    def __init__(self, sound: Optional[str] = "default", app_icon: Optional[str] = None):
        super().__init__()
        self.sound = sound
        self.app_icon = app_icon

    def build_command(self, title: str, subtitle: str, message: str) -> List[str]:
        command = ["terminal-notifier"]
        if self.sound:
            command += ["-sound", self.sound]
        command += ["-title", title, "-subtitle", subtitle, "-message", message]
        if self.app_icon:
            command += ["-appIcon", self.app_icon]
        return command


class NotifySendNotifier(CommandNotifier):
    """Freedesktop notifications via notify-send."""

    name = "notify-send"

    def __init__(self, app_icon: Optional[str] = None):
        super().__init__()
        self.app_icon = app_icon

    def build_command(self, title: str, subtitle: str, message: str) -> List[str]:
        command = ["notify-send"]
        if self.app_icon:
            command += ["--icon", self.app_icon]
        body = "\n".join(part for part in (subtitle, message) if part)
        command.append(title)
        if body:
            command.append(body)
        return command


def default_notifier_name(platform: Optional[str] = None) -> str:
    """Pick the notification backend matching the running platform."""
    platform = platform or sys.platform
    if platform == "darwin":
        return TerminalNotifier.name
    if platform.startswith("linux"):
        return NotifySendNotifier.name
    return LogNotifier.name


def create_notifier(name: str = "auto",
                    sound: Optional[str] = "default",
                    app_icon: Optional[str] = None,
                    platform: Optional[str] = None) -> Notifier:
    """
    Create a notification backend by name.

    Args:
        name: Backend name, or 'auto' to choose by platform
        sound: Sound played by terminal-notifier
        app_icon: Icon path shown next to the notification
        platform: Platform override (defaults to sys.platform)

    Returns:
        Notifier instance

    Raises:
        NotifyError: If the backend name is unknown
    """
    if name == "auto":
        name = default_notifier_name(platform)
    if name == TerminalNotifier.name:
        return TerminalNotifier(sound=sound, app_icon=app_icon)
    if name == NotifySendNotifier.name:
        return NotifySendNotifier(app_icon=app_icon)
    if name == LogNotifier.name:
        return LogNotifier()
    raise NotifyError(f"Unknown notification backend: {name}")
