"""
Error Types

Exceptions raised by the monitor and its I/O collaborators. The
monitor loop decides per type whether a failure is fatal.
"""


class BreakMonitorError(Exception):
    """Base class for all break monitor errors."""


class ConfigError(BreakMonitorError):
    """Configuration file is unreadable or holds invalid values."""


class StartupError(BreakMonitorError):
    """The monitor cannot start (storage unusable, state unreadable)."""


class StateFormatError(StartupError):
    """Persisted state exists but cannot be parsed."""


class ProbeError(BreakMonitorError):
    """The idle time source is unreadable or returned garbage."""


class NotifyError(BreakMonitorError):
    """A notification could not be displayed."""


class StorageError(BreakMonitorError):
    """Persisted state could not be written."""
