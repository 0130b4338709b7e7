"""
Idle Time Probe Module

Platform-specific sources for the number of seconds since the user's
last keyboard or mouse input.
"""

import re
import subprocess
import sys
from typing import List, Optional

from .errors import ProbeError
from .logging_setup import get_logger

_HID_IDLE_PATTERN = re.compile(r'"HIDIdleTime"\s*=\s*(\d+)')


class IdleTimeProbe:
    """Base class for idle time sources."""

    name = "base"

    def idle_seconds(self) -> int:
        """
        Return the seconds elapsed since the last user input.

        Raises:
            ProbeError: If the idle time cannot be read
        """
        raise NotImplementedError


class CommandProbe(IdleTimeProbe):
    """Reads idle time from the output of an external command."""

    command: List[str] = []
    timeout = 5

    def __init__(self):
        self.logger = get_logger(__name__)

    def _run(self) -> str:
        try:
            result = subprocess.run(
                self.command, capture_output=True, text=True,
                timeout=self.timeout, check=True,
            )
        except FileNotFoundError as e:
            raise ProbeError(f"{self.command[0]} is not installed") from e
        except subprocess.CalledProcessError as e:
            raise ProbeError(f"{self.command[0]} exited with {e.returncode}: {e.stderr.strip()}") from e
        except subprocess.TimeoutExpired as e:
            raise ProbeError(f"{self.command[0]} timed out after {self.timeout}s") from e
        return result.stdout

    def idle_seconds(self) -> int:
        output = self._run()
        seconds = self.parse(output)
        self.logger.debug(f"{self.name} idle time: {seconds}s")
        return seconds

    def parse(self, output: str) -> int:
        raise NotImplementedError


class MacOSIdleProbe(CommandProbe):
    """Reads HIDIdleTime (nanoseconds) from the IOHIDSystem registry entry."""

    name = "ioreg"
    command = ["ioreg", "-c", "IOHIDSystem"]

    def parse(self, output: str) -> int:
        match = _HID_IDLE_PATTERN.search(output)
        if not match:
            raise ProbeError("HIDIdleTime not found in ioreg output")
        return int(match.group(1)) // 1_000_000_000


class XprintidleProbe(CommandProbe):
    """Reads X11 idle time (milliseconds) via xprintidle."""

    name = "xprintidle"
    command = ["xprintidle"]

    def parse(self, output: str) -> int:
        try:
            return int(output.strip()) // 1000
        except ValueError as e:
            raise ProbeError(f"Unexpected xprintidle output: {output.strip()!r}") from e


class WindowsIdleProbe(IdleTimeProbe):
    """Detects idle time using the Win32 GetLastInputInfo API."""

    name = "windows"

    def __init__(self):
        import ctypes
        from ctypes import wintypes

        class LASTINPUTINFO(ctypes.Structure):
            _fields_ = [("cbSize", wintypes.UINT), ("dwTime", wintypes.DWORD)]

        self._ctypes = ctypes
        self._info_type = LASTINPUTINFO
        self._user32 = ctypes.windll.user32  # type: ignore[attr-defined]
        self._kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]

    def idle_seconds(self) -> int:
        last_input = self._info_type()
        last_input.cbSize = self._ctypes.sizeof(last_input)
        if not self._user32.GetLastInputInfo(self._ctypes.byref(last_input)):
            raise ProbeError(f"GetLastInputInfo failed: {self._ctypes.WinError()}")
        # GetTickCount wraps with dwTime, both 32-bit millisecond counters
        elapsed = (self._kernel32.GetTickCount() - last_input.dwTime) & 0xFFFFFFFF
        return int(elapsed) // 1000


class StaticIdleProbe(IdleTimeProbe):
    """Always reports the same idle time. Useful for dry runs."""

    name = "static"

    def __init__(self, seconds: int = 0):
        self.seconds = seconds

    def idle_seconds(self) -> int:
        return self.seconds


PROBES = {
    MacOSIdleProbe.name: MacOSIdleProbe,
    XprintidleProbe.name: XprintidleProbe,
    WindowsIdleProbe.name: WindowsIdleProbe,
    StaticIdleProbe.name: StaticIdleProbe,
}


def default_probe_name(platform: Optional[str] = None) -> str:
    """Pick the probe matching the running platform."""
    platform = platform or sys.platform
    if platform == "darwin":
        return MacOSIdleProbe.name
    if platform == "win32":
        return WindowsIdleProbe.name
    return XprintidleProbe.name


def create_probe(name: str = "auto", platform: Optional[str] = None) -> IdleTimeProbe:
    """
    Create an idle time probe by name.

    Args:
        name: Probe name, or 'auto' to choose by platform
        platform: Platform override (defaults to sys.platform)

    Returns:
        IdleTimeProbe instance

    Raises:
        ProbeError: If the name is unknown or the probe cannot be set up
    """
    if name == "auto":
        name = default_probe_name(platform)
    if name not in PROBES:
        raise ProbeError(f"Unknown idle probe: {name} (choose from {', '.join(sorted(PROBES))})")
    try:
        return PROBES[name]()
    except (AttributeError, OSError) as e:
        raise ProbeError(f"Idle probe {name} is unavailable on this system: {e}") from e
