"""
Break Monitor

Tracks active and idle time on a workstation and drives a
work/break cycle with desktop notifications.
"""

__version__ = "1.0.0"
__author__ = "Break Monitor Team"
