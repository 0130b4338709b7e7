#!/usr/bin/env python3
"""
Break Monitor - Main Entry Point

Tracks active and idle time on this machine and reminds you to take
a break after each work session.
"""

import sys
from pathlib import Path

# Add the break_monitor package to the Python path
sys.path.insert(0, str(Path(__file__).parent))

from break_monitor.cli import cli

if __name__ == '__main__':
    try:
        cli()
    except KeyboardInterrupt:
        print("\nProgram interrupted by user")
        sys.exit(0)
    except Exception as e:
        print(f"Unexpected error: {e}")
        sys.exit(1)
