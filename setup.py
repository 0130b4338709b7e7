"""
Setup script for Break Monitor
"""

from pathlib import Path

from setuptools import find_packages, setup

HERE = Path(__file__).parent


def read_requirements(filename: str = "requirements.txt"):
    """Read package requirements, skipping comments and includes."""
    lines = (HERE / filename).read_text(encoding="utf-8").splitlines()
    return [
        line.strip() for line in lines
        if line.strip() and not line.startswith(("#", "-r"))
    ]


setup(
    name="break-monitor",
    version="1.0.0",
    description="Work/break reminders driven by workstation idle time",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=read_requirements(),
    extras_require={
        "test": read_requirements("requirements-dev.txt"),
    },
    entry_points={
        "console_scripts": [
            "break-monitor=break_monitor.cli:cli",
        ],
    },
)
