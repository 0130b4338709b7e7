"""
Tests for the command line interface.
"""

import signal
from dataclasses import replace

import pytest
import yaml
from click.testing import CliRunner

from break_monitor.cli import cli
from break_monitor.monitor_loop import MonitorLoop
from break_monitor.state_store import JsonStateStore


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        'monitoring': {'probe': 'static'},
        'storage': {'state_path': str(tmp_path / "data" / "day_activity.json")},
        'notifications': {'backend': 'log'},
        'logging': {'log_file': str(tmp_path / "logs" / "break_monitor.log")},
    }), encoding='utf-8')
    return path


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, config_file, *args, **kwargs):
    return runner.invoke(cli, ['--config', str(config_file), *args], **kwargs)


def test_status_without_state(runner, config_file):
    result = invoke(runner, config_file, 'status')

    assert result.exit_code == 0
    assert "No activity recorded yet" in result.output


def test_status_shows_statistics(runner, config_file, tmp_path, initial_state):
    store = JsonStateStore(tmp_path / "data" / "day_activity.json")
    store.save(replace(initial_state, is_working=True, work_sessions_completed=2,
                       breaks_completed=1, active_time_in_session=600))

    result = invoke(runner, config_file, 'status')

    assert result.exit_code == 0
    assert "Phase: working" in result.output
    assert "Current session: 10/25 minutes" in result.output
    assert "Work sessions completed: 2" in result.output
    assert "Breaks completed: 1" in result.output


def test_status_with_corrupt_state(runner, config_file, tmp_path):
    state_path = tmp_path / "data" / "day_activity.json"
    state_path.parent.mkdir(parents=True, exist_ok=True)
    state_path.write_text("[]", encoding='utf-8')

    result = invoke(runner, config_file, 'status')

    assert result.exit_code == 1
    assert "Error reading state" in result.output


def test_reset_with_confirmation_flag(runner, config_file, tmp_path, initial_state):
    store = JsonStateStore(tmp_path / "data" / "day_activity.json")
    store.save(replace(initial_state, work_sessions_completed=7))

    result = invoke(runner, config_file, 'reset', '--yes')

    assert result.exit_code == 0
    assert store.load().work_sessions_completed == 0


def test_reset_can_be_aborted(runner, config_file, tmp_path, initial_state):
    store = JsonStateStore(tmp_path / "data" / "day_activity.json")
    store.save(replace(initial_state, work_sessions_completed=7))

    result = invoke(runner, config_file, 'reset', input="n\n")

    assert "Aborted." in result.output
    assert store.load().work_sessions_completed == 7


def test_notify_test_with_log_backend(runner, config_file):
    result = invoke(runner, config_file, 'notify-test')

    assert result.exit_code == 0
    assert "Test notification sent via log" in result.output


def test_config_set_and_get(runner, config_file):
    result = invoke(runner, config_file, 'config-set', '--key', 'pomodoro.long_break_every',
                    '--value', '3')
    assert result.exit_code == 0

    result = invoke(runner, config_file, 'config-get', '--key', 'pomodoro.long_break_every')
    assert "pomodoro.long_break_every: 3" in result.output


def test_config_set_rejects_invalid_value(runner, config_file):
    result = invoke(runner, config_file, 'config-set', '--key', 'monitoring.tick_seconds',
                    '--value', 'soon')

    assert result.exit_code == 1
    assert "must be a positive integer" in result.output


def test_config_get_missing_key(runner, config_file):
    result = invoke(runner, config_file, 'config-get', '--key', 'pomodoro.nope')

    assert "not found" in result.output


def test_invalid_config_file(runner, tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("pomodoro:\n  long_break_every: 0\n", encoding='utf-8')

    result = runner.invoke(cli, ['--config', str(path), 'status'])

    assert result.exit_code == 1
    assert "Error loading configuration" in result.output


def test_start_runs_the_loop(runner, config_file, tmp_path, monkeypatch):
    runs = []
    monkeypatch.setattr(signal, "signal", lambda signum, handler: None)
    monkeypatch.setattr(MonitorLoop, "run", lambda self, max_ticks=None: runs.append(self))

    result = invoke(runner, config_file, 'start', '--tick-seconds', '10')

    assert result.exit_code == 0, result.output
    assert "Break Monitor started!" in result.output
    assert "Work session: 25 minutes, breaks: 5/15 minutes" in result.output
    assert len(runs) == 1
    assert runs[0].timings.tick_seconds == 10
    assert runs[0].timings.idle_threshold_seconds == 10
    assert runs[0].state.is_working
    assert (tmp_path / "data" / "day_activity.json").exists()


def test_start_with_unknown_probe(runner, config_file):
    result = invoke(runner, config_file, 'start', '--probe', 'telepathy')

    assert result.exit_code == 1
    assert "Unknown idle probe" in result.output
