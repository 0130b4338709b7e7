"""
Command Line Interface Module

Provides CLI commands for running the break monitor and inspecting
its persisted state.
"""

import signal
import sys

import click
import yaml

from .activity_state import ActivityState
from .config import ConfigManager
from .errors import BreakMonitorError, ConfigError
from .logging_setup import setup_logging, get_logger
from .monitor_loop import MonitorLoop
from .notifier import create_notifier
from .state_store import JsonStateStore


@click.group()
@click.option('--config', '-c', default='config.yaml',
              help='Path to configuration file')
@click.option('--verbose', '-v', is_flag=True,
              help='Enable verbose logging')
@click.pass_context
def cli(ctx, config, verbose):
    """Break Monitor - work/break reminders driven by idle time."""
    ctx.ensure_object(dict)

    try:
        config_manager = ConfigManager(config)
        ctx.obj['config'] = config_manager

        log_level = 'DEBUG' if verbose else config_manager.get('logging.level', 'INFO')
        log_file = config_manager.get_log_file_path()
        max_size = config_manager.get('logging.max_log_size_mb', 10)
        backup_count = config_manager.get('logging.backup_count', 3)

        setup_logging(str(log_file), log_level, max_size, backup_count)
        ctx.obj['logger'] = get_logger('cli')

        config_manager.ensure_directories()

    except BreakMonitorError as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.option('--tick-seconds', '-t', type=click.IntRange(min=1), default=None,
              help='Seconds per tick (also the idle threshold)')
@click.option('--probe', '-p', default=None,
              help='Idle probe: auto, ioreg, xprintidle, windows or static')
@click.option('--notifier', '-n', default=None,
              help='Notification backend: auto, terminal-notifier, notify-send or log')
@click.pass_context
def start(ctx, tick_seconds, probe, notifier):
    """Start tracking activity and reminding about breaks."""
    config = ctx.obj['config']
    logger = ctx.obj['logger']

    if tick_seconds:
        config.set('monitoring.tick_seconds', tick_seconds)
        config.set('monitoring.idle_threshold_seconds', tick_seconds)

    try:
        loop = MonitorLoop.from_config(config, probe_name=probe, notifier_name=notifier)
        state = loop.open()
    except BreakMonitorError as e:
        logger.error(f"Failed to start monitoring: {e}")
        click.echo(f"Error starting monitor: {e}", err=True)
        sys.exit(1)

    def signal_handler(signum, frame):
        logger.info("Received shutdown signal")
        loop.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    timings = loop.timings
    click.echo("Break Monitor started!")
    click.echo(f"Work session: {timings.work_session_seconds // 60} minutes, "
               f"breaks: {timings.short_break_seconds // 60}/{timings.long_break_seconds // 60} minutes")
    click.echo(f"Sessions completed today: {state.work_sessions_completed}")
    click.echo("Press Ctrl+C to stop monitoring...")

    try:
        loop.run()
    except BreakMonitorError as e:
        logger.error(f"Monitoring aborted: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    status = loop.get_status()
    click.echo(f"\nBreak monitor stopped after {status['tick_count']} ticks.")


@cli.command()
@click.pass_context
def status(ctx):
    """Show today's work/break statistics."""
    config = ctx.obj['config']
    store = JsonStateStore(config.get_state_path())

    try:
        state = store.load()
    except BreakMonitorError as e:
        click.echo(f"Error reading state: {e}", err=True)
        sys.exit(1)

    if state is None:
        click.echo(f"No activity recorded yet ({store.path} does not exist)")
        return

    work_minutes = config.get('pomodoro.work_session_seconds') // 60
    break_kind = "long" if state.is_long_break else "short"

    click.echo("Break Monitor Status")
    click.echo("=" * 30)
    click.echo(f"State file: {store.path}")
    click.echo(f"Day: {state.day_date.date()}")
    click.echo(f"Last updated: {state.last_updated_at}")
    click.echo(f"Phase: {'working' if state.is_working else 'resting'}")
    click.echo(f"Current session: {state.active_time_in_session // 60}/{work_minutes} minutes")
    click.echo(f"Work sessions completed: {state.work_sessions_completed}")
    click.echo(f"Breaks completed: {state.breaks_completed}")
    click.echo(f"Next break: {state.break_minutes} minutes ({break_kind})")
    click.echo(f"Idle time: {state.idle_time_accumulated // 60} minutes")
    if state.is_stale():
        click.echo("Warning: this record was started on a previous day")


@cli.command()
@click.option('--yes', is_flag=True, help='Do not ask for confirmation')
@click.pass_context
def reset(ctx, yes):
    """Discard today's statistics and start a fresh record."""
    config = ctx.obj['config']
    logger = ctx.obj['logger']
    store = JsonStateStore(config.get_state_path())

    if not yes and not click.confirm(f"Reset activity stored in {store.path}?"):
        click.echo("Aborted.")
        return

    try:
        store.reset(ActivityState.initial(
            short_break_seconds=config.get('pomodoro.short_break_seconds')))
    except BreakMonitorError as e:
        logger.error(f"Reset failed: {e}")
        click.echo(f"Error resetting state: {e}", err=True)
        sys.exit(1)

    click.echo(f"Activity reset: {store.path}")


@cli.command()
@click.option('--notifier', '-n', default=None,
              help='Notification backend to test')
@click.pass_context
def notify_test(ctx, notifier):
    """Send a test notification through the configured backend."""
    config = ctx.obj['config']
    logger = ctx.obj['logger']

    try:
        backend = create_notifier(
            notifier or config.get('notifications.backend', 'auto'),
            sound=config.get('notifications.sound'),
            app_icon=config.get('notifications.app_icon'),
        )
        backend.notify("Break Monitor", "Test", "Notifications are working")
    except BreakMonitorError as e:
        logger.error(f"Notification test failed: {e}")
        click.echo(f"Error sending notification: {e}", err=True)
        sys.exit(1)

    click.echo(f"Test notification sent via {backend.name}")


@cli.command()
@click.option('--key', required=True, help='Configuration key (e.g., pomodoro.long_break_every)')
@click.option('--value', required=True, help='Configuration value')
@click.pass_context
def config_set(ctx, key, value):
    """Set a configuration value."""
    config = ctx.obj['config']
    logger = ctx.obj['logger']

    # Convert value to appropriate type
    if value.lower() in ('true', 'false'):
        value = value.lower() == 'true'
    elif value.isdigit():
        value = int(value)

    config.set(key, value)
    try:
        config.validate()
        config.save_config()
    except ConfigError as e:
        logger.error(f"Failed to update configuration: {e}")
        click.echo(f"Error updating configuration: {e}", err=True)
        sys.exit(1)

    click.echo(f"Configuration updated: {key} = {value}")
    logger.info(f"Configuration updated: {key} = {value}")


@cli.command()
@click.option('--key', help='Specific configuration key to show')
@click.pass_context
def config_get(ctx, key):
    """Get configuration value(s)."""
    config = ctx.obj['config']

    if key:
        value = config.get(key)
        if value is not None:
            click.echo(f"{key}: {value}")
        else:
            click.echo(f"Configuration key '{key}' not found")
    else:
        click.echo(yaml.safe_dump(config.config, default_flow_style=False))


if __name__ == '__main__':
    cli()
