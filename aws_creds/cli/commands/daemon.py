# ABOUTME: Daemon command that keeps SSO profiles refreshed on a fixed interval
# ABOUTME: Stops cleanly on Ctrl+C or SIGTERM without leaving partial credential files

"""Daemon command - Refresh credentials continuously."""

import signal
import threading

from cleo.commands.command import Command
from cleo.helpers import argument, option
from rich.console import Console

from aws_creds.cli.commands.refresh import build_orchestrator
from aws_creds.cli.utils.prompts import print_no_profiles, resolve_profiles, select_interval, select_profiles
from aws_creds.config import ToolConfig
from aws_creds.profiles import load_profiles, sort_profiles
from aws_creds.refresh import DaemonCycle
from aws_creds.store import SettingsStore


class DaemonCommand(Command):
    name = "daemon"
    description = "Keep SSO profiles refreshed on an interval"

    arguments = [
        argument("profiles", description="Profiles to keep fresh (prompts when omitted)", optional=True, multiple=True),
    ]

    options = [
        option("interval", "i", description="Refresh interval in minutes", flag=False, default=None),
        option("all", "a", description="Refresh every SSO profile", flag=True),
        option("no-browser", description="Do not open the login page automatically", flag=True),
    ]

    def handle(self) -> int:
        """Execute the daemon command."""
        console = Console()
        config = ToolConfig.from_environment()
        settings_store = SettingsStore(config.settings_file, config.debug_print)
        settings = settings_store.load()

        profiles = load_profiles(config)
        if not profiles:
            print_no_profiles(console, config.config_file)
            return 1

        names = self.argument("profiles")
        if names:
            selected = resolve_profiles(console, profiles, names)
        elif self.option("all"):
            selected = sort_profiles(profiles, settings.favorite_profiles)
        else:
            selected = select_profiles(profiles, settings, "Select profiles to keep refreshed")
        if not selected:
            console.print("\n[yellow]Daemon cancelled.[/yellow]")
            return 1

        interval = self.option("interval")
        if interval is None:
            interval = settings.default_interval if (names or self.option("all")) else select_interval(
                settings.default_interval
            )
            if interval is None:
                console.print("\n[yellow]Daemon cancelled.[/yellow]")
                return 1

        try:
            interval = int(interval)
        except (TypeError, ValueError):
            console.print(f"[red]Invalid interval: {interval}[/red]")
            return 1
        if interval <= 0:
            console.print("[red]Interval must be a positive number of minutes[/red]")
            return 1

        cancel = threading.Event()
        orchestrator, channel = build_orchestrator(
            console, config, settings_store, cancel, launch_browser=not self.option("no-browser")
        )

        def _on_cycle(cycle: DaemonCycle) -> None:
            if cycle.error:
                console.print(f"[red]Refresh cycle failed: {cycle.error}[/red]")
            elif cycle.summary is not None:
                console.print(f"[bold]{cycle.summary.describe()}[/bold]")
            console.print(
                f"[dim]Last refresh {cycle.finished_at.astimezone():%H:%M:%S}, "
                f"next at {cycle.next_run.astimezone():%H:%M:%S}[/dim]\n"
            )

        previous_handler = signal.signal(signal.SIGTERM, lambda signum, frame: cancel.set())
        console.print(
            f"\n[bold cyan]Auto-refresh running[/bold cyan] for {len(selected)} profile(s) "
            f"every {interval} minute(s). Press Ctrl+C to stop.\n"
        )

        try:
            orchestrator.run_daemon(selected, interval, on_cycle=_on_cycle)
        except KeyboardInterrupt:
            cancel.set()
        finally:
            signal.signal(signal.SIGTERM, previous_handler)
            channel.close()

        console.print("\n[yellow]Auto-refresh stopped.[/yellow]\n")
        return 0
