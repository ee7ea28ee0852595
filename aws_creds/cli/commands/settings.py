# ABOUTME: Settings commands for notifications, the default refresh interval and favorite profiles
# ABOUTME: Settings persist in ~/.aws/credentials-manager.json

"""Settings commands - Manage credentials manager preferences."""

from cleo.commands.command import Command
from cleo.helpers import argument
from rich import box
from rich.console import Console
from rich.panel import Panel

from aws_creds.cli.utils.prompts import resolve_profiles, select_profiles
from aws_creds.config import ToolConfig
from aws_creds.models import AppSettings
from aws_creds.profiles import load_profiles
from aws_creds.store import SettingsStore

ON_VALUES = ("on", "true", "yes", "1")
OFF_VALUES = ("off", "false", "no", "0")


def _store() -> SettingsStore:
    config = ToolConfig.from_environment()
    return SettingsStore(config.settings_file, config.debug_print)


def print_settings(console: Console, settings: AppSettings) -> None:
    favorites = ", ".join(settings.favorite_profiles) or "none"
    console.print()
    console.print(
        Panel(
            f"Notifications:            {'On' if settings.notifications else 'Off'}\n"
            f"Default refresh interval: {settings.default_interval} minutes\n"
            f"Favorite profiles:        {favorites}\n"
            f"Last refresh:             {settings.last_refresh or 'never'}",
            title="Settings",
            box=box.ROUNDED,
        )
    )
    console.print()


class SettingsShowCommand(Command):
    name = "settings show"
    description = "Show current settings"

    def handle(self) -> int:
        """Execute the settings show command."""
        print_settings(Console(), _store().load())
        return 0


class SettingsNotificationsCommand(Command):
    name = "settings notifications"
    description = "Turn desktop notifications on or off"

    arguments = [argument("state", description="on or off", optional=False)]

    def handle(self) -> int:
        """Execute the settings notifications command."""
        console = Console()
        state = self.argument("state").lower()

        if state in ON_VALUES:
            enabled = True
        elif state in OFF_VALUES:
            enabled = False
        else:
            console.print(f"[red]Expected 'on' or 'off', got '{state}'[/red]")
            return 1

        _store().update(notifications=enabled)
        console.print(f"[green]✓ Notifications {'enabled' if enabled else 'disabled'}[/green]")
        return 0


class SettingsIntervalCommand(Command):
    name = "settings interval"
    description = "Set the default refresh interval in minutes"

    arguments = [argument("minutes", description="Interval in minutes", optional=False)]

    def handle(self) -> int:
        """Execute the settings interval command."""
        console = Console()
        try:
            minutes = int(self.argument("minutes"))
        except ValueError:
            console.print(f"[red]Invalid interval: {self.argument('minutes')}[/red]")
            return 1

        if minutes <= 0:
            console.print("[red]Interval must be a positive number of minutes[/red]")
            return 1

        _store().update(default_interval=minutes)
        console.print(f"[green]✓ Default refresh interval set to {minutes} minutes[/green]")
        return 0


class SettingsFavoritesCommand(Command):
    name = "settings favorites"
    description = "Choose favorite profiles (listed first and pre-selected)"

    arguments = [
        argument("profiles", description="Favorite profiles (prompts when omitted)", optional=True, multiple=True),
    ]

    def handle(self) -> int:
        """Execute the settings favorites command."""
        console = Console()
        config = ToolConfig.from_environment()
        store = SettingsStore(config.settings_file, config.debug_print)
        profiles = load_profiles(config)

        names = self.argument("profiles")
        if names:
            selected = resolve_profiles(console, profiles, names)
        else:
            selected = select_profiles(profiles, store.load(), "Select favorite profiles") if profiles else None

        if selected is None:
            console.print("[yellow]Favorites unchanged.[/yellow]")
            return 1

        settings = store.update(favorite_profiles=[p.name for p in selected])
        console.print(f"[green]✓ Favorites: {', '.join(settings.favorite_profiles)}[/green]")
        return 0
