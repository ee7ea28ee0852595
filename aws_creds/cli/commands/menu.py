# ABOUTME: Interactive main menu shown when aws-creds runs without a command
# ABOUTME: Dispatches to the status, refresh, daemon and settings commands

"""Menu command - Interactive entry point."""

import questionary
from cleo.commands.command import Command
from rich.console import Console

from aws_creds.cli.utils.prompts import select_interval
from aws_creds.config import ToolConfig
from aws_creds.store import SettingsStore

MAIN_CHOICES = [
    questionary.Choice("Check credentials status (view all profiles)", value="status"),
    questionary.Choice("Refresh credentials (select profiles)", value="refresh"),
    questionary.Choice("Start auto-refresh daemon (continuous mode)", value="daemon"),
    questionary.Choice("Settings (notifications & defaults)", value="settings"),
    questionary.Choice("Exit", value="exit"),
]


class MenuCommand(Command):
    name = "menu"
    description = "Open the interactive menu"

    def handle(self) -> int:
        """Execute the menu command."""
        console = Console()
        console.print("[bold cyan]AWS Credentials Manager[/bold cyan]\n")

        while True:
            action = questionary.select("What would you like to do?", choices=MAIN_CHOICES).ask()
            if action in (None, "exit"):
                return 0

            if action == "settings":
                self._settings_menu()
            else:
                self.call(action)
            console.print()

    def _settings_menu(self) -> None:
        config = ToolConfig.from_environment()
        store = SettingsStore(config.settings_file, config.debug_print)

        while True:
            settings = store.load()
            action = questionary.select(
                "Settings",
                choices=[
                    questionary.Choice(
                        f"Notifications: {'On' if settings.notifications else 'Off'}", value="notifications"
                    ),
                    questionary.Choice(
                        f"Default refresh interval: {settings.default_interval} minutes", value="interval"
                    ),
                    questionary.Choice(
                        f"Favorite profiles ({len(settings.favorite_profiles)})", value="favorites"
                    ),
                    questionary.Choice("Back to main menu", value="back"),
                ],
            ).ask()

            if action in (None, "back"):
                return

            if action == "notifications":
                self.call("settings notifications", "off" if settings.notifications else "on")
            elif action == "interval":
                interval = select_interval(settings.default_interval)
                if interval is not None:
                    self.call("settings interval", str(interval))
            elif action == "favorites":
                self.call("settings favorites")
