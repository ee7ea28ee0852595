# ABOUTME: Refresh and login commands for SSO profiles
# ABOUTME: Refresh writes fresh role credentials for selected profiles, logging in where the token expired

"""Refresh command - Write fresh credentials for SSO profiles."""

import threading

from cleo.commands.command import Command
from cleo.helpers import argument, option
from rich.console import Console

from aws_creds.cli.utils.prompts import device_login_prompt, print_no_profiles, resolve_profiles, select_profiles
from aws_creds.config import ToolConfig
from aws_creds.login import SSOLogin
from aws_creds.models import RefreshResult, SSOProfile
from aws_creds.profiles import find_profile, load_profiles, sort_profiles
from aws_creds.refresh import LoginChannel, RefreshOrchestrator
from aws_creds.store import SettingsStore


def print_result(console: Console, result: RefreshResult) -> None:
    """Print one profile's refresh outcome."""
    if result.success:
        console.print(f"[green]✓[/green] {result.name}")
    else:
        console.print(f"[red]✗[/red] {result.name}: [red]{result.error or 'failed'}[/red]")


def build_orchestrator(
    console: Console,
    config: ToolConfig,
    settings_store: SettingsStore,
    cancel: threading.Event,
    launch_browser: bool = True,
) -> tuple[RefreshOrchestrator, LoginChannel]:
    """Wire the login worker and orchestrator used by refresh and daemon."""
    login = SSOLogin(config, prompt=device_login_prompt(console, launch_browser), cancel=cancel)
    channel = LoginChannel(login.login)

    def _on_login_required(profile: SSOProfile) -> None:
        console.print(f"\n[yellow]Token expired for profile '{profile.name}', starting SSO login...[/yellow]")

    orchestrator = RefreshOrchestrator(
        config,
        settings_store,
        login=channel.request_login,
        cancel=cancel,
        on_result=lambda result: print_result(console, result),
        on_login_required=_on_login_required,
    )
    return orchestrator, channel


class RefreshCommand(Command):
    name = "refresh"
    description = "Refresh credentials for SSO profiles"

    arguments = [
        argument("profiles", description="Profiles to refresh (prompts when omitted)", optional=True, multiple=True),
    ]

    options = [
        option("all", "a", description="Refresh every SSO profile", flag=True),
        option("no-notify", description="Do not send desktop notifications", flag=True),
        option("no-browser", description="Do not open the login page automatically", flag=True),
    ]

    def handle(self) -> int:
        """Execute the refresh command."""
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
            selected = select_profiles(profiles, settings)

        if not selected:
            console.print("\n[yellow]Refresh cancelled.[/yellow]")
            return 1

        notifications = False if self.option("no-notify") else None
        cancel = threading.Event()
        orchestrator, channel = build_orchestrator(
            console, config, settings_store, cancel, launch_browser=not self.option("no-browser")
        )

        console.print(f"\n[bold]Refreshing {len(selected)} profile(s)...[/bold]\n")
        try:
            summary = orchestrator.run_once(selected, notifications=notifications)
        except KeyboardInterrupt:
            cancel.set()
            console.print("\n[yellow]Refresh interrupted.[/yellow]")
            return 1
        finally:
            channel.close()

        color = "green" if summary.error_count == 0 else "yellow"
        console.print(f"\n[{color}]{summary.describe()}[/{color}]\n")
        return 0 if summary.error_count == 0 else 1


class LoginCommand(Command):
    name = "login"
    description = "Log in to one SSO profile and write its credentials"

    arguments = [argument("profile", description="Profile to log in", optional=False)]

    options = [option("no-browser", description="Do not open the login page automatically", flag=True)]

    def handle(self) -> int:
        """Execute the login command."""
        console = Console()
        config = ToolConfig.from_environment()

        profiles = load_profiles(config)
        profile = find_profile(profiles, self.argument("profile"))
        if profile is None:
            console.print(f"[red]Profile '{self.argument('profile')}' is not a configured SSO profile.[/red]")
            return 1

        cancel = threading.Event()
        login = SSOLogin(config, prompt=device_login_prompt(console, not self.option("no-browser")), cancel=cancel)

        try:
            outcome = login.login(profile)
        except KeyboardInterrupt:
            cancel.set()
            console.print("\n[yellow]Login cancelled.[/yellow]")
            return 1

        if outcome.success:
            console.print(f"\n[green]✓ Credentials written for profile '{profile.name}'[/green]\n")
            return 0

        console.print(f"\n[red]✗ Login failed for '{profile.name}': {outcome.error}[/red]\n")
        return 1
