# ABOUTME: Shared interactive helpers for CLI commands
# ABOUTME: Profile selection, the device-login prompt and the "no profiles" hint

"""Interactive helpers shared by CLI commands."""

from collections.abc import Callable

import questionary
from rich.console import Console
from rich.panel import Panel

from aws_creds.device_flow import DeviceAuthSession
from aws_creds.models import REFRESH_INTERVALS, AppSettings, SSOProfile
from aws_creds.notify import open_browser
from aws_creds.profiles import find_profile, sort_profiles


def print_no_profiles(console: Console, config_file) -> None:
    """Explain what an SSO profile needs when none were found."""
    console.print(f"\n[yellow]No SSO profiles found in {config_file}[/yellow]")
    console.print("Make sure your config has profiles with:")
    console.print("  • sso_start_url (or sso_session)")
    console.print("  • sso_account_id")
    console.print("  • sso_role_name")
    console.print("  • sso_region\n")


def resolve_profiles(
    console: Console, profiles: list[SSOProfile], names: list[str]
) -> list[SSOProfile] | None:
    """Map profile names given on the command line to profiles.

    Returns:
        Profiles in the order given, or None if any name is unknown.
    """
    selected = []
    for name in names:
        profile = find_profile(profiles, name)
        if profile is None:
            console.print(f"[red]Profile '{name}' is not a configured SSO profile.[/red]")
            console.print("Available profiles: " + ", ".join(p.name for p in profiles))
            return None
        selected.append(profile)
    return selected


def select_profiles(
    profiles: list[SSOProfile], settings: AppSettings, message: str = "Select profiles to refresh"
) -> list[SSOProfile] | None:
    """Ask the user to pick profiles, favorites first and pre-selected.

    Returns:
        Selected profiles, or None if the user cancelled.
    """
    favorites = settings.favorite_profiles
    choices = [
        questionary.Choice(
            title=f"{profile.name} ★" if profile.name in favorites else profile.name,
            value=profile.name,
            checked=profile.name in favorites,
        )
        for profile in sort_profiles(profiles, favorites)
    ]

    names = questionary.checkbox(
        message,
        choices=choices,
        validate=lambda answer: bool(answer) or "Select at least one profile",
    ).ask()
    if names is None:
        return None

    return [p for p in sort_profiles(profiles, favorites) if p.name in names]


def select_interval(default: int) -> int | None:
    """Ask for a refresh interval in minutes."""
    choices = []
    for interval in REFRESH_INTERVALS:
        title = interval["label"]
        if interval.get("hint"):
            title += f" ({interval['hint']})"
        choices.append(questionary.Choice(title=title, value=interval["value"]))

    valid_values = [i["value"] for i in REFRESH_INTERVALS]
    return questionary.select(
        "Refresh interval",
        choices=choices,
        default=default if default in valid_values else None,
    ).ask()


def device_login_prompt(
    console: Console, launch_browser: bool = True
) -> Callable[[SSOProfile, DeviceAuthSession], None]:
    """Build the callback that shows the verification URL and code for a login."""

    def _prompt(profile: SSOProfile, session: DeviceAuthSession) -> None:
        url = session.verification_uri_complete or session.verification_uri
        console.print(
            Panel.fit(
                f"[bold]SSO login required for [cyan]{profile.name}[/cyan][/bold]\n\n"
                f"Open: [link={url}]{session.verification_uri}[/link]\n"
                f"Code: [bold yellow]{session.user_code}[/bold yellow]",
                border_style="cyan",
                padding=(1, 2),
            )
        )

        if launch_browser:
            opened = open_browser(url)
            if not opened:
                console.print(f"[yellow]Could not open a browser ({opened.error}). Open the URL manually.[/yellow]")

        console.print("[dim]Waiting for authorization in the browser...[/dim]")

    return _prompt
