# ABOUTME: Status command showing the SSO session health of every configured profile
# ABOUTME: Checks run concurrently; output is a table with favorites listed first

"""Status command - Show credential status for all SSO profiles."""

from cleo.commands.command import Command
from cleo.helpers import argument
from rich import box
from rich.console import Console
from rich.table import Table

from aws_creds.cli.utils.prompts import print_no_profiles, resolve_profiles
from aws_creds.config import ToolConfig
from aws_creds.models import CredentialStatus
from aws_creds.profiles import load_profiles, sort_profiles
from aws_creds.status import check_all_profiles, format_expiry
from aws_creds.store import SettingsStore

STATUS_STYLES = {
    CredentialStatus.VALID: ("green", "Valid"),
    CredentialStatus.EXPIRED: ("red", "Expired"),
    CredentialStatus.ERROR: ("yellow", "Error"),
    CredentialStatus.UNKNOWN: ("dim", "Unknown"),
}


class StatusCommand(Command):
    name = "status"
    description = "Show credential status for SSO profiles"

    arguments = [
        argument("profiles", description="Profiles to check (default: all)", optional=True, multiple=True),
    ]

    def handle(self) -> int:
        """Execute the status command."""
        console = Console()
        config = ToolConfig.from_environment()
        settings = SettingsStore(config.settings_file, config.debug_print).load()

        profiles = load_profiles(config)
        if not profiles:
            print_no_profiles(console, config.config_file)
            return 1

        names = self.argument("profiles")
        if names:
            profiles = resolve_profiles(console, profiles, names)
            if profiles is None:
                return 1

        with console.status(f"Checking {len(profiles)} profile(s)..."):
            statuses = check_all_profiles(sort_profiles(profiles, settings.favorite_profiles), config)

        table = Table(
            title=f"Profile Status ({len(statuses)} profiles)",
            box=box.ROUNDED,
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("", justify="center")
        table.add_column("Profile", style="bold", no_wrap=True)
        table.add_column("Status")
        table.add_column("Expires")
        table.add_column("Account")
        table.add_column("Details", style="dim")

        for status in statuses:
            color, label = STATUS_STYLES[status.status]
            name = status.profile.name
            if name in settings.favorite_profiles:
                name += " [yellow]★[/yellow]"
            if status.profile.name == config.active_profile:
                name += " [dim](active)[/dim]"

            expires = format_expiry(status.expires_at) if status.status is CredentialStatus.VALID else ""
            table.add_row(
                f"[{color}]●[/{color}]",
                name,
                f"[{color}]{label}[/{color}]",
                expires,
                status.account_id or status.profile.sso_account_id,
                status.error or "",
            )

        console.print()
        console.print(table)

        valid = sum(1 for s in statuses if s.status is CredentialStatus.VALID)
        console.print(f"\n[green]{valid}[/green] of {len(statuses)} profile(s) have a valid session\n")

        return 0
