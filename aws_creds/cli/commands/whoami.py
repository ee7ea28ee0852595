# ABOUTME: Whoami command showing the AWS identity of the current environment
# ABOUTME: Uses AWS_PROFILE and AWS_REGION / AWS_DEFAULT_REGION like the AWS CLI

"""Whoami command - Show the caller identity."""

from botocore.exceptions import BotoCoreError, ClientError
from cleo.commands.command import Command
from rich.console import Console

from aws_creds.aws import error_message, get_caller_identity, parse_identity_arn
from aws_creds.config import ToolConfig


class WhoamiCommand(Command):
    name = "whoami"
    description = "Show the AWS account and identity for the current environment"

    def handle(self) -> int:
        """Execute the whoami command."""
        console = Console()
        config = ToolConfig.from_environment()

        try:
            with console.status("Fetching account info..."):
                identity = get_caller_identity(region=config.region)
        except (ClientError, BotoCoreError) as e:
            console.print(f"[red]Failed to get account info: {error_message(e)}[/red]")
            return 1

        parts = [f"Account: [cyan]{identity.account_id}[/cyan]"]
        if config.active_profile:
            parts.append(f"Profile: [cyan]{config.active_profile}[/cyan]")
        if config.region:
            parts.append(f"Region: [cyan]{config.region}[/cyan]")
        console.print(" [dim]|[/dim] ".join(parts))

        name, kind = parse_identity_arn(identity.arn)
        console.print(f"{kind}: [cyan]{name}[/cyan]")
        console.print(f"User ID: [dim]{identity.user_id}[/dim]")
        return 0
