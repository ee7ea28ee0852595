# ABOUTME: CLI module for the AWS SSO credentials manager
# ABOUTME: Registers the menu, status, refresh, login, daemon, whoami and settings commands

"""Command-line interface for aws-creds."""

import sys

from cleo.application import Application
from cleo.io.inputs.argv_input import ArgvInput

from aws_creds import __version__

from .commands.daemon import DaemonCommand
from .commands.menu import MenuCommand
from .commands.refresh import LoginCommand, RefreshCommand
from .commands.settings import (
    SettingsFavoritesCommand,
    SettingsIntervalCommand,
    SettingsNotificationsCommand,
    SettingsShowCommand,
)
from .commands.status import StatusCommand
from .commands.whoami import WhoamiCommand


def create_application() -> Application:
    """Create the CLI application."""
    application = Application("aws-creds", __version__)

    application.add(StatusCommand())
    application.add(RefreshCommand())
    application.add(LoginCommand())
    application.add(DaemonCommand())
    application.add(WhoamiCommand())
    application.add(MenuCommand())

    # Settings commands
    application.add(SettingsShowCommand())
    application.add(SettingsNotificationsCommand())
    application.add(SettingsIntervalCommand())
    application.add(SettingsFavoritesCommand())

    return application


def main():
    """Main entry point for the CLI."""
    application = create_application()
    if len(sys.argv) == 1:
        # Bare invocation opens the interactive menu
        application.run(ArgvInput([sys.argv[0], "menu"]))
    else:
        application.run()


if __name__ == "__main__":
    main()
