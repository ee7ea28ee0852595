# ABOUTME: Configuration management for the AWS SSO credentials manager
# ABOUTME: Resolves file locations and environment inputs once at startup

"""Configuration management for aws_creds."""

import os
import sys
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigurationError

DEBUG_ENV_VAR = "AWS_CREDS_DEBUG"
SETTINGS_FILENAME = "credentials-manager.json"


def make_debug_printer(enabled: bool) -> Callable[[str], None]:
    """Return a callable that prints debug messages to stderr when enabled."""

    def _debug_print(message: str) -> None:
        if enabled:
            print(f"Debug: {message}", file=sys.stderr)

    return _debug_print


def _no_debug(message: str) -> None:
    pass


@dataclass(frozen=True)
class ToolConfig:
    """Everything the tool reads from its environment, resolved once.

    Core components receive this object instead of consulting os.environ or
    the home directory themselves.
    """

    aws_dir: Path
    config_file: Path
    credentials_file: Path
    sso_cache_dir: Path
    settings_file: Path
    active_profile: str | None = None
    region: str | None = None
    debug: bool = False

    @classmethod
    def from_environment(cls, environ: Mapping[str, str] | None = None, home: Path | None = None) -> "ToolConfig":
        """Build the configuration from the process environment.

        Args:
            environ: Environment mapping (defaults to os.environ).
            home: Home directory override (defaults to Path.home()).

        Returns:
            ToolConfig instance.

        Raises:
            ConfigurationError: If the home directory cannot be determined.
        """
        env = os.environ if environ is None else environ

        if home is None:
            try:
                home = Path.home()
            except (KeyError, RuntimeError) as e:
                raise ConfigurationError(f"Could not determine home directory: {e}") from e

        aws_dir = home / ".aws"

        # Honour the same overrides as the AWS CLI so both tools see the same files
        config_file = Path(env["AWS_CONFIG_FILE"]).expanduser() if env.get("AWS_CONFIG_FILE") else aws_dir / "config"
        credentials_file = (
            Path(env["AWS_SHARED_CREDENTIALS_FILE"]).expanduser()
            if env.get("AWS_SHARED_CREDENTIALS_FILE")
            else aws_dir / "credentials"
        )

        return cls(
            aws_dir=aws_dir,
            config_file=config_file,
            credentials_file=credentials_file,
            sso_cache_dir=aws_dir / "sso" / "cache",
            settings_file=aws_dir / SETTINGS_FILENAME,
            active_profile=env.get("AWS_PROFILE") or None,
            region=env.get("AWS_REGION") or env.get("AWS_DEFAULT_REGION") or None,
            debug=env.get(DEBUG_ENV_VAR, "").lower() in ("1", "true", "yes"),
        )

    @property
    def debug_print(self) -> Callable[[str], None]:
        """Debug printer honouring the debug flag."""
        return make_debug_printer(self.debug) if self.debug else _no_debug
