# ABOUTME: Readers and writers for ~/.aws/config, ~/.aws/credentials and the settings file
# ABOUTME: Credential writes are atomic (temp file + rename) and restricted to the owner

"""File persistence for AWS config, credentials and app settings."""

import json
import os
import tempfile
from collections.abc import Callable
from configparser import ConfigParser, Error as ConfigParserError
from pathlib import Path

from .errors import CredentialsFileError
from .models import AppSettings, AWSCredentials

# configparser treats this section name specially; pick one no AWS file uses
_NO_DEFAULT_SECTION = "__aws_creds_no_default__"


def _new_parser() -> ConfigParser:
    # Secrets may contain '%' or ';', so disable interpolation and inline comments
    return ConfigParser(
        interpolation=None,
        inline_comment_prefixes=(),
        default_section=_NO_DEFAULT_SECTION,
        strict=False,
    )


def _noop(message: str) -> None:
    pass


def read_ini(path: Path, debug: Callable[[str], None] = _noop) -> dict[str, dict[str, str]]:
    """Read an INI file into a plain mapping of section name to key/value pairs.

    Args:
        path: File to read.
        debug: Debug printer.

    Returns:
        Mapping of sections; empty if the file is missing or unparsable.
    """
    if not path.exists():
        return {}

    parser = _new_parser()
    try:
        parser.read(path, encoding="utf-8")
    except (ConfigParserError, OSError, UnicodeDecodeError) as e:
        debug(f"Could not parse {path}: {e}")
        return {}

    return {section: dict(parser.items(section)) for section in parser.sections()}


def read_credentials(path: Path, profile: str) -> AWSCredentials | None:
    """Read one profile's static credentials from the credentials file.

    Args:
        path: Credentials file path.
        profile: Section name.

    Returns:
        AWSCredentials, or None if the section or its keys are missing.
    """
    section = read_ini(path).get(profile)
    if not section:
        return None

    access_key = section.get("aws_access_key_id")
    secret_key = section.get("aws_secret_access_key")
    if not access_key or not secret_key:
        return None

    return AWSCredentials(
        access_key_id=access_key,
        secret_access_key=secret_key,
        session_token=section.get("aws_session_token"),
    )


def write_credentials(
    path: Path, profile: str, credentials: AWSCredentials, debug: Callable[[str], None] = _noop
) -> None:
    """Save credentials for a profile, replacing any previous entry for it.

    Other sections keep their values. The file is rewritten through
    ConfigParser, so comments are dropped and option names in every section
    come back lower-cased.

    Args:
        path: Credentials file path.
        profile: Section name to write.
        credentials: Credentials to store.
        debug: Debug printer.

    Raises:
        CredentialsFileError: If the file cannot be written.
    """
    parser = _new_parser()
    if path.exists():
        try:
            parser.read(path, encoding="utf-8")
        except (ConfigParserError, OSError, UnicodeDecodeError) as e:
            # Refuse to clobber a file we could not understand
            raise CredentialsFileError(f"Could not read existing credentials file {path}: {e}") from e

    if parser.has_section(profile):
        parser.remove_section(profile)
    parser.add_section(profile)
    parser.set(profile, "aws_access_key_id", credentials.access_key_id)
    parser.set(profile, "aws_secret_access_key", credentials.secret_access_key)
    if credentials.session_token:
        parser.set(profile, "aws_session_token", credentials.session_token)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".credentials.", suffix=".tmp")
        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                parser.write(f)

            os.chmod(temp_path, 0o600)
            os.replace(temp_path, path)
        except Exception:
            # Clean up temp file on error
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise
    except OSError as e:
        raise CredentialsFileError(f"Failed to save credentials to {path}: {e}") from e

    debug(f"Saved credentials to {path} for profile '{profile}'")


class SettingsStore:
    """Load and save AppSettings as JSON."""

    def __init__(self, path: Path, debug: Callable[[str], None] = _noop):
        self.path = path
        self._debug = debug

    def load(self) -> AppSettings:
        """Load settings, falling back to defaults for anything missing or unreadable."""
        if not self.path.exists():
            return AppSettings()

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("settings file does not contain a JSON object")
            return AppSettings.from_dict(data)
        except (OSError, ValueError, TypeError) as e:
            self._debug(f"Could not load settings from {self.path}: {e}")
            return AppSettings()

    def save(self, settings: AppSettings) -> None:
        """Write settings to disk."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(settings.to_dict(), f, indent=2)

    def update(self, **changes) -> AppSettings:
        """Apply changes to the stored settings and save them.

        Args:
            **changes: AppSettings field names and their new values.

        Returns:
            The updated settings.
        """
        settings = self.load()
        for key, value in changes.items():
            if not hasattr(settings, key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(settings, key, value)
        self.save(settings)
        return settings
