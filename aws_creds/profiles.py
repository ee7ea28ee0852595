# ABOUTME: Discovers SSO profiles from the sections of ~/.aws/config
# ABOUTME: Joins profile sections to sso-session blocks and drops anything incomplete

"""SSO profile discovery."""

from collections.abc import Iterable, Mapping

from .config import ToolConfig
from .models import SSOProfile
from .store import read_ini

PROFILE_PREFIX = "profile "
SSO_SESSION_PREFIX = "sso-session "


def _profile_name(section: str) -> str | None:
    if section == "default":
        return "default"
    if section.startswith(PROFILE_PREFIX):
        name = section[len(PROFILE_PREFIX) :].strip()
        return name or None
    return None


def discover_profiles(config: Mapping[str, Mapping[str, str]]) -> list[SSOProfile]:
    """Build the list of usable SSO profiles from parsed config sections.

    A section qualifies when it is ``[default]`` or ``[profile NAME]`` and
    either references an ``[sso-session NAME]`` block with a start URL and SSO
    region (the account id and role name living on the profile), or carries
    start URL, account id, role name and SSO region inline. Sections that do
    not qualify are dropped without error so unrelated config never breaks
    discovery.

    Args:
        config: Mapping of section name to key/value pairs, in file order.

    Returns:
        Profiles in the order their sections appear.
    """
    sessions = {
        section[len(SSO_SESSION_PREFIX) :].strip(): values
        for section, values in config.items()
        if section.startswith(SSO_SESSION_PREFIX)
    }

    profiles = []
    for section, values in config.items():
        name = _profile_name(section)
        if name is None:
            continue

        account_id = values.get("sso_account_id")
        role_name = values.get("sso_role_name")
        if not account_id or not role_name:
            continue

        session_name = values.get("sso_session")
        if session_name:
            session = sessions.get(session_name)
            if not session or not session.get("sso_start_url") or not session.get("sso_region"):
                continue
            profiles.append(
                SSOProfile(
                    name=name,
                    sso_start_url=session["sso_start_url"],
                    sso_account_id=account_id,
                    sso_role_name=role_name,
                    sso_region=session["sso_region"],
                    region=values.get("region") or None,
                    sso_session=session_name,
                )
            )
        elif values.get("sso_start_url") and values.get("sso_region"):
            profiles.append(
                SSOProfile(
                    name=name,
                    sso_start_url=values["sso_start_url"],
                    sso_account_id=account_id,
                    sso_role_name=role_name,
                    sso_region=values["sso_region"],
                    region=values.get("region") or None,
                )
            )

    return profiles


def load_profiles(config: ToolConfig) -> list[SSOProfile]:
    """Read the AWS config file and discover its SSO profiles."""
    return discover_profiles(read_ini(config.config_file, config.debug_print))


def sort_profiles(profiles: Iterable[SSOProfile], favorites: Iterable[str]) -> list[SSOProfile]:
    """Order profiles for display: favorites first, then alphabetically."""
    favorite_names = set(favorites)
    return sorted(profiles, key=lambda p: (p.name not in favorite_names, p.name))


def find_profile(profiles: Iterable[SSOProfile], name: str) -> SSOProfile | None:
    """Find a profile by name."""
    for profile in profiles:
        if profile.name == name:
            return profile
    return None
