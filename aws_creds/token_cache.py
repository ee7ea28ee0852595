# ABOUTME: Reads and writes SSO access tokens in the AWS CLI token cache
# ABOUTME: Cache files are keyed by SHA-1 of the session name or start URL, mode 0600

"""SSO token cache compatible with ``aws sso login``.

Failures here never abort the tool: the credentials file stays the source of
truth, so a broken cache only means the user has to log in again.
"""

import hashlib
import json
import os
import tempfile
from collections.abc import Callable
from pathlib import Path

from .models import CachedToken, SoftResult, SSOProfile


def _noop(message: str) -> None:
    pass


def cache_key(profile: SSOProfile) -> str:
    """SHA-1 hex digest the AWS CLI uses to name a profile's cache file."""
    source = profile.sso_session or profile.sso_start_url
    return hashlib.sha1(source.encode("utf-8")).hexdigest()  # noqa: S324 - matches AWS CLI naming


def cache_path(cache_dir: Path, profile: SSOProfile) -> Path:
    """Location of a profile's cache file."""
    return cache_dir / f"{cache_key(profile)}.json"


def find_cached_token(
    cache_dir: Path, profile: SSOProfile, debug: Callable[[str], None] = _noop
) -> CachedToken | None:
    """Look up the cached token for a profile.

    Expiry is not checked; an expired record is still returned.

    Args:
        cache_dir: Token cache directory.
        profile: Profile to look up.
        debug: Debug printer.

    Returns:
        CachedToken, or None if there is no structurally valid record.
    """
    path = cache_path(cache_dir, profile)
    if not path.exists():
        return None

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        debug(f"Could not read token cache {path}: {e}")
        return None

    if not isinstance(data, dict):
        debug(f"Ignoring malformed token cache {path}")
        return None

    return CachedToken.from_dict(data)


def save_token(
    cache_dir: Path, profile: SSOProfile, token: CachedToken, debug: Callable[[str], None] = _noop
) -> SoftResult:
    """Write a token to the cache, replacing any previous record for the same key.

    Args:
        cache_dir: Token cache directory.
        profile: Profile the token was issued for.
        token: Token to store.
        debug: Debug printer.

    Returns:
        SoftResult describing whether the write happened.
    """
    path = cache_path(cache_dir, profile)
    record = token.to_dict()
    record["startUrl"] = token.start_url or profile.sso_start_url
    record["region"] = token.region or profile.sso_region

    try:
        cache_dir.mkdir(parents=True, exist_ok=True)
        temp_fd, temp_path = tempfile.mkstemp(dir=cache_dir, prefix=".token.", suffix=".tmp")
        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                json.dump(record, f, indent=2)

            os.chmod(temp_path, 0o600)
            os.replace(temp_path, path)
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise
    except OSError as e:
        debug(f"Could not write token cache {path}: {e}")
        return SoftResult.failed(f"Could not write token cache: {e}")

    debug(f"Cached SSO token for profile '{profile.name}' in {path}")
    return SoftResult.success()
