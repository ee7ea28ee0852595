# ABOUTME: Credential refresh for one profile and the sequential multi-profile orchestrator
# ABOUTME: Hands interactive logins to a single-slot login channel and supports a repeating daemon mode

"""Credential refresh orchestration.

Profiles are refreshed strictly one at a time. When a profile needs an
interactive login the orchestrator posts a request on a :class:`LoginChannel`
and blocks until that login finishes, so only one device authorization is
ever prompting the user.
"""

import queue
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from . import aws
from .config import ToolConfig
from .device_flow import FlowState
from .errors import CredentialExchangeError, CredentialsFileError, LoginInProgressError
from .login import LoginOutcome
from .models import RefreshResult, RefreshSummary, SSOProfile, format_timestamp, utc_now
from .notify import send_notification
from .store import SettingsStore, write_credentials
from .token_cache import find_cached_token

LOGIN_REQUIRED_TITLE = "AWS SSO Login Required"
_RESPONSE_POLL_SECONDS = 0.2
_STOP = object()


def refresh_profile(
    profile: SSOProfile,
    config: ToolConfig,
    sso_factory: Callable = aws.sso_client,
    now: datetime | None = None,
) -> RefreshResult:
    """Refresh a profile's static credentials from its cached SSO token.

    No AWS call is made when the token is missing or expired; the result then
    has ``needs_login`` set.

    Args:
        profile: Profile to refresh.
        config: Tool configuration.
        sso_factory: Builds an ``sso`` client for a region.
        now: Current time (defaults to the wall clock).

    Returns:
        RefreshResult for the profile.
    """
    debug = config.debug_print
    token = find_cached_token(config.sso_cache_dir, profile, debug)
    if token is None or token.is_expired(now or utc_now()):
        return RefreshResult(profile.name, False, error="Token expired", needs_login=True)

    try:
        credentials = aws.get_role_credentials(sso_factory(profile.sso_region), profile, token.access_token)
    except CredentialExchangeError as e:
        if aws.error_code(e.__cause__) in aws.SESSION_EXPIRED_CODES:
            # Server rejected a token that looked valid locally
            return RefreshResult(profile.name, False, error="Token expired or invalid", needs_login=True)
        return RefreshResult(profile.name, False, error=f"Failed to retrieve credentials: {e}")

    try:
        write_credentials(config.credentials_file, profile.name, credentials, debug)
    except CredentialsFileError as e:
        return RefreshResult(profile.name, False, error=str(e))

    return RefreshResult(profile.name, True)


class LoginChannel:
    """Single-slot request/response channel to a login worker thread.

    ``request_login`` posts "login required for X" and blocks until the worker
    answers with "login attempt finished". Only one request may be outstanding.

    Args:
        handler: Performs the login (normally ``SSOLogin.login``).
    """

    def __init__(self, handler: Callable[[SSOProfile], LoginOutcome]):
        self._handler = handler
        self._requests: queue.Queue = queue.Queue(maxsize=1)
        self._responses: queue.Queue = queue.Queue(maxsize=1)
        self._slot = threading.Lock()
        self._worker: threading.Thread | None = None

    def request_login(self, profile: SSOProfile) -> LoginOutcome:
        """Ask the worker to log ``profile`` in and wait for the outcome.

        Raises:
            LoginInProgressError: If another login request is still outstanding.
        """
        if not self._slot.acquire(blocking=False):
            raise LoginInProgressError(profile.name)
        try:
            self._ensure_worker()
            self._requests.put(profile)
            while True:
                try:
                    return self._responses.get(timeout=_RESPONSE_POLL_SECONDS)
                except queue.Empty:
                    continue
        finally:
            self._slot.release()

    def close(self) -> None:
        """Stop the worker thread once it finishes any current login."""
        if self._worker is not None and self._worker.is_alive():
            self._requests.put(_STOP)
            self._worker.join()
        self._worker = None

    def _ensure_worker(self) -> None:
        if self._worker is None or not self._worker.is_alive():
            self._worker = threading.Thread(target=self._serve, name="sso-login", daemon=True)
            self._worker.start()

    def _serve(self) -> None:
        while True:
            profile = self._requests.get()
            if profile is _STOP:
                return
            try:
                outcome = self._handler(profile)
            except Exception as e:
                outcome = LoginOutcome(profile.name, FlowState.FAILED, False, str(e))
            self._responses.put(outcome)


@dataclass(frozen=True)
class DaemonCycle:
    """Report for one completed daemon cycle."""

    number: int
    summary: RefreshSummary | None
    finished_at: datetime
    next_run: datetime
    error: str | None = None


def _noop(*args) -> None:
    pass


class RefreshOrchestrator:
    """Refreshes a list of profiles in order, logging in where needed.

    Args:
        config: Tool configuration.
        settings_store: Settings persistence (notifications flag, last refresh).
        login: Performs an interactive login and returns its outcome.
        cancel: Cooperative cancellation flag, checked between profiles.
        refresher: Refreshes one profile from its cached token.
        notifier: Sends a desktop notification.
        clock: Returns the current aware datetime.
        on_result: Called with each profile's result as soon as it is known.
        on_login_required: Called just before a profile's login starts.
    """

    def __init__(
        self,
        config: ToolConfig,
        settings_store: SettingsStore,
        login: Callable[[SSOProfile], LoginOutcome],
        cancel: threading.Event | None = None,
        refresher: Callable[[SSOProfile, ToolConfig], RefreshResult] = refresh_profile,
        notifier: Callable = send_notification,
        clock: Callable[[], datetime] = utc_now,
        on_result: Callable[[RefreshResult], None] = _noop,
        on_login_required: Callable[[SSOProfile], None] = _noop,
    ):
        self.config = config
        self.settings_store = settings_store
        self.login = login
        self.cancel = cancel or threading.Event()
        self.refresher = refresher
        self.notifier = notifier
        self.clock = clock
        self.on_result = on_result
        self.on_login_required = on_login_required
        self._debug = config.debug_print

    def run_once(self, profiles: list[SSOProfile], notifications: bool | None = None) -> RefreshSummary:
        """Refresh every profile once, in order.

        A failing profile is recorded and the next one is attempted; this
        method does not raise for per-profile failures.

        Args:
            profiles: Profiles to refresh.
            notifications: Override the notifications setting.

        Returns:
            RefreshSummary with one result per attempted profile.
        """
        if notifications is None:
            notifications = self.settings_store.load().notifications

        summary = RefreshSummary()
        for profile in profiles:
            if self.cancel.is_set():
                summary.cancelled = True
                break

            result = self._refresh_one(profile, notifications)
            summary.results.append(result)
            self.on_result(result)

        if summary.results:
            self._record_last_refresh()
        return summary

    def _refresh_one(self, profile: SSOProfile, notifications: bool) -> RefreshResult:
        try:
            result = self.refresher(profile, self.config)
        except Exception as e:
            return RefreshResult(profile.name, False, error=str(e))

        if not result.needs_login:
            return result

        if notifications:
            sent = self.notifier(LOGIN_REQUIRED_TITLE, f"Token expired for profile '{profile.name}'")
            if not sent:
                self._debug(f"Notification not shown: {sent.error}")

        self.on_login_required(profile)
        try:
            outcome = self.login(profile)
        except Exception as e:
            return RefreshResult(profile.name, False, error=str(e))

        return RefreshResult(profile.name, outcome.success, error=outcome.error)

    def _record_last_refresh(self) -> None:
        try:
            self.settings_store.update(last_refresh=format_timestamp(self.clock()))
        except OSError as e:
            self._debug(f"Could not record last refresh time: {e}")

    def run_daemon(
        self,
        profiles: list[SSOProfile],
        interval_minutes: int,
        on_cycle: Callable[[DaemonCycle], None] = _noop,
        max_cycles: int | None = None,
    ) -> int:
        """Refresh ``profiles`` every ``interval_minutes`` until cancelled.

        Cycles start on a fixed schedule measured from the start of the
        previous cycle. An unexpected error in one cycle is reported through
        ``on_cycle`` and does not stop the next one.

        Returns:
            Number of cycles run.
        """
        interval = timedelta(minutes=interval_minutes)
        cycles = 0

        while not self.cancel.is_set():
            started = self.clock()
            summary = None
            error = None
            try:
                summary = self.run_once(profiles)
            except Exception as e:
                error = str(e)
                self._debug(f"Refresh cycle failed: {e}")

            cycles += 1
            next_run = started + interval
            on_cycle(DaemonCycle(cycles, summary, self.clock(), next_run, error))

            if max_cycles is not None and cycles >= max_cycles:
                break

            remaining = (next_run - self.clock()).total_seconds()
            if remaining > 0 and self.cancel.wait(remaining):
                break

        return cycles
