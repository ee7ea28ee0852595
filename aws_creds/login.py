# ABOUTME: Interactive SSO login for one profile and the side effects of a successful login
# ABOUTME: Runs the device flow, caches the token and writes role credentials to ~/.aws/credentials

"""SSO login for a single profile."""

import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from . import aws
from .config import ToolConfig
from .device_flow import DeviceAuthorizationFlow, DeviceAuthSession, FlowState
from .errors import CredentialExchangeError, CredentialsFileError, LoginInProgressError
from .models import SSOProfile, utc_now
from .store import write_credentials
from .token_cache import save_token

EXCHANGE_FAILED_MESSAGE = "Obtained SSO token but could not fetch role credentials"

_STATE_MESSAGES = {
    FlowState.EXPIRED: "Device authorization expired before login completed",
    FlowState.DENIED: "Access denied",
    FlowState.CANCELLED: "Login cancelled",
}


@dataclass(frozen=True)
class LoginOutcome:
    """Result of one login attempt."""

    name: str
    state: FlowState
    success: bool
    error: str | None = None


class ActiveSessions:
    """Tracks which profiles currently have a device authorization open."""

    def __init__(self):
        self._lock = threading.Lock()
        self._active: set[str] = set()

    def acquire(self, name: str) -> None:
        with self._lock:
            if name in self._active:
                raise LoginInProgressError(name)
            self._active.add(name)

    def release(self, name: str) -> None:
        with self._lock:
            self._active.discard(name)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._active


class SSOLogin:
    """Logs a profile in through the device flow and persists the results.

    Args:
        config: Tool configuration (file locations).
        prompt: Shows the verification URL and user code to the user.
        cancel: Cooperative cancellation flag.
        oidc_factory: Builds an ``sso-oidc`` client for a region.
        sso_factory: Builds an ``sso`` client for a region.
        clock: Returns the current aware datetime.
        sleep: Interruptible sleeper, see DeviceAuthorizationFlow.
        sessions: Registry of open device authorizations.
    """

    def __init__(
        self,
        config: ToolConfig,
        prompt: Callable[[SSOProfile, DeviceAuthSession], None] | None = None,
        cancel: threading.Event | None = None,
        oidc_factory: Callable = aws.oidc_client,
        sso_factory: Callable = aws.sso_client,
        clock: Callable[[], datetime] = utc_now,
        sleep: Callable[[float], bool] | None = None,
        sessions: ActiveSessions | None = None,
    ):
        self.config = config
        self.prompt = prompt
        self.cancel = cancel or threading.Event()
        self.oidc_factory = oidc_factory
        self.sso_factory = sso_factory
        self.clock = clock
        self.sleep = sleep
        self.sessions = sessions or ActiveSessions()
        self._debug = config.debug_print

    def login(self, profile: SSOProfile) -> LoginOutcome:
        """Run a full login for ``profile``.

        Raises:
            LoginInProgressError: If a login for this profile is already open.
        """
        self.sessions.acquire(profile.name)
        try:
            return self._login(profile)
        finally:
            self.sessions.release(profile.name)

    def _login(self, profile: SSOProfile) -> LoginOutcome:
        def _prompt(session: DeviceAuthSession) -> None:
            if self.prompt:
                self.prompt(profile, session)

        flow = DeviceAuthorizationFlow(
            self.oidc_factory(profile.sso_region),
            prompt=_prompt,
            clock=self.clock,
            sleep=self.sleep,
            cancel=self.cancel,
            debug=self._debug,
        )
        ctx = flow.run(profile)

        if ctx.state is not FlowState.SUCCEEDED:
            message = ctx.error if ctx.state is FlowState.FAILED else _STATE_MESSAGES.get(ctx.state, ctx.error)
            return LoginOutcome(profile.name, ctx.state, False, message or "Login failed")

        # The credentials file stays authoritative, so a cache write failure is only reported
        cached = save_token(self.config.sso_cache_dir, profile, ctx.token, self._debug)
        if not cached:
            self._debug(f"Continuing without cached token for '{profile.name}': {cached.error}")

        try:
            credentials = aws.get_role_credentials(
                self.sso_factory(profile.sso_region), profile, ctx.token.access_token
            )
        except CredentialExchangeError as e:
            return LoginOutcome(profile.name, ctx.state, False, f"{EXCHANGE_FAILED_MESSAGE}: {e}")

        try:
            write_credentials(self.config.credentials_file, profile.name, credentials, self._debug)
        except CredentialsFileError as e:
            return LoginOutcome(profile.name, ctx.state, False, str(e))

        return LoginOutcome(profile.name, ctx.state, True)
