# ABOUTME: OAuth device authorization flow against AWS SSO OIDC
# ABOUTME: A pure transition function plus a driver that performs the AWS calls and waits

"""
Device authorization flow.

The flow is modelled as a state machine::

    IDLE -> REGISTERING -> AWAITING_AUTHORIZATION -> POLLING
         -> SUCCEEDED | EXPIRED | DENIED | FAILED | CANCELLED

:func:`step` maps ``(context, event)`` to ``(next context, effects)`` and does
no I/O. :class:`DeviceAuthorizationFlow` executes the effects (AWS calls,
prompting the user, sleeping) and feeds the results back as events, so the
backoff and expiry rules can be tested with a virtual clock.
"""

import threading
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from .aws import (
    ACCESS_DENIED,
    AUTHORIZATION_PENDING,
    CLIENT_NAME,
    DEVICE_CODE_GRANT,
    EXPIRED_TOKEN,
    SLOW_DOWN,
    error_code,
    error_message,
)
from .models import CachedToken, SSOProfile, utc_now

DEFAULT_DEVICE_EXPIRY_SECONDS = 600
DEFAULT_POLL_INTERVAL_SECONDS = 5
DEFAULT_TOKEN_EXPIRY_SECONDS = 28800  # 8 hours
SLOW_DOWN_INCREMENT_SECONDS = 5


class FlowState(str, Enum):
    IDLE = "idle"
    REGISTERING = "registering"
    AWAITING_AUTHORIZATION = "awaiting_authorization"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    EXPIRED = "expired"
    DENIED = "denied"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset(
    {FlowState.SUCCEEDED, FlowState.EXPIRED, FlowState.DENIED, FlowState.FAILED, FlowState.CANCELLED}
)


@dataclass(frozen=True)
class DeviceAuthSession:
    """One in-flight device authorization. Never persisted."""

    client_id: str
    client_secret: str
    device_code: str
    user_code: str
    verification_uri: str
    expires_at: datetime
    interval: int
    verification_uri_complete: str | None = None


@dataclass(frozen=True)
class FlowContext:
    """State of one login attempt."""

    state: FlowState = FlowState.IDLE
    start_url: str | None = None
    sso_region: str | None = None
    client_id: str | None = None
    client_secret: str | None = None
    session: DeviceAuthSession | None = None
    token: CachedToken | None = None
    error: str | None = None
    attempts: int = 0


# Events --------------------------------------------------------------------


@dataclass(frozen=True)
class Start:
    pass


@dataclass(frozen=True)
class ClientRegistered:
    client_id: str | None
    client_secret: str | None


@dataclass(frozen=True)
class DeviceAuthorizationStarted:
    response: dict[str, Any]
    now: datetime


@dataclass(frozen=True)
class TokenIssued:
    access_token: str
    expires_in: int | None
    now: datetime


@dataclass(frozen=True)
class AuthorizationPending:
    pass


@dataclass(frozen=True)
class SlowDown:
    pass


@dataclass(frozen=True)
class TokenExpired:
    pass


@dataclass(frozen=True)
class AccessDenied:
    message: str | None = None


@dataclass(frozen=True)
class ProviderError:
    message: str


@dataclass(frozen=True)
class Wake:
    """The poll interval has elapsed."""

    now: datetime


@dataclass(frozen=True)
class Cancelled:
    pass


# Effects -------------------------------------------------------------------


@dataclass(frozen=True)
class RegisterClient:
    pass


@dataclass(frozen=True)
class StartDeviceAuthorization:
    pass


@dataclass(frozen=True)
class PromptUser:
    session: DeviceAuthSession


@dataclass(frozen=True)
class CreateToken:
    pass


@dataclass(frozen=True)
class Sleep:
    seconds: int


def _fail(ctx: FlowContext, message: str) -> tuple[FlowContext, list]:
    return replace(ctx, state=FlowState.FAILED, error=message), []


def step(ctx: FlowContext, event) -> tuple[FlowContext, list]:
    """Advance the flow by one event.

    Args:
        ctx: Current context.
        event: Event produced by the previous effect.

    Returns:
        Tuple of (new context, effects to perform in order).

    Raises:
        ValueError: If the event makes no sense in the current state.
    """
    state = ctx.state

    # Terminal states absorb everything
    if state.is_terminal:
        return ctx, []

    if isinstance(event, Cancelled):
        return replace(ctx, state=FlowState.CANCELLED, error="Login cancelled"), []

    if isinstance(event, ProviderError) and state is not FlowState.IDLE:
        return _fail(ctx, event.message)

    if state is FlowState.IDLE and isinstance(event, Start):
        return replace(ctx, state=FlowState.REGISTERING), [RegisterClient()]

    if state is FlowState.REGISTERING and isinstance(event, ClientRegistered):
        if not event.client_id or not event.client_secret:
            return _fail(ctx, "Client registration did not return client credentials")
        registered = replace(
            ctx,
            state=FlowState.AWAITING_AUTHORIZATION,
            client_id=event.client_id,
            client_secret=event.client_secret,
        )
        return registered, [StartDeviceAuthorization()]

    if state is FlowState.AWAITING_AUTHORIZATION and isinstance(event, DeviceAuthorizationStarted):
        response = event.response
        verification_uri = response.get("verificationUri")
        device_code = response.get("deviceCode")
        user_code = response.get("userCode")
        if not verification_uri or not device_code or not user_code:
            return _fail(ctx, "Device authorization response was incomplete")

        expires_in = response.get("expiresIn") or DEFAULT_DEVICE_EXPIRY_SECONDS
        session = DeviceAuthSession(
            client_id=ctx.client_id,
            client_secret=ctx.client_secret,
            device_code=device_code,
            user_code=user_code,
            verification_uri=verification_uri,
            verification_uri_complete=response.get("verificationUriComplete"),
            expires_at=event.now + timedelta(seconds=expires_in),
            interval=response.get("interval") or DEFAULT_POLL_INTERVAL_SECONDS,
        )
        polling = replace(ctx, state=FlowState.POLLING, session=session)
        return polling, [PromptUser(session), CreateToken()]

    if state is FlowState.POLLING:
        session = ctx.session

        if isinstance(event, TokenIssued):
            expires_in = event.expires_in or DEFAULT_TOKEN_EXPIRY_SECONDS
            token = CachedToken(
                access_token=event.access_token,
                expires_at=event.now + timedelta(seconds=expires_in),
                start_url=ctx.start_url,
                region=ctx.sso_region,
            )
            return replace(ctx, state=FlowState.SUCCEEDED, token=token, attempts=ctx.attempts + 1), []

        if isinstance(event, AuthorizationPending):
            return replace(ctx, attempts=ctx.attempts + 1), [Sleep(session.interval)]

        if isinstance(event, SlowDown):
            slower = replace(session, interval=session.interval + SLOW_DOWN_INCREMENT_SECONDS)
            return replace(ctx, session=slower, attempts=ctx.attempts + 1), [Sleep(slower.interval)]

        if isinstance(event, TokenExpired):
            return replace(ctx, state=FlowState.EXPIRED, error="Device authorization expired"), []

        if isinstance(event, AccessDenied):
            return replace(ctx, state=FlowState.DENIED, error=event.message or "Access denied"), []

        if isinstance(event, Wake):
            if event.now >= session.expires_at:
                return (
                    replace(ctx, state=FlowState.EXPIRED, error="Device authorization expired before login completed"),
                    [],
                )
            return ctx, [CreateToken()]

    raise ValueError(f"Unexpected event {type(event).__name__} in state {state.value}")


def classify_token_error(error: Exception):
    """Map a create_token failure to a flow event."""
    code = error_code(error)
    if code == AUTHORIZATION_PENDING:
        return AuthorizationPending()
    if code == SLOW_DOWN:
        return SlowDown()
    if code == EXPIRED_TOKEN:
        return TokenExpired()
    if code == ACCESS_DENIED:
        return AccessDenied(error_message(error))
    return ProviderError(error_message(error))


def _noop(message: str) -> None:
    pass


class DeviceAuthorizationFlow:
    """Drives :func:`step` against a boto3 ``sso-oidc`` client.

    Args:
        oidc: boto3 ``sso-oidc`` client for the profile's SSO region.
        prompt: Called once with the session so the user can be shown the
            verification URL and code.
        clock: Returns the current aware datetime.
        sleep: Waits for the given number of seconds and returns True if the
            wait was interrupted by cancellation.
        cancel: Event that requests cancellation; used by the default sleeper.
        debug: Debug printer.
    """

    def __init__(
        self,
        oidc,
        prompt: Callable[[DeviceAuthSession], None] | None = None,
        clock: Callable[[], datetime] = utc_now,
        sleep: Callable[[float], bool] | None = None,
        cancel: threading.Event | None = None,
        debug: Callable[[str], None] = _noop,
        client_name: str = CLIENT_NAME,
    ):
        self.oidc = oidc
        self.prompt = prompt
        self.clock = clock
        self.cancel = cancel or threading.Event()
        self.sleep = sleep or self.cancel.wait
        self.debug = debug
        self.client_name = client_name

    def run(self, profile: SSOProfile) -> FlowContext:
        """Run the flow to a terminal state for one profile.

        Returns:
            The terminal FlowContext; ``token`` is set when it SUCCEEDED.
        """
        ctx = FlowContext(start_url=profile.sso_start_url, sso_region=profile.sso_region)
        if self.cancel.is_set():
            ctx, _ = step(ctx, Cancelled())
            return ctx

        ctx, effects = step(ctx, Start())
        pending = deque(effects)

        while pending and not ctx.state.is_terminal:
            effect = pending.popleft()
            event = self._perform(effect, ctx, profile)
            if event is None:
                continue

            previous = ctx.state
            ctx, effects = step(ctx, event)
            if ctx.state is not previous:
                self.debug(f"Login for '{profile.name}': {previous.value} -> {ctx.state.value}")
            pending.extend(effects)

        self.debug(f"Login for '{profile.name}' ended {ctx.state.value} after {ctx.attempts} token request(s)")
        return ctx

    def _perform(self, effect, ctx: FlowContext, profile: SSOProfile):
        if isinstance(effect, RegisterClient):
            try:
                response = self.oidc.register_client(clientName=self.client_name, clientType="public")
            except (ClientError, BotoCoreError) as e:
                return ProviderError(f"Client registration failed: {error_message(e)}")
            return ClientRegistered(response.get("clientId"), response.get("clientSecret"))

        if isinstance(effect, StartDeviceAuthorization):
            try:
                response = self.oidc.start_device_authorization(
                    clientId=ctx.client_id,
                    clientSecret=ctx.client_secret,
                    startUrl=profile.sso_start_url,
                )
            except (ClientError, BotoCoreError) as e:
                return ProviderError(f"Device authorization failed: {error_message(e)}")
            return DeviceAuthorizationStarted(response, self.clock())

        if isinstance(effect, PromptUser):
            if self.prompt:
                self.prompt(effect.session)
            return None

        if isinstance(effect, CreateToken):
            session = ctx.session
            try:
                response = self.oidc.create_token(
                    clientId=session.client_id,
                    clientSecret=session.client_secret,
                    grantType=DEVICE_CODE_GRANT,
                    deviceCode=session.device_code,
                )
            except (ClientError, BotoCoreError) as e:
                event = classify_token_error(e)
                self.debug(f"Token poll for '{profile.name}': {type(event).__name__}")
                return event

            access_token = response.get("accessToken")
            if not access_token:
                return ProviderError("Token response did not include an access token")
            return TokenIssued(access_token, response.get("expiresIn"), self.clock())

        if isinstance(effect, Sleep):
            if self.sleep(effect.seconds):
                return Cancelled()
            return Wake(self.clock())

        raise ValueError(f"Unknown effect: {effect!r}")
