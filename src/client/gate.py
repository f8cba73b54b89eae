"""
Registration gate - Two-phase client state container.

The gate holds a single immutable GateState. Every change replaces the
state and notifies subscribers, so a UI can render isLoading, the
visible fields and inline errors straight from the latest state.

Phase transitions (forward-only):

    AWAITING_TOKEN --(token verified)--> AWAITING_REGISTRATION
    AWAITING_REGISTRATION --(account created)--> REGISTERED

Validation runs before any network call; invalid input never reaches
the RegistrationApi.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Protocol
from urllib.parse import parse_qs, urlsplit

from src.client.exceptions import GateBusy, ServiceUnavailable
from src.client.forms import FieldErrors, Phase, RegisterForm, TokenForm, validate
from src.domain.exceptions import InvalidAccountDetails, InvalidToken, UsernameTaken

logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = "Invalid invitation token"
CONSUMED_TOKEN_MESSAGE = "Invitation token is no longer valid"
USERNAME_TAKEN_MESSAGE = "Username already taken"
INVALID_DETAILS_MESSAGE = "Please check the username and password"
RETRY_MESSAGE = "Could not reach the server, please try again"


class RegistrationApi(Protocol):
    """Remote calls the gate depends on."""

    def verify_token(self, token: str) -> bool:
        """Return True iff the token exists on the server."""
        ...

    def create_account(self, username: str, password: str, token: str) -> None:
        """
        Create an account.

        Raises:
            InvalidToken: token unknown or already used
            UsernameTaken: username already registered
            ServiceUnavailable: transport failure or unexpected answer
        """
        ...


@dataclass(frozen=True)
class GateState:
    """Snapshot of the registration form."""

    phase: Phase = Phase.AWAITING_TOKEN
    token: str = ""
    is_loading: bool = False
    message: str | None = None
    field_errors: FieldErrors = field(default_factory=dict)

    @property
    def shows_registration_fields(self) -> bool:
        return self.phase is Phase.AWAITING_REGISTRATION


Listener = Callable[[GateState], None]


def token_from_url(url: str | None) -> str | None:
    """Extract the `token` query parameter from an invite link."""
    if not url:
        return None
    values = parse_qs(urlsplit(url).query).get("token")
    return values[0] if values else None


class RegistrationGate:
    """
    Drives the token-then-registration form.

    Args:
        api: RegistrationApi implementation (usually HttpRegistrationApi)
        invite_url: Page URL at start-up; its `token` parameter pre-fills
            the token field once
    """

    def __init__(self, api: RegistrationApi, invite_url: str | None = None) -> None:
        self._api = api
        self._listeners: list[Listener] = []
        self._state = GateState(token=token_from_url(invite_url) or "")

    @property
    def state(self) -> GateState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for state changes. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_token(self, text: str) -> GateState:
        """Update the token field as the user types."""
        return self._publish(token=text)

    def submit(self, data: Mapping[str, str] | None = None) -> GateState:
        """
        Submit the form for the current phase.

        The current token text is used unless `data` overrides it.

        Raises:
            GateBusy: If a previous submission is still in flight
        """
        if self._state.is_loading:
            raise GateBusy("Submission already in progress")

        values = {"token": self._state.token, **(data or {})}
        result = validate(self._state.phase, values)
        if not result.ok:
            return self._publish(field_errors=result.errors, message=None)

        form = result.form
        self._publish(token=form.token, field_errors={}, message=None, is_loading=True)
        try:
            if isinstance(form, RegisterForm):
                self._create_account(form)
            else:
                self._verify(form)
        except Exception:
            self._publish(is_loading=False)
            raise
        return self._state

    def _verify(self, form: TokenForm) -> None:
        try:
            valid = self._api.verify_token(form.token)
        except ServiceUnavailable as e:
            logger.warning("Token verification unavailable: %s", e)
            self._publish(is_loading=False, message=RETRY_MESSAGE)
            return

        if valid:
            self._publish(is_loading=False, phase=Phase.AWAITING_REGISTRATION)
        else:
            self._publish(is_loading=False, message=INVALID_TOKEN_MESSAGE)

    def _create_account(self, form: RegisterForm) -> None:
        try:
            self._api.create_account(form.username, form.password, form.token)
        except UsernameTaken:
            self._publish(is_loading=False, field_errors={"username": USERNAME_TAKEN_MESSAGE})
        except InvalidToken:
            self._publish(is_loading=False, message=CONSUMED_TOKEN_MESSAGE)
        except InvalidAccountDetails:
            self._publish(is_loading=False, message=INVALID_DETAILS_MESSAGE)
        except ServiceUnavailable as e:
            logger.warning("Account creation unavailable: %s", e)
            self._publish(is_loading=False, message=RETRY_MESSAGE)
        else:
            self._publish(is_loading=False, phase=Phase.REGISTERED)

    def _publish(self, **changes: object) -> GateState:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state
