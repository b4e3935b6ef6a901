"""State machine turning an "add account" intent into a linked account.

IDLE → AWAITING_AUTHORIZATION → AWAITING_CALLBACK → COMPLETING → IDLE on
success; a rejected submission goes back to AWAITING_CALLBACK with the typed
input kept. Cancel returns to IDLE from any waiting state and never talks to
the gateway.
"""

import webbrowser
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Any
from urllib.parse import urlsplit

from structlog import get_logger

from account_console.exceptions import (
    InvalidFlowStateError,
    MalformedResponseError,
    ValidationError,
)
from account_console.gateway.base import AccountGateway
from account_console.models import AccountType


logger = get_logger(__name__)

BrowserOpener = Callable[[str], Any]
LinkedCallback = Callable[[], Awaitable[object]]


class LinkState(StrEnum):
    """Linking flow states."""

    IDLE = "idle"
    AWAITING_AUTHORIZATION = "awaiting_authorization"
    AWAITING_CALLBACK = "awaiting_callback"
    COMPLETING = "completing"


class SubmissionState(StrEnum):
    """Coarse view of the flow for the input form."""

    IDLE = "idle"
    AWAITING_INPUT = "awaiting_input"
    SUBMITTING = "submitting"


_WAITING = {LinkState.AWAITING_AUTHORIZATION, LinkState.AWAITING_CALLBACK}


def open_in_new_window(url: str) -> bool:
    """Default browser opener: the authorize page gets its own window."""
    return webbrowser.open(url, new=1)


def redact_url(url: str) -> str:
    """Keep scheme and host of a URL, hiding path and query."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return "[invalid url]"
    if not parts.scheme or not parts.netloc:
        return "[redacted]"
    return f"{parts.scheme}://{parts.netloc}/[redacted]"


class OAuthLinkingFlow:
    """One short-lived OAuth linking session at a time."""

    def __init__(
        self,
        gateway: AccountGateway,
        on_linked: LinkedCallback | None = None,
        browser_opener: BrowserOpener = open_in_new_window,
    ) -> None:
        """Initialize the flow.

        Args:
            gateway: Remote gateway issuing authorize URLs and accepting callbacks
            on_linked: Awaited once after each successful submission
            browser_opener: Receives the authorize URL when the operator opens it
        """
        self.gateway = gateway
        self.on_linked = on_linked
        self.browser_opener = browser_opener
        self.state = LinkState.IDLE
        self.account_type: AccountType | None = None
        self.authorize_url = ""
        self.callback_input = ""
        # Bumped on every start/cancel so late authorize responses are ignored
        self._generation = 0
        self._starting = False

    @property
    def submission_state(self) -> SubmissionState:
        if self.state == LinkState.COMPLETING:
            return SubmissionState.SUBMITTING
        if self.state in _WAITING:
            return SubmissionState.AWAITING_INPUT
        return SubmissionState.IDLE

    @property
    def is_active(self) -> bool:
        return self.state != LinkState.IDLE

    @property
    def is_starting(self) -> bool:
        return self._starting

    @property
    def can_submit(self) -> bool:
        return self.state == LinkState.AWAITING_CALLBACK and bool(
            self.callback_input.strip()
        )

    def _reset(self) -> None:
        self.state = LinkState.IDLE
        self.account_type = None
        self.authorize_url = ""
        self.callback_input = ""

    async def start(self, account_type: AccountType | int) -> str | None:
        """Request an authorize URL and open a linking session.

        Returns:
            The authorize URL, or None if the session was cancelled meanwhile

        Raises:
            InvalidFlowStateError: If a session is already open
            GatewayError: If the gateway fails (flow stays IDLE)
            MalformedResponseError: If the response carries no URL
        """
        if self.state != LinkState.IDLE:
            raise InvalidFlowStateError("start linking", self.state)
        if self._starting:
            raise InvalidFlowStateError("start linking", "starting")

        account_type = AccountType(account_type)
        self._generation += 1
        generation = self._generation
        self._starting = True
        logger.info("oauth_flow_starting", account_type=account_type.name)
        try:
            response = await self.gateway.get_authorization_url(account_type)
        finally:
            if generation == self._generation:
                self._starting = False

        if generation != self._generation:
            logger.info("oauth_flow_start_ignored", reason="cancelled")
            return None

        auth_url = response.get("auth_url") if isinstance(response, dict) else None
        if not isinstance(auth_url, str) or not auth_url.strip():
            raise MalformedResponseError(
                "Authorization response did not include a URL",
                details={"operation": "get_authorization_url"},
            )

        self.account_type = account_type
        self.authorize_url = auth_url
        self.callback_input = ""
        self.state = LinkState.AWAITING_AUTHORIZATION
        logger.info(
            "oauth_flow_started",
            account_type=account_type.name,
            authorize_host=redact_url(auth_url),
        )
        return auth_url

    def open_authorization_target(self) -> str:
        """Hand the authorize URL to the browser opener. Repeatable.

        Raises:
            InvalidFlowStateError: If no authorize URL is held
        """
        if self.state not in _WAITING or not self.authorize_url:
            raise InvalidFlowStateError("open the authorization page", self.state)
        self.browser_opener(self.authorize_url)
        logger.debug("oauth_authorization_page_opened")
        return self.authorize_url

    def set_callback_input(self, text: str) -> None:
        """Record the operator's typed callback URL.

        Non-empty text moves the flow to AWAITING_CALLBACK; clearing it moves
        back to AWAITING_AUTHORIZATION.

        Raises:
            InvalidFlowStateError: When no session is open or a submit is in flight
        """
        if self.state not in _WAITING:
            raise InvalidFlowStateError("edit the callback URL", self.state)
        self.callback_input = text
        self.state = (
            LinkState.AWAITING_CALLBACK
            if text.strip()
            else LinkState.AWAITING_AUTHORIZATION
        )

    async def submit(self, callback_text: str | None = None) -> None:
        """Send the callback URL to the gateway to finish linking.

        Args:
            callback_text: New input; when omitted the current input is used

        Raises:
            ValidationError: If the input is empty (no remote call made)
            InvalidFlowStateError: When no session is open or a submit is in flight
            GatewayError: If the gateway rejects the callback (input kept)
        """
        text = self.callback_input if callback_text is None else callback_text
        if not text.strip():
            raise ValidationError("Please enter the callback URL")

        if callback_text is not None:
            self.set_callback_input(callback_text)
        elif self.state not in _WAITING:
            raise InvalidFlowStateError("submit", self.state)
        callback_url = self.callback_input.strip()

        self.state = LinkState.COMPLETING
        logger.info("oauth_callback_submitting", callback=redact_url(callback_url))
        try:
            await self.gateway.submit_authorization_callback(callback_url)
        except Exception as e:
            self.state = LinkState.AWAITING_CALLBACK
            logger.warning("oauth_callback_rejected", error=str(e))
            raise

        account_type = self.account_type
        self._reset()
        logger.info(
            "oauth_flow_completed",
            account_type=account_type.name if account_type is not None else None,
        )
        if self.on_linked is not None:
            try:
                await self.on_linked()
            except Exception as e:
                logger.error("oauth_post_link_refresh_failed", error=str(e))

    def cancel(self) -> None:
        """Abandon the session locally. No-op when nothing is open.

        Raises:
            InvalidFlowStateError: While a submission is in flight
        """
        if self.state == LinkState.COMPLETING:
            raise InvalidFlowStateError("cancel", self.state)
        if self.state == LinkState.IDLE and not self._starting:
            return
        self._generation += 1
        self._starting = False
        self._reset()
        logger.info("oauth_flow_cancelled")
