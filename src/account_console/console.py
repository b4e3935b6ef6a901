"""One operator session: store, linking flow and quota panel wired together.

Every action catches failures at this boundary, reports them through the
notifier and returns ``True`` on success or ``False`` on failure.
"""

from account_console.display import model_display_name
from account_console.events import AccountAddedSignal
from account_console.exceptions import ErrorKind, ValidationError, describe_error
from account_console.gateway.base import AccountGateway
from account_console.models import Account, AccountType, Status
from account_console.notifications import (
    LogNotifier,
    Notification,
    Notifier,
    Placement,
    Severity,
)
from account_console.oauth_flow import (
    BrowserOpener,
    LinkState,
    OAuthLinkingFlow,
    open_in_new_window,
)
from account_console.quota_panel import QuotaPanelController
from account_console.store import AccountStore
from account_console.toggles import StatusToggleCoordinator


_WARNING_KINDS = {ErrorKind.VALIDATION, ErrorKind.CONFLICT, ErrorKind.INVALID_STATE}


def _enabled_word(status: Status) -> str:
    return "enabled" if status == Status.ENABLED else "disabled"


class AccountConsole:
    """Operator console session over one gateway."""

    def __init__(
        self,
        gateway: AccountGateway,
        notifier: Notifier | None = None,
        *,
        signal: AccountAddedSignal | None = None,
        placement: Placement = Placement.TOP_RIGHT,
        browser_opener: BrowserOpener = open_in_new_window,
    ) -> None:
        self.gateway = gateway
        self.notifier = notifier or LogNotifier()
        self.placement = placement
        self.coordinator = StatusToggleCoordinator()
        self.store = AccountStore(gateway, self.coordinator)
        self.quota_panel = QuotaPanelController(gateway, self.coordinator)
        self.linking = OAuthLinkingFlow(
            gateway,
            on_linked=self._on_account_linked,
            browser_opener=browser_opener,
        )
        self.signal = signal or AccountAddedSignal()
        self.signal.subscribe(self.refresh)

    def dispose(self) -> None:
        """Detach from the account-added signal and drop session state."""
        self.signal.unsubscribe(self.refresh)
        if self.linking.state != LinkState.COMPLETING:
            self.linking.cancel()
        self.quota_panel.close()

    # ------------------------------------------------------------------
    # Notification helpers
    # ------------------------------------------------------------------

    def _notify(self, title: str, message: str, severity: Severity) -> None:
        self.notifier.show(
            Notification(
                title=title,
                message=message,
                severity=severity,
                placement=self.placement,
            )
        )

    def _fail(
        self,
        title: str,
        error: Exception,
        fallback: str,
        *,
        subject: str | None = None,
    ) -> bool:
        kind = getattr(error, "kind", None)
        severity = Severity.WARNING if kind in _WARNING_KINDS else Severity.ERROR
        message = describe_error(error, fallback)
        if subject:
            message = f"{subject}: {message}"
        self._notify(title, message, severity)
        return False

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    @property
    def accounts(self) -> list[Account]:
        return self.store.accounts

    async def refresh(self) -> bool:
        """Reload the account list from the gateway."""
        try:
            await self.store.refresh()
        except Exception as e:
            return self._fail("Load failed", e, "Failed to load the account list")
        return True

    async def toggle_account(self, cookie_id: str) -> bool:
        try:
            account = await self.store.toggle_account_status(cookie_id)
        except Exception as e:
            return self._fail("Update failed", e, "Failed to update status")
        self._notify(
            "Status updated",
            f"Account {_enabled_word(account.status)}",
            Severity.SUCCESS,
        )
        return True

    async def delete_account(self, cookie_id: str) -> bool:
        try:
            await self.store.remove(cookie_id)
        except Exception as e:
            return self._fail("Delete failed", e, "Failed to delete the account")
        if self.quota_panel.account and self.quota_panel.account.cookie_id == cookie_id:
            self.quota_panel.close()
        self._notify("Deleted", "Account deleted", Severity.SUCCESS)
        return True

    # ------------------------------------------------------------------
    # OAuth linking
    # ------------------------------------------------------------------

    async def add_account(self, account_type: AccountType | int) -> bool:
        """Begin linking a new account of the given type."""
        try:
            url = await self.linking.start(account_type)
        except Exception as e:
            return self._fail(
                "Authorization link unavailable", e, "Failed to get the authorization link"
            )
        return url is not None

    def open_authorization_page(self) -> bool:
        try:
            self.linking.open_authorization_target()
        except Exception as e:
            return self._fail(
                "Cannot open authorization page", e, "Failed to open the authorization page"
            )
        return True

    async def submit_callback(self, callback_text: str | None = None) -> bool:
        try:
            await self.linking.submit(callback_text)
        except Exception as e:
            if getattr(e, "kind", None) == ErrorKind.VALIDATION:
                return self._fail("Invalid input", e, "Please enter the callback URL")
            return self._fail("Submission failed", e, "Failed to submit the callback")
        return True

    def cancel_linking(self) -> bool:
        try:
            self.linking.cancel()
        except Exception as e:
            return self._fail("Cannot cancel", e, "Submission in progress")
        return True

    async def _on_account_linked(self) -> None:
        self._notify("Account added", "Account linked successfully", Severity.SUCCESS)
        await self.refresh()

    # ------------------------------------------------------------------
    # Quotas
    # ------------------------------------------------------------------

    async def view_quotas(self, account: Account | str) -> bool:
        """Open the quota panel for an account (object or id)."""
        if isinstance(account, str):
            found = self.store.get(account)
            if found is None:
                found = Account(cookie_id=account)
            account = found
        try:
            await self.quota_panel.open(account)
        except Exception as e:
            return self._fail("Load failed", e, "Failed to load quota information")
        return True

    def close_quotas(self) -> None:
        self.quota_panel.close()

    async def toggle_quota(
        self, model_name: str, current_status: Status | int | None = None
    ) -> bool:
        """Flip one model's quota on the inspected account.

        ``current_status`` defaults to the status held in the panel.
        """
        label = model_display_name(model_name)
        if current_status is None:
            quota = self.quota_panel.get(model_name)
            if quota is None:
                return self._fail(
                    "Update failed",
                    ValidationError("No quota loaded for this model"),
                    "Failed to update model status",
                    subject=label,
                )
            current_status = quota.status
        try:
            new_status = await self.quota_panel.toggle_quota(model_name, current_status)
        except Exception as e:
            return self._fail(
                "Update failed", e, "Failed to update model status", subject=label
            )
        self._notify(
            "Status updated",
            f"Model {label} {_enabled_word(new_status)}",
            Severity.SUCCESS,
        )
        return True
