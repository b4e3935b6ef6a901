"""Protocol for the remote account gateway."""

from typing import Any, Protocol

from account_console.models import AccountType, Status


class AccountGateway(Protocol):
    """Remote authority for accounts, OAuth linking and quotas.

    Every method is one discrete request. Implementations raise
    GatewayError (or a subclass) on any failure.
    """

    async def list_accounts(self) -> Any:
        """Return a list of accounts or an object with an ``accounts`` list."""
        ...

    async def get_authorization_url(self, account_type: AccountType) -> dict[str, Any]:
        """Return ``{"auth_url": ...}`` for a new account of the given type."""
        ...

    async def submit_authorization_callback(self, callback_url: str) -> None:
        """Complete linking with the redirect URL pasted by the operator."""
        ...

    async def update_account_status(self, cookie_id: str, status: Status) -> None: ...

    async def delete_account(self, cookie_id: str) -> None: ...

    async def list_account_quotas(self, cookie_id: str) -> Any:
        """Return the quota entries of one account."""
        ...

    async def update_quota_status(
        self, cookie_id: str, model_name: str, status: Status
    ) -> None: ...
