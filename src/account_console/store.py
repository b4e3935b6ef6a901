"""Session-scoped cache of the account collection."""

from collections.abc import Iterator, Sequence
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from structlog import get_logger

from account_console.exceptions import AccountNotFoundError, MalformedResponseError
from account_console.gateway.base import AccountGateway
from account_console.models import Account, Status
from account_console.toggles import StatusToggleCoordinator, account_key


logger = get_logger(__name__)


def normalize_accounts(payload: Any) -> list[Account]:
    """Turn a gateway payload into a list of unique accounts.

    Accepts a bare sequence or an object exposing an ``accounts`` sequence.
    Anything else, or any entry that is not a mapping with a usable id or
    status, yields an empty list. Unparseable timestamps only blank that field.
    Duplicate ids keep their first occurrence.
    """
    if isinstance(payload, dict):
        payload = payload.get("accounts")
    if not isinstance(payload, Sequence) or isinstance(payload, (str, bytes)):
        logger.warning("accounts_payload_malformed", payload_type=type(payload).__name__)
        return []

    accounts: list[Account] = []
    seen: set[str] = set()
    try:
        for entry in payload:
            account = Account.model_validate(entry)
            if account.cookie_id in seen:
                logger.warning("duplicate_account_dropped", cookie_id=account.cookie_id)
                continue
            seen.add(account.cookie_id)
            accounts.append(account)
    except PydanticValidationError as e:
        logger.warning("accounts_payload_invalid_entry", errors=e.error_count())
        return []
    return accounts


class AccountStore:
    """In-memory account collection kept in sync with the gateway.

    Local state only ever reflects changes the gateway has confirmed.
    """

    def __init__(
        self,
        gateway: AccountGateway,
        coordinator: StatusToggleCoordinator | None = None,
    ) -> None:
        self.gateway = gateway
        self.coordinator = coordinator or StatusToggleCoordinator()
        self._accounts: list[Account] = []
        self.is_loading = True
        self.is_refreshing = False
        # Bumped on every refresh and confirmed local change so an older
        # snapshot never overwrites a newer state
        self._generation = 0

    @property
    def accounts(self) -> list[Account]:
        """Snapshot of the current collection."""
        return list(self._accounts)

    def __iter__(self) -> Iterator[Account]:
        return iter(list(self._accounts))

    def __len__(self) -> int:
        return len(self._accounts)

    @property
    def count(self) -> int:
        return len(self._accounts)

    def summary(self) -> str:
        """Header line for the account list."""
        noun = "account" if self.count == 1 else "accounts"
        return f"{self.count} {noun}"

    def get(self, cookie_id: str) -> Account | None:
        for account in self._accounts:
            if account.cookie_id == cookie_id:
                return account
        return None

    def _require(self, cookie_id: str) -> Account:
        account = self.get(cookie_id)
        if account is None:
            raise AccountNotFoundError(cookie_id)
        return account

    async def refresh(self) -> list[Account]:
        """Replace the collection with the gateway's current view.

        A malformed payload empties the collection without raising. A snapshot
        that returns after a newer refresh started, or after a confirmed local
        change, is dropped and the current collection returned.

        Raises:
            GatewayError: On transport or gateway failure (collection emptied)
        """
        self._generation += 1
        generation = self._generation
        self.is_refreshing = True
        try:
            try:
                payload = await self.gateway.list_accounts()
            except MalformedResponseError as e:
                logger.warning("accounts_refresh_malformed", error=e.message)
                payload = None
            except Exception as e:
                if generation == self._generation:
                    self._accounts = []
                logger.error("accounts_refresh_failed", error=str(e))
                raise
            if generation != self._generation:
                logger.info("accounts_refresh_discarded", reason="stale")
                return self.accounts
            self._accounts = normalize_accounts(payload)
            logger.info("accounts_refreshed", count=len(self._accounts))
            return self.accounts
        finally:
            self.is_loading = False
            self.is_refreshing = False

    async def toggle_account_status(self, cookie_id: str) -> Account:
        """Flip an account between enabled and disabled.

        Raises:
            AccountNotFoundError: If the account is not in the store
            OperationInProgressError: If this account already has a pending update
            GatewayError: If the gateway rejects the update
        """
        account = self._require(cookie_id)

        async def update_remote(status: Status) -> None:
            await self.gateway.update_account_status(cookie_id, status)

        def apply_local(status: Status) -> None:
            self._generation += 1
            self._accounts = [
                a.with_status(status) if a.cookie_id == cookie_id else a
                for a in self._accounts
            ]

        new_status = await self.coordinator.flip(
            account_key(cookie_id), account.status, update_remote, apply_local
        )
        # A refresh may have replaced the collection while the update was pending
        return self.get(cookie_id) or account.with_status(new_status)

    async def remove(self, cookie_id: str) -> None:
        """Delete an account remotely, then drop it locally.

        Raises:
            OperationInProgressError: If this account already has a pending update
            GatewayError: If the gateway rejects the deletion
        """
        async with self.coordinator.guard.hold(account_key(cookie_id)):
            await self.gateway.delete_account(cookie_id)
            self._generation += 1
            self._accounts = [a for a in self._accounts if a.cookie_id != cookie_id]
        logger.info("account_removed", cookie_id=cookie_id)
