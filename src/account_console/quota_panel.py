"""Per-account quota panel: fetch, hold and toggle one account's quotas."""

from collections.abc import Sequence
from enum import StrEnum
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from structlog import get_logger

from account_console.exceptions import InvalidFlowStateError, MalformedResponseError
from account_console.gateway.base import AccountGateway
from account_console.models import Account, Quota, Status
from account_console.toggles import StatusToggleCoordinator, quota_key


logger = get_logger(__name__)


class PanelState(StrEnum):
    CLOSED = "closed"
    LOADING = "loading"
    READY = "ready"


def normalize_quotas(payload: Any) -> list[Quota]:
    """Decode a quota payload; anything but a list of valid entries is empty."""
    if isinstance(payload, dict):
        payload = payload.get("quotas")
    if not isinstance(payload, Sequence) or isinstance(payload, (str, bytes)):
        logger.warning("quotas_payload_malformed", payload_type=type(payload).__name__)
        return []
    try:
        return [Quota.model_validate(entry) for entry in payload]
    except PydanticValidationError as e:
        logger.warning("quotas_payload_invalid_entry", errors=e.error_count())
        return []


class QuotaPanelController:
    """Holds the quota set of the currently inspected account.

    The set is cleared before every fetch, so quotas of a previously
    inspected account are never visible while loading.
    """

    def __init__(
        self,
        gateway: AccountGateway,
        coordinator: StatusToggleCoordinator | None = None,
    ) -> None:
        self.gateway = gateway
        self.coordinator = coordinator or StatusToggleCoordinator()
        self.account: Account | None = None
        self._quotas: list[Quota] = []
        self.state = PanelState.CLOSED
        # Bumped on open/close so responses for a stale panel are dropped
        self._generation = 0

    @property
    def quotas(self) -> list[Quota]:
        return list(self._quotas)

    @property
    def is_loading(self) -> bool:
        return self.state == PanelState.LOADING

    @property
    def is_open(self) -> bool:
        return self.state != PanelState.CLOSED

    def get(self, model_name: str) -> Quota | None:
        for quota in self._quotas:
            if quota.model_name == model_name:
                return quota
        return None

    async def open(self, account: Account) -> list[Quota]:
        """Inspect ``account`` and load its quotas.

        Raises:
            GatewayError: If the fetch fails (set stays empty, panel leaves LOADING)
        """
        self._generation += 1
        generation = self._generation
        self.account = account
        self._quotas = []
        self.state = PanelState.LOADING
        logger.info("quota_panel_opened", cookie_id=account.cookie_id)

        try:
            payload = await self.gateway.list_account_quotas(account.cookie_id)
        except MalformedResponseError as e:
            logger.warning("quotas_fetch_malformed", error=e.message)
            payload = None
        except Exception as e:
            if generation == self._generation:
                self._quotas = []
                self.state = PanelState.READY
                logger.error(
                    "quotas_fetch_failed", cookie_id=account.cookie_id, error=str(e)
                )
                raise
            logger.info("quotas_fetch_failure_discarded", cookie_id=account.cookie_id)
            return []

        if generation != self._generation:
            logger.info("quotas_fetch_discarded", cookie_id=account.cookie_id)
            return []

        self._quotas = normalize_quotas(payload)
        self.state = PanelState.READY
        logger.info(
            "quotas_loaded", cookie_id=account.cookie_id, count=len(self._quotas)
        )
        return self.quotas

    def close(self) -> None:
        self._generation += 1
        self.account = None
        self._quotas = []
        self.state = PanelState.CLOSED

    async def toggle_quota(self, model_name: str, current_status: Status | int) -> Status:
        """Flip one model's quota for the inspected account.

        Only the entry matching ``model_name`` is replaced, and only after the
        gateway confirms.

        Raises:
            InvalidFlowStateError: If no account is being inspected
            OperationInProgressError: If this quota already has a pending update
            GatewayError: If the gateway rejects the update (set unchanged)
        """
        if self.account is None:
            raise InvalidFlowStateError(
                "toggle a quota", str(self.state), subject="quota panel"
            )
        cookie_id = self.account.cookie_id

        async def update_remote(status: Status) -> None:
            await self.gateway.update_quota_status(cookie_id, model_name, status)

        def apply_local(status: Status) -> None:
            if self.account is None or self.account.cookie_id != cookie_id:
                return
            self._quotas = [
                q.with_status(status) if q.model_name == model_name else q
                for q in self._quotas
            ]

        return await self.coordinator.flip(
            quota_key(cookie_id, model_name), current_status, update_remote, apply_local
        )
