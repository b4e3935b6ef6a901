"""Confirm-then-apply status toggles with a per-entity in-flight guard."""

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from structlog import get_logger

from account_console.exceptions import OperationInProgressError
from account_console.models import Status


logger = get_logger(__name__)

EntityKey = tuple[str, ...]


def account_key(cookie_id: str) -> EntityKey:
    return ("account", cookie_id)


def quota_key(cookie_id: str, model_name: str) -> EntityKey:
    return ("quota", cookie_id, model_name)


class InFlightGuard:
    """Rejects a second mutation of an entity while the first is pending.

    Runs on a single event loop: the membership check and the insert happen
    without an intervening await, so no lock is needed.
    """

    def __init__(self) -> None:
        self._pending: set[EntityKey] = set()

    def is_pending(self, key: EntityKey) -> bool:
        return key in self._pending

    @asynccontextmanager
    async def hold(self, key: EntityKey) -> AsyncIterator[None]:
        """Mark ``key`` as busy for the duration of the block.

        Raises:
            OperationInProgressError: If ``key`` is already held
        """
        if key in self._pending:
            logger.warning("entity_update_rejected_in_flight", entity="/".join(key))
            raise OperationInProgressError(key)
        self._pending.add(key)
        try:
            yield
        finally:
            self._pending.discard(key)


class StatusToggleCoordinator:
    """Flips an enabled/disabled flag on accounts and quota entries.

    The remote update always happens first; local state is patched only once
    the gateway has confirmed it, so nothing ever needs rolling back.
    """

    def __init__(self, guard: InFlightGuard | None = None) -> None:
        self.guard = guard or InFlightGuard()

    async def flip(
        self,
        key: EntityKey,
        current: Status | int,
        update_remote: Callable[[Status], Awaitable[None]],
        apply_local: Callable[[Status], None],
    ) -> Status:
        """Request the opposite of ``current`` and apply it once confirmed.

        Args:
            key: Entity identity used by the in-flight guard
            current: Status the caller currently sees
            update_remote: Gateway call receiving the new status
            apply_local: Patches local state, called only after success

        Returns:
            The new status

        Raises:
            OperationInProgressError: If the entity already has a pending update
            GatewayError: If the remote update fails (local state untouched)
        """
        new_status = Status(current).toggled()
        async with self.guard.hold(key):
            await update_remote(new_status)
            apply_local(new_status)
        logger.info("status_toggled", entity="/".join(key), status=new_status.name)
        return new_status
