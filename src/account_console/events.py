"""Explicit subscription channel for the "account added" signal."""

from collections.abc import Awaitable, Callable

from structlog import get_logger


logger = get_logger(__name__)

AccountAddedListener = Callable[[], Awaitable[object]]


class AccountAddedSignal:
    """Notifies subscribers that an account was created somewhere.

    Listeners are awaited in subscription order. A failing listener is logged
    and does not prevent the remaining listeners from running.
    """

    def __init__(self) -> None:
        self._listeners: list[AccountAddedListener] = []

    def subscribe(self, listener: AccountAddedListener) -> None:
        """Register a listener; registering the same one twice is a no-op."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: AccountAddedListener) -> None:
        """Remove a listener if present."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def emit(self) -> None:
        """Run every listener once."""
        logger.debug("account_added_emitted", listeners=len(self._listeners))
        for listener in list(self._listeners):
            try:
                await listener()
            except Exception as e:
                logger.error(
                    "account_added_listener_failed",
                    listener=getattr(listener, "__qualname__", repr(listener)),
                    error=str(e),
                )
