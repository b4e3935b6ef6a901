"""Account Console - operator console for gateway-managed accounts and quotas."""

from ._version import __version__
from .console import AccountConsole
from .events import AccountAddedSignal
from .models import Account, AccountType, Quota, Status


__all__ = [
    "__version__",
    "Account",
    "AccountAddedSignal",
    "AccountConsole",
    "AccountType",
    "Quota",
    "Status",
]
