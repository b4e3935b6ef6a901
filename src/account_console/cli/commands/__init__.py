"""CLI command groups."""

from .accounts import app as accounts_app
from .quotas import app as quotas_app


__all__ = ["accounts_app", "quotas_app"]
