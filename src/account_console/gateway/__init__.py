"""Remote account gateway access."""

from .base import AccountGateway
from .http import HttpAccountGateway


__all__ = ["AccountGateway", "HttpAccountGateway"]
