"""Display helpers for accounts and quotas.

Every function here is total: unknown or malformed input falls back to a
readable value instead of raising.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import StrEnum

from account_console.models import AccountType, Status


# Served model keys → operator-facing labels
MODEL_DISPLAY_NAMES: dict[str, str] = {
    "gemini-2.5-pro": "Gemini 2.5 Pro",
    "gemini-2.5-flash-lite": "Gemini 2.5 Flash Lite",
    "claude-sonnet-4-5-thinking": "Claude Sonnet 4.5 Thinking",
    "gemini-2.5-flash-image": "Gemini 2.5 Flash Image",
    "gemini-2.5-flash-thinking": "Gemini 2.5 Flash Thinking",
    "gemini-2.5-flash": "Gemini 2.5 Flash",
    "gpt-oss-120b-medium": "GPT OSS 120B Medium",
    "gemini-3-pro-image": "Gemini 3 Pro Image",
    "gemini-3-pro-high": "Gemini 3 Pro High",
    "gemini-3-pro-low": "Gemini 3 Pro Low",
    "claude-sonnet-4-5": "Claude Sonnet 4.5",
    "chat_20706": "Chat 20706",
    "chat_23310": "Chat 23310",
    "rev19-uic3-1p": "Rev19 UIC3 1P",
}


class ModelFamily(StrEnum):
    """Vendor family used to pick a model's icon."""

    GEMINI = "gemini"
    CLAUDE = "claude"
    OPENAI = "openai"
    GENERIC = "generic"


def model_display_name(model_name: str) -> str:
    """Return the label for a model, or the raw name when none is known."""
    try:
        return MODEL_DISPLAY_NAMES.get(model_name, model_name)
    except TypeError:
        # unhashable input
        return str(model_name)


def model_family(model_name: str) -> ModelFamily:
    """Classify a model by substring; unknown names are GENERIC."""
    lower = str(model_name).lower()
    if "gemini" in lower:
        return ModelFamily.GEMINI
    if "claude" in lower:
        return ModelFamily.CLAUDE
    if "gpt" in lower:
        return ModelFamily.OPENAI
    return ModelFamily.GENERIC


def format_quota(value: Decimal | float | str | None) -> str:
    """Format a remaining allowance with four decimal places."""
    if value is None:
        return "-"
    try:
        return f"{Decimal(str(value)):.4f}"
    except (InvalidOperation, ValueError):
        return str(value)


def format_reset_time(value: datetime | None) -> str:
    """Format a quota reset time as ``MM-DD HH:MM``."""
    if value is None:
        return "Unlimited"
    return value.strftime("%m-%d %H:%M")


def format_date(value: datetime | None) -> str:
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d")


def format_last_used(value: datetime | None) -> str:
    if value is None:
        return "Never used"
    return format_date(value)


def account_type_label(account_type: AccountType | int) -> str:
    return "Shared" if account_type == AccountType.SHARED else "Exclusive"


def status_label(status: Status | int) -> str:
    return "Enabled" if status == Status.ENABLED else "Disabled"


def quota_status_label(status: Status | int) -> str:
    return "Active" if status == Status.ENABLED else "Disabled"
