"""Pydantic models for accounts and per-model quotas."""

from datetime import datetime
from decimal import Decimal
from enum import IntEnum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
)


class AccountType(IntEnum):
    """Whether an account is reserved for one user or pooled."""

    EXCLUSIVE = 0
    SHARED = 1


class Status(IntEnum):
    """Enabled/disabled flag shared by accounts and quotas."""

    DISABLED = 0
    ENABLED = 1

    def toggled(self) -> "Status":
        """Return the opposite status."""
        return Status.DISABLED if self is Status.ENABLED else Status.ENABLED


def _none_if_invalid(value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
    """Display-only fields fall back to None instead of rejecting the entry."""
    try:
        return handler(value)
    except ValidationError:
        return None


class Account(BaseModel):
    """A delegated service account as reported by the gateway.

    A missing status is treated as disabled until the gateway says otherwise.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    cookie_id: str = Field(..., min_length=1, description="Unique account identifier")
    is_shared: AccountType = Field(
        default=AccountType.EXCLUSIVE, description="Exclusive or shared account"
    )
    status: Status = Field(default=Status.DISABLED, description="Enabled flag")
    created_at: datetime | None = Field(
        default=None, description="Creation timestamp set by the gateway"
    )
    last_used_at: datetime | None = Field(
        default=None, description="Last use timestamp set by the gateway"
    )

    @field_validator("created_at", "last_used_at", mode="wrap")
    @classmethod
    def lenient_timestamps(
        cls, v: Any, handler: ValidatorFunctionWrapHandler
    ) -> datetime | None:
        return _none_if_invalid(v, handler)

    def with_status(self, status: Status) -> "Account":
        """Return a copy carrying the given status."""
        return self.model_copy(update={"status": status})


class Quota(BaseModel):
    """Remaining allowance of one model for one account."""

    model_config = ConfigDict(frozen=True, extra="ignore", protected_namespaces=())

    quota_id: str | int = Field(..., description="Identifier within the account")
    model_name: str = Field(..., min_length=1, description="Served model key")
    quota: Decimal | None = Field(
        default=Decimal(0), description="Remaining allowance, None when unknown"
    )
    status: Status = Field(default=Status.DISABLED, description="Enabled flag")
    reset_time: datetime | None = Field(
        default=None, description="When the allowance resets"
    )

    @field_validator("quota", "reset_time", mode="wrap")
    @classmethod
    def lenient_display_fields(
        cls, v: Any, handler: ValidatorFunctionWrapHandler
    ) -> Any:
        return _none_if_invalid(v, handler)

    def with_status(self, status: Status) -> "Quota":
        """Return a copy carrying the given status."""
        return self.model_copy(update={"status": status})
