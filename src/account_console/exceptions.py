"""Consolidated exception hierarchy for the account console.

All exceptions use proper exception chaining with the `from` keyword.
Error kinds use StrEnum for type safety and autocompletion.
"""

from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    """Error categories surfaced by console operations."""

    VALIDATION = "validation_error"
    GATEWAY = "gateway_error"
    MALFORMED_RESPONSE = "malformed_response_error"
    CONFLICT = "conflict_error"
    NOT_FOUND = "not_found_error"
    INVALID_STATE = "invalid_state_error"


# ============================================================================
# Base Exceptions
# ============================================================================


class ConsoleError(Exception):
    """Base exception for all account console errors.

    Every failure raised by the core is recoverable by retrying the action
    that triggered it.
    """

    def __init__(
        self,
        message: str = "",
        *,
        kind: ErrorKind = ErrorKind.GATEWAY,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.details = details or {}


# ============================================================================
# Validation Errors
# ============================================================================


class ValidationError(ConsoleError):
    """User input rejected before any remote call."""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, kind=ErrorKind.VALIDATION, details=details)


class InvalidFlowStateError(ConsoleError):
    """Action not allowed in the current state of a flow or panel."""

    def __init__(self, action: str, state: str, *, subject: str = "linking flow") -> None:
        super().__init__(
            f"Cannot {action} while {subject} is {state}",
            kind=ErrorKind.INVALID_STATE,
            details={"action": action, "state": state},
        )
        self.action = action
        self.state = state


class OperationInProgressError(ConsoleError):
    """Another mutation of the same entity is still pending."""

    def __init__(self, entity: tuple[str, ...]) -> None:
        super().__init__(
            f"An update for {'/'.join(entity)} is already in progress",
            kind=ErrorKind.CONFLICT,
            details={"entity": list(entity)},
        )
        self.entity = entity


class AccountNotFoundError(ConsoleError):
    """Account is not present in the local collection."""

    def __init__(self, cookie_id: str) -> None:
        super().__init__(
            f"Account '{cookie_id}' not found",
            kind=ErrorKind.NOT_FOUND,
            details={"cookie_id": cookie_id},
        )
        self.cookie_id = cookie_id


# ============================================================================
# Gateway Errors
# ============================================================================


class GatewayError(ConsoleError):
    """Failure returned by or raised from a remote gateway call."""

    def __init__(
        self,
        message: str = "",
        *,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, kind=ErrorKind.GATEWAY, details=details)
        self.status_code = status_code


class GatewayTimeoutError(GatewayError):
    """Gateway request timed out."""

    def __init__(self, message: str = "Gateway request timed out") -> None:
        super().__init__(message)


class GatewayConnectionError(GatewayError):
    """Gateway could not be reached."""

    def __init__(self, message: str = "Could not connect to gateway") -> None:
        super().__init__(message)


class MalformedResponseError(ConsoleError):
    """Successful response whose shape does not match the expected entity."""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, kind=ErrorKind.MALFORMED_RESPONSE, details=details)


def describe_error(error: BaseException, fallback: str) -> str:
    """Return a human-readable message for an error, or the fallback."""
    message = getattr(error, "message", None)
    if not isinstance(message, str):
        message = str(error)
    message = message.strip()
    return message or fallback


__all__ = [
    # Enums
    "ErrorKind",
    # Base
    "ConsoleError",
    # Validation & state
    "ValidationError",
    "InvalidFlowStateError",
    "OperationInProgressError",
    "AccountNotFoundError",
    # Gateway
    "GatewayError",
    "GatewayTimeoutError",
    "GatewayConnectionError",
    "MalformedResponseError",
    # Helpers
    "describe_error",
]
