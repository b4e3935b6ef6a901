"""Notification sink used to report the outcome of console actions."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from rich.console import Console
from rich.markup import escape
from structlog import get_logger


logger = get_logger(__name__)


class Severity(StrEnum):
    """Notification severity levels."""

    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Placement(StrEnum):
    """Screen corner where a notification appears."""

    TOP_RIGHT = "top-right"
    TOP_LEFT = "top-left"
    BOTTOM_RIGHT = "bottom-right"
    BOTTOM_LEFT = "bottom-left"


@dataclass(frozen=True)
class Notification:
    """A message for the operator."""

    title: str
    message: str
    severity: Severity = Severity.INFO
    placement: Placement = Placement.TOP_RIGHT


class Notifier(Protocol):
    """Sink accepting notifications. Delivery is fire-and-forget."""

    def show(self, notification: Notification) -> None: ...


class LogNotifier:
    """Notifier that only records notifications in the structured log."""

    def show(self, notification: Notification) -> None:
        log = logger.warning if notification.severity in _ATTENTION else logger.info
        log(
            "notification",
            title=notification.title,
            message=notification.message,
            severity=str(notification.severity),
            placement=str(notification.placement),
        )


_ATTENTION = {Severity.WARNING, Severity.ERROR}

_SEVERITY_STYLES = {
    Severity.SUCCESS: "green",
    Severity.INFO: "cyan",
    Severity.WARNING: "yellow",
    Severity.ERROR: "red",
}


class ConsoleNotifier:
    """Notifier printing to a rich console."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)

    def show(self, notification: Notification) -> None:
        style = _SEVERITY_STYLES.get(notification.severity, "white")
        self.console.print(
            f"[bold {style}]{escape(notification.title)}[/bold {style}]: "
            f"{escape(notification.message)}"
        )
