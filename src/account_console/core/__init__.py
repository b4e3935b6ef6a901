"""Core utilities for the account console."""

from .logging import is_configured, setup_logging


__all__ = ["is_configured", "setup_logging"]
