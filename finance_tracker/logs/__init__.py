"""Structured logging package."""

from finance_tracker.logs.logger import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
