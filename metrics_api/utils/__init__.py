"""Utility modules for logging, date handling, and common helpers."""

from metrics_api.utils.logging import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
