"""Utility modules for the exporter."""

from .logging import (
    setup_logging,
    get_logger,
    LogContext,
    ExporterContextFilter,
    JSONFormatter,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "LogContext",
    "ExporterContextFilter",
    "JSONFormatter",
]
