"""Exporter configuration schema, loading and validation."""

from .errors import ConfigLoadError, ConfigurationError
from .loader import config_from_dict, load_and_validate_config, load_config, parse_duration
from .schema import (
    PERMISSIVE_LABEL_SANITIZATION,
    ExporterConfig,
    HTTPClientSettings,
    MultiTenancy,
    RemoteWriteQueue,
    ResourceToTelemetrySettings,
    RetrySettings,
    TimeoutSettings,
    WALConfig,
    sanitize_label_enabled,
)
from .validator import ValidationResult, check_config, validate

__all__ = [
    # Errors
    "ConfigLoadError",
    "ConfigurationError",
    # Schema
    "PERMISSIVE_LABEL_SANITIZATION",
    "ExporterConfig",
    "HTTPClientSettings",
    "MultiTenancy",
    "RemoteWriteQueue",
    "ResourceToTelemetrySettings",
    "RetrySettings",
    "TimeoutSettings",
    "WALConfig",
    "sanitize_label_enabled",
    # Validation
    "ValidationResult",
    "check_config",
    "validate",
    # Loading
    "config_from_dict",
    "load_and_validate_config",
    "load_config",
    "parse_duration",
]
