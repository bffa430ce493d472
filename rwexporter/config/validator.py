"""Configuration validation for the remote write exporter."""

from dataclasses import dataclass, field

from .errors import ConfigurationError
from .schema import ExporterConfig


@dataclass
class ValidationResult:
    """Result of configuration validation."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.valid


def validate(cfg: ExporterConfig) -> None:
    """
    Check that the exporter configuration is valid.

    Checks run in a fixed order and the first failure is raised.

    Raises:
        ConfigurationError: If the configuration is rejected
    """
    queue = cfg.remote_write_queue
    tenancy = cfg.multi_tenancy

    if queue.queue_size < 0:
        raise ConfigurationError("remote write queue size can't be negative")

    if queue.enabled and queue.queue_size == 0:
        raise ConfigurationError("a 0 size queue will drop all the data")

    if queue.num_consumers < 0:
        raise ConfigurationError("remote write consumer number can't be negative")

    if tenancy.enabled and tenancy.header == "" and tenancy.query_param == "":
        raise ConfigurationError("one of multi_tenancy header or query_param should be set")

    if tenancy.enabled and tenancy.from_label == "":
        raise ConfigurationError("from_label should be set to find tenant name")


def _collect_warnings(cfg: ExporterConfig) -> list[str]:
    """Settings that are accepted but have no effect."""
    warnings = []

    queue = cfg.remote_write_queue
    if not queue.enabled and (queue.queue_size or queue.num_consumers):
        warnings.append(
            "remote_write_queue is disabled, queue_size and num_consumers are ignored"
        )

    tenancy = cfg.multi_tenancy
    if not tenancy.enabled and any(
        (tenancy.header, tenancy.query_param, tenancy.from_label, tenancy.default_tenant)
    ):
        warnings.append("multi_tenancy is disabled, its other settings are ignored")

    return warnings


def check_config(cfg: ExporterConfig) -> ValidationResult:
    """
    Validate without raising.

    Args:
        cfg: Configuration to check

    Returns:
        ValidationResult with at most one error, plus warnings
    """
    errors = []
    try:
        validate(cfg)
    except ConfigurationError as e:
        errors.append(e.message)

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=_collect_warnings(cfg),
    )
