"""Configuration schema for the remote write exporter."""

from dataclasses import dataclass, field
from typing import Optional

from ..featuregate import Gate, GateRegistry, get_registry

PERMISSIVE_LABEL_SANITIZATION = Gate(
    id="exporter.prometheusremotewrite.PermissiveLabelSanitization",
    enabled=False,
    description="Controls whether to change labels starting with '_' to 'key_'",
)

# Runs once per process, on first import of this module.
get_registry().must_register(PERMISSIVE_LABEL_SANITIZATION)

DEFAULT_WAL_BUFFER_SIZE = 300
DEFAULT_WAL_TRUNCATE_FREQUENCY = 60.0  # seconds


@dataclass
class TimeoutSettings:
    """Timeout applied to each outgoing export request."""
    timeout: float = 5.0  # seconds


@dataclass
class RetrySettings:
    """Backoff policy handed to the retry executor."""
    enabled: bool = True
    initial_interval: float = 0.05  # seconds
    max_interval: float = 0.2  # seconds
    max_elapsed_time: float = 60.0  # seconds


@dataclass
class HTTPClientSettings:
    """Transport settings handed to the HTTP client."""
    endpoint: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    read_buffer_size: int = 0
    write_buffer_size: int = 512 * 1024
    compression: str = ""


@dataclass
class ResourceToTelemetrySettings:
    """
    Resource attribute conversion.

    If enabled, all resource attributes are converted to metric labels.
    """
    enabled: bool = False


@dataclass
class WALConfig:
    """Write-ahead log settings. Non-positive values fall back to defaults."""
    directory: str = ""
    buffer_size: int = 0
    truncate_frequency: float = 0.0  # seconds

    @property
    def effective_buffer_size(self) -> int:
        if self.buffer_size > 0:
            return self.buffer_size
        return DEFAULT_WAL_BUFFER_SIZE

    @property
    def effective_truncate_frequency(self) -> float:
        if self.truncate_frequency > 0:
            return self.truncate_frequency
        return DEFAULT_WAL_TRUNCATE_FREQUENCY


@dataclass
class RemoteWriteQueue:
    """
    Queue that handles outgoing remote write requests.

    When disabled, export requests are executed synchronously and
    queue_size / num_consumers are ignored.
    """
    enabled: bool = False
    queue_size: int = 0  # max metric batches held at a given time
    num_consumers: int = 0  # workers fanning out remote write requests


@dataclass
class MultiTenancy:
    """
    Multi-tenancy support.

    The tenant name is read from the `from_label` metric label and attached
    to requests through `header` and/or `query_param`.
    """
    enabled: bool = False
    header: str = ""
    query_param: str = ""
    from_label: str = ""
    default_tenant: str = ""


def sanitize_label_enabled(registry: Optional[GateRegistry] = None) -> bool:
    """
    Whether label keys starting with '_' are rewritten.

    Args:
        registry: Gate registry to consult (default: process-wide registry)
    """
    if registry is None:
        registry = get_registry()
    return not registry.is_enabled(PERMISSIVE_LABEL_SANITIZATION.id)


@dataclass
class ExporterConfig:
    """
    Configuration for the remote write exporter.

    Instances are built by the loader, validated once and then treated as
    read-only by every downstream component.
    """
    # prefix attached to each exported metric name
    namespace: str = ""

    # label keys here may start with the reserved "__" prefix
    external_labels: dict[str, str] = field(default_factory=dict)

    remote_write_queue: RemoteWriteQueue = field(default_factory=RemoteWriteQueue)
    multi_tenancy: MultiTenancy = field(default_factory=MultiTenancy)
    resource_to_telemetry_conversion: ResourceToTelemetrySettings = field(
        default_factory=ResourceToTelemetrySettings
    )

    # None disables the write-ahead log
    wal: Optional[WALConfig] = None

    retry_settings: RetrySettings = field(default_factory=RetrySettings)
    timeout_settings: TimeoutSettings = field(default_factory=TimeoutSettings)
    http_client_settings: HTTPClientSettings = field(default_factory=HTTPClientSettings)

    @property
    def sanitize_label(self) -> bool:
        """Derived from the PermissiveLabelSanitization gate, never stored."""
        return sanitize_label_enabled()
