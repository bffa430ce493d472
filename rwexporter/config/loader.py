"""
Configuration loading for the remote write exporter.

Decodes a YAML document into an ExporterConfig. Transport and timeout keys
(endpoint, headers, timeout, ...) sit at the top level of the document and
are folded into their own settings records here.
"""

import logging
import math
import os
import re
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

import yaml

from .errors import ConfigLoadError, ConfigurationError
from .schema import (
    ExporterConfig,
    HTTPClientSettings,
    MultiTenancy,
    RemoteWriteQueue,
    ResourceToTelemetrySettings,
    RetrySettings,
    TimeoutSettings,
    WALConfig,
)
from .validator import check_config

logger = logging.getLogger(__name__)

_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")
_INT_PATTERN = re.compile(r"[+-]?\d+")
_DURATION_PATTERN = re.compile(r"(?:\d+(?:\.\d+)?(?:ns|us|µs|ms|s|m|h))+")
_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ns|us|µs|ms|s|m|h)")

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _type_name(value: Any) -> str:
    return type(value).__name__


def parse_duration(value: Any, path: str = "") -> float:
    """
    Parse a duration into seconds.

    Accepts a number of seconds or a string such as "5s", "200ms" or "1m30s".

    Raises:
        ConfigLoadError: If the value is not a valid duration
    """
    if isinstance(value, bool):
        raise ConfigLoadError(path, f"expected duration, got {_type_name(value)}")

    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise ConfigLoadError(path, f"duration must be finite: {value}")
        if value < 0:
            raise ConfigLoadError(path, f"duration can't be negative: {value}")
        return float(value)

    if not isinstance(value, str):
        raise ConfigLoadError(path, f"expected duration, got {_type_name(value)}")

    text = value.strip()
    if text == "0":
        return 0.0
    if not _DURATION_PATTERN.fullmatch(text):
        raise ConfigLoadError(path, f"invalid duration {value!r}")

    return sum(float(amount) * _DURATION_UNITS[unit] for amount, unit in _DURATION_PART.findall(text))


def _to_bool(value: Any, path: str) -> bool:
    if isinstance(value, bool):
        return value
    # Env placeholders always expand to strings
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise ConfigLoadError(path, f"expected bool, got {_type_name(value)}")


def _to_int(value: Any, path: str) -> int:
    if isinstance(value, bool):
        raise ConfigLoadError(path, f"expected int, got {_type_name(value)}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INT_PATTERN.fullmatch(value):
        return int(value)
    raise ConfigLoadError(path, f"expected int, got {_type_name(value)}")


def _to_str(value: Any, path: str) -> str:
    if isinstance(value, str):
        return value
    raise ConfigLoadError(path, f"expected string, got {_type_name(value)}")


def _to_str_map(value: Any, path: str) -> dict[str, str]:
    if not isinstance(value, Mapping):
        raise ConfigLoadError(path, f"expected mapping, got {_type_name(value)}")

    result = {}
    for key, item in value.items():
        if not isinstance(key, str):
            raise ConfigLoadError(path, f"expected string key, got {_type_name(key)}")
        result[key] = _to_str(item, _join(path, key))
    return result


def _mapping(value: Any, path: str) -> Mapping[str, Any]:
    # An empty section such as `wal:` decodes to None
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigLoadError(path, f"expected mapping, got {_type_name(value)}")
    return value


Converter = Callable[[Any, str], Any]


def _decode(cls: type, section: Mapping[str, Any], path: str, fields: dict[str, tuple[str, Converter]]) -> Any:
    """Build a settings record from a mapping, rejecting unknown keys."""
    unknown = sorted(map(str, set(section) - set(fields)))
    if unknown:
        raise ConfigLoadError(path, f"has invalid keys: {', '.join(unknown)}")

    kwargs = {}
    for key, (attr, convert) in fields.items():
        value = section.get(key)
        if value is not None:
            kwargs[attr] = convert(value, _join(path, key))
    return cls(**kwargs)


_QUEUE_FIELDS = {
    "enabled": ("enabled", _to_bool),
    "queue_size": ("queue_size", _to_int),
    "num_consumers": ("num_consumers", _to_int),
}

_MULTI_TENANCY_FIELDS = {
    "enabled": ("enabled", _to_bool),
    "header": ("header", _to_str),
    "query_param": ("query_param", _to_str),
    "from_label": ("from_label", _to_str),
    "default_tenant": ("default_tenant", _to_str),
}

_RETRY_FIELDS = {
    "enabled": ("enabled", _to_bool),
    "initial_interval": ("initial_interval", parse_duration),
    "max_interval": ("max_interval", parse_duration),
    "max_elapsed_time": ("max_elapsed_time", parse_duration),
}

_RESOURCE_TO_TELEMETRY_FIELDS = {
    "enabled": ("enabled", _to_bool),
}

_WAL_FIELDS = {
    "directory": ("directory", _to_str),
    "buffer_size": ("buffer_size", _to_int),
    "truncate_frequency": ("truncate_frequency", parse_duration),
}

# Keys flattened into the top level of the document
_HTTP_CLIENT_FIELDS = {
    "endpoint": ("endpoint", _to_str),
    "headers": ("headers", _to_str_map),
    "read_buffer_size": ("read_buffer_size", _to_int),
    "write_buffer_size": ("write_buffer_size", _to_int),
    "compression": ("compression", _to_str),
}

_TIMEOUT_FIELDS = {
    "timeout": ("timeout", parse_duration),
}

_SECTION_KEYS = {
    "namespace",
    "external_labels",
    "remote_write_queue",
    "multi_tenancy",
    "resource_to_telemetry_conversion",
    "retry_on_failure",
    "wal",
}


def expand_env(obj: Any, path: str = "") -> Any:
    """
    Expand ${ENV_VAR} placeholders in string values.

    Raises:
        ConfigLoadError: If a referenced environment variable is not set
    """
    if isinstance(obj, Mapping):
        return {k: expand_env(v, _join(path, str(k))) for k, v in obj.items()}
    if isinstance(obj, list):
        return [expand_env(v, f"{path}[{i}]") for i, v in enumerate(obj)]
    if isinstance(obj, str):
        def _replace(match: re.Match) -> str:
            name = match.group(1)
            resolved = os.environ.get(name)
            if resolved is None:
                raise ConfigLoadError(path, f"environment variable {name!r} is not set")
            return resolved

        return _ENV_PATTERN.sub(_replace, obj)
    return obj


def config_from_dict(data: Optional[Mapping[str, Any]]) -> ExporterConfig:
    """
    Decode a configuration mapping into an ExporterConfig.

    Args:
        data: Parsed configuration document (None is treated as empty)

    Returns:
        ExporterConfig with defaults for absent keys

    Raises:
        ConfigLoadError: On unknown keys, bad types or unset env variables
    """
    document = expand_env(_mapping(data, ""))

    allowed = _SECTION_KEYS | set(_HTTP_CLIENT_FIELDS) | set(_TIMEOUT_FIELDS)
    unknown = sorted(map(str, set(document) - allowed))
    if unknown:
        raise ConfigLoadError("", f"has invalid keys: {', '.join(unknown)}")

    http_section = {k: v for k, v in document.items() if k in _HTTP_CLIENT_FIELDS}
    timeout_section = {k: v for k, v in document.items() if k in _TIMEOUT_FIELDS}

    cfg = ExporterConfig(
        remote_write_queue=_decode(
            RemoteWriteQueue,
            _mapping(document.get("remote_write_queue"), "remote_write_queue"),
            "remote_write_queue",
            _QUEUE_FIELDS,
        ),
        multi_tenancy=_decode(
            MultiTenancy,
            _mapping(document.get("multi_tenancy"), "multi_tenancy"),
            "multi_tenancy",
            _MULTI_TENANCY_FIELDS,
        ),
        resource_to_telemetry_conversion=_decode(
            ResourceToTelemetrySettings,
            _mapping(document.get("resource_to_telemetry_conversion"), "resource_to_telemetry_conversion"),
            "resource_to_telemetry_conversion",
            _RESOURCE_TO_TELEMETRY_FIELDS,
        ),
        retry_settings=_decode(
            RetrySettings,
            _mapping(document.get("retry_on_failure"), "retry_on_failure"),
            "retry_on_failure",
            _RETRY_FIELDS,
        ),
        timeout_settings=_decode(TimeoutSettings, timeout_section, "", _TIMEOUT_FIELDS),
        http_client_settings=_decode(HTTPClientSettings, http_section, "", _HTTP_CLIENT_FIELDS),
    )

    if document.get("namespace") is not None:
        cfg.namespace = _to_str(document["namespace"], "namespace")

    if document.get("external_labels") is not None:
        cfg.external_labels = _to_str_map(document["external_labels"], "external_labels")

    # `wal: {}` enables the WAL with defaults, an absent or null key leaves it off
    if isinstance(document.get("wal"), Mapping):
        cfg.wal = _decode(WALConfig, document["wal"], "wal", _WAL_FIELDS)
    elif document.get("wal") is not None:
        raise ConfigLoadError("wal", f"expected mapping, got {_type_name(document['wal'])}")

    return cfg


def load_config(config_path: str) -> ExporterConfig:
    """
    Load an exporter configuration file.

    Args:
        config_path: Path to a YAML configuration file

    Returns:
        Decoded ExporterConfig (not yet validated)

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ConfigLoadError: If the file can't be parsed or decoded
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError("", f"failed to parse {config_path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigLoadError("", f"failed to read {config_path}: {e}") from e

    cfg = config_from_dict(data)
    logger.info(f"Loaded exporter configuration from {path}")
    return cfg


def load_and_validate_config(config_path: str) -> ExporterConfig:
    """
    Load and validate configuration, raising on errors.

    Args:
        config_path: Path to a YAML configuration file

    Returns:
        Validated ExporterConfig

    Raises:
        ConfigurationError: If the configuration is rejected
        FileNotFoundError: If the config file doesn't exist
    """
    cfg = load_config(config_path)
    result = check_config(cfg)

    if not result.valid:
        raise ConfigurationError(result.errors[0])

    for warning in result.warnings:
        logger.warning(f"Config warning: {warning}")

    return cfg
