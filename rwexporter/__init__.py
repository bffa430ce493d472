"""Configuration contract for the Prometheus remote write exporter."""

__version__ = "0.1.0"
