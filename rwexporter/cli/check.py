#!/usr/bin/env python3
"""
Config check CLI - Validate an exporter configuration before startup.

Usage:
    python -m rwexporter.cli.check --config exporter.yaml
    python -m rwexporter.cli.check -c exporter.yaml --feature-gates +exporter.prometheusremotewrite.PermissiveLabelSanitization
    python -m rwexporter.cli.check --list-gates
"""

import argparse
import sys
from typing import Optional

from ..config import ConfigurationError, check_config, load_config
from ..featuregate import get_registry, parse_gate_flags
from ..utils.logging import LogContext, get_logger, setup_logging

logger = get_logger("cli")


def print_gates() -> None:
    """Print registered feature gates."""
    for gate in get_registry().list():
        state = "enabled" if gate.enabled else "disabled"
        print(f"{gate.id}\t{state}\t{gate.description}")


def run_check(config_path: str, verbose: bool = False) -> int:
    """
    Load and validate a configuration file.

    Args:
        config_path: Path to YAML configuration file
        verbose: Print the decoded configuration summary

    Returns:
        Process exit code (0 valid, 1 invalid)
    """
    with LogContext(config_path=config_path):
        try:
            cfg = load_config(config_path)
        except (FileNotFoundError, ConfigurationError) as e:
            logger.error(f"Failed to load configuration: {e}")
            print(f"Error: {e}", file=sys.stderr)
            return 1

        result = check_config(cfg)

        for warning in result.warnings:
            logger.warning(f"Config warning: {warning}")

        if not result.valid:
            logger.error(f"Configuration rejected: {result.errors[0]}")
            print(f"Invalid configuration: {result.errors[0]}", file=sys.stderr)
            return 1

    if verbose:
        queue = cfg.remote_write_queue
        print(f"endpoint:        {cfg.http_client_settings.endpoint or '<unset>'}")
        print(f"namespace:       {cfg.namespace or '<none>'}")
        queue_desc = f"size={queue.queue_size} consumers={queue.num_consumers}" if queue.enabled else "disabled"
        print(f"queue:           {queue_desc}")
        print(f"multi_tenancy:   {'enabled' if cfg.multi_tenancy.enabled else 'disabled'}")
        print(f"wal:             {cfg.wal.directory if cfg.wal else 'disabled'}")
        print(f"sanitize_label:  {cfg.sanitize_label}")

    print("Configuration valid")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Validate a remote write exporter configuration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s -c exporter.yaml
  %(prog)s -c exporter.yaml -v --json-logs
  %(prog)s --list-gates
        """,
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "--feature-gates",
        type=str,
        default="",
        help="Comma-separated gate IDs to enable (+id or id) or disable (-id)",
    )
    parser.add_argument(
        "--list-gates",
        action="store_true",
        help="List registered feature gates and exit",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs as JSON",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    args = parser.parse_args(argv)

    setup_logging(
        level="DEBUG" if args.verbose else "WARNING",
        json_format=args.json_logs,
    )

    if args.feature_gates:
        try:
            get_registry().apply(parse_gate_flags(args.feature_gates))
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2

    if args.list_gates:
        print_gates()
        return 0

    if not args.config:
        parser.print_usage(sys.stderr)
        print("Error: --config is required", file=sys.stderr)
        return 2

    return run_check(args.config, verbose=args.verbose)


if __name__ == "__main__":
    sys.exit(main())
