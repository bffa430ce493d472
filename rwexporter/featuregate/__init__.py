"""Process-wide feature gates."""

from .registry import (
    DuplicateGateError,
    Gate,
    GateRegistry,
    UnknownGateError,
    get_registry,
    parse_gate_flags,
)

__all__ = [
    "DuplicateGateError",
    "Gate",
    "GateRegistry",
    "UnknownGateError",
    "get_registry",
    "parse_gate_flags",
]
