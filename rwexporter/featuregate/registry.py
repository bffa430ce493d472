"""
Feature Gate Registry

Provides a process-wide registry of named boolean gates.
"""

import logging
import threading
from dataclasses import dataclass, replace
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


class DuplicateGateError(ValueError):
    """Raised when a gate ID is registered more than once."""


class UnknownGateError(ValueError):
    """Raised when a gate ID is not present in the registry."""


@dataclass(frozen=True)
class Gate:
    """Declaration of a named feature gate."""
    id: str
    enabled: bool = False
    description: str = ""


class GateRegistry:
    """
    Registry of feature gates.

    Gates are registered once and never overwritten. Their enabled state can
    be changed afterwards with apply().
    """

    def __init__(self):
        self._gates: dict[str, Gate] = {}
        self._lock = threading.Lock()

    def register(self, gate: Gate) -> None:
        """
        Register a gate.

        Args:
            gate: Gate declaration

        Raises:
            DuplicateGateError: If a gate with the same ID is already registered
        """
        if not gate.id:
            raise ValueError("feature gate ID can't be empty")

        with self._lock:
            if gate.id in self._gates:
                raise DuplicateGateError(f"attempted to add pre-existing gate {gate.id!r}")
            self._gates[gate.id] = gate

        logger.debug(f"Registered feature gate: {gate.id} (enabled={gate.enabled})")

    def must_register(self, gate: Gate) -> None:
        """Register a gate, failing loudly on a duplicate ID."""
        self.register(gate)

    def is_enabled(self, gate_id: str) -> bool:
        """Return whether a gate is enabled. Unknown gates are disabled."""
        with self._lock:
            gate = self._gates.get(gate_id)
        return gate.enabled if gate else False

    def apply(self, settings: Mapping[str, bool]) -> None:
        """
        Set the enabled state of registered gates.

        Args:
            settings: Mapping of gate ID to desired state

        Raises:
            UnknownGateError: If any ID is not registered; no gate is changed
        """
        with self._lock:
            unknown = sorted(gate_id for gate_id in settings if gate_id not in self._gates)
            if unknown:
                raise UnknownGateError(f"no such feature gate(s): {', '.join(unknown)}")

            for gate_id, enabled in settings.items():
                self._gates[gate_id] = replace(self._gates[gate_id], enabled=bool(enabled))

        for gate_id, enabled in settings.items():
            logger.info(f"Feature gate {gate_id} set to {bool(enabled)}")

    def get(self, gate_id: str) -> Optional[Gate]:
        """Get a gate by ID."""
        with self._lock:
            return self._gates.get(gate_id)

    def list(self) -> list[Gate]:
        """List all registered gates, sorted by ID."""
        with self._lock:
            return sorted(self._gates.values(), key=lambda g: g.id)


_global_registry = GateRegistry()


def get_registry() -> GateRegistry:
    """Get the process-wide gate registry."""
    return _global_registry


def parse_gate_flags(value: str) -> dict[str, bool]:
    """
    Parse a comma-separated list of gate toggles.

    A leading '+' or no prefix enables a gate, a leading '-' disables it.

    Example:
        parse_gate_flags("+a,-b,c") -> {"a": True, "b": False, "c": True}

    Raises:
        ValueError: If an entry has no gate ID
    """
    settings: dict[str, bool] = {}

    for raw in value.split(","):
        item = raw.strip()
        if not item:
            continue

        enabled = True
        if item[0] in "+-":
            enabled = item[0] == "+"
            item = item[1:].strip()

        if not item:
            raise ValueError(f"Invalid feature gate entry: {raw!r}")

        settings[item] = enabled

    return settings
