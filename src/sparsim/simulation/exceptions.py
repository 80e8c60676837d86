# src/sparsim/simulation/exceptions.py
"""
Defines custom, diagnosable exceptions specific to the solve and sweep phase.

All exceptions here inherit from `DiagnosableError`, so they can be caught by type
and always produce an actionable report. `NoPortsDefinedError` and
`PortNodeOutOfRangeError` are fatal: no frequency sample can be computed without
valid ports, so the sweep driver lets them propagate. `SingularMatrixError` is
fatal to a single solve only; the sweep driver degrades that sample.
"""
import numpy as np
from typing import Optional
from dataclasses import dataclass

from ..errors import DiagnosableError, format_diagnostic_report


@dataclass()
class SingularMatrixError(DiagnosableError, np.linalg.LinAlgError):
    """
    Raised when a matrix inversion finds no pivot with a magnitude above
    PIVOT_EPSILON.

    Inherits from `np.linalg.LinAlgError` as well, so numeric callers can catch it
    like any other linear algebra failure.
    """
    details: str
    frequency: Optional[float] = None

    def __str__(self):
        freq_str = f" at frequency {self.frequency:.4e} Hz" if self.frequency is not None else ""
        return f"Singular matrix detected{freq_str}: {self.details}"

    def get_diagnostic_report(self) -> str:
        """Generates the diagnostic report for a singular matrix error."""
        return format_diagnostic_report(
            error_type="Singular Matrix Encountered",
            details=self.details,
            suggestion="This is often caused by a component that exactly cancels a port's reference conductance, or by an S-parameter block with an eigenvalue of -1 at this frequency. Check component values near the reported frequency.",
            context={'frequency': f"{self.frequency:.4e} Hz" if self.frequency is not None else "N/A"}
        )


@dataclass()
class NoPortsDefinedError(DiagnosableError):
    """Raised when an S-parameter solve is requested for a circuit without ports."""
    circuit_name: str

    def __str__(self):
        return f"Circuit '{self.circuit_name}' defines no ports; S-parameters cannot be computed."

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="No Ports Defined",
            details=str(self),
            suggestion="Add at least one port line to the netlist, e.g. 'P1 1 50'.",
            context={'fqn': self.circuit_name}
        )


@dataclass()
class PortNodeOutOfRangeError(DiagnosableError):
    """Raised when a port references a node outside [1, num_nodes]."""
    circuit_name: str
    port_index: int
    node: int
    num_nodes: int

    def __str__(self):
        return (f"Port {self.port_index + 1} references node {self.node}, "
                f"which is out of bounds (1-{self.num_nodes}).")

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Port Node Out Of Range",
            details=str(self),
            suggestion="Ports must sit on a non-ground node that at least one component or port line references. Check the node number on the port line.",
            context={'fqn': self.circuit_name}
        )
