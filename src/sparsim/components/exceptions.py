# src/sparsim/components/exceptions.py
"""
Defines the custom, diagnosable exceptions for the components subsystem.
"""
from dataclasses import dataclass
from typing import Optional

from ..errors import DiagnosableError, format_diagnostic_report

@dataclass()
class ComponentError(DiagnosableError):
    """
    The canonical, diagnosable exception for all component-related errors.

    Raised when a component is constructed with an invalid node list or parameter
    record, or when its stamp cannot be evaluated at a given frequency.
    """
    component_fqn: str
    details: str
    frequency: Optional[float] = None

    def __str__(self):
        freq_str = f" at {self.frequency:.4e} Hz" if self.frequency is not None else ""
        return f"Component '{self.component_fqn}'{freq_str}: {self.details}"

    def get_diagnostic_report(self) -> str:
        """Generates the diagnostic report for a component error."""
        return format_diagnostic_report(
            error_type="Component Error",
            details=self.details,
            suggestion="Check the component's node list and parameters against its netlist grammar (e.g., non-negative resistance, positive line impedance, a square S-matrix).",
            context={
                'fqn': self.component_fqn,
                'frequency': f"{self.frequency:.4e} Hz" if self.frequency is not None else "N/A (construction)"
            }
        )
