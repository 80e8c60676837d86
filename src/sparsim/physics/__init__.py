# src/sparsim/physics/__init__.py
from .microstrip import (
    LineParameters,
    CoupledLineParameters,
    line_parameters,
    coupled_line_parameters,
    open_end_capacitance,
    step_impedance_matrix,
    via_impedance,
)

__all__ = [
    "LineParameters",
    "CoupledLineParameters",
    "line_parameters",
    "coupled_line_parameters",
    "open_end_capacitance",
    "step_impedance_matrix",
    "via_impedance",
]
