# src/sparsim/simulation/__init__.py
from .exceptions import (
    NoPortsDefinedError,
    PortNodeOutOfRangeError,
    SingularMatrixError,
)
from .matrix import create_matrix, invert_matrix, lu_inverse, get_inverter
from .assembler import AdmittanceAssembler
from .solver import solve_s_parameters
from .results import FrequencyPoint, SweepResult
from .sweep import linear_frequencies, run_frequency_list, run_sweep
from .execution import SimulationOutcome, build_model, run_simulation, simulate_netlist

__all__ = [
    # Exceptions
    "NoPortsDefinedError",
    "PortNodeOutOfRangeError",
    "SingularMatrixError",
    # Matrix utilities
    "create_matrix",
    "invert_matrix",
    "lu_inverse",
    "get_inverter",
    # Core
    "AdmittanceAssembler",
    "solve_s_parameters",
    "FrequencyPoint",
    "SweepResult",
    "linear_frequencies",
    "run_frequency_list",
    "run_sweep",
    # Facade
    "SimulationOutcome",
    "build_model",
    "run_simulation",
    "simulate_netlist",
]
