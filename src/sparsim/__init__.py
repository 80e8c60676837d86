# src/sparsim/__init__.py
import logging
from .log_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)
logger.info("SParSim package initialized.")

from .errors import SparSimError, NetlistBuildError, SimulationRunError
from .units import ureg, pint, Quantity, ADMITTANCE_DIMENSIONALITY, IMPEDANCE_DIMENSIONALITY
from .data_structures import CircuitModel, Port
# The simulation core must load before the component library, which depends on it.
from .simulation import (
    run_sweep,
    run_frequency_list,
    solve_s_parameters,
    run_simulation,
    simulate_netlist,
    SweepResult,
    FrequencyPoint,
)
from .components import COMPONENT_REGISTRY
from .parser import NetlistParser, RunConfigParser, read_touchstone, write_touchstone, parse_scaled_value
from .validation import ModelValidator

__all__ = [
    # Units
    "ureg", "pint", "Quantity",
    # Canonical dimensionalities
    "ADMITTANCE_DIMENSIONALITY", "IMPEDANCE_DIMENSIONALITY",
    # Data Structures
    "CircuitModel", "Port",
    # Components
    "COMPONENT_REGISTRY",
    # Parsing
    "NetlistParser", "RunConfigParser", "read_touchstone", "write_touchstone", "parse_scaled_value",
    # Validation
    "ModelValidator",
    # Simulation
    "run_sweep", "run_frequency_list", "solve_s_parameters", "run_simulation", "simulate_netlist",
    "SweepResult", "FrequencyPoint",
    # Top-Level Errors (Actionable Diagnostics)
    "SparSimError", "NetlistBuildError", "SimulationRunError",
]
