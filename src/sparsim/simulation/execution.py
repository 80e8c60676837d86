# src/sparsim/simulation/execution.py
"""
Public entry points for running simulations.

This module is a thin facade over the parser, the validator and the sweep driver.
It turns every diagnosable failure into one of two user-facing errors:

- `NetlistBuildError` when the configuration or netlist cannot be turned into a
  valid circuit model (schema errors, unreadable files, validation errors).
- `SimulationRunError` when the sweep itself cannot run (no ports, a port on a
  node that does not exist).

Per-frequency failures never reach this level; they are recorded in the
`SweepResult` as points with `ok=False`.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np

from ..data_structures import CircuitModel
from ..errors import DiagnosableError, NetlistBuildError, SimulationRunError, format_diagnostic_report
from ..log_config import setup_logging
from ..parser import NetlistParser, ParseSkip, RunConfigParser, write_touchstone
from ..validation import ModelValidator, SemanticValidationError, ValidationIssue, ValidationIssueLevel
from .results import SweepResult
from .sweep import CancelCheck, run_frequency_list, run_sweep

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationOutcome:
    """Everything a run produced: the model, the sweep, and what was skipped or flagged on the way."""
    model: CircuitModel
    result: SweepResult
    skipped_lines: List[ParseSkip] = field(default_factory=list)
    issues: List[ValidationIssue] = field(default_factory=list)
    touchstone_path: Optional[Path] = None


def _unexpected_error_report(stage: str, e: Exception) -> str:
    return format_diagnostic_report(
        error_type=f"An Unexpected {stage} Error Occurred ({type(e).__name__})",
        details=f"The simulator encountered an unexpected internal error: {e}",
        suggestion="This may be a bug. Review the traceback and consider filing a bug report.",
        context={}
    )


def build_model(
    netlist: Union[str, Path],
    name: Optional[str] = None,
    base_path: Optional[Union[str, Path]] = None,
) -> tuple:
    """
    Parses and validates a netlist.

    Args:
        netlist: A `Path` to a netlist file, or a `str` holding netlist text.
        name: Circuit name. Defaults to the file stem, or 'circuit' for text.
        base_path: Directory against which Touchstone paths in netlist text are
                   resolved. Ignored for files, which use their own directory.

    Returns:
        A tuple `(model, skipped_lines, issues)`.

    Raises:
        NetlistBuildError: If the file cannot be read or the model has validation errors.
    """
    try:
        parser = NetlistParser()
        if isinstance(netlist, Path):
            parsed = parser.parse_file(netlist, name=name)
        else:
            parsed = parser.parse_text(netlist, base_path=base_path, name=name or "circuit")

        issues = ModelValidator(parsed.model).validate()
        if any(issue.level == ValidationIssueLevel.ERROR for issue in issues):
            raise SemanticValidationError(issues)
        return parsed.model, parsed.skipped, issues

    except DiagnosableError as e:
        logger.error(f"A diagnosable error occurred while building the circuit: {e}")
        raise NetlistBuildError(e.get_diagnostic_report()) from e

    except Exception as e:
        logger.critical(f"An unexpected internal error occurred while building the circuit: {e}", exc_info=True)
        raise NetlistBuildError(_unexpected_error_report("Build", e)) from e


def _sweep(
    model: CircuitModel,
    frequencies: Optional[Sequence[float]] = None,
    linear: Optional[tuple] = None,
    cancel_check: Optional[CancelCheck] = None,
    method: str = "gauss_jordan",
) -> SweepResult:
    try:
        if linear is not None:
            f_start, f_stop, n_points = linear
            return run_sweep(model, f_start, f_stop, n_points, cancel_check=cancel_check, method=method)
        return run_frequency_list(model, frequencies, cancel_check=cancel_check, method=method)

    except DiagnosableError as e:
        logger.error(f"A diagnosable error occurred during simulation: {e}")
        raise SimulationRunError(e.get_diagnostic_report()) from e

    except Exception as e:
        logger.critical(f"An unexpected internal error occurred during simulation: {e}", exc_info=True)
        raise SimulationRunError(_unexpected_error_report("Simulation", e)) from e


def simulate_netlist(
    netlist: Union[str, Path],
    f_start: float,
    f_stop: float,
    n_points: int,
    cancel_check: Optional[CancelCheck] = None,
    method: str = "gauss_jordan",
    base_path: Optional[Union[str, Path]] = None,
) -> SimulationOutcome:
    """
    Parses, validates and sweeps a netlist over a linear frequency grid.

    Args:
        netlist: A `Path` to a netlist file, or a `str` holding netlist text.
        f_start, f_stop: Sweep limits in Hz.
        n_points: Number of samples (>= 1).
        cancel_check: Optional callable polled before every sample.
        method: Matrix inversion method, "gauss_jordan" or "lu".
        base_path: Directory for resolving Touchstone files named in netlist text.

    Raises:
        NetlistBuildError: If the netlist cannot be turned into a valid model.
        SimulationRunError: If the sweep cannot be run.
    """
    model, skipped, issues = build_model(netlist, base_path=base_path)
    result = _sweep(model, linear=(f_start, f_stop, n_points), cancel_check=cancel_check, method=method)
    return SimulationOutcome(model=model, result=result, skipped_lines=skipped, issues=issues)


def run_simulation(
    config: Union[str, Path, Dict[str, Any]],
    cancel_check: Optional[CancelCheck] = None,
) -> SimulationOutcome:
    """
    Runs a simulation described by a YAML run configuration.

    Args:
        config: Path to a YAML file, or an already-loaded configuration mapping.
                Relative paths in a mapping are resolved against the current directory.
        cancel_check: Optional callable polled before every sample.

    Returns:
        A `SimulationOutcome`. If the configuration names a Touchstone output
        file, it has been written and its path is set on the outcome.

    Raises:
        NetlistBuildError: For configuration, netlist or validation failures.
        SimulationRunError: If the sweep cannot be run or the output cannot be written.
    """
    try:
        config_parser = RunConfigParser()
        if isinstance(config, dict):
            run_config = config_parser.parse_dict(config)
        else:
            run_config = config_parser.parse_file(config)
    except DiagnosableError as e:
        logger.error(f"A diagnosable error occurred while reading the run configuration: {e}")
        raise NetlistBuildError(e.get_diagnostic_report()) from e

    if run_config.log_level:
        setup_logging(run_config.log_level)

    logger.info(f"--- Starting simulation run '{run_config.name}' ---")
    if run_config.netlist_path is not None:
        netlist: Union[str, Path] = run_config.netlist_path
    else:
        netlist = run_config.netlist_text
    model, skipped, issues = build_model(netlist, name=run_config.name, base_path=run_config.base_path)

    result = _sweep(
        model,
        frequencies=np.asarray(run_config.frequencies),
        linear=run_config.linear,
        cancel_check=cancel_check,
        method=run_config.method,
    )

    written = None
    if run_config.touchstone_path is not None:
        try:
            written = write_touchstone(result, run_config.touchstone_path, fmt=run_config.touchstone_format)
        except OSError as e:
            logger.error(f"Could not write Touchstone output: {e}")
            report = format_diagnostic_report(
                error_type="Output File Error",
                details=f"Could not write '{run_config.touchstone_path}': {e}",
                suggestion="Check that the output directory exists and is writable.",
                context={'source_file': run_config.touchstone_path}
            )
            raise SimulationRunError(report) from e

    logger.info(f"--- Simulation run '{run_config.name}' finished: {len(result)} point(s) ---")
    return SimulationOutcome(
        model=model, result=result, skipped_lines=skipped, issues=issues, touchstone_path=written
    )
