# src/sparsim/simulation/sweep.py
"""
Frequency sweep driver.

A sweep is a sequence of independent solves. Port problems are fatal and are
raised before the first sample. Any failure inside a single sample is logged,
recorded as a `FrequencyPoint` with `ok=False` and an all-zero S-matrix, and the
sweep moves on to the next frequency.
"""
import logging
from typing import Callable, Iterable, List, Optional

import numpy as np

from ..data_structures import CircuitModel
from .matrix import get_inverter
from .results import FrequencyPoint, SweepResult
from .solver import check_ports, solve_s_parameters

logger = logging.getLogger(__name__)

CancelCheck = Callable[[], bool]


def linear_frequencies(f_start: float, f_stop: float, n_points: int) -> np.ndarray:
    """
    Evenly spaced grid: f_start + k*step, with step = 0 for a single point and
    (f_stop - f_start)/(n_points - 1) otherwise.
    """
    if n_points < 1:
        raise ValueError(f"A sweep needs at least one point, got n_points={n_points}.")
    step = 0.0 if n_points == 1 else (f_stop - f_start) / (n_points - 1)
    return f_start + step * np.arange(n_points, dtype=float)


def _solve_point(model: CircuitModel, frequency: float, method: str) -> FrequencyPoint:
    try:
        s = solve_s_parameters(model, frequency, method=method)
        return FrequencyPoint(frequency=frequency, s_matrix=s)
    except Exception as e:
        logger.error(f"Solve failed at {frequency:.6e} Hz: {e}")
        p = model.num_ports
        return FrequencyPoint(
            frequency=frequency,
            s_matrix=np.zeros((p, p), dtype=np.complex128),
            ok=False,
            error=str(e),
        )


def run_frequency_list(
    model: CircuitModel,
    frequencies: Iterable[float],
    cancel_check: Optional[CancelCheck] = None,
    method: str = "gauss_jordan",
) -> SweepResult:
    """
    Solves `model` at each frequency in `frequencies` (Hz), in order.

    Args:
        model: The circuit to sweep.
        frequencies: Sample frequencies in Hz.
        cancel_check: Optional callable evaluated before every sample; when it
                      returns True the sweep stops and returns what it has.
        method: Matrix inversion method, "gauss_jordan" or "lu".

    Raises:
        NoPortsDefinedError, PortNodeOutOfRangeError: Before the first sample.
        ValueError: If `method` is not a known inversion method.
    """
    check_ports(model)
    get_inverter(method)
    freqs = [float(f) for f in frequencies]
    logger.info(
        f"Starting sweep of '{model.name}': {len(freqs)} point(s), "
        f"{model.num_ports} port(s), {model.num_nodes} node(s)."
    )

    points: List[FrequencyPoint] = []
    cancelled = False
    for f in freqs:
        if cancel_check is not None and cancel_check():
            logger.info(f"Sweep cancelled after {len(points)} of {len(freqs)} point(s).")
            cancelled = True
            break
        points.append(_solve_point(model, f, method))

    result = SweepResult(
        points=points,
        num_ports=model.num_ports,
        z0=model.ports[0].impedance,
        cancelled=cancelled,
    )
    failures = len(result.failed_points)
    if failures:
        logger.warning(f"Sweep finished with {failures} failed point(s) out of {len(points)}.")
    else:
        logger.info(f"Sweep finished: {len(points)} point(s) computed.")
    return result


def run_sweep(
    model: CircuitModel,
    f_start: float,
    f_stop: float,
    n_points: int,
    cancel_check: Optional[CancelCheck] = None,
    method: str = "gauss_jordan",
) -> SweepResult:
    """
    Linear sweep from `f_start` to `f_stop` (Hz) in `n_points` samples.

    Raises:
        ValueError: If `n_points` < 1.
        NoPortsDefinedError, PortNodeOutOfRangeError: Before the first sample.
    """
    frequencies = linear_frequencies(f_start, f_stop, n_points)
    return run_frequency_list(model, frequencies, cancel_check=cancel_check, method=method)
