# src/sparsim/simulation/results.py
"""
Defines the formal, type-safe data contracts for sweep results.

A sweep produces one immutable `FrequencyPoint` per sample. A sample whose solve
failed keeps its slot, with an all-zero S-matrix, `ok=False` and the error text,
so the output always lines up with the requested frequency grid.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np


@dataclass(frozen=True)
class FrequencyPoint:
    """The S-matrix at one frequency."""
    frequency: float
    s_matrix: np.ndarray
    ok: bool = True
    error: Optional[str] = None


def s_parameter_series(frequencies: np.ndarray, s_matrices: np.ndarray) -> Dict[str, np.ndarray]:
    """
    Derived plotting series keyed `S{r}{c}_dB`, `S{r}{c}_ang`, `S{r}{c}_re` and
    `S{r}{c}_im` (1-based r, c), plus `frequency`. An exactly zero entry has a dB
    value of -inf.
    """
    s = np.asarray(s_matrices, dtype=np.complex128)
    series: Dict[str, np.ndarray] = {"frequency": np.asarray(frequencies, dtype=float)}
    if s.size == 0:
        return series
    num_ports = s.shape[1]
    with np.errstate(divide="ignore"):
        for r in range(num_ports):
            for c in range(num_ports):
                values = s[:, r, c]
                key = f"S{r + 1}{c + 1}"
                series[f"{key}_dB"] = 20.0 * np.log10(np.abs(values))
                series[f"{key}_ang"] = np.degrees(np.arctan2(values.imag, values.real))
                series[f"{key}_re"] = values.real.copy()
                series[f"{key}_im"] = values.imag.copy()
    return series


@dataclass(frozen=True)
class SweepResult:
    """
    The user-facing result of a frequency sweep.

    Attributes:
        points: One `FrequencyPoint` per computed sample, in sweep order.
        num_ports: Number of ports, P.
        z0: Reference impedance of the first port, in Ohm.
        cancelled: True if the sweep was stopped before its last sample.
    """
    points: List[FrequencyPoint]
    num_ports: int
    z0: float
    cancelled: bool = False
    _series: Dict[str, np.ndarray] = field(default_factory=dict, init=False, repr=False, compare=False)

    @property
    def frequencies(self) -> np.ndarray:
        return np.array([pt.frequency for pt in self.points], dtype=float)

    @property
    def s_parameters(self) -> np.ndarray:
        """All S-matrices stacked into a (F, P, P) array."""
        if not self.points:
            return np.zeros((0, self.num_ports, self.num_ports), dtype=np.complex128)
        return np.stack([pt.s_matrix for pt in self.points])

    @property
    def failed_points(self) -> List[FrequencyPoint]:
        return [pt for pt in self.points if not pt.ok]

    def __len__(self) -> int:
        return len(self.points)

    @property
    def series(self) -> Dict[str, np.ndarray]:
        """
        The derived series (see `s_parameter_series`) plus `n_ports` and `Z0`.
        Computed on first access.
        """
        if not self._series:
            data = s_parameter_series(self.frequencies, self.s_parameters)
            data["n_ports"] = np.array(self.num_ports)
            data["Z0"] = np.array(self.z0)
            self._series.update(data)
        return self._series
