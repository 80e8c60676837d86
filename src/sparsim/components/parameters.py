# src/sparsim/components/parameters.py
"""
Typed, immutable parameter records, one per component kind.

Each record exposes `validate() -> List[str]`, returning human-readable problems
(an empty list means the record is valid). `ComponentBase` calls it once at
construction and turns any problem into a `ComponentError`.
"""
import math
from dataclasses import dataclass
from typing import List

import numpy as np

from ..constants import DEFAULT_PORT_IMPEDANCE_OHMS, DEFAULT_RESISTIVITY_OHM_M


def _finite(name: str, value: float, problems: List[str]) -> bool:
    if not math.isfinite(value):
        problems.append(f"'{name}' must be finite, got {value}.")
        return False
    return True


def _non_negative(name: str, value: float, problems: List[str]) -> None:
    if _finite(name, value, problems) and value < 0:
        problems.append(f"'{name}' must be non-negative, got {value}.")


def _positive(name: str, value: float, problems: List[str]) -> None:
    if _finite(name, value, problems) and value <= 0:
        problems.append(f"'{name}' must be > 0, got {value}.")


# --- Lumped elements ---

@dataclass(frozen=True)
class ResistorParams:
    resistance: float  # Ohm

    def validate(self) -> List[str]:
        problems: List[str] = []
        _non_negative("resistance", self.resistance, problems)
        return problems


@dataclass(frozen=True)
class CapacitorParams:
    capacitance: float  # F

    def validate(self) -> List[str]:
        problems: List[str] = []
        _non_negative("capacitance", self.capacitance, problems)
        return problems


@dataclass(frozen=True)
class InductorParams:
    inductance: float  # H

    def validate(self) -> List[str]:
        problems: List[str] = []
        _non_negative("inductance", self.inductance, problems)
        return problems


@dataclass(frozen=True)
class ComplexImpedanceParams:
    impedance: complex  # Ohm

    def validate(self) -> List[str]:
        z = complex(self.impedance)
        if not (math.isfinite(z.real) and math.isfinite(z.imag)):
            return [f"'impedance' must be finite, got {self.impedance}."]
        return []


# --- Ideal distributed elements ---

@dataclass(frozen=True)
class LineParams:
    """Ideal lossless line, open stub or short stub."""
    z0: float      # Ohm
    length: float  # m

    def validate(self) -> List[str]:
        problems: List[str] = []
        _positive("z0", self.z0, problems)
        _non_negative("length", self.length, problems)
        return problems


@dataclass(frozen=True)
class CoupledLineParams:
    z0e: float     # Ohm
    z0o: float     # Ohm
    length: float  # m

    def validate(self) -> List[str]:
        problems: List[str] = []
        _positive("z0e", self.z0e, problems)
        _positive("z0o", self.z0o, problems)
        _non_negative("length", self.length, problems)
        return problems


@dataclass(frozen=True)
class IdealCouplerParams:
    coupling: float                 # linear coupling coefficient k
    phase_deg: float                # phase of the coupled path
    z0: float = DEFAULT_PORT_IMPEDANCE_OHMS

    def validate(self) -> List[str]:
        problems: List[str] = []
        if _finite("coupling", self.coupling, problems) and not (0.0 <= self.coupling <= 1.0):
            problems.append(f"'coupling' must be within [0, 1], got {self.coupling}.")
        _finite("phase_deg", self.phase_deg, problems)
        _positive("z0", self.z0, problems)
        return problems


# --- Black-box S-parameter blocks ---

def _check_port_count(num_ports: int, problems: List[str]) -> None:
    if num_ports not in (1, 2):
        problems.append(f"Only 1-port and 2-port S-parameter blocks are supported, got {num_ports} port(s).")


@dataclass(frozen=True, eq=False)
class SParameterBlockParams:
    """A fixed S-matrix referenced to `z0`."""
    s_matrix: np.ndarray
    z0: float = DEFAULT_PORT_IMPEDANCE_OHMS

    @property
    def num_ports(self) -> int:
        return int(np.asarray(self.s_matrix).shape[0])

    def validate(self) -> List[str]:
        problems: List[str] = []
        s = np.asarray(self.s_matrix)
        if s.ndim != 2 or s.shape[0] != s.shape[1]:
            problems.append(f"'s_matrix' must be square, got shape {s.shape}.")
        else:
            _check_port_count(s.shape[0], problems)
        _positive("z0", self.z0, problems)
        return problems


@dataclass(frozen=True, eq=False)
class FrequencyDependentSParameterParams:
    """
    A tabulated S-matrix: `s_matrices[k]` applies at `frequencies[k]` (Hz).
    `source` records where the table came from, for diagnostics.
    """
    frequencies: np.ndarray
    s_matrices: np.ndarray
    z0: float = DEFAULT_PORT_IMPEDANCE_OHMS
    source: str = ""

    @property
    def num_ports(self) -> int:
        return int(np.asarray(self.s_matrices).shape[1])

    def validate(self) -> List[str]:
        problems: List[str] = []
        f = np.asarray(self.frequencies, dtype=float)
        s = np.asarray(self.s_matrices)
        if f.ndim != 1 or f.size == 0:
            problems.append("'frequencies' must be a non-empty 1D array.")
        elif np.any(np.diff(f) <= 0):
            problems.append("'frequencies' must be strictly increasing.")
        if s.ndim != 3 or s.shape[1] != s.shape[2]:
            problems.append(f"'s_matrices' must have shape (F, N, N), got {s.shape}.")
        else:
            if f.ndim == 1 and s.shape[0] != f.size:
                problems.append(f"'s_matrices' has {s.shape[0]} rows but there are {f.size} frequencies.")
            _check_port_count(s.shape[1], problems)
        _positive("z0", self.z0, problems)
        return problems


# --- Microstrip elements ---

@dataclass(frozen=True)
class SubstrateParams:
    """Substrate and metallisation shared by every microstrip element."""
    er: float                   # relative permittivity
    height: float               # m
    conductivity: float = 0.0   # S/m, 0 means "not given"
    thickness: float = 0.0      # m
    tand: float = 0.0           # loss tangent

    @property
    def resistivity(self) -> float:
        """Conductor resistivity in Ohm*m."""
        if self.conductivity > 0:
            return 1.0 / self.conductivity
        return DEFAULT_RESISTIVITY_OHM_M

    def validate(self) -> List[str]:
        problems: List[str] = []
        if _finite("er", self.er, problems) and self.er < 1.0:
            problems.append(f"'er' must be >= 1, got {self.er}.")
        _positive("height", self.height, problems)
        _non_negative("conductivity", self.conductivity, problems)
        _non_negative("thickness", self.thickness, problems)
        _non_negative("tand", self.tand, problems)
        return problems


@dataclass(frozen=True)
class MicrostripLineParams:
    width: float   # m
    length: float  # m
    substrate: SubstrateParams

    def validate(self) -> List[str]:
        problems: List[str] = []
        _positive("width", self.width, problems)
        _non_negative("length", self.length, problems)
        return problems + self.substrate.validate()


@dataclass(frozen=True)
class MicrostripCoupledLinesParams:
    width: float   # m
    length: float  # m
    gap: float     # m
    substrate: SubstrateParams

    def validate(self) -> List[str]:
        problems: List[str] = []
        _positive("width", self.width, problems)
        _non_negative("length", self.length, problems)
        _positive("gap", self.gap, problems)
        return problems + self.substrate.validate()


@dataclass(frozen=True)
class MicrostripStepParams:
    width1: float  # m
    width2: float  # m
    substrate: SubstrateParams

    def validate(self) -> List[str]:
        problems: List[str] = []
        _positive("width1", self.width1, problems)
        _positive("width2", self.width2, problems)
        return problems + self.substrate.validate()


@dataclass(frozen=True)
class MicrostripOpenParams:
    width: float  # m
    substrate: SubstrateParams

    def validate(self) -> List[str]:
        problems: List[str] = []
        _positive("width", self.width, problems)
        return problems + self.substrate.validate()


@dataclass(frozen=True)
class MicrostripViaParams:
    diameter: float  # m
    count: int
    substrate: SubstrateParams

    def validate(self) -> List[str]:
        problems: List[str] = []
        _positive("diameter", self.diameter, problems)
        if isinstance(self.count, bool) or not isinstance(self.count, int) or self.count < 1:
            problems.append(f"'count' must be a positive integer, got {self.count!r}.")
        problems.extend(self.substrate.validate())
        t = self.substrate.thickness
        if t <= 0 or (math.isfinite(self.diameter) and t > self.diameter / 2.0):
            problems.append(f"Via plating thickness must be within (0, diameter/2], got {t}.")
        return problems
