# src/sparsim/components/sparameter_blocks.py
"""
Black-box components described by scattering parameters: a fixed S-matrix
(SParameterBlock) and a tabulated, frequency-dependent one
(FrequencyDependentSParameterBlock), as loaded from inline netlist data or a
Touchstone file.

Both support one or two ports. A 1-port block is converted to an impedance and
stamped between its two nodes; a 2-port block is converted to a Y-matrix whose
ports are node 1 and node 2, each referenced to ground.
"""

import logging
from typing import List, Tuple

import numpy as np

from ..constants import MIN_IMPEDANCE_OHMS, PIVOT_EPSILON
from ..simulation.exceptions import SingularMatrixError
from ..simulation.matrix import invert_matrix
from .base import ComponentBase, register_component
from .capabilities import IAdmittanceStamp, IConnectivityProvider, provides
from .exceptions import ComponentError
from .parameters import FrequencyDependentSParameterParams, SParameterBlockParams
from .stamping import admittance_from_impedance, stamp_block, stamp_two_terminal


logger = logging.getLogger(__name__)


def s_to_y(s_matrix: np.ndarray, z0: float) -> np.ndarray:
    """
    Converts an N-port S-matrix referenced to a real `z0` into a Y-matrix:
    Y = (1/z0) (I - S) (I + S)^-1.

    Raises:
        SingularMatrixError: If I + S cannot be inverted.
    """
    s = np.asarray(s_matrix, dtype=np.complex128)
    identity = np.eye(s.shape[0], dtype=np.complex128)
    return (identity - s) @ invert_matrix(identity + s) / z0


def interpolate_s_matrix(frequencies: np.ndarray, s_matrices: np.ndarray, frequency: float) -> np.ndarray:
    """
    Linear interpolation of the real and imaginary parts of each S-matrix entry
    between the two bracketing table rows. Outside the table the first or last
    row is used unchanged.
    """
    f = np.asarray(frequencies, dtype=float)
    s = np.asarray(s_matrices, dtype=np.complex128)
    if frequency <= f[0]:
        return s[0].copy()
    if frequency >= f[-1]:
        return s[-1].copy()
    hi = int(np.searchsorted(f, frequency, side='right'))
    lo = hi - 1
    w = (frequency - f[lo]) / (f[hi] - f[lo])
    return s[lo] + (s[hi] - s[lo]) * w


def _stamp_one_port(component: ComponentBase, Y: np.ndarray, s11: complex, z0: float, frequency: float) -> None:
    denom = 1.0 - s11
    if abs(denom) < PIVOT_EPSILON:
        logger.debug(f"'{component.fqn}' has S11 ~ 1 at {frequency:.4e} Hz; treated as an open circuit.")
        return
    z = z0 * (1.0 + s11) / denom
    if abs(z) < MIN_IMPEDANCE_OHMS:
        z = complex(MIN_IMPEDANCE_OHMS, 0.0)
    node1, node2 = component.nodes
    stamp_two_terminal(Y, node1, node2, admittance_from_impedance(z))


def _stamp_s_matrix(component: 'SParameterBlockBase', Y: np.ndarray, s: np.ndarray, z0: float, frequency: float) -> None:
    expected = component.num_ports
    if s.shape != (expected, expected):
        raise ComponentError(
            component_fqn=component.fqn,
            details=f"S-matrix has shape {s.shape} but the block declares {expected} port(s).",
            frequency=frequency,
        )
    if expected == 1:
        _stamp_one_port(component, Y, complex(s[0, 0]), z0, frequency)
        return
    try:
        y_block = s_to_y(s, z0)
    except SingularMatrixError as e:
        raise ComponentError(
            component_fqn=component.fqn,
            details=f"I + S is singular, so the block has no admittance representation: {e.details}",
            frequency=frequency,
        ) from e
    stamp_block(Y, component.nodes, y_block)


class SParameterBlockBase(ComponentBase):
    """
    Shared behaviour of S-parameter blocks. Both kinds occupy two nodes; the
    number of ports comes from the S data.
    """

    @classmethod
    def declare_ports(cls) -> List[str]:
        return ['p1', 'p2']

    @property
    def num_ports(self) -> int:
        return self.params.num_ports

    def s_matrix_at(self, frequency: float) -> np.ndarray:
        raise NotImplementedError

    @provides(IAdmittanceStamp)
    class AdmittanceStamp:
        def stamp(self, component: 'SParameterBlockBase', Y: np.ndarray, frequency: float) -> None:
            _stamp_s_matrix(component, Y, component.s_matrix_at(frequency), component.params.z0, frequency)

    @provides(IConnectivityProvider)
    class ConnectivityProvider:
        """
        A 1-port block is a two-terminal element between its nodes. A 2-port block
        couples each of its nodes to ground and to each other.
        """
        def get_connectivity(self, component: 'SParameterBlockBase') -> List[Tuple[int, int]]:
            n1, n2 = component.nodes
            if component.num_ports == 1:
                return [(n1, n2)]
            return [(n1, 0), (n2, 0), (n1, n2)]


@register_component("SParameterBlock")
class SParameterBlock(SParameterBlockBase):
    """A fixed S-matrix, independent of frequency."""
    parameter_type = SParameterBlockParams

    def s_matrix_at(self, frequency: float) -> np.ndarray:
        return np.asarray(self.params.s_matrix, dtype=np.complex128)


@register_component("FrequencyDependentSParameterBlock")
class FrequencyDependentSParameterBlock(SParameterBlockBase):
    """A tabulated S-matrix, linearly interpolated between table frequencies."""
    parameter_type = FrequencyDependentSParameterParams

    def s_matrix_at(self, frequency: float) -> np.ndarray:
        return interpolate_s_matrix(self.params.frequencies, self.params.s_matrices, frequency)
