# src/sparsim/components/microstrip.py
"""
Microstrip components. Each stamp evaluates the closed-form models in
`sparsim.physics.microstrip` at the requested frequency and adds the resulting
admittances to the nodal matrix.
"""

import logging
from typing import List, Tuple

import numpy as np

from ..constants import MIN_DETERMINANT, MIN_IMPEDANCE_OHMS, SMALL_PROPAGATION_ARGUMENT
from ..physics import microstrip as ms
from .base import ComponentBase, register_component
from .capabilities import IAdmittanceStamp, provides
from .parameters import (
    MicrostripCoupledLinesParams,
    MicrostripLineParams,
    MicrostripOpenParams,
    MicrostripStepParams,
    MicrostripViaParams,
)
from .stamping import stamp_block, stamp_shunt, stamp_two_terminal


logger = logging.getLogger(__name__)

_SHORT_ADMITTANCE = 1.0 / MIN_IMPEDANCE_OHMS


def _hyperbolic(gl: complex) -> Tuple[complex, complex]:
    """(sinh, cosh) of gamma*l, using the small-argument form near zero."""
    if abs(gl) < SMALL_PROPAGATION_ARGUMENT:
        return gl, complex(1.0, 0.0)
    return complex(np.sinh(gl)), complex(np.cosh(gl))


@register_component("MicrostripLine")
class MicrostripLine(ComponentBase):
    """Lossy, dispersive microstrip line between `p1` and `p2`."""
    parameter_type = MicrostripLineParams

    @classmethod
    def declare_ports(cls) -> List[str]:
        return ['p1', 'p2']

    @provides(IAdmittanceStamp)
    class AdmittanceStamp:
        def stamp(self, component: 'MicrostripLine', Y: np.ndarray, frequency: float) -> None:
            p = component.params
            sub = p.substrate
            line = ms.line_parameters(p.width, sub.height, sub.er, sub.thickness, sub.tand,
                                      sub.resistivity, frequency)
            sinh_gl, cosh_gl = _hyperbolic(line.gamma * p.length)
            n1, n2 = component.nodes
            if sinh_gl == 0:
                # Zero electrical length: the line is a plain connection.
                stamp_two_terminal(Y, n1, n2, _SHORT_ADMITTANCE)
                return
            y11 = cosh_gl / sinh_gl / line.z0
            y12 = -1.0 / sinh_gl / line.z0
            stamp_block(Y, component.nodes, np.array([[y11, y12], [y12, y11]], dtype=np.complex128))


@register_component("MicrostripCoupledLines")
class MicrostripCoupledLines(ComponentBase):
    """
    Symmetric edge-coupled microstrip pair. Node order is (line 1 in, line 1 out,
    line 2 in, line 2 out).
    """
    parameter_type = MicrostripCoupledLinesParams

    @classmethod
    def declare_ports(cls) -> List[str]:
        return ['p1', 'p2', 'p3', 'p4']

    @provides(IAdmittanceStamp)
    class AdmittanceStamp:
        def stamp(self, component: 'MicrostripCoupledLines', Y: np.ndarray, frequency: float) -> None:
            p = component.params
            sub = p.substrate
            modes = ms.coupled_line_parameters(p.width, p.gap, sub.height, sub.er, sub.thickness,
                                               sub.tand, sub.resistivity, frequency)
            sinh_e, cosh_e = _hyperbolic(modes.even.gamma * p.length)
            sinh_o, cosh_o = _hyperbolic(modes.odd.gamma * p.length)

            n1, n2, n3, n4 = component.nodes
            if sinh_e == 0 or sinh_o == 0:
                stamp_two_terminal(Y, n1, n2, _SHORT_ADMITTANCE)
                stamp_two_terminal(Y, n3, n4, _SHORT_ADMITTANCE)
                return

            de = 0.5 / (modes.even.z0 * sinh_e)
            do = 0.5 / (modes.odd.z0 * sinh_o)
            y1 = de * cosh_e + do * cosh_o
            y2 = -de - do
            y3 = -de + do
            y4 = de * cosh_e - do * cosh_o

            block = np.array([
                [y1, y2, y3, y4],
                [y2, y1, y4, y3],
                [y3, y4, y1, y2],
                [y4, y3, y2, y1],
            ], dtype=np.complex128)
            stamp_block(Y, component.nodes, block)


@register_component("MicrostripStep")
class MicrostripStep(ComponentBase):
    """Step in width between a strip of width W1 (at `p1`) and W2 (at `p2`)."""
    parameter_type = MicrostripStepParams

    @classmethod
    def declare_ports(cls) -> List[str]:
        return ['p1', 'p2']

    @provides(IAdmittanceStamp)
    class AdmittanceStamp:
        def stamp(self, component: 'MicrostripStep', Y: np.ndarray, frequency: float) -> None:
            p = component.params
            sub = p.substrate
            z = ms.step_impedance_matrix(p.width1, p.width2, sub.height, sub.er, sub.thickness, frequency)
            if z is None:
                logger.debug(f"'{component.fqn}' skipped at {frequency:.4e} Hz: step model undefined.")
                return
            det = z[0, 0] * z[1, 1] - z[0, 1] * z[1, 0]
            if abs(det) < MIN_DETERMINANT:
                logger.debug(f"'{component.fqn}' skipped at {frequency:.4e} Hz: singular Z-matrix.")
                return
            y = np.array([[z[1, 1], -z[0, 1]], [-z[1, 0], z[0, 0]]], dtype=np.complex128) / det
            stamp_block(Y, component.nodes, y)


@register_component("MicrostripOpen")
class MicrostripOpen(ComponentBase):
    """Open end of a microstrip line, modelled as an end capacitance to ground."""
    parameter_type = MicrostripOpenParams

    @classmethod
    def declare_ports(cls) -> List[str]:
        return ['p1']

    @provides(IAdmittanceStamp)
    class AdmittanceStamp:
        def stamp(self, component: 'MicrostripOpen', Y: np.ndarray, frequency: float) -> None:
            p = component.params
            sub = p.substrate
            c_end = ms.open_end_capacitance(p.width, sub.height, sub.er, sub.thickness, frequency)
            stamp_shunt(Y, component.nodes[0], complex(0.0, 2.0 * np.pi * frequency * c_end))


@register_component("MicrostripVia")
class MicrostripVia(ComponentBase):
    """`count` identical plated vias in parallel from `p1` to ground."""
    parameter_type = MicrostripViaParams

    @classmethod
    def declare_ports(cls) -> List[str]:
        return ['p1']

    @provides(IAdmittanceStamp)
    class AdmittanceStamp:
        def stamp(self, component: 'MicrostripVia', Y: np.ndarray, frequency: float) -> None:
            p = component.params
            sub = p.substrate
            z = ms.via_impedance(p.diameter, sub.height, sub.thickness, sub.resistivity, frequency) / p.count
            stamp_shunt(Y, component.nodes[0], 1.0 / z)
