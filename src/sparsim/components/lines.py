# src/sparsim/components/lines.py
"""
Ideal lossless TEM lines in air: the two-port TransmissionLine and the four-port
CoupledLine (a symmetric pair described by its even and odd mode impedances).
"""

import logging
from typing import List

import numpy as np

from ..constants import RESONANT_SINE_THRESHOLD, SPEED_OF_LIGHT
from .base import ComponentBase, register_component
from .capabilities import IAdmittanceStamp, provides
from .parameters import CoupledLineParams, LineParams
from .stamping import stamp_block


logger = logging.getLogger(__name__)


def _theta(frequency: float, length: float) -> float:
    return 2.0 * np.pi * frequency / SPEED_OF_LIGHT * length


def line_y_block(z0: float, theta: float) -> np.ndarray:
    """
    2x2 Y-matrix of a lossless line of electrical length `theta`.
    The caller guarantees sin(theta) is not near zero.
    """
    s = np.sin(theta)
    c = np.cos(theta)
    y11 = -1j * c / (z0 * s)
    y12 = 1j / (z0 * s)
    return np.array([[y11, y12], [y12, y11]], dtype=np.complex128)


@register_component("TransmissionLine")
class TransmissionLine(ComponentBase):
    """Ideal lossless transmission line between `p1` and `p2`."""
    parameter_type = LineParams

    @classmethod
    def declare_ports(cls) -> List[str]:
        return ['p1', 'p2']

    @provides(IAdmittanceStamp)
    class AdmittanceStamp:
        def stamp(self, component: 'TransmissionLine', Y: np.ndarray, frequency: float) -> None:
            theta = _theta(frequency, component.params.length)
            if abs(np.sin(theta)) < RESONANT_SINE_THRESHOLD:
                # Multiple of a half wavelength (or DC): Y-parameters do not exist.
                logger.debug(f"'{component.fqn}' skipped at {frequency:.4e} Hz: sin(theta) ~ 0.")
                return
            stamp_block(Y, component.nodes, line_y_block(component.params.z0, theta))


@register_component("CoupledLine")
class CoupledLine(ComponentBase):
    """
    Ideal symmetric coupled line pair. Node order is (line 1 in, line 1 out,
    line 2 in, line 2 out). With Z0e == Z0o the pair reduces to two independent
    lines.
    """
    parameter_type = CoupledLineParams

    @classmethod
    def declare_ports(cls) -> List[str]:
        return ['p1', 'p2', 'p3', 'p4']

    @provides(IAdmittanceStamp)
    class AdmittanceStamp:
        def stamp(self, component: 'CoupledLine', Y: np.ndarray, frequency: float) -> None:
            theta = _theta(frequency, component.params.length)
            s = np.sin(theta)
            if abs(s) < RESONANT_SINE_THRESHOLD:
                logger.debug(f"'{component.fqn}' contributes a zero block at {frequency:.4e} Hz: sin(theta) ~ 0.")
                return
            cot = np.cos(theta) / s
            csc = 1.0 / s
            ye = 1.0 / component.params.z0e
            yo = 1.0 / component.params.z0o

            a = -1j * (ye + yo) * cot / 2.0
            b = 1j * (ye + yo) * csc / 2.0
            c = -1j * (ye - yo) * cot / 2.0
            d = 1j * (ye - yo) * csc / 2.0

            block = np.array([
                [a, b, c, d],
                [b, a, d, c],
                [c, d, a, b],
                [d, c, b, a],
            ], dtype=np.complex128)
            stamp_block(Y, component.nodes, block)
