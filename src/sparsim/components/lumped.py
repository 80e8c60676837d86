# src/sparsim/components/lumped.py
"""
Concrete two-terminal elements whose contribution is a single impedance between
their nodes: Resistor, Capacitor, Inductor, ComplexImpedance and the ideal
open/short stubs.

Each element computes `Z` at the requested frequency; `None` means an open
circuit. The shared two-terminal stamp then adds `1/Z`.
"""

import logging
from typing import List, Optional

import numpy as np

from ..constants import SPEED_OF_LIGHT
from .base import ComponentBase, register_component
from .capabilities import IAdmittanceStamp, provides
from .parameters import (
    CapacitorParams,
    ComplexImpedanceParams,
    InductorParams,
    LineParams,
    ResistorParams,
)
from .stamping import admittance_from_impedance, stamp_two_terminal


logger = logging.getLogger(__name__)


class TwoTerminalImpedance(ComponentBase):
    """
    Abstract base for elements described by one impedance between `p1` and `p2`.
    Subclasses implement `impedance(frequency)`.
    """

    @classmethod
    def declare_ports(cls) -> List[str]:
        return ['p1', 'p2']

    def impedance(self, frequency: float) -> Optional[complex]:
        raise NotImplementedError

    @provides(IAdmittanceStamp)
    class AdmittanceStamp:
        def stamp(self, component: 'TwoTerminalImpedance', Y: np.ndarray, frequency: float) -> None:
            z = component.impedance(frequency)
            if z is None:
                logger.debug(f"'{component.fqn}' is an open circuit at {frequency:.4e} Hz.")
                return
            node1, node2 = component.nodes
            stamp_two_terminal(Y, node1, node2, admittance_from_impedance(z))


@register_component("Resistor")
class Resistor(TwoTerminalImpedance):
    """Represents an ideal Resistor component."""
    parameter_type = ResistorParams

    def impedance(self, frequency: float) -> Optional[complex]:
        return complex(self.params.resistance, 0.0)


@register_component("Capacitor")
class Capacitor(TwoTerminalImpedance):
    """Represents an ideal Capacitor. Open at DC and when C is zero."""
    parameter_type = CapacitorParams

    def impedance(self, frequency: float) -> Optional[complex]:
        omega = 2.0 * np.pi * frequency
        c = self.params.capacitance
        if omega == 0 or c == 0:
            return None
        return complex(0.0, -1.0 / (omega * c))


@register_component("Inductor")
class Inductor(TwoTerminalImpedance):
    """Represents an ideal Inductor. A short at DC, clamped to the minimum impedance."""
    parameter_type = InductorParams

    def impedance(self, frequency: float) -> Optional[complex]:
        return complex(0.0, 2.0 * np.pi * frequency * self.params.inductance)


@register_component("ComplexImpedance")
class ComplexImpedance(TwoTerminalImpedance):
    """A fixed, frequency-independent impedance R + jX."""
    parameter_type = ComplexImpedanceParams

    def impedance(self, frequency: float) -> Optional[complex]:
        return complex(self.params.impedance)


def _electrical_length(frequency: float, length: float) -> float:
    """Electrical length (rad) of an ideal line in air."""
    return 2.0 * np.pi * frequency / SPEED_OF_LIGHT * length


@register_component("OpenStub")
class OpenStub(TwoTerminalImpedance):
    """Ideal open-circuited stub: Z = -j Z0 cot(beta l)."""
    parameter_type = LineParams

    def impedance(self, frequency: float) -> Optional[complex]:
        tan_theta = np.tan(_electrical_length(frequency, self.params.length))
        if tan_theta == 0:
            return None
        return complex(0.0, -self.params.z0 / tan_theta)


@register_component("ShortStub")
class ShortStub(TwoTerminalImpedance):
    """Ideal short-circuited stub: Z = j Z0 tan(beta l)."""
    parameter_type = LineParams

    def impedance(self, frequency: float) -> Optional[complex]:
        tan_theta = np.tan(_electrical_length(frequency, self.params.length))
        return complex(0.0, self.params.z0 * tan_theta)
