# tests/conftest.py
from dataclasses import dataclass
from typing import List

import numpy as np
import pytest

from sparsim.components.base import ComponentBase, register_component
from sparsim.components.capabilities import IAdmittanceStamp, provides
from sparsim.components.exceptions import ComponentError
from sparsim.components.lines import TransmissionLine
from sparsim.components.lumped import Capacitor, Inductor, Resistor
from sparsim.components.parameters import (
    CapacitorParams, InductorParams, LineParams, ResistorParams, SubstrateParams,
)
from sparsim.components.stamping import stamp_two_terminal
from sparsim.constants import SPEED_OF_LIGHT
from sparsim.data_structures import CircuitModel, Port


# --- Test-only component ---

@dataclass(frozen=True)
class FailingElementParams:
    resistance: float
    fail_at: float  # Hz


@register_component("TestFailingElement")
class FailingElement(ComponentBase):
    """A resistor that refuses to stamp at exactly one frequency."""
    parameter_type = FailingElementParams

    @classmethod
    def declare_ports(cls) -> List[str]:
        return ['p1', 'p2']

    @provides(IAdmittanceStamp)
    class AdmittanceStamp:
        def stamp(self, component: 'FailingElement', Y: np.ndarray, frequency: float) -> None:
            if frequency == component.params.fail_at:
                raise ComponentError(component_fqn=component.fqn, details="Injected failure.", frequency=frequency)
            n1, n2 = component.nodes
            stamp_two_terminal(Y, n1, n2, 1.0 / component.params.resistance)


# --- Model builders ---

@pytest.fixture
def one_port_load():
    """Factory for a single resistor to ground behind one port."""
    def _build(resistance: float, z0: float = 50.0) -> CircuitModel:
        return CircuitModel.from_parts(
            [Resistor("R1", [1, 0], ResistorParams(resistance))],
            [Port(1, z0, "P1")],
            name="load",
        )
    return _build


@pytest.fixture
def quarter_wave_length():
    """Factory: physical length of a quarter wavelength in air at a frequency."""
    def _length(frequency: float) -> float:
        return SPEED_OF_LIGHT / frequency / 4.0
    return _length


@pytest.fixture
def matched_line_model() -> CircuitModel:
    """A 50 Ohm line between two 50 Ohm ports."""
    return CircuitModel.from_parts(
        [TransmissionLine("TL1", [1, 2], LineParams(z0=50.0, length=0.037))],
        [Port(1, 50.0, "P1"), Port(2, 50.0, "P2")],
        name="matched_line",
    )


@pytest.fixture
def lossless_filter_model() -> CircuitModel:
    """A reactive pi network with a line in the series arm; lossless apart from GMIN."""
    return CircuitModel.from_parts(
        [
            Capacitor("C1", [1, 0], CapacitorParams(2.2e-12)),
            TransmissionLine("TL1", [1, 2], LineParams(z0=70.0, length=0.021)),
            Inductor("L1", [2, 3], InductorParams(4.7e-9)),
            Capacitor("C2", [3, 0], CapacitorParams(1.5e-12)),
        ],
        [Port(1, 50.0, "P1"), Port(3, 50.0, "P2")],
        name="pi_filter",
    )


@pytest.fixture
def fr4() -> SubstrateParams:
    return SubstrateParams(er=4.4, height=1.6e-3, conductivity=5.8e7, thickness=35e-6, tand=0.02)


@pytest.fixture
def failing_model():
    """Factory: a matched 50 Ohm load whose stamp raises at `fail_at` Hz."""
    def _build(fail_at: float) -> CircuitModel:
        return CircuitModel.from_parts(
            [FailingElement("X1", [1, 0], FailingElementParams(resistance=50.0, fail_at=fail_at))],
            [Port(1, 50.0, "P1")],
            name="flaky",
        )
    return _build
