# src/sparsim/components/__init__.py
import logging
logger = logging.getLogger(__name__)

# Import base first to define registry and decorator
from .base import ComponentBase, COMPONENT_REGISTRY, register_component
from .capabilities import IAdmittanceStamp, IConnectivityProvider, provides
from .exceptions import ComponentError
from .parameters import (
    ResistorParams,
    CapacitorParams,
    InductorParams,
    ComplexImpedanceParams,
    LineParams,
    CoupledLineParams,
    IdealCouplerParams,
    SParameterBlockParams,
    FrequencyDependentSParameterParams,
    SubstrateParams,
    MicrostripLineParams,
    MicrostripCoupledLinesParams,
    MicrostripStepParams,
    MicrostripOpenParams,
    MicrostripViaParams,
)
# Import concrete elements to trigger registration
from .lumped import Resistor, Capacitor, Inductor, ComplexImpedance, OpenStub, ShortStub
from .lines import TransmissionLine, CoupledLine
from .sparameter_blocks import SParameterBlock, FrequencyDependentSParameterBlock, s_to_y, interpolate_s_matrix
from .coupler import IdealCoupler
from .microstrip import (
    MicrostripLine,
    MicrostripCoupledLines,
    MicrostripStep,
    MicrostripOpen,
    MicrostripVia,
)

logger.info(f"Available component types: {list(COMPONENT_REGISTRY.keys())}")

__all__ = [
    "ComponentBase",
    "COMPONENT_REGISTRY",
    "register_component",
    "IAdmittanceStamp",
    "IConnectivityProvider",
    "provides",
    "ComponentError",
    # Parameter records
    "ResistorParams",
    "CapacitorParams",
    "InductorParams",
    "ComplexImpedanceParams",
    "LineParams",
    "CoupledLineParams",
    "IdealCouplerParams",
    "SParameterBlockParams",
    "FrequencyDependentSParameterParams",
    "SubstrateParams",
    "MicrostripLineParams",
    "MicrostripCoupledLinesParams",
    "MicrostripStepParams",
    "MicrostripOpenParams",
    "MicrostripViaParams",
    # Components
    "Resistor",
    "Capacitor",
    "Inductor",
    "ComplexImpedance",
    "OpenStub",
    "ShortStub",
    "TransmissionLine",
    "CoupledLine",
    "IdealCoupler",
    "SParameterBlock",
    "FrequencyDependentSParameterBlock",
    "MicrostripLine",
    "MicrostripCoupledLines",
    "MicrostripStep",
    "MicrostripOpen",
    "MicrostripVia",
    # Helpers
    "s_to_y",
    "interpolate_s_matrix",
]
