# src/sparsim/components/coupler.py

import logging
from typing import List

import numpy as np

from ..simulation.exceptions import SingularMatrixError
from .base import ComponentBase, register_component
from .capabilities import IAdmittanceStamp, provides
from .parameters import IdealCouplerParams
from .sparameter_blocks import s_to_y
from .stamping import stamp_block


logger = logging.getLogger(__name__)


def coupler_s_matrix(coupling: float, phase_deg: float) -> np.ndarray:
    """
    S-matrix of an ideal, matched, lossless 4-port coupler. Port 1 (index 0)
    transmits to port 2 and couples to port 4; port 3 is isolated.
    """
    t = np.sqrt(1.0 - coupling ** 2)
    k = coupling * np.exp(1j * np.deg2rad(phase_deg))
    s = np.zeros((4, 4), dtype=np.complex128)
    s[0, 1] = s[1, 0] = s[2, 3] = s[3, 2] = t
    s[0, 3] = s[3, 0] = s[1, 2] = s[2, 1] = k
    return s


@register_component("IdealCoupler")
class IdealCoupler(ComponentBase):
    """Ideal directional coupler, frequency independent."""
    parameter_type = IdealCouplerParams

    @classmethod
    def declare_ports(cls) -> List[str]:
        return ['p1', 'p2', 'p3', 'p4']

    @provides(IAdmittanceStamp)
    class AdmittanceStamp:
        def stamp(self, component: 'IdealCoupler', Y: np.ndarray, frequency: float) -> None:
            params = component.params
            s = coupler_s_matrix(params.coupling, params.phase_deg)
            try:
                y_block = s_to_y(s, params.z0)
            except SingularMatrixError:
                logger.warning(
                    f"Coupler '{component.fqn}' (k={params.coupling}, phase={params.phase_deg} deg) "
                    f"has a singular I + S; it contributes nothing."
                )
                return
            stamp_block(Y, component.nodes, y_block)
