# src/sparsim/simulation/assembler.py

import logging

import numpy as np

from ..components.capabilities import IAdmittanceStamp
from ..constants import GMIN
from ..data_structures import CircuitModel
from .matrix import create_matrix


logger = logging.getLogger(__name__)


class AdmittanceAssembler:
    """
    Builds the nodal admittance matrix of a `CircuitModel` at one frequency.

    The assembler is agnostic to component kinds: it asks every component for its
    `IAdmittanceStamp` capability and lets it add its own contribution. Row and
    column `k` correspond to node `k + 1`; ground has no row.

    After all stamps, GMIN is added to every diagonal entry so that floating or
    purely reactive nodes do not make the matrix structurally singular.
    """
    def __init__(self, model: CircuitModel):
        self.model: CircuitModel = model
        self.num_nodes: int = model.num_nodes

    def assemble(self, frequency: float) -> np.ndarray:
        """
        Returns the (num_nodes x num_nodes) complex admittance matrix at `frequency` Hz.

        Raises:
            ComponentError: Propagated from a component whose stamp cannot be evaluated.
        """
        Y = create_matrix(self.num_nodes, self.num_nodes)

        for comp in self.model.components:
            stamp = comp.get_capability(IAdmittanceStamp)
            if stamp is None:
                logger.warning(
                    f"Component '{comp.fqn}' of type '{comp.component_type}' does not provide "
                    f"IAdmittanceStamp; it is ignored."
                )
                continue
            stamp.stamp(comp, Y, frequency)

        Y[np.diag_indices(self.num_nodes)] += GMIN
        logger.debug(f"Assembled {self.num_nodes}x{self.num_nodes} Y-matrix at {frequency:.4e} Hz.")
        return Y
