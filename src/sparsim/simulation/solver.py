# src/sparsim/simulation/solver.py
"""
Multi-port S-parameter extraction from the nodal admittance matrix.

Each port p, at node n with reference impedance Zp, is modelled by one extra
unknown: the reflected wave b_p. With N nodes and P ports the augmented system
has size N + P:

- Row n-1 (KCL at the port node) gets the port's Norton conductance 1/Zp in
  column N+p.
- Row N+p states b_p = V_n - a_p, i.e. A[N+p, n-1] = 1 and A[N+p, N+p] = -1.

Exciting port j with a unit incident wave injects 2/Zj at row node_j - 1, and
the solution gives S[i, j] = x[N+i] - delta(i, j). The augmented matrix does not
depend on which port is excited, so it is inverted once per frequency and
applied to every excitation column.
"""
import logging
from typing import List

import numpy as np

from ..data_structures import CircuitModel, Port
from .assembler import AdmittanceAssembler
from .exceptions import NoPortsDefinedError, PortNodeOutOfRangeError
from .matrix import create_matrix, get_inverter

logger = logging.getLogger(__name__)


def check_ports(model: CircuitModel) -> None:
    """
    Verifies that the model can be solved at all.

    Raises:
        NoPortsDefinedError: If the model has no ports.
        PortNodeOutOfRangeError: If a port node is ground or beyond `num_nodes`.
    """
    if not model.ports:
        raise NoPortsDefinedError(circuit_name=model.name)
    for index, port in enumerate(model.ports):
        if port.node <= 0 or port.node > model.num_nodes:
            raise PortNodeOutOfRangeError(
                circuit_name=model.name, port_index=index, node=port.node, num_nodes=model.num_nodes
            )


def build_augmented_matrix(Y: np.ndarray, ports: List[Port]) -> np.ndarray:
    """Borders the nodal matrix with one wave equation per port."""
    n = Y.shape[0]
    p = len(ports)
    A = create_matrix(n + p, n + p)
    A[:n, :n] = Y
    for index, port in enumerate(ports):
        row = n + index
        node_row = port.node - 1
        A[row, node_row] = 1.0
        A[row, row] = -1.0
        A[node_row, row] = 1.0 / port.impedance
    return A


def build_excitations(num_nodes: int, ports: List[Port]) -> np.ndarray:
    """Right-hand sides for every port, one column per excited port."""
    p = len(ports)
    B = create_matrix(num_nodes + p, p)
    for j, port in enumerate(ports):
        B[port.node - 1, j] = 2.0 / port.impedance
    return B


def solve_s_parameters(model: CircuitModel, frequency: float, method: str = "gauss_jordan") -> np.ndarray:
    """
    Computes the P x P S-matrix of `model` at `frequency` Hz.

    Args:
        model: The circuit to solve.
        frequency: Analysis frequency in Hz.
        method: "gauss_jordan" (default) or "lu".

    Returns:
        A complex (P x P) array, S[i, j] being the wave leaving port i when port j
        is excited and every other port is matched.

    Raises:
        NoPortsDefinedError, PortNodeOutOfRangeError: Before any matrix work.
        SingularMatrixError: If the augmented system cannot be inverted.
        ComponentError: If a component stamp fails at this frequency.
    """
    check_ports(model)
    invert = get_inverter(method)

    Y = AdmittanceAssembler(model).assemble(frequency)
    ports = list(model.ports)
    n = model.num_nodes
    p = len(ports)

    A = build_augmented_matrix(Y, ports)
    A_inv = invert(A, frequency=frequency)
    X = A_inv @ build_excitations(n, ports)

    S = X[n:n + p, :] - np.eye(p, dtype=np.complex128)
    logger.debug(f"Solved {p}-port S-matrix at {frequency:.4e} Hz using '{method}'.")
    return S
