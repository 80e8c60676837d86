# src/sparsim/components/stamping.py
"""
Low-level helpers that add element contributions to a nodal admittance matrix.

All helpers take 1-based node indices, with 0 meaning ground. Entries that would
land on a ground row or column are dropped.
"""
from typing import Optional, Sequence

import numpy as np

from ..constants import MIN_IMPEDANCE_OHMS


def admittance_from_impedance(z: Optional[complex]) -> complex:
    """
    Converts an impedance to an admittance. `None` means an open circuit (zero
    admittance); a near-zero impedance is replaced by MIN_IMPEDANCE_OHMS.
    """
    if z is None:
        return 0j
    if abs(z) < MIN_IMPEDANCE_OHMS:
        z = complex(MIN_IMPEDANCE_OHMS, 0.0)
    return 1.0 / complex(z)


def stamp_two_terminal(Y: np.ndarray, node1: int, node2: int, y: complex) -> None:
    """Standard two-terminal stamp: +y on both self terms, -y on both cross terms."""
    if node1 > 0:
        Y[node1 - 1, node1 - 1] += y
    if node2 > 0:
        Y[node2 - 1, node2 - 1] += y
    if node1 > 0 and node2 > 0:
        Y[node1 - 1, node2 - 1] -= y
        Y[node2 - 1, node1 - 1] -= y


def stamp_shunt(Y: np.ndarray, node: int, y: complex) -> None:
    """Admittance from `node` to ground."""
    if node > 0:
        Y[node - 1, node - 1] += y


def stamp_block(Y: np.ndarray, nodes: Sequence[int], block: np.ndarray) -> None:
    """
    Adds an N-port Y-block whose ports are referenced to ground. `block[i][j]` is
    added at (nodes[i], nodes[j]); rows or columns on ground are skipped.
    """
    block = np.asarray(block)
    for i, ni in enumerate(nodes):
        if ni <= 0:
            continue
        for j, nj in enumerate(nodes):
            if nj <= 0:
                continue
            Y[ni - 1, nj - 1] += block[i, j]
