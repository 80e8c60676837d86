# --- src/sparsim/constants.py ---
import logging

from scipy import constants as _sc

logger = logging.getLogger(__name__)

# --- Numerical Constants for Simulation ---

#: Small conductance added to every diagonal entry of the nodal admittance matrix,
#: so that isolated or purely reactive islands do not make it structurally singular.
#: Value: 1e-12 Siemens.
GMIN: float = 1.0e-12 # Siemens

#: Smallest acceptable pivot magnitude during Gauss-Jordan elimination.
PIVOT_EPSILON: float = 1.0e-12

#: Impedances whose magnitude falls below this value are replaced by it before
#: conversion to admittance (an ideal short becomes a 1 pico-ohm resistor).
MIN_IMPEDANCE_OHMS: float = 1.0e-12 # Ohm

#: Threshold on |sin(theta)| below which an ideal line is at a resonant length
#: and its Y-parameters do not exist.
RESONANT_SINE_THRESHOLD: float = 1.0e-12

#: Threshold on |gamma*l| below which hyperbolic functions use their small-argument form.
SMALL_PROPAGATION_ARGUMENT: float = 1.0e-10

#: Determinant magnitude below which a 2x2 Z-matrix is treated as non-invertible.
MIN_DETERMINANT: float = 1.0e-15

#: Default port / S-parameter block reference impedance.
DEFAULT_PORT_IMPEDANCE_OHMS: float = 50.0 # Ohm

#: Conductor resistivity used when a microstrip element has no usable conductivity.
DEFAULT_RESISTIVITY_OHM_M: float = 1.0e-10 # Ohm*m

# --- Physical Constants ---

#: Speed of light in vacuum (m/s).
SPEED_OF_LIGHT: float = _sc.c

#: Vacuum permeability (H/m).
VACUUM_PERMEABILITY: float = _sc.mu_0

#: Characteristic impedance of free space (Ohm), sqrt(mu_0 / epsilon_0).
FREE_SPACE_IMPEDANCE: float = float((_sc.mu_0 / _sc.epsilon_0) ** 0.5)

logger.debug("Defined core constants: GMIN, PIVOT_EPSILON, MIN_IMPEDANCE_OHMS, physical constants")
