# src/sparsim/physics/microstrip.py
"""
Closed-form microstrip models.

Every function here is pure: SI inputs (metres, Hz, Ohm*m), SI outputs, no state.
The models follow the classic closed-form literature:

- Quasi-static line impedance and effective permittivity: Hammerstad & Jensen,
  with the strip thickness correction.
- Dispersion of the effective permittivity: Kirschning & Jansen. The impedance is
  scaled by sqrt(eps_eff / eps_eff(f)).
- Coupled lines: Kirschning & Jansen even/odd quasi-static and dispersion models.
- Losses: Hammerstad conductor loss (skin effect, current distribution and
  roughness factors) plus dielectric loss.
- Open end: Kirschning, Jansen & Koster end-extension.
- Step in width: series-inductance / shunt-capacitance model.
- Via hole: DC resistance with skin-effect scaling plus a closed-form inductance.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from ..constants import FREE_SPACE_IMPEDANCE, SPEED_OF_LIGHT, VACUUM_PERMEABILITY

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LineParameters:
    """Propagation characteristics of a single microstrip mode at one frequency."""
    z0: float      # characteristic impedance, Ohm
    ereff: float   # effective relative permittivity
    alpha: float   # attenuation constant, Np/m
    beta: float    # phase constant, rad/m

    @property
    def gamma(self) -> complex:
        return complex(self.alpha, self.beta)


@dataclass(frozen=True)
class CoupledLineParameters:
    even: LineParameters
    odd: LineParameters


# --- Hammerstad & Jensen helpers ---

def hammerstad_ab(u: float, er: float) -> Tuple[float, float]:
    """Returns the (a, b) exponents of the Hammerstad permittivity formula."""
    a = (1.0
         + np.log((u ** 4 + (u / 52.0) ** 2) / (u ** 4 + 0.432)) / 49.0
         + np.log(1.0 + (u / 18.1) ** 3) / 18.7)
    b = 0.564 * ((er - 0.9) / (er + 3.0)) ** 0.053
    return float(a), float(b)


def hammerstad_er(u: float, er: float) -> float:
    """Quasi-static effective permittivity of a zero-thickness strip of width ratio u."""
    a, b = hammerstad_ab(u, er)
    return float((er + 1.0) / 2.0 + (er - 1.0) / 2.0 * (1.0 + 10.0 / u) ** (-a * b))


def hammerstad_zl(u: float) -> float:
    """Impedance of a strip of width ratio u in a homogeneous air medium."""
    fu = 6.0 + (2.0 * np.pi - 6.0) * np.exp(-((30.666 / u) ** 0.7528))
    return float(FREE_SPACE_IMPEDANCE / (2.0 * np.pi) * np.log(fu / u + np.sqrt(1.0 + (2.0 / u) ** 2)))


def quasi_static(width: float, height: float, thickness: float, er: float) -> Tuple[float, float]:
    """
    Hammerstad & Jensen quasi-static model with strip thickness correction.

    Returns:
        (Z, eps_eff): characteristic impedance in Ohm and effective permittivity.
    """
    u = width / height
    t = thickness / height

    if t != 0:
        coth = 1.0 / np.tanh(np.sqrt(6.517 * u))
        du1 = t / np.pi * np.log(1.0 + 4.0 * np.e / t / coth ** 2)
    else:
        du1 = 0.0
    du = du1 * (1.0 + 1.0 / np.cosh(np.sqrt(er - 1.0))) / 2.0
    u1 = u + du1
    ur = u + du

    zr = hammerstad_zl(ur)
    z1 = hammerstad_zl(u1)
    e = hammerstad_er(ur, er)

    z = zr / np.sqrt(e)
    e = e * (z1 / zr) ** 2
    return float(z), float(e)


# --- Kirschning & Jansen dispersion ---

def normalized_frequency(frequency: float, height: float) -> float:
    """f*h expressed in GHz*mm."""
    return frequency * height / 1e6


def kirschning_er(u: float, fn: float, er: float, ereff: float) -> float:
    """Dispersive effective permittivity at normalized frequency fn (GHz*mm)."""
    p1 = (0.27488 + (0.6315 + 0.525 / (1.0 + 0.0157 * fn) ** 20) * u
          - 0.065683 * np.exp(-8.7513 * u))
    p2 = 0.33622 * (1.0 - np.exp(-0.03442 * er))
    p3 = 0.0363 * np.exp(-4.6 * u) * (1.0 - np.exp(-((fn / 38.7) ** 4.97)))
    p4 = 1.0 + 2.751 * (1.0 - np.exp(-((er / 15.916) ** 8)))
    p = p1 * p2 * ((0.1844 + p3 * p4) * fn) ** 1.5763
    return float(er - (er - ereff) / (1.0 + p))


def dispersion(width: float, height: float, er: float, z: float, ereff: float,
               frequency: float) -> Tuple[float, float]:
    """
    Applies Kirschning dispersion to a quasi-static (Z, eps_eff) pair.

    Returns:
        (Z(f), eps_eff(f))
    """
    u = width / height
    fn = normalized_frequency(frequency, height)
    ereff_f = kirschning_er(u, fn, er, ereff)
    z_f = z * np.sqrt(ereff / ereff_f)
    return float(z_f), ereff_f


# --- Losses ---

def loss(width: float, thickness: float, er: float, rho: float, roughness: float,
         tand: float, z1: float, z2: float, ereff: float, frequency: float) -> Tuple[float, float]:
    """
    Hammerstad conductor and dielectric attenuation in Np/m.

    `z1` is the impedance of the mode being evaluated and `z2` that of its partner
    mode (equal to `z1` for a single line). Conductor loss is only evaluated for
    a strip of non-zero thickness.
    """
    ac = 0.0
    ad = 0.0
    if frequency <= 0:
        return ac, ad

    if thickness != 0:
        rs = np.sqrt(np.pi * frequency * VACUUM_PERMEABILITY * rho)
        ds = rho / rs
        ki = np.exp(-1.2 * ((z1 + z2) / 2.0 / FREE_SPACE_IMPEDANCE) ** 0.7)
        kr = 1.0 + 2.0 / np.pi * np.arctan(1.4 * (roughness / ds) ** 2)
        ac = float(rs / (z1 * width) * ki * kr)

    if er != 1.0:
        l0 = SPEED_OF_LIGHT / frequency
        ad = float(np.pi * er / (er - 1.0) * (ereff - 1.0) / np.sqrt(ereff) * tand / l0)
    return ac, ad


def _phase_constant(ereff: float, frequency: float) -> float:
    return float(np.sqrt(ereff) * 2.0 * np.pi * frequency / SPEED_OF_LIGHT)


def line_parameters(width: float, height: float, er: float, thickness: float,
                    tand: float, rho: float, frequency: float) -> LineParameters:
    """Full single-line model: quasi-static, dispersion and loss at `frequency`."""
    z, e = quasi_static(width, height, thickness, er)
    z_f, e_f = dispersion(width, height, er, z, e, frequency)
    ac, ad = loss(width, thickness, er, rho, 0.0, tand, z, z, e, frequency)
    params = LineParameters(z0=z_f, ereff=e_f, alpha=ac + ad, beta=_phase_constant(e_f, frequency))
    logger.debug(f"Microstrip W={width:.4g} m at {frequency:.4e} Hz: {params}")
    return params


# --- Coupled lines (Kirschning & Jansen) ---

def coupled_quasi_static(width: float, height: float, gap: float, thickness: float,
                         er: float) -> Tuple[float, float, float, float]:
    """
    Even/odd quasi-static impedances and permittivities of a symmetric coupled pair.

    Returns:
        (Z_even, Z_odd, eps_even, eps_odd)
    """
    u = width / height
    g = gap / height

    ue = uo = u
    if thickness != 0.0 and gap > 10.0 * (2.0 * thickness):
        dw = 0.0
        if u >= 1.0 / np.pi / 2.0 and 1.0 / np.pi / 2.0 > 2.0 * thickness / height:
            dw = thickness * (1.0 + np.log(2.0 * height / thickness)) / np.pi
        elif width > 2.0 * thickness:
            dw = thickness * (1.0 + np.log(4.0 * np.pi * width / thickness)) / np.pi
        dt = 2.0 * thickness * height / gap / er
        we = width + dw * (1.0 - 0.5 * np.exp(-0.69 * dw / dt))
        wo = we + dt
        ue = we / height
        uo = wo / height

    # Even mode permittivity
    v = ue * (20.0 + g ** 2) / (10.0 + g ** 2) + g * np.exp(-g)
    ereff_e = hammerstad_er(v, er)

    # Odd mode permittivity
    ereff = hammerstad_er(uo, er)
    d = 0.593 + 0.694 * np.exp(-0.562 * uo)
    bo = 0.747 * er / (0.15 + er)
    co = bo - (bo - 0.207) * np.exp(-0.414 * uo)
    ao = 0.7287 * (ereff - (er + 1.0) / 2.0) * (1.0 - np.exp(-0.179 * uo))
    ereff_o = ((er + 1.0) / 2.0 + ao - ereff) * np.exp(-co * g ** d) + ereff

    zl1 = hammerstad_zl(u) / np.sqrt(ereff)

    # Even mode impedance
    q1 = 0.8695 * ue ** 0.194
    q2 = 1.0 + 0.7519 * g + 0.189 * g ** 2.31
    q3 = (0.1975 + (16.6 + (8.4 / g) ** 6) ** -0.387
          + np.log(g ** 10 / (1.0 + (g / 3.4) ** 10)) / 241.0)
    q4 = q1 / q2 * 2.0 / (np.exp(-g) * ue ** q3 + (2.0 - np.exp(-g)) * ue ** -q3)
    z_e = np.sqrt(ereff / ereff_e) * zl1 / (1.0 - zl1 * np.sqrt(ereff) * q4 / FREE_SPACE_IMPEDANCE)

    # Odd mode impedance
    q5 = 1.794 + 1.14 * np.log(1.0 + 0.638 / (g + 0.517 * g ** 2.43))
    q6 = (0.2305 + np.log(g ** 10 / (1.0 + (g / 5.8) ** 10)) / 281.3
          + np.log(1.0 + 0.598 * g ** 1.154) / 5.1)
    q7 = (10.0 + 190.0 * g ** 2) / (1.0 + 82.3 * g ** 3)
    q8 = np.exp(-6.5 - 0.95 * np.log(g) - (g / 0.15) ** 5)
    q9 = np.log(q7) * (q8 + 1.0 / 16.5)
    q10 = (q2 * q4 - q5 * np.exp(np.log(uo) * q6 * uo ** -q9)) / q2
    z_o = np.sqrt(ereff / ereff_o) * zl1 / (1.0 - zl1 * np.sqrt(ereff) * q10 / FREE_SPACE_IMPEDANCE)

    return float(z_e), float(z_o), float(ereff_e), float(ereff_o)


def coupled_dispersion(width: float, height: float, gap: float, thickness: float, er: float,
                       z_e: float, z_o: float, ereff_e: float, ereff_o: float,
                       frequency: float) -> Tuple[float, float, float, float]:
    """
    Even/odd Kirschning dispersion.

    Returns:
        (Z_even(f), Z_odd(f), eps_even(f), eps_odd(f))
    """
    u = width / height
    g = gap / height

    if thickness > 0.0:
        b = 2.0 * np.pi * width if u < 0.1592 else height
        dw = thickness * (1.0 + np.log(2.0 * b / thickness)) / np.pi
        dt = thickness / (er * g)
        ue = (width + dw * (1.0 - 0.5 * np.exp(-0.69 * dw / dt))) / height
        uo = ue + dt / height
    else:
        ue = uo = u

    fn = normalized_frequency(frequency, height)

    # Even mode permittivity
    p1 = (0.27488 + (0.6315 + 0.525 / (1.0 + 0.0157 * fn) ** 20) * ue
          - 0.065683 * np.exp(-8.7513 * ue))
    p2 = 0.33622 * (1.0 - np.exp(-0.03442 * er))
    p3 = 0.0363 * np.exp(-4.6 * ue) * (1.0 - np.exp(-((fn / 38.7) ** 4.97)))
    p4 = 1.0 + 2.751 * (1.0 - np.exp(-((er / 15.916) ** 8)))
    p5 = 0.334 * np.exp(-3.3 * (er / 15.0) ** 3) + 0.746
    p6 = p5 * np.exp(-((fn / 18.0) ** 0.368))
    p7 = 1.0 + 4.069 * p6 * g ** 0.479 * np.exp(-1.347 * g ** 0.595 - 0.17 * g ** 2.5)
    fe = p1 * p2 * ((p3 * p4 + 0.1844 * p7) * fn) ** 1.5763
    ereff_e_f = er - (er - ereff_e) / (1.0 + fe)

    # Odd mode permittivity
    p1 = (0.27488 + (0.6315 + 0.525 / (1.0 + 0.0157 * fn) ** 20) * uo
          - 0.065683 * np.exp(-8.7513 * uo))
    p3 = 0.0363 * np.exp(-4.6 * uo) * (1.0 - np.exp(-((fn / 38.7) ** 4.97)))
    p8 = 0.7168 * (1.0 + 1.076 / (1.0 + 0.0576 * (er - 1.0)))
    p9 = p8 - 0.7913 * (1.0 - np.exp(-((fn / 20.0) ** 1.424))) * np.arctan(2.481 * (er / 8.0) ** 0.946)
    p10 = 0.242 * (er - 1.0) ** 0.55
    p11 = 0.6366 * (np.exp(-0.3401 * fn) - 1.0) * np.arctan(1.263 * (uo / 3.0) ** 1.629)
    p12 = p9 + (1.0 - p9) / (1.0 + 1.183 * uo ** 1.376)
    p13 = 1.695 * p10 / (0.414 + 1.605 * p10)
    p14 = 0.8928 + 0.1072 * (1.0 - np.exp(-0.42 * (fn / 20.0) ** 3.215))
    p15 = abs(1.0 - 0.8928 * (1.0 + p11) * np.exp(-p13 * g ** 1.092) * p12 / p14)
    fo = p1 * p2 * ((p3 * p4 + 0.1844) * fn * p15) ** 1.5763
    ereff_o_f = er - (er - ereff_o) / (1.0 + fo)

    # Even mode impedance
    q11 = 0.893 * (1.0 - 0.3 / (1.0 + 0.7 * (er - 1.0)))
    t = (fn / 20.0) ** 4.91
    q12 = 2.121 * t / (1.0 + q11 * t) * np.exp(-2.87 * g) * g ** 0.902
    q13 = 1.0 + 0.038 * (er / 8.0) ** 5.1
    t = (er / 15.0) ** 4
    q14 = 1.0 + 1.203 * t / (1.0 + t)
    q15 = (1.887 * np.exp(-1.5 * g ** 0.84) * g ** q14
           / (1.0 + 0.41 * (fn / 15.0) ** 3 * u ** (2.0 / q13) / (0.125 + u ** (1.626 / q13))))
    q16 = q15 * (1.0 + 9.0 / (1.0 + 0.403 * (er - 1.0) ** 2))
    q17 = 0.394 * (1.0 - np.exp(-1.47 * (u / 7.0) ** 0.672)) * (1.0 - np.exp(-4.25 * (fn / 20.0) ** 1.87))
    q18 = 0.61 * (1.0 - np.exp(-2.31 * (u / 8.0) ** 1.593)) / (1.0 + 6.544 * g ** 4.17)
    q19 = 0.21 * g ** 4 / (1.0 + 0.18 * g ** 4.9) / (1.0 + 0.1 * u ** 2) / (1.0 + (fn / 24.0) ** 3)
    q20 = q19 * (0.09 + 1.0 / (1.0 + 0.1 * (er - 1.0) ** 2.7))
    t = u ** 2.5
    q21 = abs(1.0 - 42.54 * g ** 0.133 * np.exp(-0.812 * g) * t / (1.0 + 0.033 * t))

    # The single-line impedance dispersion has exponent q0 = 1.
    q0 = 1.0
    ereff_f = kirschning_er(u, fn, er, ereff_e)
    re = (fn / 28.843) ** 12
    qe = 0.016 + (0.0514 * er * q21) ** 4.524
    pe = 4.766 * np.exp(-3.228 * u ** 0.641)
    t = (er - 1.0) ** 6
    de = (5.086 * qe * re / (0.3838 + 0.386 * qe) * np.exp(-22.2 * u ** 1.92)
          / (1.0 + 1.2992 * re) * t / (1.0 + 10.0 * t))
    ce = (1.0 + 1.275 * (1.0 - np.exp(-0.004625 * pe * er ** 1.674 * (fn / 18.365) ** 2.745))
          - q12 + q16 - q17 + q18 + q20)
    z_e_f = z_e * ((0.9408 * ereff_f ** ce - 0.9603)
                   / ((0.9408 - de) * ereff_e ** ce - 0.9603)) ** q0

    # Odd mode impedance
    ereff_f = kirschning_er(u, fn, er, ereff_o)
    zl_f = z_o * np.sqrt(ereff_o / ereff_f)
    q29 = 15.16 / (1.0 + 0.196 * (er - 1.0) ** 2)
    t = (er - 1.0) ** 2
    q25 = 0.3 * fn ** 2 / (10.0 + fn ** 2) * (1.0 + 2.333 * t / (5.0 + t))
    t = ((er - 1.0) / 13.0) ** 12
    q26 = 30.0 - 22.2 * t / (1.0 + 3.0 * t) - q29
    t = (er - 1.0) ** 1.5
    q27 = 0.4 * g ** 0.84 * (1.0 + 2.5 * t / (5.0 + t))
    t = (er - 1.0) ** 3
    q28 = 0.149 * t / (94.5 + 0.038 * t)
    q22 = 0.925 * (fn / q26) ** 1.536 / (1.0 + 0.3 * (fn / 30.0) ** 1.536)
    q23 = 1.0 + 0.005 * fn * q27 / (1.0 + 0.812 * (fn / 15.0) ** 1.9) / (1.0 + 0.025 * u ** 2)
    t = u ** 0.894
    q24 = 2.506 * q28 * t / (3.575 + t) * ((1.0 + 1.3 * u) * fn / 99.25) ** 4.29
    z_o_f = zl_f + (z_o * (ereff_o_f / ereff_o) ** q22 - zl_f * q23) / (1.0 + q24 + (0.46 * g) ** 2.2 * q25)

    return float(z_e_f), float(z_o_f), float(ereff_e_f), float(ereff_o_f)


def coupled_line_parameters(width: float, gap: float, height: float, er: float,
                            thickness: float, tand: float, rho: float,
                            frequency: float) -> CoupledLineParameters:
    """Even and odd mode propagation characteristics of a symmetric coupled pair."""
    z_e, z_o, e_e, e_o = coupled_quasi_static(width, height, gap, thickness, er)
    z_e_f, z_o_f, e_e_f, e_o_f = coupled_dispersion(
        width, height, gap, thickness, er, z_e, z_o, e_e, e_o, frequency
    )
    ac_e, ad_e = loss(width, thickness, er, rho, 0.0, tand, z_e, z_o, e_e, frequency)
    ac_o, ad_o = loss(width, thickness, er, rho, 0.0, tand, z_o, z_e, e_o, frequency)
    # Odd mode currents crowd at the inner edges.
    ac_o *= 1.2

    return CoupledLineParameters(
        even=LineParameters(z0=z_e_f, ereff=e_e_f, alpha=ac_e + ad_e, beta=_phase_constant(e_e_f, frequency)),
        odd=LineParameters(z0=z_o_f, ereff=e_o_f, alpha=ac_o + ad_o, beta=_phase_constant(e_o_f, frequency)),
    )


# --- Discontinuities ---

def open_end_extension(width: float, height: float, er: float, ereff_f: float) -> float:
    """Kirschning, Jansen & Koster equivalent length extension of an open end, normalized to h."""
    w_h = width / height
    q6 = ereff_f ** 0.81
    q7 = w_h ** 0.8544
    q1 = 0.434907 * (q6 + 0.26) / (q6 - 0.189) * (q7 + 0.236) / (q7 + 0.87)
    q2 = w_h ** 0.371 / (2.358 * er + 1.0) + 1.0
    q3 = np.arctan(0.084 * w_h ** (1.9413 / q2)) * 0.5274 / ereff_f ** 0.9236 + 1.0
    q4 = 0.0377 * (6.0 - 5.0 * np.exp(0.036 * (1.0 - er))) * np.arctan(0.067 * w_h ** 1.456) + 1.0
    q5 = 1.0 - 0.218 * np.exp(-7.5 * w_h)
    return float(q1 * q3 * q5 / q4)


def open_end_capacitance(width: float, height: float, er: float, thickness: float,
                         frequency: float) -> float:
    """End capacitance (F) of an open microstrip end."""
    z, e = quasi_static(width, height, thickness, er)
    z_f, e_f = dispersion(width, height, er, z, e, frequency)
    dl = open_end_extension(width, height, er, e_f)
    return float(dl * height * np.sqrt(e_f) / (SPEED_OF_LIGHT * z_f))


def step_impedance_matrix(width1: float, width2: float, height: float, er: float,
                          thickness: float, frequency: float) -> Optional[np.ndarray]:
    """
    2x2 Z-matrix of a step in width: series inductances on each side of a shunt
    capacitance. The empirical formulas work with Cs in fF and L in nH.

    Returns None at zero frequency or when the shunt capacitance vanishes, where
    the model has no finite Z-matrix.
    """
    t1 = np.log10(er)
    t2 = width1 / width2
    cs = np.sqrt(width1 * width2) * (t2 * (10.1 * t1 + 2.33) - 12.6 * t1 - 3.17)

    t1 = np.log10(t2)
    t2 = t2 - 1.0
    ls = height * (t2 * (40.5 + 0.2 * t2) - 75.0 * t1)

    z1, e1 = quasi_static(width1, height, thickness, er)
    z1_f, e1_f = dispersion(width1, height, er, z1, e1, frequency)
    l1 = z1_f * np.sqrt(e1_f) / SPEED_OF_LIGHT

    z2, e2 = quasi_static(width2, height, thickness, er)
    z2_f, e2_f = dispersion(width2, height, er, z2, e2, frequency)
    l2 = z2_f * np.sqrt(e2_f) / SPEED_OF_LIGHT

    ls /= (l1 + l2)
    l1 *= ls
    l2 *= ls

    if frequency == 0 or cs == 0:
        return None

    z21 = -1j * 0.5e12 / (np.pi * frequency * cs)
    z11 = 1j * 2e-9 * np.pi * frequency * l1 + z21
    z22 = 1j * 2e-9 * np.pi * frequency * l2 + z21
    return np.array([[z11, z21], [z21, z22]], dtype=np.complex128)


def via_impedance(diameter: float, height: float, thickness: float, rho: float,
                  frequency: float) -> complex:
    """Impedance R(f) + jwL of a single plated via of `thickness` wall."""
    r = diameter / 2.0
    r_dc = rho * height / np.pi / (r * r - (r - thickness) * (r - thickness))
    fs = np.pi * VACUUM_PERMEABILITY * thickness ** 2 / rho
    res = r_dc * np.sqrt(1.0 + frequency * fs)

    a = np.sqrt(r * r + height * height)
    ind = VACUUM_PERMEABILITY * (height * np.log((height + a) / r) + 1.5 * (r - a))
    return complex(res, 2.0 * np.pi * frequency * ind)
