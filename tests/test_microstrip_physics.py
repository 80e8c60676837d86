# tests/test_microstrip_physics.py
import numpy as np
import pytest

from sparsim.physics import microstrip as ms

FR4_ER = 4.4
H = 1.6e-3
T = 35e-6
RHO = 1.0 / 5.8e7


class TestSingleLine:
    def test_impedance_falls_as_strip_widens(self):
        z_narrow, _ = ms.quasi_static(1.0e-3, H, T, FR4_ER)
        z_wide, _ = ms.quasi_static(5.0e-3, H, T, FR4_ER)
        assert z_wide < z_narrow

    def test_effective_permittivity_between_air_and_substrate(self):
        _, ereff = ms.quasi_static(3.0e-3, H, T, FR4_ER)
        assert 1.0 < ereff < FR4_ER

    def test_fr4_fifty_ohm_geometry(self):
        """A 3 mm strip on 1.6 mm FR4 is close to 50 Ohm."""
        params = ms.line_parameters(3.0e-3, H, FR4_ER, T, 0.02, RHO, 1e9)
        assert 40.0 < params.z0 < 60.0

    def test_dispersion_raises_permittivity_with_frequency(self):
        low = ms.line_parameters(3.0e-3, H, FR4_ER, T, 0.0, RHO, 0.5e9)
        high = ms.line_parameters(3.0e-3, H, FR4_ER, T, 0.0, RHO, 20e9)
        assert high.ereff > low.ereff
        assert high.ereff < FR4_ER

    def test_phase_constant(self):
        f = 2e9
        params = ms.line_parameters(3.0e-3, H, FR4_ER, T, 0.02, RHO, f)
        expected = np.sqrt(params.ereff) * 2 * np.pi * f / 299792458.0
        assert params.beta == pytest.approx(expected, rel=1e-12)
        assert params.gamma == complex(params.alpha, params.beta)

    @pytest.mark.parametrize("frequency", [0.0, -1.0])
    def test_no_loss_without_frequency(self, frequency):
        assert ms.loss(3.0e-3, T, FR4_ER, RHO, 0.0, 0.02, 50.0, 50.0, 3.3, frequency) == (0.0, 0.0)

    def test_loss_terms(self):
        ac, ad = ms.loss(3.0e-3, T, FR4_ER, RHO, 0.0, 0.02, 50.0, 50.0, 3.3, 1e9)
        assert ac > 0 and ad > 0
        # Zero thickness strips skip the conductor term; air skips the dielectric term.
        assert ms.loss(3.0e-3, 0.0, FR4_ER, RHO, 0.0, 0.02, 50.0, 50.0, 3.3, 1e9)[0] == 0.0
        assert ms.loss(3.0e-3, T, 1.0, RHO, 0.0, 0.02, 50.0, 50.0, 1.0, 1e9)[1] == 0.0

    def test_dielectric_loss_scales_with_frequency(self):
        _, ad1 = ms.loss(3.0e-3, T, FR4_ER, RHO, 0.0, 0.02, 50.0, 50.0, 3.3, 1e9)
        _, ad2 = ms.loss(3.0e-3, T, FR4_ER, RHO, 0.0, 0.02, 50.0, 50.0, 3.3, 2e9)
        assert ad2 == pytest.approx(2 * ad1, rel=1e-12)


class TestCoupledLines:
    def test_even_mode_above_odd_mode(self):
        params = ms.coupled_line_parameters(1.5e-3, 0.3e-3, H, FR4_ER, T, 0.02, RHO, 2e9)
        assert params.even.z0 > params.odd.z0
        assert params.even.ereff > params.odd.ereff

    def test_modes_converge_for_wide_gap(self):
        tight = ms.coupled_line_parameters(1.5e-3, 0.2e-3, H, FR4_ER, T, 0.0, RHO, 1e9)
        loose = ms.coupled_line_parameters(1.5e-3, 5.0e-3, H, FR4_ER, T, 0.0, RHO, 1e9)
        assert (loose.even.z0 - loose.odd.z0) < (tight.even.z0 - tight.odd.z0)

    def test_static_limit_is_lossless(self):
        params = ms.coupled_line_parameters(1.5e-3, 0.3e-3, H, FR4_ER, T, 0.02, RHO, 0.0)
        assert params.even.alpha == 0.0
        assert params.odd.alpha == 0.0
        assert params.even.beta == 0.0


class TestDiscontinuities:
    def test_open_end_capacitance_is_positive(self):
        c = ms.open_end_capacitance(3.0e-3, H, FR4_ER, T, 1e9)
        assert 0.0 < c < 1e-12

    def test_step_has_no_static_matrix(self):
        assert ms.step_impedance_matrix(3.0e-3, 1.0e-3, H, FR4_ER, T, 0.0) is None

    def test_step_matrix_is_reciprocal(self):
        z = ms.step_impedance_matrix(3.0e-3, 1.0e-3, H, FR4_ER, T, 2e9)
        assert z.shape == (2, 2)
        assert z[0, 1] == z[1, 0]
        assert z[0, 1].real == 0.0

    def test_via_impedance(self):
        z1 = ms.via_impedance(0.4e-3, H, T, RHO, 1e9)
        z2 = ms.via_impedance(0.4e-3, H, T, RHO, 2e9)
        assert z1.real > 0 and z1.imag > 0
        assert z2.imag == pytest.approx(2 * z1.imag, rel=1e-12)
        assert z2.real > z1.real

    def test_via_dc_resistance(self):
        r = 0.2e-3
        expected = RHO * H / np.pi / (r * r - (r - T) ** 2)
        z = ms.via_impedance(2 * r, H, T, RHO, 0.0)
        assert z.real == pytest.approx(expected, rel=1e-12)
        assert z.imag == 0.0
