# tests/test_solver.py
import logging
from dataclasses import dataclass
from typing import List

import numpy as np
import pytest

from sparsim.components import (
    ComponentBase, CoupledLine, CoupledLineParams, IdealCoupler, IdealCouplerParams,
    LineParams, Resistor, ResistorParams, TransmissionLine,
)
from sparsim.components.coupler import coupler_s_matrix
from sparsim.constants import GMIN
from sparsim.data_structures import CircuitModel, Port
from sparsim.simulation import AdmittanceAssembler, solve_s_parameters
from sparsim.simulation.exceptions import NoPortsDefinedError, PortNodeOutOfRangeError
from sparsim.simulation.solver import build_augmented_matrix, build_excitations


@dataclass(frozen=True)
class _NoParams:
    pass


class _Inert(ComponentBase):
    """A two-terminal component without an admittance stamp."""
    parameter_type = _NoParams

    @classmethod
    def declare_ports(cls) -> List[str]:
        return ['p1', 'p2']


class TestAssembler:

    def test_gmin_on_every_diagonal(self):
        model = CircuitModel.from_parts([], [Port(1)], num_nodes=3)
        Y = AdmittanceAssembler(model).assemble(1e9)
        np.testing.assert_array_equal(Y, GMIN * np.eye(3))

    def test_resistor_stamp_plus_gmin(self, one_port_load):
        Y = AdmittanceAssembler(one_port_load(25.0)).assemble(1e9)
        assert Y.shape == (1, 1)
        assert Y[0, 0] == pytest.approx(1.0 / 25.0 + GMIN)

    def test_component_without_stamp_is_ignored(self, caplog):
        model = CircuitModel.from_parts([_Inert("X1", [1, 2], _NoParams())], [Port(1)])
        with caplog.at_level(logging.WARNING, logger="sparsim.simulation.assembler"):
            Y = AdmittanceAssembler(model).assemble(1e9)
        np.testing.assert_array_equal(Y, GMIN * np.eye(2))
        assert "does not provide IAdmittanceStamp" in caplog.text


class TestAugmentedSystem:

    def test_port_rows_and_columns(self):
        Y = np.zeros((2, 2), dtype=complex)
        ports = [Port(2, 25.0)]
        A = build_augmented_matrix(Y, ports)
        assert A.shape == (3, 3)
        assert A[2, 1] == 1.0
        assert A[2, 2] == -1.0
        assert A[1, 2] == pytest.approx(1.0 / 25.0)

    def test_excitation_columns(self):
        B = build_excitations(3, [Port(1, 50.0), Port(3, 100.0)])
        assert B.shape == (5, 2)
        assert B[0, 0] == pytest.approx(2.0 / 50.0)
        assert B[2, 1] == pytest.approx(2.0 / 100.0)
        assert np.count_nonzero(B) == 2


class TestOnePort:

    def test_matched_load(self, one_port_load):
        s = solve_s_parameters(one_port_load(50.0), 1e9)
        assert s.shape == (1, 1)
        assert abs(s[0, 0]) < 1e-9

    @pytest.mark.parametrize("resistance, expected", [(100.0, 1.0 / 3.0), (25.0, -1.0 / 3.0)])
    def test_mismatched_load(self, one_port_load, resistance, expected):
        s = solve_s_parameters(one_port_load(resistance), 1e9)
        assert s[0, 0] == pytest.approx(expected, abs=1e-9)

    def test_non_default_reference_impedance(self, one_port_load):
        s = solve_s_parameters(one_port_load(75.0, z0=75.0), 1e9)
        assert abs(s[0, 0]) < 1e-9

    def test_quarter_wave_transformer(self, quarter_wave_length):
        """VERIFIES: a sqrt(50*100) Ohm quarter-wave line matches a 100 Ohm load to 50 Ohm."""
        f = 1e9
        model = CircuitModel.from_parts(
            [
                TransmissionLine("TL1", [1, 2], LineParams(z0=np.sqrt(5000.0), length=quarter_wave_length(f))),
                Resistor("RL", [2, 0], ResistorParams(100.0)),
            ],
            [Port(1, 50.0, "P1")],
        )
        s = solve_s_parameters(model, f)
        assert abs(s[0, 0]) < 1e-6


class TestTwoPort:

    def test_matched_line_is_transparent(self, matched_line_model):
        s = solve_s_parameters(matched_line_model, 1e9)
        assert abs(s[0, 0]) < 1e-9
        assert abs(s[1, 1]) < 1e-9
        assert abs(s[1, 0]) == pytest.approx(1.0, abs=1e-9)

    def test_line_phase(self, matched_line_model):
        f = 1e9
        theta = 2 * np.pi * f * 0.037 / 299792458.0
        s = solve_s_parameters(matched_line_model, f)
        np.testing.assert_allclose(s[1, 0], np.exp(-1j * theta), atol=1e-9)

    @pytest.mark.parametrize("frequency", [0.3e9, 1.5e9, 2.7e9])
    def test_reciprocal_and_lossless(self, lossless_filter_model, frequency):
        s = solve_s_parameters(lossless_filter_model, frequency)
        np.testing.assert_allclose(s, s.T, atol=1e-9, err_msg="S-matrix is not symmetric")
        np.testing.assert_allclose(
            s @ s.conj().T, np.eye(2), atol=1e-6, err_msg="S-matrix is not unitary"
        )

    def test_methods_agree(self, lossless_filter_model):
        s_gj = solve_s_parameters(lossless_filter_model, 1.2e9, method="gauss_jordan")
        s_lu = solve_s_parameters(lossless_filter_model, 1.2e9, method="lu")
        np.testing.assert_allclose(s_gj, s_lu, atol=1e-12)

    def test_unknown_method(self, matched_line_model):
        with pytest.raises(ValueError, match="Unknown inversion method"):
            solve_s_parameters(matched_line_model, 1e9, method="cholesky")


class TestFourPort:

    @pytest.fixture
    def four_ports(self):
        return [Port(n, 50.0, f"P{n}") for n in (1, 2, 3, 4)]

    def test_degenerate_coupled_line_is_two_lines(self, four_ports):
        coupled = CircuitModel.from_parts(
            [CoupledLine("K1", [1, 2, 3, 4], CoupledLineParams(z0e=60.0, z0o=60.0, length=0.03))],
            four_ports,
        )
        separate = CircuitModel.from_parts(
            [
                TransmissionLine("TL1", [1, 2], LineParams(z0=60.0, length=0.03)),
                TransmissionLine("TL2", [3, 4], LineParams(z0=60.0, length=0.03)),
            ],
            four_ports,
        )
        np.testing.assert_allclose(
            solve_s_parameters(coupled, 2e9), solve_s_parameters(separate, 2e9), atol=1e-12
        )

    def test_coupled_line_couples(self, four_ports):
        model = CircuitModel.from_parts(
            [CoupledLine("K1", [1, 2, 3, 4], CoupledLineParams(z0e=70.0, z0o=35.0, length=0.03))],
            four_ports,
        )
        s = solve_s_parameters(model, 2e9)
        assert abs(s[2, 0]) > 0.1
        np.testing.assert_allclose(s, s.T, atol=1e-9)

    def test_ideal_coupler_recovers_its_s_matrix(self, four_ports):
        model = CircuitModel.from_parts(
            [IdealCoupler("X1", [1, 2, 3, 4], IdealCouplerParams(coupling=0.5, phase_deg=90.0))],
            four_ports,
        )
        s = solve_s_parameters(model, 1e9)
        np.testing.assert_allclose(s, coupler_s_matrix(0.5, 90.0), atol=1e-9)
        assert abs(s[2, 0]) < 1e-9, "Port 3 should be isolated from port 1"


class TestPortErrors:

    def test_no_ports(self):
        model = CircuitModel.from_parts([Resistor("R1", [1, 0], ResistorParams(50.0))], [])
        with pytest.raises(NoPortsDefinedError):
            solve_s_parameters(model, 1e9)

    def test_port_on_ground(self):
        model = CircuitModel.from_parts([Resistor("R1", [1, 0], ResistorParams(50.0))], [Port(0)])
        with pytest.raises(PortNodeOutOfRangeError):
            solve_s_parameters(model, 1e9)

    def test_port_beyond_last_node(self):
        model = CircuitModel(
            name="bad",
            components=(Resistor("R1", [1, 0], ResistorParams(50.0)),),
            ports=(Port(3),),
            num_nodes=1,
        )
        with pytest.raises(PortNodeOutOfRangeError, match="out of bounds"):
            solve_s_parameters(model, 1e9)
