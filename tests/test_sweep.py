# tests/test_sweep.py
import numpy as np
import pytest

from sparsim.components import (
    FrequencyDependentSParameterBlock, FrequencyDependentSParameterParams, Resistor, ResistorParams,
)
from sparsim.data_structures import CircuitModel, Port
from sparsim.simulation import linear_frequencies, run_frequency_list, run_sweep
from sparsim.simulation.exceptions import NoPortsDefinedError, PortNodeOutOfRangeError
from sparsim.simulation.results import s_parameter_series


class TestLinearFrequencies:

    def test_step_rule(self):
        np.testing.assert_allclose(linear_frequencies(1e9, 2e9, 5), [1e9, 1.25e9, 1.5e9, 1.75e9, 2e9])

    def test_single_point_is_start(self):
        np.testing.assert_array_equal(linear_frequencies(3e9, 5e9, 1), [3e9])

    def test_descending_grid(self):
        np.testing.assert_allclose(linear_frequencies(2e9, 1e9, 3), [2e9, 1.5e9, 1e9])

    @pytest.mark.parametrize("n_points", [0, -3])
    def test_needs_a_point(self, n_points):
        with pytest.raises(ValueError, match="at least one point"):
            linear_frequencies(1e9, 2e9, n_points)


class TestRunSweep:

    def test_result_shape(self, matched_line_model):
        result = run_sweep(matched_line_model, 1e9, 3e9, 5)
        assert len(result) == 5
        assert result.num_ports == 2
        assert result.z0 == 50.0
        assert not result.cancelled
        assert result.s_parameters.shape == (5, 2, 2)
        np.testing.assert_allclose(result.frequencies, linear_frequencies(1e9, 3e9, 5))
        assert all(pt.ok and pt.error is None for pt in result.points)

    def test_series_keys(self, matched_line_model):
        series = run_sweep(matched_line_model, 1e9, 2e9, 3).series
        for key in ("S11", "S12", "S21", "S22"):
            for suffix in ("_dB", "_ang", "_re", "_im"):
                assert f"{key}{suffix}" in series
                assert series[f"{key}{suffix}"].shape == (3,)
        assert int(series["n_ports"]) == 2
        assert float(series["Z0"]) == 50.0
        np.testing.assert_allclose(series["S21_dB"], 0.0, atol=1e-6)

    def test_zero_entry_is_minus_infinity_db(self):
        series = s_parameter_series(np.array([1e9]), np.zeros((1, 1, 1), dtype=complex))
        assert series["S11_dB"][0] == -np.inf
        assert series["S11_re"][0] == 0.0

    def test_invalid_point_count(self, matched_line_model):
        with pytest.raises(ValueError):
            run_sweep(matched_line_model, 1e9, 2e9, 0)

    def test_methods_agree(self, lossless_filter_model):
        gj = run_sweep(lossless_filter_model, 0.5e9, 2.5e9, 4, method="gauss_jordan")
        lu = run_sweep(lossless_filter_model, 0.5e9, 2.5e9, 4, method="lu")
        np.testing.assert_allclose(gj.s_parameters, lu.s_parameters, atol=1e-12)


class TestResilience:

    def test_failed_point_is_isolated(self, failing_model):
        """VERIFIES: a stamp failure at one frequency costs only that sample."""
        result = run_frequency_list(failing_model(2e9), [1e9, 2e9, 3e9])
        assert len(result) == 3
        assert [pt.ok for pt in result.points] == [True, False, True]

        failed = result.points[1]
        assert failed.frequency == 2e9
        np.testing.assert_array_equal(failed.s_matrix, np.zeros((1, 1)))
        assert "Injected failure" in failed.error
        assert len(result.failed_points) == 1 and result.failed_points[0] is failed

        for pt in (result.points[0], result.points[2]):
            assert abs(pt.s_matrix[0, 0]) < 1e-9

    def test_singular_block_at_one_table_frequency(self):
        s = np.zeros((3, 2, 2), dtype=complex)
        s[1] = -np.eye(2)
        block = FrequencyDependentSParameterBlock(
            "S1", [1, 2], FrequencyDependentSParameterParams(np.array([1e9, 2e9, 3e9]), s),
        )
        model = CircuitModel.from_parts([block], [Port(1, 50.0, "P1"), Port(2, 50.0, "P2")])

        result = run_frequency_list(model, [1e9, 2e9, 3e9])
        assert [pt.ok for pt in result.points] == [True, False, True]
        assert "I + S is singular" in result.points[1].error
        np.testing.assert_allclose(result.points[0].s_matrix, np.zeros((2, 2)), atol=1e-9)

    def test_cancellation_keeps_partial_results(self, matched_line_model):
        calls = []

        def cancel_after_two():
            calls.append(1)
            return len(calls) > 2

        result = run_sweep(matched_line_model, 1e9, 2e9, 10, cancel_check=cancel_after_two)
        assert result.cancelled
        assert len(result) == 2
        np.testing.assert_allclose(result.frequencies, linear_frequencies(1e9, 2e9, 10)[:2])

    def test_cancel_before_start(self, matched_line_model):
        result = run_sweep(matched_line_model, 1e9, 2e9, 3, cancel_check=lambda: True)
        assert result.cancelled
        assert len(result) == 0
        assert result.s_parameters.shape == (0, 2, 2)


class TestFatalErrors:

    def test_no_ports_raised_before_any_sample(self):
        model = CircuitModel.from_parts([Resistor("R1", [1, 0], ResistorParams(50.0))], [])
        calls = []
        with pytest.raises(NoPortsDefinedError):
            run_sweep(model, 1e9, 2e9, 3, cancel_check=lambda: calls.append(1) or False)
        assert calls == []

    def test_bad_port_node(self):
        model = CircuitModel.from_parts([Resistor("R1", [1, 0], ResistorParams(50.0))], [Port(0)])
        with pytest.raises(PortNodeOutOfRangeError):
            run_frequency_list(model, [1e9])
