# tests/test_execution.py
import textwrap
from pathlib import Path

import numpy as np
import pytest

from sparsim import NetlistBuildError, SimulationRunError
from sparsim.parser import read_touchstone
from sparsim.simulation import SimulationOutcome, build_model, run_simulation, simulate_netlist

LOAD_NETLIST = textwrap.dedent("""
    * 100 Ohm load behind a 50 Ohm port
    R1 1 0 100
    P1 1 50
""")

FILTER_NETLIST = textwrap.dedent("""
    C1 1 0 2.2p
    TLIN1 1 2 70 21mm
    L1 2 3 4.7n
    C2 3 0 1.5p
    P1 1
    P2 3
""")


class TestBuildModel:

    def test_from_text(self):
        model, skipped, issues = build_model(FILTER_NETLIST, name="lpf")
        assert model.name == "lpf"
        assert model.num_nodes == 3
        assert model.num_ports == 2
        assert skipped == []
        assert issues == []

    def test_skipped_lines_are_reported(self):
        model, skipped, _ = build_model(LOAD_NETLIST + "Q1 1 0 5\n")
        assert len(model.components) == 1
        assert len(skipped) == 1
        assert "Unknown element kind 'Q'" in skipped[0].reason

    def test_from_file(self, tmp_path):
        path = tmp_path / "load.net"
        path.write_text(LOAD_NETLIST)
        model, _, _ = build_model(path)
        assert model.name == "load"

    def test_missing_file(self, tmp_path):
        with pytest.raises(NetlistBuildError, match="Cannot read netlist"):
            build_model(tmp_path / "absent.net")

    def test_validation_errors_stop_the_build(self):
        with pytest.raises(NetlistBuildError) as exc_info:
            build_model("R1 1 0 50\n")
        report = str(exc_info.value)
        assert "Circuit Validation Error" in report
        assert "PORT_NONE" in report
        assert isinstance(exc_info.value.__cause__, Exception)


class TestSimulateNetlist:

    def test_load_reflection(self):
        outcome = simulate_netlist(LOAD_NETLIST, 1e9, 2e9, 3)
        assert isinstance(outcome, SimulationOutcome)
        assert len(outcome.result) == 3
        np.testing.assert_allclose(outcome.result.s_parameters[:, 0, 0], 1.0 / 3.0, atol=1e-9)
        assert outcome.touchstone_path is None

    def test_filter_is_lossless(self):
        result = simulate_netlist(FILTER_NETLIST, 0.5e9, 2.5e9, 5).result
        for s in result.s_parameters:
            np.testing.assert_allclose(s @ s.conj().T, np.eye(2), atol=1e-6)

    def test_cancellation_is_forwarded(self):
        result = simulate_netlist(LOAD_NETLIST, 1e9, 2e9, 5, cancel_check=lambda: True).result
        assert result.cancelled
        assert len(result) == 0

    def test_invalid_point_count(self):
        with pytest.raises(SimulationRunError, match="Unexpected Simulation Error"):
            simulate_netlist(LOAD_NETLIST, 1e9, 2e9, 0)

    def test_unknown_method(self):
        with pytest.raises(SimulationRunError, match="Unknown inversion method"):
            simulate_netlist(LOAD_NETLIST, 1e9, 2e9, 2, method="cholesky")

    def test_touchstone_relative_to_base_path(self, tmp_path):
        (tmp_path / "load.s1p").write_text("# GHz S RI R 50\n1.0 0.5 0.0\n2.0 0.5 0.0\n")
        outcome = simulate_netlist("SPAR1 1 0 load.s1p\nP1 1\n", 1e9, 2e9, 2, base_path=tmp_path)
        assert outcome.skipped_lines == []
        np.testing.assert_allclose(outcome.result.s_parameters[:, 0, 0], 0.5, atol=1e-9)


class TestRunSimulation:

    def _config(self, **overrides):
        raw = {
            "netlist_text": FILTER_NETLIST,
            "sweep": {"type": "linear", "start": "1 GHz", "stop": "2 GHz", "num_points": 3},
        }
        raw.update(overrides)
        return raw

    def test_from_dict(self):
        outcome = run_simulation(self._config(name="pi"))
        assert outcome.model.name == "pi"
        np.testing.assert_allclose(outcome.result.frequencies, [1e9, 1.5e9, 2e9])

    def test_list_sweep(self):
        outcome = run_simulation(self._config(sweep={"type": "list", "points": ["2 GHz", "1 GHz"]}))
        np.testing.assert_allclose(outcome.result.frequencies, [1e9, 2e9])

    def test_writes_touchstone(self, tmp_path):
        target = tmp_path / "pi.s2p"
        outcome = run_simulation(self._config(output={"touchstone": str(target), "format": "MA"}))
        assert outcome.touchstone_path == target
        data = read_touchstone(target)
        np.testing.assert_allclose(data.frequencies, outcome.result.frequencies)
        np.testing.assert_allclose(data.s_parameters, outcome.result.s_parameters, atol=1e-8)

    def test_from_yaml_file(self, tmp_path):
        (tmp_path / "load.net").write_text(LOAD_NETLIST)
        config = tmp_path / "run.yaml"
        config.write_text(
            "netlist: load.net\n"
            "sweep:\n"
            "  type: log\n"
            "  start: 10 MHz\n"
            "  stop: 1 GHz\n"
            "  num_points: 3\n"
            "output:\n"
            "  touchstone: load.s1p\n"
        )
        outcome = run_simulation(config)
        assert outcome.model.name == "load"
        assert outcome.touchstone_path == tmp_path.resolve() / "load.s1p"
        assert Path(outcome.touchstone_path).is_file()
        np.testing.assert_allclose(outcome.result.frequencies, [1e7, 1e8, 1e9])

    def test_log_level_is_applied(self, monkeypatch):
        calls = []
        monkeypatch.setattr("sparsim.simulation.execution.setup_logging", calls.append)
        run_simulation(self._config(log_level="DEBUG"))
        assert calls == ["DEBUG"]

    def test_schema_error(self):
        with pytest.raises(NetlistBuildError, match="YAML Schema Validation Error"):
            run_simulation(self._config(sweep={"type": "spiral"}))

    def test_missing_config_file(self, tmp_path):
        with pytest.raises(NetlistBuildError, match="not found"):
            run_simulation(tmp_path / "absent.yaml")

    def test_netlist_without_ports(self):
        with pytest.raises(NetlistBuildError, match="PORT_NONE"):
            run_simulation(self._config(netlist_text="R1 1 0 50\n"))

    def test_unwritable_output(self, tmp_path):
        target = tmp_path / "missing_dir" / "pi.s2p"
        with pytest.raises(SimulationRunError, match="Output File Error"):
            run_simulation(self._config(output={"touchstone": str(target)}))
