# tests/test_netlist_parser.py
import logging
import textwrap

import numpy as np
import pytest

from sparsim.components import (
    Capacitor, ComplexImpedance, CoupledLine, FrequencyDependentSParameterBlock, IdealCoupler,
    Inductor, MicrostripCoupledLines, MicrostripLine, MicrostripOpen, MicrostripStep, MicrostripVia,
    OpenStub, Resistor, ShortStub, SParameterBlock, TransmissionLine,
)
from sparsim.parser import NetlistParser, ParseSkip, ParsingError, parse_complex_impedance
from sparsim.parser.netlist import element_kind, parse_inline_s_matrix


@pytest.fixture
def parser():
    return NetlistParser()


def parse(parser, text, **kwargs):
    return parser.parse_text(textwrap.dedent(text), **kwargs)


class TestElementLines:

    def test_lumped_elements_and_ports(self, parser):
        parsed = parse(parser, """
            * simple RLC
            R1 1 2 50
            C1 2 0 10p
            L1 2 3 2.2nH

            P1 1
            P2 3 75
        """)
        assert parsed.ok
        model = parsed.model
        assert [type(c) for c in model.components] == [Resistor, Capacitor, Inductor]
        assert model.get_component("C1").params.capacitance == pytest.approx(10e-12)
        assert model.get_component("L1").params.inductance == pytest.approx(2.2e-9)
        assert model.num_nodes == 3
        assert [p.node for p in model.ports] == [1, 3]
        assert model.ports[0].impedance == pytest.approx(50.0)
        assert model.ports[1].impedance == pytest.approx(75.0)
        assert model.ports[0].name == "P1"

    def test_distributed_elements(self, parser):
        parsed = parse(parser, """
            TLIN1 1 2 50 25mm
            OSTUB1 2 0 70 10mm
            SSTUB1 2 0 30 5mm
            CLIN1 1 2 3 4 70 40 30mm
            COUPLER1 1 2 3 4 0.5 90
            COUPLER2 1 2 3 4 0.3 -90 75
        """)
        assert parsed.ok, parsed.skipped
        comps = {c.instance_id: c for c in parsed.model.components}
        assert isinstance(comps["TLIN1"], TransmissionLine)
        assert comps["TLIN1"].params.length == pytest.approx(0.025)
        assert isinstance(comps["OSTUB1"], OpenStub)
        assert isinstance(comps["SSTUB1"], ShortStub)
        assert isinstance(comps["CLIN1"], CoupledLine)
        assert comps["CLIN1"].params.z0e == pytest.approx(70.0)
        assert comps["CLIN1"].params.z0o == pytest.approx(40.0)
        assert isinstance(comps["COUPLER1"], IdealCoupler)
        assert comps["COUPLER1"].params.z0 == pytest.approx(50.0)
        assert comps["COUPLER2"].params.z0 == pytest.approx(75.0)
        assert comps["COUPLER2"].params.phase_deg == pytest.approx(-90.0)

    def test_microstrip_elements(self, parser):
        parsed = parse(parser, """
            MLIN1 1 2 1.8mm 10mm 4.4 1.6m 5.8e7 35u 0.02
            MSCOUP1 2 3 4 5 1mm 20mm 0.2mm 4.4 1.6m 5.8e7 35u 0.02
            MSTEP1 3 6 1.8mm 0.8mm 4.4 1.6m 5.8e7 35u 0.02
            MSOPEN1 6 0.8mm 4.4 1.6m 5.8e7 35u 0.02
            MSVIA1 4 0.4mm 2 4.4 1.6m 5.8e7 20u 0.02
        """)
        assert parsed.ok, parsed.skipped
        comps = {c.instance_id: c for c in parsed.model.components}
        mlin = comps["MLIN1"]
        assert isinstance(mlin, MicrostripLine)
        assert mlin.params.width == pytest.approx(1.8e-3)
        assert mlin.params.length == pytest.approx(10e-3)
        assert mlin.params.substrate.er == pytest.approx(4.4)
        assert mlin.params.substrate.height == pytest.approx(1.6e-3)
        assert mlin.params.substrate.conductivity == pytest.approx(5.8e7)
        assert mlin.params.substrate.thickness == pytest.approx(35e-6)
        assert mlin.params.substrate.tand == pytest.approx(0.02)
        assert isinstance(comps["MSCOUP1"], MicrostripCoupledLines)
        assert comps["MSCOUP1"].params.gap == pytest.approx(0.2e-3)
        assert isinstance(comps["MSTEP1"], MicrostripStep)
        assert comps["MSTEP1"].params.width2 == pytest.approx(0.8e-3)
        assert isinstance(comps["MSOPEN1"], MicrostripOpen)
        assert comps["MSOPEN1"].nodes == (6,)
        assert isinstance(comps["MSVIA1"], MicrostripVia)
        assert comps["MSVIA1"].params.count == 2

    def test_element_kind_is_alphabetic_prefix(self):
        assert element_kind("TLIN12") == "TLIN"
        assert element_kind("R1") == "R"
        assert element_kind("MSOPEN3") == "MSOPEN"


class TestComplexImpedance:

    @pytest.mark.parametrize("token, expected", [
        ("50", 50 + 0j),
        ("25+j10", 25 + 10j),
        ("25-j10", 25 - 10j),
        ("1k-j2.2kOhm", 1000 - 2200j),
        ("100Ohm+j50", 100 + 50j),
        ("10m+j1M", 0.01 + 1e6j),
    ])
    def test_grammar(self, token, expected):
        assert parse_complex_impedance(token) == pytest.approx(expected)

    def test_rejects_garbage(self):
        assert parse_complex_impedance("j10") is None
        assert parse_complex_impedance("fifty") is None

    def test_z_line_builds_complex_impedance(self, parser):
        parsed = parse(parser, """
            Z1 1 0 25-j10
            zload 2 0 75
        """)
        assert parsed.ok
        assert isinstance(parsed.model.components[0], ComplexImpedance)
        assert parsed.model.components[0].params.impedance == pytest.approx(25 - 10j)
        assert parsed.model.components[1].params.impedance == pytest.approx(75 + 0j)


class TestSParameterLines:

    def test_inline_one_port_when_a_node_is_ground(self, parser):
        parsed = parse(parser, "SPAR1 1 0 (0.5,-0.1)")
        assert parsed.ok
        block = parsed.model.components[0]
        assert isinstance(block, SParameterBlock)
        assert block.num_ports == 1
        assert block.params.s_matrix[0, 0] == pytest.approx(0.5 - 0.1j)

    def test_inline_two_port_is_row_major(self, parser):
        parsed = parse(parser, "SPAR1 1 2 (0.1,0) (0.5,0); (0.6,0) (0.2,0)")
        assert parsed.ok, parsed.skipped
        s = parsed.model.components[0].params.s_matrix
        np.testing.assert_allclose(s, [[0.1, 0.5], [0.6, 0.2]])

    def test_inline_matrix_helper_reports_missing_entries(self):
        assert parse_inline_s_matrix("(0.1,0) (0.5,0)", 2) is None
        assert parse_inline_s_matrix("nothing", 1) is None

    def test_touchstone_file_relative_to_base_path(self, parser, tmp_path):
        (tmp_path / "amp.s2p").write_text(textwrap.dedent("""
            # GHz S RI R 50
            1.0 0.1 0.0 2.0 0.0 0.01 0.0 0.2 0.0
            2.0 0.1 0.0 1.5 0.0 0.01 0.0 0.2 0.0
        """))
        parsed = parse(parser, "SPAR1 1 2 amp.s2p", base_path=tmp_path)
        assert parsed.ok, parsed.skipped
        block = parsed.model.components[0]
        assert isinstance(block, FrequencyDependentSParameterBlock)
        assert block.num_ports == 2
        np.testing.assert_allclose(block.params.frequencies, [1e9, 2e9])
        assert block.params.s_matrices[0, 1, 0] == pytest.approx(2.0)

    def test_netlist_file_resolves_data_next_to_it(self, parser, tmp_path):
        (tmp_path / "load.s1p").write_text("# MHz S MA R 50\n100 0.5 0\n200 0.4 0\n")
        netlist = tmp_path / "circuit.net"
        netlist.write_text("SPAR1 1 0 load.s1p\nP1 1\n")
        parsed = parser.parse_file(netlist)
        assert parsed.ok
        assert parsed.model.name == "circuit"
        assert parsed.model.components[0].num_ports == 1

    def test_missing_touchstone_file_skips_line(self, parser, tmp_path):
        parsed = parse(parser, "SPAR1 1 2 nowhere.s2p", base_path=tmp_path)
        assert not parsed.model.components
        assert len(parsed.skipped) == 1
        assert "nowhere.s2p" in parsed.skipped[0].reason

    def test_three_port_touchstone_file_is_rejected(self, parser, tmp_path):
        values = " ".join(["0.0"] * 18)
        (tmp_path / "split.s3p").write_text(f"# GHz S RI R 50\n1.0 {values}\n")
        parsed = parse(parser, "SPAR1 1 2 split.s3p", base_path=tmp_path)
        assert not parsed.model.components
        assert "3 ports" in parsed.skipped[0].reason


class TestSkippedLines:

    @pytest.mark.parametrize("line, reason_fragment", [
        ("R1 a 0 50", "not an integer"),
        ("R1 1 -2 50", "negative"),
        ("R1 1 0", "at least 4"),
        ("Q1 1 2 3", "Unknown element kind"),
        ("TLIN1 1 2 50 10furlong", "Unknown length unit"),
        ("R1 1 0 -5", "non-negative"),
        ("TLIN1 1 2 0 10mm", "> 0"),
        ("Z1 1 0 abc", "Cannot parse complex impedance"),
        ("MSVIA1 1 0.4mm two 4.4 1.6m 5.8e7 20u 0.02", "not an integer"),
        ("P1 1 0", "must be > 0"),
        ("P1 1 fifty", "is not a number"),
        ("C1 1 0 pF", "is not a number"),
        ("COUPLER1 1 2 3 4 half 90", "is not a number"),
        ("TLIN1 1 2 50 -1m", "non-negative"),
        ("SPAR1 1 2 (0.1,0)", "Cannot parse inline 2-port"),
    ])
    def test_bad_line_is_skipped_with_reason(self, parser, line, reason_fragment):
        parsed = parse(parser, line)
        assert not parsed.ok
        assert len(parsed.skipped) == 1
        skip = parsed.skipped[0]
        assert isinstance(skip, ParseSkip)
        assert skip.line_number == 1
        assert skip.line == line
        assert reason_fragment in skip.reason

    def test_non_numeric_value_never_becomes_a_zero_component(self, parser):
        """VERIFIES: a resistor value that is not a number skips the line instead of building a 0 Ohm short."""
        parsed = parse(parser, "R1 1 0 abc\nP1 1 50\n")
        assert parsed.model.components == ()
        assert len(parsed.skipped) == 1
        assert parsed.skipped[0].reason == "'abc' is not a number."
        assert parsed.model.num_ports == 1

    def test_parsing_continues_after_a_bad_line(self, parser):
        parsed = parse(parser, """
            R1 1 0 50
            R2 x 0 50
            R3 2 0 50
            P1 1
        """)
        assert [c.instance_id for c in parsed.model.components] == ["R1", "R3"]
        assert parsed.skipped[0].line_number == 3
        assert parsed.model.num_ports == 1

    def test_duplicate_name_keeps_first(self, parser):
        parsed = parse(parser, "R1 1 0 50\nR1 2 0 75\n")
        assert len(parsed.model.components) == 1
        assert parsed.model.components[0].params.resistance == pytest.approx(50.0)
        assert "Duplicate" in parsed.skipped[0].reason

    def test_skip_is_logged_and_diagnosable(self, parser, caplog):
        with caplog.at_level(logging.WARNING, logger="sparsim.parser.netlist"):
            parsed = parse(parser, "R1 a 0 50")
        assert "Line 1 skipped" in caplog.text
        report = parsed.skipped[0].get_diagnostic_report()
        assert "Netlist Line Skipped" in report
        assert "R1 a 0 50" in report

    def test_unreadable_netlist_file_raises(self, parser, tmp_path):
        with pytest.raises(ParsingError):
            parser.parse_file(tmp_path / "absent.net")
