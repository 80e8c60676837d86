# tests/test_scaled_value.py
import pytest

from sparsim.parser.scaled_value import parse_scaled_value


class TestSIPrefixMode:

    @pytest.mark.parametrize("token, expected", [
        ("50", 50.0),
        ("10p", 10e-12),
        ("2.2nH", 2.2e-9),
        ("4.7u", 4.7e-6),
        ("3µ", 3e-6),
        ("1m", 1e-3),
        ("1k", 1e3),
        ("1K", 1e3),
        ("2M", 2e6),
        ("2.4G", 2.4e9),
        ("1T", 1e12),
        ("5f", 5e-15),
        (".5", 0.5),
        ("-3.3", -3.3),
        ("1e3", 1000.0),
        ("5.8e7", 5.8e7),
    ])
    def test_prefixes_scale_value(self, token, expected):
        assert parse_scaled_value(token) == pytest.approx(expected)

    def test_unit_word_after_number_is_ignored_when_not_a_prefix(self):
        """VERIFIES: '50Ohm' keeps its value; 'O' is not an SI prefix."""
        assert parse_scaled_value("50Ohm") == pytest.approx(50.0)

    @pytest.mark.parametrize("token", ["abc", "", "pF", "1.2.3", "--5"])
    def test_non_numeric_token_raises(self, token):
        with pytest.raises(ValueError, match="is not a number"):
            parse_scaled_value(token)


class TestLengthMode:

    @pytest.mark.parametrize("token, expected", [
        ("1.6mm", 1.6e-3),
        ("20mil", 20 * 25.4e-6),
        ("1in", 0.0254),
        ("2ft", 0.6096),
        ("35um", 35e-6),
        ("35µm", 35e-6),
        ("35µ", 35e-6),
        ("100nm", 100e-9),
        ("3cm", 0.03),
        ("1dm", 0.1),
        ("2m", 2.0),
        ("0.5km", 500.0),
        ("0.25", 0.25),
    ])
    def test_length_units_convert_to_metres(self, token, expected):
        assert parse_scaled_value(token, length=True) == pytest.approx(expected)

    @pytest.mark.parametrize("token", ["10furlong", "10p"])
    def test_unknown_length_unit_raises(self, token):
        with pytest.raises(ValueError, match="Unknown length unit"):
            parse_scaled_value(token, length=True)

    def test_negative_length_is_a_value_not_a_failure(self):
        """VERIFIES: -1 m parses as -1.0; range checks belong to the component."""
        assert parse_scaled_value("-1m", length=True) == pytest.approx(-1.0)
        assert parse_scaled_value("-1000mm", length=True) == pytest.approx(-1.0)

    def test_non_numeric_length_raises(self):
        with pytest.raises(ValueError, match="is not a number"):
            parse_scaled_value("mm", length=True)

    def test_prefix_mode_does_not_treat_m_as_metre(self):
        """VERIFIES: the same token differs between modes ('2m' is milli in SI mode)."""
        assert parse_scaled_value("2m") == pytest.approx(2e-3)
        assert parse_scaled_value("2m", length=True) == pytest.approx(2.0)
