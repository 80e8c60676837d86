# src/sparsim/parser/scaled_value.py
"""
Parses numeric netlist tokens with an optional unit suffix.

Two modes exist. Electrical values ("10p", "2.2nH", "50Ohm") read the first
letter of the suffix as an SI prefix. Geometric values ("1.6mm", "20mil") must
carry a recognised length unit and are converted to metres with pint.
"""
import re

from ..units import NETLIST_LENGTH_UNITS, length_to_meters

SCALED_VALUE_REGEX = re.compile(
    r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)\s*([a-zA-Zµ]*)\s*$"
)

SI_PREFIXES = {
    "f": 1e-15,
    "p": 1e-12,
    "n": 1e-9,
    "u": 1e-6,
    "µ": 1e-6,
    "m": 1e-3,
    "k": 1e3,
    "K": 1e3,
    "M": 1e6,
    "G": 1e9,
    "T": 1e12,
}


def parse_scaled_value(token: str, length: bool = False) -> float:
    """
    Converts a token such as '10p' or '1.6mm' to a float.

    Args:
        token: The raw token.
        length: If True, the suffix is a length unit and the result is in metres.

    Returns:
        The scaled value.

    Raises:
        ValueError: If the token is not a number, or in length mode carries a
            unit that is not a known length unit. Callers decide whether that
            is fatal for the value's component.
    """
    match = SCALED_VALUE_REGEX.match(token)
    if not match:
        raise ValueError(f"'{token}' is not a number.")

    value = float(match.group(1))
    unit = match.group(2).strip()

    if length:
        if unit not in NETLIST_LENGTH_UNITS:
            raise ValueError(
                f"Unknown length unit in '{token}'; use nm, um, µm, mm, cm, dm, m, km, mil, in or ft."
            )
        return length_to_meters(value, unit)

    if not unit:
        return value
    return value * SI_PREFIXES.get(unit[0], 1.0)
