# --- src/sparsim/units.py ---
import pint
import logging

logger = logging.getLogger(__name__)
ureg = pint.UnitRegistry()
Quantity = ureg.Quantity
logger.info("Pint Unit Registry initialized.")


# Define [admittance] and [impedance] dimensions to align with project terminology.
ureg.define("[admittance] = [current] / [voltage]")
ureg.define("[impedance] = [voltage] / [current]")

# --- Canonical dimensionality objects for explicit checks ---
ADMITTANCE_DIMENSIONALITY = ureg.parse_expression('siemens').dimensionality
IMPEDANCE_DIMENSIONALITY = ureg.parse_expression('ohm').dimensionality
FREQUENCY_DIMENSIONALITY = ureg.parse_expression('Hz').dimensionality
LENGTH_DIMENSIONALITY = ureg.parse_expression('m').dimensionality

#: Length unit spellings accepted by the netlist, mapped to pint unit names.
#: A bare micro sign is the shorthand for micrometres.
NETLIST_LENGTH_UNITS = {
    "": "meter",
    "nm": "nanometer",
    "µ": "micrometer",
    "µm": "micrometer",
    "um": "micrometer",
    "mm": "millimeter",
    "cm": "centimeter",
    "dm": "decimeter",
    "m": "meter",
    "km": "kilometer",
    "mil": "mil",
    "in": "inch",
    "ft": "foot",
}

#: Frequency units recognised on a Touchstone option line.
TOUCHSTONE_FREQUENCY_UNITS = {
    "hz": "Hz",
    "khz": "kHz",
    "mhz": "MHz",
    "ghz": "GHz",
}


def length_to_meters(value: float, unit: str) -> float:
    """Converts a netlist length value to metres. Raises KeyError for unknown units."""
    pint_unit = NETLIST_LENGTH_UNITS[unit]
    return float(Quantity(value, pint_unit).to(ureg.meter).magnitude)


def frequency_scale(unit: str) -> float:
    """Returns the multiplier that converts a Touchstone frequency unit to Hz."""
    pint_unit = TOUCHSTONE_FREQUENCY_UNITS[unit.lower()]
    return float(Quantity(1.0, pint_unit).to(ureg.hertz).magnitude)


def to_hertz(value) -> float:
    """
    Converts a frequency value to Hz. Accepts plain numbers (taken as Hz)
    and quantity strings such as '2.4 GHz'.
    """
    if isinstance(value, (int, float)):
        return float(value)
    qty = ureg.Quantity(value)
    if qty.dimensionless:
        return float(qty.magnitude)
    return float(qty.to(ureg.hertz).magnitude)


logger.debug("Defined canonical dimensionalities and netlist unit tables.")
