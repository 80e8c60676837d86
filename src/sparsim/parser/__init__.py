# src/sparsim/parser/__init__.py
from .exceptions import (
    ConfigParsingError,
    MissingDataFile,
    ParseSkip,
    ParsingError,
    SchemaValidationError,
)
from .scaled_value import parse_scaled_value
from .touchstone import TouchstoneData, read_touchstone, write_touchstone
from .netlist import NetlistParser, ParsedNetlist, parse_complex_impedance
from .config import RunConfig, RunConfigParser, parse_sweep_config

__all__ = [
    # Value parsing
    "parse_scaled_value",
    "parse_complex_impedance",
    # Netlist
    "NetlistParser",
    "ParsedNetlist",
    # Touchstone
    "TouchstoneData",
    "read_touchstone",
    "write_touchstone",
    # Run configuration
    "RunConfig",
    "RunConfigParser",
    "parse_sweep_config",
    # Exceptions
    "ConfigParsingError",
    "MissingDataFile",
    "ParseSkip",
    "ParsingError",
    "SchemaValidationError",
]
