# src/sparsim/parser/config.py
"""
YAML run configuration: which netlist to solve, over which frequencies, with which
solver, and where to write the result.

The document is validated structurally with a Cerberus schema, then the sweep
block is turned into frequencies with pint.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import cerberus
import numpy as np
import pint
import yaml

from ..simulation.matrix import INVERSION_METHODS
from ..simulation.sweep import linear_frequencies
from ..units import to_hertz
from .exceptions import ConfigParsingError, ParsingError, SchemaValidationError
from .touchstone import DATA_FORMATS

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class EnhancedValidator(cerberus.Validator):
    """Custom Cerberus validator that checks frequency quantities with pint."""
    def __init__(self, *args, **kwargs):
        super(EnhancedValidator, self).__init__(*args, **kwargs)
        self.rules['frequency_quantity'] = {'schema': {'type': 'boolean'}}

    def _validate_frequency_quantity(self, constraint: bool, field: str, value: Any):
        """
        Validates that a value can be read as a frequency ('2.4 GHz' or a number in Hz).
        The rule's arguments are validated against this schema:
        {'type': 'boolean'}
        """
        if not constraint:
            return
        try:
            to_hertz(value)
        except (pint.DimensionalityError, pint.UndefinedUnitError, ValueError, TypeError, AttributeError) as e:
            self._error(field, f"'{value}' is not a frequency: {e}")


_frequency_rule = {"type": ["string", "number"], "frequency_quantity": True}

RUN_CONFIG_SCHEMA = {
    "netlist": {"type": "string", "empty": False, "excludes": "netlist_text"},
    "netlist_text": {"type": "string", "empty": False, "excludes": "netlist"},
    "name": {"type": "string", "empty": False},
    "sweep": {
        "type": "dict", "required": True, "schema": {
            "type": {"type": "string", "required": True, "allowed": ["linear", "log", "list"]},
            "start": dict(_frequency_rule, dependencies={"type": ["linear", "log"]}),
            "stop": dict(_frequency_rule, dependencies={"type": ["linear", "log"]}),
            "num_points": {"type": "integer", "min": 1, "dependencies": {"type": ["linear", "log"]}},
            "points": {"type": "list", "minlength": 1, "schema": _frequency_rule, "dependencies": {"type": ["list"]}},
        },
    },
    "solver": {
        "type": "dict", "schema": {
            "method": {"type": "string", "allowed": sorted(INVERSION_METHODS), "default": "gauss_jordan"},
        },
    },
    "output": {
        "type": "dict", "schema": {
            "touchstone": {"type": "string", "empty": False},
            "format": {"type": "string", "allowed": list(DATA_FORMATS), "default": "RI"},
        },
    },
    "log_level": {"type": "string", "allowed": LOG_LEVELS},
}


@dataclass(frozen=True)
class RunConfig:
    """A validated run configuration. Paths are resolved against the YAML file's directory."""
    frequencies: np.ndarray
    netlist_path: Optional[Path] = None
    netlist_text: Optional[str] = None
    name: str = "circuit"
    method: str = "gauss_jordan"
    touchstone_path: Optional[Path] = None
    touchstone_format: str = "RI"
    log_level: Optional[str] = None
    base_path: Path = Path(".")
    linear: Optional[tuple] = None  # (start_hz, stop_hz, num_points) for linear sweeps


def parse_sweep_config(raw_sweep_config: Dict[str, Any]) -> np.ndarray:
    """
    Parses a raw sweep configuration dictionary into a NumPy frequency array (Hz).

    Linear sweeps use the same stepping rule as `run_sweep`. List sweeps are
    sorted with duplicates removed.
    """
    if not raw_sweep_config:
        raise ConfigParsingError(details="Sweep configuration is missing or empty.")
    try:
        sweep_type = raw_sweep_config['type']

        if sweep_type in ['linear', 'log']:
            start_hz = to_hertz(raw_sweep_config['start'])
            stop_hz = to_hertz(raw_sweep_config['stop'])
            num_points = int(raw_sweep_config['num_points'])

            if stop_hz < start_hz:
                raise ValueError("Stop frequency cannot be less than start frequency.")
            if sweep_type == 'linear':
                if start_hz < 0:
                    raise ValueError("Linear sweep start frequency must be >= 0.")
                return linear_frequencies(start_hz, stop_hz, num_points)
            if start_hz <= 0 or stop_hz <= 0:
                raise ValueError("Log sweep frequencies must be > 0.")
            return np.geomspace(start_hz, stop_hz, num_points, dtype=float)

        if sweep_type == 'list':
            points = [to_hertz(p) for p in raw_sweep_config['points']]
            if any(f < 0 for f in points):
                raise ValueError("Frequencies in list must be non-negative.")
            return np.array(sorted(set(points)), dtype=float)

        raise ValueError(f"Unknown sweep type '{sweep_type}'.")
    except (KeyError, ValueError, TypeError, pint.DimensionalityError, pint.UndefinedUnitError) as e:
        raise ConfigParsingError(details=f"Failed to parse sweep configuration: {e}") from e


class RunConfigParser:
    """Loads and validates run configurations from YAML files or dictionaries."""

    def __init__(self):
        self._validator = EnhancedValidator(RUN_CONFIG_SCHEMA)
        self._validator.allow_unknown = False
        logger.debug("RunConfigParser initialized with strict structural validation rules.")

    def parse_file(self, path: Union[str, Path]) -> RunConfig:
        path = Path(path).resolve()
        logger.info(f"Loading run configuration: {path}")
        return self.parse_dict(self._load_yaml(path), base_path=path.parent, source=path)

    def parse_dict(
        self,
        raw: Dict[str, Any],
        base_path: Optional[Union[str, Path]] = None,
        source: Union[str, Path] = "<dict>",
    ) -> RunConfig:
        """
        Validates a configuration mapping and resolves it into a `RunConfig`.

        Raises:
            SchemaValidationError: If the mapping does not match the schema.
            ConfigParsingError: If the sweep values cannot be turned into frequencies.
        """
        if not self._validator.validate(raw):
            raise SchemaValidationError(self._validator.errors, source)
        doc = self._validator.document
        if ("netlist" in doc) == ("netlist_text" in doc):
            raise SchemaValidationError(
                {"netlist": ["Exactly one of 'netlist' or 'netlist_text' must be given."]}, source
            )

        base = Path(base_path) if base_path is not None else Path.cwd()
        frequencies = parse_sweep_config(doc["sweep"])
        sweep = doc["sweep"]
        linear = None
        if sweep["type"] == "linear":
            linear = (to_hertz(sweep["start"]), to_hertz(sweep["stop"]), int(sweep["num_points"]))

        netlist_path = None
        if "netlist" in doc:
            netlist_path = Path(doc["netlist"])
            if not netlist_path.is_absolute():
                netlist_path = base / netlist_path

        output = doc.get("output", {})
        touchstone_path = None
        if "touchstone" in output:
            touchstone_path = Path(output["touchstone"])
            if not touchstone_path.is_absolute():
                touchstone_path = base / touchstone_path

        default_name = netlist_path.stem if netlist_path is not None else "circuit"
        config = RunConfig(
            frequencies=frequencies,
            netlist_path=netlist_path,
            netlist_text=doc.get("netlist_text"),
            name=doc.get("name", default_name),
            method=doc.get("solver", {}).get("method", "gauss_jordan"),
            touchstone_path=touchstone_path,
            touchstone_format=output.get("format", "RI"),
            log_level=doc.get("log_level"),
            base_path=base,
            linear=linear,
        )
        logger.info(
            f"Run configuration '{config.name}': {len(frequencies)} frequency point(s), solver '{config.method}'."
        )
        return config

    def _load_yaml(self, source: Path) -> Dict[str, Any]:
        """Loads and performs basic sanity checks on a YAML file."""
        if not source.is_file():
            raise ParsingError(details=f"Configuration file not found at path: {source}", file_path=source)
        try:
            with source.open("r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except PermissionError as e:
            raise ParsingError(details=f"Permission denied when trying to read file: {e}", file_path=source) from e
        except yaml.YAMLError as e:
            raise ParsingError(details=f"Invalid YAML syntax: {e}", file_path=source) from e
        if content is None:
            raise ParsingError(details="The YAML file is empty or contains no valid content.", file_path=source)
        if not isinstance(content, dict):
            raise ParsingError(details="The root of the YAML file must be a dictionary (mapping).", file_path=source)
        return content
