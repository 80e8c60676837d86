# src/sparsim/parser/touchstone.py
"""
Touchstone (.sNp) S-parameter reader and writer.

Reader rules:
- The port count comes from the file suffix ('.s2p' -> 2 ports).
- The option line '# <unit> <param> <format> R <z0>' may list its fields in any
  order; missing fields default to GHz, S, MA and 50 Ohm. Only S data is accepted.
- '!' starts a comment, on its own line or after data.
- A record (frequency plus 2*N*N numbers) may wrap over several lines.
- After data has started, the first line that does not start with a number ends
  the data block (trailing noise parameters, for example).
- 2-port records are ordered S11 S21 S12 S22; all other port counts are row-major.
"""
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Union

import numpy as np

from ..simulation.results import SweepResult, s_parameter_series
from ..units import TOUCHSTONE_FREQUENCY_UNITS, frequency_scale
from .exceptions import MissingDataFile

logger = logging.getLogger(__name__)

SUFFIX_REGEX = re.compile(r"^\.s(\d+)p$", re.IGNORECASE)
DATA_FORMATS = ("RI", "MA", "DB")


@dataclass(frozen=True, eq=False)
class TouchstoneData:
    """S-parameter table loaded from a Touchstone file."""
    frequencies: np.ndarray   # (F,) Hz, strictly increasing
    s_parameters: np.ndarray  # (F, N, N) complex
    z0: float
    source: str = ""

    @property
    def num_ports(self) -> int:
        return int(self.s_parameters.shape[1])

    def to_series(self) -> Dict[str, np.ndarray]:
        """Plotting series with the same keys as a sweep result."""
        series = s_parameter_series(self.frequencies, self.s_parameters)
        series["n_ports"] = np.array(self.num_ports)
        series["Z0"] = np.array(self.z0)
        return series


def _to_complex(fmt: str, a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """RI: a=real, b=imag. MA: a=magnitude, b=angle (deg). DB: a=dB, b=angle (deg)."""
    if fmt == "RI":
        return a + 1j * b
    if fmt == "MA":
        return a * np.exp(1j * np.deg2rad(b))
    if fmt == "DB":
        return 10 ** (a / 20.0) * np.exp(1j * np.deg2rad(b))
    raise ValueError(f"Unsupported data format: {fmt}")


def _from_complex(fmt: str, s: complex) -> tuple:
    if fmt == "RI":
        return s.real, s.imag
    angle = float(np.degrees(np.arctan2(s.imag, s.real)))
    if fmt == "MA":
        return abs(s), angle
    with np.errstate(divide="ignore"):
        return float(20.0 * np.log10(abs(s))), angle


def port_count_from_path(path: Union[str, Path]) -> int:
    """Returns N for a '.sNp' file name."""
    path = Path(path)
    match = SUFFIX_REGEX.match(path.suffix)
    if not match or int(match.group(1)) < 1:
        raise MissingDataFile(path=path, details=f"File suffix '{path.suffix}' is not a Touchstone '.sNp' suffix.")
    return int(match.group(1))


def _parse_option_line(line: str, path: Path) -> Dict[str, object]:
    options: Dict[str, object] = {"unit": "ghz", "parameter": "S", "format": "MA", "z0": 50.0}
    tokens = line[1:].split()
    i = 0
    while i < len(tokens):
        token = tokens[i]
        lowered = token.lower()
        upper = token.upper()
        if lowered in TOUCHSTONE_FREQUENCY_UNITS:
            options["unit"] = lowered
        elif upper in DATA_FORMATS:
            options["format"] = upper
        elif upper == "R":
            if i + 1 >= len(tokens):
                raise MissingDataFile(path=path, details=f"Option line '{line}' has 'R' without an impedance.")
            try:
                options["z0"] = float(tokens[i + 1])
            except ValueError:
                raise MissingDataFile(path=path, details=f"Invalid reference impedance '{tokens[i + 1]}'.") from None
            i += 1
        elif upper in ("S", "Y", "Z", "H", "G"):
            options["parameter"] = upper
        else:
            raise MissingDataFile(path=path, details=f"Unrecognised token '{token}' in option line '{line}'.")
        i += 1
    if options["parameter"] != "S":
        raise MissingDataFile(path=path, details=f"Only S-parameter files are supported, found '{options['parameter']}'.")
    return options


def _is_numeric_start(line: str) -> bool:
    return bool(line) and (line[0].isdigit() or line[0] in "+-.")


def read_touchstone(path: Union[str, Path]) -> TouchstoneData:
    """
    Loads a Touchstone file.

    Raises:
        MissingDataFile: If the file is absent or unreadable, has a bad suffix, an
                         invalid option line, or no complete data record.
    """
    path = Path(path)
    num_ports = port_count_from_path(path)
    try:
        text = path.read_text()
    except OSError as e:
        raise MissingDataFile(path=path, details=f"Cannot read file: {e}") from e

    options = None
    numbers: List[float] = []
    data_started = False
    for raw_line in text.splitlines():
        line = raw_line.split("!", 1)[0].strip()
        if not line:
            continue
        if line.startswith("#"):
            if options is None:
                options = _parse_option_line(line, path)
            continue
        if not _is_numeric_start(line):
            if data_started:
                break
            continue
        try:
            numbers.extend(float(tok) for tok in line.split())
        except ValueError:
            raise MissingDataFile(path=path, details=f"Non-numeric value in data line '{raw_line.strip()}'.") from None
        data_started = True

    if options is None:
        options = _parse_option_line("#", path)

    record_len = 1 + 2 * num_ports * num_ports
    if not numbers:
        raise MissingDataFile(path=path, details="No S-parameter data found.")
    if len(numbers) % record_len != 0:
        raise MissingDataFile(
            path=path,
            details=f"Found {len(numbers)} numbers, which is not a whole number of {num_ports}-port records of {record_len} values.",
        )

    raw = np.array(numbers, dtype=float).reshape(-1, record_len)
    freqs = raw[:, 0] * frequency_scale(str(options["unit"]))
    if np.any(np.diff(freqs) <= 0):
        raise MissingDataFile(path=path, details="Frequencies must be strictly increasing.")

    pairs = raw[:, 1:].reshape(len(freqs), num_ports * num_ports, 2)
    values = _to_complex(str(options["format"]), pairs[:, :, 0], pairs[:, :, 1])
    s = values.reshape(len(freqs), num_ports, num_ports)
    if num_ports == 2:
        # Records are column-major for two ports: S11 S21 S12 S22.
        s = np.transpose(s, (0, 2, 1))

    data = TouchstoneData(frequencies=freqs, s_parameters=s.copy(), z0=float(options["z0"]), source=str(path))
    logger.info(
        f"Loaded {num_ports}-port Touchstone file '{path}': {len(freqs)} point(s), "
        f"{freqs[0]:.4e}-{freqs[-1]:.4e} Hz, Z0={data.z0:g} Ohm."
    )
    return data


def write_touchstone(result: SweepResult, path: Union[str, Path], fmt: str = "RI") -> Path:
    """
    Writes a sweep result as a Touchstone file with frequencies in Hz.

    Returns:
        The path written.
    """
    fmt = fmt.upper()
    if fmt not in DATA_FORMATS:
        raise ValueError(f"Unsupported Touchstone format '{fmt}'. Use one of {DATA_FORMATS}.")
    path = Path(path)
    n = result.num_ports

    lines = [
        f"! {n}-port S-parameters written by SParSim",
        f"# Hz S {fmt} R {result.z0:g}",
    ]
    for point in result.points:
        s = point.s_matrix
        if n == 2:
            order = [(0, 0), (1, 0), (0, 1), (1, 1)]
            rows = [order]
        else:
            rows = [[(r, c) for c in range(n)] for r in range(n)]
        for k, row in enumerate(rows):
            fields = [f"{point.frequency:.9e}"] if k == 0 else [" " * 15]
            for r, c in row:
                a, b = _from_complex(fmt, complex(s[r, c]))
                fields.append(f"{a:.9e} {b:.9e}")
            lines.append(" ".join(fields))

    path.write_text("\n".join(lines) + "\n")
    logger.info(f"Wrote {len(result.points)} point(s) to '{path}'.")
    return path
