# src/sparsim/parser/netlist.py
"""
Line-oriented netlist parser.

Each non-blank line that does not start with '*' describes one element or port.
The element kind is the alphabetic prefix of the first token ('TLIN' in 'TLIN3').
A line that cannot be turned into a valid component is recorded as a `ParseSkip`,
logged at WARNING, and parsing continues with the next line.
"""
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

import numpy as np

from ..components.base import ComponentBase
from ..components.coupler import IdealCoupler
from ..components.exceptions import ComponentError
from ..components.lines import CoupledLine, TransmissionLine
from ..components.lumped import (
    Capacitor, ComplexImpedance, Inductor, OpenStub, Resistor, ShortStub,
)
from ..components.microstrip import (
    MicrostripCoupledLines, MicrostripLine, MicrostripOpen, MicrostripStep, MicrostripVia,
)
from ..components.parameters import (
    CapacitorParams,
    ComplexImpedanceParams,
    CoupledLineParams,
    FrequencyDependentSParameterParams,
    IdealCouplerParams,
    InductorParams,
    LineParams,
    MicrostripCoupledLinesParams,
    MicrostripLineParams,
    MicrostripOpenParams,
    MicrostripStepParams,
    MicrostripViaParams,
    ResistorParams,
    SParameterBlockParams,
    SubstrateParams,
)
from ..components.sparameter_blocks import FrequencyDependentSParameterBlock, SParameterBlock
from ..constants import DEFAULT_PORT_IMPEDANCE_OHMS
from ..data_structures import CircuitModel, Port
from .exceptions import MissingDataFile, ParseSkip, ParsingError
from .scaled_value import parse_scaled_value
from .touchstone import read_touchstone

logger = logging.getLogger(__name__)

KIND_REGEX = re.compile(r"^([A-Za-z]+)\d+")

COMPLEX_IMPEDANCE_REGEX = re.compile(
    r"^\s*([-+]?\d*\.?\d+(?:[kKmM]?))\s*(?:Ohm)?\s*((?:[-+]\s*j\s*\d*\.?\d+(?:[kKmM]?))?)\s*(?:Ohm)?\s*$"
)

INLINE_S_ENTRY_REGEX = re.compile(r"\(([-+]?\d*\.?\d+[a-zA-Z]*),([-+]?\d*\.?\d+[a-zA-Z]*)\)")

#: Minimum number of whitespace-separated tokens per element kind.
MIN_TOKENS: Dict[str, int] = {
    "R": 4, "C": 4, "L": 4, "Z": 4,
    "TLIN": 5, "OSTUB": 5, "SSTUB": 5,
    "CLIN": 8,
    "COUPLER": 7,
    "MLIN": 10,
    "MSCOUP": 13,
    "MSTEP": 10,
    "MSOPEN": 8,
    "MSVIA": 9,
    "P": 2,
    "SPAR": 4,
}


class _SkipLine(Exception):
    """Internal signal: abandon the current line with a reason."""
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


@dataclass
class ParsedNetlist:
    """The parsed circuit plus a record of every skipped line."""
    model: CircuitModel
    skipped: List[ParseSkip] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.skipped


def element_kind(name: str) -> str:
    """Alphabetic prefix of an element name; the whole name if no digits follow."""
    match = KIND_REGEX.match(name)
    return match.group(1) if match else name


def parse_complex_impedance(token: str) -> Optional[complex]:
    """Parses 'R', 'R+jX' or 'R-jX' with optional k/K/m/M suffixes and 'Ohm'."""
    match = COMPLEX_IMPEDANCE_REGEX.match(token)
    if not match:
        return None
    real = parse_scaled_value(match.group(1))
    imag = 0.0
    imag_str = re.sub(r"\s+", "", match.group(2))
    if imag_str:
        imag = parse_scaled_value(imag_str.replace("j", ""))
    return complex(real, imag)


def parse_inline_s_matrix(text: str, num_ports: int) -> Optional[np.ndarray]:
    """
    Parses '(re,im)' for one port, or '(re,im) (re,im); (re,im) (re,im)' for two
    ports (row-major). Returns None if any entry is missing.
    """
    s = np.zeros((num_ports, num_ports), dtype=np.complex128)
    if num_ports == 1:
        match = INLINE_S_ENTRY_REGEX.search(text)
        if not match:
            return None
        s[0, 0] = complex(parse_scaled_value(match.group(1)), parse_scaled_value(match.group(2)))
        return s

    rows = [r.strip() for r in text.split(";") if r.strip()]
    if len(rows) < num_ports:
        return None
    for r in range(num_ports):
        entries = INLINE_S_ENTRY_REGEX.findall(rows[r])
        if len(entries) < num_ports:
            return None
        for c in range(num_ports):
            re_str, im_str = entries[c]
            s[r, c] = complex(parse_scaled_value(re_str), parse_scaled_value(im_str))
    return s


class NetlistParser:
    """
    Turns netlist text into a `CircuitModel`.

    The parser is stateless between calls; `parse_text` and `parse_file` may be
    called repeatedly on one instance.
    """

    def __init__(self):
        self._handlers: Dict[str, Callable[[str, List[str], "_LineContext"], None]] = {
            "R": self._parse_resistor,
            "C": self._parse_capacitor,
            "L": self._parse_inductor,
            "Z": self._parse_impedance,
            "TLIN": self._parse_line,
            "OSTUB": self._parse_line,
            "SSTUB": self._parse_line,
            "CLIN": self._parse_coupled_line,
            "COUPLER": self._parse_coupler,
            "MLIN": self._parse_microstrip_line,
            "MSCOUP": self._parse_microstrip_coupled,
            "MSTEP": self._parse_microstrip_step,
            "MSOPEN": self._parse_microstrip_open,
            "MSVIA": self._parse_microstrip_via,
            "P": self._parse_port,
            "SPAR": self._parse_spar,
        }
        logger.debug(f"NetlistParser initialized for element kinds: {sorted(self._handlers)}")

    def parse_file(self, path: Union[str, Path], name: Optional[str] = None) -> ParsedNetlist:
        """
        Reads and parses a netlist file. Relative Touchstone paths are resolved
        against the netlist's directory.

        Raises:
            ParsingError: If the file cannot be read.
        """
        path = Path(path)
        try:
            text = path.read_text()
        except OSError as e:
            raise ParsingError(details=f"Cannot read netlist: {e}", file_path=path) from e
        logger.info(f"Parsing netlist file: {path}")
        return self.parse_text(text, base_path=path.parent, name=name or path.stem, source_file=path)

    def parse_text(
        self,
        text: str,
        base_path: Optional[Union[str, Path]] = None,
        name: str = "circuit",
        source_file: Optional[Union[str, Path]] = None,
    ) -> ParsedNetlist:
        """Parses netlist text. Never raises for a bad line; see `ParsedNetlist.skipped`."""
        ctx = _LineContext(base_path=Path(base_path) if base_path is not None else Path.cwd())
        skipped: List[ParseSkip] = []

        for line_number, raw in enumerate(text.splitlines(), start=1):
            line = raw.strip()
            if not line or line.startswith("*"):
                continue
            parts = line.split()
            name_token = parts[0]
            kind = "Z" if name_token[0] in "Zz" else element_kind(name_token)

            try:
                handler = self._handlers.get(kind)
                if handler is None:
                    raise _SkipLine(f"Unknown element kind '{kind}'.")
                minimum = MIN_TOKENS[kind]
                if len(parts) < minimum:
                    raise _SkipLine(f"'{kind}' needs at least {minimum} fields, got {len(parts)}.")
                handler(name_token, parts, ctx)
            except _SkipLine as e:
                skip = ParseSkip(line_number=line_number, line=line, reason=e.reason, source_file=source_file)
                logger.warning(str(skip))
                skipped.append(skip)

        model = CircuitModel.from_parts(ctx.components, ctx.ports, name=name)
        logger.info(
            f"Parsed netlist '{name}': {len(model.components)} component(s), {model.num_ports} port(s), "
            f"{model.num_nodes} node(s), {len(skipped)} skipped line(s)."
        )
        return ParsedNetlist(model=model, skipped=skipped)

    # --- Element handlers ---

    def _parse_resistor(self, name: str, parts: List[str], ctx: "_LineContext") -> None:
        nodes = ctx.nodes(parts[1:3])
        ctx.add(Resistor, name, nodes, ResistorParams(resistance=_value(parts[3])))

    def _parse_capacitor(self, name: str, parts: List[str], ctx: "_LineContext") -> None:
        nodes = ctx.nodes(parts[1:3])
        ctx.add(Capacitor, name, nodes, CapacitorParams(capacitance=_value(parts[3])))

    def _parse_inductor(self, name: str, parts: List[str], ctx: "_LineContext") -> None:
        nodes = ctx.nodes(parts[1:3])
        ctx.add(Inductor, name, nodes, InductorParams(inductance=_value(parts[3])))

    def _parse_impedance(self, name: str, parts: List[str], ctx: "_LineContext") -> None:
        nodes = ctx.nodes(parts[1:3])
        z = parse_complex_impedance(parts[3])
        if z is None:
            raise _SkipLine(f"Cannot parse complex impedance '{parts[3]}'; expected e.g. '50', '25+j10' or '1k-j2.2kOhm'.")
        ctx.add(ComplexImpedance, name, nodes, ComplexImpedanceParams(impedance=z))

    def _parse_line(self, name: str, parts: List[str], ctx: "_LineContext") -> None:
        cls = {"TLIN": TransmissionLine, "OSTUB": OpenStub, "SSTUB": ShortStub}[element_kind(name)]
        nodes = ctx.nodes(parts[1:3])
        params = LineParams(z0=_value(parts[3]), length=_length(parts[4]))
        ctx.add(cls, name, nodes, params)

    def _parse_coupled_line(self, name: str, parts: List[str], ctx: "_LineContext") -> None:
        nodes = ctx.nodes(parts[1:5])
        params = CoupledLineParams(
            z0e=_value(parts[5]),
            z0o=_value(parts[6]),
            length=_length(parts[7]),
        )
        ctx.add(CoupledLine, name, nodes, params)

    def _parse_coupler(self, name: str, parts: List[str], ctx: "_LineContext") -> None:
        nodes = ctx.nodes(parts[1:5])
        z0 = _value(parts[7]) if len(parts) >= 8 else DEFAULT_PORT_IMPEDANCE_OHMS
        params = IdealCouplerParams(
            coupling=_value(parts[5]),
            phase_deg=_value(parts[6]),
            z0=z0,
        )
        ctx.add(IdealCoupler, name, nodes, params)

    def _parse_microstrip_line(self, name: str, parts: List[str], ctx: "_LineContext") -> None:
        nodes = ctx.nodes(parts[1:3])
        params = MicrostripLineParams(
            width=_length(parts[3]),
            length=_length(parts[4]),
            substrate=_substrate(parts[5:10]),
        )
        ctx.add(MicrostripLine, name, nodes, params)

    def _parse_microstrip_coupled(self, name: str, parts: List[str], ctx: "_LineContext") -> None:
        nodes = ctx.nodes(parts[1:5])
        params = MicrostripCoupledLinesParams(
            width=_length(parts[5]),
            length=_length(parts[6]),
            gap=_length(parts[7]),
            substrate=_substrate(parts[8:13]),
        )
        ctx.add(MicrostripCoupledLines, name, nodes, params)

    def _parse_microstrip_step(self, name: str, parts: List[str], ctx: "_LineContext") -> None:
        nodes = ctx.nodes(parts[1:3])
        params = MicrostripStepParams(
            width1=_length(parts[3]),
            width2=_length(parts[4]),
            substrate=_substrate(parts[5:10]),
        )
        ctx.add(MicrostripStep, name, nodes, params)

    def _parse_microstrip_open(self, name: str, parts: List[str], ctx: "_LineContext") -> None:
        nodes = ctx.nodes(parts[1:2])
        params = MicrostripOpenParams(width=_length(parts[2]), substrate=_substrate(parts[3:8]))
        ctx.add(MicrostripOpen, name, nodes, params)

    def _parse_microstrip_via(self, name: str, parts: List[str], ctx: "_LineContext") -> None:
        nodes = ctx.nodes(parts[1:2])
        try:
            count = int(parts[3])
        except ValueError:
            raise _SkipLine(f"Via count '{parts[3]}' is not an integer.") from None
        params = MicrostripViaParams(
            diameter=_length(parts[2]),
            count=count,
            substrate=_substrate(parts[4:9]),
        )
        ctx.add(MicrostripVia, name, nodes, params)

    def _parse_port(self, name: str, parts: List[str], ctx: "_LineContext") -> None:
        node = ctx.nodes(parts[1:2])[0]
        impedance = _value(parts[2]) if len(parts) >= 3 else DEFAULT_PORT_IMPEDANCE_OHMS
        try:
            port = Port(node=node, impedance=impedance, name=name)
        except ValueError as e:
            raise _SkipLine(str(e)) from None
        ctx.ports.append(port)

    def _parse_spar(self, name: str, parts: List[str], ctx: "_LineContext") -> None:
        nodes = ctx.nodes(parts[1:3])
        num_ports = 1 if 0 in nodes else 2
        rest = parts[3:]

        if not rest[0].startswith("("):
            path = Path(rest[0])
            if not path.is_absolute():
                path = ctx.base_path / path
            try:
                data = read_touchstone(path)
            except MissingDataFile as e:
                logger.error(e.get_diagnostic_report())
                raise _SkipLine(str(e)) from None
            if data.num_ports not in (1, 2):
                raise _SkipLine(f"'{path.name}' describes {data.num_ports} ports; only 1- and 2-port blocks are supported.")
            params = FrequencyDependentSParameterParams(
                frequencies=data.frequencies,
                s_matrices=data.s_parameters,
                z0=data.z0,
                source=str(path),
            )
            ctx.add(FrequencyDependentSParameterBlock, name, nodes, params)
            return

        s = parse_inline_s_matrix(" ".join(rest), num_ports)
        if s is None:
            raise _SkipLine(f"Cannot parse inline {num_ports}-port S-matrix '{' '.join(rest)}'.")
        ctx.add(SParameterBlock, name, nodes, SParameterBlockParams(s_matrix=s))


@dataclass
class _LineContext:
    """Mutable accumulator for one parse run."""
    base_path: Path
    components: List[ComponentBase] = field(default_factory=list)
    ports: List[Port] = field(default_factory=list)
    names: set = field(default_factory=set)

    def nodes(self, tokens: Sequence[str]) -> List[int]:
        result = []
        for token in tokens:
            try:
                node = int(token)
            except ValueError:
                raise _SkipLine(f"Node '{token}' is not an integer.") from None
            if node < 0:
                raise _SkipLine(f"Node {node} is negative.")
            result.append(node)
        return result

    def add(self, cls, name: str, nodes: List[int], params) -> None:
        if name in self.names:
            raise _SkipLine(f"Duplicate element name '{name}'.")
        try:
            component = cls(name, nodes, params)
        except ComponentError as e:
            raise _SkipLine(e.details) from None
        self.names.add(name)
        self.components.append(component)


def _value(token: str) -> float:
    try:
        return parse_scaled_value(token)
    except ValueError as e:
        raise _SkipLine(str(e)) from None


def _length(token: str) -> float:
    try:
        return parse_scaled_value(token, length=True)
    except ValueError as e:
        raise _SkipLine(str(e)) from None


def _substrate(tokens: Sequence[str]) -> SubstrateParams:
    """er, h, cond, th, tand, each in SI-prefix mode."""
    er, h, cond, th, tand = (_value(t) for t in tokens)
    return SubstrateParams(er=er, height=h, conductivity=cond, thickness=th, tand=tand)
