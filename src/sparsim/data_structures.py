# src/sparsim/data_structures.py
# Required for forward references in type hints (e.g., 'ComponentBase')
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Tuple, TYPE_CHECKING

from .constants import DEFAULT_PORT_IMPEDANCE_OHMS

logger = logging.getLogger(__name__)

# Use TYPE_CHECKING to avoid circular imports for type hints at runtime.
if TYPE_CHECKING:
    from .components.base import ComponentBase


@dataclass(frozen=True)
class Port:
    """
    An external port: a travelling-wave excitation applied between `node` and ground,
    referenced to `impedance` ohms.
    """
    node: int
    impedance: float = DEFAULT_PORT_IMPEDANCE_OHMS
    name: str = ""

    def __post_init__(self):
        if not (self.impedance > 0):
            raise ValueError(
                f"Port '{self.name or self.node}' reference impedance must be > 0, got {self.impedance}."
            )


@dataclass(frozen=True)
class CircuitModel:
    """
    The simulation-ready circuit: an ordered component list, an ordered port list and
    the derived node count.

    Node 0 is ground and is never counted. `num_nodes` is the highest node index
    referenced by any component or port, so indices need not be dense.
    The model is immutable; the only per-sample input of a solve is the frequency,
    which is always passed explicitly.
    """
    name: str
    components: Tuple[ComponentBase, ...]
    ports: Tuple[Port, ...]
    num_nodes: int

    @classmethod
    def from_parts(
        cls,
        components: Iterable[ComponentBase],
        ports: Iterable[Port],
        name: str = "circuit",
        num_nodes: int = 0,
    ) -> "CircuitModel":
        """
        Builds a model and derives `num_nodes`. An explicit `num_nodes` larger than
        the highest referenced node is kept, which reserves unconnected node rows.
        """
        components = tuple(components)
        ports = tuple(ports)
        highest = 0
        for comp in components:
            if comp.nodes:
                highest = max(highest, max(comp.nodes))
        for port in ports:
            highest = max(highest, port.node)
        model = cls(name=name, components=components, ports=ports, num_nodes=max(highest, num_nodes))
        logger.debug(
            f"CircuitModel '{name}' created: {len(components)} component(s), "
            f"{len(ports)} port(s), {model.num_nodes} node(s)."
        )
        return model

    @property
    def num_ports(self) -> int:
        return len(self.ports)

    def get_component(self, instance_id: str) -> ComponentBase:
        for comp in self.components:
            if comp.instance_id == instance_id:
                return comp
        raise KeyError(instance_id)
