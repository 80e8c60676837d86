# src/sparsim/components/base.py

import dataclasses
import inspect
import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, List, Optional, Sequence, Tuple, Type

from .capabilities import (
    ComponentCapability, TCapability, IConnectivityProvider, provides
)
from .exceptions import ComponentError


logger = logging.getLogger(__name__)


class ComponentBase(ABC):
    """
    The abstract base class for all circuit components in SParSim.

    A component is a tagged record: its class is the tag, `nodes` is the ordered list
    of node indices (its length is fixed by `declare_ports()`), and `params` is a
    typed, frozen parameter record of type `parameter_type`. Both are validated once,
    here, so stamps can trust them.

    Behaviour is attached through capabilities (nested classes decorated with
    `@provides`) rather than abstract methods, so analysis code stays agnostic of
    component kinds.
    """
    component_type_str: ClassVar[str] = "BaseComponent"
    parameter_type: ClassVar[Type] = type(None)

    def __init__(self, instance_id: str, nodes: Sequence[int], params: Any):
        """
        Initializes and validates a component instance.

        Args:
            instance_id: The unique name of this component (e.g., 'R1').
            nodes: Node indices in the order given by `declare_ports()`. 0 is ground.
            params: An instance of the class's `parameter_type` record.

        Raises:
            ComponentError: If the node list has the wrong length or contains invalid
                            indices, or if the parameter record is of the wrong type or
                            violates its constraints.
        """
        self.instance_id: str = instance_id
        self.component_type: str = type(self).component_type_str

        ports = type(self).declare_ports()
        nodes = tuple(nodes)
        if len(nodes) != len(ports):
            raise ComponentError(
                component_fqn=instance_id,
                details=f"{self.component_type} requires {len(ports)} node(s) {ports}, but {len(nodes)} were given: {list(nodes)}."
            )
        for node in nodes:
            if isinstance(node, bool) or not isinstance(node, int) or node < 0:
                raise ComponentError(
                    component_fqn=instance_id,
                    details=f"Node indices must be non-negative integers, got {node!r}."
                )
        self.nodes: Tuple[int, ...] = nodes

        if not isinstance(params, type(self).parameter_type):
            raise ComponentError(
                component_fqn=instance_id,
                details=(f"{self.component_type} expects parameters of type "
                         f"'{type(self).parameter_type.__name__}', got '{type(params).__name__}'.")
            )
        problems = params.validate() if hasattr(params, "validate") else []
        if problems:
            raise ComponentError(
                component_fqn=instance_id,
                details="Invalid parameters:\n" + "\n".join(f"- {p}" for p in problems)
            )
        self.params = params

        # Each capability object is created once, on first request.
        self._capability_cache: Dict[Type[ComponentCapability], ComponentCapability] = {}
        logger.debug(f"Initialized {type(self).__name__} '{self.fqn}' on nodes {list(self.nodes)}")

    @property
    def fqn(self) -> str:
        """The name used for this component in logs and diagnostics."""
        return self.instance_id

    @provides(IConnectivityProvider)
    class ConnectivityProvider:
        """
        Default implementation of the IConnectivityProvider capability.

        A one-node component is coupled to ground. A multi-node component couples its
        first node to each of the others, which is enough to put all of its nodes in
        one connected group.
        """
        def get_connectivity(self, component: "ComponentBase") -> List[Tuple[int, int]]:
            nodes = component.nodes
            if len(nodes) == 1:
                return [(nodes[0], 0)]
            return [(nodes[0], other) for other in nodes[1:]]

    @classmethod
    def declare_capabilities(cls) -> Dict[Type[ComponentCapability], Type]:
        """
        Discovers the capabilities map by inspecting the class hierarchy (MRO) for
        nested classes decorated with `@provides`. The most derived implementation
        of each protocol wins.

        Returns:
            A dictionary mapping a capability Protocol to the nested class that
            implements it.
        """
        discovered_capabilities = {}
        for base_class in cls.__mro__:
            for _, member_obj in inspect.getmembers(base_class):
                if hasattr(member_obj, '_implements_capability'):
                    protocol = member_obj._implements_capability
                    if protocol not in discovered_capabilities:
                        discovered_capabilities[protocol] = member_obj
        return discovered_capabilities

    def get_capability(self, capability_type: Type[TCapability]) -> Optional[TCapability]:
        """
        Queries the component instance for a specific capability.

        Args:
            capability_type: The Protocol class representing the desired capability
                             (e.g., `IAdmittanceStamp`).

        Returns:
            An instance of the capability implementation if supported, otherwise `None`.
        """
        if capability_type in self._capability_cache:
            return self._capability_cache[capability_type]

        declared = type(self).declare_capabilities()
        impl_class = declared.get(capability_type)

        if impl_class:
            instance = impl_class()
            self._capability_cache[capability_type] = instance
            return instance

        return None

    @classmethod
    @abstractmethod
    def declare_ports(cls) -> List[str]:
        """
        Declare the canonical names of the component's terminals, in node order.
        The length of this list is the component's fixed node arity.
        """
        pass

    def __str__(self) -> str:
        return f"{type(self).__name__}('{self.fqn}')"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(fqn='{self.fqn}', nodes={list(self.nodes)}, params={self.params!r})"


# --- Global Component Registry and Decorator ---

COMPONENT_REGISTRY: Dict[str, type[ComponentBase]] = {}


def register_component(type_str: str):
    """
    A class decorator to register a component class in the global component registry,
    making it available to the netlist parser and the model validator.
    """
    def decorator(cls: type[ComponentBase]):
        if not issubclass(cls, ComponentBase):
            raise TypeError(f"Class {cls.__name__} must inherit from ComponentBase.")

        try:
            ports = cls.declare_ports()
            if not isinstance(ports, list) or not ports or not all(isinstance(p, str) and p for p in ports):
                raise TypeError(
                    f"Component class '{cls.__name__}' violates API contract. "
                    f"declare_ports() must return a non-empty list of non-empty strings, but returned: {ports}."
                )
            if len(set(ports)) != len(ports):
                raise TypeError(
                    f"Component class '{cls.__name__}' violates API contract. "
                    f"declare_ports() must return a list of unique strings, but found duplicates in: {ports}."
                )
        except Exception as e:
            raise TypeError(
                f"A failure occurred while attempting to validate the API contract of "
                f"component class '{cls.__name__}'. Error during call to declare_ports(): {e}"
            ) from e

        if not dataclasses.is_dataclass(cls.parameter_type):
            raise TypeError(
                f"Component class '{cls.__name__}' violates API contract. "
                f"parameter_type must be a dataclass, got {cls.parameter_type!r}."
            )

        if type_str in COMPONENT_REGISTRY:
            logger.warning(f"Component type '{type_str}' is being redefined/overwritten.")
        cls.component_type_str = type_str
        COMPONENT_REGISTRY[type_str] = cls
        logger.info(f"Registered component type '{type_str}' -> {cls.__name__}")
        return cls
    return decorator
