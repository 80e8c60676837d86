# src/sparsim/components/capabilities.py
"""
Defines the capability architecture for SParSim components.

Analysis code never switches on a component's kind. Instead it asks a component
instance for a capability (a `typing.Protocol`) and calls it. Every component kind
provides `IAdmittanceStamp`; `IConnectivityProvider` reports which of its nodes are
coupled, for topology checks.

Key elements:
- ComponentCapability: A marker protocol for all capabilities.
- IAdmittanceStamp: The contract for adding a component's contribution to the
  nodal admittance matrix at one frequency.
- IConnectivityProvider: The contract for reporting internal node-to-node coupling.
- @provides: A class decorator for declaratively registering a nested class as the
  implementation of a capability.
- TCapability: A TypeVar for precise type-hinting of capability queries.
"""

import logging
from typing import (
    List,
    Protocol,
    Tuple,
    Type,
    TypeVar,
    TYPE_CHECKING,
    runtime_checkable,
)

import numpy as np

# Use TYPE_CHECKING to import ComponentBase only for type analysis,
# preventing a circular import at runtime.
if TYPE_CHECKING:
    from .base import ComponentBase

logger = logging.getLogger(__name__)


@runtime_checkable
class ComponentCapability(Protocol):
    """
    A marker protocol for all component capabilities. Any class that provides
    a specific functionality to an analysis engine should conform to a
    protocol that inherits from this one.
    """

    pass


# TCapability is bound to ComponentCapability so that a request for
# `IAdmittanceStamp` is known by the type checker to return an `IAdmittanceStamp`.
TCapability = TypeVar("TCapability", bound=ComponentCapability)


@runtime_checkable
class IAdmittanceStamp(ComponentCapability, Protocol):
    """
    Defines the capability of a component to contribute to the nodal admittance
    matrix of a linear, frequency-domain network.

    CONTRACT:
    1.  The method mutates `Y` in place by *adding* the component's contribution.
        It never overwrites entries and never touches other components' state.
    2.  `Y` is indexed by `node - 1`; node 0 is ground and has no row or column.
    3.  The frequency is an explicit argument. Implementations must not cache it.
    """

    def stamp(
        self,
        component: "ComponentBase",
        Y: np.ndarray,
        frequency: float,
    ) -> None:
        """
        Adds the component's admittance contribution at `frequency` (Hz) to `Y`.

        Args:
            component: The component instance, providing nodes and parameters.
            Y: The global (num_nodes x num_nodes) complex admittance matrix.
            frequency: The analysis frequency in Hz.
        """
        ...


@runtime_checkable
class IConnectivityProvider(ComponentCapability, Protocol):
    """
    Defines the capability of a component to report which of its nodes are coupled
    through it, as a list of node pairs. Used by the model validator to build the
    connectivity graph.
    """
    def get_connectivity(
        self,
        component: "ComponentBase",
    ) -> List[Tuple[int, int]]:
        ...


def provides(capability_protocol: Type[ComponentCapability]):
    """
    A class decorator to register a class as an implementation for a capability.

    This decorator attaches a private attribute, `_implements_capability`, to the
    decorated class. `ComponentBase.declare_capabilities` uses this attribute for
    automatic discovery.

    Args:
        capability_protocol: The capability Protocol (e.g., IAdmittanceStamp)
                             that this class implements.
    """

    def decorator(cls: Type) -> Type:
        if not issubclass(capability_protocol, ComponentCapability):
            raise TypeError(
                f"Decorator argument for @provides must be a ComponentCapability "
                f"Protocol, but got {capability_protocol}."
            )
        cls._implements_capability = capability_protocol
        logger.debug(
            f"Class '{cls.__name__}' registered as providing capability '{capability_protocol.__name__}'."
        )
        return cls

    return decorator
