# src/sparsim/validation/model_validator.py
import logging
from collections import Counter, defaultdict
from typing import Dict, List

import networkx as nx

from ..components.base import ComponentBase
from ..components.capabilities import IConnectivityProvider
from ..data_structures import CircuitModel
from .issue_codes import SemanticIssueCode
from .issues import ValidationIssue, ValidationIssueLevel

logger = logging.getLogger(__name__)


class ModelValidator:
    """
    Checks a `CircuitModel` for problems that the parser cannot see on a single line.

    Port problems and duplicate names are errors. Dead components and nodes that no
    port can reach are warnings, since the solver still produces a result (GMIN
    keeps such nodes solvable). Dangling single-connection nodes are reported as info.
    """

    def __init__(self, model: CircuitModel):
        if not isinstance(model, CircuitModel):
            raise TypeError("ModelValidator requires a CircuitModel.")
        self.model = model
        self.issues: List[ValidationIssue] = []

    def validate(self) -> List[ValidationIssue]:
        """
        Runs every check.

        Returns:
            All issues found (errors, warnings and info). The caller decides whether
            ERROR-level issues stop the run.
        """
        self.issues = []
        logger.info(f"Starting validation of '{self.model.name}'...")

        self._check_ports()
        self._check_component_names()
        self._check_connectivity()

        if self.issues:
            counts = Counter(issue.level for issue in self.issues)
            logger.info(
                f"Validation complete. Found: {counts[ValidationIssueLevel.ERROR]} errors, "
                f"{counts[ValidationIssueLevel.WARNING]} warnings, {counts[ValidationIssueLevel.INFO]} info messages."
            )
        else:
            logger.info("Validation complete with no issues found.")
        return self.issues

    def _add_issue(self, level: ValidationIssueLevel, code: SemanticIssueCode, component_fqn=None, **details):
        issue = ValidationIssue(
            level=level,
            code=code.code,
            message=code.format_message(component_fqn=component_fqn, **details),
            component_fqn=component_fqn,
            details=details,
        )
        logger.debug(f"Validation issue: {issue}")
        self.issues.append(issue)

    def _check_ports(self):
        model = self.model
        if not model.ports:
            self._add_issue(ValidationIssueLevel.ERROR, SemanticIssueCode.PORT_NONE, circuit_name=model.name)
            return

        by_node: Dict[int, List[int]] = defaultdict(list)
        for index, port in enumerate(model.ports):
            if port.node < 1 or port.node > model.num_nodes:
                self._add_issue(
                    ValidationIssueLevel.ERROR, SemanticIssueCode.PORT_NODE_RANGE,
                    port_index=index, port_name=port.name, node=port.node, num_nodes=model.num_nodes,
                )
            by_node[port.node].append(index)

        for node, indices in sorted(by_node.items()):
            if len(indices) > 1:
                self._add_issue(
                    ValidationIssueLevel.WARNING, SemanticIssueCode.PORT_NODE_SHARED,
                    node=node, port_indices=indices,
                )

    def _check_component_names(self):
        counts = Counter(comp.instance_id for comp in self.model.components)
        for name, count in sorted(counts.items()):
            if count > 1:
                self._add_issue(ValidationIssueLevel.ERROR, SemanticIssueCode.COMP_NAME_DUPLICATE, component_fqn=name, count=count)

    def _check_connectivity(self):
        graph = self.build_graph()
        connections: Dict[int, List[ComponentBase]] = defaultdict(list)

        for comp in self.model.components:
            if all(node == 0 for node in comp.nodes):
                self._add_issue(ValidationIssueLevel.WARNING, SemanticIssueCode.COMP_ALL_GROUND, component_fqn=comp.fqn)
            for node in set(comp.nodes):
                if node != 0:
                    connections[node].append(comp)

        anchors = {0} | {port.node for port in self.model.ports if port.node in graph}
        reachable = set()
        for anchor in anchors:
            reachable |= nx.node_connected_component(graph, anchor)

        for node in sorted(connections):
            if node not in reachable:
                self._add_issue(ValidationIssueLevel.WARNING, SemanticIssueCode.NET_CONN_UNREACHABLE, node=node)

        port_nodes = {port.node for port in self.model.ports}
        for node, comps in sorted(connections.items()):
            if len(comps) == 1 and node not in port_nodes:
                self._add_issue(
                    ValidationIssueLevel.INFO, SemanticIssueCode.NET_CONN_SINGLE,
                    node=node, connected_to_component=comps[0].fqn,
                )

    def build_graph(self) -> nx.Graph:
        """
        Connectivity graph of the model: one graph node per circuit node (ground
        included), and edges from each component's connectivity capability.
        """
        graph = nx.Graph()
        graph.add_nodes_from(range(self.model.num_nodes + 1))
        for comp in self.model.components:
            provider = comp.get_capability(IConnectivityProvider)
            if provider is None:
                continue
            for a, b in provider.get_connectivity(comp):
                graph.add_edge(a, b, component=comp.fqn)
        return graph
