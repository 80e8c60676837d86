# src/sparsim/validation/issue_codes.py
import logging
from enum import Enum

logger = logging.getLogger(__name__)


class SemanticIssueCode(Enum):
    """
    Registry of model validation issue codes and their message templates.
    Each enum member's value is a tuple: (code_str, message_template_str).
    """

    # --- Port Issues (PORT_...) ---
    PORT_NONE = ("PORT_NONE", "Circuit '{circuit_name}' defines no ports; S-parameters cannot be computed.")
    PORT_NODE_RANGE = ("PORT_NODE_RANGE", "Port {port_index} ('{port_name}') is on node {node}, outside the valid range 1..{num_nodes}.")
    PORT_NODE_SHARED = ("PORT_NODE_SHARED", "Ports {port_indices} all sit on node {node}; their S-parameters will be identical.")

    # --- Component Issues (COMP_...) ---
    COMP_NAME_DUPLICATE = ("COMP_NAME_DUPLICATE", "Component name '{component_fqn}' is used {count} times.")
    COMP_ALL_GROUND = ("COMP_ALL_GROUND", "Component '{component_fqn}' has every terminal on ground (node 0) and has no effect.")

    # --- Net Connectivity Issues (NET_CONN_...) ---
    NET_CONN_UNREACHABLE = ("NET_CONN_UNREACHABLE", "Node {node} is not connected to any port or to ground; it only receives the GMIN leak.")
    NET_CONN_SINGLE = ("NET_CONN_SINGLE", "Node {node} has only a single connection, to component '{connected_to_component}'.")

    @property
    def code(self) -> str:
        return self.value[0]

    @property
    def template(self) -> str:
        return self.value[1]

    def format_message(self, **kwargs) -> str:
        """Formats the message template with provided keyword arguments."""
        try:
            return self.template.format(**kwargs)
        except KeyError as e:
            logger.error(f"Missing key {e} for formatting message template of {self.name} (code: {self.code}): '{self.template}'. Provided args: {kwargs}")
            return f"Error formatting message for {self.code}: Missing key {e}. Template: '{self.template}' Args: {kwargs}"
