# src/sparsim/errors.py
"""
Exception roots shared by every SParSim package.

Internal failures derive from `DiagnosableError` and know how to describe
themselves. The simulation facade turns them into one of the two user-facing
errors, `NetlistBuildError` or `SimulationRunError`, whose message is the report.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

logger = logging.getLogger(__name__)


class SparSimError(Exception):
    """Root of the user-facing errors."""


class NetlistBuildError(SparSimError):
    """The netlist or run configuration could not be turned into a circuit model."""


class SimulationRunError(SparSimError):
    """The sweep could not run, or its result could not be written."""


class DiagnosableError(Exception, ABC):
    """An internal error that can render a report for the user."""

    @abstractmethod
    def get_diagnostic_report(self) -> str:
        raise NotImplementedError


#: Report header labels, in display order, for the context keys errors may set.
REPORT_CONTEXT_LABELS = (
    ("fqn", "Component"),
    ("source_file", "Source File"),
    ("line_number", "Line"),
    ("user_input", "Input"),
    ("frequency", "Frequency"),
)

_RULE = "=" * 64


def format_diagnostic_report(error_type: str, details: str, suggestion: str, context: Dict[str, Any]) -> str:
    """
    Lays out a report: a header with the error type and whichever of the
    `REPORT_CONTEXT_LABELS` keys are set in `context`, then the indented
    details and suggestion.
    """
    lines = ["", f"SParSim diagnostic: {error_type}", _RULE]
    for key, label in REPORT_CONTEXT_LABELS:
        value = context.get(key)
        if value is None or value == "":
            continue
        shown = f"'{value}'" if key == "user_input" else value
        lines.append(f"{label + ':':<14}{shown}")

    lines.append("Details:")
    lines.extend(f"  {line}" for line in details.splitlines())
    if suggestion:
        lines.append("Suggestion:")
        lines.extend(f"  {line}" for line in suggestion.splitlines())
    lines.append(_RULE)
    return "\n".join(lines)
