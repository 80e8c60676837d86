# src/sparsim/validation/exceptions.py
"""
Defines the diagnosable exception raised when model validation finds errors.
"""
from typing import List

from .issues import ValidationIssue, ValidationIssueLevel
from ..errors import DiagnosableError, format_diagnostic_report


class SemanticValidationError(DiagnosableError):
    """
    Raised when model validation detects one or more ERROR-level issues.

    Only the ERROR-level issues of the list passed in are kept.
    """
    def __init__(self, issues: List[ValidationIssue]):
        self.issues: List[ValidationIssue] = [
            issue for issue in issues if issue.level == ValidationIssueLevel.ERROR
        ]
        if not self.issues:
            summary_message = "SemanticValidationError was raised with no error-level issues."
        else:
            summary_message = (
                f"Model validation failed with {len(self.issues)} error(s):\n"
                + "\n".join(f"  - {issue}" for issue in self.issues)
            )
        super().__init__(summary_message)

    def get_diagnostic_report(self) -> str:
        details = (
            f"One or more logical errors were found in the circuit.\n"
            f"Found {len(self.issues)} error(s). See details below:\n\n"
            + "\n".join(f"  - {issue}" for issue in self.issues)
        )
        context = {}
        first_issue = self.issues[0] if self.issues else None
        if first_issue:
            context['fqn'] = first_issue.component_fqn or 'Multiple'
        return format_diagnostic_report(
            error_type="Circuit Validation Error",
            details=details,
            suggestion="Review and correct all validation errors listed above in the netlist.",
            context=context
        )
