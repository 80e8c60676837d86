# src/sparsim/parser/exceptions.py
"""
Defines custom, diagnosable exceptions for the parsing stage.

- `ParseSkip` describes one netlist line that could not be turned into a component
  or port. The netlist parser records it, logs it, and keeps going.
- `MissingDataFile` is raised by the Touchstone reader when a data file cannot be
  used. Inside a netlist it becomes a `ParseSkip` for the referencing line.
- `ParsingError` covers file-level failures (unreadable netlist or YAML).
- `SchemaValidationError` is raised when a run configuration does not conform to
  its Cerberus schema.
- `ConfigParsingError` is raised when a schema-valid configuration holds unusable
  values (a log sweep starting at 0 Hz, a frequency with the wrong unit).
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..errors import DiagnosableError, format_diagnostic_report


class BaseParsingError(DiagnosableError):
    """
    A local, concrete base class for all parsing errors. Provides a fallback report.
    """
    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Generic Parsing Error",
            details=str(self),
            suggestion="Please check the format and content of the input file.",
            context={}
        )


@dataclass()
class ParseSkip(BaseParsingError):
    """A netlist line that was skipped, with the reason."""
    line_number: int
    line: str
    reason: str
    source_file: Optional[Union[str, Path]] = None

    def __str__(self):
        return f"Line {self.line_number} skipped ('{self.line}'): {self.reason}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Netlist Line Skipped",
            details=self.reason,
            suggestion="Check the line against the netlist grammar: element name, node numbers, then values with optional units.",
            context={
                'source_file': self.source_file or "N/A (inline text)",
                'line_number': self.line_number,
                'user_input': self.line,
            }
        )


@dataclass()
class MissingDataFile(BaseParsingError):
    """A Touchstone data file that is absent, unreadable or malformed."""
    path: Union[str, Path]
    details: str

    def __str__(self):
        return f"Data file '{self.path}' could not be used: {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Missing Or Malformed Data File",
            details=self.details,
            suggestion="Ensure the file exists, ends in '.sNp', has a valid '#' option line and numeric data rows.",
            context={'source_file': self.path}
        )


@dataclass()
class ParsingError(BaseParsingError):
    """
    Custom exception for logical errors or file-system issues during parsing, such
    as a missing netlist file or YAML that cannot be loaded.
    """
    details: str
    file_path: Union[str, Path]

    def __str__(self):
        return f"Parsing error in file '{self.file_path}': {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Parsing or File Error",
            details=self.details,
            suggestion="Ensure the file exists, has the correct read permissions, and contains valid syntax.",
            context={'source_file': self.file_path}
        )


@dataclass()
class SchemaValidationError(BaseParsingError):
    """
    Raised when a YAML run configuration is syntactically valid but does not match
    the required structure (missing keys, wrong types, unknown fields).
    """
    errors: Dict[str, Any]
    file_path: Union[str, Path]

    def _error_lines(self, prefix: str) -> str:
        return "\n".join(f"  - {prefix} '{k}': {v}" for k, v in sorted(self.errors.items()))

    def __str__(self):
        return f"YAML schema validation failed for '{self.file_path}':\n" + self._error_lines("In field")

    def get_diagnostic_report(self) -> str:
        details = (
            "The structure of the configuration does not conform to the required schema.\n"
            f"See details for {len(self.errors)} issue(s) below:\n\n{self._error_lines('Field')}"
        )
        return format_diagnostic_report(
            error_type="YAML Schema Validation Error",
            details=details,
            suggestion="Correct the specified fields to match the documented format. A run needs exactly one of 'netlist' or 'netlist_text' and a 'sweep' section.",
            context={'source_file': self.file_path}
        )


@dataclass()
class ConfigParsingError(BaseParsingError, ValueError):
    """Raised when a sweep, solver or output section holds values that cannot be used."""
    details: str
    section: str = "sweep"

    def __str__(self):
        return f"Invalid '{self.section}' configuration: {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Run Configuration Error",
            details=self.details,
            suggestion=(
                "Frequencies are quantity strings such as '2.4 GHz' or plain numbers in Hz. "
                "Linear sweeps need start >= 0; log sweeps need start and stop > 0."
            ),
            context={'user_input': self.section}
        )
