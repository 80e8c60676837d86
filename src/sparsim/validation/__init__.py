# src/sparsim/validation/__init__.py
import logging
logger = logging.getLogger(__name__)

from .issues import ValidationIssue, ValidationIssueLevel
from .issue_codes import SemanticIssueCode
from .model_validator import ModelValidator
from .exceptions import SemanticValidationError

__all__ = [
    "ValidationIssue",
    "ValidationIssueLevel",
    "SemanticIssueCode",
    "ModelValidator",
    "SemanticValidationError",
]
