"""Failure classification.

Re-exports all public symbols.
"""

from autofix.core.errors.codes import FailureCategory
from autofix.core.errors.models import ClassifiedFailure
from autofix.core.errors.classifier import (
    DEFAULT_SIGNATURES,
    FailureClassifier,
    Signature,
    extract_command,
    extract_library,
    extract_port,
)

__all__ = [
    "FailureCategory",
    "ClassifiedFailure",
    "DEFAULT_SIGNATURES",
    "FailureClassifier",
    "Signature",
    "extract_command",
    "extract_library",
    "extract_port",
]
