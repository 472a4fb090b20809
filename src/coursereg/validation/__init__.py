"""Validation - reference existence, conflict rules and field checks."""

from coursereg.validation.conflicts import ConflictGuard, conflict_from
from coursereg.validation.identification import is_valid_cedula, normalize_identification
from coursereg.validation.references import (
    REFERENCE_ORDER,
    ReferenceValidator,
    ResolvedReferences,
)

__all__ = [
    "REFERENCE_ORDER",
    "ConflictGuard",
    "ReferenceValidator",
    "ResolvedReferences",
    "conflict_from",
    "is_valid_cedula",
    "normalize_identification",
]
