"""
modules/validation package: boundary normalisation before any scheduling work.
"""
from tripslot.modules.validation.candidate_validator import (
    ValidationResult,
    coerce_coordinates,
    coerce_open_hours,
    normalize_candidate,
    normalize_candidates,
    normalize_fixed_block,
    normalize_fixed_blocks,
    normalize_preferences,
)

__all__ = [
    "ValidationResult",
    "coerce_coordinates",
    "coerce_open_hours",
    "normalize_candidate",
    "normalize_candidates",
    "normalize_fixed_block",
    "normalize_fixed_blocks",
    "normalize_preferences",
]
