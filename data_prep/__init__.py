"""
Data preparation — loading saved input snapshots, validation.
"""

from .loader import inputs_from_dict, load_inputs, load_snapshot
from .validators import ValidationResult, validate_inputs

__all__ = [
    "inputs_from_dict",
    "load_inputs",
    "load_snapshot",
    "ValidationResult",
    "validate_inputs",
]
