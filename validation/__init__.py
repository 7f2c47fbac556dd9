"""Input validation for the GDP decomposer.

This package reports on the quality of the primary and driver series before
they are decomposed and merged:
- Empty or all-missing inputs
- Duplicate or unordered timestamps
- Missing-value share and internal gaps
- Frequency consistency and span
"""

from .pipeline import (
    ValidationSeverity,
    ValidationIssue,
    ValidationResult,
    InputValidator,
    validate_inputs,
    create_validation_report
)

__all__ = [
    'ValidationSeverity',
    'ValidationIssue',
    'ValidationResult',
    'InputValidator',
    'validate_inputs',
    'create_validation_report'
]

# Version info
__version__ = '1.0.0'
