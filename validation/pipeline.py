"""Input validation for the GDP decomposer.

This module inspects the primary and driver series before they enter the
decomposition/regression core and reports structured, severity-tagged issues.
It only reports: the core components raise their own typed errors when an
input actually violates their preconditions.

Features:
- Basic properties (empty, all-missing, minimum length, DatetimeIndex)
- Timestamp integrity (duplicates, ordering)
- Data quality (missing share)
- Temporal properties (internal gaps, frequency consistency, span)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

import pandas as pd

from gdp_decomposer_src.config_utils import get_config_value
from gdp_decomposer_src.series_utils import PERIOD_CODES, find_internal_gaps

logger = logging.getLogger(__name__)


class ValidationSeverity(Enum):
    """Validation issue severity levels."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass
class ValidationIssue:
    """Individual validation issue."""
    severity: ValidationSeverity
    message: str
    component: str
    dataset: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


@dataclass
class ValidationResult:
    """Complete validation result with all issues and metrics."""
    is_valid: bool
    issues: List[ValidationIssue]
    metrics: Dict[str, Any]

    @property
    def has_errors(self) -> bool:
        """Check if result has any errors or critical issues."""
        return any(issue.severity in [ValidationSeverity.ERROR, ValidationSeverity.CRITICAL]
                   for issue in self.issues)

    @property
    def has_warnings(self) -> bool:
        """Check if result has any warnings."""
        return any(issue.severity == ValidationSeverity.WARNING for issue in self.issues)

    def get_issues_by_severity(self, severity: ValidationSeverity) -> List[ValidationIssue]:
        """Get all issues of a specific severity."""
        return [issue for issue in self.issues if issue.severity == severity]

    def get_issues_for(self, dataset: str) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.dataset == dataset]

    def summary(self) -> str:
        """Get a summary string of the validation result."""
        total_issues = len(self.issues)
        errors = len(self.get_issues_by_severity(ValidationSeverity.ERROR))
        criticals = len(self.get_issues_by_severity(ValidationSeverity.CRITICAL))
        warnings = len(self.get_issues_by_severity(ValidationSeverity.WARNING))

        status = "PASS" if self.is_valid and not self.has_errors else "FAIL"
        return f"Validation {status}: {total_issues} issues ({criticals} critical, {errors} error, {warnings} warning)"


class InputValidator:
    """Validation orchestrator for the primary series and its drivers."""

    def __init__(self, frequency: int = 4):
        self.frequency = frequency
        self.min_observations = int(get_config_value('validation.min_observations', 16))
        self.max_missing_pct = float(get_config_value('validation.max_missing_percent', 5))
        self.min_span_years = float(get_config_value('validation.min_span_years', 4))
        self.issues: List[ValidationIssue] = []
        self.metrics: Dict[str, Any] = {}

    def _add(self, severity: ValidationSeverity, message: str, component: str,
             dataset: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.issues.append(ValidationIssue(severity, message, component, dataset, details))

    def validate_datasets(self, datasets: Dict[str, pd.Series]) -> ValidationResult:
        """Validate every named series.

        Parameters
        ----------
        datasets : dict
            Mapping of series name to pandas Series

        Returns
        -------
        ValidationResult
            Issues for all series plus per-series metrics
        """
        logger.info("Validating %d input series", len(datasets))
        self.issues = []
        self.metrics = {}

        for name, data in datasets.items():
            if not self._validate_basic_properties(name, data):
                continue
            if not self._validate_timestamps(name, data):
                continue
            self._validate_data_quality(name, data)
            self._validate_temporal_properties(name, data)

        result = ValidationResult(
            is_valid=not any(issue.severity in [ValidationSeverity.ERROR, ValidationSeverity.CRITICAL]
                             for issue in self.issues),
            issues=list(self.issues),
            metrics=dict(self.metrics),
        )
        logger.info("Validation completed: %s", result.summary())
        return result

    def _validate_basic_properties(self, name: str, data: Optional[pd.Series]) -> bool:
        if data is None or data.empty:
            self._add(ValidationSeverity.ERROR, f"Dataset '{name}' is empty", "basic_properties", name)
            return False

        if data.notna().sum() == 0:
            self._add(ValidationSeverity.ERROR, f"Dataset '{name}' has no valid observations",
                      "basic_properties", name)
            return False

        if not isinstance(data.index, pd.DatetimeIndex):
            self._add(ValidationSeverity.ERROR, f"Dataset '{name}' does not have DatetimeIndex",
                      "basic_properties", name)
            return False

        valid = int(data.notna().sum())
        if valid < self.min_observations:
            self._add(
                ValidationSeverity.WARNING,
                f"Dataset '{name}' has only {valid} observations (minimum recommended: {self.min_observations})",
                "basic_properties", name,
                {'observations': valid, 'minimum': self.min_observations},
            )
        self.metrics[f'{name}_observations'] = valid
        return True

    def _validate_timestamps(self, name: str, data: pd.Series) -> bool:
        if data.index.has_duplicates:
            self._add(ValidationSeverity.CRITICAL, f"Dataset '{name}' has duplicate timestamps",
                      "timestamps", name, {'duplicates': int(data.index.duplicated().sum())})
            return False
        if not data.index.is_monotonic_increasing:
            self._add(ValidationSeverity.ERROR, f"Dataset '{name}' timestamps are not increasing",
                      "timestamps", name)
            return False
        return True

    def _validate_data_quality(self, name: str, data: pd.Series) -> None:
        missing_pct = float(data.isna().mean() * 100)
        self.metrics[f'{name}_missing_pct'] = missing_pct
        if missing_pct > self.max_missing_pct:
            self._add(
                ValidationSeverity.WARNING,
                f"Dataset '{name}' has {missing_pct:.1f}% missing data (threshold: {self.max_missing_pct}%)",
                "data_quality", name,
                {'missing_percent': missing_pct, 'threshold': self.max_missing_pct},
            )

    def _validate_temporal_properties(self, name: str, data: pd.Series) -> None:
        gaps = find_internal_gaps(data, self.frequency)
        self.metrics[f'{name}_internal_gaps'] = len(gaps)
        if gaps:
            self._add(
                ValidationSeverity.WARNING,
                f"Dataset '{name}' has {len(gaps)} internal gap(s), first at {gaps[0].date()}",
                "temporal_properties", name,
                {'gaps': [g.date().isoformat() for g in gaps]},
            )

        code = PERIOD_CODES.get(self.frequency)
        inferred = pd.infer_freq(data.index) if len(data) >= 3 else None
        if inferred:
            self.metrics[f'{name}_frequency'] = inferred
            if code is not None and not inferred.upper().startswith(code):
                self._add(
                    ValidationSeverity.WARNING,
                    f"Dataset '{name}' looks like frequency '{inferred}', expected '{code}'",
                    "temporal_properties", name,
                )
        elif not gaps:
            self._add(ValidationSeverity.INFO, f"Dataset '{name}' has unclear frequency pattern",
                      "temporal_properties", name)

        valid = data.dropna()
        span_years = (valid.index.max() - valid.index.min()).days / 365.25
        self.metrics[f'{name}_span_years'] = span_years
        if span_years < self.min_span_years:
            self._add(
                ValidationSeverity.WARNING,
                f"Dataset '{name}' covers only {span_years:.1f} years - limited for seasonal decomposition",
                "temporal_properties", name,
                {'span_years': span_years},
            )


def validate_inputs(datasets: Dict[str, pd.Series], frequency: int = 4) -> ValidationResult:
    """Validate named input series and return a structured report."""
    return InputValidator(frequency=frequency).validate_datasets(datasets)


def create_validation_report(result: ValidationResult) -> str:
    """Render a validation result as plain text for logs or hand-off."""
    lines = [result.summary()]
    for severity in (ValidationSeverity.CRITICAL, ValidationSeverity.ERROR,
                     ValidationSeverity.WARNING, ValidationSeverity.INFO):
        for issue in result.get_issues_by_severity(severity):
            lines.append(f"[{severity.value.upper()}] {issue.component}: {issue.message}")
    return "\n".join(lines)
