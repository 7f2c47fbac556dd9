# gdp_decomposer_src/errors.py

"""
Error kinds raised by the decomposition-and-regression core.

Every error carries the identity of the offending entity (column names,
series names, expected/actual sizes) both as attributes and in its message,
so that the caller can report exactly what failed without re-deriving it.
None of these are retried: the computation is deterministic.
"""

from typing import Iterable, Optional, Sequence


class DecompositionPipelineError(Exception):
    """Base class for all failures of the decomposition/regression pipeline."""


class SchemaError(DecompositionPipelineError):
    """Ambiguous, missing or mistyped columns in a table or series."""

    def __init__(self, message: str, columns: Iterable[str] = (), sources: Iterable[str] = ()):
        super().__init__(message)
        self.columns = tuple(columns)
        self.sources = tuple(sources)


class EmptyInputError(DecompositionPipelineError):
    """A source handed to the pipeline has zero rows."""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class AlignmentError(DecompositionPipelineError):
    """A series and its decomposition do not share the same index set."""

    def __init__(self, message: str, expected: Optional[int] = None, actual: Optional[int] = None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class InsufficientDataError(DecompositionPipelineError):
    """Too few observations for the requested computation."""

    def __init__(self, message: str, required: Optional[int] = None, available: Optional[int] = None):
        super().__init__(message)
        self.required = required
        self.available = available


class SingularDesignError(DecompositionPipelineError):
    """The regression design matrix (intercept included) is rank-deficient."""

    def __init__(self, message: str, columns: Sequence[str] = (),
                 condition_number: Optional[float] = None):
        super().__init__(message)
        self.columns = tuple(columns)
        self.condition_number = condition_number


class GapError(DecompositionPipelineError):
    """The decomposition input has missing observations inside its observed span."""

    def __init__(self, message: str, series: Optional[str] = None, gaps: Iterable = ()):
        super().__init__(message)
        self.series = series
        self.gaps = tuple(gaps)
