# gdp_decomposer_src/__init__.py

"""
GDP Decomposer STL - Seasonal-Trend Decomposition and Driver Regression Package

This package splits a quarterly macroeconomic series into seasonal, trend and
remainder components, aligns the components with exogenous driver series on
a shared date key, and explains the target with ordinary least squares.

Key Components
--------------
- errors: Pipeline error hierarchy (schema, empty input, alignment, data size, rank, gaps)
- config_utils: Configuration management and CLI override support
- series_utils: Series construction and timestamp checks
- alignment_utils: Key-based merging of series and tables (inner, left, outer)
- decomposition_utils: STL decomposition with a periodic seasonal option
- adjustment_utils: Detrended / seasonally adjusted series and component tables
- regression_utils: OLS with explicit predictor resolution and rank checks
- workflow_utils: End-to-end decompose, align and regress workflow
- data_utils: CSV and statsmodels macrodata loading
- parsing_utils: Command-line argument parsing
- file_utils: CSV/JSON output and path utilities
- main: Main entry point

Usage
-----
The package can be used as a command-line tool or imported for programmatic use:

    # Command-line usage
    python -m gdp_decomposer_src.main --default-run --out-dir results

    # Programmatic usage
    from gdp_decomposer_src import decompose, merge, fit
"""

__version__ = "1.0.0"
__author__ = "GDP Decomposer Development Team"

# Import key functions for easy access
from .config_utils import initialize_config, get_config_value
from .errors import (
    DecompositionPipelineError, SchemaError, EmptyInputError, AlignmentError,
    InsufficientDataError, SingularDesignError, GapError
)
from .series_utils import make_series
from .alignment_utils import merge, earliest_starting
from .decomposition_utils import DecompositionResult, decompose
from .adjustment_utils import adjust, components_table
from .regression_utils import RegressionModel, fit
from .workflow_utils import WorkflowResult, run_decomposition_workflow
from .data_utils import load_macro_data, load_series_csv
from .main import main

__all__ = [
    # Core functionality
    "main",
    "initialize_config",
    "get_config_value",
    "make_series",
    "merge",
    "earliest_starting",
    "decompose",
    "DecompositionResult",
    "adjust",
    "components_table",
    "fit",
    "RegressionModel",
    "run_decomposition_workflow",
    "WorkflowResult",
    "load_macro_data",
    "load_series_csv",
    # Errors
    "DecompositionPipelineError",
    "SchemaError",
    "EmptyInputError",
    "AlignmentError",
    "InsufficientDataError",
    "SingularDesignError",
    "GapError",
    # Version info
    "__version__",
    "__author__"
]
