# gdp_decomposer_src/workflow_utils.py

"""
End-to-end composition of the decomposition-and-regression pipeline.

    primary ──► decompose ──► components_table ─┐
                                                ├─► merge (primary table + earliest driver)
    drivers ────────────────────────────────────┘        │
                                                         ▼
                                     merge (+ remaining drivers, left) ──► fit

Each step is a pure function returning a new object; this module only wires
them together in order and collects the results.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Union

import pandas as pd

from .adjustment_utils import component_columns, components_table
from .alignment_utils import earliest_starting, merge
from .config_utils import get_config_value
from .decomposition_utils import DecompositionResult, decompose
from .errors import SchemaError
from .regression_utils import ALL_OTHER_NUMERIC, RegressionModel, fit
from .series_utils import series_summary, trim_missing, validate_series

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkflowResult:
    """Everything one pipeline run produces, owned by the caller."""

    decomposition: DecompositionResult
    components: pd.DataFrame
    aligned: pd.DataFrame
    model: RegressionModel
    diagnostics: Dict[str, Any]
    validation: Any


def align_with_drivers(components: pd.DataFrame,
                       drivers: Sequence[pd.Series],
                       key: Optional[str] = None,
                       first_how: Optional[str] = None) -> pd.DataFrame:
    """
    Merge the primary components table with all driver series in two passes.

    The first pass joins the primary table with the earliest-starting driver
    (policy ``alignment.first_merge_how``, 'outer' by default), which fixes the
    row set. The second pass layers in the remaining drivers with a left join
    against that table, so the row set never shrinks.
    """
    key = key or get_config_value("alignment.key", "date")
    first_how = first_how or get_config_value("alignment.first_merge_how", "outer")

    if not drivers:
        raise ValueError("At least one driver series is required")

    lead = earliest_starting(drivers)
    lead_driver = drivers[lead]
    logger.info("Earliest-starting driver '%s' (from %s) governs the date range",
                lead_driver.name, lead_driver.first_valid_index().date())

    if first_how == "left":
        # The driver is primary: it defines the range and the components table follows
        first = merge([lead_driver, components], key=key, how="left", primary=0)
        ordered = [key] + list(components.columns.drop(key)) + [str(lead_driver.name)]
        first = first[ordered]
    else:
        first = merge([components, lead_driver], key=key, how=first_how, primary=0)

    rest = [d for i, d in enumerate(drivers) if i != lead]
    if not rest:
        return first

    aligned = merge([first] + list(rest), key=key, how="left", primary=0)
    if len(aligned) != len(first):
        raise SchemaError(
            f"Layering drivers changed the row count from {len(first)} to {len(aligned)}",
            sources=tuple(str(d.name) for d in rest),
        )
    return aligned


def run_decomposition_workflow(primary: pd.Series,
                               drivers: Sequence[pd.Series],
                               frequency: Optional[int] = None,
                               target: Optional[str] = None,
                               predictors: Union[str, Sequence[str]] = ALL_OTHER_NUMERIC,
                               seasonal_window: Optional[Union[str, int]] = None,
                               robust: Optional[bool] = None,
                               run_diagnostics: bool = True) -> WorkflowResult:
    """
    Decompose the primary series and regress it against the driver series.

    Parameters
    ----------
    primary : pd.Series
        Quarterly series to decompose (named; DatetimeIndex).
    drivers : Sequence[pd.Series]
        Exogenous driver series at the same frequency, each uniquely named.
    frequency : int, optional
        Observations per seasonal cycle (default from config, 4).
    target : str, optional
        Column of the merged table to explain. Defaults to the primary's own
        name; any of its derived columns (e.g. ``<name>_random``) may be used.
    predictors : 'all_other_numeric' or Sequence[str]
        Predictor selection. With 'all_other_numeric' the primary's other
        derived columns are excluded, leaving the drivers.
    seasonal_window : 'periodic' or odd int, optional
        Passed to ``decompose``.
    robust : bool, optional
        Passed to ``decompose``.
    run_diagnostics : bool, default True
        Run residual diagnostics on the fitted model.

    Returns
    -------
    WorkflowResult
    """
    # Imported here: both packages import from gdp_decomposer_src themselves
    from diagnostics import run_model_diagnostics
    from validation import create_validation_report, validate_inputs

    frequency = int(frequency if frequency is not None else get_config_value("decomposition.frequency", 4))
    key = get_config_value("alignment.key", "date")
    name = str(primary.name)

    if not drivers:
        raise ValueError("At least one driver series is required")
    for series in [primary] + list(drivers):
        validate_series(series)
        logger.debug("Input series: %s", series_summary(series))

    validation = validate_inputs({str(s.name): s for s in [primary] + list(drivers)}, frequency)
    if validation.issues:
        for line in create_validation_report(validation).splitlines()[1:]:
            logger.warning("%s", line)

    decomposition = decompose(primary, frequency, seasonal_window=seasonal_window, robust=robust)
    components = components_table(trim_missing(primary), decomposition, key=key)

    aligned = align_with_drivers(components, list(drivers), key=key)
    logger.info("Aligned table: %d rows x %d columns", len(aligned), len(aligned.columns) - 1)

    target = target or name
    derived = [name] + component_columns(name)
    exclude = [c for c in derived if c != target]
    model = fit(aligned, target, predictors, exclude=exclude, key=key)

    diagnostics = {}
    if run_diagnostics:
        diagnostics = run_model_diagnostics(model, aligned)

    return WorkflowResult(
        decomposition=decomposition,
        components=components,
        aligned=aligned,
        model=model,
        diagnostics=diagnostics,
        validation=validation,
    )
