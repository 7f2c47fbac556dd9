# gdp_decomposer_src/adjustment_utils.py

import logging
from typing import Dict, List

import pandas as pd

from .decomposition_utils import DecompositionResult
from .errors import AlignmentError

logger = logging.getLogger(__name__)

ADJUSTMENT_MODES = ("trend", "trend_and_seasonal")

# Column suffixes for components appended onto the primary series
SUFFIXES: Dict[str, str] = {
    "seasonal": "_seasonal",
    "trend": "_trend",
    "remainder": "_remainder",
    "detrended": "_detrended",
    "random": "_random",
}


def _check_aligned(series: pd.Series, decomposition: DecompositionResult) -> None:
    if len(series) != len(decomposition):
        raise AlignmentError(
            f"Series '{series.name}' has {len(series)} rows but decomposition of "
            f"'{decomposition.name}' has {len(decomposition)}",
            expected=len(decomposition),
            actual=len(series),
        )
    if not series.index.equals(decomposition.index):
        mismatched = series.index.symmetric_difference(decomposition.index)
        raise AlignmentError(
            f"Series '{series.name}' and decomposition of '{decomposition.name}' cover different "
            f"timestamps ({len(mismatched)} differ, e.g. {[str(t.date()) for t in mismatched[:3]]})",
            expected=len(decomposition),
            actual=len(series),
        )


def adjust(series: pd.Series, decomposition: DecompositionResult, mode: str) -> pd.Series:
    """
    Remove decomposition components from a series.

    Parameters
    ----------
    series : pd.Series
        Series aligned one-to-one with the decomposition (same timestamps).
    decomposition : DecompositionResult
        Output of ``decompose``.
    mode : {'trend', 'trend_and_seasonal'}
        - 'trend': ``series - trend`` (seasonal + remainder, reveals seasonality
          masked by the trend)
        - 'trend_and_seasonal': ``series - trend - seasonal`` (the random component)

    Returns
    -------
    pd.Series
        New series on the decomposition's timestamps, named
        ``<name>_detrended`` or ``<name>_random``.

    Raises
    ------
    AlignmentError
        If ``series`` and ``decomposition`` do not share the same index.
    ValueError
        For an unknown ``mode``.
    """
    if mode not in ADJUSTMENT_MODES:
        raise ValueError(f"Unknown adjustment mode '{mode}'. Must be one of: {ADJUSTMENT_MODES}")
    _check_aligned(series, decomposition)

    values = series.to_numpy(dtype=float) - decomposition.trend.to_numpy()
    if mode == "trend_and_seasonal":
        values = values - decomposition.seasonal.to_numpy()
        suffix = SUFFIXES["random"]
    else:
        suffix = SUFFIXES["detrended"]

    return pd.Series(values, index=decomposition.index.copy(), name=f"{series.name}{suffix}")


def component_columns(name: str) -> List[str]:
    """Names of the derived columns ``components_table`` adds for series ``name``."""
    return [f"{name}{SUFFIXES[k]}" for k in ("seasonal", "trend", "remainder", "detrended", "random")]


def components_table(series: pd.Series, decomposition: DecompositionResult, key: str = "date") -> pd.DataFrame:
    """
    Build a new aligned table of the series with its components and adjustments.

    Columns: ``key``, ``<name>``, ``<name>_seasonal``, ``<name>_trend``,
    ``<name>_remainder``, ``<name>_detrended``, ``<name>_random``. Neither
    input is modified.
    """
    _check_aligned(series, decomposition)
    name = str(series.name)

    detrended = adjust(series, decomposition, "trend")
    random = adjust(series, decomposition, "trend_and_seasonal")

    table = pd.DataFrame({
        key: decomposition.index,
        name: series.to_numpy(dtype=float),
        f"{name}{SUFFIXES['seasonal']}": decomposition.seasonal.to_numpy(),
        f"{name}{SUFFIXES['trend']}": decomposition.trend.to_numpy(),
        f"{name}{SUFFIXES['remainder']}": decomposition.remainder.to_numpy(),
        detrended.name: detrended.to_numpy(),
        random.name: random.to_numpy(),
    })
    logger.debug("Built components table for '%s' with columns %s", name, list(table.columns))
    return table
