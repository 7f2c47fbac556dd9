# gdp_decomposer_src/series_utils.py

import logging
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from .errors import EmptyInputError, SchemaError

logger = logging.getLogger(__name__)

# Frequencies for which missing calendar periods can be detected
PERIOD_CODES: Dict[int, str] = {4: "Q", 12: "M"}


def make_series(values: Sequence, index: Sequence, name: str) -> pd.Series:
    """
    Construct a validated time-indexed numeric series.

    This is the single entry point through which clean ``(timestamp, value)``
    pairs become a Series: timestamps are coerced to datetimes, values to floats
    (missing values become NaN), and the ordering invariants are enforced.

    Parameters
    ----------
    values : Sequence
        Numeric observations; None/NaN mark absent values.
    index : Sequence
        Timestamps, strictly increasing once parsed.
    name : str
        Series identity, used as column name downstream and in error messages.

    Returns
    -------
    pd.Series
        Float series with a DatetimeIndex named ``date``.

    Raises
    ------
    EmptyInputError
        If there are no observations.
    SchemaError
        If lengths differ, timestamps cannot be parsed, are duplicated or are
        not strictly increasing, or if a value is non-numeric.
    """
    if len(values) != len(index):
        raise SchemaError(
            f"Series '{name}' has {len(values)} values but {len(index)} timestamps",
            sources=(name,),
        )
    if len(values) == 0:
        raise EmptyInputError(f"Series '{name}' has zero rows", source=name)

    try:
        idx = pd.DatetimeIndex(pd.to_datetime(index))
    except (TypeError, ValueError) as e:
        raise SchemaError(f"Series '{name}' has unparseable timestamps: {e}", sources=(name,)) from e

    try:
        data = pd.to_numeric(pd.Series(list(values), dtype="object"), errors="raise").astype(float)
    except (TypeError, ValueError) as e:
        raise SchemaError(f"Series '{name}' has non-numeric values: {e}", sources=(name,)) from e

    series = pd.Series(data.to_numpy(), index=idx.rename("date"), name=name)
    validate_series(series)
    return series


def validate_series(series: pd.Series) -> None:
    """Check the Series invariants: DatetimeIndex, no duplicates, strictly increasing."""
    name = series.name
    if not isinstance(series.index, pd.DatetimeIndex):
        raise SchemaError(f"Series '{name}' must have a DatetimeIndex", sources=(str(name),))
    if series.index.hasnans:
        raise SchemaError(f"Series '{name}' has missing timestamps", sources=(str(name),))
    if series.index.has_duplicates:
        dupes = series.index[series.index.duplicated()].unique()
        raise SchemaError(
            f"Series '{name}' has duplicate timestamps: {[d.date().isoformat() for d in dupes]}",
            sources=(str(name),),
        )
    if not series.index.is_monotonic_increasing:
        raise SchemaError(f"Series '{name}' timestamps are not increasing", sources=(str(name),))


def series_from_frame(df: pd.DataFrame,
                      date_column: str = "date",
                      value_column: Optional[str] = None,
                      name: Optional[str] = None) -> pd.Series:
    """
    Build a Series from a clean two-column table.

    When ``value_column`` is omitted the frame must hold exactly one column
    besides ``date_column``.
    """
    if date_column not in df.columns:
        raise SchemaError(f"Table is missing the key column '{date_column}'", columns=(date_column,))

    if value_column is None:
        others = [c for c in df.columns if c != date_column]
        if len(others) != 1:
            raise SchemaError(
                f"Cannot infer the value column; candidates are {others}",
                columns=tuple(others),
            )
        value_column = others[0]
    elif value_column not in df.columns:
        raise SchemaError(f"Table is missing the value column '{value_column}'", columns=(value_column,))

    return make_series(df[value_column].tolist(), df[date_column].tolist(), name or str(value_column))


def trim_missing(series: pd.Series) -> pd.Series:
    """Drop leading and trailing missing values, keeping interior ones."""
    first = series.first_valid_index()
    if first is None:
        return series.iloc[0:0].copy()
    last = series.last_valid_index()
    return series.loc[first:last].copy()


def first_valid_timestamp(series: pd.Series) -> Optional[pd.Timestamp]:
    return series.first_valid_index()


def find_internal_gaps(series: pd.Series, frequency: Optional[int] = None) -> List[pd.Timestamp]:
    """
    List the gaps inside the observed span of a series.

    A gap is either a NaN between the first and last valid observation, or, when
    ``frequency`` maps to a calendar period (4 = quarterly, 12 = monthly), a
    period with no row at all.

    Returns
    -------
    List[pd.Timestamp]
        Timestamps (or period-end timestamps for absent rows), sorted.
    """
    trimmed = trim_missing(series)
    if trimmed.empty:
        return []

    gaps = set(trimmed.index[trimmed.isna()])

    code = PERIOD_CODES.get(frequency) if frequency is not None else None
    if code is not None and isinstance(trimmed.index, pd.DatetimeIndex):
        periods = trimmed.index.to_period(code)
        expected = pd.period_range(periods.min(), periods.max(), freq=code)
        absent = expected.difference(periods)
        gaps.update(p.to_timestamp(how="end").normalize() for p in absent)

    return sorted(gaps)


def series_summary(series: pd.Series) -> Dict[str, object]:
    """Short description of a series for log messages."""
    valid = series.dropna()
    return {
        "name": series.name,
        "rows": int(len(series)),
        "missing": int(series.isna().sum()),
        "start": valid.index.min().date().isoformat() if not valid.empty else None,
        "end": valid.index.max().date().isoformat() if not valid.empty else None,
        "mean": float(np.mean(valid.to_numpy())) if not valid.empty else float("nan"),
    }
