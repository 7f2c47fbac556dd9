# -*- coding: utf-8 -*-
"""
Temporal utilities for quarterly timestamp normalisation and aggregation.

Functions
---------
- quarter_end_index(year, quarter): Build a quarter-end DatetimeIndex from
  year/quarter columns (as in statsmodels macrodata).
- to_quarter_end(series): Re-stamp any date within a quarter at that quarter's
  end, so sources stamped at quarter start and quarter end merge on one key.
- monthly_to_quarterly_avg(series, name): Aggregate a monthly series to
  quarterly by within-quarter arithmetic mean, indexed at the quarter end.
"""

from __future__ import annotations

from typing import Optional, Sequence

import pandas as pd


def _ensure_datetime_index(s: pd.Series) -> pd.Series:
    """
    Ensure a DatetimeIndex for the input series.

    - If PeriodIndex, convert to Timestamp index. For monthly data, align at month end.
    - Leaves DatetimeIndex unchanged.
    """
    if isinstance(s.index, pd.PeriodIndex):
        is_monthly = (s.index.freqstr or "").upper().startswith("M")
        s = s.copy()
        s.index = s.index.to_timestamp(how="end") if is_monthly else s.index.to_timestamp()
    elif not isinstance(s.index, pd.DatetimeIndex):
        raise TypeError("Expected a Series with DatetimeIndex or PeriodIndex.")
    return s


def quarter_end_index(year: Sequence, quarter: Sequence) -> pd.DatetimeIndex:
    """
    Build quarter-end timestamps from parallel year and quarter sequences.

    Parameters
    ----------
    year : Sequence
        Calendar years (floats such as 1959.0 are accepted).
    quarter : Sequence
        Quarter numbers in 1..4.

    Returns
    -------
    pd.DatetimeIndex
        Timestamps normalised to midnight of the last day of each quarter.
    """
    years = pd.Series(year).astype(int).to_numpy()
    quarters = pd.Series(quarter).astype(int).to_numpy()
    if ((quarters < 1) | (quarters > 4)).any():
        raise ValueError("quarter values must lie in 1..4")
    periods = pd.PeriodIndex.from_fields(year=years, quarter=quarters, freq="Q")
    return periods.to_timestamp(how="end").normalize()


def to_quarter_end(series: pd.Series) -> pd.Series:
    """
    Re-stamp a series at quarter-end dates.

    Two observations falling in the same quarter would collide after
    re-stamping; that is rejected rather than silently averaged.
    """
    s = _ensure_datetime_index(series)
    new_index = s.index.to_period("Q").to_timestamp(how="end").normalize().rename(s.index.name)
    if new_index.has_duplicates:
        raise ValueError(
            f"Series '{series.name}' holds more than one observation per quarter; "
            "aggregate it with monthly_to_quarterly_avg first."
        )
    out = s.copy()
    out.index = new_index
    return out


def monthly_to_quarterly_avg(series: pd.Series, name: Optional[str] = None) -> pd.DataFrame:
    """
    Aggregate a monthly time series to quarterly by within-quarter mean.

    Parameters
    ----------
    series : pd.Series
        Monthly series with DatetimeIndex or PeriodIndex.
    name : Optional[str]
        Column name for the returned DataFrame. Defaults to series.name or 'value'.

    Returns
    -------
    pd.DataFrame
        Single-column DataFrame at quarterly frequency ('QE' quarter-end index)
        with values equal to the arithmetic mean of the constituent months.

    Notes
    -----
    - For quarter Q, only months within Q are used.
    - The output index is at quarter end (e.g., 2001-03-31 for 2001Q1).
    """
    if not isinstance(series, pd.Series):
        raise TypeError("series must be a pandas Series")

    s = _ensure_datetime_index(series.dropna())

    # Typical indicator series are one observation per month already
    monthly = s.resample("ME").mean()
    quarterly = monthly.resample("QE").mean()

    col_name = name if name is not None else (series.name if series.name is not None else "value")
    return quarterly.to_frame(col_name)
