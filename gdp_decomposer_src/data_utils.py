# gdp_decomposer_src/data_utils.py

import pandas as pd
import statsmodels.api as sm
from pathlib import Path
from typing import List, Optional
import logging

from helpers.temporal import monthly_to_quarterly_avg, quarter_end_index, to_quarter_end

from .series_utils import make_series

logger = logging.getLogger(__name__)


def load_macro_data(data_path: Optional[Path] = None) -> pd.DataFrame:
    """
    Load the US macro quarterly dataset (1959–2009) from CSV or statsmodels.

    Parameters
    ----------
    data_path : Optional[Path]
        If provided and exists, load from this CSV. If provided and does not exist,
        the statsmodels macrodata dataset is loaded and written to this CSV path (parents created).

    Returns
    -------
    pd.DataFrame
        DataFrame with columns such as ['year', 'quarter', 'realgdp', 'realcons', 'realinv',
        'realgovt', 'realdpi', 'cpi', 'unemp', ...].
    """
    if data_path and data_path.is_file():
        return pd.read_csv(data_path)
    df = sm.datasets.macrodata.load_pandas().data.copy()
    if data_path:
        data_path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(data_path, index=False)
    return df


def macro_series(df: pd.DataFrame, column: str) -> pd.Series:
    """
    Extract one column of the macro dataset as a quarter-end stamped Series.

    The dataset's 'year' and 'quarter' identifier columns become the index.
    """
    for required in ("year", "quarter", column):
        if required not in df.columns:
            raise SystemExit(f"Macro dataset has no '{required}' column.")
    index = quarter_end_index(df["year"], df["quarter"])
    return make_series(df[column].tolist(), index, column)


def load_series_csv(series_path: Path,
                    date_column: str = "date",
                    value_column: Optional[str] = None,
                    name: Optional[str] = None,
                    quarter_end: bool = True) -> pd.Series:
    """
    Load a clean time series from a CSV with a date column and one value column.

    Parameters
    ----------
    series_path : Path
        CSV file path.
    date_column : str, default="date"
        Name of the timestamp column.
    value_column : str, optional
        Value column; inferred when the CSV has exactly one other column.
    name : str, optional
        Series name; defaults to the value column name.
    quarter_end : bool, default=True
        Re-stamp dates at quarter end so sources stamped at different days
        within a quarter share one key.

    Returns
    -------
    pd.Series
        Float series with DatetimeIndex. Empty value cells stay as NaN.

    Raises
    ------
    SystemExit
        If the file doesn't exist, lacks required columns, or contains no valid rows.
    """
    if not series_path.exists():
        raise SystemExit(f"Series CSV not found: {series_path}")

    logger.info("Loading series from: %s", series_path)
    df = pd.read_csv(series_path)

    if date_column not in df.columns:
        raise SystemExit(f"Series CSV {series_path.name} must contain a '{date_column}' column.")
    if value_column is None:
        others = [c for c in df.columns if c != date_column]
        if len(others) != 1:
            raise SystemExit(f"Series CSV {series_path.name} must contain exactly one value column, found {others}.")
        value_column = others[0]
    elif value_column not in df.columns:
        raise SystemExit(f"Series CSV {series_path.name} has no '{value_column}' column.")

    df[date_column] = pd.to_datetime(df[date_column], errors="coerce")
    df[value_column] = pd.to_numeric(df[value_column], errors="coerce")
    df = df.dropna(subset=[date_column]).sort_values(date_column).reset_index(drop=True)

    if df.empty:
        raise SystemExit(f"No valid rows found in series CSV {series_path.name} after parsing.")

    series = make_series(df[value_column].tolist(), df[date_column].tolist(), name or str(value_column))
    return to_quarter_end(series) if quarter_end else series


def load_monthly_series_csv(series_path: Path,
                            date_column: str = "date",
                            value_column: Optional[str] = None,
                            name: Optional[str] = None) -> pd.Series:
    """
    Load a monthly indicator CSV and aggregate it to quarterly means at quarter end.
    """
    monthly = load_series_csv(series_path, date_column, value_column, name, quarter_end=False)
    quarterly = monthly_to_quarterly_avg(monthly, name=monthly.name)
    col = quarterly.columns[0]
    return make_series(quarterly[col].tolist(), quarterly.index, str(col))


def default_macro_inputs(primary: str = "realgdp",
                         drivers: Optional[List[str]] = None,
                         data_path: Optional[Path] = None):
    """
    Primary and driver series from the statsmodels macro dataset.

    Returns
    -------
    Tuple[pd.Series, List[pd.Series]]
    """
    drivers = drivers or ["realcons", "realinv", "realgovt", "unemp"]
    df = load_macro_data(data_path)
    logger.info("Loaded macro dataset with %d observations", len(df))
    return macro_series(df, primary), [macro_series(df, c) for c in drivers]
