# gdp_decomposer_src/file_utils.py

import json
import pandas as pd
from pathlib import Path
from typing import Dict
import logging

from .regression_utils import RegressionModel

logger = logging.getLogger(__name__)


def ensure_dir(path: Path) -> None:
    """Create ``path`` and any missing parents; an existing directory is fine."""
    path.mkdir(parents=True, exist_ok=True)


def resolve_path(path_str: str, base_dir: Path) -> Path:
    """Absolute paths pass through; relative ones are taken from ``base_dir``."""
    path = Path(path_str)
    return path if path.is_absolute() else (base_dir / path)


def write_table_csv(df: pd.DataFrame, csv_path: Path, key: str = "date") -> Path:
    """
    Write a keyed table to CSV with ISO dates in the key column.

    Parameters
    ----------
    df : pd.DataFrame
        Table with a timestamp key column
    csv_path : Path
        Destination file (parent directories created)
    key : str, default="date"
        Key column formatted as YYYY-MM-DD

    Returns
    -------
    Path
        The written path
    """
    ensure_dir(csv_path.parent)
    out = df.copy()
    if key in out.columns:
        out[key] = pd.to_datetime(out[key]).dt.strftime("%Y-%m-%d")
    out.to_csv(csv_path, index=False)
    logger.info("Wrote %d rows to %s", len(out), csv_path)
    return csv_path


def write_coefficients_csv(model: RegressionModel, csv_path: Path) -> Path:
    """Write the coefficient table of a fitted model, one row per term."""
    ensure_dir(csv_path.parent)
    table = model.coefficient_table()
    table.index.name = "term"
    table.to_csv(csv_path)
    logger.info("Wrote %d coefficients to %s", len(table), csv_path)
    return csv_path


def write_summary_json(summary: Dict, json_path: Path) -> Path:
    ensure_dir(json_path.parent)
    with json_path.open("w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2, default=str)
    return json_path
